# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy — every failure a rotation operation can report.
Each error carries a stable ``kind`` and the HTTP status it maps to.
"""

from typing import Any, Optional


class RotationError(Exception):
    """Base class for structured, caller-visible errors."""

    kind: str = "rotation_error"
    status_code: int = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": self.message, **self.details}


# ── Validation-level (raised before any mutation) ──

class NotFound(RotationError):
    kind = "not_found"
    status_code = 404


class EmptyGroup(RotationError):
    kind = "empty_group"
    status_code = 409


class AllSkipped(RotationError):
    kind = "all_skipped"
    status_code = 409


class DuplicateSkip(RotationError):
    kind = "duplicate_skip"
    status_code = 409


class DuplicateMember(RotationError):
    kind = "duplicate_member"
    status_code = 409


# ── Mid-operation (external collaborators) ──

class Unauthenticated(RotationError):
    kind = "unauthenticated"
    status_code = 401


class ExternalSyncFailure(RotationError):
    kind = "external_sync_failure"
    status_code = 502
