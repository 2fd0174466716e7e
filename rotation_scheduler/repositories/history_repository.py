# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Audit history.
Append-only record of scheduling, swap, cancel, membership and skip-week
events. Only the newest MAX_HISTORY_SIZE events are kept; the log is not
part of the persisted snapshot.
"""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

from rotation_scheduler.core.config import settings

# Detail keys that name a user, for filtering by user.
_USER_KEYS = ("user_id", "from_user_id", "to_user_id")


def _mentions_user(event: dict[str, Any], user_id: str) -> bool:
    details = event["details"]
    if any(details.get(key) == user_id for key in _USER_KEYS):
        return True
    return user_id in details.get("assignees", ())


class HistoryRepository:
    def __init__(self, max_size: Optional[int] = None) -> None:
        self._events: deque[dict[str, Any]] = deque(
            maxlen=max_size or settings.MAX_HISTORY_SIZE
        )

    # ── Read ──

    def get_all(
        self,
        group_id: Optional[str] = None,
        event_type: Optional[str] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Matching events, oldest first, capped to the newest ``limit``."""
        result = [
            e for e in self._events
            if (not group_id or e["group_id"] == group_id)
            and (not event_type or e["event_type"] == event_type)
            and (not user_id or _mentions_user(e, user_id))
        ]
        return result[-(limit or settings.DEFAULT_HISTORY_LIMIT):]

    def count(self) -> int:
        return len(self._events)

    # ── Write ──

    def record_event(
        self, event_type: str, group_id: str, details: dict[str, Any]
    ) -> dict[str, Any]:
        event: dict[str, Any] = {
            "event_id": str(uuid.uuid4()),
            "event_type": event_type,
            "group_id": group_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details,
        }
        self._events.append(event)
        return event

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._events.clear()
