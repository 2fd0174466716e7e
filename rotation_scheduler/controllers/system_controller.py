# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics, state, history.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rotation_scheduler.core.config import settings
from rotation_scheduler.core.dependencies import get_history_repo, get_state_repo
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.schemas.rotation import GroupResponse, StateResponse, UserResponse

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    state_repo = get_state_repo()
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "groups_count": state_repo.count_groups(),
        "rotations_count": state_repo.count_rotations(),
        "history_events": get_history_repo().count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe — not ready while the last snapshot save failed."""
    state_repo = get_state_repo()
    return {
        "status": "degraded" if state_repo.dirty else "ready",
        "service": settings.SERVICE_NAME,
        "persistence": "file" if settings.DATA_FILE else "memory",
        "unsaved_changes": state_repo.dirty,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/api/v1/state", response_model=StateResponse, tags=["State"])
def get_state(
    state_repo: StateRepository = Depends(get_state_repo),
):
    """Full snapshot of users, groups, skip weeks and rotations."""
    snapshot = state_repo.snapshot()
    return StateResponse(
        users=[UserResponse.from_user(u) for u in snapshot.users],
        groups=[GroupResponse.from_group(g) for g in snapshot.groups],
        skip_weeks=snapshot.skip_weeks,
        rotations=snapshot.rotations,
    )


@router.get("/api/v1/history", tags=["State"])
def get_history(
    group_id: Optional[str] = None,
    event_type: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = Query(default=None, ge=1, description="Max results"),
    history_repo: HistoryRepository = Depends(get_history_repo),
):
    """Audit log for all rotation events."""
    return history_repo.get_all(
        group_id=group_id, event_type=event_type, user_id=user_id, limit=limit
    )
