# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from rotation_scheduler.core.config import settings
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_client import CalendarClient
from rotation_scheduler.services.calendar_sync import CalendarSynchronizer
from rotation_scheduler.services.group_service import GroupService
from rotation_scheduler.services.identity_client import IdentityClient
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.rotation_service import RotationService
from rotation_scheduler.services.scheduling_service import SchedulingService
from rotation_scheduler.services.user_service import UserService

# ── Singleton repository instances ──
_state_repo = StateRepository(data_file=settings.DATA_FILE)
_history_repo = HistoryRepository()
_group_locks = KeyedLocks()

# ── External collaborators ──
_synchronizer = CalendarSynchronizer(
    state_repo=_state_repo,
    calendar_client=CalendarClient(),
    identity_client=IdentityClient(),
)

# ── Service instances (with injected dependencies) ──
_user_service = UserService(state_repo=_state_repo)
_group_service = GroupService(
    state_repo=_state_repo,
    history_repo=_history_repo,
    synchronizer=_synchronizer,
    group_locks=_group_locks,
)
_scheduling_service = SchedulingService(
    state_repo=_state_repo,
    history_repo=_history_repo,
    synchronizer=_synchronizer,
    group_locks=_group_locks,
)
_rotation_service = RotationService(
    state_repo=_state_repo,
    history_repo=_history_repo,
    synchronizer=_synchronizer,
    group_locks=_group_locks,
)


# ── FastAPI dependency functions ──
def get_user_service() -> UserService:
    return _user_service


def get_group_service() -> GroupService:
    return _group_service


def get_scheduling_service() -> SchedulingService:
    return _scheduling_service


def get_rotation_service() -> RotationService:
    return _rotation_service


def get_synchronizer() -> CalendarSynchronizer:
    return _synchronizer


def get_state_repo() -> StateRepository:
    return _state_repo


def get_history_repo() -> HistoryRepository:
    return _history_repo
