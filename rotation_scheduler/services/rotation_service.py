# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Rotation mutations — swap and cancel.
A calendar failure aborts either operation before the assignment changes.
If a swap deletes the old event and then fails to create the new one, the
rotation keeps its assignee but loses its event id.
Neither touches the group's cursor.
"""

from typing import Optional

from rotation_scheduler.core.clock import Clock, utc_now
from rotation_scheduler.core.errors import NotFound, RotationError, Unauthenticated
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.metrics.prometheus import CANCELLATIONS_TOTAL, SWAPS_TOTAL
from rotation_scheduler.models.domain import Rotation, User
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_sync import CalendarSynchronizer
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.periods import period_start

logger = get_logger(__name__)


class RotationService:
    """Business logic for changing existing rotations."""

    def __init__(
        self,
        state_repo: StateRepository,
        history_repo: HistoryRepository,
        synchronizer: CalendarSynchronizer,
        group_locks: KeyedLocks,
        clock: Clock = utc_now,
    ) -> None:
        self._state = state_repo
        self._history = history_repo
        self._sync = synchronizer
        self._locks = group_locks
        self._clock = clock

    # ── Commands ──

    async def swap(
        self,
        group_id: str,
        period: str,
        from_user_id: str,
        to_user_id: str,
    ) -> Rotation:
        """Hand one period's rotation from one user to another."""
        async with self._locks.for_key(group_id):
            start = period_start(period)
            rotation = self._state.find_rotation(group_id, start, from_user_id)
            if rotation is None:
                raise NotFound(
                    f"No rotation for user '{from_user_id}' in group '{group_id}' on {start}"
                )
            group = self._state.get_group(group_id)
            if group is None:
                raise NotFound(f"Group '{group_id}' not found")
            to_user = self._state.get_user(to_user_id)
            if to_user is None:
                raise NotFound(f"User '{to_user_id}' not found")
            if to_user.calendar_credentials is None:
                raise Unauthenticated(f"User '{to_user_id}' has not connected a calendar")

            old_event_id = rotation.calendar_event_id
            if old_event_id:
                await self._sync.delete_event(self._calendar_owner(from_user_id), old_event_id)
            try:
                new_event_id = await self._sync.create_event(to_user, group, start)
            except RotationError:
                if old_event_id:
                    # The old event is gone; keep the record pointing at nothing.
                    rotation.calendar_event_id = None
                    self._state.add_rotation(rotation)
                    self._state.save()
                    logger.warning(
                        "Swap create failed after delete: rotation=%s, old_event=%s",
                        rotation.id, old_event_id,
                        extra={"group_id": group_id, "rotation_id": rotation.id},
                    )
                raise

            rotation.assigned_user_id = to_user_id
            rotation.calendar_event_id = new_event_id
            rotation.swapped_at = self._clock().isoformat()
            self._state.add_rotation(rotation)
            self._state.save()

            SWAPS_TOTAL.inc()
            self._history.record_event(
                "rotation_swapped", group_id,
                {
                    "rotation_id": rotation.id,
                    "period_start": start,
                    "from_user_id": from_user_id,
                    "to_user_id": to_user_id,
                    "old_event_id": old_event_id,
                    "new_event_id": new_event_id,
                },
            )
            logger.info(
                "Rotation swapped: group=%s, period=%s, from=%s, to=%s",
                group_id, start, from_user_id, to_user_id,
                extra={"group_id": group_id, "rotation_id": rotation.id},
            )
            return rotation

    async def cancel_rotation(self, rotation_id: str) -> Rotation:
        """Delete a rotation and its event. The slot is not re-offered."""
        rotation = self.get_rotation(rotation_id)
        async with self._locks.for_key(rotation.group_id):
            # Re-read under the lock: a concurrent cancel may have won.
            rotation = self.get_rotation(rotation_id)
            if rotation.calendar_event_id:
                await self._sync.delete_event(
                    self._calendar_owner(rotation.assigned_user_id),
                    rotation.calendar_event_id,
                )
            self._state.delete_rotation(rotation_id)
            self._state.save()

            CANCELLATIONS_TOTAL.inc()
            self._history.record_event(
                "rotation_cancelled", rotation.group_id,
                {
                    "rotation_id": rotation_id,
                    "period_start": rotation.period_start,
                    "user_id": rotation.assigned_user_id,
                },
            )
            logger.info(
                "Rotation cancelled: rotation=%s, group=%s, period=%s",
                rotation_id, rotation.group_id, rotation.period_start,
                extra={"group_id": rotation.group_id, "rotation_id": rotation_id},
            )
            return rotation

    # ── Queries ──

    def get_rotation(self, rotation_id: str) -> Rotation:
        rotation = self._state.get_rotation(rotation_id)
        if rotation is None:
            raise NotFound(f"Rotation '{rotation_id}' not found")
        return rotation

    def list_rotations(
        self,
        group_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Rotation]:
        return self._state.list_rotations(group_id=group_id, user_id=user_id, status=status)

    # ── Internal ──

    def _calendar_owner(self, user_id: str) -> User:
        user = self._state.get_user(user_id)
        if user is None:
            raise Unauthenticated(f"User '{user_id}' not found, cannot reach their calendar")
        return user
