# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Group management — groups, membership and skip weeks.
Member removal also tears down the member's future rotations.
"""

import uuid
from typing import Any, Optional

from rotation_scheduler.core.clock import Clock, utc_now
from rotation_scheduler.core.errors import (
    DuplicateMember,
    DuplicateSkip,
    NotFound,
    RotationError,
    Unauthenticated,
)
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.metrics.prometheus import (
    ACTIVE_GROUPS,
    MEMBERS_REMOVED,
    SKIP_WEEKS_TOTAL,
)
from rotation_scheduler.models.domain import Group, GroupMember, GroupSchedule, SkipWeek
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_sync import CalendarSynchronizer
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.periods import period_start

logger = get_logger(__name__)


class GroupService:
    """Business logic for rotation groups."""

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

    def create_group(
        self,
        name: str,
        description: str = "",
        day_of_week: int = 1,
        time_of_day: str = "09:00",
    ) -> Group:
        group = Group(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            schedule=GroupSchedule(day_of_week=day_of_week, time_of_day=time_of_day),
        )
        self._state.save_group(group)
        self._state.save()

        ACTIVE_GROUPS.set(self._state.count_groups())
        self._history.record_event("group_created", group.id, {"name": name})
        logger.info("Group created: group=%s, name=%s", group.id, name)
        return group

    async def add_member(self, group_id: str, user_id: str) -> Group:
        """Append a user at the end of the order. Raises NotFound / DuplicateMember."""
        async with self._locks.for_key(group_id):
            group = self.get_group(group_id)
            if self._state.get_user(user_id) is None:
                raise NotFound(f"User '{user_id}' not found")
            if group.has_member(user_id):
                raise DuplicateMember(f"User '{user_id}' is already in group '{group_id}'")

            next_position = max((m.order_position for m in group.members), default=-1) + 1
            group.members.append(GroupMember(user_id=user_id, order_position=next_position))
            self._state.save_group(group)
            self._state.save()

            self._history.record_event(
                "member_added", group_id,
                {"user_id": user_id, "order_position": next_position},
            )
            logger.info("Member added: group=%s, user=%s", group_id, user_id)
            return group

    async def remove_member(self, group_id: str, user_id: str) -> dict[str, Any]:
        """
        Drop a member and every rotation of theirs dated today or later.
        Calendar delete failures are logged and counted, never raised.
        The group's cursor is left as is.
        """
        async with self._locks.for_key(group_id):
            group = self.get_group(group_id)
            group.members = [m for m in group.members if m.user_id != user_id]

            today = self._clock().date().isoformat()
            future = [
                r for r in self._state.list_rotations(group_id=group_id, user_id=user_id)
                if r.period_start >= today
            ]
            user = self._state.get_user(user_id)

            failed_deletes = 0
            for rotation in future:
                if not rotation.calendar_event_id:
                    continue
                try:
                    if user is None:
                        raise Unauthenticated(f"User '{user_id}' not found")
                    await self._sync.delete_event(user, rotation.calendar_event_id)
                except RotationError as exc:
                    failed_deletes += 1
                    logger.warning(
                        "Failed to delete calendar event: rotation=%s, event=%s, error=%s",
                        rotation.id, rotation.calendar_event_id, exc.message,
                        extra={"group_id": group_id, "rotation_id": rotation.id},
                    )

            for rotation in future:
                self._state.delete_rotation(rotation.id)
            self._state.save_group(group)
            self._state.save()

            MEMBERS_REMOVED.inc()
            self._history.record_event(
                "member_removed", group_id,
                {
                    "user_id": user_id,
                    "removed_rotations": len(future),
                    "failed_calendar_deletes": failed_deletes,
                },
            )
            logger.info(
                "Member removed: group=%s, user=%s, future_rotations=%d, failed_deletes=%d",
                group_id, user_id, len(future), failed_deletes,
                extra={"group_id": group_id, "user_id": user_id},
            )
            return {
                "group_id": group_id,
                "user_id": user_id,
                "removed_rotation_count": len(future),
                "failed_calendar_deletes": failed_deletes,
            }

    async def record_skip_week(
        self,
        user_id: str,
        group_id: str,
        period: str,
        reason: str = "",
    ) -> SkipWeek:
        """Mark a user unavailable for one period. Raises NotFound / DuplicateSkip."""
        async with self._locks.for_key(group_id):
            self.get_group(group_id)
            if self._state.get_user(user_id) is None:
                raise NotFound(f"User '{user_id}' not found")
            start = period_start(period)
            if self._state.has_skip(user_id, group_id, start):
                raise DuplicateSkip(
                    f"Skip week already recorded for user '{user_id}' "
                    f"in group '{group_id}' for {start}"
                )

            skip = SkipWeek(
                id=str(uuid.uuid4()),
                user_id=user_id,
                group_id=group_id,
                period_start=start,
                reason=reason,
                created_at=self._clock().isoformat(),
            )
            self._state.add_skip_week(skip)
            self._state.save()

            SKIP_WEEKS_TOTAL.inc()
            self._history.record_event(
                "skip_week_recorded", group_id,
                {"user_id": user_id, "period_start": start, "reason": reason},
            )
            logger.info(
                "Skip week recorded: group=%s, user=%s, period=%s", group_id, user_id, start
            )
            return skip

    # ── Queries ──

    def get_group(self, group_id: str) -> Group:
        group = self._state.get_group(group_id)
        if group is None:
            raise NotFound(f"Group '{group_id}' not found")
        return group

    def list_groups(self) -> list[Group]:
        return self._state.list_groups()

    def list_skip_weeks(self, group_id: Optional[str] = None) -> list[SkipWeek]:
        return self._state.list_skip_weeks(group_id=group_id)
