# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Scheduling workflow.
Assigns one member per period for a run of consecutive periods and creates
the matching calendar events.

A batch is applied step by step and never rolled back. When a step fails,
the steps already applied stay in place and are reported on the raised
error under ``applied_rotations``.
"""

import uuid
from typing import Optional

from rotation_scheduler.core.clock import Clock, utc_now
from rotation_scheduler.core.config import settings
from rotation_scheduler.core.errors import AllSkipped, EmptyGroup, NotFound, RotationError
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.metrics.prometheus import ASSIGNMENTS_TOTAL, SELECTION_FAILURES
from rotation_scheduler.models.domain import Rotation, RotationStatus
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_sync import CalendarSynchronizer
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.periods import add_periods, period_start
from rotation_scheduler.services.rotation import select_next

logger = get_logger(__name__)


class SchedulingService:
    """Business logic for producing rotations."""

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

    async def schedule_rotations(
        self,
        group_id: str,
        period_count: int = 1,
        start_period: Optional[str] = None,
    ) -> list[Rotation]:
        """
        Schedule ``period_count`` consecutive periods from ``start_period``
        (default: the current period). Raises ValueError on bad input,
        NotFound before anything is touched, and any selector or calendar
        error as soon as it happens.
        """
        if period_count < 1 or period_count > settings.MAX_SCHEDULE_PERIODS:
            raise ValueError(
                f"period_count must be between 1 and {settings.MAX_SCHEDULE_PERIODS}"
            )

        async with self._locks.for_key(group_id):
            group = self._state.get_group(group_id)
            if group is None:
                raise NotFound(f"Group '{group_id}' not found")

            start = period_start(start_period or self._clock())
            applied: list[Rotation] = []
            try:
                for i in range(period_count):
                    target = add_periods(start, i)
                    try:
                        user_id, new_cursor = select_next(
                            group,
                            self._state.list_skip_weeks(group_id=group_id, period_start=target),
                            target,
                        )
                    except (EmptyGroup, AllSkipped) as exc:
                        SELECTION_FAILURES.labels(kind=exc.kind).inc()
                        raise
                    user = self._state.get_user(user_id)
                    if user is None:
                        raise NotFound(f"User '{user_id}' not found")

                    group.cursor = new_cursor
                    event_id = await self._sync.create_event(user, group, target)

                    rotation = Rotation(
                        id=str(uuid.uuid4()),
                        group_id=group_id,
                        assigned_user_id=user_id,
                        period_start=target,
                        calendar_event_id=event_id,
                        status=RotationStatus.SCHEDULED,
                        created_at=self._clock().isoformat(),
                    )
                    self._state.add_rotation(rotation)
                    applied.append(rotation)
                    ASSIGNMENTS_TOTAL.labels(group=group_id).inc()
            except RotationError as exc:
                if applied:
                    exc.details["applied_rotations"] = [
                        r.model_dump(mode="json") for r in applied
                    ]
                exc.details["cursor"] = group.cursor
                logger.warning(
                    "Scheduling stopped: group=%s, applied=%d/%d, error=%s",
                    group_id, len(applied), period_count, exc.kind,
                    extra={"group_id": group_id},
                )
                raise
            finally:
                self._state.save_group(group)
                self._state.save()
                if applied:
                    self._history.record_event(
                        "rotations_scheduled", group_id,
                        {
                            "periods": [r.period_start for r in applied],
                            "assignees": [r.assigned_user_id for r in applied],
                            "requested": period_count,
                            "cursor": group.cursor,
                        },
                    )

            logger.info(
                "Rotations scheduled: group=%s, count=%d, start=%s, cursor=%d",
                group_id, len(applied), start, group.cursor,
                extra={"group_id": group_id},
            )
            return applied
