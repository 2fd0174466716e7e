# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Calendar synchronizer.
Creates and deletes the one calendar event that backs each rotation, on
behalf of the assigned user. Expired credentials are refreshed first and
written back to the store under the user's lock.
"""

from datetime import datetime, time, timedelta
from typing import Any

from rotation_scheduler.core.clock import Clock, utc_now
from rotation_scheduler.core.config import settings
from rotation_scheduler.core.errors import RotationError, Unauthenticated
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.metrics.prometheus import CALENDAR_CALLS, CREDENTIAL_REFRESHES
from rotation_scheduler.models.domain import Group, User
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_client import CalendarClient
from rotation_scheduler.services.identity_client import IdentityClient
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.periods import visit_date

logger = get_logger(__name__)


def build_event(group: Group, period_start: str) -> dict[str, Any]:
    """Event body for one period: the schedule slot, fixed reminders."""
    hour, minute = (int(part) for part in group.schedule.time_of_day.split(":"))
    start = datetime.combine(
        visit_date(period_start, group.schedule.day_of_week), time(hour, minute)
    )
    end = start + timedelta(minutes=settings.EVENT_DURATION_MINUTES)
    return {
        "summary": f"{group.name} - Your Turn This Week",
        "description": (
            f"{group.description}\n\n"
            "You are scheduled for this week's rotation.\n\n"
            f"Week starting: {period_start}"
        ),
        "start": {"dateTime": start.isoformat(), "timeZone": settings.CALENDAR_TIMEZONE},
        "end": {"dateTime": end.isoformat(), "timeZone": settings.CALENDAR_TIMEZONE},
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": settings.REMINDER_EMAIL_MINUTES},
                {"method": "popup", "minutes": settings.REMINDER_POPUP_MINUTES},
            ],
        },
    }


class CalendarSynchronizer:
    """Keeps one external event per rotation."""

    def __init__(
        self,
        state_repo: StateRepository,
        calendar_client: CalendarClient,
        identity_client: IdentityClient,
        clock: Clock = utc_now,
    ) -> None:
        self._state = state_repo
        self._calendar = calendar_client
        self._identity = identity_client
        self._clock = clock
        self._user_locks = KeyedLocks()

    async def create_event(self, user: User, group: Group, period_start: str) -> str:
        """Create the event for ``user``. Raises Unauthenticated / ExternalSyncFailure."""
        access_token = await self._access_token(user)
        try:
            event_id = await self._calendar.insert_event(
                access_token, build_event(group, period_start)
            )
        except RotationError:
            CALENDAR_CALLS.labels(operation="create", outcome="failure").inc()
            raise
        CALENDAR_CALLS.labels(operation="create", outcome="success").inc()
        logger.info(
            "Calendar event created: group=%s, user=%s, period=%s, event=%s",
            group.id, user.id, period_start, event_id,
        )
        return event_id

    async def delete_event(self, user: User, event_id: str) -> None:
        """Delete an event. Raises Unauthenticated / ExternalSyncFailure."""
        access_token = await self._access_token(user)
        try:
            await self._calendar.delete_event(access_token, event_id)
        except RotationError:
            CALENDAR_CALLS.labels(operation="delete", outcome="failure").inc()
            raise
        CALENDAR_CALLS.labels(operation="delete", outcome="success").inc()
        logger.info("Calendar event deleted: user=%s, event=%s", user.id, event_id)

    async def _access_token(self, user: User) -> str:
        if user.calendar_credentials is None:
            raise Unauthenticated(f"User '{user.id}' has not connected a calendar")

        async with self._user_locks.for_key(user.id):
            credentials = user.calendar_credentials
            if self._identity.is_expired(credentials, self._clock()):
                try:
                    credentials = await self._identity.refresh(credentials)
                except Unauthenticated:
                    CREDENTIAL_REFRESHES.labels(outcome="failure").inc()
                    raise
                CREDENTIAL_REFRESHES.labels(outcome="success").inc()
                user.calendar_credentials = credentials
                self._state.save_user(user)
                self._state.save()
                logger.info("Credentials refreshed for user=%s", user.id)
            return credentials.access_token
