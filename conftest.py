# type: ignore
"""
Shared fixtures — in-memory fakes for the calendar and identity
collaborators plus a fully wired service set on a fixed clock.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from rotation_scheduler.core.errors import ExternalSyncFailure, Unauthenticated
from rotation_scheduler.models.domain import (
    CalendarCredentials,
    Group,
    GroupMember,
    GroupSchedule,
    User,
)
from rotation_scheduler.repositories.history_repository import HistoryRepository
from rotation_scheduler.repositories.state_repository import StateRepository
from rotation_scheduler.services.calendar_sync import CalendarSynchronizer
from rotation_scheduler.services.group_service import GroupService
from rotation_scheduler.services.locks import KeyedLocks
from rotation_scheduler.services.rotation_service import RotationService
from rotation_scheduler.services.scheduling_service import SchedulingService
from rotation_scheduler.services.user_service import UserService

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


class FakeCalendarClient:
    """Records events in a dict; failures are switched on per test."""

    def __init__(self) -> None:
        self.events: dict[str, dict] = {}
        self.created: list[tuple[str, dict]] = []
        self.deleted: list[str] = []
        self.fail_create_on_call: int | None = None
        self.fail_delete = False
        self._counter = 0

    async def insert_event(self, access_token: str, event: dict) -> str:
        await asyncio.sleep(0)
        self._counter += 1
        if self.fail_create_on_call is not None and self._counter == self.fail_create_on_call:
            raise ExternalSyncFailure("Calendar event create failed (status=500)")
        event_id = f"evt-{self._counter}"
        self.events[event_id] = {**event, "access_token": access_token}
        self.created.append((event_id, event))
        return event_id

    async def delete_event(self, access_token: str, event_id: str) -> None:
        if self.fail_delete:
            raise ExternalSyncFailure("Calendar event delete failed (status=503)")
        self.events.pop(event_id, None)
        self.deleted.append(event_id)


class FakeIdentityClient:
    def __init__(self) -> None:
        self.refresh_calls = 0
        self.fail = False

    def is_expired(self, credentials: CalendarCredentials, now: datetime) -> bool:
        return credentials.is_expired(now)

    async def refresh(self, credentials: CalendarCredentials) -> CalendarCredentials:
        self.refresh_calls += 1
        if self.fail:
            raise Unauthenticated("Token refresh rejected (status=400)")
        return CalendarCredentials(
            access_token=f"refreshed-{self.refresh_calls}",
            refresh_token=credentials.refresh_token,
            expires_at=NOW + timedelta(hours=1),
        )


def make_user(user_id: str, connected: bool = True, expired: bool = False) -> User:
    credentials = None
    if connected:
        credentials = CalendarCredentials(
            access_token=f"token-{user_id}",
            refresh_token=f"refresh-{user_id}",
            expires_at=NOW - timedelta(minutes=5) if expired else NOW + timedelta(hours=1),
        )
    return User(
        id=user_id,
        email=f"{user_id}@example.org",
        name=user_id.upper(),
        calendar_credentials=credentials,
    )


def make_group(group_id: str, member_ids: list[str], cursor: int = 0) -> Group:
    return Group(
        id=group_id,
        name=f"Group {group_id}",
        description="Weekly visit",
        members=[GroupMember(user_id=u, order_position=i) for i, u in enumerate(member_ids)],
        schedule=GroupSchedule(day_of_week=1, time_of_day="09:00"),
        cursor=cursor,
    )


@dataclass
class Services:
    state: StateRepository
    history: HistoryRepository
    locks: KeyedLocks
    calendar: FakeCalendarClient
    identity: FakeIdentityClient
    sync: CalendarSynchronizer
    users: UserService
    groups: GroupService
    scheduling: SchedulingService
    rotations: RotationService

    def seed(self, group_id: str, member_ids: list[str], cursor: int = 0) -> Group:
        for user_id in member_ids:
            if self.state.get_user(user_id) is None:
                self.state.save_user(make_user(user_id))
        group = make_group(group_id, member_ids, cursor)
        self.state.save_group(group)
        return group


@pytest.fixture
def calendar():
    return FakeCalendarClient()


@pytest.fixture
def identity():
    return FakeIdentityClient()


@pytest.fixture
def services(calendar, identity):
    state = StateRepository()
    history = HistoryRepository()
    locks = KeyedLocks()
    clock = lambda: NOW  # noqa: E731
    sync = CalendarSynchronizer(state, calendar, identity, clock=clock)
    return Services(
        state=state,
        history=history,
        locks=locks,
        calendar=calendar,
        identity=identity,
        sync=sync,
        users=UserService(state),
        groups=GroupService(state, history, sync, locks, clock=clock),
        scheduling=SchedulingService(state, history, sync, locks, clock=clock),
        rotations=RotationService(state, history, sync, locks, clock=clock),
    )
