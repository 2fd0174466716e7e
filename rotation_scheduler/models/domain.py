# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CalendarCredentials(BaseModel):
    """OAuth tokens a user granted for writing to their calendar."""
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at


class User(BaseModel):
    id: str
    email: str
    name: str
    calendar_credentials: Optional[CalendarCredentials] = None


class GroupMember(BaseModel):
    user_id: str
    order_position: int


class GroupSchedule(BaseModel):
    """Recurring visit slot. ``day_of_week`` is 0=Sunday .. 6=Saturday."""
    day_of_week: int = Field(default=1, ge=0, le=6)
    time_of_day: str = Field(default="09:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")


class Group(BaseModel):
    """A rotation unit.

    ``cursor`` is a position in the members list sorted by ``order_position``
    and is always read modulo the live member count, so removing a member
    shifts who it points at.
    """
    id: str
    name: str
    description: str = ""
    members: list[GroupMember] = Field(default_factory=list)
    schedule: GroupSchedule = Field(default_factory=GroupSchedule)
    cursor: int = 0
    active: bool = True

    def sorted_members(self) -> list[GroupMember]:
        return sorted(self.members, key=lambda m: m.order_position)

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)


class SkipWeek(BaseModel):
    id: str
    user_id: str
    group_id: str
    period_start: str
    reason: str = ""
    created_at: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.user_id, self.group_id, self.period_start)


class RotationStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Rotation(BaseModel):
    id: str
    group_id: str
    assigned_user_id: str
    period_start: str
    calendar_event_id: Optional[str] = None
    status: RotationStatus = RotationStatus.SCHEDULED
    created_at: str
    swapped_at: Optional[str] = None


class StateSnapshot(BaseModel):
    """Everything that is persisted, saved and loaded as one unit."""
    users: list[User] = Field(default_factory=list)
    groups: list[Group] = Field(default_factory=list)
    skip_weeks: list[SkipWeek] = Field(default_factory=list)
    rotations: list[Rotation] = Field(default_factory=list)
