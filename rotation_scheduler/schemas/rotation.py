# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from rotation_scheduler.core.config import settings
from rotation_scheduler.models.domain import (
    Group,
    GroupMember,
    GroupSchedule,
    Rotation,
    SkipWeek,
    User,
)


# ── User Schemas ──

class CredentialsPayload(BaseModel):
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class UserRegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    credentials: Optional[CredentialsPayload] = None


class UserResponse(BaseModel):
    """Public view of a user — tokens never leave the service."""
    id: str
    email: str
    name: str
    calendar_connected: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            calendar_connected=user.calendar_credentials is not None,
        )


# ── Group Schemas ──

class GroupCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Group name")
    description: str = Field(default="", max_length=2000)
    day_of_week: int = Field(default=1, ge=0, le=6, description="0=Sunday .. 6=Saturday")
    time_of_day: str = Field(
        default="09:00",
        pattern=r"^([01]\d|2[0-3]):[0-5]\d$",
        description="Local start time, HH:MM",
    )


class MemberAddRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class GroupResponse(BaseModel):
    id: str
    name: str
    description: str
    members: list[GroupMember]
    schedule: GroupSchedule
    cursor: int
    active: bool

    @classmethod
    def from_group(cls, group: Group) -> "GroupResponse":
        return cls(**group.model_dump(exclude={"members"}), members=group.sorted_members())


class MemberRemovalResponse(BaseModel):
    group_id: str
    user_id: str
    removed_rotation_count: int
    failed_calendar_deletes: int
    message: str


# ── Skip Week Schemas ──

class SkipWeekCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    group_id: str = Field(..., min_length=1)
    period_start: date
    reason: str = Field(default="", max_length=1000)


# ── Rotation Schemas ──

class ScheduleRequest(BaseModel):
    period_count: int = Field(
        default=1,
        ge=1,
        le=settings.MAX_SCHEDULE_PERIODS,
        description="Number of consecutive periods to schedule",
    )
    start_period: Optional[date] = Field(
        default=None, description="Any date in the first period; defaults to this week"
    )


class ScheduleResponse(BaseModel):
    rotations: list[Rotation]
    cursor: int
    message: str


class SwapRequest(BaseModel):
    group_id: str = Field(..., min_length=1)
    period_start: date
    from_user_id: str = Field(..., min_length=1)
    to_user_id: str = Field(..., min_length=1)


class CancelResponse(BaseModel):
    status: str
    rotation: Rotation


# ── Snapshot ──

class StateResponse(BaseModel):
    users: list[UserResponse]
    groups: list[GroupResponse]
    skip_weeks: list[SkipWeek]
    rotations: list[Rotation]


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
