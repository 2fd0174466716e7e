# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Group, membership, skip week and scheduling endpoints.
Thin HTTP layer — delegates ALL logic to GroupService / SchedulingService.
Service errors are rendered by the RotationError handler in main.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from rotation_scheduler.core.dependencies import get_group_service, get_scheduling_service
from rotation_scheduler.models.domain import SkipWeek
from rotation_scheduler.schemas.rotation import (
    GroupCreateRequest,
    GroupResponse,
    MemberAddRequest,
    MemberRemovalResponse,
    ScheduleRequest,
    ScheduleResponse,
    SkipWeekCreateRequest,
)
from rotation_scheduler.services.group_service import GroupService
from rotation_scheduler.services.scheduling_service import SchedulingService

router = APIRouter(prefix="/api/v1", tags=["Groups"])


# ── Groups ──

@router.post("/groups", status_code=201, response_model=GroupResponse)
def create_group(
    payload: GroupCreateRequest,
    service: GroupService = Depends(get_group_service),
):
    """Create a rotation group with an empty member list."""
    group = service.create_group(
        name=payload.name,
        description=payload.description,
        day_of_week=payload.day_of_week,
        time_of_day=payload.time_of_day,
    )
    return GroupResponse.from_group(group)


@router.get("/groups", response_model=list[GroupResponse])
def list_groups(
    service: GroupService = Depends(get_group_service),
):
    return [GroupResponse.from_group(g) for g in service.list_groups()]


@router.get("/groups/{group_id}", response_model=GroupResponse)
def get_group(
    group_id: str,
    service: GroupService = Depends(get_group_service),
):
    return GroupResponse.from_group(service.get_group(group_id))


# ── Members ──

@router.post("/groups/{group_id}/members", response_model=GroupResponse)
async def add_member(
    group_id: str,
    payload: MemberAddRequest,
    service: GroupService = Depends(get_group_service),
):
    """Append a user to the end of the rotation order."""
    group = await service.add_member(group_id, payload.user_id)
    return GroupResponse.from_group(group)


@router.delete("/groups/{group_id}/members/{user_id}", response_model=MemberRemovalResponse)
async def remove_member(
    group_id: str,
    user_id: str,
    service: GroupService = Depends(get_group_service),
):
    """Remove a member and cancel their future rotations."""
    result = await service.remove_member(group_id, user_id)
    return MemberRemovalResponse(
        **result,
        message=(
            f"Removed {user_id} from group and cancelled "
            f"{result['removed_rotation_count']} future rotations"
        ),
    )


# ── Skip Weeks ──

@router.post("/skip-weeks", status_code=201, response_model=SkipWeek)
async def record_skip_week(
    payload: SkipWeekCreateRequest,
    service: GroupService = Depends(get_group_service),
):
    """Declare that a user cannot take their turn in one period."""
    return await service.record_skip_week(
        user_id=payload.user_id,
        group_id=payload.group_id,
        period=payload.period_start.isoformat(),
        reason=payload.reason,
    )


@router.get("/skip-weeks", response_model=list[SkipWeek])
def list_skip_weeks(
    group_id: Optional[str] = None,
    service: GroupService = Depends(get_group_service),
):
    return service.list_skip_weeks(group_id=group_id)


# ── Scheduling ──

@router.post("/groups/{group_id}/schedule", response_model=ScheduleResponse)
async def schedule_rotations(
    group_id: str,
    payload: ScheduleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    group_service: GroupService = Depends(get_group_service),
):
    """Assign the next members in turn for one or more consecutive periods."""
    try:
        rotations = await service.schedule_rotations(
            group_id=group_id,
            period_count=payload.period_count,
            start_period=payload.start_period.isoformat() if payload.start_period else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    group = group_service.get_group(group_id)
    if payload.period_count == 1:
        message = f"Assigned rotation for {group.name} - week of {rotations[0].period_start}"
    else:
        message = (
            f"Scheduled {payload.period_count} weeks of rotations for {group.name} "
            f"starting {rotations[0].period_start}"
        )
    return ScheduleResponse(rotations=rotations, cursor=group.cursor, message=message)
