# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Rotation listing, swap and cancel endpoints.
Thin HTTP layer — delegates ALL logic to RotationService.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from rotation_scheduler.core.dependencies import get_rotation_service
from rotation_scheduler.models.domain import Rotation
from rotation_scheduler.schemas.rotation import CancelResponse, SwapRequest
from rotation_scheduler.services.rotation_service import RotationService

router = APIRouter(prefix="/api/v1", tags=["Rotations"])


@router.get("/rotations", response_model=list[Rotation])
def list_rotations(
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
    status: Optional[str] = Query(default=None, pattern="^(scheduled|completed|cancelled)$"),
    service: RotationService = Depends(get_rotation_service),
):
    """List rotations ordered by period, optionally filtered."""
    return service.list_rotations(group_id=group_id, user_id=user_id, status=status)


@router.get("/rotations/{rotation_id}", response_model=Rotation)
def get_rotation(
    rotation_id: str,
    service: RotationService = Depends(get_rotation_service),
):
    return service.get_rotation(rotation_id)


@router.post("/rotations/swap", response_model=Rotation)
async def swap_rotation(
    payload: SwapRequest,
    service: RotationService = Depends(get_rotation_service),
):
    """Reassign one period to another user without moving the group cursor."""
    return await service.swap(
        group_id=payload.group_id,
        period=payload.period_start.isoformat(),
        from_user_id=payload.from_user_id,
        to_user_id=payload.to_user_id,
    )


@router.delete("/rotations/{rotation_id}", response_model=CancelResponse)
async def cancel_rotation(
    rotation_id: str,
    service: RotationService = Depends(get_rotation_service),
):
    """Cancel a rotation and delete its calendar event."""
    rotation = await service.cancel_rotation(rotation_id)
    return CancelResponse(status="cancelled", rotation=rotation)
