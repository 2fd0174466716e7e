# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: User endpoints.
Thin HTTP layer — delegates ALL logic to UserService.
"""

from fastapi import APIRouter, Depends

from rotation_scheduler.core.dependencies import get_user_service
from rotation_scheduler.models.domain import CalendarCredentials
from rotation_scheduler.schemas.rotation import UserRegisterRequest, UserResponse
from rotation_scheduler.services.user_service import UserService

router = APIRouter(prefix="/api/v1", tags=["Users"])


@router.post("/users", response_model=UserResponse)
def register_user(
    payload: UserRegisterRequest,
    service: UserService = Depends(get_user_service),
):
    """Register a user after identity confirmation, or refresh their tokens."""
    credentials = (
        CalendarCredentials(**payload.credentials.model_dump())
        if payload.credentials
        else None
    )
    user = service.register_user(
        email=payload.email,
        name=payload.name,
        credentials=credentials,
    )
    return UserResponse.from_user(user)


@router.get("/users", response_model=list[UserResponse])
def list_users(
    service: UserService = Depends(get_user_service),
):
    """List registered users."""
    return [UserResponse.from_user(u) for u in service.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
):
    return UserResponse.from_user(service.get_user(user_id))
