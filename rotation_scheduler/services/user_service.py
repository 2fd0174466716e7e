# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: User registration.
Stores the identity confirmed by the OAuth flow; credentials are replaced
in place when the same email connects again.
"""

import uuid
from typing import Optional

from rotation_scheduler.core.errors import NotFound
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.models.domain import CalendarCredentials, User
from rotation_scheduler.repositories.state_repository import StateRepository

logger = get_logger(__name__)


class UserService:
    def __init__(self, state_repo: StateRepository) -> None:
        self._state = state_repo

    def register_user(
        self,
        email: str,
        name: Optional[str] = None,
        credentials: Optional[CalendarCredentials] = None,
    ) -> User:
        """Create the user, or refresh name/credentials of an existing one."""
        user = self._state.get_user_by_email(email)
        if user is None:
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                name=name or email,
                calendar_credentials=credentials,
            )
            logger.info("User registered: user=%s", user.id)
        else:
            if name:
                user.name = name
            if credentials is not None:
                user.calendar_credentials = credentials
            logger.info("User credentials updated: user=%s", user.id)
        self._state.save_user(user)
        self._state.save()
        return user

    def get_user(self, user_id: str) -> User:
        user = self._state.get_user(user_id)
        if user is None:
            raise NotFound(f"User '{user_id}' not found")
        return user

    def list_users(self) -> list[User]:
        return self._state.list_users()
