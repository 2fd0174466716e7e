# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Identity client — OAuth refresh-token exchange.
Turns an expired credential set into a fresh one via the token endpoint.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from rotation_scheduler.core.config import settings
from rotation_scheduler.core.errors import Unauthenticated
from rotation_scheduler.core.logging import get_logger
from rotation_scheduler.models.domain import CalendarCredentials

logger = get_logger(__name__)


def _expires_in_seconds(value: Any) -> int:
    if isinstance(value, bool):
        return 3600
    if isinstance(value, (int, float)) and value > 0:
        return int(value)
    return 3600


class IdentityClient:
    """Refreshes Google OAuth credentials."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._transport = transport

    def is_expired(self, credentials: CalendarCredentials, now: datetime) -> bool:
        return credentials.is_expired(now)

    async def refresh(self, credentials: CalendarCredentials) -> CalendarCredentials:
        """Exchange the refresh token. Raises Unauthenticated on any failure."""
        if not credentials.refresh_token:
            raise Unauthenticated("Credentials expired and no refresh token is stored")

        try:
            async with httpx.AsyncClient(
                timeout=settings.CALENDAR_TIMEOUT, transport=self._transport
            ) as client:
                resp = await client.post(
                    settings.GOOGLE_TOKEN_URL,
                    data={
                        "client_id": settings.GOOGLE_CLIENT_ID,
                        "client_secret": settings.GOOGLE_CLIENT_SECRET,
                        "refresh_token": credentials.refresh_token,
                        "grant_type": "refresh_token",
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise Unauthenticated(f"Token refresh request failed: {exc}") from exc

        if resp.status_code >= 300:
            raise Unauthenticated(f"Token refresh rejected (status={resp.status_code})")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise Unauthenticated("Token endpoint returned invalid JSON") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token.strip():
            raise Unauthenticated("Token response is missing access_token")

        expires_in = _expires_in_seconds(payload.get("expires_in"))
        logger.info("Credentials refreshed, expires_in=%d", expires_in)
        return CalendarCredentials(
            access_token=access_token.strip(),
            # Google only returns a refresh token on first consent
            refresh_token=payload.get("refresh_token") or credentials.refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )
