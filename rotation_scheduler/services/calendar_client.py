# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Calendar client — Google Calendar REST calls over httpx.
Adds a per-request timeout and bounded retry with exponential backoff.
A 401 surfaces as Unauthenticated and every other failure as
ExternalSyncFailure; a missing event is not treated specially.
"""

import asyncio
from typing import Any, Optional
from urllib.parse import quote

import httpx

from rotation_scheduler.core.config import settings
from rotation_scheduler.core.errors import ExternalSyncFailure, Unauthenticated
from rotation_scheduler.core.logging import get_logger

logger = get_logger(__name__)

RETRY_STATUS_CODES = {429, 500, 502, 503, 504}


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"][:200]
        if isinstance(error, str):
            return error[:200]
    return (resp.text or "no error payload")[:200]


class CalendarClient:
    """Thin async wrapper over the events insert/delete endpoints."""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ) -> None:
        self._transport = transport
        self._max_retries = (
            settings.CALENDAR_MAX_RETRIES if max_retries is None else max_retries
        )
        self._backoff = (
            settings.CALENDAR_BACKOFF_SECONDS
            if backoff_seconds is None
            else backoff_seconds
        )

    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{settings.CALENDAR_API_URL}/calendars/{quote(settings.CALENDAR_ID, safe='')}/events"
        if event_id:
            url += f"/{quote(event_id, safe='')}"
        return url

    async def _request(
        self,
        method: str,
        url: str,
        access_token: str,
        json_body: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        attempt = 0
        async with httpx.AsyncClient(
            timeout=settings.CALENDAR_TIMEOUT, transport=self._transport
        ) as client:
            while True:
                try:
                    resp = await client.request(method, url, json=json_body, headers=headers)
                except (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout) as exc:
                    # Request never reached the server, safe to resend.
                    if attempt >= self._max_retries:
                        raise ExternalSyncFailure(f"Calendar API unreachable: {exc}") from exc
                    reason = type(exc).__name__
                except httpx.HTTPError as exc:
                    raise ExternalSyncFailure(f"Calendar API request failed: {exc}") from exc
                else:
                    if resp.status_code not in RETRY_STATUS_CODES or attempt >= self._max_retries:
                        return resp
                    reason = f"status={resp.status_code}"

                delay = self._backoff * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "Calendar API %s %s failed (%s), retrying in %.2fs (attempt %d/%d)",
                    method, url, reason, delay, attempt, self._max_retries,
                )
                await asyncio.sleep(delay)

    async def insert_event(self, access_token: str, event: dict[str, Any]) -> str:
        """Create an event and return its provider-assigned id."""
        resp = await self._request("POST", self._events_url(), access_token, json_body=event)
        if resp.status_code == 401:
            raise Unauthenticated(f"Calendar API rejected credentials: {_error_message(resp)}")
        if resp.status_code >= 300:
            raise ExternalSyncFailure(
                f"Calendar event create failed (status={resp.status_code}): {_error_message(resp)}"
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ExternalSyncFailure("Calendar API returned invalid JSON") from exc
        event_id = payload.get("id") if isinstance(payload, dict) else None
        if not event_id:
            raise ExternalSyncFailure("Calendar API response is missing the event id")
        return event_id

    async def delete_event(self, access_token: str, event_id: str) -> None:
        resp = await self._request("DELETE", self._events_url(event_id), access_token)
        if resp.status_code == 401:
            raise Unauthenticated(f"Calendar API rejected credentials: {_error_message(resp)}")
        if resp.status_code >= 300:
            raise ExternalSyncFailure(
                f"Calendar event delete failed (status={resp.status_code}): {_error_message(resp)}"
            )
