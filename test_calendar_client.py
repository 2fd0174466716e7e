# type: ignore
"""
Tests for the httpx collaborators — Calendar REST client (retry, error
mapping) and OAuth refresh — using httpx.MockTransport.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from rotation_scheduler.core.errors import ExternalSyncFailure, Unauthenticated
from rotation_scheduler.models.domain import CalendarCredentials
from rotation_scheduler.services.calendar_client import CalendarClient
from rotation_scheduler.services.identity_client import IdentityClient


def _client(handler, retries=2):
    return CalendarClient(
        transport=httpx.MockTransport(handler), max_retries=retries, backoff_seconds=0
    )


class TestCalendarInsert:
    @pytest.mark.asyncio
    async def test_insert_returns_event_id(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "abc123"})

        event_id = await _client(handler).insert_event("tok", {"summary": "Visit"})

        assert event_id == "abc123"
        assert seen["method"] == "POST"
        assert seen["path"] == "/calendar/v3/calendars/primary/events"
        assert seen["auth"] == "Bearer tok"
        assert seen["body"] == {"summary": "Visit"}

    @pytest.mark.asyncio
    async def test_retries_on_503_then_succeeds(self):
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"id": "late"})

        assert await _client(handler).insert_event("tok", {}) == "late"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(429, json={"error": {"message": "Rate Limit Exceeded"}})

        with pytest.raises(ExternalSyncFailure) as exc_info:
            await _client(handler, retries=2).insert_event("tok", {})
        assert len(calls) == 3
        assert "Rate Limit Exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connect_error_is_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"id": "ok"})

        assert await _client(handler).insert_event("tok", {}) == "ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_unreachable_after_retries(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExternalSyncFailure):
            await _client(handler, retries=1).insert_event("tok", {})

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(400, json={"error": {"message": "Bad Request"}})

        with pytest.raises(ExternalSyncFailure):
            await _client(handler).insert_event("tok", {})
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_401_is_unauthenticated(self):
        def handler(request):
            return httpx.Response(401, json={"error": "invalid_token"})

        with pytest.raises(Unauthenticated):
            await _client(handler).insert_event("tok", {})

    @pytest.mark.asyncio
    async def test_missing_id_is_failure(self):
        def handler(request):
            return httpx.Response(200, json={})

        with pytest.raises(ExternalSyncFailure):
            await _client(handler).insert_event("tok", {})


class TestCalendarDelete:
    @pytest.mark.asyncio
    async def test_delete_success(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(204)

        await _client(handler).delete_event("tok", "evt-1")
        assert seen == {"method": "DELETE", "path": "/calendar/v3/calendars/primary/events/evt-1"}

    @pytest.mark.asyncio
    async def test_missing_event_is_plain_failure(self):
        def handler(request):
            return httpx.Response(410, json={"error": {"message": "Resource has been deleted"}})

        with pytest.raises(ExternalSyncFailure):
            await _client(handler).delete_event("tok", "evt-1")


class TestIdentityRefresh:
    @pytest.mark.asyncio
    async def test_refresh_returns_new_access_token(self):
        seen = {}

        def handler(request):
            seen["body"] = request.content.decode()
            return httpx.Response(200, json={"access_token": "fresh", "expires_in": 3599})

        client = IdentityClient(transport=httpx.MockTransport(handler))
        old = CalendarCredentials(access_token="stale", refresh_token="r-1")
        new = await client.refresh(old)

        assert new.access_token == "fresh"
        assert new.refresh_token == "r-1"
        assert new.expires_at > datetime.now(timezone.utc)
        assert "grant_type=refresh_token" in seen["body"]
        assert "refresh_token=r-1" in seen["body"]

    @pytest.mark.asyncio
    async def test_refresh_without_refresh_token(self):
        client = IdentityClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with pytest.raises(Unauthenticated):
            await client.refresh(CalendarCredentials(access_token="stale"))

    @pytest.mark.asyncio
    async def test_refresh_rejected(self):
        def handler(request):
            return httpx.Response(400, json={"error": "invalid_grant"})

        client = IdentityClient(transport=httpx.MockTransport(handler))
        with pytest.raises(Unauthenticated):
            await client.refresh(CalendarCredentials(access_token="stale", refresh_token="r-1"))

    def test_is_expired(self):
        client = IdentityClient()
        now = datetime(2026, 2, 10, tzinfo=timezone.utc)
        creds = CalendarCredentials(access_token="t", expires_at=now)
        assert client.is_expired(creds, now) is True
        assert client.is_expired(CalendarCredentials(access_token="t"), now) is False
