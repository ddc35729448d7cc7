"""Shared pytest fixtures for the steamguard test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from steamguard.models.account import Account
from steamguard.pipeline.confirmation_orchestrator import ConfirmationOrchestrator
from steamguard.providers.session.memory_session_store import MemorySessionStore
from steamguard.services.clock_sync import ClockSync
from steamguard.services.request_signer import RequestSigner
from steamguard.services.session_lifecycle import SessionLifecycle

# 20 zero bytes, base64.  Codes and signatures for it are pinned in the tests.
ZERO_SECRET = "AAAAAAAAAAAAAAAAAAAAAAAAAAA="
STEAM_ID = "76561198000000000"
LOCAL_NOW = 1_700_000_000


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeNow:
    """Settable wall clock for the session lifecycle."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class FakeSteam:
    """In-process stand-in for the time oracle and the confirmation endpoints.

    Replies are ``(status, kwargs)`` tuples turned into a fresh
    :class:`httpx.Response` per request, or an exception to raise.
    ``act_replies`` is consumed in order; once empty every ajaxop call
    answers ``{"success": true}``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.time_reply: Any = (200, {"json": {"response": {"server_time": str(LOCAL_NOW)}}})
        self.list_reply: Any = (200, {"json": {"success": True, "conf": []}})
        self.act_replies: list[Any] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/ITwoFactorService/QueryTime/v0001"):
            return self._reply(self.time_reply, request)
        if path == "/mobileconf/getlist":
            return self._reply(self.list_reply, request)
        if path == "/mobileconf/ajaxop":
            reply = self.act_replies.pop(0) if self.act_replies else (200, {"json": {"success": True}})
            return self._reply(reply, request)
        return httpx.Response(404)

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    @staticmethod
    def _reply(reply: Any, request: httpx.Request) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        status, kwargs = reply
        return httpx.Response(status, request=request, **kwargs)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def account() -> Account:
    """An account with both secrets set to the all-zero key."""
    return Account(
        steam_id=STEAM_ID,
        account_name="tester",
        shared_secret=ZERO_SECRET,
        identity_secret=ZERO_SECRET,
    )


@pytest.fixture
def fake_steam() -> FakeSteam:
    return FakeSteam()


@pytest.fixture
async def http_client(fake_steam: FakeSteam):
    """AsyncClient whose transport is the FakeSteam handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_steam.handler))
    yield client
    await client.aclose()


@pytest.fixture
def clock(http_client: httpx.AsyncClient) -> ClockSync:
    """ClockSync whose local time is frozen at LOCAL_NOW."""
    return ClockSync(http_client=http_client, local_time=lambda: float(LOCAL_NOW))


@pytest.fixture
def wall_clock() -> FakeNow:
    return FakeNow(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def sessions(store: MemorySessionStore, wall_clock: FakeNow) -> SessionLifecycle:
    return SessionLifecycle(store=store, clock=wall_clock)


@pytest.fixture
def logged_in(sessions: SessionLifecycle, account: Account) -> SessionLifecycle:
    """Session lifecycle with a fresh, complete session for ``account``."""
    sessions.upsert(account.account_id, session_token="sess123", auth_token="secure456")
    return sessions


@pytest.fixture
def orchestrator(
    http_client: httpx.AsyncClient,
    clock: ClockSync,
    sessions: SessionLifecycle,
) -> ConfirmationOrchestrator:
    return ConfirmationOrchestrator(
        http_client=http_client,
        clock=clock,
        signer=RequestSigner(clock),
        sessions=sessions,
    )
