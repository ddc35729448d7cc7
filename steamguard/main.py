"""steamguard composition root.

Wires the shared HTTP client, clock alignment, signer, session store and
confirmation orchestrator together via constructor injection.  Callers
(the CLI, or an outer web layer) build one :class:`Authenticator` per
process and close it when done::

    authenticator = build_authenticator()
    try:
        confs = await authenticator.confirmations.list_pending(account)
    finally:
        await authenticator.aclose()
"""

from __future__ import annotations

from datetime import timedelta

import httpx
import structlog

from steamguard.config.settings import Settings
from steamguard.interfaces.session_store import ISessionStore
from steamguard.models.account import Account
from steamguard.models.guard import GuardCode
from steamguard.pipeline.confirmation_orchestrator import ConfirmationOrchestrator
from steamguard.providers.session.memory_session_store import MemorySessionStore
from steamguard.providers.session.sqlite_session_store import SQLiteSessionStore
from steamguard.services.clock_sync import ClockSync
from steamguard.services.guard_code import current_code
from steamguard.services.request_signer import RequestSigner
from steamguard.services.session_lifecycle import SessionLifecycle
from steamguard.utils.errors import ConfigurationError
from steamguard.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


class Authenticator:
    """Every protocol component for one process, sharing one HTTP client."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        clock: ClockSync,
        signer: RequestSigner,
        store: ISessionStore,
        sessions: SessionLifecycle,
        confirmations: ConfirmationOrchestrator,
    ) -> None:
        self.settings = settings
        self.http_client = http_client
        self.clock = clock
        self.signer = signer
        self.store = store
        self.sessions = sessions
        self.confirmations = confirmations

    async def guard_code(self, account: Account | str | None) -> GuardCode:
        """Synchronize the clock (best effort) and return the current code.

        ``account`` may also be a bare shared secret, for callers that have
        no account record.
        """
        secret = account.shared_secret if isinstance(account, Account) else account
        await self.clock.synchronize()
        return current_code(secret, self.clock)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> Authenticator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Session store selection
# ---------------------------------------------------------------------------


def _build_session_store(app_settings: Settings) -> ISessionStore:
    """Select the session store backend named by ``session_store``."""
    backend = app_settings.session_store.lower()
    if backend == "memory":
        return MemorySessionStore()
    if backend == "sqlite":
        store = SQLiteSessionStore(db_path=app_settings.session_db_path)
        store.initialize()
        return store
    raise ConfigurationError(
        message=f"Unknown session store backend: {app_settings.session_store!r}",
        provider_name="settings",
    )


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def build_authenticator(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Authenticator:
    """Construct every component with injected dependencies.

    Parameters
    ----------
    settings:
        Application settings.  Read from the environment if not provided.
    http_client:
        Shared HTTP client.  A new one is created if not provided, routed
        through ``settings.proxy_url`` when set; it is closed by
        :meth:`Authenticator.aclose` either way.
    """
    s = settings or Settings()
    client = http_client or httpx.AsyncClient(proxy=s.proxy_url)

    clock = ClockSync(
        http_client=client,
        time_sync_url=s.time_sync_url,
        timeout=s.time_sync_timeout,
    )
    signer = RequestSigner(clock=clock)
    store = _build_session_store(s)
    sessions = SessionLifecycle(
        store=store,
        max_age=timedelta(days=s.session_max_age_days),
        idle_timeout=timedelta(days=s.session_idle_timeout_days),
    )
    confirmations = ConfirmationOrchestrator(
        http_client=client,
        clock=clock,
        signer=signer,
        sessions=sessions,
        community_url=s.steam_community_url,
        timeout=s.request_timeout,
    )

    _logger.info(
        "authenticator_built",
        session_store=store.get_provider_name(),
        community_url=s.steam_community_url,
        proxied=s.proxy_url is not None,
    )
    return Authenticator(
        settings=s,
        http_client=client,
        clock=clock,
        signer=signer,
        store=store,
        sessions=sessions,
        confirmations=confirmations,
    )
