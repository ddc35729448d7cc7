"""Validity and expiry bookkeeping for stored community sessions.

# ─── HOW SESSION EXPIRY WORKS ─────────────────────────────────────────
#
#   upsert()  ──→  created_at kept (or set), last_used_at = last_refreshed_at = now
#   touch()   ──→  last_used_at = now           (after each successful call)
#   validate()──→  NO_SESSION | INCOMPLETE_SESSION | SESSION_EXPIRED | valid
#
# A session expires when it is older than ``max_age`` (measured from
# created_at, which survives refreshes) or when it has been idle for
# longer than ``idle_timeout`` (measured from last_used_at, if set).
# Age is checked first.  The remote service may still reject a session
# this policy considers valid; the orchestrator reports that separately.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import threading
import weakref
from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog

from steamguard.interfaces.session_store import ISessionStore
from steamguard.models.session import (
    SessionAgeInfo,
    SessionInvalidReason,
    SessionRecord,
    SessionStatus,
    SessionValidation,
)
from steamguard.utils.errors import LoginRequiredError
from steamguard.utils.logging import get_logger

DEFAULT_MAX_AGE = timedelta(days=30)
DEFAULT_IDLE_TIMEOUT = timedelta(days=7)

_SECONDS_PER_DAY = 86_400
_SECONDS_PER_HOUR = 3_600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


class SessionLifecycle:
    """Expiry policy over an injected :class:`ISessionStore`.

    Parameters
    ----------
    store:
        Where session records live.
    max_age:
        Hard limit measured from ``created_at``.
    idle_timeout:
        Limit measured from ``last_used_at``.
    clock:
        Returns the current timezone-aware time; replaced in tests.
    """

    def __init__(
        self,
        store: ISessionStore,
        max_age: timedelta = DEFAULT_MAX_AGE,
        idle_timeout: timedelta = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._max_age = max_age
        self._idle_timeout = idle_timeout
        self._clock = clock
        # Entries vanish once no caller holds the lock.
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_age(self) -> timedelta:
        return self._max_age

    @property
    def idle_timeout(self) -> timedelta:
        return self._idle_timeout

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def upsert(
        self,
        account_id: str,
        session_token: str,
        auth_token: str,
        extra_token: str | None = None,
    ) -> SessionRecord:
        """Store fresh credentials, keeping the original ``created_at``."""
        with self._lock_for(account_id):
            now = self._clock()
            existing = self._store.get(account_id)
            record = SessionRecord(
                session_token=session_token,
                auth_token=auth_token,
                extra_token=extra_token,
                created_at=existing.created_at if existing is not None else now,
                last_used_at=now,
                last_refreshed_at=now,
            )
            self._store.upsert(account_id, record)

        age = self.age_info(account_id)
        self._logger.info(
            "session_upserted",
            account_id=account_id,
            refreshed=existing is not None,
            age=age.age_formatted if age else None,
            expires_in_days=age.expires_in_days if age else None,
        )
        return record

    def touch(self, account_id: str) -> None:
        """Record a successful authenticated call; no-op without a session."""
        with self._lock_for(account_id):
            existing = self._store.get(account_id)
            if existing is None:
                return
            self._store.upsert(
                account_id, existing.model_copy(update={"last_used_at": self._clock()})
            )

    def clear(self, account_id: str) -> None:
        with self._lock_for(account_id):
            existing = self._store.get(account_id)
            self._store.clear(account_id)
        if existing is not None:
            self._logger.info("session_cleared", account_id=account_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def validate(self, account_id: str) -> SessionValidation:
        """Classify the stored session for *account_id*."""
        session = self._store.get(account_id)
        if session is None:
            return SessionValidation(valid=False, reason=SessionInvalidReason.NO_SESSION)
        if not session.is_complete:
            return SessionValidation(
                valid=False, reason=SessionInvalidReason.INCOMPLETE_SESSION
            )
        if self._is_expired(account_id, session):
            return SessionValidation(
                valid=False, reason=SessionInvalidReason.SESSION_EXPIRED
            )
        return SessionValidation(valid=True, session=session)

    def age_info(self, account_id: str) -> SessionAgeInfo | None:
        """Age and remaining lifetime of the stored session, or ``None``."""
        session = self._store.get(account_id)
        if session is None:
            return None

        age_seconds = int((self._clock() - session.created_at).total_seconds())
        days = age_seconds // _SECONDS_PER_DAY
        hours = (age_seconds % _SECONDS_PER_DAY) // _SECONDS_PER_HOUR
        expires_in = int(self._max_age.total_seconds()) - age_seconds
        return SessionAgeInfo(
            age_seconds=age_seconds,
            age_days=days,
            age_hours=hours,
            age_formatted=f"{_plural(days, 'day')}, {_plural(hours, 'hour')}",
            expires_in_seconds=expires_in,
            expires_in_days=expires_in // _SECONDS_PER_DAY,
            last_used_at=session.last_used_at,
        )

    def cookie_header(self, account_id: str) -> str:
        """Cookie pair for authenticated community calls.

        Raises
        ------
        LoginRequiredError
            If the session is absent, incomplete or expired.
        """
        validation = self.validate(account_id)
        if not validation.valid or validation.session is None:
            reason = validation.reason.value if validation.reason else None
            raise LoginRequiredError(provider_name="session_lifecycle", reason=reason)
        return validation.session.cookie_header()

    def status(self, account_id: str) -> SessionStatus:
        """Validation, age and policy thresholds in one report."""
        validation = self.validate(account_id)
        age = self.age_info(account_id)
        return SessionStatus(
            account_id=account_id,
            has_session=age is not None,
            valid=validation.valid,
            reason=validation.reason,
            age=age,
            max_age_days=self._max_age.days,
            idle_timeout_days=self._idle_timeout.days,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_expired(self, account_id: str, session: SessionRecord) -> bool:
        now = self._clock()
        age = now - session.created_at
        if age > self._max_age:
            self._logger.info(
                "session_expired_by_age", account_id=account_id, age_days=age.days
            )
            return True
        if session.last_used_at is not None:
            idle = now - session.last_used_at
            if idle > self._idle_timeout:
                self._logger.info(
                    "session_expired_by_idle", account_id=account_id, idle_days=idle.days
                )
                return True
        return False

    def _lock_for(self, account_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock
