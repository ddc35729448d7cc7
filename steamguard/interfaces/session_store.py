"""Abstract base class for session persistence.

Defines the contract the session lifecycle policy uses to read and write
per-account :class:`~steamguard.models.session.SessionRecord` values.
Implementations may keep records in memory, in SQLite, or anywhere else;
the expiry policy never depends on how they are stored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from steamguard.models.session import SessionRecord


class ISessionStore(ABC):
    """Contract for keyed session storage.

    Operations are synchronous: each one touches a single small record, and
    the lifecycle service already serializes writers per account.
    """

    @abstractmethod
    def get(self, account_id: str) -> SessionRecord | None:
        """Return the stored session for *account_id*, or ``None``."""

    @abstractmethod
    def upsert(self, account_id: str, record: SessionRecord) -> None:
        """Insert or replace the session for *account_id*."""

    @abstractmethod
    def clear(self, account_id: str) -> None:
        """Remove the session for *account_id*.

        This is a no-op if no session is stored.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
