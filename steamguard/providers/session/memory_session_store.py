"""In-memory session store.

Suitable for tests and one-shot CLI runs.  Sessions disappear with the
process; use :class:`SQLiteSessionStore` to keep them across restarts.
"""

from __future__ import annotations

import threading

from steamguard.interfaces.session_store import ISessionStore
from steamguard.models.session import SessionRecord


class MemorySessionStore(ISessionStore):
    """Dict-backed :class:`ISessionStore`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, SessionRecord] = {}

    def get(self, account_id: str) -> SessionRecord | None:
        with self._lock:
            return self._sessions.get(account_id)

    def upsert(self, account_id: str, record: SessionRecord) -> None:
        with self._lock:
            self._sessions[account_id] = record

    def clear(self, account_id: str) -> None:
        with self._lock:
            self._sessions.pop(account_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_provider_name(self) -> str:
        return "memory_session_store"
