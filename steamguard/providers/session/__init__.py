"""Session store adapters implementing ISessionStore."""

from steamguard.providers.session.memory_session_store import MemorySessionStore
from steamguard.providers.session.sqlite_session_store import SQLiteSessionStore

__all__ = ["MemorySessionStore", "SQLiteSessionStore"]
