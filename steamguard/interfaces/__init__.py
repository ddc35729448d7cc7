"""Public interface definitions for external collaborators.

The protocol engine reaches persistence only through the abstract base
classes defined here; concrete adapters live in ``steamguard/providers/``
and are chosen in ``steamguard/main.py``.

    Interface        →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    ISessionStore    →  MemorySessionStore, SQLiteSessionStore
"""

from steamguard.interfaces.session_store import ISessionStore

__all__ = ["ISessionStore"]
