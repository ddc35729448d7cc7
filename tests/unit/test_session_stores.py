"""Unit tests for the session store adapters.

Both adapters are exercised through the same contract; the SQLite store
additionally gets persistence and corruption tests against a temporary
database file.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import pytest

from steamguard.interfaces.session_store import ISessionStore
from steamguard.models.session import SessionRecord
from steamguard.providers.session.memory_session_store import MemorySessionStore
from steamguard.providers.session.sqlite_session_store import SQLiteSessionStore

_CREATED = datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)


def _record(token: str = "sess", **overrides) -> SessionRecord:
    fields = {
        "session_token": token,
        "auth_token": "secure",
        "extra_token": "refresh",
        "created_at": _CREATED,
        "last_used_at": _CREATED,
        "last_refreshed_at": _CREATED,
    }
    fields.update(overrides)
    return SessionRecord(**fields)


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path: Path) -> ISessionStore:
    if request.param == "memory":
        return MemorySessionStore()
    store = SQLiteSessionStore(db_path=tmp_path / "sessions.db")
    store.initialize()
    return store


# ─── Shared contract ──────────────────────────────────────────────


class TestSessionStoreContract:
    def test_get_missing_returns_none(self, any_store) -> None:
        assert any_store.get("nobody") is None

    def test_upsert_then_get(self, any_store) -> None:
        any_store.upsert("a", _record())
        assert any_store.get("a") == _record()

    def test_upsert_replaces(self, any_store) -> None:
        any_store.upsert("a", _record("first"))
        any_store.upsert("a", _record("second"))
        assert any_store.get("a").session_token == "second"

    def test_keys_are_independent(self, any_store) -> None:
        any_store.upsert("a", _record("for-a"))
        any_store.upsert("b", _record("for-b"))
        any_store.clear("a")
        assert any_store.get("a") is None
        assert any_store.get("b").session_token == "for-b"

    def test_clear_missing_is_a_no_op(self, any_store) -> None:
        any_store.clear("nobody")
        assert any_store.get("nobody") is None

    def test_provider_name(self, any_store) -> None:
        assert any_store.get_provider_name()


# ─── SQLite specifics ─────────────────────────────────────────────


class TestSQLiteSessionStore:
    def test_initialize_creates_parent_dirs(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "sessions.db"
        SQLiteSessionStore(db_path=db_path).initialize()
        assert db_path.exists()

    def test_survives_a_new_instance(self, tmp_path: Path) -> None:
        db_path = tmp_path / "sessions.db"
        first = SQLiteSessionStore(db_path=db_path)
        first.initialize()
        first.upsert("a", _record(last_used_at=None))

        second = SQLiteSessionStore(db_path=db_path)
        second.initialize()
        loaded = second.get("a")
        assert loaded == _record(last_used_at=None)
        assert loaded.created_at.tzinfo is not None

    def test_clear_reaches_the_database(self, tmp_path: Path) -> None:
        db_path = tmp_path / "sessions.db"
        store = SQLiteSessionStore(db_path=db_path)
        store.initialize()
        store.upsert("a", _record())
        store.clear("a")

        fresh = SQLiteSessionStore(db_path=db_path)
        fresh.initialize()
        assert fresh.get("a") is None
        assert len(fresh) == 0

    def test_len_counts_rows(self, tmp_path: Path) -> None:
        store = SQLiteSessionStore(db_path=tmp_path / "sessions.db")
        store.initialize()
        store.upsert("a", _record())
        store.upsert("b", _record())
        store.upsert("a", _record("again"))
        assert len(store) == 2

    def test_corrupt_row_reads_as_missing(self, tmp_path: Path) -> None:
        db_path = tmp_path / "sessions.db"
        store = SQLiteSessionStore(db_path=db_path)
        store.initialize()

        conn = sqlite3.connect(str(db_path))
        conn.execute(
            "INSERT INTO sessions (account_id, session_json) VALUES (?, ?)",
            ("broken", "{not json"),
        )
        conn.commit()
        conn.close()

        assert store.get("broken") is None

    def test_custom_table_name(self, tmp_path: Path) -> None:
        store = SQLiteSessionStore(db_path=tmp_path / "s.db", table_name="guard_sessions")
        store.initialize()
        store.upsert("a", _record())
        assert store.get_provider_name() == "sqlite_session_store:guard_sessions"
        assert store.get("a") is not None

    def test_reopen_keeps_stale_rows(self, tmp_path: Path) -> None:
        db_path = tmp_path / "sessions.db"
        store = SQLiteSessionStore(db_path=db_path)
        store.initialize()
        store.upsert("old", _record())

        conn = sqlite3.connect(str(db_path))
        conn.execute("UPDATE sessions SET updated_at = '2000-01-01T00:00:00.000Z'")
        conn.commit()
        conn.close()

        again = SQLiteSessionStore(db_path=db_path)
        again.initialize()
        assert again.get("old") is not None


class TestMemorySessionStore:
    def test_len(self) -> None:
        store = MemorySessionStore()
        store.upsert("a", _record())
        store.upsert("b", _record())
        assert len(store) == 2
