"""SQLite-backed persistent session store.

Persists per-account :class:`SessionRecord` values to a SQLite database on
disk so logins survive restarts.  Uses sync ``sqlite3``: each operation
touches one tiny JSON row, and the lifecycle service calls the store from
a single flow per account.

An in-memory cache avoids repeated deserialisation for hot accounts.
Rows are never deleted except through :meth:`clear`, so an expired
session still reads back and reports ``SESSION_EXPIRED``.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

import structlog

from steamguard.interfaces.session_store import ISessionStore
from steamguard.models.session import SessionRecord
from steamguard.utils.logging import get_logger

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS {table} (
    account_id   TEXT PRIMARY KEY,
    session_json TEXT NOT NULL,
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO {table} (account_id, session_json)
VALUES (?, ?)
ON CONFLICT(account_id)
DO UPDATE SET session_json = excluded.session_json,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT session_json FROM {table} WHERE account_id = ?;"

_DELETE_SQL = "DELETE FROM {table} WHERE account_id = ?;"

_COUNT_SQL = "SELECT COUNT(*) FROM {table};"


class SQLiteSessionStore(ISessionStore):
    """:class:`ISessionStore` backed by a SQLite table.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Parent directories are created
        on :meth:`initialize`.
    table_name:
        Table name to use.
    """

    def __init__(
        self,
        db_path: str | Path,
        table_name: str = "sessions",
    ) -> None:
        self._db_path = Path(db_path)
        self._table = table_name
        self._cache: dict[str, SessionRecord] = {}
        self._cache_lock = threading.Lock()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Create the database file and table if missing.

        Must be called once before use.
        """
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(_CREATE_TABLE_SQL.format(table=self._table))
            conn.commit()
        finally:
            conn.close()

        self._logger.info(
            "session_store_initialized",
            db_path=str(self._db_path),
            table=self._table,
            existing_sessions=len(self),
        )

    # ------------------------------------------------------------------
    # ISessionStore implementation
    # ------------------------------------------------------------------

    def get(self, account_id: str) -> SessionRecord | None:
        """Read from cache first, then SQLite."""
        with self._cache_lock:
            cached = self._cache.get(account_id)
        if cached is not None:
            return cached

        record = self._load_from_db(account_id)
        if record is not None:
            with self._cache_lock:
                self._cache[account_id] = record
        return record

    def upsert(self, account_id: str, record: SessionRecord) -> None:
        """Write to both SQLite and the in-memory cache."""
        conn = self._connect()
        try:
            conn.execute(
                _UPSERT_SQL.format(table=self._table),
                (account_id, record.model_dump_json()),
            )
            conn.commit()
        finally:
            conn.close()
        with self._cache_lock:
            self._cache[account_id] = record

    def clear(self, account_id: str) -> None:
        """Remove from both cache and SQLite (no-op if absent)."""
        with self._cache_lock:
            self._cache.pop(account_id, None)
        conn = self._connect()
        try:
            conn.execute(_DELETE_SQL.format(table=self._table), (account_id,))
            conn.commit()
        finally:
            conn.close()

    def __len__(self) -> int:
        conn = self._connect()
        try:
            row = conn.execute(_COUNT_SQL.format(table=self._table)).fetchone()
            return row[0] if row else 0
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        """Open a new SQLite connection with WAL mode for concurrency."""
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _load_from_db(self, account_id: str) -> SessionRecord | None:
        """Deserialize a SessionRecord from SQLite, or return None."""
        conn = self._connect()
        try:
            row = conn.execute(
                _SELECT_SQL.format(table=self._table),
                (account_id,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        try:
            return SessionRecord.model_validate_json(row[0])
        except ValueError as exc:
            self._logger.warning(
                "session_deserialize_failed",
                account_id=account_id,
                error=str(exc)[:200],
            )
            return None

    def get_provider_name(self) -> str:
        return f"sqlite_session_store:{self._table}"
