"""Async SQLite access for the transaction journal.

``aiosqlite`` keeps queries off the event loop. The schema is versioned
through ``PRAGMA user_version``; each entry in ``MIGRATIONS`` moves the
file one version forward.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import aiosqlite

logger = logging.getLogger("mvx_agent.storage")

MIGRATIONS: list[str] = [
    # 1: transaction journal
    """\
    CREATE TABLE IF NOT EXISTS transactions (
        tx_hash TEXT PRIMARY KEY,
        action TEXT NOT NULL,
        caller_id TEXT DEFAULT '',
        network TEXT NOT NULL,
        sender TEXT NOT NULL,
        receiver TEXT NOT NULL,
        value TEXT NOT NULL,
        nonce INTEGER NOT NULL,
        status TEXT DEFAULT 'pending',
        reason TEXT,
        submitted_at TIMESTAMP NOT NULL,
        resolved_at TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_transactions_submitted
        ON transactions (submitted_at DESC);
    """,
]


class Database:
    """One aiosqlite connection with dict rows and committed writes.

    Parameters
    ----------
    db_path:
        File path, or ``":memory:"``. Missing parent directories are
        created on :meth:`connect`.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._conn: Optional[aiosqlite.Connection] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        await self._conn.execute("PRAGMA journal_mode=WAL;")
        await self._migrate()

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def execute(self, sql: str, params: tuple = ()) -> aiosqlite.Cursor:
        """Run a write statement and commit. The cursor exposes ``rowcount``."""
        cursor = await self.connection.execute(sql, params)
        await self.connection.commit()
        return cursor

    async def fetch_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        async with self.connection.execute(sql, params) as cursor:
            row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, params: tuple = ()) -> list[dict]:
        async with self.connection.execute(sql, params) as cursor:
            return [dict(r) for r in await cursor.fetchall()]

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def schema_version(self) -> int:
        async with self.connection.execute("PRAGMA user_version;") as cursor:
            row = await cursor.fetchone()
        return int(row[0])

    async def _migrate(self) -> None:
        current = await self.schema_version()
        for version, script in enumerate(MIGRATIONS[current:], start=current + 1):
            await self.connection.executescript(script)
            # PRAGMA does not take bound parameters
            await self.connection.execute(f"PRAGMA user_version = {version};")
            await self.connection.commit()
            logger.debug(f"Journal schema migrated to version {version}")
