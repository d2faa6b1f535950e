from contextlib import asynccontextmanager

import aiosqlite

from . import utils

SCHEMA = """
CREATE TABLE IF NOT EXISTS blobs (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

async def _apply_sqlite_pragmas(db: aiosqlite.Connection):
    await db.execute("PRAGMA busy_timeout = 5000;")
    await db.execute("PRAGMA journal_mode = WAL;")
    await db.execute("PRAGMA synchronous = NORMAL;")


class BlobStore:
    """String blobs by string key, on a single SQLite file."""

    def __init__(self, path: str):
        self.path = str(path)
        self._ready = False

    @asynccontextmanager
    async def _connect(self):
        async with aiosqlite.connect(self.path) as conn:
            await _apply_sqlite_pragmas(conn)
            if not self._ready:
                await conn.executescript(SCHEMA)
                await conn.commit()
                self._ready = True
            yield conn

    async def init(self):
        async with self._connect():
            pass

    async def get(self, key: str) -> str | None:
        async with self._connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM blobs WHERE key = ? LIMIT 1",
                (str(key),),
            )
            row = await cur.fetchone()
            await cur.close()
        return str(row[0]) if row and row[0] is not None else None

    async def put(self, key: str, value: str, updated_at: str | None = None):
        ts = str(updated_at or utils.utc_now_z())
        async with self._connect() as conn:
            await conn.execute(
                """
                INSERT INTO blobs (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                  value = excluded.value,
                  updated_at = excluded.updated_at
                """,
                (str(key), str(value), ts),
            )
            await conn.commit()

    async def delete(self, key: str) -> bool:
        async with self._connect() as conn:
            cur = await conn.execute("DELETE FROM blobs WHERE key = ?", (str(key),))
            deleted = cur.rowcount
            await cur.close()
            await conn.commit()
        return bool(deleted)
