"""SQLite key-value store."""

import json
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path


class IKeyValueStore(Protocol):
    """Persistent key-value store (replaces browser-local storage)."""

    async def init(self) -> None:
        """Open the database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or default if the key is unset."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        ...

    async def keys(self) -> list[str]:
        """All stored keys, sorted."""
        ...

    async def clear(self) -> None:
        """Remove everything."""
        ...


class KeyValueStore:
    """aiosqlite-backed key-value store."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a value, or default if the key is unset."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()

        if not row:
            return default
        return json.loads(row[0])

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT OR REPLACE INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            """,
            (key, json.dumps(value)),
        )
        await self._conn.commit()

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute(
            "DELETE FROM kv_store WHERE key = ?",
            (key,),
        )
        await self._conn.commit()
        return cursor.rowcount > 0

    async def keys(self) -> list[str]:
        """All stored keys, sorted."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        cursor = await self._conn.execute("SELECT key FROM kv_store ORDER BY key")
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def clear(self) -> None:
        """Remove everything."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute("DELETE FROM kv_store")
        await self._conn.commit()
