"""Table-like record store with an in-memory and a Redis backend.

Rows are plain JSON-compatible dicts keyed by their ``id`` field.  Filters
are equality matches on top-level keys, which is all the chat and admin
services need.  The in-memory backend is the default (demo mode); the Redis
backend keeps one hash per table with ``orjson``-encoded rows.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Protocol, runtime_checkable

import orjson
import structlog

logger = structlog.get_logger(__name__)

Row = dict[str, Any]


class StoreError(Exception):
    """Raised when a backend cannot complete an operation."""


def _matches(row: Row, filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(row.get(key) == value for key, value in filters.items())


# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class RecordStore(Protocol):
    """Async record store interface."""

    async def insert(self, table: str, row: Row) -> Row: ...

    async def get(self, table: str, row_id: str) -> Row | None: ...

    async def select(self, table: str, filters: dict[str, Any] | None = None) -> list[Row]: ...

    async def update(self, table: str, row_id: str, changes: Row) -> Row | None: ...

    async def delete(self, table: str, row_id: str) -> bool: ...

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int: ...


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class InMemoryRecordStore:
    """Dict-of-dicts store guarded by an :class:`asyncio.Lock`.

    Rows are deep-copied on the way in and out so callers can never alias
    stored state.  Insertion order is preserved per table.
    """

    __slots__ = ("_lock", "_tables")

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, Row]] = {}
        self._lock = asyncio.Lock()

    async def insert(self, table: str, row: Row) -> Row:
        if "id" not in row:
            raise StoreError(f"row for table {table!r} has no id")
        async with self._lock:
            rows = self._tables.setdefault(table, {})
            if row["id"] in rows:
                raise StoreError(f"duplicate id {row['id']!r} in table {table!r}")
            rows[row["id"]] = copy.deepcopy(row)
        return copy.deepcopy(row)

    async def get(self, table: str, row_id: str) -> Row | None:
        async with self._lock:
            row = self._tables.get(table, {}).get(row_id)
            return copy.deepcopy(row) if row is not None else None

    async def select(self, table: str, filters: dict[str, Any] | None = None) -> list[Row]:
        async with self._lock:
            return [copy.deepcopy(r) for r in self._tables.get(table, {}).values() if _matches(r, filters)]

    async def update(self, table: str, row_id: str, changes: Row) -> Row | None:
        async with self._lock:
            row = self._tables.get(table, {}).get(row_id)
            if row is None:
                return None
            row.update(copy.deepcopy(changes))
            return copy.deepcopy(row)

    async def delete(self, table: str, row_id: str) -> bool:
        async with self._lock:
            return self._tables.get(table, {}).pop(row_id, None) is not None

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        async with self._lock:
            return sum(1 for r in self._tables.get(table, {}).values() if _matches(r, filters))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Redis backend
# ---------------------------------------------------------------------------


class RedisRecordStore:
    """Redis-backed store using ``redis.asyncio`` with connection pooling.

    Each table is a hash ``<namespace><table>`` mapping row id to the
    orjson-encoded row.  Filtering happens client-side after ``HGETALL``.
    """

    __slots__ = ("_namespace", "_pool", "_redis")

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        namespace: str = "nagarseva:",
        max_connections: int = 20,
    ) -> None:
        import redis.asyncio as aioredis

        self._namespace = namespace
        self._pool = aioredis.ConnectionPool.from_url(
            url,
            max_connections=max_connections,
            decode_responses=False,
        )
        self._redis = aioredis.Redis(connection_pool=self._pool)

    def _key(self, table: str) -> str:
        return f"{self._namespace}{table}"

    async def _all(self, table: str) -> list[Row]:
        raw = await self._redis.hgetall(self._key(table))
        return [orjson.loads(value) for value in raw.values()]

    # -- RecordStore interface -------------------------------------------------

    async def insert(self, table: str, row: Row) -> Row:
        if "id" not in row:
            raise StoreError(f"row for table {table!r} has no id")
        created = await self._redis.hsetnx(self._key(table), row["id"], orjson.dumps(row))
        if not created:
            raise StoreError(f"duplicate id {row['id']!r} in table {table!r}")
        return row

    async def get(self, table: str, row_id: str) -> Row | None:
        raw = await self._redis.hget(self._key(table), row_id)
        return orjson.loads(raw) if raw is not None else None

    async def select(self, table: str, filters: dict[str, Any] | None = None) -> list[Row]:
        return [r for r in await self._all(table) if _matches(r, filters)]

    async def update(self, table: str, row_id: str, changes: Row) -> Row | None:
        row = await self.get(table, row_id)
        if row is None:
            return None
        row.update(changes)
        await self._redis.hset(self._key(table), row_id, orjson.dumps(row))
        return row

    async def delete(self, table: str, row_id: str) -> bool:
        return bool(await self._redis.hdel(self._key(table), row_id))

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        if not filters:
            return int(await self._redis.hlen(self._key(table)))
        return len(await self.select(table, filters))

    # -- Lifecycle -------------------------------------------------------------

    async def ping(self) -> bool:
        """Return *True* if the Redis server is reachable."""
        try:
            return bool(await self._redis.ping())
        except Exception:
            return False

    async def close(self) -> None:
        await self._redis.aclose()
        await self._pool.aclose()


def create_store(backend: str, redis_url: str) -> InMemoryRecordStore | RedisRecordStore:
    """Build the configured record store backend."""
    if backend == "redis":
        logger.info("store.backend_selected", backend="redis")
        return RedisRecordStore(url=redis_url)
    logger.info("store.backend_selected", backend="memory")
    return InMemoryRecordStore()
