"""
Keyed stores.

The tracker keeps its state in independent key -> JSON value stores that
share one logical database namespace:

    records   - one current Record per identifier
    snapshots - one entry per completed upload
    history   - immutable record versions, keyed "<snapshot_id>:<identifier>"
    settings  - user preferences (survive a data wipe)

There are no cross-store transactions; each store guarantees atomic
per-key reads and writes. Two backends exist: an in-process dict (the
default, also used by tests) and Supabase tables with a `key` primary key
and a jsonb `value` column.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional
import asyncio
import copy
import structlog

from config import settings
from exceptions import StorageError

logger = structlog.get_logger(__name__)

RECORDS = "records"
SNAPSHOTS = "snapshots"
HISTORY = "history"
SETTINGS = "settings"

SUPABASE_PAGE_SIZE = 1000


class KeyedStore(ABC):
    """Async key -> JSON value store."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get_item(self, key: str) -> Optional[Any]:
        """Value for key, or None."""

    @abstractmethod
    async def set_item(self, key: str, value: Any) -> None:
        """Insert or replace the value for key."""

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete key if present."""

    @abstractmethod
    async def items(self, prefix: Optional[str] = None) -> list[tuple[str, Any]]:
        """All (key, value) pairs, optionally only keys starting with prefix."""

    @abstractmethod
    async def clear(self) -> None:
        """Delete every key."""

    async def values(self, prefix: Optional[str] = None) -> list[Any]:
        return [value for _, value in await self.items(prefix)]

    async def count(self) -> int:
        return len(await self.items())


class MemoryKeyedStore(KeyedStore):
    """
    Dict-backed store.

    Operations never await, so each one is atomic on the event loop.
    Values are deep-copied in and out so callers cannot mutate stored state.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._data: dict[str, Any] = {}

    async def get_item(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def set_item(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    async def items(self, prefix: Optional[str] = None) -> list[tuple[str, Any]]:
        return [
            (key, copy.deepcopy(value))
            for key, value in self._data.items()
            if prefix is None or key.startswith(prefix)
        ]

    async def clear(self) -> None:
        self._data.clear()

    async def count(self) -> int:
        return len(self._data)


class SupabaseKeyedStore(KeyedStore):
    """
    Store backed by a Supabase table (key text primary key, value jsonb).

    The Supabase client is synchronous; calls run in a worker thread so
    the event loop is never blocked.
    """

    def __init__(self, name: str, client, table: str):
        super().__init__(name)
        self.db = client
        self.table = table

    async def _run(self, operation: str, fn: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(fn)
        except Exception as e:
            logger.error(
                "store_operation_failed",
                store=self.name,
                operation=operation,
                error=str(e),
                error_type=type(e).__name__
            )
            raise StorageError(operation, str(e), store=self.name) from e

    async def get_item(self, key: str) -> Optional[Any]:
        def fetch():
            return (
                self.db.table(self.table)
                .select("value")
                .eq("key", key)
                .limit(1)
                .execute()
            )

        result = await self._run("select", fetch)
        return result.data[0]["value"] if result.data else None

    async def set_item(self, key: str, value: Any) -> None:
        await self._run(
            "upsert",
            lambda: self.db.table(self.table)
            .upsert({"key": key, "value": value}, on_conflict="key")
            .execute()
        )

    async def remove_item(self, key: str) -> None:
        await self._run(
            "delete",
            lambda: self.db.table(self.table).delete().eq("key", key).execute()
        )

    async def items(self, prefix: Optional[str] = None) -> list[tuple[str, Any]]:
        def fetch_page(start: int):
            query = self.db.table(self.table).select("key, value")
            if prefix is not None:
                query = query.like("key", f"{prefix}%")
            return (
                query.order("key")
                .range(start, start + SUPABASE_PAGE_SIZE - 1)
                .execute()
            )

        pairs: list[tuple[str, Any]] = []
        start = 0
        while True:
            result = await self._run("select", lambda: fetch_page(start))
            pairs.extend((row["key"], row["value"]) for row in result.data)
            if len(result.data) < SUPABASE_PAGE_SIZE:
                break
            start += SUPABASE_PAGE_SIZE

        return pairs

    async def clear(self) -> None:
        # PostgREST refuses an unfiltered delete
        await self._run(
            "delete",
            lambda: self.db.table(self.table).delete().neq("key", "").execute()
        )

    async def count(self) -> int:
        result = await self._run(
            "count",
            lambda: self.db.table(self.table).select("key", count="exact").limit(1).execute()
        )
        return result.count or 0


@dataclass
class TrackerDatabase:
    """The keyed stores of one namespace."""
    name: str
    records: KeyedStore
    snapshots: KeyedStore
    history: KeyedStore
    settings: KeyedStore

    async def clear_data(self) -> None:
        """Wipe records, snapshots and history. Preferences are kept."""
        await asyncio.gather(
            self.records.clear(),
            self.snapshots.clear(),
            self.history.clear(),
        )
        logger.info("tracker_data_cleared", database=self.name)


def table_name(namespace: str, store: str) -> str:
    """Supabase table for a store: 'snapshot-tracker-db' + 'records' -> 'snapshot_tracker_db_records'."""
    return f"{namespace.replace('-', '_')}_{store}"


def create_database(
    backend: Optional[str] = None,
    namespace: Optional[str] = None,
    client=None,
) -> TrackerDatabase:
    """
    Build the stores for a namespace.

    Args:
        backend: "memory" or "supabase" (defaults to settings.storage_backend)
        namespace: Logical database name (defaults to settings.database_name)
        client: Supabase client (defaults to the cached one)
    """
    backend = backend or settings.storage_backend
    namespace = namespace or settings.database_name

    if backend == "memory":
        stores = {name: MemoryKeyedStore(name) for name in (RECORDS, SNAPSHOTS, HISTORY, SETTINGS)}
    elif backend == "supabase":
        if client is None:
            from config import get_supabase_client
            client = get_supabase_client()
        stores = {
            name: SupabaseKeyedStore(name, client, table_name(namespace, name))
            for name in (RECORDS, SNAPSHOTS, HISTORY, SETTINGS)
        }
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.info("database_created", backend=backend, namespace=namespace)
    return TrackerDatabase(name=namespace, **stores)


_database: Optional[TrackerDatabase] = None


def get_database() -> TrackerDatabase:
    global _database
    if _database is None:
        _database = create_database()
    return _database


def reset_database() -> None:
    """Drop the cached database (next get_database() rebuilds it)."""
    global _database
    _database = None
