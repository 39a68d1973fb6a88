"""
Record store.

Holds exactly one current Record per identifier plus an append-only
history of every version a snapshot wrote. The current record answers
"what do we know now"; the history answers "what did upload X contain",
which comparisons and snapshot-scoped queries need because a current
record only remembers the last snapshot that touched it.
"""

from typing import Optional
import asyncio
import structlog

from models.record import Identifier, Record, record_key
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)


def history_key(snapshot_id: str, identifier: Identifier) -> str:
    return f"{snapshot_id}:{record_key(identifier)}"


class RecordService:
    """Current records and their per-snapshot versions."""

    def __init__(self, database: Optional[TrackerDatabase] = None):
        self.database = database or get_database()
        self.store = self.database.records
        self.history = self.database.history

    # ===================
    # CURRENT RECORDS
    # ===================

    async def get(self, identifier: Identifier) -> Optional[Record]:
        """Current record for an identifier, or None."""
        data = await self.store.get_item(record_key(identifier))
        return Record(**data) if data else None

    async def put(self, record: Record) -> None:
        """
        Upsert the current record and append its version for record.snapshot_id.

        Both writes are keyed, so repeating a put is harmless.
        """
        payload = record.to_storage()
        await asyncio.gather(
            self.store.set_item(record.key, payload),
            self.history.set_item(history_key(record.snapshot_id, record.identifier), payload),
        )

    async def all(self) -> list[Record]:
        """Every current record, in store order."""
        return [Record(**data) for data in await self.store.values()]

    async def by_snapshot(self, snapshot_id: str) -> list[Record]:
        """Current records whose last write came from snapshot_id."""
        return [
            record for record in await self.all()
            if record.snapshot_id == snapshot_id
        ]

    async def count(self) -> int:
        return await self.store.count()

    # ===================
    # HISTORY
    # ===================

    async def versions_of(self, snapshot_id: str) -> list[Record]:
        """Records exactly as snapshot_id wrote them."""
        return [
            Record(**data)
            for data in await self.history.values(prefix=f"{snapshot_id}:")
        ]

    async def versions_for(self, identifier: Identifier) -> list[Record]:
        """Every stored version of one identifier, oldest snapshot first."""
        key = record_key(identifier)
        versions = [
            Record(**data)
            for stored_key, data in await self.history.items()
            if stored_key.split(":", 1)[1] == key
        ]
        return sorted(versions, key=lambda r: r.snapshot_id)
