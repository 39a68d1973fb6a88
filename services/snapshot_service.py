"""
Snapshot store.

One entry per completed upload, keyed by a time-derived id.
"""

from typing import Callable, Optional
import time
import structlog

from models.snapshot import Snapshot
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)

SNAPSHOT_ID_WIDTH = 13  # epoch milliseconds, fixed width so ids sort as text


class SnapshotService:
    """Upload metadata."""

    def __init__(
        self,
        database: Optional[TrackerDatabase] = None,
        millis: Callable[[], int] = lambda: time.time_ns() // 1_000_000,
    ):
        self.database = database or get_database()
        self.store = self.database.snapshots
        self._millis = millis
        self._last_id = 0

    def next_id(self) -> str:
        """
        New snapshot id: epoch milliseconds, strictly increasing.

        Two uploads within the same millisecond (or a clock step backwards)
        get the previous id + 1.
        """
        candidate = max(self._millis(), self._last_id + 1)
        self._last_id = candidate
        return str(candidate).zfill(SNAPSHOT_ID_WIDTH)

    async def create(self, snapshot: Snapshot) -> Snapshot:
        """Persist a snapshot. Snapshots are never updated afterwards."""
        await self.store.set_item(snapshot.id, snapshot.model_dump(mode="json"))
        logger.info(
            "snapshot_created",
            snapshot_id=snapshot.id,
            source_filename=snapshot.source_filename,
            row_count=snapshot.row_count
        )
        return snapshot

    async def get(self, snapshot_id: str) -> Optional[Snapshot]:
        data = await self.store.get_item(snapshot_id)
        return Snapshot(**data) if data else None

    async def get_all(self) -> list[Snapshot]:
        """All snapshots, newest first."""
        snapshots = [Snapshot(**data) for data in await self.store.values()]
        return sorted(snapshots, key=lambda s: (s.timestamp, s.id), reverse=True)

    async def latest(self) -> Optional[Snapshot]:
        snapshots = await self.get_all()
        return snapshots[0] if snapshots else None
