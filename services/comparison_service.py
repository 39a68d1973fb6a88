"""
Comparison engine.

Diffs two snapshots by identifier:

    new      - in target, not in base
    removed  - in base, not in target
    modified - in both, with at least one business field different

Both sides are the records as each snapshot wrote them (the record
history), not the current records, so a record left untouched by a later
upload still belongs to the older snapshot it came from.
"""

from typing import Optional
import asyncio
import structlog

from models.comparison import ComparisonResult, FieldChange, SnapshotChange
from models.record import Record, is_internal_key
from services.record_service import RecordService
from services.snapshot_service import SnapshotService
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)


def field_changes(before: Record, after: Record) -> list[FieldChange]:
    """
    Business fields whose values differ between two versions.

    A column present on only one side counts as None on the other.
    Columns keep the order they have in `after`, then any only in `before`.
    """
    keys = list(after.fields)
    keys.extend(k for k in before.fields if k not in after.fields)

    return [
        FieldChange(field=key, before=before.fields.get(key), after=after.fields.get(key))
        for key in keys
        if not is_internal_key(key) and before.fields.get(key) != after.fields.get(key)
    ]


class ComparisonService:
    """Snapshot diffs and the change trend across uploads."""

    def __init__(
        self,
        database: Optional[TrackerDatabase] = None,
        records: Optional[RecordService] = None,
        snapshots: Optional[SnapshotService] = None,
    ):
        database = database or get_database()
        self.records = records or RecordService(database)
        self.snapshots = snapshots or SnapshotService(database)

    async def compare(self, base_snapshot_id: str, target_snapshot_id: str) -> ComparisonResult:
        """
        Partition records into new / removed / modified.

        Unknown snapshot ids behave like empty snapshots.
        Lists follow store order.
        """
        base_records, target_records = await asyncio.gather(
            self.records.versions_of(base_snapshot_id),
            self.records.versions_of(target_snapshot_id),
        )

        base = {record.key: record for record in base_records}
        target = {record.key: record for record in target_records}

        new = [record for record in target_records if record.key not in base]
        removed = [record for record in base_records if record.key not in target]

        modified: list[Record] = []
        changes: dict[str, list[FieldChange]] = {}
        for record in target_records:
            previous = base.get(record.key)
            if previous is None:
                continue
            diff = field_changes(previous, record)
            if diff:
                modified.append(record)
                changes[record.key] = diff

        logger.info(
            "snapshots_compared",
            base=base_snapshot_id,
            target=target_snapshot_id,
            new=len(new),
            removed=len(removed),
            modified=len(modified)
        )

        return ComparisonResult(
            base_snapshot_id=base_snapshot_id,
            target_snapshot_id=target_snapshot_id,
            new_count=len(new),
            removed_count=len(removed),
            modified_count=len(modified),
            new=new,
            removed=removed,
            modified=modified,
            changes=changes,
        )

    async def change_history(self) -> list[SnapshotChange]:
        """
        Row count and new/removed counts per snapshot, oldest first.

        Each snapshot is compared with the one before it; the first has
        nothing to compare against and reports zero changes.
        """
        snapshots = list(reversed(await self.snapshots.get_all()))

        trend: list[SnapshotChange] = []
        previous = None
        for snapshot in snapshots:
            entry = SnapshotChange(
                snapshot_id=snapshot.id,
                timestamp=snapshot.timestamp,
                row_count=snapshot.row_count,
            )
            if previous is not None:
                result = await self.compare(previous.id, snapshot.id)
                entry.new_count = result.new_count
                entry.removed_count = result.removed_count
            trend.append(entry)
            previous = snapshot

        return trend
