"""
Reconciliation engine.

Merges the normalized rows of one upload into the record store:

    identifier unseen  -> new record, first_seen = last_seen = now, status "new"
    identifier known   -> fields replaced, last_seen = now, first_seen kept,
                          status "updated"

Every touched record points at the new snapshot. The snapshot itself is
written only after all records are durable, so whoever reads "latest
snapshot" always finds its records.
"""

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence
import asyncio
import secrets
import string
import structlog

from config import settings
from exceptions import MissingIdentifierError
from models.record import Identifier, Record, RecordStatus, record_key
from models.snapshot import Snapshot, SnapshotSummary
from services.events import EventBus, SNAPSHOT_INGESTED
from services.record_service import RecordService
from services.snapshot_service import SnapshotService
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)

_KEY_ALPHABET = string.ascii_lowercase + string.digits


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationService:
    """
    Ingests normalized rows as a new snapshot.

    Rows sharing an identifier are collapsed in row order (the last row
    wins), so the outcome never depends on write completion order. Distinct
    identifiers are upserted concurrently, bounded by `concurrency`.
    """

    def __init__(
        self,
        database: Optional[TrackerDatabase] = None,
        records: Optional[RecordService] = None,
        snapshots: Optional[SnapshotService] = None,
        events: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        concurrency: Optional[int] = None,
        identifier_column: Optional[str] = None,
        synthesize_missing_identifiers: Optional[bool] = None,
    ):
        database = database or get_database()
        self.records = records or RecordService(database)
        self.snapshots = snapshots or SnapshotService(database)
        self.events = events or EventBus()
        self._clock = clock
        self.concurrency = concurrency or settings.ingest_concurrency
        self.identifier_column = identifier_column or settings.identifier_column
        self.synthesize_missing_identifiers = (
            settings.synthesize_missing_identifiers
            if synthesize_missing_identifiers is None
            else synthesize_missing_identifiers
        )

    # ===================
    # IDENTIFIERS
    # ===================

    def _synthesized_identifier(self, snapshot_id: str) -> str:
        suffix = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(8))
        return f"{snapshot_id}-{suffix}"

    def _identifier_of(self, snapshot_id: str, index: int, row: dict[str, Any]) -> Identifier:
        value = row.get(self.identifier_column)

        if value is None:
            if self.synthesize_missing_identifiers:
                return self._synthesized_identifier(snapshot_id)
            raise MissingIdentifierError(index, self.identifier_column)

        if isinstance(value, bool) or not isinstance(value, (int, str)):
            return str(value)
        return value

    def group_rows(
        self,
        snapshot_id: str,
        rows: Sequence[dict[str, Any]],
    ) -> "OrderedDict[str, list[tuple[Identifier, dict[str, Any]]]]":
        """
        Group rows by record key, keeping first-appearance order.

        Every row's identifier is resolved here, before anything is
        written, so a missing identifier leaves the stores untouched.

        Raises:
            MissingIdentifierError: A row has no identifier (unless
                synthesis is enabled)
        """
        groups: "OrderedDict[str, list[tuple[Identifier, dict[str, Any]]]]" = OrderedDict()
        for index, row in enumerate(rows):
            identifier = self._identifier_of(snapshot_id, index, row)
            groups.setdefault(record_key(identifier), []).append((identifier, row))
        return groups

    # ===================
    # MERGE
    # ===================

    async def _merge(
        self,
        snapshot_id: str,
        identifier: Identifier,
        row: dict[str, Any],
        now: str,
    ) -> RecordStatus:
        existing = await self.records.get(identifier)

        if existing is None:
            record = Record(
                identifier=identifier,
                fields=dict(row),
                snapshot_id=snapshot_id,
                first_seen=now,
                last_seen=now,
                status=RecordStatus.NEW,
            )
        else:
            record = Record(
                identifier=identifier,
                fields=dict(row),
                snapshot_id=snapshot_id,
                first_seen=existing.first_seen,
                last_seen=now,
                status=RecordStatus.UPDATED,
            )

        await self.records.put(record)
        return record.status

    async def ingest(
        self,
        snapshot_id: str,
        rows: Sequence[dict[str, Any]],
        source_filename: str,
        columns: Sequence[str],
        header_row_index: Optional[int] = None,
    ) -> SnapshotSummary:
        """
        Reconcile normalized rows into the record store as snapshot_id.

        Args:
            snapshot_id: Id of the snapshot being created
            rows: Normalized rows (already validated)
            source_filename: Uploaded file name
            columns: Column names in source order
            header_row_index: Sheet header row (spreadsheet sources)

        Returns:
            SnapshotSummary with new/updated identifier counts

        Raises:
            MissingIdentifierError: Before any write
            StorageError: Mid-way; upserts already applied stay applied
                and no snapshot is written
        """
        now = self._clock().isoformat()
        groups = self.group_rows(snapshot_id, rows)
        duplicates = [key for key, items in groups.items() if len(items) > 1]

        if duplicates:
            logger.warning(
                "duplicate_identifiers_in_upload",
                snapshot_id=snapshot_id,
                count=len(duplicates),
                identifiers=duplicates[:20]
            )

        logger.info(
            "ingest_started",
            snapshot_id=snapshot_id,
            rows=len(rows),
            identifiers=len(groups)
        )

        semaphore = asyncio.Semaphore(self.concurrency)

        async def apply(items: list[tuple[Identifier, dict[str, Any]]]) -> RecordStatus:
            identifier, row = items[-1]
            async with semaphore:
                return await self._merge(snapshot_id, identifier, row, now)

        # Let every upsert settle before reporting a failure
        results = await asyncio.gather(
            *(apply(items) for items in groups.values()),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "ingest_failed",
                snapshot_id=snapshot_id,
                failed=len(failures),
                applied=len(results) - len(failures),
                error=str(failures[0])
            )
            raise failures[0]

        snapshot = await self.snapshots.create(Snapshot(
            id=snapshot_id,
            timestamp=now,
            source_filename=source_filename,
            row_count=len(rows),
            columns=list(columns),
            header_row_index=header_row_index,
        ))

        summary = SnapshotSummary(
            snapshot=snapshot,
            new_count=sum(1 for status in results if status == RecordStatus.NEW),
            updated_count=sum(1 for status in results if status == RecordStatus.UPDATED),
            duplicate_identifiers=duplicates,
        )

        logger.info(
            "snapshot_ingested",
            snapshot_id=snapshot_id,
            rows=len(rows),
            new=summary.new_count,
            updated=summary.updated_count
        )

        await self.events.emit(SNAPSHOT_INGESTED, summary)
        return summary
