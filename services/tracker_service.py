"""
Tracker facade.

The single entry point the presentation layer talks to: upload a dataset,
browse snapshots, query records, compare uploads, wipe data. Each method
only returns once its own writes are durable.
"""

from datetime import datetime
from typing import Any, Callable, Optional
import structlog

from config import settings
from models.comparison import ComparisonResult, SnapshotChange
from models.dataset import ParsedDataset
from models.query import GroupCount, LocationDetail, SummaryMetrics
from models.record import Identifier, Record
from models.snapshot import LatestData, Snapshot, SnapshotSummary
from parsers.csv_parser import SAMPLE_FILENAME, build_sample_csv
from parsers.upload_parser import parse_upload
from parsers.validation import validate_dataset
from services.comparison_service import ComparisonService
from services.events import DATA_CLEARED, EventBus
from services.query_service import QueryService
from services.reconciliation_service import ReconciliationService, utc_now
from services.record_service import RecordService
from services.settings_service import SettingsService
from services.snapshot_service import SnapshotService
from services.storage import TrackerDatabase, get_database
from utils.normalization import normalize_rows

logger = structlog.get_logger(__name__)


class TrackerService:
    """Upload reconciliation, history and query API."""

    def __init__(
        self,
        database: Optional[TrackerDatabase] = None,
        events: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        snapshots: Optional[SnapshotService] = None,
    ):
        self.database = database or get_database()
        self.events = events or EventBus()

        self.records = RecordService(self.database)
        self.snapshots = snapshots or SnapshotService(self.database)
        self.reconciliation = ReconciliationService(
            self.database,
            records=self.records,
            snapshots=self.snapshots,
            events=self.events,
            clock=clock,
        )
        self.comparison = ComparisonService(self.database, records=self.records, snapshots=self.snapshots)
        self.queries = QueryService(self.database, records=self.records)
        self.preferences = SettingsService(self.database)

    # ===================
    # INGESTION
    # ===================

    async def ingest_dataset(self, dataset: ParsedDataset, source_filename: str) -> SnapshotSummary:
        """
        Validate, normalize and reconcile a parsed dataset.

        Raises:
            EmptyDatasetError, MissingColumnsError, ReservedColumnError,
            MissingIdentifierError: Before any write
            StorageError: During reconciliation
        """
        validate_dataset(dataset, settings.required_columns)
        rows = normalize_rows(dataset.rows)
        snapshot_id = self.snapshots.next_id()

        return await self.reconciliation.ingest(
            snapshot_id,
            rows,
            source_filename=source_filename,
            columns=dataset.columns,
            header_row_index=dataset.header_row_index,
        )

    async def ingest(self, dataset: ParsedDataset, source_filename: str) -> str:
        """Ingest a dataset and return the new snapshot id."""
        summary = await self.ingest_dataset(dataset, source_filename)
        return summary.snapshot_id

    async def ingest_file(self, filename: str, content: bytes) -> SnapshotSummary:
        """
        Parse an uploaded file and ingest it.

        Raises:
            UnsupportedFileTypeError, DatasetParseError, HeaderNotFoundError
            in addition to everything ingest_dataset raises
        """
        logger.info("upload_received", filename=filename, size=len(content))
        dataset = parse_upload(
            filename,
            content,
            required_columns=settings.required_columns,
            max_scan_rows=settings.header_scan_rows,
        )
        return await self.ingest_dataset(dataset, filename)

    async def load_sample_data(self) -> SnapshotSummary:
        """Ingest the built-in 7-order sample dataset."""
        return await self.ingest_file(SAMPLE_FILENAME, build_sample_csv().encode("utf-8"))

    # ===================
    # SNAPSHOTS
    # ===================

    async def list_snapshots(self) -> list[Snapshot]:
        """All snapshots, newest first."""
        return await self.snapshots.get_all()

    async def get_snapshot(self, snapshot_id: str) -> Optional[Snapshot]:
        return await self.snapshots.get(snapshot_id)

    async def records_of(self, snapshot_id: str) -> list[Record]:
        """Records as the snapshot wrote them."""
        return await self.records.versions_of(snapshot_id)

    async def latest(self) -> LatestData:
        """Most recent snapshot and its records; empty when nothing was uploaded."""
        snapshot = await self.snapshots.latest()
        if snapshot is None:
            return LatestData()
        return LatestData(snapshot=snapshot, records=await self.records_of(snapshot.id))

    # ===================
    # RECORDS
    # ===================

    async def get_record(self, identifier: Identifier) -> Optional[Record]:
        return await self.records.get(identifier)

    async def record_history(self, identifier: Identifier) -> list[Record]:
        """Every version of a record, oldest first."""
        return await self.records.versions_for(identifier)

    async def filtered(
        self,
        criteria: Optional[dict[str, Any]] = None,
        snapshot_id: Optional[str] = None,
    ) -> list[Record]:
        return await self.queries.filtered(criteria, snapshot_id)

    async def search(self, query: Optional[str], snapshot_id: Optional[str] = None) -> list[Record]:
        return await self.queries.search(query, snapshot_id)

    async def distinct(self, field: str, snapshot_id: Optional[str] = None) -> list[Any]:
        return await self.queries.distinct(field, snapshot_id)

    async def grouped(self, field: str, snapshot_id: Optional[str] = None) -> list[GroupCount]:
        return await self.queries.grouped(field, snapshot_id)

    async def summary(self, snapshot_id: Optional[str] = None) -> SummaryMetrics:
        return await self.queries.summary(snapshot_id)

    async def location_detail(self, location_code: str, snapshot_id: Optional[str] = None) -> LocationDetail:
        return await self.queries.location_detail(location_code, snapshot_id)

    # ===================
    # COMPARISON
    # ===================

    async def compare(self, base_snapshot_id: str, target_snapshot_id: str) -> ComparisonResult:
        return await self.comparison.compare(base_snapshot_id, target_snapshot_id)

    async def change_history(self) -> list[SnapshotChange]:
        return await self.comparison.change_history()

    # ===================
    # MAINTENANCE
    # ===================

    async def clear_all(self) -> None:
        """Delete every record, version and snapshot. Preferences survive."""
        await self.database.clear_data()
        await self.events.emit(DATA_CLEARED)


_tracker_service: Optional[TrackerService] = None


def get_tracker_service() -> TrackerService:
    global _tracker_service
    if _tracker_service is None:
        _tracker_service = TrackerService()
    return _tracker_service
