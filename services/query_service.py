"""
Query layer: filter, search, distinct values and grouped counts.

Every call receives its criteria explicitly; nothing is remembered
between calls. Without a snapshot id the current records are queried;
with one, the records as that snapshot wrote them.
"""

from collections import Counter
from typing import Any, Iterable, Optional
import structlog

from models.query import GroupCount, LocationDetail, SummaryMetrics
from models.record import Record, is_internal_key
from services.record_service import RecordService
from services.storage import TrackerDatabase, get_database

logger = structlog.get_logger(__name__)

LOCATION_FIELD = "Location Code"
CUSTOMER_FIELD = "Customer"
FABRIC_FIELD = "Fabric Type"
GPU_FIELD = "GPU Model"

UNKNOWN_LABEL = "Unknown"


# ===================
# MATCHING
# ===================

def matches_criterion(value: Any, criterion: Any) -> bool:
    """
    One criterion against one field value.

    list -> membership (an empty list matches anything)
    str vs str -> case-insensitive substring
    otherwise -> equality
    """
    if isinstance(criterion, (list, tuple, set)):
        return len(criterion) == 0 or value in criterion

    if isinstance(criterion, str) and isinstance(value, str):
        return criterion.lower() in value.lower()

    return criterion == value


def matches_criteria(record: Record, criteria: dict[str, Any]) -> bool:
    """All criteria must match. Internal keys are ignored."""
    return all(
        matches_criterion(record.fields.get(key), criterion)
        for key, criterion in criteria.items()
        if not is_internal_key(key)
    )


def matches_query(record: Record, query: str) -> bool:
    """Case-insensitive substring of `query` in any non-null business field."""
    needle = query.lower()
    return any(
        needle in str(value).lower()
        for key, value in record.fields.items()
        if value is not None and not is_internal_key(key)
    )


def _sort_key(value: Any) -> tuple:
    # Numbers first in numeric order, then everything else as text
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, str(value))


def group_counts(records: Iterable[Record], field: str) -> list[GroupCount]:
    """
    Count records per value of a field, most common first.

    Blank values are counted under "Unknown".
    """
    counts = Counter(
        UNKNOWN_LABEL if record.fields.get(field) in (None, "") else record.fields.get(field)
        for record in records
    )
    ordered = sorted(counts.items(), key=lambda item: (-item[1], _sort_key(item[0])))
    return [GroupCount(value=value, count=count) for value, count in ordered]


class QueryService:
    """Read-only views over the record store."""

    def __init__(
        self,
        database: Optional[TrackerDatabase] = None,
        records: Optional[RecordService] = None,
    ):
        self.records = records or RecordService(database or get_database())

    async def _scope(self, snapshot_id: Optional[str]) -> list[Record]:
        if snapshot_id:
            return await self.records.versions_of(snapshot_id)
        return await self.records.all()

    async def filtered(
        self,
        criteria: Optional[dict[str, Any]] = None,
        snapshot_id: Optional[str] = None,
    ) -> list[Record]:
        """
        Records matching every criterion.

        Args:
            criteria: column -> list | str | value
            snapshot_id: Restrict to one snapshot

        Returns:
            Matching records in store order
        """
        criteria = criteria or {}
        result = [
            record for record in await self._scope(snapshot_id)
            if matches_criteria(record, criteria)
        ]
        logger.debug(
            "records_filtered",
            criteria=list(criteria),
            snapshot_id=snapshot_id,
            count=len(result)
        )
        return result

    async def search(self, query: Optional[str], snapshot_id: Optional[str] = None) -> list[Record]:
        """
        Free-text search across all business fields.

        An empty query returns nothing, or the whole snapshot when one
        is given.
        """
        query = (query or "").strip()
        if not query:
            return await self._scope(snapshot_id) if snapshot_id else []

        result = [
            record for record in await self._scope(snapshot_id)
            if matches_query(record, query)
        ]
        logger.debug("records_searched", query=query, snapshot_id=snapshot_id, count=len(result))
        return result

    async def distinct(self, field: str, snapshot_id: Optional[str] = None) -> list[Any]:
        """Unique non-null values of a field, ascending."""
        values = {
            record.fields.get(field)
            for record in await self._scope(snapshot_id)
            if record.fields.get(field) is not None
        }
        return sorted(values, key=_sort_key)

    async def grouped(self, field: str, snapshot_id: Optional[str] = None) -> list[GroupCount]:
        """Record counts per value of a field."""
        return group_counts(await self._scope(snapshot_id), field)

    async def summary(self, snapshot_id: Optional[str] = None) -> SummaryMetrics:
        """Total records and distinct locations / GPU models / fabric types."""
        records = await self._scope(snapshot_id)

        def distinct_count(field: str) -> int:
            return len({r.fields.get(field) for r in records if r.fields.get(field) is not None})

        return SummaryMetrics(
            total_records=len(records),
            locations=distinct_count(LOCATION_FIELD),
            gpu_models=distinct_count(GPU_FIELD),
            fabric_types=distinct_count(FABRIC_FIELD),
        )

    async def location_detail(
        self,
        location_code: str,
        snapshot_id: Optional[str] = None,
    ) -> LocationDetail:
        """Records at one location with customer list and breakdowns."""
        records = [
            record for record in await self._scope(snapshot_id)
            if record.fields.get(LOCATION_FIELD) is not None
            and str(record.fields.get(LOCATION_FIELD)) == location_code
        ]

        customers: list[str] = []
        for record in records:
            customer = record.fields.get(CUSTOMER_FIELD)
            if customer is not None and str(customer) not in customers:
                customers.append(str(customer))

        return LocationDetail(
            location_code=location_code,
            total_records=len(records),
            customers=customers,
            fabric_types=group_counts(records, FABRIC_FIELD),
            gpu_models=group_counts(records, GPU_FIELD),
            records=records,
        )
