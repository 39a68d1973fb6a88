"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.dataset import ParsedDataset
from models.record import (
    INTERNAL_PREFIX,
    Identifier,
    Record,
    RecordStatus,
    is_internal_key,
    record_key,
)
from models.snapshot import (
    Snapshot,
    SnapshotSummary,
    LatestData,
    SnapshotListResponse,
)
from models.comparison import (
    FieldChange,
    ComparisonResult,
    SnapshotChange,
)
from models.query import (
    FilterRequest,
    RecordListResponse,
    GroupCount,
    SummaryMetrics,
    LocationDetail,
)
from models.settings import (
    SettingUpdate,
    SettingResponse,
    SettingListResponse,
)

__all__ = [
    "BaseSchema",
    "ParsedDataset",
    "INTERNAL_PREFIX",
    "Identifier",
    "Record",
    "RecordStatus",
    "is_internal_key",
    "record_key",
    "Snapshot",
    "SnapshotSummary",
    "LatestData",
    "SnapshotListResponse",
    "FieldChange",
    "ComparisonResult",
    "SnapshotChange",
    "FilterRequest",
    "RecordListResponse",
    "GroupCount",
    "SummaryMetrics",
    "LocationDetail",
    "SettingUpdate",
    "SettingResponse",
    "SettingListResponse",
]
