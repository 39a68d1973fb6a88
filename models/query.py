"""
Query request and response schemas.
"""

from typing import Any, Optional

from pydantic import Field

from models.base import BaseSchema
from models.record import Record


class FilterRequest(BaseSchema):
    """
    Filter criteria.

    Each criterion is column -> value. A list value matches membership
    (an empty list matches everything), a string matches a
    case-insensitive substring, anything else must be equal.
    """

    criteria: dict[str, Any] = Field(default_factory=dict)
    snapshot_id: Optional[str] = None


class RecordListResponse(BaseSchema):
    """List of records."""

    data: list[Record]
    total: int


class GroupCount(BaseSchema):
    """Records sharing one value of a field."""

    value: Any
    count: int


class SummaryMetrics(BaseSchema):
    """Headline counts for a set of records."""

    total_records: int = 0
    locations: int = 0
    gpu_models: int = 0
    fabric_types: int = 0


class LocationDetail(BaseSchema):
    """Records at one location and how they break down."""

    location_code: str
    total_records: int = 0
    customers: list[str] = Field(default_factory=list)
    fabric_types: list[GroupCount] = Field(default_factory=list)
    gpu_models: list[GroupCount] = Field(default_factory=list)
    records: list[Record] = Field(default_factory=list)
