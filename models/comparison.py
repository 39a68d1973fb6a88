"""
Comparison schemas.

Derived on demand from two snapshots; never persisted.
"""

from typing import Any

from pydantic import Field

from models.base import BaseSchema
from models.record import Record


class FieldChange(BaseSchema):
    """One business field that differs between two versions of a record."""

    field: str
    before: Any = None
    after: Any = None


class ComparisonResult(BaseSchema):
    """New / removed / modified partition between a base and a target snapshot."""

    base_snapshot_id: str
    target_snapshot_id: str
    new_count: int = 0
    removed_count: int = 0
    modified_count: int = 0
    new: list[Record] = Field(default_factory=list)
    removed: list[Record] = Field(default_factory=list)
    modified: list[Record] = Field(default_factory=list)
    changes: dict[str, list[FieldChange]] = Field(
        default_factory=dict,
        description="Record key -> changed fields, for modified records"
    )


class SnapshotChange(BaseSchema):
    """One point of the upload history trend."""

    snapshot_id: str
    timestamp: str
    row_count: int
    new_count: int = 0
    removed_count: int = 0
