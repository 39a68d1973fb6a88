"""
Snapshot schemas.

A Snapshot describes one completed upload. Created once, never modified.
"""

from typing import Optional

from pydantic import Field

from models.base import BaseSchema
from models.record import Record


class Snapshot(BaseSchema):
    """Upload metadata."""

    id: str = Field(..., description="Time-derived id, increasing by creation order")
    timestamp: str = Field(..., description="ISO-8601 creation time")
    source_filename: str = Field(..., description="Uploaded file name")
    row_count: int = Field(..., ge=0, description="Rows in the upload")
    columns: list[str] = Field(default_factory=list, description="Columns in source order")
    header_row_index: Optional[int] = Field(
        None,
        ge=0,
        description="Sheet row the header was found on (spreadsheets only)"
    )


class SnapshotSummary(BaseSchema):
    """Result of one ingest."""

    snapshot: Snapshot
    new_count: int = 0
    updated_count: int = 0
    duplicate_identifiers: list[str] = Field(
        default_factory=list,
        description="Identifiers that appeared on more than one row; the last row won"
    )

    @property
    def snapshot_id(self) -> str:
        return self.snapshot.id


class LatestData(BaseSchema):
    """Most recent snapshot and the records it wrote."""

    snapshot: Optional[Snapshot] = None
    records: list[Record] = Field(default_factory=list)


class SnapshotListResponse(BaseSchema):
    """List of snapshots, newest first."""

    data: list[Snapshot]
    total: int
