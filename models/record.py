"""
Record schemas.

A Record is one tracked order, keyed by its natural identifier
(the UniqueID column). Reconciliation metadata lives in typed attributes;
`fields` only ever holds business columns.
"""

from enum import Enum
from typing import Any, Union

from pydantic import Field, field_validator

from models.base import BaseSchema

# Column names starting with this prefix are reserved for internal metadata
INTERNAL_PREFIX = "_"

Identifier = Union[int, str]


def is_internal_key(key: str) -> bool:
    """True for reserved metadata keys."""
    return str(key).startswith(INTERNAL_PREFIX)


def record_key(identifier: Identifier) -> str:
    """Storage key for an identifier. 1001 and "1001" share a key."""
    return str(identifier).strip()


class RecordStatus(str, Enum):
    """Outcome of the most recent merge."""
    NEW = "new"
    UPDATED = "updated"


class Record(BaseSchema):
    """
    One tracked business entity with reconciliation metadata.

    first_seen is written once; last_seen moves on every ingest that
    touches the identifier.
    """

    identifier: Identifier = Field(..., description="Natural key (UniqueID)")
    fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Business columns: column name -> str | number | None"
    )
    snapshot_id: str = Field(..., description="Snapshot that last wrote this record")
    first_seen: str = Field(..., description="ISO-8601 time of first ingest")
    last_seen: str = Field(..., description="ISO-8601 time of latest ingest")
    status: RecordStatus = Field(..., description="new or updated")

    @field_validator("fields")
    @classmethod
    def no_internal_keys(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Business fields may not use the reserved prefix."""
        reserved = [k for k in v if is_internal_key(k)]
        if reserved:
            raise ValueError(f"Reserved field names: {', '.join(reserved)}")
        return v

    @property
    def key(self) -> str:
        return record_key(self.identifier)

    def to_storage(self) -> dict:
        """JSON-safe dict for the keyed stores."""
        return self.model_dump(mode="json")
