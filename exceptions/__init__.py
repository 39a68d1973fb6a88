"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    DatabaseError,

    # Dataset
    EmptyDatasetError,
    MissingColumnsError,
    ReservedColumnError,
    HeaderNotFoundError,
    MissingIdentifierError,
    DatasetParseError,
    UnsupportedFileTypeError,

    # Storage
    StorageError,

    # Lookups
    SnapshotNotFoundError,
    RecordNotFoundError,
    SettingNotFoundError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",

    # Dataset
    "EmptyDatasetError",
    "MissingColumnsError",
    "ReservedColumnError",
    "HeaderNotFoundError",
    "MissingIdentifierError",
    "DatasetParseError",
    "UnsupportedFileTypeError",

    # Storage
    "StorageError",

    # Lookups
    "SnapshotNotFoundError",
    "RecordNotFoundError",
    "SettingNotFoundError",
]
