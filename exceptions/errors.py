"""
Custom exception classes for the application.

Every error raised by the tracker engine is an AppError carrying a code,
a human-readable message and an HTTP status for the API layer.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "MISSING_COLUMNS")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# DATASET ERRORS
# ===================

class EmptyDatasetError(ValidationError):
    """Upload contained no data rows."""

    def __init__(self, source: Optional[str] = None):
        super().__init__(
            code="EMPTY_DATASET",
            message="The uploaded file is empty.",
            details={"source": source} if source else None
        )


class MissingColumnsError(ValidationError):
    """Upload is missing one or more required columns."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            code="MISSING_COLUMNS",
            message=f"Missing required columns: {', '.join(self.missing)}",
            details={"missing": self.missing}
        )


class ReservedColumnError(ValidationError):
    """Upload uses a column name reserved for internal metadata."""

    def __init__(self, columns: list[str]):
        super().__init__(
            code="RESERVED_COLUMN",
            message=f"Column names may not start with '_': {', '.join(columns)}",
            details={"columns": list(columns)}
        )


class HeaderNotFoundError(ValidationError):
    """No spreadsheet row within the scan window holds every required column."""

    def __init__(self, required: list[str], scanned_rows: int):
        super().__init__(
            code="HEADER_NOT_FOUND",
            message=(
                f"Could not find a header row containing all required columns "
                f"in the first {scanned_rows} rows"
            ),
            details={"required": list(required), "scanned_rows": scanned_rows}
        )


class MissingIdentifierError(ValidationError):
    """A row has no value in the identifier column."""

    def __init__(self, row_index: int, column: str = "UniqueID"):
        self.row_index = row_index
        super().__init__(
            code="MISSING_IDENTIFIER",
            message=f"Row {row_index + 1} has no {column}",
            details={"row": row_index, "column": column}
        )


class DatasetParseError(ValidationError):
    """Uploaded file could not be decoded."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="DATASET_PARSE_ERROR",
            message=message,
            details=details
        )


class UnsupportedFileTypeError(AppError):
    """Uploaded file has an extension no parser handles (415)."""

    def __init__(self, filename: str):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Only .csv, .xlsx and .xls files are supported",
            status_code=415,
            details={"filename": filename}
        )


# ===================
# STORAGE ERRORS
# ===================

class StorageError(DatabaseError):
    """Keyed store I/O failed."""

    def __init__(self, operation: str, message: str, store: Optional[str] = None):
        super().__init__(
            operation=operation,
            message=message,
            details={"store": store} if store else None
        )
        self.code = "STORAGE_ERROR"


# ===================
# LOOKUP ERRORS
# ===================

class SnapshotNotFoundError(NotFoundError):
    """Snapshot not found."""

    def __init__(self, snapshot_id: str):
        super().__init__(
            resource="Snapshot",
            identifier=snapshot_id,
            code="SNAPSHOT_NOT_FOUND"
        )


class RecordNotFoundError(NotFoundError):
    """Record not found."""

    def __init__(self, identifier: str):
        super().__init__(
            resource="Record",
            identifier=identifier,
            code="RECORD_NOT_FOUND"
        )


class SettingNotFoundError(NotFoundError):
    """Setting not found."""

    def __init__(self, key: str):
        super().__init__(
            resource="Setting",
            identifier=key,
            code="SETTING_NOT_FOUND"
        )
