"""
Structural validation of parsed datasets.

Runs before anything is written: an upload that fails here leaves the
stores untouched.
"""

from typing import Optional, Sequence
import structlog

from config import settings
from exceptions import EmptyDatasetError, MissingColumnsError, ReservedColumnError
from models.dataset import ParsedDataset
from models.record import is_internal_key

logger = structlog.get_logger(__name__)


def missing_columns(columns: Sequence[str], required: Sequence[str]) -> list[str]:
    """Required columns absent from `columns`, in required order."""
    present = set(columns)
    return [col for col in required if col not in present]


def validate_dataset(
    dataset: ParsedDataset,
    required_columns: Optional[Sequence[str]] = None,
) -> None:
    """
    Check a dataset can be reconciled.

    Args:
        dataset: Parser output
        required_columns: Defaults to settings.required_columns

    Raises:
        EmptyDatasetError: No rows (checked first, regardless of columns)
        MissingColumnsError: One or more required columns absent
        ReservedColumnError: A column uses the internal '_' prefix
    """
    required = list(required_columns or settings.required_columns)

    if dataset.is_empty:
        logger.warning("dataset_empty")
        raise EmptyDatasetError()

    missing = missing_columns(dataset.columns, required)
    if missing:
        logger.warning("dataset_missing_columns", missing=missing)
        raise MissingColumnsError(missing)

    reserved = [col for col in dataset.columns if is_internal_key(col)]
    if reserved:
        logger.warning("dataset_reserved_columns", columns=reserved)
        raise ReservedColumnError(reserved)

    logger.debug(
        "dataset_valid",
        rows=len(dataset.rows),
        columns=len(dataset.columns)
    )
