"""
Delimited-text parser.

Decodes a CSV upload into a ParsedDataset: first row is the header,
header names are trimmed, blank lines skipped and numeric columns typed.
"""

from datetime import date, datetime
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Union
import math
import structlog

import pandas as pd

from exceptions import DatasetParseError
from models.dataset import ParsedDataset

logger = structlog.get_logger(__name__)

SAMPLE_FILENAME = "sample_data.csv"

SAMPLE_COLUMNS = ["UniqueID", "Location Code", "Customer", "Fabric Type", "GPU Model", "Quantity", "Order Date"]

SAMPLE_ROWS = [
    [1001, "LOC001", "Acme Corp", "Cotton", "RTX 3080", 5, "2025-01-15"],
    [1002, "LOC002", "TechGiant", "Polyester", "RTX 4090", 2, "2025-01-17"],
    [1003, "LOC001", "Acme Corp", "Wool", "RTX 3070", 3, "2025-01-20"],
    [1004, "LOC003", "DataSystems", "Nylon", "RTX 4080", 1, "2025-01-22"],
    [1005, "LOC002", "TechGiant", "Cotton", "RTX 3090", 4, "2025-01-25"],
    [1006, "LOC004", "CloudHost", "Silk", "RTX 3080", 2, "2025-01-27"],
    [1007, "LOC003", "DataSystems", "Polyester", "RTX 4070", 6, "2025-01-30"],
]


def to_python_value(value: Any) -> Any:
    """
    Convert a pandas cell into a plain JSON-friendly value.

    NaN/NaT -> None, integral floats -> int (pandas widens int columns
    with gaps to float), timestamps -> ISO-8601 text.
    """
    if value is None:
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, (pd.Timestamp, datetime)):
        if value.hour == 0 and value.minute == 0 and value.second == 0 and value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if hasattr(value, "item"):  # numpy scalar
        return to_python_value(value.item())
    return value


def parse_csv(file: Union[str, Path, bytes, BytesIO]) -> ParsedDataset:
    """
    Parse CSV content.

    Args:
        file: File path, raw bytes or file-like object

    Returns:
        ParsedDataset with typed values and trimmed header names

    Raises:
        DatasetParseError: If the content cannot be decoded as CSV
    """
    if isinstance(file, bytes):
        file = BytesIO(file)

    try:
        df = pd.read_csv(file, skip_blank_lines=True, keep_default_na=False, na_values=[""])
    except pd.errors.EmptyDataError:
        logger.info("csv_empty")
        return ParsedDataset()
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.error("csv_read_failed", error=str(e))
        raise DatasetParseError(
            message=f"CSV parsing error: {e}",
            details={"original_error": str(e)}
        )

    df.columns = [str(col).strip() for col in df.columns]

    rows = [
        {col: to_python_value(value) for col, value in record.items()}
        for record in df.astype(object).to_dict(orient="records")
    ]

    logger.info("csv_parsed", rows=len(rows), columns=len(df.columns))

    return ParsedDataset(rows=rows, columns=list(df.columns))


def build_sample_csv() -> str:
    """CSV text of the built-in 7-order sample dataset."""
    lines = [",".join(SAMPLE_COLUMNS)]
    lines.extend(",".join(str(value) for value in row) for row in SAMPLE_ROWS)
    return "\n".join(lines)
