"""
Spreadsheet parser.

Reads the first sheet of an .xlsx/.xls upload without assuming where the
header is, then hands the raw rows to the header locator.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence, Union
import structlog

import pandas as pd

from config import settings
from exceptions import DatasetParseError
from models.dataset import ParsedDataset
from parsers.csv_parser import to_python_value
from parsers.header_locator import locate_header, relabel_rows

logger = structlog.get_logger(__name__)


def _engine_for(filename: Optional[str]) -> str:
    """xlrd for legacy .xls, openpyxl for everything else."""
    if filename and filename.lower().endswith(".xls"):
        return "xlrd"
    return "openpyxl"


def read_sheet_rows(
    file: Union[str, Path, bytes, BytesIO],
    filename: Optional[str] = None,
) -> list[list]:
    """
    Read the first sheet as positional rows.

    Raises:
        DatasetParseError: If the workbook cannot be opened
    """
    if isinstance(file, bytes):
        file = BytesIO(file)
    if filename is None and isinstance(file, (str, Path)):
        filename = str(file)

    try:
        df = pd.read_excel(
            file,
            sheet_name=0,
            header=None,
            engine=_engine_for(filename),
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise DatasetParseError(
            message=f"Excel parsing error: {e}",
            details={"original_error": str(e)}
        )

    return [
        [to_python_value(value) for value in row]
        for row in df.astype(object).values.tolist()
    ]


def parse_excel(
    file: Union[str, Path, bytes, BytesIO],
    filename: Optional[str] = None,
    required_columns: Optional[Sequence[str]] = None,
    max_scan_rows: Optional[int] = None,
) -> ParsedDataset:
    """
    Parse a spreadsheet upload.

    Args:
        file: File path, raw bytes or file-like object
        filename: Original name, used to pick the engine
        required_columns: Defaults to settings.required_columns
        max_scan_rows: Defaults to settings.header_scan_rows

    Returns:
        ParsedDataset relabeled onto canonical column names, with
        header_row_index set

    Raises:
        DatasetParseError: If the workbook cannot be opened
        HeaderNotFoundError: If no header row is found
    """
    logger.info("parsing_excel", file_type=type(file).__name__, filename=filename)

    rows = read_sheet_rows(file, filename)
    if not rows:
        logger.info("excel_empty")
        return ParsedDataset()

    location = locate_header(
        rows,
        required_columns or settings.required_columns,
        max_scan_rows or settings.header_scan_rows,
    )
    dataset = relabel_rows(rows, location)

    logger.info(
        "excel_parsed",
        header_row=location.row_index,
        rows=len(dataset.rows),
        columns=len(dataset.columns)
    )
    return dataset
