"""
Upload dispatch: pick a parser from the file extension.
"""

from typing import Optional, Sequence
import structlog

from exceptions import UnsupportedFileTypeError
from models.dataset import ParsedDataset
from parsers.csv_parser import parse_csv
from parsers.excel_parser import parse_excel

logger = structlog.get_logger(__name__)

CSV_EXTENSIONS = {"csv", "txt"}
EXCEL_EXTENSIONS = {"xlsx", "xls"}


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def parse_upload(
    filename: str,
    content: bytes,
    required_columns: Optional[Sequence[str]] = None,
    max_scan_rows: Optional[int] = None,
) -> ParsedDataset:
    """
    Decode an uploaded file.

    Raises:
        UnsupportedFileTypeError: Extension is not csv/txt/xlsx/xls
        DatasetParseError: Content cannot be decoded
        HeaderNotFoundError: Spreadsheet has no recognizable header row
    """
    ext = file_extension(filename)
    logger.debug("parsing_upload", filename=filename, extension=ext, size=len(content))

    if ext in CSV_EXTENSIONS:
        return parse_csv(content)
    if ext in EXCEL_EXTENSIONS:
        return parse_excel(
            content,
            filename=filename,
            required_columns=required_columns,
            max_scan_rows=max_scan_rows,
        )

    raise UnsupportedFileTypeError(filename)
