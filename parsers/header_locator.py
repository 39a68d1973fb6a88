"""
Header row detection for spreadsheets.

Exported sheets often carry a title block or report metadata above the
real header. The locator scans the leading rows for the first one in
which every required column can be matched, then relabels the data rows
below it onto the canonical column names.

Matching per candidate row, in order:
    1. exact:            cell == "Customer"
    2. case-insensitive: cell.lower() == "customer"
    3. partial:          "customer" in cell.lower() or cell.lower() in "customer"

Each pass covers every required column before the next pass starts, and
each cell can satisfy at most one required column.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence
import math
import structlog

from exceptions import HeaderNotFoundError
from models.dataset import ParsedDataset

logger = structlog.get_logger(__name__)

DEFAULT_SCAN_ROWS = 10


@dataclass
class HeaderLocation:
    """Where the header row is and how its cells map to required columns."""
    row_index: int
    mapping: dict[str, str] = field(default_factory=dict)   # required name -> header text in sheet
    positions: dict[str, int] = field(default_factory=dict)  # required name -> column position


def _cell_text(value: Any) -> Optional[str]:
    """Stripped text of a cell, or None when blank."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None


def _match_row(row: Sequence[Any], required: Sequence[str]) -> tuple[dict[str, str], dict[str, int]]:
    """Map as many required columns as possible onto the cells of one row."""
    cells = [
        (pos, text)
        for pos, text in ((pos, _cell_text(value)) for pos, value in enumerate(row))
        if text is not None
    ]

    mapping: dict[str, str] = {}
    positions: dict[str, int] = {}
    used: set[int] = set()

    def take(column: str, pos: int, text: str) -> None:
        mapping[column] = text
        positions[column] = pos
        used.add(pos)

    passes = (
        lambda wanted, text: text == wanted,
        lambda wanted, text: text.lower() == wanted.lower(),
        lambda wanted, text: wanted.lower() in text.lower() or text.lower() in wanted.lower(),
    )

    for matches in passes:
        for column in required:
            if column in mapping:
                continue
            for pos, text in cells:
                if pos not in used and matches(column, text):
                    take(column, pos, text)
                    break

    return mapping, positions


def locate_header(
    rows: Sequence[Sequence[Any]],
    required_columns: Sequence[str],
    max_scan_rows: int = DEFAULT_SCAN_ROWS,
) -> HeaderLocation:
    """
    Find the first row that resolves every required column.

    Args:
        rows: Raw sheet rows (positional cells), top to bottom
        required_columns: Canonical column names
        max_scan_rows: How many leading rows to consider

    Returns:
        HeaderLocation of the first qualifying row

    Raises:
        HeaderNotFoundError: No row within the scan window qualifies
    """
    required = list(required_columns)
    limit = min(max_scan_rows, len(rows))

    for index in range(limit):
        mapping, positions = _match_row(rows[index], required)

        if len(mapping) == len(required):
            logger.debug(
                "header_row_found",
                row=index,
                mapping=mapping
            )
            return HeaderLocation(row_index=index, mapping=mapping, positions=positions)

        if mapping:
            logger.debug(
                "header_row_candidate_rejected",
                row=index,
                matched=len(mapping),
                required=len(required)
            )

    logger.warning("header_row_not_found", scanned_rows=limit)
    raise HeaderNotFoundError(required, limit)


def relabel_rows(rows: Sequence[Sequence[Any]], location: HeaderLocation) -> ParsedDataset:
    """
    Turn the rows below the header into column-name -> value mappings.

    Required columns get their canonical names, other columns keep their
    header text. Columns with a blank header and fully blank rows are dropped.
    """
    header = rows[location.row_index]
    canonical_by_pos = {pos: name for name, pos in location.positions.items()}

    names: dict[int, str] = {}
    taken: set[str] = set(location.positions)
    for pos, value in enumerate(header):
        if pos in canonical_by_pos:
            names[pos] = canonical_by_pos[pos]
            continue

        text = _cell_text(value)
        if text is None:
            continue

        # Same de-duplication pandas applies to repeated headers
        name, n = text, 1
        while name in taken:
            name = f"{text}.{n}"
            n += 1
        taken.add(name)
        names[pos] = name

    ordered = sorted(names.items())
    columns = [name for _, name in ordered]

    data: list[dict[str, Any]] = []
    for row in rows[location.row_index + 1:]:
        if all(_cell_text(value) is None for value in row):
            continue
        data.append({
            name: (row[pos] if pos < len(row) else None)
            for pos, name in ordered
        })

    return ParsedDataset(
        rows=data,
        columns=columns,
        header_row_index=location.row_index,
    )
