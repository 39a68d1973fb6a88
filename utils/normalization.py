"""
Row normalization for parsed uploads.

Turns the raw values a parser produced into canonical ones:
blank -> None, strings trimmed, everything else untouched.
"""

import math
from typing import Any, Iterable, Mapping


def normalize_value(value: Any) -> Any:
    """
    Canonicalize one cell value.

    - None, NaN and empty/whitespace-only strings -> None
    - other strings -> stripped
    - anything else -> unchanged

    Examples:
        "  Acme Corp " -> "Acme Corp"
        ""             -> None
        1001           -> 1001
    """
    if value is None:
        return None

    if isinstance(value, float) and math.isnan(value):
        return None

    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None

    return value


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize every value of a row. Keys are kept as-is."""
    return {key: normalize_value(value) for key, value in row.items()}


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Normalize a sequence of rows."""
    return [normalize_row(row) for row in rows]
