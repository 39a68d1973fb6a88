"""
Parsed dataset handed from a file parser to the tracker engine.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ParsedDataset:
    """
    Rows decoded from a delimited-text file or a spreadsheet.

    rows: one mapping of column name -> raw value per data row
    columns: column names in source order
    header_row_index: 0-based sheet row the header was found on
                      (spreadsheet sources only)
    """
    rows: list[dict[str, Any]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    header_row_index: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    def __len__(self) -> int:
        return len(self.rows)
