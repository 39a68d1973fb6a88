"""
Unit tests for spreadsheet header detection.
"""

import pytest

from exceptions import HeaderNotFoundError
from parsers.header_locator import locate_header, relabel_rows

from tests.factories import REQUIRED_COLUMNS


def sheet_with_metadata() -> list[list]:
    """Two metadata rows, header on row 2, then data."""
    return [
        ["Weekly order export", None, None, None, None, None],
        ["Generated 2025-01-31", None, None, None, None, None],
        ["UniqueID", "Location Code", "Customer", "Fabric Type", "GPU Model", "Quantity"],
        [1001, "LOC001", "Acme Corp", "Cotton", "RTX 3080", 5],
        [1002, "LOC002", "TechGiant", "Polyester", "RTX 4090", 2],
    ]


class TestLocateHeader:
    """Tests for locate_header."""

    def test_header_on_first_row(self):
        rows = sheet_with_metadata()[2:]
        location = locate_header(rows, REQUIRED_COLUMNS)
        assert location.row_index == 0

    def test_skips_metadata_rows(self):
        location = locate_header(sheet_with_metadata(), REQUIRED_COLUMNS)

        assert location.row_index == 2
        assert location.positions["UniqueID"] == 0
        assert location.positions["GPU Model"] == 4

    def test_case_insensitive_match(self):
        rows = [["uniqueid", "LOCATION CODE", "customer", "fabric type", "Gpu Model"]]
        location = locate_header(rows, REQUIRED_COLUMNS)

        assert location.mapping["Location Code"] == "LOCATION CODE"

    def test_partial_match(self):
        """Headers decorated with units or prefixes still match."""
        rows = [["Order UniqueID", "Location Code (site)", "Customer Name", "Fabric Type", "GPU Model"]]
        location = locate_header(rows, REQUIRED_COLUMNS)

        assert location.mapping["Customer"] == "Customer Name"
        assert location.positions["UniqueID"] == 0

    def test_exact_match_wins_over_partial(self):
        """A partial candidate earlier in the row must not steal an exact header."""
        rows = [["Customer Group", "UniqueID", "Location Code", "Customer", "Fabric Type", "GPU Model"]]
        location = locate_header(rows, REQUIRED_COLUMNS)

        assert location.positions["Customer"] == 3

    def test_case_insensitive_match_wins_over_partial(self):
        """An earlier column's partial match must not take a later column's case-insensitive header."""
        rows = [["CUSTOMER", "Customer Name (legal)"]]
        location = locate_header(rows, ["Customer Name", "Customer"])

        assert location.positions["Customer"] == 0
        assert location.positions["Customer Name"] == 1

    def test_not_found_within_scan_window(self):
        rows = [["filler"]] * 10 + [REQUIRED_COLUMNS]

        with pytest.raises(HeaderNotFoundError) as exc_info:
            locate_header(rows, REQUIRED_COLUMNS, max_scan_rows=10)

        assert exc_info.value.details["scanned_rows"] == 10

    def test_found_on_last_scanned_row(self):
        rows = [["filler"]] * 9 + [REQUIRED_COLUMNS]
        assert locate_header(rows, REQUIRED_COLUMNS, max_scan_rows=10).row_index == 9

    def test_partial_row_rejected(self):
        rows = [["UniqueID", "Customer"]]
        with pytest.raises(HeaderNotFoundError):
            locate_header(rows, REQUIRED_COLUMNS)


class TestRelabelRows:
    """Tests for relabel_rows."""

    def test_rows_below_header_relabeled(self):
        rows = sheet_with_metadata()
        dataset = relabel_rows(rows, locate_header(rows, REQUIRED_COLUMNS))

        assert dataset.header_row_index == 2
        assert dataset.columns == REQUIRED_COLUMNS + ["Quantity"]
        assert len(dataset.rows) == 2
        assert dataset.rows[0]["UniqueID"] == 1001
        assert dataset.rows[1]["Customer"] == "TechGiant"

    def test_canonical_names_replace_sheet_text(self):
        rows = [
            ["uniqueid", "location code", "customer name", "fabric type", "gpu model"],
            [1, "L1", "C1", "F1", "G1"],
        ]
        dataset = relabel_rows(rows, locate_header(rows, REQUIRED_COLUMNS))

        assert dataset.rows[0] == {
            "UniqueID": 1,
            "Location Code": "L1",
            "Customer": "C1",
            "Fabric Type": "F1",
            "GPU Model": "G1",
        }

    def test_blank_rows_and_headers_dropped(self):
        rows = [
            REQUIRED_COLUMNS + [None],
            [1, "L1", "C1", "F1", "G1", "ignored"],
            [None, None, None, None, None, None],
        ]
        dataset = relabel_rows(rows, locate_header(rows, REQUIRED_COLUMNS))

        assert dataset.columns == REQUIRED_COLUMNS
        assert len(dataset.rows) == 1

    def test_duplicate_extra_headers_deduplicated(self):
        rows = [
            REQUIRED_COLUMNS + ["Note", "Note"],
            [1, "L1", "C1", "F1", "G1", "a", "b"],
        ]
        dataset = relabel_rows(rows, locate_header(rows, REQUIRED_COLUMNS))

        assert dataset.rows[0]["Note"] == "a"
        assert dataset.rows[0]["Note.1"] == "b"
