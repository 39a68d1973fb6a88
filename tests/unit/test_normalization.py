"""
Unit tests for row normalization.
"""

import math

from utils.normalization import normalize_value, normalize_row, normalize_rows


class TestNormalizeValue:
    """Tests for normalize_value."""

    def test_strips_strings(self):
        assert normalize_value("  Acme Corp ") == "Acme Corp"

    def test_empty_string_becomes_none(self):
        assert normalize_value("") is None

    def test_whitespace_only_becomes_none(self):
        """Whitespace-only cells are blank, not empty text."""
        assert normalize_value("   \t") is None

    def test_nan_becomes_none(self):
        assert normalize_value(math.nan) is None

    def test_numbers_untouched(self):
        assert normalize_value(1001) == 1001
        assert normalize_value(2.5) == 2.5
        assert normalize_value(0) == 0

    def test_none_stays_none(self):
        assert normalize_value(None) is None

    def test_idempotent(self):
        for value in ["  x ", "", "   ", None, 5, 1.5, "y"]:
            once = normalize_value(value)
            assert normalize_value(once) == once


class TestNormalizeRow:
    """Tests for normalize_row / normalize_rows."""

    def test_keys_preserved(self):
        row = {"UniqueID": 1001, " Customer ": " Acme "}
        assert normalize_row(row) == {"UniqueID": 1001, " Customer ": "Acme"}

    def test_normalizes_each_row(self):
        rows = [{"a": " 1 "}, {"a": ""}]
        assert normalize_rows(rows) == [{"a": "1"}, {"a": None}]

    def test_input_not_mutated(self):
        row = {"a": " x "}
        normalize_row(row)
        assert row == {"a": " x "}
