"""Shared helpers."""

from utils.normalization import normalize_value, normalize_row, normalize_rows

__all__ = ["normalize_value", "normalize_row", "normalize_rows"]
