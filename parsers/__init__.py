"""
File parsers and dataset validation.

Parsers turn uploaded bytes into a ParsedDataset; validation decides
whether the dataset may be reconciled.
"""

from parsers.csv_parser import parse_csv, build_sample_csv
from parsers.excel_parser import parse_excel
from parsers.header_locator import HeaderLocation, locate_header, relabel_rows
from parsers.upload_parser import parse_upload
from parsers.validation import validate_dataset, missing_columns

__all__ = [
    "parse_csv",
    "build_sample_csv",
    "parse_excel",
    "HeaderLocation",
    "locate_header",
    "relabel_rows",
    "parse_upload",
    "validate_dataset",
    "missing_columns",
]
