"""
app/parsing package marker.
"""

from app.parsing.csv_parser import ParsedCsv, decode_csv_bytes, normalize_header, parse_csv

__all__ = [
    "ParsedCsv",
    "decode_csv_bytes",
    "normalize_header",
    "parse_csv",
]
