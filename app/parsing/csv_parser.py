"""
app/parsing/csv_parser.py

CSV text → header row + data rows.

Parsing goes through the standard library reader in strict mode, so commas,
doubled quotes and newlines inside a quoted field all stay in that field; a
quoted multi-line value is one record, not two.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace

from app.domain.errors import MalformedCsvError
from app.security.sanitization import sanitize_text

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Lookup key for a header cell: trimmed, lower-cased, whitespace → ``_``.

    The key is sanitized like every row value, so two headers that only
    differ by markup collapse to the same key and are caught as duplicates.
    """

    return sanitize_text(_WHITESPACE_RUN.sub("_", header.strip().lower()))


@dataclass(frozen=True)
class ParsedCsv:
    """
    Parsed CSV document.

    ``headers`` keeps the literal header text for display; ``header_keys``
    holds the normalized keys used to match schema columns.
    """

    headers: list[str]
    rows: list[list[str]]
    header_keys: list[str] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def has_column(self, key: str) -> bool:
        return key in self.header_keys

    def row_mapping(self, row: Sequence[str]) -> dict[str, str]:
        """
        Map header key → cell value. Missing trailing cells read as "".
        """

        return {
            key: (row[index] if index < len(row) else "")
            for index, key in enumerate(self.header_keys)
        }

    def remap(self, field_mapping: Mapping[str, str]) -> ParsedCsv:
        """
        Rename header keys through a caller-supplied ``header → column`` map.

        Both sides are normalized. Headers not in the map keep their key.
        Raises MalformedCsvError when the renamed keys collide.
        """

        renames = {
            normalize_header(source): normalize_header(target)
            for source, target in field_mapping.items()
        }
        header_keys = [renames.get(key, key) for key in self.header_keys]
        _check_header_keys(header_keys)
        return replace(self, header_keys=header_keys)


def decode_csv_bytes(raw: bytes) -> str:
    """
    Decode an uploaded CSV payload as UTF-8, tolerating a byte-order mark.
    """

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedCsvError("CSV must be UTF-8 encoded.") from exc


def parse_csv(text: str) -> ParsedCsv:
    """
    Parse CSV text into headers and rows.

    Blank lines are skipped and every cell is whitespace-trimmed. Raises
    MalformedCsvError when there is no data row, when quoting is broken, or
    when the header row has empty or duplicate column names.
    """

    if text.startswith("\ufeff"):
        text = text[1:]

    lines = _LineTap(text)
    reader = csv.reader(lines, strict=True, skipinitialspace=True)
    records: list[list[str]] = []
    try:
        for record in reader:
            # A quoted "" is a real empty cell; only whitespace-only source lines are blank.
            if not lines.take().strip():
                continue
            records.append([cell.strip() for cell in record])
    except csv.Error as exc:
        raise MalformedCsvError(f"Invalid CSV format near line {reader.line_num}: {exc}") from exc

    if len(records) < 2:
        raise MalformedCsvError("CSV file must have at least a header and one data row.")

    headers = records[0]
    header_keys = [normalize_header(header) for header in headers]
    _check_header_keys(header_keys)

    return ParsedCsv(headers=headers, rows=records[1:], header_keys=header_keys)


class _LineTap:
    """
    Line iterator for csv.reader that remembers the raw text of each record.
    """

    def __init__(self, text: str) -> None:
        self._lines: Iterator[str] = iter(io.StringIO(text, newline=""))
        self._consumed: list[str] = []

    def __iter__(self) -> _LineTap:
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self._consumed.append(line)
        return line

    def take(self) -> str:
        raw = "".join(self._consumed)
        self._consumed.clear()
        return raw


def _check_header_keys(header_keys: list[str]) -> None:
    empty_positions = [str(index + 1) for index, key in enumerate(header_keys) if not key]
    if empty_positions:
        raise MalformedCsvError(
            f"CSV header has empty column name(s) at position(s): {', '.join(empty_positions)}."
        )

    seen: set[str] = set()
    duplicates: list[str] = []
    for key in header_keys:
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    if duplicates:
        raise MalformedCsvError(f"CSV header has duplicate column(s): {', '.join(duplicates)}.")
