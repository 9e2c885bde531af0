"""
app/services/data_export_service.py

CSV and JSON export of stored records.

CSV output is parseable by ``app.parsing.csv_parser.parse_csv``: values holding
a comma, a double quote or a line break are quoted and embedded quotes are
doubled. Nested JSON columns are serialised to compact JSON strings.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any

from app.config import ExportSettings, get_export_settings
from app.importing.registry import ImportKindRegistry
from db.repositories.record_store import Pagination, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_COLUMNS: tuple[str, ...] = ("id",)


class ExportFormat:
    CSV = "csv"
    JSON = "json"

    ALL = (CSV, JSON)


_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, separators=(",", ":"))
    return str(value)


def to_csv(
    records: Sequence[Mapping[str, Any]],
    exclude: Iterable[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> str:
    """
    Render records as CSV text.

    The header is the first record's keys, in order, minus ``exclude``.
    Every row renders those same keys; a key missing from a later record is
    written as an empty cell. Lines are joined with ``\\n`` and there is no
    trailing newline. No records gives an empty string.
    """

    if not records:
        return ""

    excluded = set(exclude)
    headers = [key for key in records[0] if key not in excluded]

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for record in records:
        writer.writerow([format_cell(record.get(key)) for key in headers])
    return buffer.getvalue().rstrip("\n")


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_json(
    records: Sequence[Mapping[str, Any]],
    exclude: Iterable[str] = DEFAULT_EXCLUDED_COLUMNS,
) -> str:
    """
    Render records as a pretty-printed JSON array, dropping ``exclude`` keys.
    """

    excluded = set(exclude)
    rows = [{key: value for key, value in record.items() if key not in excluded} for record in records]
    return json.dumps(rows, default=_json_default, ensure_ascii=False, indent=2)


def export_filename(kind: str, on: date | None = None, extension: str = ExportFormat.CSV) -> str:
    day = on or datetime.now().date()
    return f"{kind}_{day.isoformat()}.{extension}"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content: str
    row_count: int
    media_type: str = "text/csv"


class DataExportService:
    """
    Read-only export of an import kind's table as a CSV or JSON artifact.
    """

    def __init__(
        self,
        *,
        registry: ImportKindRegistry | None = None,
        settings: ExportSettings | None = None,
    ) -> None:
        self._registry = registry or ImportKindRegistry()
        self._settings = settings or get_export_settings()

    def export_kind(
        self,
        store: RecordStore,
        kind: str,
        *,
        owner_id: str | None = None,
        limit: int | None = None,
        export_format: str = ExportFormat.CSV,
    ) -> ExportArtifact:
        if export_format not in ExportFormat.ALL:
            raise ValueError(
                f"Unsupported export format '{export_format}'. Use one of: {', '.join(ExportFormat.ALL)}."
            )
        import_kind = self._registry.resolve(kind)
        row_limit = min(limit or self._settings.max_rows, self._settings.max_rows)
        filters = {"user_id": owner_id} if owner_id else None

        records = store.fetch_data(
            import_kind.target_table,
            pagination=Pagination(limit=row_limit, offset=0),
            filters=filters,
        )
        logger.info(
            "Exporting kind=%s format=%s owner=%s rows=%d",
            import_kind.name,
            export_format,
            owner_id or "*",
            len(records),
        )
        render = to_json if export_format == ExportFormat.JSON else to_csv
        return ExportArtifact(
            filename=export_filename(import_kind.name, extension=export_format),
            content=render(records),
            row_count=len(records),
            media_type=_MEDIA_TYPES[export_format],
        )


@lru_cache(maxsize=1)
def get_data_export_service() -> DataExportService:
    return DataExportService()
