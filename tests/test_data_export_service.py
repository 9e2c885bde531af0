"""
tests/test_data_export_service.py

Pytest unit tests for CSV and JSON export formatting and the export service.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

import pytest

from app.config import ExportSettings
from app.domain.errors import UnknownImportKindError
from app.parsing.csv_parser import parse_csv
from app.services.data_export_service import (
    DataExportService,
    ExportFormat,
    export_filename,
    format_cell,
    to_csv,
    to_json,
)
from db.repositories.record_store import Pagination


class TestToCsv:
    def test_empty_input_gives_empty_string(self) -> None:
        assert to_csv([]) == ""

    def test_header_follows_first_record_and_skips_id(self) -> None:
        records = [
            {"id": uuid.uuid4(), "name": "Alpha", "progress": 40},
            {"id": uuid.uuid4(), "name": "Beta", "progress": 0},
        ]

        assert to_csv(records) == "name,progress\nAlpha,40\nBeta,0"

    def test_value_with_comma_and_quote_is_quoted_and_doubled(self) -> None:
        assert to_csv([{"v": 'a,b"c'}]) == 'v\n"a,b""c"'

    def test_value_with_newline_is_quoted(self) -> None:
        assert to_csv([{"v": "line one\nline two"}]) == 'v\n"line one\nline two"'

    def test_scalar_formatting(self) -> None:
        record = {
            "note": None,
            "done": True,
            "due": date(2024, 1, 2),
            "meta": {"a": 1},
            "ratio": 0.5,
        }

        assert to_csv([record]) == 'note,done,due,meta,ratio\n,true,2024-01-02,"{""a"":1}",0.5'

    def test_missing_key_in_later_record_is_blank(self) -> None:
        assert to_csv([{"a": "1", "b": "2"}, {"a": "3"}]) == "a,b\n1,2\n3,"

    def test_custom_exclusions(self) -> None:
        assert to_csv([{"id": 1, "user_id": "o", "name": "A"}], exclude=("id", "user_id")) == "name\nA"

    def test_round_trip_through_parser(self) -> None:
        records = [
            {"name": "Expand, EU", "description": 'Say "hello"', "status": "active"},
            {"name": "Multi\nline", "description": "", "status": "paused"},
            {"name": "Plain", "description": "x", "status": "planned"},
        ]

        parsed = parse_csv(to_csv(records))

        assert parsed.headers == ["name", "description", "status"]
        assert parsed.rows == [list(record.values()) for record in records]

    def test_round_trip_keeps_numbers_and_nulls(self) -> None:
        records = [
            {"name": "Revenue", "value": 12.5, "previous_value": None, "rank": 3},
            {"name": "Churn", "value": 0, "previous_value": 1.25, "rank": None},
        ]

        parsed = parse_csv(to_csv(records))

        assert parsed.rows == [["Revenue", "12.5", "", "3"], ["Churn", "0", "1.25", ""]]

    @pytest.mark.parametrize("empty", ["", None])
    def test_round_trip_keeps_single_column_empty_rows(self, empty: str | None) -> None:
        records = [{"name": "a"}, {"name": empty}, {"name": "b"}]

        parsed = parse_csv(to_csv(records))

        assert parsed.rows == [["a"], [""], ["b"]]


def test_format_cell_datetime_is_iso() -> None:
    moment = datetime(2024, 3, 5, 8, 30, tzinfo=timezone.utc)

    assert format_cell(moment) == "2024-03-05T08:30:00+00:00"
    assert format_cell(False) == "false"
    assert format_cell([1, "a"]) == '[1,"a"]'


def test_export_filename() -> None:
    assert export_filename("strategic_goals", date(2024, 3, 5)) == "strategic_goals_2024-03-05.csv"
    assert export_filename("industry_metrics").startswith("industry_metrics_")
    assert export_filename("industry_metrics", date(2024, 3, 5), extension="json") == (
        "industry_metrics_2024-03-05.json"
    )


def test_to_json_drops_id_and_formats_dates() -> None:
    records = [{"id": uuid.uuid4(), "name": "Alpha", "due_date": date(2024, 1, 2), "value": None}]

    assert json.loads(to_json(records)) == [{"name": "Alpha", "due_date": "2024-01-02", "value": None}]
    assert to_json([]) == "[]"


class StubStore:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self.rows = rows
        self.calls: list[tuple[str, Pagination | None, Mapping[str, Any] | None]] = []

    def fetch_data(
        self,
        table: str,
        *,
        pagination: Pagination | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append((table, pagination, filters))
        limit = pagination.limit if pagination else len(self.rows)
        return self.rows[:limit]


class TestDataExportService:
    def test_exports_the_kind_table(self) -> None:
        store = StubStore([{"id": 1, "user_id": "o", "name": "Alpha"}])
        service = DataExportService(settings=ExportSettings(max_rows=100))

        artifact = service.export_kind(store, "strategic_goals", owner_id="o")  # type: ignore[arg-type]

        assert artifact.content == "user_id,name\no,Alpha"
        assert artifact.row_count == 1
        assert artifact.media_type == "text/csv"
        assert artifact.filename.startswith("strategic_goals_")
        assert artifact.filename.endswith(".csv")
        table, pagination, filters = store.calls[0]
        assert table == "strategic_goals"
        assert filters == {"user_id": "o"}
        assert pagination is not None and pagination.limit == 100

    def test_limit_is_capped_by_settings(self) -> None:
        store = StubStore([{"name": str(index)} for index in range(5)])
        service = DataExportService(settings=ExportSettings(max_rows=2))

        artifact = service.export_kind(store, "industry_metrics", limit=50)  # type: ignore[arg-type]

        assert artifact.row_count == 2
        assert store.calls[0][2] is None

    def test_json_format(self) -> None:
        store = StubStore([{"id": 1, "user_id": "o", "name": "Alpha", "value": 4.5}])
        service = DataExportService(settings=ExportSettings(max_rows=100))

        artifact = service.export_kind(
            store,  # type: ignore[arg-type]
            "industry_metrics",
            export_format=ExportFormat.JSON,
        )

        assert json.loads(artifact.content) == [{"user_id": "o", "name": "Alpha", "value": 4.5}]
        assert artifact.media_type == "application/json"
        assert artifact.filename.endswith(".json")

    def test_unsupported_format(self) -> None:
        service = DataExportService(settings=ExportSettings())

        with pytest.raises(ValueError, match="Unsupported export format"):
            service.export_kind(StubStore([]), "strategic_goals", export_format="xml")  # type: ignore[arg-type]

    def test_unknown_kind(self) -> None:
        service = DataExportService(settings=ExportSettings())

        with pytest.raises(UnknownImportKindError):
            service.export_kind(StubStore([]), "initiatives")  # type: ignore[arg-type]
