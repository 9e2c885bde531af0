from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from app.domain.errors import UnknownImportKindError
from app.importing.records import IndustryMetricRecord, RowDataError, StrategicGoalRecord
from app.importing.registry import (
    INDUSTRY_METRICS_SCHEMA,
    STRATEGIC_GOALS_SCHEMA,
    ImportKind,
    ImportKindRegistry,
)
from app.validators.import_schema import ColumnRule, ImportSchema


class TestImportKindRegistry:
    def test_builtin_kinds(self) -> None:
        registry = ImportKindRegistry()

        assert registry.names() == ["industry_metrics", "strategic_goals"]
        assert registry.resolve("strategic_goals").target_table == "strategic_goals"
        assert registry.resolve("industry_metrics").record_model is IndustryMetricRecord

    def test_lookup_ignores_case_and_surrounding_whitespace(self) -> None:
        assert ImportKindRegistry().resolve("  Strategic_Goals ").name == "strategic_goals"

    def test_unknown_kind_lists_allowed_kinds(self) -> None:
        with pytest.raises(UnknownImportKindError) as exc_info:
            ImportKindRegistry().resolve("initiatives")

        assert exc_info.value.kind == "initiatives"
        assert "industry_metrics, strategic_goals" in str(exc_info.value)

    def test_register_adds_a_kind(self) -> None:
        registry = ImportKindRegistry()
        kind = ImportKind(
            name="initiatives",
            label="Initiatives",
            schema=ImportSchema(kind="initiatives", columns=(ColumnRule(name="name", required=True),)),
            record_model=StrategicGoalRecord,
            target_table="strategic_goals",
        )

        registry.register(kind)

        assert registry.resolve("initiatives") is kind
        assert "initiatives" not in ImportKindRegistry().names()


class TestStrategicGoalRecord:
    def test_applies_defaults(self) -> None:
        record = StrategicGoalRecord.from_row({"name": "Expand EU market"}, STRATEGIC_GOALS_SCHEMA)

        assert record.to_payload() == {
            "name": "Expand EU market",
            "description": None,
            "status": "planned",
            "progress": 0,
            "target_value": None,
            "current_value": None,
            "start_date": None,
            "due_date": None,
        }

    def test_coerces_typed_values(self) -> None:
        row = {
            "name": "Grow ARR",
            "status": "Active",
            "progress": "55",
            "target_value": "1000000",
            "current_value": "250000.5",
            "start_date": "2024-01-01",
            "due_date": "12/31/2024",
        }

        record = StrategicGoalRecord.from_row(row, STRATEGIC_GOALS_SCHEMA)

        assert record.status == "active"
        assert record.progress == 55
        assert record.target_value == 1_000_000.0
        assert record.current_value == 250_000.5
        assert record.start_date == date(2024, 1, 1)
        assert record.due_date == date(2024, 12, 31)

    def test_unparsable_optional_values_become_absent(self) -> None:
        row = {"name": "Goal", "target_value": "lots", "due_date": "someday"}

        record = StrategicGoalRecord.from_row(row, STRATEGIC_GOALS_SCHEMA)

        assert record.target_value is None
        assert record.due_date is None

    @pytest.mark.parametrize(
        ("row", "message"),
        [
            ({"name": ""}, "Name is required"),
            (
                {"name": "Goal", "status": "bogus"},
                "Invalid status 'bogus'. Allowed values: planned, active, completed, paused",
            ),
            ({"name": "Goal", "progress": "101"}, "Progress must be an integer between 0 and 100 (got '101')"),
        ],
    )
    def test_rule_violations_raise_row_data_error(self, row: dict[str, str], message: str) -> None:
        with pytest.raises(RowDataError) as exc_info:
            StrategicGoalRecord.from_row(row, STRATEGIC_GOALS_SCHEMA)

        assert str(exc_info.value) == message

    def test_model_constraints_still_apply_to_direct_construction(self) -> None:
        with pytest.raises(ValidationError):
            StrategicGoalRecord(name="Goal", progress=150)

    def test_records_are_frozen(self) -> None:
        record = StrategicGoalRecord(name="Goal")

        with pytest.raises(ValidationError):
            record.name = "Other"  # type: ignore[misc]


def test_industry_metric_record() -> None:
    row = {"name": "GDP growth", "value": "2.4", "category": "macro", "trend": "UP", "previous_value": ""}

    record = IndustryMetricRecord.from_row(row, INDUSTRY_METRICS_SCHEMA)

    assert record.value == 2.4
    assert record.trend == "up"
    assert record.previous_value is None
    assert record.source is None
