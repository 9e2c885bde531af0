"""
Import kind registry.

Each kind bundles the schema used for validation, the record model used to
build rows, and the table the rows land in. Lookups happen once per call;
adding a kind means registering one more entry.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from app.domain.errors import UnknownImportKindError
from app.importing.records import ImportedRecord, IndustryMetricRecord, StrategicGoalRecord
from app.validators.import_schema import ColumnRule, ColumnType, ImportSchema
from db.models import GoalStatus, IndustryMetric, MetricTrend, StrategicGoal


@dataclass(frozen=True)
class ImportKind:
    name: str
    label: str
    schema: ImportSchema
    record_model: type[ImportedRecord]
    target_table: str


STRATEGIC_GOALS_SCHEMA = ImportSchema(
    kind="strategic_goals",
    columns=(
        ColumnRule(name="name", required=True, max_length=255),
        ColumnRule(name="description", max_length=1000),
        ColumnRule(
            name="status",
            column_type=ColumnType.ENUM,
            allowed_values=(
                GoalStatus.PLANNED,
                GoalStatus.ACTIVE,
                GoalStatus.COMPLETED,
                GoalStatus.PAUSED,
            ),
            default=GoalStatus.PLANNED,
        ),
        ColumnRule(
            name="progress",
            column_type=ColumnType.INTEGER,
            min_value=0,
            max_value=100,
            default=0,
        ),
        ColumnRule(name="target_value", column_type=ColumnType.FLOAT),
        ColumnRule(name="current_value", column_type=ColumnType.FLOAT),
        ColumnRule(name="start_date", column_type=ColumnType.DATE),
        ColumnRule(name="due_date", column_type=ColumnType.DATE),
    ),
)

INDUSTRY_METRICS_SCHEMA = ImportSchema(
    kind="industry_metrics",
    columns=(
        ColumnRule(name="name", required=True, max_length=255),
        ColumnRule(name="value", column_type=ColumnType.FLOAT, required=True),
        ColumnRule(name="category", required=True, max_length=100),
        ColumnRule(name="source", max_length=255),
        ColumnRule(name="previous_value", column_type=ColumnType.FLOAT),
        ColumnRule(
            name="trend",
            column_type=ColumnType.ENUM,
            allowed_values=(MetricTrend.UP, MetricTrend.DOWN, MetricTrend.STABLE),
        ),
    ),
)

BUILTIN_KINDS: tuple[ImportKind, ...] = (
    ImportKind(
        name="strategic_goals",
        label="Strategic goals",
        schema=STRATEGIC_GOALS_SCHEMA,
        record_model=StrategicGoalRecord,
        target_table=StrategicGoal.__tablename__,
    ),
    ImportKind(
        name="industry_metrics",
        label="Industry metrics",
        schema=INDUSTRY_METRICS_SCHEMA,
        record_model=IndustryMetricRecord,
        target_table=IndustryMetric.__tablename__,
    ),
)


class ImportKindRegistry:
    """
    Registry of import kinds, pre-populated with the built-ins.
    """

    def __init__(self, registrations: Mapping[str, ImportKind] | None = None) -> None:
        self._kinds: dict[str, ImportKind] = {kind.name: kind for kind in BUILTIN_KINDS}
        if registrations:
            self._kinds.update(registrations)

    def register(self, kind: ImportKind) -> None:
        self._kinds[kind.name.strip().lower()] = kind

    def resolve(self, name: str) -> ImportKind:
        resolved = self._kinds.get(name.strip().lower())
        if resolved is None:
            raise UnknownImportKindError(name, list(self._kinds))
        return resolved

    def names(self) -> list[str]:
        return sorted(self._kinds)
