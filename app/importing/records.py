"""
app/importing/records.py

Typed per-row records built from one sanitized CSV row.

A record is transient: it is built from one data row, handed to the store
once, then dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.validators.import_schema import ImportSchema, check_value


class RowDataError(ValueError):
    """
    Raised when a row cannot be turned into a record.
    """


class ImportedRecord(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    @classmethod
    def from_row(cls, row: Mapping[str, str], schema: ImportSchema) -> ImportedRecord:
        """
        Coerce a header-key → cell mapping through the schema rules.

        Optional cells that fail to parse become their default; the first
        blocking rule violation raises RowDataError.
        """

        values: dict[str, Any] = {}
        for rule in schema.columns:
            check = check_value(rule, row.get(rule.name))
            if check.error:
                raise RowDataError(check.error)
            values[rule.name] = check.value
        return cls.model_validate(values)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


class StrategicGoalRecord(ImportedRecord):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    status: Literal["planned", "active", "completed", "paused"] = "planned"
    progress: int = Field(default=0, ge=0, le=100)
    target_value: float | None = None
    current_value: float | None = None
    start_date: date | None = None
    due_date: date | None = None


class IndustryMetricRecord(ImportedRecord):
    name: str = Field(min_length=1, max_length=255)
    value: float
    category: str = Field(min_length=1, max_length=100)
    source: str | None = Field(default=None, max_length=255)
    previous_value: float | None = None
    trend: Literal["up", "down", "stable"] | None = None
