"""
app/validators/import_schema.py

Declarative per-kind import schemas and the dry-run validator.

A schema is a tuple of ColumnRule entries. ``check_value`` applies one rule
to one raw cell and is shared by the validator (dry run over the whole file)
and by the record builders (one row at persistence time), so both report
the same messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Sequence

from app.domain.data_import import ValidationResult
from app.domain.errors import MalformedCsvError, PayloadTooLargeError
from app.parsing.csv_parser import ParsedCsv, parse_csv
from app.security.sanitization import sanitize_bounded

DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
)

DEFAULT_MAX_ROW_BYTES = 64 * 1024


class ColumnType:
    TEXT = "text"
    ENUM = "enum"
    INTEGER = "integer"
    FLOAT = "float"
    DATE = "date"


@dataclass(frozen=True)
class ColumnRule:
    """
    One column of an import schema.

    INTEGER and FLOAT rules with a ``min_value``/``max_value`` bound block
    the import when violated; unbounded optional FLOAT and DATE values that
    fail to parse only produce a warning and are treated as absent.
    """

    name: str
    column_type: str = ColumnType.TEXT
    required: bool = False
    label: str | None = None
    allowed_values: tuple[str, ...] = ()
    min_value: float | None = None
    max_value: float | None = None
    max_length: int | None = None
    default: Any = None

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()

    @property
    def is_bounded(self) -> bool:
        return self.min_value is not None or self.max_value is not None


@dataclass(frozen=True)
class ImportSchema:
    kind: str
    columns: tuple[ColumnRule, ...]
    max_row_bytes: int = DEFAULT_MAX_ROW_BYTES

    @property
    def required_columns(self) -> list[str]:
        return [rule.name for rule in self.columns if rule.required]

    @property
    def optional_columns(self) -> list[str]:
        return [rule.name for rule in self.columns if not rule.required]

    @property
    def column_names(self) -> list[str]:
        return [rule.name for rule in self.columns]


@dataclass(frozen=True)
class RuleCheck:
    """
    Result of applying one rule to one raw cell.
    """

    value: Any = None
    error: str | None = None
    warning: str | None = None


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def parse_decimal(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def parse_integer(raw: str) -> int | None:
    """
    Integers, including integral decimals such as ``40.0``.
    """

    value = parse_decimal(raw)
    if value is None or value != value.to_integral_value():
        return None
    return int(value)


def parse_float(raw: str) -> float | None:
    value = parse_decimal(raw)
    return float(value) if value is not None else None


def parse_date(raw: str) -> date | None:
    """
    ISO-8601 date or datetime (``Z`` accepted), or one of DATE_FORMATS.
    """

    text = raw.strip()
    if not text:
        return None

    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _format_bound(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def _range_phrase(rule: ColumnRule) -> str:
    if rule.min_value is not None and rule.max_value is not None:
        return f" between {_format_bound(rule.min_value)} and {_format_bound(rule.max_value)}"
    if rule.min_value is not None:
        return f" of at least {_format_bound(rule.min_value)}"
    if rule.max_value is not None:
        return f" of at most {_format_bound(rule.max_value)}"
    return ""


def _in_range(rule: ColumnRule, value: float) -> bool:
    if rule.min_value is not None and value < rule.min_value:
        return False
    if rule.max_value is not None and value > rule.max_value:
        return False
    return True


def check_value(rule: ColumnRule, raw: str | None) -> RuleCheck:
    """
    Apply one column rule to one raw cell value.
    """

    text = (raw or "").strip()
    label = rule.display_label

    if not text:
        if rule.required:
            return RuleCheck(error=f"{label} is required")
        return RuleCheck(value=rule.default)

    if rule.column_type == ColumnType.ENUM:
        normalized = text.lower()
        if normalized not in rule.allowed_values:
            allowed = ", ".join(rule.allowed_values)
            return RuleCheck(error=f"Invalid {rule.name} '{text}'. Allowed values: {allowed}")
        return RuleCheck(value=normalized)

    if rule.column_type == ColumnType.INTEGER:
        parsed_int = parse_integer(text)
        if parsed_int is None or not _in_range(rule, parsed_int):
            message = f"{label} must be an integer{_range_phrase(rule)} (got '{text}')"
            if rule.required or rule.is_bounded:
                return RuleCheck(error=message)
            return RuleCheck(value=rule.default, warning=f"{message}; it will be ignored")
        return RuleCheck(value=parsed_int)

    if rule.column_type == ColumnType.FLOAT:
        parsed_float = parse_float(text)
        if parsed_float is None:
            if rule.required:
                return RuleCheck(error=f"{label} must be a number (got '{text}')")
            return RuleCheck(
                value=rule.default,
                warning=f"{label} '{text}' is not a valid number and will be ignored",
            )
        if not _in_range(rule, parsed_float):
            return RuleCheck(error=f"{label} must be a number{_range_phrase(rule)} (got '{text}')")
        return RuleCheck(value=parsed_float)

    if rule.column_type == ColumnType.DATE:
        parsed_date = parse_date(text)
        if parsed_date is None:
            if rule.required:
                return RuleCheck(error=f"{label} must be a valid date (got '{text}')")
            return RuleCheck(
                value=rule.default,
                warning=f"{label} '{text}' is not a valid date and will be ignored",
            )
        return RuleCheck(value=parsed_date)

    if rule.max_length is not None and len(text) > rule.max_length:
        return RuleCheck(
            error=f"{label} must be at most {rule.max_length} characters (got {len(text)})"
        )
    return RuleCheck(value=text)


def check_row_shape(parsed: ParsedCsv, row: Sequence[str]) -> str | None:
    if len(row) > len(parsed.headers):
        return f"Expected {len(parsed.headers)} columns but found {len(row)}"
    return None


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class ImportValidator:
    """
    Dry-run validation of a parsed CSV against an import schema.

    Writes nothing and keeps no state between calls.
    """

    def __init__(self, *, max_row_bytes: int | None = None) -> None:
        self._max_row_bytes = max_row_bytes

    def validate_text(self, text: str, schema: ImportSchema) -> ValidationResult:
        try:
            parsed = parse_csv(text)
        except MalformedCsvError as exc:
            return ValidationResult(errors=[str(exc)], warnings=[], row_count=0)
        return self.validate(parsed, schema)

    def validate(self, parsed: ParsedCsv, schema: ImportSchema) -> ValidationResult:
        errors: list[str] = []
        warnings: list[str] = []

        for column in schema.required_columns:
            if not parsed.has_column(column):
                errors.append(f"Missing required column: {column}")

        known = set(schema.column_names)
        for header, key in zip(parsed.headers, parsed.header_keys):
            if key not in known:
                warnings.append(f"Unknown column '{header}' will be ignored")

        present_rules = [rule for rule in schema.columns if parsed.has_column(rule.name)]
        for row_number, row in enumerate(parsed.rows, start=1):
            row_errors, row_warnings = self.check_row(
                parsed=parsed,
                row=row,
                rules=present_rules,
                max_row_bytes=self.row_byte_limit(schema),
            )
            errors.extend(f"Row {row_number}: {message}" for message in row_errors)
            warnings.extend(f"Row {row_number}: {message}" for message in row_warnings)

        return ValidationResult(errors=errors, warnings=warnings, row_count=parsed.row_count)

    def row_byte_limit(self, schema: ImportSchema) -> int:
        return self._max_row_bytes or schema.max_row_bytes

    @staticmethod
    def check_row(
        *,
        parsed: ParsedCsv,
        row: Sequence[str],
        rules: Sequence[ColumnRule],
        max_row_bytes: int,
    ) -> tuple[list[str], list[str]]:
        errors: list[str] = []
        warnings: list[str] = []

        shape_error = check_row_shape(parsed, row)
        if shape_error:
            errors.append(shape_error)

        try:
            mapping = sanitize_bounded(parsed.row_mapping(row), max_row_bytes)
        except PayloadTooLargeError as exc:
            errors.append(str(exc))
            return errors, warnings

        for rule in rules:
            check = check_value(rule, mapping.get(rule.name))
            if check.error:
                errors.append(check.error)
            if check.warning:
                warnings.append(check.warning)
        return errors, warnings
