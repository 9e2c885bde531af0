"""
app/validators package marker.
"""

from app.validators.import_schema import (
    ColumnRule,
    ColumnType,
    ImportSchema,
    ImportValidator,
    RuleCheck,
    check_value,
)

__all__ = [
    "ColumnRule",
    "ColumnType",
    "ImportSchema",
    "ImportValidator",
    "RuleCheck",
    "check_value",
]
