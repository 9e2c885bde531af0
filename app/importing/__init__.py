"""
app/importing package marker.
"""

from app.importing.records import ImportedRecord, IndustryMetricRecord, RowDataError, StrategicGoalRecord
from app.importing.registry import ImportKind, ImportKindRegistry

__all__ = [
    "ImportKind",
    "ImportKindRegistry",
    "ImportedRecord",
    "IndustryMetricRecord",
    "RowDataError",
    "StrategicGoalRecord",
]
