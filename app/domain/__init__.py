"""
app/domain package marker.
"""

from app.domain.data_import import ImportOutcome, ImportOutcomeStatus, RowError, ValidationResult
from app.domain.import_job import CANCELLED_REASON, ImportJobState

__all__ = [
    "CANCELLED_REASON",
    "ImportJobState",
    "ImportOutcome",
    "ImportOutcomeStatus",
    "RowError",
    "ValidationResult",
]
