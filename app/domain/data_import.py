"""
app/domain/data_import.py

Value objects returned by the import pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RowError:
    """
    One entry of an import job's error ledger.
    """

    row: int
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "error": self.error}


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a dry-run validation. Never persisted.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    row_count: int = 0

    @property
    def is_valid(self) -> bool:
        return not self.errors


class ImportOutcomeStatus:
    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    SYSTEM_ERROR = "system_error"


@dataclass(frozen=True)
class ImportOutcome:
    """
    Tri-state result of one import call.

    - ``validation_failed``: nothing written, ``validation_errors`` is the full list.
    - ``system_error``: the batch was aborted, ``system_error`` says why.
    - ``success``: every row was attempted; partial success shows as ``failed > 0``.
    """

    status: str
    job_id: Any = None
    total: int = 0
    processed: int = 0
    failed: int = 0
    errors: list[RowError] = field(default_factory=list)
    validation_errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    system_error: str | None = None
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.status == ImportOutcomeStatus.SUCCESS

    def summary_message(self) -> str:
        if self.status == ImportOutcomeStatus.VALIDATION_FAILED:
            return f"Validation failed: {'; '.join(self.validation_errors)}"
        if self.status == ImportOutcomeStatus.SYSTEM_ERROR:
            return f"Import failed: {self.system_error}"
        return f"Imported {self.processed} of {self.total}; {self.failed} failed."

    @classmethod
    def rejected(
        cls,
        validation_errors: list[str],
        warnings: list[str] | None = None,
    ) -> ImportOutcome:
        return cls(
            status=ImportOutcomeStatus.VALIDATION_FAILED,
            validation_errors=list(validation_errors),
            warnings=list(warnings or []),
        )
