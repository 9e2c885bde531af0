"""
app/domain/import_job.py

In-memory aggregate for one import job. The orchestrator mutates this and
writes snapshots of it back to the ``data_imports`` ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.domain.data_import import ImportOutcome, ImportOutcomeStatus, RowError
from app.domain.errors import InvalidJobTransitionError
from db.models.import_job import ImportJobStatus

_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    ImportJobStatus.PENDING: frozenset({ImportJobStatus.PROCESSING, ImportJobStatus.FAILED}),
    ImportJobStatus.PROCESSING: frozenset({ImportJobStatus.COMPLETED, ImportJobStatus.FAILED}),
    ImportJobStatus.COMPLETED: frozenset(),
    ImportJobStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({ImportJobStatus.COMPLETED, ImportJobStatus.FAILED})

CANCELLED_REASON = "cancelled"


@dataclass
class ImportJobState:
    """
    Import job lifecycle and counters.

    Invariants: status only moves forward, ``total`` is fixed once processing
    starts, counters never decrease and ``processed + failed <= total``.
    """

    owner_id: str
    file_name: str
    kind: str
    file_size: int | None = None
    job_id: Any = None
    status: str = ImportJobStatus.PENDING
    total: int = 0
    processed: int = 0
    failed: int = 0
    errors: list[RowError] = field(default_factory=list)
    failure_reason: str | None = None
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def attempted(self) -> int:
        return self.processed + self.failed

    def start(self, total: int) -> None:
        if total < 0:
            raise ValueError("total must be non-negative")
        self._transition(ImportJobStatus.PROCESSING)
        self.total = total

    def record_success(self) -> None:
        self._ensure_row_capacity()
        self.processed += 1

    def record_failure(self, row: int, message: str) -> None:
        self._ensure_row_capacity()
        self.failed += 1
        self.errors.append(RowError(row=row, error=message))

    def complete(self) -> None:
        self._transition(ImportJobStatus.COMPLETED)

    def fail(self, reason: str) -> None:
        self._transition(ImportJobStatus.FAILED)
        self.failure_reason = reason

    def create_payload(self) -> dict[str, Any]:
        return {
            "user_id": self.owner_id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "import_type": self.kind,
            "status": self.status,
            "total_records": self.total,
            "processed_records": self.processed,
            "failed_records": self.failed,
            "error_log": [],
        }

    def progress_patch(self) -> dict[str, Any]:
        return {
            "processed_records": self.processed,
            "failed_records": self.failed,
            "error_log": [error.to_dict() for error in self.errors],
        }

    def terminal_patch(self) -> dict[str, Any]:
        return {
            **self.progress_patch(),
            "status": self.status,
            "failure_reason": self.failure_reason,
            "completed_at": self.completed_at,
        }

    def to_outcome(self, warnings: list[str] | None = None) -> ImportOutcome:
        cancelled = self.failure_reason == CANCELLED_REASON
        if self.status == ImportJobStatus.FAILED:
            status = ImportOutcomeStatus.SYSTEM_ERROR
        else:
            status = ImportOutcomeStatus.SUCCESS
        return ImportOutcome(
            status=status,
            job_id=self.job_id,
            total=self.total,
            processed=self.processed,
            failed=self.failed,
            errors=list(self.errors),
            warnings=list(warnings or []),
            system_error=self.failure_reason,
            cancelled=cancelled,
        )

    def _transition(self, target: str) -> None:
        if target not in _ALLOWED_TRANSITIONS.get(self.status, frozenset()):
            raise InvalidJobTransitionError(
                f"Import job cannot move from '{self.status}' to '{target}'."
            )
        self.status = target
        if target in TERMINAL_STATUSES:
            self.completed_at = datetime.now(timezone.utc)

    def _ensure_row_capacity(self) -> None:
        if self.status != ImportJobStatus.PROCESSING:
            raise InvalidJobTransitionError(
                f"Rows can only be recorded while processing (status is '{self.status}')."
            )
        if self.attempted >= self.total:
            raise InvalidJobTransitionError(
                f"All {self.total} rows have already been recorded."
            )
