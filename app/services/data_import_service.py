"""
app/services/data_import_service.py

Batch CSV import: validate, create the job ledger entry, persist rows one
by one, keep the ledger current, and close the job.

Row-level failures are isolated: a row that cannot be built or written is
counted and logged in the job's error ledger, and the batch carries on.
Anything else that goes wrong after the job exists aborts the batch and
marks the job failed.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from app.config import ImportSettings, get_import_settings
from app.domain.data_import import ImportOutcome, ImportOutcomeStatus, ValidationResult
from app.domain.errors import MalformedCsvError, PayloadTooLargeError, RowPersistenceFailedError
from app.domain.import_job import CANCELLED_REASON, ImportJobState
from app.importing.records import ImportedRecord, RowDataError
from app.importing.registry import ImportKind, ImportKindRegistry
from app.logging_utils import log_event
from app.parsing.csv_parser import ParsedCsv, parse_csv
from app.security.sanitization import sanitize_bounded, sanitize_file_name
from app.services.audit_service import AuditSink, LoggingAuditSink
from app.validators.import_schema import ImportValidator, check_row_shape
from db.models import AuditSeverity, ImportJob, ImportJobStatus
from db.repositories.errors import RecordStoreError, UnknownTableError
from db.repositories.record_store import Pagination, RecordStore

logger = logging.getLogger(__name__)

IMPORT_JOB_TABLE = ImportJob.__tablename__
_MAX_FAILURE_REASON_CHARS = 2000

_ROW_FAILURES: tuple[type[Exception], ...] = (
    RowDataError,
    ValidationError,
    PayloadTooLargeError,
    RecordStoreError,
    TimeoutError,
)


class DataImportService:
    """
    Coordinates validation, row persistence and job bookkeeping for CSV imports.
    """

    def __init__(
        self,
        *,
        registry: ImportKindRegistry | None = None,
        settings: ImportSettings | None = None,
        validator: ImportValidator | None = None,
        audit_sink: AuditSink | None = None,
    ) -> None:
        self._registry = registry or ImportKindRegistry()
        self._settings = settings or get_import_settings()
        self._validator = validator or ImportValidator(max_row_bytes=self._settings.max_row_bytes)
        self._audit_sink = audit_sink or LoggingAuditSink()

    @property
    def registry(self) -> ImportKindRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Dry run
    # ------------------------------------------------------------------

    def validate_csv(
        self,
        raw_text: str,
        kind: str,
        *,
        field_mapping: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        import_kind = self._registry.resolve(kind)
        try:
            parsed = _parse(raw_text, field_mapping)
        except MalformedCsvError as exc:
            return ValidationResult(errors=[str(exc)], warnings=[], row_count=0)
        return self._validator.validate(parsed, import_kind.schema)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_csv(
        self,
        store: RecordStore,
        raw_text: str,
        *,
        owner_id: str,
        file_name: str,
        kind: str,
        file_size: int | None = None,
        field_mapping: Mapping[str, str] | None = None,
        skip_validation: bool = False,
        cancel_event: threading.Event | None = None,
        audit_sink: AuditSink | None = None,
    ) -> ImportOutcome:
        import_kind = self._registry.resolve(kind)
        sink = audit_sink or self._audit_sink

        try:
            parsed = _parse(raw_text, field_mapping)
        except MalformedCsvError as exc:
            _log_rejection(import_kind, owner_id, error_count=1)
            return ImportOutcome.rejected([str(exc)], [])

        warnings: list[str] = []
        if not skip_validation:
            validation = self._validator.validate(parsed, import_kind.schema)
            if not validation.is_valid:
                _log_rejection(import_kind, owner_id, error_count=len(validation.errors))
                return ImportOutcome.rejected(validation.errors, validation.warnings)
            warnings = list(validation.warnings)

        state = ImportJobState(
            owner_id=owner_id,
            file_name=sanitize_file_name(file_name),
            kind=import_kind.name,
            file_size=file_size,
        )
        state.start(parsed.row_count)

        try:
            job_record = store.create_record(IMPORT_JOB_TABLE, state.create_payload())
        except Exception as exc:  # noqa: BLE001
            reason = _failure_reason(exc)
            logger.exception("Failed to create import job kind=%s owner=%s", import_kind.name, owner_id)
            self._emit_audit(
                sink,
                state,
                severity=AuditSeverity.ERROR,
                description=f"Import aborted: {reason}",
            )
            return ImportOutcome(
                status=ImportOutcomeStatus.SYSTEM_ERROR,
                total=state.total,
                warnings=warnings,
                system_error=reason,
            )
        state.job_id = job_record["id"]

        try:
            self._process_rows(store, parsed, import_kind, state, cancel_event)
            if not state.is_terminal:
                state.complete()
            store.update_record(IMPORT_JOB_TABLE, state.job_id, state.terminal_patch())
        except Exception as exc:  # noqa: BLE001
            reason = _failure_reason(exc)
            self._mark_job_failed(store, state, reason)
            self._emit_audit(
                sink,
                state,
                severity=AuditSeverity.ERROR,
                description=f"Import aborted: {reason}",
            )
            return dataclasses.replace(
                state.to_outcome(warnings),
                status=ImportOutcomeStatus.SYSTEM_ERROR,
                system_error=reason,
            )

        outcome = state.to_outcome(warnings)
        if outcome.cancelled:
            self._emit_audit(sink, state, severity=AuditSeverity.WARNING, description="Import cancelled")
        else:
            self._emit_audit(
                sink,
                state,
                severity=AuditSeverity.WARNING if state.failed else AuditSeverity.INFO,
                description=outcome.summary_message(),
            )
        return outcome

    def get_job(self, store: RecordStore, job_id: Any) -> dict[str, Any] | None:
        return store.get_record(IMPORT_JOB_TABLE, job_id)

    def list_jobs(
        self,
        store: RecordStore,
        *,
        owner_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        filters = {"user_id": owner_id} if owner_id else None
        return store.fetch_data(
            IMPORT_JOB_TABLE,
            pagination=Pagination(limit=limit, offset=offset),
            filters=filters,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _process_rows(
        self,
        store: RecordStore,
        parsed: ParsedCsv,
        import_kind: ImportKind,
        state: ImportJobState,
        cancel_event: threading.Event | None,
    ) -> None:
        batch_size = self._settings.progress_batch_size
        for row_number, row in enumerate(parsed.rows, start=1):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Import job cancelled id=%s at row=%d", state.job_id, row_number)
                state.fail(CANCELLED_REASON)
                return

            try:
                record = self._build_record(parsed, row, import_kind)
                store.create_record(
                    import_kind.target_table,
                    {**record.to_payload(), "user_id": state.owner_id},
                )
            except UnknownTableError:
                raise
            except _ROW_FAILURES as exc:
                self._record_row_failure(state, row_number, _row_error_message(exc))
            else:
                state.record_success()

            if state.attempted % batch_size == 0 or state.attempted == state.total:
                store.update_record(IMPORT_JOB_TABLE, state.job_id, state.progress_patch())

    def _build_record(
        self,
        parsed: ParsedCsv,
        row: Sequence[str],
        import_kind: ImportKind,
    ) -> ImportedRecord:
        shape_error = check_row_shape(parsed, row)
        if shape_error:
            raise RowDataError(shape_error)
        mapping = sanitize_bounded(
            parsed.row_mapping(row),
            self._validator.row_byte_limit(import_kind.schema),
        )
        return import_kind.record_model.from_row(mapping, import_kind.schema)

    def _record_row_failure(self, state: ImportJobState, row_number: int, message: str) -> None:
        state.record_failure(row_number, message)
        if self._settings.log_row_errors:
            failure = RowPersistenceFailedError(row_number=row_number, message=message)
            logger.warning("Import job id=%s row failed: %s", state.job_id, failure)

    def _mark_job_failed(self, store: RecordStore, state: ImportJobState, reason: str) -> None:
        logger.exception("Import job failed id=%s error=%s", state.job_id, reason)
        if not state.is_terminal:
            state.fail(reason)
        patch = {
            **state.terminal_patch(),
            "status": ImportJobStatus.FAILED,
            "failure_reason": reason,
        }
        try:
            store.update_record(IMPORT_JOB_TABLE, state.job_id, patch)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to persist failed import job state id=%s", state.job_id)

    def _emit_audit(
        self,
        sink: AuditSink,
        state: ImportJobState,
        *,
        severity: str,
        description: str,
    ) -> None:
        try:
            sink.log_event(
                action="data_import",
                resource=state.kind,
                description=description,
                severity=severity,
                metadata={
                    "job_id": str(state.job_id) if state.job_id is not None else None,
                    "owner_id": state.owner_id,
                    "file_name": state.file_name,
                    "total": state.total,
                    "processed": state.processed,
                    "failed": state.failed,
                },
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Audit event for import job id=%s failed: %s", state.job_id, exc)


def _parse(raw_text: str, field_mapping: Mapping[str, str] | None) -> ParsedCsv:
    parsed = parse_csv(raw_text)
    return parsed.remap(field_mapping) if field_mapping else parsed


def _log_rejection(import_kind: ImportKind, owner_id: str, *, error_count: int) -> None:
    log_event(
        logger,
        logging.INFO,
        "import_rejected",
        kind=import_kind.name,
        owner_id=owner_id,
        error_count=error_count,
    )


def _row_error_message(exc: Exception) -> str:
    if isinstance(exc, TimeoutError):
        return str(exc) or "Row write timed out"
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if not errors:
            return str(exc)
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value")
        return f"{location}: {message}" if location else message
    return str(exc)


def _failure_reason(exc: Exception) -> str:
    return f"{type(exc).__name__}: {exc}"[:_MAX_FAILURE_REASON_CHARS]


@lru_cache(maxsize=1)
def get_data_import_service() -> DataImportService:
    return DataImportService()
