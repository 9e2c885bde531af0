"""
CSV import endpoints: dry-run validation, synchronous import and job status.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import (
    CsvUpload,
    get_field_mapping,
    get_import_rate_limiter,
    get_record_store,
    read_csv_upload,
)
from app.domain.data_import import ImportOutcome, ImportOutcomeStatus
from app.domain.errors import SchemaValidationFailedError, UnknownImportKindError
from app.schemas.data_import import (
    ImportJobListResponse,
    ImportJobResponse,
    ImportResultResponse,
    RowErrorResponse,
    ValidationResultResponse,
)
from app.security.rate_limiter import RateLimitCache
from app.services.audit_service import StoreAuditSink
from app.services.data_import_service import DataImportService, get_data_import_service
from db.repositories.errors import RecordStoreError
from db.repositories.record_store import SQLAlchemyRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/validate", response_model=ValidationResultResponse)
def validate_import(
    kind: str = Query(..., description="Import kind, e.g. strategic_goals"),
    upload: CsvUpload = Depends(read_csv_upload),
    field_mapping: dict[str, str] | None = Depends(get_field_mapping),
    service: DataImportService = Depends(get_data_import_service),
) -> ValidationResultResponse:
    try:
        result = service.validate_csv(upload.text, kind, field_mapping=field_mapping)
    except UnknownImportKindError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ValidationResultResponse(
        is_valid=result.is_valid,
        row_count=result.row_count,
        errors=result.errors,
        warnings=result.warnings,
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ImportResultResponse,
)
def import_csv(
    kind: str = Query(..., description="Import kind, e.g. strategic_goals"),
    owner_id: str = Query(..., min_length=1, description="Principal the imported rows belong to"),
    upload: CsvUpload = Depends(read_csv_upload),
    field_mapping: dict[str, str] | None = Depends(get_field_mapping),
    store: SQLAlchemyRecordStore = Depends(get_record_store),
    rate_limiter: RateLimitCache = Depends(get_import_rate_limiter),
    service: DataImportService = Depends(get_data_import_service),
) -> ImportResultResponse:
    if not rate_limiter.check(f"import:{owner_id}"):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many import attempts. Try again later.",
        )

    try:
        outcome = service.import_csv(
            store,
            upload.text,
            owner_id=owner_id,
            file_name=upload.file_name,
            kind=kind,
            file_size=upload.size_bytes,
            field_mapping=field_mapping,
            audit_sink=StoreAuditSink(store),
        )
    except UnknownImportKindError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if outcome.status == ImportOutcomeStatus.VALIDATION_FAILED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=SchemaValidationFailedError(outcome.validation_errors).to_dict(),
        )
    if outcome.status == ImportOutcomeStatus.SYSTEM_ERROR:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": outcome.summary_message(),
                "job_id": str(outcome.job_id) if outcome.job_id is not None else None,
            },
        )

    return _to_result_response(outcome)


@router.get("/{job_id}", response_model=ImportJobResponse)
def get_import_job(
    job_id: UUID,
    store: SQLAlchemyRecordStore = Depends(get_record_store),
    service: DataImportService = Depends(get_data_import_service),
) -> ImportJobResponse:
    job = service.get_job(store, job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import job not found: {job_id}",
        )
    return _to_job_response(job)


@router.get("", response_model=ImportJobListResponse)
def list_import_jobs(
    owner_id: str | None = Query(default=None, description="Optional owner filter"),
    limit: int = Query(default=50, ge=1, le=500, description="Max jobs returned"),
    offset: int = Query(default=0, ge=0),
    store: SQLAlchemyRecordStore = Depends(get_record_store),
    service: DataImportService = Depends(get_data_import_service),
) -> ImportJobListResponse:
    try:
        jobs = service.list_jobs(store, owner_id=owner_id, limit=limit, offset=offset)
    except RecordStoreError as exc:
        logger.exception("Failed to list import jobs owner=%s", owner_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list import jobs.",
        ) from exc
    return ImportJobListResponse(jobs=[_to_job_response(job) for job in jobs])


def _to_result_response(outcome: ImportOutcome) -> ImportResultResponse:
    return ImportResultResponse(
        job_id=outcome.job_id,
        status=outcome.status,
        message=outcome.summary_message(),
        total=outcome.total,
        processed=outcome.processed,
        failed=outcome.failed,
        cancelled=outcome.cancelled,
        errors=[RowErrorResponse(row=error.row, error=error.error) for error in outcome.errors],
        warnings=outcome.warnings,
    )


def _to_job_response(job: dict[str, Any]) -> ImportJobResponse:
    return ImportJobResponse(
        job_id=job["id"],
        owner_id=job["user_id"],
        file_name=job["file_name"],
        file_size=job.get("file_size"),
        kind=job["import_type"],
        status=job["status"],
        total_records=job["total_records"],
        processed_records=job["processed_records"],
        failed_records=job["failed_records"],
        error_log=[RowErrorResponse(**entry) for entry in job.get("error_log") or []],
        failure_reason=job.get("failure_reason"),
        created_at=job.get("created_at"),
        updated_at=job.get("updated_at"),
        completed_at=job.get("completed_at"),
    )
