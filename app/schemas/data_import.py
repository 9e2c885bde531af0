"""
Schemas for CSV import, validation and import job endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class RowErrorResponse(BaseModel):
    row: int
    error: str


class ValidationResultResponse(BaseModel):
    is_valid: bool
    row_count: int
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ImportResultResponse(BaseModel):
    job_id: UUID | None = None
    status: str
    message: str
    total: int
    processed: int
    failed: int
    cancelled: bool = False
    errors: list[RowErrorResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ImportJobResponse(BaseModel):
    job_id: UUID
    owner_id: str
    file_name: str
    file_size: int | None = None
    kind: str
    status: str
    total_records: int
    processed_records: int
    failed_records: int
    error_log: list[RowErrorResponse] = Field(default_factory=list)
    failure_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None


class ImportJobListResponse(BaseModel):
    jobs: list[ImportJobResponse] = Field(default_factory=list)
