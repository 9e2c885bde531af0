"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import ImportSettings, get_import_settings, get_rate_limit_settings
from app.domain.errors import MalformedCsvError
from app.parsing.csv_parser import decode_csv_bytes
from app.security.rate_limiter import RateLimitCache
from db.repositories.record_store import SQLAlchemyRecordStore
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

_READ_CHUNK_BYTES = 1024 * 1024


@dataclass(frozen=True)
class CsvUpload:
    file_name: str
    text: str
    size_bytes: int


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type.split(";", 1)[0].strip() in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def read_csv_upload(
    file: UploadFile = Depends(get_csv_upload),
    settings: ImportSettings = Depends(get_import_settings),
) -> CsvUpload:
    """
    Read the upload into text, rejecting files over the configured size.
    """

    chunks: list[bytes] = []
    size = 0
    try:
        file.file.seek(0)
        while True:
            chunk = file.file.read(_READ_CHUNK_BYTES)
            if not chunk:
                break
            size += len(chunk)
            if size > settings.max_file_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"CSV file exceeds the {settings.max_file_bytes} byte limit.",
                )
            chunks.append(chunk)
    finally:
        file.file.close()

    try:
        text = decode_csv_bytes(b"".join(chunks))
    except MalformedCsvError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return CsvUpload(file_name=file.filename or "upload.csv", text=text, size_bytes=size)


def get_field_mapping(
    field_mapping: str | None = Form(
        default=None,
        description='JSON object renaming CSV headers to columns, e.g. {"Goal Title": "name"}',
    ),
) -> dict[str, str] | None:
    if not field_mapping or not field_mapping.strip():
        return None
    try:
        mapping = json.loads(field_mapping)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="field_mapping must be a JSON object.",
        ) from exc
    if not isinstance(mapping, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in mapping.items()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="field_mapping must map header names to column names.",
        )
    return mapping


def get_record_store(db: Session = Depends(get_db)) -> SQLAlchemyRecordStore:
    return SQLAlchemyRecordStore(db)


@lru_cache(maxsize=1)
def get_import_rate_limiter() -> RateLimitCache:
    """
    Process-wide limiter for import attempts; the scheduler sweeps it.
    """

    settings = get_rate_limit_settings()
    return RateLimitCache(
        max_attempts=settings.max_attempts,
        window_seconds=settings.window_seconds,
    )
