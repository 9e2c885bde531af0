"""
app/api/routers/data_export.py

Export endpoint.

GET /exports/{kind}?format=csv|json

Responds with ``text/csv`` (default) or ``application/json`` as an attachment
named ``<kind>_<YYYY-MM-DD>.<format>``.
Formatting lives in DataExportService; the router only handles HTTP plumbing.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from app.api.dependencies import get_record_store
from app.domain.errors import UnknownImportKindError
from app.services.data_export_service import DataExportService, ExportFormat, get_data_export_service
from db.repositories.errors import RecordStoreError
from db.repositories.record_store import SQLAlchemyRecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/exports", tags=["export"])


@router.get("/{kind}", summary="Export one import kind as CSV or JSON")
def export_kind(
    kind: str,
    owner_id: str | None = Query(default=None, description="Optional owner filter"),
    limit: int | None = Query(default=None, ge=1, description="Max rows; capped by EXPORT_MAX_ROWS"),
    export_format: Literal["csv", "json"] = Query(default=ExportFormat.CSV, alias="format"),
    store: SQLAlchemyRecordStore = Depends(get_record_store),
    service: DataExportService = Depends(get_data_export_service),
) -> Response:
    try:
        artifact = service.export_kind(
            store,
            kind,
            owner_id=owner_id,
            limit=limit,
            export_format=export_format,
        )
    except UnknownImportKindError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RecordStoreError as exc:
        logger.exception("Export failed kind=%s", kind)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Export failed.",
        ) from exc

    return Response(
        content=artifact.content,
        media_type=f"{artifact.media_type}; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"',
            "X-Row-Count": str(artifact.row_count),
        },
    )
