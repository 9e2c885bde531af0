"""
app/schemas package marker.
"""

from app.schemas.data_import import (
    ImportJobListResponse,
    ImportJobResponse,
    ImportResultResponse,
    RowErrorResponse,
    ValidationResultResponse,
)

__all__ = [
    "ImportJobListResponse",
    "ImportJobResponse",
    "ImportResultResponse",
    "RowErrorResponse",
    "ValidationResultResponse",
]
