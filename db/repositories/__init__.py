"""
Repository layer exports.
"""

from db.repositories.errors import RecordNotFoundError, RecordStoreError, UnknownTableError
from db.repositories.record_store import (
    DEFAULT_TABLE_MODELS,
    Pagination,
    RecordStore,
    SQLAlchemyRecordStore,
    model_to_dict,
)

__all__ = [
    "DEFAULT_TABLE_MODELS",
    "Pagination",
    "RecordStore",
    "SQLAlchemyRecordStore",
    "model_to_dict",
    "RecordStoreError",
    "RecordNotFoundError",
    "UnknownTableError",
]
