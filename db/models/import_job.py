"""
db/models/import_job.py

Import job ledger: one row per CSV import, tracking lifecycle and counters.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType, TimestampMixin


class ImportJobStatus:
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportJob(Base, TimestampMixin):
    __tablename__ = "data_imports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Principal that started the import",
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    import_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Registered import kind, e.g. strategic_goals",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportJobStatus.PENDING,
    )
    total_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_log: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Ordered list of {row, error} entries",
    )
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_data_imports_user_id", "user_id"),
        Index("ix_data_imports_status", "status"),
        Index("ix_data_imports_created_at", "created_at"),
    )
