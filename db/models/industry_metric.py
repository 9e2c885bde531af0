"""
db/models/industry_metric.py

Industry metric entity imported from CSV alongside strategic goals.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Float, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class MetricTrend:
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class IndustryMetric(Base, TimestampMixin):
    __tablename__ = "industry_metrics"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    previous_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    trend: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="up, down, stable",
    )

    __table_args__ = (
        Index("ix_industry_metrics_user_id", "user_id"),
        Index("ix_industry_metrics_category", "category"),
    )
