"""
db/models/strategic_goal.py

Strategic goal entity, the primary target of CSV imports.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, Float, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class GoalStatus:
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class StrategicGoal(Base, TimestampMixin):
    __tablename__ = "strategic_goals"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=GoalStatus.PLANNED,
        comment="planned, active, completed, paused",
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    current_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_strategic_goals_user_name"),
        Index("ix_strategic_goals_user_id", "user_id"),
        Index("ix_strategic_goals_status", "status"),
    )
