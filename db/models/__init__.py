"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.audit_log import AuditLog, AuditSeverity
from db.models.import_job import ImportJob, ImportJobStatus
from db.models.industry_metric import IndustryMetric, MetricTrend
from db.models.strategic_goal import GoalStatus, StrategicGoal

__all__ = [
    "AuditLog",
    "AuditSeverity",
    "GoalStatus",
    "ImportJob",
    "ImportJobStatus",
    "IndustryMetric",
    "MetricTrend",
    "StrategicGoal",
]
