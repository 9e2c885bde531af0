"""
app/services/audit_service.py

Audit sinks for pipeline events.

The import pipeline emits one event per batch. Sinks must not raise into
the caller's control flow; the orchestrator still guards every call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from app.logging_utils import log_event, severity_to_level
from db.models import AuditLog, AuditSeverity
from db.repositories.record_store import RecordStore

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    def log_event(
        self,
        *,
        action: str,
        resource: str,
        description: str,
        severity: str = AuditSeverity.INFO,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        ...


class LoggingAuditSink:
    """
    Writes audit events as structured log lines.
    """

    def __init__(self, audit_logger: logging.Logger | None = None) -> None:
        self._logger = audit_logger or logger

    def log_event(
        self,
        *,
        action: str,
        resource: str,
        description: str,
        severity: str = AuditSeverity.INFO,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        log_event(
            self._logger,
            severity_to_level(severity),
            "audit",
            action=action,
            resource=resource,
            description=description,
            severity=severity,
            metadata=dict(metadata or {}),
        )


class StoreAuditSink:
    """
    Persists audit events to ``audit_logs`` through a record store.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def log_event(
        self,
        *,
        action: str,
        resource: str,
        description: str,
        severity: str = AuditSeverity.INFO,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        self._store.create_record(
            AuditLog.__tablename__,
            {
                "action": action,
                "resource": resource,
                "description": description,
                "severity": severity,
                "metadata_json": dict(metadata or {}),
            },
        )
