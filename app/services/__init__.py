"""
app/services package marker.
"""

from app.services.audit_service import AuditSink, LoggingAuditSink, StoreAuditSink
from app.services.data_export_service import (
    DataExportService,
    ExportArtifact,
    ExportFormat,
    export_filename,
    get_data_export_service,
    to_csv,
    to_json,
)
from app.services.data_import_service import DataImportService, get_data_import_service

__all__ = [
    "AuditSink",
    "DataExportService",
    "DataImportService",
    "ExportArtifact",
    "ExportFormat",
    "LoggingAuditSink",
    "StoreAuditSink",
    "export_filename",
    "get_data_export_service",
    "get_data_import_service",
    "to_csv",
    "to_json",
]
