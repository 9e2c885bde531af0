"""
Repository-layer exceptions for record store flows.
"""

from __future__ import annotations


class RecordStoreError(Exception):
    """Base exception for record store failures."""


class UnknownTableError(RecordStoreError):
    """Raised when a table name is not registered with the store."""


class RecordNotFoundError(RecordStoreError):
    """Raised when an update targets a record that does not exist."""
