"""
app/domain/errors.py

Exception taxonomy for the import / validation / export pipeline.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class DataPipelineError(Exception):
    """Base exception for pipeline failures."""


class MalformedCsvError(DataPipelineError):
    """
    Raised when CSV text cannot be turned into a header plus data rows.
    Nothing has been written when this is raised.
    """


class SchemaValidationFailedError(DataPipelineError):
    """
    Raised when a dry-run validation reports blocking errors.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        super().__init__(f"Validation failed with {len(self.errors)} error(s).")

    def to_dict(self) -> dict[str, Any]:
        return {"message": str(self), "errors": list(self.errors)}


class RowPersistenceFailedError(DataPipelineError):
    """
    One row could not be built or written. Recorded in the job ledger; never
    escapes the orchestrator.
    """

    def __init__(self, *, row_number: int, message: str) -> None:
        self.row_number = row_number
        self.message = message
        super().__init__(f"Row {row_number}: {message}")


class PayloadTooLargeError(DataPipelineError):
    """
    Raised when a sanitized value serializes to more bytes than allowed.
    """

    def __init__(self, *, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(f"Payload of {size_bytes} bytes exceeds the {max_bytes} byte limit")


class UnknownImportKindError(DataPipelineError):
    """
    Raised when an import kind is not registered.
    """

    def __init__(self, kind: str, allowed: Sequence[str]) -> None:
        self.kind = kind
        self.allowed = tuple(allowed)
        super().__init__(
            f"Unknown import kind '{kind}'. Allowed kinds: {', '.join(sorted(self.allowed))}."
        )


class InvalidJobTransitionError(DataPipelineError):
    """
    Raised when an import job would move backwards or out of a terminal state.
    """
