"""
tests/test_import_job_state.py

Pytest unit tests for the import job lifecycle aggregate.
"""

from __future__ import annotations

import pytest

from app.domain.data_import import ImportOutcomeStatus, RowError
from app.domain.errors import InvalidJobTransitionError
from app.domain.import_job import CANCELLED_REASON, ImportJobState
from db.models import ImportJobStatus


@pytest.fixture()
def state() -> ImportJobState:
    return ImportJobState(owner_id="owner-1", file_name="goals.csv", kind="strategic_goals")


def test_new_job_is_pending(state: ImportJobState) -> None:
    assert state.status == ImportJobStatus.PENDING
    assert state.create_payload()["status"] == ImportJobStatus.PENDING


def test_happy_path_lifecycle(state: ImportJobState) -> None:
    state.start(3)
    state.record_success()
    state.record_failure(2, "Name is required")
    state.record_success()
    state.complete()

    assert state.status == ImportJobStatus.COMPLETED
    assert state.completed_at is not None
    assert (state.total, state.processed, state.failed) == (3, 2, 1)
    assert state.errors == [RowError(row=2, error="Name is required")]


def test_create_payload_after_start_reports_processing(state: ImportJobState) -> None:
    state.start(5)

    payload = state.create_payload()

    assert payload["status"] == ImportJobStatus.PROCESSING
    assert payload["total_records"] == 5
    assert payload["processed_records"] == 0
    assert payload["failed_records"] == 0
    assert payload["error_log"] == []
    assert payload["user_id"] == "owner-1"
    assert payload["import_type"] == "strategic_goals"


def test_cannot_complete_before_processing(state: ImportJobState) -> None:
    with pytest.raises(InvalidJobTransitionError):
        state.complete()


def test_terminal_states_are_final(state: ImportJobState) -> None:
    state.start(1)
    state.complete()

    with pytest.raises(InvalidJobTransitionError):
        state.fail("late failure")
    with pytest.raises(InvalidJobTransitionError):
        state.start(1)


def test_cannot_record_rows_outside_processing(state: ImportJobState) -> None:
    with pytest.raises(InvalidJobTransitionError):
        state.record_success()


def test_cannot_record_more_rows_than_total(state: ImportJobState) -> None:
    state.start(1)
    state.record_success()

    with pytest.raises(InvalidJobTransitionError):
        state.record_failure(2, "extra")
    assert state.processed + state.failed == state.total


def test_progress_patch_returns_a_fresh_error_list(state: ImportJobState) -> None:
    state.start(2)
    state.record_failure(1, "bad")
    first = state.progress_patch()
    state.record_failure(2, "worse")
    second = state.progress_patch()

    assert first["error_log"] == [{"row": 1, "error": "bad"}]
    assert second["error_log"] == [{"row": 1, "error": "bad"}, {"row": 2, "error": "worse"}]
    assert first["error_log"] is not second["error_log"]


def test_outcome_after_completion(state: ImportJobState) -> None:
    state.start(3)
    state.record_success()
    state.record_failure(2, "Name is required")
    state.record_failure(3, "Invalid status 'bogus'")
    state.complete()

    outcome = state.to_outcome(warnings=["w"])

    assert outcome.status == ImportOutcomeStatus.SUCCESS
    assert outcome.success
    assert outcome.warnings == ["w"]
    assert outcome.summary_message() == "Imported 1 of 3; 2 failed."


def test_cancelled_outcome(state: ImportJobState) -> None:
    state.start(3)
    state.record_success()
    state.fail(CANCELLED_REASON)

    outcome = state.to_outcome()
    patch = state.terminal_patch()

    assert outcome.status == ImportOutcomeStatus.SYSTEM_ERROR
    assert outcome.cancelled is True
    assert outcome.processed == 1
    assert patch["status"] == ImportJobStatus.FAILED
    assert patch["failure_reason"] == CANCELLED_REASON
    assert patch["completed_at"] is not None
