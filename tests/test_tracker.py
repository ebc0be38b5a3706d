"""Tests for the DepositStatusTracker class."""

import pytest

from crossref_deposit.registry import (
    DepositStatusTracker,
    JsonDoiRegistry,
    StatusUpdateError,
)
from schemas.doi import DepositOutcome, DoiRecord


class FailingRegistry(JsonDoiRegistry):
    """Registry whose save fails for one DOI."""

    def __init__(self, path, fail_doi, fail_on_restore=False):
        super().__init__(path)
        self.fail_doi = fail_doi
        self.fail_on_restore = fail_on_restore
        self.armed = False

    def save(self, record: DoiRecord) -> None:
        if self.armed and record.doi == self.fail_doi:
            raise OSError("disk full")
        if self.armed and self.fail_on_restore and record.status == "none":
            raise OSError("disk full")
        super().save(record)


@pytest.fixture
def registry(tmp_path, submission):
    registry = JsonDoiRegistry(tmp_path / "dois.json")
    registry.register_submission(submission)
    return registry


@pytest.fixture
def tracker(registry):
    return DepositStatusTracker(registry)


class TestRecordOutcome:
    def test_registered_marks_every_doi(self, tracker, registry, submission):
        """Book and chapter DOIs all receive the outcome."""
        outcome = DepositOutcome(status="registered", batch_id="b-1")

        updated = tracker.record_outcome(submission, outcome)

        assert len(updated) == 3
        for record in registry.dois_for_submission("17"):
            assert record.status == "registered"
            assert record.batch_id == "b-1"
            assert record.failed_msg is None
            assert record.registration_agency == "crossref"

    def test_error_marks_every_doi(self, tracker, registry, submission):
        outcome = DepositOutcome(
            status="error",
            batch_id="b-2",
            diagnostic="Rejected",
            failure="rejected",
        )

        tracker.record_outcome(submission, outcome)

        records = registry.dois_for_submission("17")
        assert {r.status for r in records} == {"error"}
        assert {r.batch_id for r in records} == {"b-2"}
        assert {r.failed_msg for r in records} == {"Rejected"}
        assert {r.registration_agency for r in records} == {None}

    def test_skipped_changes_nothing(self, tracker, registry, submission):
        """Sandbox outcomes leave records untouched."""
        updated = tracker.record_outcome(submission, DepositOutcome(status="skipped"))

        assert updated == []
        assert {r.status for r in registry.dois_for_submission("17")} == {"none"}

    def test_redeposit_overwrites_previous_state(self, tracker, registry, submission):
        """No stale batch id, status or diagnostic survives a new attempt."""
        tracker.record_outcome(
            submission,
            DepositOutcome(status="registered", batch_id="b-1", diagnostic="warnings", warning=True),
        )

        tracker.record_outcome(
            submission,
            DepositOutcome(status="error", batch_id=None, diagnostic=None, failure="transport"),
        )

        for record in registry.dois_for_submission("17"):
            assert record.status == "error"
            assert record.batch_id is None
            assert record.failed_msg is None

    def test_error_can_become_registered(self, tracker, registry, submission):
        tracker.record_outcome(
            submission, DepositOutcome(status="error", diagnostic="boom", failure="transport")
        )

        tracker.record_outcome(submission, DepositOutcome(status="registered", batch_id="b-3"))

        for record in registry.dois_for_submission("17"):
            assert record.status == "registered"
            assert record.batch_id == "b-3"
            assert record.failed_msg is None

    def test_record_status_with_message(self, tracker, registry, submission):
        tracker.record_status(submission, "error", failed_msg="Missing element Title")

        assert {r.failed_msg for r in registry.dois_for_submission("17")} == {
            "Missing element Title"
        }

    def test_submission_without_dois(self, tmp_path, submission):
        tracker = DepositStatusTracker(JsonDoiRegistry(tmp_path / "empty.json"))

        assert tracker.record_outcome(submission, DepositOutcome(status="registered")) == []


class TestPartialFailure:
    def _registry(self, tmp_path, submission, **kwargs):
        registry = FailingRegistry(tmp_path / "dois.json", **kwargs)
        registry.register_submission(submission)
        registry.armed = True
        return registry

    def test_failure_rolls_back_saved_records(self, tmp_path, submission):
        """A failed save restores the DOIs updated before it."""
        registry = self._registry(tmp_path, submission, fail_doi="10.1234/obp.17.c2")
        tracker = DepositStatusTracker(registry)

        with pytest.raises(StatusUpdateError) as exc_info:
            tracker.record_outcome(submission, DepositOutcome(status="registered", batch_id="b-1"))

        error = exc_info.value
        assert error.submission_id == "17"
        assert error.failed == "10.1234/obp.17.c2"
        assert sorted(error.rolled_back) == ["10.1234/obp.17", "10.1234/obp.17.c1"]
        assert error.rollback_failed == []
        assert {r.status for r in registry.dois_for_submission("17")} == {"none"}
        assert {r.batch_id for r in registry.dois_for_submission("17")} == {None}

    def test_failed_rollback_is_reported(self, tmp_path, submission):
        registry = self._registry(
            tmp_path, submission, fail_doi="10.1234/obp.17.c2", fail_on_restore=True
        )
        tracker = DepositStatusTracker(registry)

        with pytest.raises(StatusUpdateError) as exc_info:
            tracker.record_outcome(submission, DepositOutcome(status="registered", batch_id="b-1"))

        assert sorted(exc_info.value.rollback_failed) == ["10.1234/obp.17", "10.1234/obp.17.c1"]

    def test_error_message_names_doi(self, tmp_path, submission):
        registry = self._registry(tmp_path, submission, fail_doi="10.1234/obp.17")
        tracker = DepositStatusTracker(registry)

        with pytest.raises(StatusUpdateError, match="10.1234/obp.17"):
            tracker.record_outcome(submission, DepositOutcome(status="registered"))


class WriteFailingRegistry(JsonDoiRegistry):
    """Registry whose manifest write fails on one call."""

    def __init__(self, path, fail_on_write):
        super().__init__(path)
        self.fail_on_write = fail_on_write
        self.writes = 0

    def _write(self) -> None:
        self.writes += 1
        if self.writes == self.fail_on_write:
            raise OSError("disk full")
        super()._write()


class TestManifestWriteFailure:
    def test_disk_state_is_restored(self, tmp_path, submission):
        """A failed manifest write leaves every DOI on disk in its previous state."""
        path = tmp_path / "dois.json"
        JsonDoiRegistry(path).register_submission(submission)
        registry = WriteFailingRegistry(path, fail_on_write=2)
        tracker = DepositStatusTracker(registry)

        with pytest.raises(StatusUpdateError) as exc_info:
            tracker.record_outcome(submission, DepositOutcome(status="registered", batch_id="b-1"))

        assert exc_info.value.failed == "10.1234/obp.17.c1"
        assert exc_info.value.rolled_back == ["10.1234/obp.17"]
        reloaded = JsonDoiRegistry(path).dois_for_submission("17")
        assert {(r.status, r.batch_id) for r in reloaded} == {("none", None)}
        assert {(r.status, r.batch_id) for r in registry.dois_for_submission("17")} == {
            ("none", None)
        }
