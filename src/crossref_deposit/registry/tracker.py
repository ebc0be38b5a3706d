"""Deposit status tracking across all DOIs of a submission."""

import logging

from schemas.doi import DepositOutcome, DoiRecord, DoiStatus
from schemas.monograph import Submission

from .doi_registry import DoiRegistry

logger = logging.getLogger(__name__)

REGISTRATION_AGENCY = "crossref"


class StatusUpdateError(Exception):
    """Raised when a status update could not be applied to every DOI.

    Records saved before the failure are restored to their previous values
    where possible.

    Attributes:
        submission_id: Submission being updated
        failed: DOI whose save failed
        rolled_back: DOIs restored to their previous state
        rollback_failed: DOIs left with the new state because restoring failed
    """

    def __init__(
        self,
        message: str,
        submission_id: str,
        failed: str,
        rolled_back: list[str] | None = None,
        rollback_failed: list[str] | None = None,
    ):
        self.message = message
        self.submission_id = submission_id
        self.failed = failed
        self.rolled_back = rolled_back or []
        self.rollback_failed = rollback_failed or []
        super().__init__(message)


class DepositStatusTracker:
    """Apply deposit outcomes to the DOIs of a submission.

    Every DOI owned by a submission (the book DOI and each chapter DOI)
    receives the same status, batch id and diagnostic. All updated records
    are prepared before the first save; a failed save rolls back the ones
    already written and raises StatusUpdateError.
    """

    def __init__(self, registry: DoiRegistry):
        self.registry = registry

    def record_outcome(
        self, submission: Submission, outcome: DepositOutcome
    ) -> list[DoiRecord]:
        """Record a deposit outcome on every DOI of a submission.

        Skipped deposits (sandbox mode) leave the records untouched.

        Args:
            submission: Submission whose DOIs are updated
            outcome: Classified deposit result

        Returns:
            The updated records

        Raises:
            StatusUpdateError: If the update could not be applied to all DOIs
        """
        if outcome.status == "skipped":
            logger.debug(f"Deposit skipped for submission {submission.id}; status unchanged")
            return []
        return self.record_status(
            submission,
            outcome.status,
            batch_id=outcome.batch_id,
            failed_msg=outcome.diagnostic,
        )

    def record_status(
        self,
        submission: Submission,
        status: DoiStatus,
        batch_id: str | None = None,
        failed_msg: str | None = None,
    ) -> list[DoiRecord]:
        """Overwrite status, batch id and diagnostic on every DOI.

        Returns:
            The updated records

        Raises:
            StatusUpdateError: If the update could not be applied to all DOIs
        """
        originals = self.registry.dois_for_submission(submission.id)
        changes = {"status": status, "batch_id": batch_id, "failed_msg": failed_msg}
        if status == "registered":
            changes["registration_agency"] = REGISTRATION_AGENCY
        updated = [record.model_copy(update=changes) for record in originals]

        applied: list[DoiRecord] = []
        for original, record in zip(originals, updated):
            try:
                self.registry.save(record)
            except Exception as e:
                rolled_back, rollback_failed = self._roll_back(applied)
                raise StatusUpdateError(
                    f"Failed to update DOI {record.doi} of submission {submission.id}: {e}",
                    submission_id=submission.id,
                    failed=record.doi,
                    rolled_back=rolled_back,
                    rollback_failed=rollback_failed,
                ) from e
            applied.append(original)

        logger.info(
            f"Marked {len(updated)} DOI(s) of submission {submission.id} as {status}"
        )
        return updated

    def _roll_back(self, originals: list[DoiRecord]) -> tuple[list[str], list[str]]:
        """Restore records to their previous values.

        Returns:
            (restored DOIs, DOIs that could not be restored)
        """
        rolled_back: list[str] = []
        rollback_failed: list[str] = []
        for original in reversed(originals):
            try:
                self.registry.save(original)
                rolled_back.append(original.doi)
            except Exception as e:
                logger.error(f"Could not restore DOI {original.doi}: {e}")
                rollback_failed.append(original.doi)
        return rolled_back, rollback_failed
