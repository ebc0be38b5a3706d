"""Batch orchestrator for exporting and depositing monograph metadata.

Runs a list of submissions through the Crossref builder and then either
deposits each document (deposit mode) or writes them out as files, bundled
into one archive when there are several (download mode).
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from crossref_deposit.builders import CrossrefXmlBuilder, DocumentBuilder
from crossref_deposit.clients import CrossrefDepositClient
from crossref_deposit.export import ExportArchiver
from crossref_deposit.registry import DepositStatusTracker, StatusUpdateError
from schemas.crossref import ValidationError
from schemas.doi import DepositOutcome
from schemas.monograph import Submission
from schemas.press import PressContext

logger = logging.getLogger(__name__)

DEPOSIT_UNSUCCESSFUL = "Deposit unsuccessful"
DEPOSIT_FAILED = "Registration failed"


@dataclass
class BatchResult:
    """Aggregate result of a deposit batch.

    Only the first failure message is kept; later failures only set
    errors_occurred.
    """

    errors_occurred: bool = False
    message: str | None = None
    outcomes: dict[str, DepositOutcome] = field(default_factory=dict)

    def add_failure(self, message: str) -> None:
        self.errors_occurred = True
        if self.message is None:
            self.message = message


@dataclass
class ExportResult:
    """Result of a download-mode batch."""

    path: Path
    validation_errors: list[ValidationError] = field(default_factory=list)


class BatchOrchestrator:
    """Drive document building and deposit or export across submissions.

    Submissions are processed one at a time; each is built, deposited,
    recorded and cleaned up before the next one starts.

    Attributes:
        context: Settings of the depositing press
        builder: Document builder
        archiver: Writes export files and archives
        client: Deposit client (deposit mode only)
        tracker: Status tracker (deposit mode only)
    """

    def __init__(
        self,
        context: PressContext,
        archiver: ExportArchiver,
        builder: DocumentBuilder | None = None,
        client: CrossrefDepositClient | None = None,
        tracker: DepositStatusTracker | None = None,
    ):
        self.context = context
        self.archiver = archiver
        self.builder = builder or CrossrefXmlBuilder()
        self.client = client
        self.tracker = tracker

    def deposit(self, submissions: list[Submission]) -> BatchResult:
        """Build and deposit each submission independently.

        Submissions with validation errors are not deposited; their DOIs
        are marked as failed with the first validation message.

        Args:
            submissions: Submissions to deposit

        Returns:
            BatchResult with the failure flag and first failure message
        """
        if self.client is None or self.tracker is None:
            raise ValueError("deposit mode needs a deposit client and a status tracker")

        logger.info(f"Depositing {len(submissions)} submission(s)")
        result = BatchResult()

        for submission in submissions:
            message = self._deposit_submission(submission, result)
            if message is not None:
                result.add_failure(message)

        if result.errors_occurred:
            logger.error(f"Deposit batch finished with errors: {result.message}")
        else:
            logger.info("Deposit batch finished successfully")
        return result

    def _deposit_submission(
        self, submission: Submission, result: BatchResult
    ) -> str | None:
        """Deposit one submission.

        Returns:
            A failure message, or None if the deposit succeeded or was skipped
        """
        build = self.builder.build(submission, self.context)

        if build.validation_errors:
            for error in build.validation_errors:
                logger.warning(f"  - {error.message}")
            return self._mark_failed(submission, build.validation_errors[0].message)

        export_path = self.archiver.export_path("monograph", submission.id)
        try:
            self.archiver.write(export_path, build.to_bytes())
        except OSError as e:
            logger.error(f"Could not write deposit file {export_path}: {e}")
            self.archiver.delete(export_path)
            return self._mark_failed(
                submission, f"Could not write deposit file {export_path.name}: {e}"
            )

        try:
            outcome = self.client.deposit(
                export_path,
                self.context.credentials,
                test_mode=self.context.test_mode,
            )
            result.outcomes[submission.id] = outcome
            self.tracker.record_outcome(submission, outcome)
        except StatusUpdateError as e:
            logger.error(e.message)
            return e.message
        finally:
            self.archiver.delete(export_path)

        return self._failure_message(outcome)

    def _mark_failed(self, submission: Submission, message: str) -> str:
        """Record an error on every DOI of a submission that was not deposited."""
        try:
            self.tracker.record_status(submission, "error", failed_msg=message)
        except StatusUpdateError as e:
            logger.error(e.message)
        return message

    def _failure_message(self, outcome: DepositOutcome) -> str | None:
        if not outcome.is_error:
            return None
        if outcome.diagnostic is None:
            return DEPOSIT_UNSUCCESSFUL
        return f"{DEPOSIT_FAILED}: {outcome.diagnostic}"

    def export(self, submissions: list[Submission]) -> ExportResult:
        """Build every submission and write the documents for download.

        A single submission yields one XML file; several are bundled into
        one archive and the individual files are removed. If anything fails
        while building or writing, every file written so far is removed.

        Args:
            submissions: Submissions to export

        Returns:
            ExportResult with the file or archive path

        Raises:
            ConfigurationError: If archives cannot be written (checked
                before any file is produced)
        """
        if not submissions:
            raise ValueError("no submissions to export")

        self.archiver.check_available()
        export_date = date.today()
        validation_errors: list[ValidationError] = []
        written: list[Path] = []
        archive_path = self.archiver.archive_path(self.context.id, export_date)

        try:
            for submission in submissions:
                build = self.builder.build(submission, self.context)
                for error in build.validation_errors:
                    logger.warning(f"  - {error.message}")
                validation_errors.extend(build.validation_errors)
                path = self.archiver.export_path(
                    "monograph", submission.id, export_date=export_date
                )
                written.append(self.archiver.write(path, build.to_bytes()))

            if len(written) == 1:
                logger.info(f"Exported submission {submissions[0].id} to {written[0]}")
                return ExportResult(path=written[0], validation_errors=validation_errors)

            self.archiver.bundle(archive_path, written)
        except Exception:
            logger.error("Export failed; removing partial output")
            for path in written:
                self.archiver.delete(path)
            self.archiver.delete(archive_path)
            raise

        for path in written:
            self.archiver.delete(path)

        logger.info(f"Exported {len(written)} submissions to {archive_path}")
        return ExportResult(path=archive_path, validation_errors=validation_errors)
