"""DOI record and deposit outcome schemas."""

from typing import Literal

from pydantic import BaseModel

DoiStatus = Literal["none", "registered", "error"]
OutcomeStatus = Literal["registered", "error", "skipped"]
FailureKind = Literal["transport", "rejected", "malformed"]


class DoiRecord(BaseModel):
    """A registered (or to-be-registered) DOI owned by a submission.

    Attributes:
        id: Registry key
        submission_id: Submission the DOI belongs to
        chapter_id: Chapter the DOI belongs to, None for the book DOI
        doi: The DOI string
        status: Deposit status; "none" until the first deposit attempt
        batch_id: Batch id of the last deposit attempt
        failed_msg: Diagnostic text of the last deposit attempt
        registration_agency: Agency that confirmed the registration
    """

    id: str
    submission_id: str
    chapter_id: str | None = None
    doi: str
    status: DoiStatus = "none"
    batch_id: str | None = None
    failed_msg: str | None = None
    registration_agency: str | None = None


class DepositOutcome(BaseModel):
    """Classified result of one deposit attempt.

    Attributes:
        status: "registered", "error", or "skipped" (sandbox)
        batch_id: Batch id echoed by the agency, when known
        diagnostic: Text for operator inspection
        warning: True when the deposit succeeded with warnings
        failure: Kind of failure for "error" outcomes
    """

    status: OutcomeStatus
    batch_id: str | None = None
    diagnostic: str | None = None
    warning: bool = False
    failure: FailureKind | None = None

    @property
    def is_error(self) -> bool:
        return self.status == "error"


class DoiRegistryManifest(BaseModel):
    """On-disk form of a JSON DOI registry.

    Attributes:
        version: Manifest schema version
        records: All DOI records, book DOIs before their chapters
    """

    version: str = "1.0"
    records: list[DoiRecord] = []
