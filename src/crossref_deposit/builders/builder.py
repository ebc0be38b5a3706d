"""Base class for metadata document builders.

Builders turn a submission snapshot into an XML document for a
registration agency. They are pure: everything they need arrives as
arguments, and missing required data is reported as validation errors
rather than raised.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from lxml import etree

from schemas.crossref import ValidationError
from schemas.monograph import Submission
from schemas.press import PressContext


@dataclass
class BuildResult:
    """A built document and the validation errors found while building it."""

    document: etree._Element
    validation_errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors

    def to_bytes(self) -> bytes:
        """Serialize the document as UTF-8 XML with a declaration."""
        return etree.tostring(
            self.document,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )


class DocumentBuilder(ABC):
    """Abstract base class for metadata document builders."""

    @abstractmethod
    def build(
        self,
        submission: Submission,
        context: PressContext,
        timestamp: datetime | None = None,
    ) -> BuildResult:
        """Build a metadata document for one submission.

        Args:
            submission: Snapshot of the submission to describe
            context: Settings of the depositing press
            timestamp: Time used for the batch id; defaults to now

        Returns:
            BuildResult with the document and any validation errors
        """
        pass
