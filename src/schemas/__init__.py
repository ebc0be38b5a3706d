"""Schema definitions for Crossref monograph deposits."""

from .batch import DepositBatch
from .crossref import ValidationError
from .doi import (
    DepositOutcome,
    DoiRecord,
    DoiRegistryManifest,
    DoiStatus,
    FailureKind,
    OutcomeStatus,
)
from .monograph import Author, Chapter, Publication, Series, Submission
from .press import PressContext

__all__ = [
    "Author",
    "Chapter",
    "DepositBatch",
    "DepositOutcome",
    "DoiRecord",
    "DoiRegistryManifest",
    "DoiStatus",
    "FailureKind",
    "OutcomeStatus",
    "PressContext",
    "Publication",
    "Series",
    "Submission",
    "ValidationError",
]
