"""Batch input schema.

A batch file bundles the press settings with the submissions to export or
deposit:

    {
      "context": {"id": "1", "publisher_name": {"en_US": "..."}, ...},
      "submissions": [{"id": "17", "publication": {...}}, ...]
    }
"""

from pydantic import BaseModel

from .monograph import Submission
from .press import PressContext


class DepositBatch(BaseModel):
    """Press settings plus the submissions of one batch run."""

    context: PressContext
    submissions: list[Submission] = []
