"""DOI registries and deposit status tracking."""

from .doi_registry import DoiRegistry, JsonDoiRegistry, record_id
from .tracker import DepositStatusTracker, StatusUpdateError

__all__ = [
    "DoiRegistry",
    "JsonDoiRegistry",
    "record_id",
    "DepositStatusTracker",
    "StatusUpdateError",
]
