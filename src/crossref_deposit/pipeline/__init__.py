"""Batch processing of submissions."""

from .orchestrator import BatchOrchestrator, BatchResult, ExportResult

__all__ = ["BatchOrchestrator", "BatchResult", "ExportResult"]
