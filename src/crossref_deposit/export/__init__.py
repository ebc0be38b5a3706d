"""Export files and archives."""

from .archiver import ConfigurationError, ExportArchiver

__all__ = ["ConfigurationError", "ExportArchiver"]
