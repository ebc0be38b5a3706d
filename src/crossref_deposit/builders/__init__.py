"""Builders for registration agency metadata documents."""

from .builder import BuildResult, DocumentBuilder
from .crossref_builder import CrossrefXmlBuilder

__all__ = ["BuildResult", "DocumentBuilder", "CrossrefXmlBuilder"]
