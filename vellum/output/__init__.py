"""Output formatters for Vellum."""

from vellum.output.base import OutputFormatter
from vellum.output.markdown_formatter import MarkdownFormatter
from vellum.output.report import ProcessingReport, ReportFormatter

__all__ = [
    "OutputFormatter",
    "MarkdownFormatter",
    "ProcessingReport",
    "ReportFormatter",
]
