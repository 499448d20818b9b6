"""Markdown output of the cleaned document."""

from vellum.models import CleanedContent
from vellum.output.base import OutputFormatter


class MarkdownFormatter(OutputFormatter):
    """Writes the cleaned text, which already carries its own structure."""

    def render(self, content: CleanedContent) -> str:
        text = content.text.rstrip("\n")
        return text + "\n" if text else ""
