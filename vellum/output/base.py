"""Abstract base class for output formatters."""

from abc import ABC, abstractmethod
from pathlib import Path

from vellum.models import CleanedContent


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, content: CleanedContent) -> str:
        """Render cleaned content as a string.

        Args:
            content: Result of a pipeline run

        Returns:
            Rendered output
        """
        pass

    def format(self, content: CleanedContent, output_path: str) -> str:
        """Render cleaned content and write it to ``output_path``.

        Returns:
            Path to the written output file
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(content), encoding="utf-8")
        return str(path)
