"""Enumerations for Vellum models."""

from enum import Enum
from typing import List


class MethodKind(str, Enum):
    """How a cleaning step obtains its answer."""

    ORACLE_ONLY = "oracle_only"
    HYBRID = "hybrid"
    ORACLE_CHUNKED = "oracle_chunked"
    LOCAL_ONLY = "local_only"

    @property
    def uses_oracle(self) -> bool:
        return self is not MethodKind.LOCAL_ONLY


class CleaningStep(str, Enum):
    """Pipeline operations in canonical order.

    Member definition order is the canonical execution order. ``ordinal``
    is 1-based and stable.
    """

    EXTRACT_METADATA = "extract_metadata"
    REMOVE_PAGE_NUMBERS = "remove_page_numbers"
    REMOVE_HEADERS_FOOTERS = "remove_headers_footers"
    REMOVE_FRONT_MATTER = "remove_front_matter"
    REMOVE_TABLE_OF_CONTENTS = "remove_table_of_contents"
    REMOVE_BACK_MATTER = "remove_back_matter"
    REMOVE_INDEX = "remove_index"
    REMOVE_AUXILIARY_LISTS = "remove_auxiliary_lists"
    REMOVE_CITATIONS = "remove_citations"
    REMOVE_FOOTNOTES_ENDNOTES = "remove_footnotes_endnotes"
    CLEAN_SPECIAL_CHARACTERS = "clean_special_characters"
    REFLOW_PARAGRAPHS = "reflow_paragraphs"
    OPTIMIZE_PARAGRAPH_LENGTH = "optimize_paragraph_length"
    ADD_STRUCTURE = "add_structure"

    @classmethod
    def canonical_order(cls) -> List["CleaningStep"]:
        """Return every step in execution order."""
        return list(cls)

    @classmethod
    def from_string(cls, value: str) -> "CleaningStep":
        """Convert a step name (or 1-based ordinal) to a CleaningStep.

        Raises:
            ValueError: If the value names no step
        """
        text = str(value).strip().lower().replace("-", "_")
        if text.isdigit():
            index = int(text)
            steps = cls.canonical_order()
            if 1 <= index <= len(steps):
                return steps[index - 1]
            raise ValueError(f"No cleaning step with ordinal {index}")
        return cls(text)

    @property
    def ordinal(self) -> int:
        return CleaningStep.canonical_order().index(self) + 1

    @property
    def method_kind(self) -> MethodKind:
        return _METHOD_KINDS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_mandatory(self) -> bool:
        return self in (CleaningStep.EXTRACT_METADATA, CleaningStep.ADD_STRUCTURE)

    @property
    def is_boundary_step(self) -> bool:
        """True for steps that remove a detected line range."""
        return self in _BOUNDARY_STEPS

    @property
    def is_pattern_step(self) -> bool:
        """True for steps that remove text matched by detected patterns."""
        return self in _PATTERN_STEPS

    @property
    def is_removal_step(self) -> bool:
        return self.is_boundary_step or self.is_pattern_step

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CleaningStep):
            return NotImplemented
        return self.ordinal < other.ordinal


_METHOD_KINDS = {
    CleaningStep.EXTRACT_METADATA: MethodKind.ORACLE_ONLY,
    CleaningStep.REMOVE_PAGE_NUMBERS: MethodKind.HYBRID,
    CleaningStep.REMOVE_HEADERS_FOOTERS: MethodKind.HYBRID,
    CleaningStep.REMOVE_FRONT_MATTER: MethodKind.HYBRID,
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: MethodKind.HYBRID,
    CleaningStep.REMOVE_BACK_MATTER: MethodKind.HYBRID,
    CleaningStep.REMOVE_INDEX: MethodKind.HYBRID,
    CleaningStep.REMOVE_AUXILIARY_LISTS: MethodKind.HYBRID,
    CleaningStep.REMOVE_CITATIONS: MethodKind.HYBRID,
    CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: MethodKind.HYBRID,
    CleaningStep.CLEAN_SPECIAL_CHARACTERS: MethodKind.LOCAL_ONLY,
    CleaningStep.REFLOW_PARAGRAPHS: MethodKind.ORACLE_CHUNKED,
    CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH: MethodKind.ORACLE_CHUNKED,
    CleaningStep.ADD_STRUCTURE: MethodKind.LOCAL_ONLY,
}

_LABELS = {
    CleaningStep.EXTRACT_METADATA: "Extract Metadata",
    CleaningStep.REMOVE_PAGE_NUMBERS: "Remove Page Numbers",
    CleaningStep.REMOVE_HEADERS_FOOTERS: "Remove Headers & Footers",
    CleaningStep.REMOVE_FRONT_MATTER: "Remove Front Matter",
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: "Remove Table of Contents",
    CleaningStep.REMOVE_BACK_MATTER: "Remove Back Matter",
    CleaningStep.REMOVE_INDEX: "Remove Index",
    CleaningStep.REMOVE_AUXILIARY_LISTS: "Remove Auxiliary Lists",
    CleaningStep.REMOVE_CITATIONS: "Remove Citations",
    CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: "Remove Footnotes & Endnotes",
    CleaningStep.CLEAN_SPECIAL_CHARACTERS: "Clean Special Characters",
    CleaningStep.REFLOW_PARAGRAPHS: "Reflow Paragraphs",
    CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH: "Optimize Paragraph Length",
    CleaningStep.ADD_STRUCTURE: "Add Structure",
}

_BOUNDARY_STEPS = frozenset(
    {
        CleaningStep.REMOVE_FRONT_MATTER,
        CleaningStep.REMOVE_TABLE_OF_CONTENTS,
        CleaningStep.REMOVE_BACK_MATTER,
        CleaningStep.REMOVE_INDEX,
        CleaningStep.REMOVE_AUXILIARY_LISTS,
        CleaningStep.REMOVE_FOOTNOTES_ENDNOTES,
    }
)

_PATTERN_STEPS = frozenset(
    {
        CleaningStep.REMOVE_PAGE_NUMBERS,
        CleaningStep.REMOVE_HEADERS_FOOTERS,
        CleaningStep.REMOVE_CITATIONS,
        CleaningStep.REMOVE_FOOTNOTES_ENDNOTES,
    }
)

assert set(_METHOD_KINDS) == set(CleaningStep) == set(_LABELS)


class SectionType(str, Enum):
    """Structural section targeted by a boundary or pattern detection."""

    FRONT_MATTER = "front_matter"
    TABLE_OF_CONTENTS = "table_of_contents"
    INDEX = "index"
    BACK_MATTER = "back_matter"
    AUXILIARY_LIST = "auxiliary_list"
    CITATIONS = "citations"
    FOOTNOTES = "footnotes"
    PAGE_NUMBERS = "page_numbers"
    HEADERS_FOOTERS = "headers_footers"
    FOOTNOTE_MARKERS = "footnote_markers"

    @classmethod
    def from_string(cls, value: str) -> "SectionType":
        """Convert string to SectionType.

        Raises:
            ValueError: If the value names no section type
        """
        return cls(str(value).strip().lower().replace("-", "_").replace(" ", "_"))

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class RejectionReason(str, Enum):
    """Why a defense phase rejected a candidate."""

    POSITION_TOO_EARLY = "position_too_early"
    POSITION_TOO_LATE = "position_too_late"
    INVALID_RANGE = "invalid_range"
    OUT_OF_BOUNDS = "out_of_bounds"
    EXCESSIVE_REMOVAL = "excessive_removal"
    SECTION_TOO_SMALL = "section_too_small"
    LOW_CONFIDENCE = "low_confidence"
    MISSING_EXPECTED_PATTERN = "missing_expected_pattern"
    INVALID_PATTERN = "invalid_pattern"


class CandidateSource(str, Enum):
    """Where a candidate came from."""

    ORACLE = "oracle"
    HEURISTIC = "heuristic"
    DEFAULT = "default"


class StepStatus(str, Enum):
    """Outcome recorded for a single step."""

    COMPLETED = "completed"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    """Lifecycle state of a pipeline run."""

    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class AnomalySeverity(str, Enum):
    """Severity of a post-step verification anomaly."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class PresetType(str, Enum):
    """Named configuration bundles."""

    DEFAULT = "default"
    TRAINING = "training"
    MINIMAL = "minimal"
    SCHOLARLY = "scholarly"

    @classmethod
    def from_string(cls, value: str) -> "PresetType":
        """Convert string to PresetType, accepting aliases.

        Raises:
            ValueError: If the value names no preset
        """
        text = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        text = _PRESET_ALIASES.get(text, text)
        return cls(text)


_PRESET_ALIASES = {
    "aggressive": "training",
    "preserve_citations": "default",
    "conservative": "minimal",
    "academic": "scholarly",
}


class ChapterMarkerStyle(str, Enum):
    """How chapter boundaries are marked by the structure step."""

    NONE = "none"
    HTML_COMMENTS = "html_comments"
    MARKDOWN_H1 = "markdown_h1"
    MARKDOWN_H2 = "markdown_h2"
    TOKEN_STYLE = "token_style"

    @classmethod
    def from_string(cls, value: str) -> "ChapterMarkerStyle":
        """Convert string to ChapterMarkerStyle, defaulting to HTML_COMMENTS."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.HTML_COMMENTS

    def format_marker(self, title: str) -> str:
        """Render the marker for a chapter title."""
        if self is ChapterMarkerStyle.NONE:
            return ""
        if self is ChapterMarkerStyle.HTML_COMMENTS:
            return f"<!-- CHAPTER: {title} -->"
        if self is ChapterMarkerStyle.MARKDOWN_H1:
            return f"# {title}"
        if self is ChapterMarkerStyle.MARKDOWN_H2:
            return f"## {title}"
        return f"<CHAPTER>{title}</CHAPTER>"

    def format_part_marker(self, title: str) -> str:
        """Render the marker for a part title."""
        if self is ChapterMarkerStyle.NONE:
            return ""
        if self is ChapterMarkerStyle.HTML_COMMENTS:
            return f"<!-- PART: {title} -->"
        if self is ChapterMarkerStyle.TOKEN_STYLE:
            return f"<PART>{title}</PART>"
        return f"# {title}"

    @property
    def inserts_markers(self) -> bool:
        return self is not ChapterMarkerStyle.NONE


class EndMarkerStyle(str, Enum):
    """End-of-document marker appended by the structure step."""

    NONE = "none"
    MINIMAL = "minimal"
    SIMPLE = "simple"
    STANDARD = "standard"
    HTML_COMMENT = "html_comment"
    MARKDOWN_HR = "markdown_hr"
    TOKEN = "token"
    TOKEN_WITH_AUTHOR = "token_with_author"

    @classmethod
    def from_string(cls, value: str) -> "EndMarkerStyle":
        """Convert string to EndMarkerStyle, defaulting to STANDARD."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.STANDARD

    def format_marker(self, title: str, author: str = "") -> str:
        """Render the end marker for a document."""
        if self is EndMarkerStyle.NONE:
            return ""
        if self is EndMarkerStyle.MINIMAL:
            return "***"
        if self is EndMarkerStyle.SIMPLE:
            return "[END]"
        if self is EndMarkerStyle.STANDARD:
            return f"*** <!-- END OF {title.upper()} -->"
        if self is EndMarkerStyle.HTML_COMMENT:
            return f"<!-- END OF DOCUMENT: {title} -->"
        if self is EndMarkerStyle.MARKDOWN_HR:
            return "---"
        if self is EndMarkerStyle.TOKEN:
            return "<END_DOCUMENT>"
        if author:
            return f'<END_DOCUMENT author="{author}">'
        return "<END_DOCUMENT>"


class MetadataFormat(str, Enum):
    """Format of the metadata block written by the structure step."""

    YAML = "yaml"
    JSON = "json"
    MARKDOWN = "markdown"

    @classmethod
    def from_string(cls, value: str) -> "MetadataFormat":
        """Convert string to MetadataFormat, defaulting to YAML."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.YAML


class ContentType(str, Enum):
    """Primary content classification of a document."""

    PROSE = "prose"
    ACADEMIC = "academic"
    TECHNICAL = "technical"
    POETRY = "poetry"
    DRAMA = "drama"
    MIXED = "mixed"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> "ContentType":
        """Convert string to ContentType, defaulting to UNKNOWN."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN
