"""Detected document patterns and metadata."""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any

from vellum.models.enums import ContentType


DEFAULT_PAGE_NUMBER_PATTERNS: List[str] = [
    r"^\d+$",
    r"^[ivxlcdm]+$",
    r"^[IVXLCDM]+$",
    r"^Page\s+\d+$",
    r"^p\.?\s*\d+$",
    r"^\d+\s+of\s+\d+$",
    r"^-\s*\d+\s*-$",
    r"^-\s*[ivxlcdm]+\s*-$",
    r"^-\s*[IVXLCDM]+\s*-$",
    "^—\\s*\\d+\\s*—$",
    "^—\\s*[ivxlcdm]+\\s*—$",
    "^—\\s*[IVXLCDM]+\\s*—$",
    r"^\[\d+\]$",
]

DEFAULT_SPECIAL_CHARACTERS: List[str] = ["*", "_"]


@dataclass
class ContentTypeFlags:
    """Content characteristics that change how steps treat a document."""

    has_code: bool = False
    has_math: bool = False
    has_tables: bool = False
    has_poetry: bool = False
    has_dialogue: bool = False
    is_academic: bool = False
    primary_type: ContentType = ContentType.UNKNOWN

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ContentTypeFlags":
        data = data or {}
        return cls(
            has_code=bool(data.get("has_code", False)),
            has_math=bool(data.get("has_math", False)),
            has_tables=bool(data.get("has_tables", False)),
            has_poetry=bool(data.get("has_poetry", False)),
            has_dialogue=bool(data.get("has_dialogue", False)),
            is_academic=bool(data.get("is_academic", False)),
            primary_type=ContentType.from_string(data.get("primary_type", "unknown")),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["primary_type"] = self.primary_type.value
        return data

    @property
    def preserves_line_breaks(self) -> bool:
        """Line breaks carry meaning (verse, scripts) and must not be reflowed."""
        return self.has_poetry or self.primary_type in (ContentType.POETRY, ContentType.DRAMA)


@dataclass
class DetectedPatterns:
    """Document-wide patterns detected once per session.

    Line hints describe the document as it was when detection ran and are
    never used for removal; boundary steps re-detect on current text.
    """

    document_id: str
    content_hash: str = ""

    # Recurring elements
    page_number_patterns: List[str] = field(default_factory=list)
    header_patterns: List[str] = field(default_factory=list)
    footer_patterns: List[str] = field(default_factory=list)
    citation_patterns: List[str] = field(default_factory=list)
    citation_style: Optional[str] = None
    footnote_marker_patterns: List[str] = field(default_factory=list)
    special_characters_to_remove: List[str] = field(default_factory=list)

    # Structural hints
    has_front_matter: bool = False
    front_matter_end_line: Optional[int] = None
    toc_start_line: Optional[int] = None
    toc_end_line: Optional[int] = None
    index_start_line: Optional[int] = None
    back_matter_start_line: Optional[int] = None
    chapter_start_lines: List[int] = field(default_factory=list)
    chapter_titles: List[str] = field(default_factory=list)

    content_type: ContentTypeFlags = field(default_factory=ContentTypeFlags)
    confidence: float = 0.0
    analysis_notes: str = ""

    @classmethod
    def defaults(cls, document_id: str, content_hash: str = "") -> "DetectedPatterns":
        """Patterns used when detection is unavailable."""
        return cls(
            document_id=document_id,
            content_hash=content_hash,
            page_number_patterns=list(DEFAULT_PAGE_NUMBER_PATTERNS),
            special_characters_to_remove=list(DEFAULT_SPECIAL_CHARACTERS),
            confidence=0.0,
            analysis_notes="Using default patterns",
        )

    def with_defaults(self) -> "DetectedPatterns":
        """Fill empty page-number and character lists with defaults."""
        if not self.page_number_patterns:
            self.page_number_patterns = list(DEFAULT_PAGE_NUMBER_PATTERNS)
        if not self.special_characters_to_remove:
            self.special_characters_to_remove = list(DEFAULT_SPECIAL_CHARACTERS)
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["content_type"] = self.content_type.to_dict()
        return data


@dataclass
class DocumentMetadata:
    """Bibliographic metadata extracted from a document."""

    title: str = "Untitled"
    subtitle: Optional[str] = None
    author: Optional[str] = None
    translator: Optional[str] = None
    editor: Optional[str] = None
    publisher: Optional[str] = None
    publish_date: Optional[str] = None
    isbn: Optional[str] = None
    language: Optional[str] = None
    genre: Optional[str] = None
    series: Optional[str] = None
    edition: Optional[str] = None
    content_type: Optional[ContentTypeFlags] = None
    chapters_detected: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary, dropping empty fields."""
        data: Dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None or value == "":
                continue
            data[key] = value
        if self.content_type is not None:
            data["content_type"] = self.content_type.to_dict()
        return data

    @property
    def title_header(self) -> str:
        header = f"# {self.title}"
        if self.subtitle:
            header += f": {self.subtitle}"
        return header
