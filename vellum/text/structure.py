"""Document structuring: title, metadata block, chapter and end markers."""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import yaml

from vellum.models import (
    ChapterMarkerStyle,
    DocumentMetadata,
    EndMarkerStyle,
    MetadataFormat,
)

logger = logging.getLogger(__name__)

_NUMBER_WORDS = (
    "one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|thirteen|"
    "fourteen|fifteen|sixteen|seventeen|eighteen|nineteen|twenty"
)

_CHAPTER_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r"^#{1,2}\s*chapter\s+(?:\d+|[ivxlc]+|" + _NUMBER_WORDS + r"|[a-z]+)\b", re.IGNORECASE),
    re.compile(r"^#{1,2}\s+\d{1,3}[.:\s]+\S"),
    re.compile(r"^#{1,2}\s+[IVXLC]+[.:\s]+\S"),
    re.compile(r"^#{1,2}\s+\d{1,3}\s*$"),
)

_PART_PATTERN = re.compile(
    r"^#{1,2}\s*(?:part|book|volume)\s+(?:\d+|[ivxlc]+|" + _NUMBER_WORDS + r")\b",
    re.IGNORECASE,
)

_NON_CHAPTER_HEADINGS = (
    "notes",
    "index",
    "appendix",
    "bibliography",
    "glossary",
    "references",
    "acknowledgment",
    "acknowledgement",
    "about the author",
    "contents",
    "table of contents",
)

_FENCE_RE = re.compile(r"^\s*(```|~~~)")

_MARKDOWN_LABELS = (
    ("title", "Title"),
    ("subtitle", "Subtitle"),
    ("author", "Author"),
    ("translator", "Translator"),
    ("editor", "Editor"),
    ("publisher", "Publisher"),
    ("publish_date", "Published"),
    ("genre", "Genre"),
    ("series", "Series"),
    ("edition", "Edition"),
    ("isbn", "ISBN"),
    ("language", "Language"),
)


@dataclass(frozen=True)
class DetectedHeading:
    line_index: int
    title: str
    is_part: bool = False


@dataclass
class StructureResult:
    text: str
    chapters: List[DetectedHeading] = field(default_factory=list)

    @property
    def chapters_found(self) -> int:
        return sum(1 for heading in self.chapters if not heading.is_part)


def _heading_title(line: str) -> str:
    return re.sub(r"^#+\s*", "", line.strip()).strip()


def code_block_lines(lines: Sequence[str]) -> List[bool]:
    """Flag every line inside (or delimiting) a fenced code block."""
    flags = []
    inside = False
    for line in lines:
        if _FENCE_RE.match(line):
            flags.append(True)
            inside = not inside
            continue
        flags.append(inside)
    return flags


def detect_chapter_headings(
    lines: Sequence[str], chapter_titles: Optional[Sequence[str]] = None
) -> List[DetectedHeading]:
    """Find chapter and part headings in current text, outside code blocks.

    Args:
        lines: Document lines
        chapter_titles: Extra exact heading lines reported by pattern detection

    Returns:
        Headings in document order
    """
    titles = {t.strip().lower() for t in (chapter_titles or []) if t.strip()}
    in_code = code_block_lines(lines)
    headings = []

    for index, line in enumerate(lines):
        if in_code[index]:
            continue
        stripped = line.strip()
        if not stripped.startswith("#"):
            if stripped and stripped.lower() in titles:
                headings.append(DetectedHeading(index, stripped))
            continue

        title = _heading_title(stripped)
        lowered = title.lower()
        if any(lowered.startswith(word) for word in _NON_CHAPTER_HEADINGS):
            continue
        if _PART_PATTERN.match(stripped):
            headings.append(DetectedHeading(index, title, is_part=True))
        elif any(p.match(stripped) for p in _CHAPTER_PATTERNS) or lowered in titles:
            headings.append(DetectedHeading(index, title))

    return headings


def insert_chapter_markers(
    text: str,
    style: ChapterMarkerStyle,
    chapter_titles: Optional[Sequence[str]] = None,
) -> StructureResult:
    """Insert a marker line (and a blank line) before each detected heading."""
    lines = text.split("\n")
    headings = detect_chapter_headings(lines, chapter_titles)
    if not style.inserts_markers or not headings:
        return StructureResult(text=text, chapters=headings)

    for heading in reversed(headings):
        if heading.is_part:
            marker = style.format_part_marker(heading.title)
        else:
            marker = style.format_marker(heading.title)
        lines[heading.line_index : heading.line_index] = [marker, ""]

    logger.info(f"Inserted {len(headings)} chapter/part markers")
    return StructureResult(text="\n".join(lines), chapters=headings)


def format_metadata(metadata: DocumentMetadata, fmt: MetadataFormat) -> str:
    """Render the metadata block in the configured format."""
    data = metadata.to_dict()
    data.pop("content_type", None)

    if fmt is MetadataFormat.JSON:
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt is MetadataFormat.MARKDOWN:
        rows = [
            f"**{label}:** {data[key]}" for key, label in _MARKDOWN_LABELS if key in data
        ]
        return "  \n".join(rows)
    body = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{body}---"


def apply_structure(
    text: str,
    metadata: DocumentMetadata,
    metadata_format: MetadataFormat = MetadataFormat.YAML,
    chapter_style: ChapterMarkerStyle = ChapterMarkerStyle.HTML_COMMENTS,
    end_style: EndMarkerStyle = EndMarkerStyle.STANDARD,
    chapter_titles: Optional[Sequence[str]] = None,
) -> StructureResult:
    """Wrap cleaned content in its final document layout.

    The layout is: title header, metadata block, ``---``, content with
    chapter markers, and ``---`` plus an end marker when the end style
    renders one.

    Args:
        text: Cleaned content
        metadata: Document metadata
        metadata_format: Format of the metadata block
        chapter_style: Chapter marker style
        end_style: End marker style
        chapter_titles: Extra chapter heading lines from pattern detection

    Returns:
        StructureResult with the structured text and detected chapters
    """
    content = insert_chapter_markers(text.strip(), chapter_style, chapter_titles)

    parts = [
        metadata.title_header,
        format_metadata(metadata, metadata_format),
        "---",
        content.text,
    ]
    end_marker = end_style.format_marker(metadata.title, metadata.author or "")
    if end_marker:
        parts.extend(["---", end_marker])

    return StructureResult(text="\n\n".join(parts) + "\n", chapters=content.chapters)
