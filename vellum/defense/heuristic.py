"""Phase C: AI-independent fallback detection.

Searches fixed position windows for strong heading signals. Every candidate
returned here is built to satisfy the Phase A profile and the Phase B markers
of its section, so it is applied without re-validation.
"""

import logging
import math
import re
from collections import Counter
from typing import Dict, List, Optional, Pattern, Sequence, Tuple

from vellum.defense.constraints import profile_for
from vellum.defense.verifier import (
    AUX_LIST_HEADERS,
    BACK_MATTER_HEADERS,
    CONTENTS_HEADERS,
    COPYRIGHT_MARKERS,
    FOOTNOTE_HEADERS,
    INDEX_HEADERS,
)
from vellum.models import (
    DEFAULT_PAGE_NUMBER_PATTERNS,
    BoundaryCandidate,
    CandidateSource,
    PatternCandidate,
    SectionType,
)
from vellum.text.citations import COMMON_CITATION_PATTERNS, COMMON_FOOTNOTE_MARKER_PATTERNS
from vellum.text.shield import PLACEHOLDER_RE

logger = logging.getLogger(__name__)

MIN_DOCUMENT_LINES = 50

# (start fraction, end fraction) of the searchable window; None for
# sections handled by default patterns instead of a line range.
HEURISTIC_WINDOWS: Dict[SectionType, Optional[Tuple[float, float]]] = {
    SectionType.BACK_MATTER: (0.60, 1.0),
    SectionType.INDEX: (0.75, 1.0),
    SectionType.FRONT_MATTER: (0.0, 0.30),
    SectionType.TABLE_OF_CONTENTS: (0.0, 0.30),
    SectionType.AUXILIARY_LIST: (0.0, 0.40),
    SectionType.FOOTNOTES: (0.60, 1.0),
    SectionType.CITATIONS: None,
    SectionType.PAGE_NUMBERS: None,
    SectionType.HEADERS_FOOTERS: None,
    SectionType.FOOTNOTE_MARKERS: None,
}

assert set(HEURISTIC_WINDOWS) == set(SectionType), "every section type needs a window entry"

HEURISTIC_CONFIDENCE: Dict[SectionType, float] = {
    SectionType.BACK_MATTER: 0.75,
    SectionType.INDEX: 0.75,
    SectionType.FRONT_MATTER: 0.65,
    SectionType.TABLE_OF_CONTENTS: 0.65,
    SectionType.AUXILIARY_LIST: 0.65,
    SectionType.FOOTNOTES: 0.70,
}

DEFAULT_PATTERN_CONFIDENCE = 0.60

_MAX_HEADING_CHARS = 80
_MAIN_CONTENT_RE = re.compile(
    r"^\s*(?:#{1,6}\s*)?(?:chapter\s+(?:1|one|i)\b|part\s+(?:1|one|i)\b|prologue\b|introduction\b)",
    re.IGNORECASE,
)
# Listing entries end in a page number: "Chapter 1 .... 5"
_PAGE_REF_RE = re.compile(r"(?:\.{2,}|\s{2,}|\t|…)\s*\d{1,4}\s*$")
_LETTER_RE = re.compile(r"[A-Za-z]")
_DIGITS_RE = re.compile(r"\d+")


def window_for(section_type: SectionType, total_lines: int) -> Optional[Tuple[int, int]]:
    """Half-open line window searched for ``section_type``."""
    fractions = HEURISTIC_WINDOWS[section_type]
    if fractions is None:
        return None
    start = math.ceil(fractions[0] * total_lines)
    end = math.floor(fractions[1] * total_lines)
    return start, end


def is_heading_line(line: str) -> bool:
    """Markdown heading, or a short all-caps line."""
    stripped = line.strip()
    if not stripped or len(stripped) > _MAX_HEADING_CHARS:
        return False
    if stripped.startswith("#"):
        return True
    return bool(_LETTER_RE.search(stripped)) and stripped == stripped.upper()


def _matches_any(line: str, patterns: Sequence[Pattern[str]]) -> bool:
    return any(p.search(line) for p in patterns)


def _find_heading(
    lines: Sequence[str], start: int, end: int, headers: Sequence[Pattern[str]]
) -> Optional[int]:
    for index in range(start, end):
        if is_heading_line(lines[index]) and _matches_any(lines[index], headers):
            return index
    return None


def detect(text: str, section_type: SectionType) -> Optional[BoundaryCandidate]:
    """Find a section without the oracle.

    Args:
        text: Current document text
        section_type: Section to look for

    Returns:
        A conservative candidate inside the section's window, or None
    """
    lines = text.split("\n")
    total = len(lines)
    window = window_for(section_type, total)
    if window is None or total < MIN_DOCUMENT_LINES:
        return None

    start, end = window
    if section_type is SectionType.BACK_MATTER:
        span = _tail_section(lines, start, end, BACK_MATTER_HEADERS)
    elif section_type is SectionType.INDEX:
        span = _tail_section(lines, start, end, INDEX_HEADERS)
    elif section_type is SectionType.FRONT_MATTER:
        span = _front_matter(lines, end)
    elif section_type is SectionType.TABLE_OF_CONTENTS:
        span = _listing(lines, start, end, CONTENTS_HEADERS, math.floor(0.20 * total))
    elif section_type is SectionType.AUXILIARY_LIST:
        span = _listing(lines, start, end, AUX_LIST_HEADERS, math.floor(0.15 * total))
    else:
        span = _notes_section(lines, start, end, math.floor(0.12 * total))

    if span is None:
        return None

    span_start, span_end = span
    if span_end - span_start < profile_for(section_type).min_lines:
        return None

    candidate = BoundaryCandidate(
        start_line=span_start,
        end_line=span_end,
        confidence=HEURISTIC_CONFIDENCE[section_type],
        rationale=f"heading at line {span_start}",
        source=CandidateSource.HEURISTIC,
    )
    logger.debug(f"Heuristic {section_type.value}: {candidate.describe()}")
    return candidate


def _tail_section(
    lines: Sequence[str], start: int, end: int, headers: Sequence[Pattern[str]]
) -> Optional[Tuple[int, int]]:
    heading = _find_heading(lines, start, end, headers)
    if heading is None:
        return None
    return heading, end


def _front_matter(lines: Sequence[str], end: int) -> Optional[Tuple[int, int]]:
    for index in range(end):
        line = lines[index]
        if (
            len(line.strip()) <= _MAX_HEADING_CHARS
            and _MAIN_CONTENT_RE.match(line)
            and not _PAGE_REF_RE.search(line)
        ):
            preamble = "\n".join(lines[:index])
            if _matches_any(preamble, COPYRIGHT_MARKERS):
                return 0, index
            return None
    return None


def _listing(
    lines: Sequence[str],
    start: int,
    end: int,
    headers: Sequence[Pattern[str]],
    max_span: int,
) -> Optional[Tuple[int, int]]:
    heading = _find_heading(lines, start, end, headers)
    if heading is None:
        return None

    limit = min(end, heading + max_span)
    stop = limit
    for index in range(heading + 1, limit):
        if lines[index].strip().startswith("#"):
            stop = index
            break
        if all(not line.strip() for line in lines[index : index + 3]) and index + 3 <= len(lines):
            stop = index
            break
    return heading, stop


def _notes_section(
    lines: Sequence[str], start: int, end: int, max_span: int
) -> Optional[Tuple[int, int]]:
    heading = _find_heading(lines, start, end, FOOTNOTE_HEADERS)
    if heading is None:
        return None

    limit = min(end, heading + max_span)
    stop = limit
    for index in range(heading + 1, limit):
        line = lines[index]
        if (
            is_heading_line(line)
            and _matches_any(line, BACK_MATTER_HEADERS)
            and not _matches_any(line, FOOTNOTE_HEADERS)
        ):
            stop = index
            break
    return heading, stop


def repeated_line_patterns(text: str) -> List[str]:
    """Regexes for short lines that repeat often enough to be running heads.

    Digit runs are generalized so ``12 THE TITLE`` and ``13 THE TITLE`` share
    one pattern. Headings, table rows, placeholders, blank and
    punctuation-only lines are ignored.
    """
    lines = text.split("\n")
    total = len(lines)
    if total < MIN_DOCUMENT_LINES:
        return []

    threshold = max(3, total // 50)
    counts: Counter = Counter()
    samples: Dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if (
            not stripped
            or len(stripped) > _MAX_HEADING_CHARS
            or stripped.startswith(("#", "|"))
            or not _LETTER_RE.search(stripped)
            or PLACEHOLDER_RE.search(stripped)
        ):
            continue
        key = _DIGITS_RE.sub("0", stripped)
        counts[key] += 1
        samples.setdefault(key, stripped)

    patterns = []
    for key, count in counts.most_common():
        if count < threshold:
            break
        pieces = _DIGITS_RE.split(samples[key])
        patterns.append(r"^" + r"\d+".join(re.escape(piece) for piece in pieces) + r"$")
    return patterns


def default_patterns(section_type: SectionType, text: str) -> Optional[PatternCandidate]:
    """Built-in fallback patterns for a pattern-based section.

    Args:
        section_type: Pattern section (page numbers, headers, citations,
            footnote markers)
        text: Current document text

    Returns:
        A candidate, or None when no fallback applies
    """
    if section_type is SectionType.PAGE_NUMBERS:
        return PatternCandidate(
            patterns=list(DEFAULT_PAGE_NUMBER_PATTERNS),
            confidence=DEFAULT_PATTERN_CONFIDENCE,
            source=CandidateSource.DEFAULT,
        )
    if section_type is SectionType.HEADERS_FOOTERS:
        patterns = repeated_line_patterns(text)
        if not patterns:
            return None
        return PatternCandidate(
            patterns=patterns,
            confidence=DEFAULT_PATTERN_CONFIDENCE,
            source=CandidateSource.HEURISTIC,
        )
    if section_type is SectionType.CITATIONS:
        return PatternCandidate(
            patterns=list(COMMON_CITATION_PATTERNS),
            confidence=DEFAULT_PATTERN_CONFIDENCE,
            source=CandidateSource.DEFAULT,
            scope="inline",
        )
    if section_type is SectionType.FOOTNOTE_MARKERS:
        return PatternCandidate(
            patterns=list(COMMON_FOOTNOTE_MARKER_PATTERNS),
            confidence=DEFAULT_PATTERN_CONFIDENCE,
            source=CandidateSource.DEFAULT,
            scope="inline",
        )
    return None
