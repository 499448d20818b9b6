"""Phase B: content-evidence verification.

A span that passed the static constraints must also look like the section
it claims to be before it is removed.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Pattern, Sequence, Tuple

from vellum.models import (
    BoundaryCandidate,
    RejectionReason,
    SectionType,
    ValidationVerdict,
)

_FLAGS = re.IGNORECASE | re.MULTILINE


def _heading(words: str) -> Pattern[str]:
    """Line that is (mostly) one of ``words``, optionally a markdown heading."""
    return re.compile(
        r"^[ \t]*(?:#{1,6}[ \t]*)?(?:" + words + r")\b[^\n]{0,60}$",
        _FLAGS,
    )


def _evidence(pattern: str) -> Pattern[str]:
    return re.compile(pattern, _FLAGS)


@dataclass(frozen=True)
class SectionMarkers:
    """Section headers and supporting evidence for one section type."""

    headers: Tuple[Pattern[str], ...] = ()
    evidence: Tuple[Pattern[str], ...] = ()
    # Reject spans that contain chapter headings but no section header.
    guard_chapters: bool = False

    @property
    def all_markers(self) -> Tuple[Pattern[str], ...]:
        return self.headers + self.evidence


BACK_MATTER_HEADERS: Tuple[Pattern[str], ...] = (
    _heading(r"bibliography|bibliographie|bibliograf[ií]a|literaturverzeichnis|select bibliography"),
    _heading(r"references|works cited|sources|r[ée]f[ée]rences|referencias"),
    _heading(r"appendix|appendices|anhang|ap[ée]ndice|annexe"),
    _heading(r"glossary|glossaire|glosario|glossar"),
    _heading(r"notes|endnotes|notes on sources|anmerkungen"),
    _heading(r"about the authors?|about the translator|[àa] propos de l'auteur"),
    _heading(r"acknowledge?ments|remerciements|agradecimientos|danksagung"),
    _heading(r"colophon"),
    _heading(r"afterword|postface|nachwort|epílogo"),
)

INDEX_HEADERS: Tuple[Pattern[str], ...] = (
    _heading(r"index|general index|subject index|index of names|register"),
)

CONTENTS_HEADERS: Tuple[Pattern[str], ...] = (
    _heading(r"contents|table of contents|inhalt|inhaltsverzeichnis|table des mati[èe]res|sommaire"),
)

AUX_LIST_HEADERS: Tuple[Pattern[str], ...] = (
    _heading(r"list of (?:figures|tables|illustrations|abbreviations|maps|plates)"),
)

FOOTNOTE_HEADERS: Tuple[Pattern[str], ...] = (
    _heading(r"notes|endnotes|footnotes|anmerkungen|notas"),
)

# Headings that open main content.
CHAPTER_INDICATOR = _evidence(
    r"^[ \t]*(?:#{1,6}[ \t]*)?(?:chapter|part|book)[ \t]+"
    r"(?:\d+|[ivxlcdm]+|one|two|three|four|five|six|seven|eight|nine|ten)\b"
)

COPYRIGHT_MARKERS: Tuple[Pattern[str], ...] = (
    _evidence(r"©|\(c\)\s*\d{4}"),
    _evidence(r"\bcopyright\b"),
    _evidence(r"all rights reserved"),
    _evidence(r"\bisbn\b"),
    _evidence(r"library of congress"),
    _evidence(r"first published"),
    _evidence(r"published by"),
    _evidence(r"printed in\b"),
)

SECTION_MARKERS: Dict[SectionType, SectionMarkers] = {
    SectionType.BACK_MATTER: SectionMarkers(
        headers=BACK_MATTER_HEADERS,
        evidence=(
            # Surname, Forename. Title ... 1999
            re.compile(r"^[ \t]*(?-i:[A-Z][a-zA-Z'\-]+),[ \t]+[^\n]*\b(?:1[5-9]|20)\d{2}\b", re.MULTILINE),
        ),
        guard_chapters=True,
    ),
    SectionType.INDEX: SectionMarkers(
        headers=INDEX_HEADERS,
        evidence=(
            _evidence(r"^[ \t]*[a-z][\w'\- ]*,[ \t]*\d+(?:[ \t]*[-–][ \t]*\d+)?(?:,[ \t]*\d+(?:[ \t]*[-–][ \t]*\d+)?)*[ \t]*$"),
            re.compile(r"^[ \t]*[A-Z][ \t]*$", re.MULTILINE),
        ),
        guard_chapters=True,
    ),
    SectionType.FRONT_MATTER: SectionMarkers(evidence=COPYRIGHT_MARKERS),
    SectionType.TABLE_OF_CONTENTS: SectionMarkers(
        headers=CONTENTS_HEADERS,
        evidence=(
            _evidence(r"(?:\.[ \t]?){3,}[ \t]*\d+[ \t]*$|…[ \t]*\d+[ \t]*$"),
            _evidence(r"^[ \t]*\S[^\n]{2,80}?[ \t]{2,}\d{1,4}[ \t]*$"),
            _evidence(r"^[ \t]*chapter[ \t]+(?:\d+|[ivxlc]+)\b"),
        ),
    ),
    SectionType.AUXILIARY_LIST: SectionMarkers(
        headers=AUX_LIST_HEADERS,
        evidence=(
            _evidence(r"^[ \t]*(?:figure|fig\.|table|plate|map|illustration)[ \t]+\d+(?:\.\d+)?\b"),
        ),
    ),
    SectionType.FOOTNOTES: SectionMarkers(
        headers=FOOTNOTE_HEADERS,
        evidence=(
            _evidence(r"^[ \t]*(?:\[\d{1,3}\]|\d{1,3}[.)]|\^\d{1,3})[ \t]+\S"),
            _evidence(r"\bibid\b|\bop\.[ \t]*cit\b"),
        ),
        guard_chapters=True,
    ),
    SectionType.CITATIONS: SectionMarkers(
        evidence=(
            _evidence(r"\([A-Z][^()\n]{0,60}\d{4}[a-z]?(?:,[ \t]*p+\.[ \t]*\d+)?\)"),
            _evidence(r"\[\d+(?:[,–-][ \t]*\d+)*\]"),
            _evidence(r"\bet al\b|\bibid\b"),
        ),
    ),
    SectionType.PAGE_NUMBERS: SectionMarkers(
        evidence=(_evidence(r"^[ \t]*(?:page[ \t]+)?[-—]?[ \t]*(?:\d{1,4}|[ivxlcdm]{1,7})[ \t]*[-—]?[ \t]*$"),),
    ),
    SectionType.HEADERS_FOOTERS: SectionMarkers(),
    SectionType.FOOTNOTE_MARKERS: SectionMarkers(
        evidence=(_evidence(r"\[\d{1,3}\]|\^\d{1,3}|[¹²³⁴⁵⁶⁷⁸⁹⁰]+"),),
    ),
}

assert set(SECTION_MARKERS) == set(SectionType), "every section type needs markers"

_CONFIDENCE_BY_MARKERS = (0.0, 0.60, 0.75, 0.90)


def marker_confidence(distinct_markers: int) -> float:
    """Verdict confidence for a number of distinct markers found."""
    return _CONFIDENCE_BY_MARKERS[min(distinct_markers, len(_CONFIDENCE_BY_MARKERS) - 1)]


def find_markers(span_text: str, patterns: Sequence[Pattern[str]]) -> List[Pattern[str]]:
    return [pattern for pattern in patterns if pattern.search(span_text)]


def verify(
    text: str, candidate: BoundaryCandidate, section_type: SectionType
) -> ValidationVerdict:
    """Check that the candidate span contains evidence of its section.

    Args:
        text: Current document text
        candidate: Half-open line range that passed Phase A
        section_type: Section the span claims to be

    Returns:
        Accepting verdict (confidence by number of distinct markers), or a
        ``missing_expected_pattern`` rejection
    """
    markers = SECTION_MARKERS[section_type]
    span_text = "\n".join(candidate.span(text.split("\n")))

    headers = find_markers(span_text, markers.headers)
    found = headers + find_markers(span_text, markers.evidence)

    if not found:
        return ValidationVerdict.reject(
            RejectionReason.MISSING_EXPECTED_PATTERN,
            f"no {section_type.label} markers in {candidate.line_count} lines",
        )

    if markers.guard_chapters and not headers and CHAPTER_INDICATOR.search(span_text):
        return ValidationVerdict.reject(
            RejectionReason.MISSING_EXPECTED_PATTERN,
            "span contains chapter headings but no section header",
        )

    return ValidationVerdict.accept(
        marker_confidence(len(found)),
        f"{len(found)} distinct markers",
    )


_ROMAN_RE = re.compile(r"^[ivxlcdm]+$", re.IGNORECASE)
_DIGIT_RE = re.compile(r"\d")
_CITATION_HINT_RE = re.compile(r"\d|\bet al\b|\bibid\b", re.IGNORECASE)

_MAX_PAGE_NUMBER_CHARS = 15
_MAX_HEADER_CHARS = 100
_MAX_FOOTNOTE_MARKER_CHARS = 6
# Share of matches that must look right.
_MIN_CONFORMING = 0.9


def _looks_like_page_number(match: str) -> bool:
    stripped = match.strip()
    if len(stripped) > _MAX_PAGE_NUMBER_CHARS:
        return False
    core = re.sub(r"[\s\-—–\[\]]|page|p\.", "", stripped, flags=re.IGNORECASE)
    return bool(_DIGIT_RE.search(core)) or bool(_ROMAN_RE.match(core))


def verify_patterns(matches: Sequence[str], section_type: SectionType) -> ValidationVerdict:
    """Check that text matched by removal patterns looks like the section.

    Args:
        matches: Every matched line (line scope) or substring (inline scope)
        section_type: Section the patterns target

    Returns:
        Accepting or rejecting verdict
    """
    if not matches:
        return ValidationVerdict.accept(1.0, "no matches")

    if section_type is SectionType.PAGE_NUMBERS:
        conforming = sum(1 for m in matches if _looks_like_page_number(m))
    elif section_type is SectionType.HEADERS_FOOTERS:
        normalized = Counter(_DIGIT_RE.sub("", m).strip().lower() for m in matches)
        conforming = sum(
            1
            for m in matches
            if len(m.strip()) <= _MAX_HEADER_CHARS
            and normalized[_DIGIT_RE.sub("", m).strip().lower()] >= 2
        )
    elif section_type is SectionType.CITATIONS:
        conforming = sum(1 for m in matches if _CITATION_HINT_RE.search(m))
    elif section_type is SectionType.FOOTNOTE_MARKERS:
        conforming = sum(1 for m in matches if len(m.strip()) <= _MAX_FOOTNOTE_MARKER_CHARS)
    else:
        markers = SECTION_MARKERS[section_type].all_markers
        conforming = sum(1 for m in matches if find_markers(m, markers))

    ratio = conforming / len(matches)
    if ratio < _MIN_CONFORMING:
        return ValidationVerdict.reject(
            RejectionReason.MISSING_EXPECTED_PATTERN,
            f"only {conforming}/{len(matches)} matches look like {section_type.label}",
        )
    return ValidationVerdict.accept(ratio, f"{conforming}/{len(matches)} matches conform")
