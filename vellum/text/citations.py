"""Common inline citation and footnote-marker patterns."""

import re
from typing import List

COMMON_CITATION_PATTERNS: List[str] = [
    # APA: (Smith, 2020), (Smith & Jones, 2019, p. 4), (Smith et al., 2018; Lee, 2001)
    r"\s?\((?:[A-Z][A-Za-z'\-]+(?:\s+(?:et al\.|and|&)(?:\s+[A-Z][A-Za-z'\-]+)?)?,?\s+\d{4}[a-z]?(?:,\s*pp?\.\s*\d+(?:[-–]\d+)?)?(?:;\s*)?)+\)",
    # MLA: (Smith 45), (Smith 45-47)
    r"\s?\([A-Z][A-Za-z'\-]+\s+\d+(?:[-–]\d+)?\)",
    # IEEE / numeric: [1], [2, 3], [4-6]
    r"\s?\[\d+(?:\s*[,–-]\s*\d+)*\]",
]

COMMON_FOOTNOTE_MARKER_PATTERNS: List[str] = [
    r"\[\^\d{1,3}\]",
    r"[¹²³⁴⁵⁶⁷⁸⁹⁰]+",
    r"\^\d{1,3}",
    # Digits glued to sentence punctuation: "end.12 Next"
    r"(?<=[a-z][.,;:!?\"”])\d{1,3}(?=\s|$)",
]

_BIBLIOGRAPHY_LINE_RE = re.compile(
    r"^\s*(?:[-*•]\s+|\d{1,3}[.)]\s+)?[A-Z][A-Za-z'\-]+,\s+[A-Z][^\n]*?\(?\b(?:1[5-9]|20)\d{2}[a-z]?\b\)?[.,]"
)
_ORPHAN_BRACKETS_RE = re.compile(r"[ \t]*(?:\([ \t]*\)|\[[ \t]*\])")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"[ \t]+([.,;:!?])")


def is_bibliography_line(line: str) -> bool:
    """True for lines shaped like a reference-list entry."""
    return bool(_BIBLIOGRAPHY_LINE_RE.match(line))


def clean_orphaned_brackets(text: str) -> str:
    """Drop ``()``/``[]`` left behind by citation removal and tidy punctuation."""
    text = _ORPHAN_BRACKETS_RE.sub("", text)
    return _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
