"""Stateless text operations used by the cleaning steps."""

import re
from collections import Counter
from typing import Callable, Iterable, List, Optional, Pattern, Sequence, Tuple

LinePredicate = Optional[Callable[[str], bool]]


def count_words(text: str) -> int:
    return len(text.split())


def count_lines(text: str) -> int:
    if not text:
        return 0
    return len(text.split("\n"))


def count_changed_lines(before: str, after: str) -> int:
    """Number of lines added or removed, ignoring moves."""
    old = Counter(before.split("\n"))
    new = Counter(after.split("\n"))
    removed = sum((old - new).values())
    added = sum((new - old).values())
    return max(removed, added)


def compile_patterns(patterns: Iterable[str]) -> List[Pattern[str]]:
    """Compile regexes; raises ``re.error`` for an invalid pattern."""
    return [re.compile(pattern) for pattern in patterns if pattern]


def find_matching_lines(
    text: str, patterns: Sequence[str], skip_line: LinePredicate = None
) -> List[str]:
    """Lines whose stripped form fully matches one of ``patterns``."""
    compiled = compile_patterns(patterns)
    matches = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped or (skip_line and skip_line(line)):
            continue
        if any(p.fullmatch(stripped) for p in compiled):
            matches.append(line)
    return matches


def remove_matching_lines(
    text: str, patterns: Sequence[str], skip_line: LinePredicate = None
) -> Tuple[str, int]:
    """Remove every line that fully matches one of ``patterns``.

    Args:
        text: Input text
        patterns: Regexes applied to each stripped line
        skip_line: Optional predicate for lines that must never be removed

    Returns:
        Tuple of (new text, number of lines removed)
    """
    compiled = compile_patterns(patterns)
    kept = []
    removed = 0
    for line in text.split("\n"):
        stripped = line.strip()
        if (
            stripped
            and not (skip_line and skip_line(line))
            and any(p.fullmatch(stripped) for p in compiled)
        ):
            removed += 1
            continue
        kept.append(line)
    return "\n".join(kept), removed


def find_inline_matches(
    text: str, patterns: Sequence[str], skip_line: LinePredicate = None
) -> List[str]:
    """Every substring matched by ``patterns``, line by line."""
    compiled = compile_patterns(patterns)
    matches: List[str] = []
    for line in text.split("\n"):
        if skip_line and skip_line(line):
            continue
        for pattern in compiled:
            matches.extend(m.group(0) for m in pattern.finditer(line) if m.group(0))
            line = pattern.sub("", line)
    return matches


def remove_patterns_inline(
    text: str, patterns: Sequence[str], skip_line: LinePredicate = None
) -> Tuple[str, int]:
    """Remove substrings matched by ``patterns``.

    Args:
        text: Input text
        patterns: Regexes applied within each line, in order
        skip_line: Optional predicate for lines left untouched

    Returns:
        Tuple of (new text, number of substrings removed)
    """
    compiled = compile_patterns(patterns)
    out = []
    total = 0
    for line in text.split("\n"):
        if not (skip_line and skip_line(line)):
            for pattern in compiled:
                line, count = pattern.subn("", line)
                total += count
        out.append(line)
    return "\n".join(out), total


def remove_line_range(text: str, start: int, end: int) -> str:
    """Remove the half-open line range ``[start, end)``."""
    lines = text.split("\n")
    start = max(0, start)
    end = min(len(lines), end)
    if start >= end:
        return text
    return "\n".join(lines[:start] + lines[end:])


def remove_line_ranges(text: str, ranges: Iterable[Tuple[int, int]]) -> str:
    """Remove several half-open ranges; overlapping ranges are merged."""
    merged: List[List[int]] = []
    for start, end in sorted(ranges):
        if start >= end:
            continue
        if merged and start <= merged[-1][1]:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])
    for start, end in reversed(merged):
        text = remove_line_range(text, start, end)
    return text
