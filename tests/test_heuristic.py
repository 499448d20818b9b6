from __future__ import annotations

import re

from fakes import make_document

from vellum.defense.heuristic import (
    default_patterns,
    detect,
    repeated_line_patterns,
    window_for,
)
from vellum.models import CandidateSource, SectionType


def test_windows() -> None:
    assert window_for(SectionType.BACK_MATTER, 500) == (300, 500)
    assert window_for(SectionType.INDEX, 500) == (375, 500)
    assert window_for(SectionType.FRONT_MATTER, 500) == (0, 150)
    assert window_for(SectionType.CITATIONS, 500) is None


def test_short_documents_never_match() -> None:
    text = make_document(40, {30: "BIBLIOGRAPHY"})
    assert detect(text, SectionType.BACK_MATTER) is None


def test_back_matter_heading_in_window() -> None:
    text = make_document(500, {420: "BIBLIOGRAPHY"})
    candidate = detect(text, SectionType.BACK_MATTER)
    assert candidate is not None
    assert (candidate.start_line, candidate.end_line) == (420, 500)
    assert candidate.source == CandidateSource.HEURISTIC
    assert candidate.confidence == 0.75


def test_heading_outside_window_is_ignored() -> None:
    text = make_document(500, {100: "BIBLIOGRAPHY"})
    assert detect(text, SectionType.BACK_MATTER) is None


def test_candidates_stay_inside_window() -> None:
    for line in (310, 380, 450, 495):
        text = make_document(500, {line: "# Index"})
        candidate = detect(text, SectionType.INDEX)
        if candidate is None:
            continue
        start, end = window_for(SectionType.INDEX, 500)
        assert start <= candidate.start_line < candidate.end_line <= end


def test_table_of_contents_stops_at_first_chapter() -> None:
    overrides = {10: "CONTENTS"}
    for offset in range(1, 9):
        overrides[10 + offset] = f"Chapter {offset} .......... {offset * 10}"
    overrides[21] = "# Chapter 1"
    text = make_document(500, overrides)

    candidate = detect(text, SectionType.TABLE_OF_CONTENTS)
    assert candidate is not None
    assert (candidate.start_line, candidate.end_line) == (10, 21)


def test_front_matter_needs_copyright_evidence() -> None:
    plain = make_document(500, {40: "Chapter One"})
    assert detect(plain, SectionType.FRONT_MATTER) is None

    with_copyright = make_document(
        500, {2: "Copyright 2001 by A. Writer", 3: "All rights reserved.", 40: "Chapter One"}
    )
    candidate = detect(with_copyright, SectionType.FRONT_MATTER)
    assert candidate is not None
    assert (candidate.start_line, candidate.end_line) == (0, 40)


def test_repeated_lines_become_header_patterns() -> None:
    overrides = {index: f"{index} THE TITLE" for index in range(5, 100, 10)}
    text = make_document(100, overrides)

    patterns = repeated_line_patterns(text)
    assert any(re.fullmatch(p, "57 THE TITLE") for p in patterns)


def test_default_patterns() -> None:
    page = default_patterns(SectionType.PAGE_NUMBERS, "")
    assert page is not None and page.source == CandidateSource.DEFAULT

    citations = default_patterns(SectionType.CITATIONS, "")
    assert citations is not None and citations.scope == "inline"

    assert default_patterns(SectionType.BACK_MATTER, "") is None
