from __future__ import annotations

from typing import Optional

import pytest

from fakes import FakeOracle, make_document, oracle_range
from vellum.cache import PatternCache
from vellum.config import VellumConfig
from vellum.defense import DefenseChain
from vellum.models import DetectedPatterns, SectionType
from vellum.pipeline import PipelineContext
from vellum.pipeline.steps.reference import RemoveCitationsStep, RemoveFootnotesStep
from vellum.utils.retry import RetryHandler


def _context(
    text: str,
    oracle: Optional[FakeOracle] = None,
    patterns: Optional[DetectedPatterns] = None,
) -> PipelineContext:
    return PipelineContext(
        document_id="doc",
        original_text=text,
        config=VellumConfig.from_preset("scholarly"),
        oracle=oracle or FakeOracle(),
        cache=PatternCache(),
        chain=DefenseChain(),
        retry=RetryHandler(sleep=lambda seconds: None),
        patterns=patterns or DetectedPatterns.defaults("doc"),
        patterns_from_oracle=patterns is not None,
    )


CITED = make_document(
    60,
    {
        5: "As shown [2] in the survey.",
        20: "```",
        21: "items[1] = value",
        22: "```",
        59: "Smith, John. The Long Book [3]. London: Press, 1999.",
    },
)


def test_citations_removed_outside_code_and_reference_lines() -> None:
    outcome = RemoveCitationsStep().process(CITED, _context(CITED))

    lines = outcome.text.split("\n")
    assert outcome.change_count == 1
    assert lines[5] == "As shown in the survey."
    assert lines[21] == "items[1] = value"
    assert lines[59].startswith("Smith, John. The Long Book [3].")
    assert not outcome.warnings


def test_invalid_oracle_citation_pattern_falls_back_to_defaults() -> None:
    patterns = DetectedPatterns(document_id="doc", citation_patterns=["(unclosed"], confidence=0.9)
    context = _context(CITED, patterns=patterns)

    outcome = RemoveCitationsStep().process(CITED, context)

    assert outcome.oracle_detected
    assert outcome.details["source"] == "default"
    assert outcome.change_count == 1
    assert context.metrics["defense_rejections"] == 1
    assert context.metrics["fallbacks_used"] == 1


NOTED_OVERRIDES = {10: "A claim was made here.12 And it held.", 450: "NOTES"}
NOTED_OVERRIDES.update({i: f"{i - 450}. A note about the river." for i in range(451, 500)})


def test_footnotes_section_and_markers() -> None:
    text = make_document(500, NOTED_OVERRIDES)
    oracle = FakeOracle(boundaries={SectionType.FOOTNOTES: oracle_range(450, 499, 0.8)})

    outcome = RemoveFootnotesStep().process(text, _context(text, oracle=oracle))

    lines = outcome.text.split("\n")
    assert len(lines) == 450
    assert "NOTES" not in lines
    assert lines[10] == "A claim was made here. And it held."
    assert outcome.change_count == 51
    assert outcome.oracle_detected
    # Mean of the notes section (0.8 oracle, 0.75 evidence) and default markers.
    assert outcome.confidence == pytest.approx(((0.8 + 0.75) / 2 + 0.6) / 2)


def test_footnote_markers_leave_reference_lines_alone() -> None:
    reference = "Smith, John. Collected works, vol.12 and more. London: Press, 1999."
    text = make_document(100, {10: "A claim was made here.12 And it held.", 90: reference})

    outcome = RemoveFootnotesStep().process(text, _context(text))

    lines = outcome.text.split("\n")
    assert lines[10] == "A claim was made here. And it held."
    assert lines[90] == reference
    assert outcome.change_count == 1


def test_footnotes_skipped_when_nothing_found() -> None:
    text = make_document(100)
    context = _context(text)
    context.chain = DefenseChain(heuristic_fallback=False)

    outcome = RemoveFootnotesStep().process(text, context)

    assert outcome.is_skipped
    assert outcome.text == text
    assert "no footnotes detected" in outcome.skip_reason
