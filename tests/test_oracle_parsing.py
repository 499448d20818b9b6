from __future__ import annotations

import pytest

from fakes import FakeLLM, make_document
from vellum.exceptions import VellumOracleRateLimitError, VellumOracleResponseError
from vellum.llm.base import LLMProvider
from vellum.llm.oracle import LLMBoundaryOracle
from vellum.llm.parsing import coerce_confidence, coerce_int, extract_json_object
from vellum.llm.prompts.boundary import BOUNDARY_DETECTION_SYSTEM
from vellum.llm.prompts.metadata import METADATA_SYSTEM
from vellum.llm.prompts.patterns import PATTERN_DETECTION_SYSTEM
from vellum.llm.prompts.reflow import REFLOW_SYSTEM
from vellum.models import CandidateSource, SectionType


def _oracle(replies, **kwargs) -> tuple:
    llm = FakeLLM(text_by_system=replies, **kwargs)
    return LLMBoundaryOracle(llm), llm


def test_fenced_boundary_reply_becomes_half_open_range() -> None:
    reply = (
        "Here you go:\n```json\n"
        '{"found": true, "start_line": 400, "end_line": 499, "confidence": "85%",}\n'
        "```"
    )
    oracle, _ = _oracle({BOUNDARY_DETECTION_SYSTEM: reply})

    candidate = oracle.detect_boundary(make_document(500), SectionType.BACK_MATTER)

    assert candidate is not None
    assert (candidate.start_line, candidate.end_line) == (400, 500)
    assert candidate.confidence == pytest.approx(0.85)
    assert candidate.source is CandidateSource.ORACLE


def test_not_found_and_missing_end() -> None:
    oracle, _ = _oracle({BOUNDARY_DETECTION_SYSTEM: '{"found": false}'})
    assert oracle.detect_boundary(make_document(100), SectionType.INDEX) is None

    oracle, _ = _oracle(
        {BOUNDARY_DETECTION_SYSTEM: '{"found": true, "start_line": 80, "confidence": 0.9}'}
    )
    candidate = oracle.detect_boundary(make_document(100), SectionType.INDEX)
    assert candidate.end_line == 100


def test_tail_sections_sample_the_end_of_long_documents() -> None:
    oracle, llm = _oracle({BOUNDARY_DETECTION_SYSTEM: '{"found": false}'})
    text = make_document(2000)

    oracle.detect_boundary(text, SectionType.BACK_MATTER)
    oracle.detect_boundary(text, SectionType.FRONT_MATTER)

    tail_prompt, head_prompt = llm.prompts
    assert "1200|" in tail_prompt and "1199|" not in tail_prompt
    assert "0|" in head_prompt and "800|" not in head_prompt


def test_usage_and_call_tags() -> None:
    oracle, llm = _oracle({REFLOW_SYSTEM: "<text>\nJoined line.\n</text>"}, tokens_used=11)
    oracle.set_call_tags(pipeline_stage="reflow_paragraphs", chunk_index=2)

    assert oracle.reflow_chunk("Joined\nline.") == "Joined line."
    assert llm.seen_tags == [
        {"pipeline_stage": "reflow_paragraphs", "chunk_index": 2, "call_kind": "reflow_chunk"}
    ]
    assert oracle.usage.snapshot() == (1, 11)


def test_empty_rewrite_is_an_error() -> None:
    oracle, _ = _oracle({REFLOW_SYSTEM: "   "})
    with pytest.raises(VellumOracleResponseError):
        oracle.reflow_chunk("Some text.")


def test_failed_call_is_counted_and_typed() -> None:
    oracle, _ = _oracle({}, error_kind="rate_limit")
    with pytest.raises(VellumOracleRateLimitError):
        oracle.extract_metadata("Title page")
    assert oracle.usage.calls == 1


def test_metadata_placeholders_become_none() -> None:
    reply = '{"author": "unknown", "language": "en", "isbn": null}'
    oracle, _ = _oracle({METADATA_SYSTEM: reply})

    metadata = oracle.extract_metadata("Title page")

    assert metadata.title == "Untitled"
    assert metadata.author is None
    assert metadata.isbn is None
    assert metadata.language == "en"


def test_pattern_reply() -> None:
    reply = """{
        "page_number_patterns": "^\\\\d+$",
        "header_patterns": ["^THE BOOK$"],
        "citation_style": "none",
        "content_type": {"has_poetry": true, "primary_type": "poetry"},
        "confidence": 80
    }"""
    oracle, _ = _oracle({PATTERN_DETECTION_SYSTEM: reply})

    patterns = oracle.detect_patterns("text", document_id="doc")

    assert patterns.document_id == "doc"
    assert patterns.page_number_patterns == [r"^\d+$"]
    assert patterns.header_patterns == ["^THE BOOK$"]
    assert patterns.citation_style is None
    assert patterns.content_type.has_poetry
    assert patterns.confidence == pytest.approx(0.8)


def test_pattern_reply_structural_hints() -> None:
    reply = """{
        "has_front_matter": "yes",
        "front_matter_end_line": "line 12",
        "toc_start_line": 4,
        "toc_end_line": 11.0,
        "index_start_line": null,
        "chapter_start_lines": [13, "40", "unknown", 88],
        "chapter_titles": ["CHAPTER ONE", "CHAPTER TWO"]
    }"""
    oracle, llm = _oracle({PATTERN_DETECTION_SYSTEM: reply})

    patterns = oracle.detect_patterns("Title\nContents\nChapter One", document_id="doc")

    assert "0|Title\n1|Contents\n2|Chapter One" in llm.prompts[0]
    assert patterns.has_front_matter
    assert patterns.front_matter_end_line == 12
    assert (patterns.toc_start_line, patterns.toc_end_line) == (4, 11)
    assert patterns.index_start_line is None
    assert patterns.back_matter_start_line is None
    assert patterns.chapter_start_lines == [13, 40, 88]
    assert patterns.chapter_titles == ["CHAPTER ONE", "CHAPTER TWO"]
    assert patterns.to_dict()["chapter_start_lines"] == [13, 40, 88]


def test_provider_contract_is_plain_completion() -> None:
    assert LLMProvider.__abstractmethods__ == frozenset({"complete", "model_name"})


def test_json_recovery_and_coercion() -> None:
    assert extract_json_object('Result: {"a": {"b": "}"}} trailing') == {"a": {"b": "}"}}
    assert extract_json_object('[{"a": 1}]') == {"a": 1}
    with pytest.raises(VellumOracleResponseError):
        extract_json_object("no json here")

    assert coerce_int("line 42") == 42
    assert coerce_int(True) is None
    assert coerce_confidence("0.7") == pytest.approx(0.7)
    assert coerce_confidence(150) == 1.0
    assert coerce_confidence(None, default=0.5) == 0.5
