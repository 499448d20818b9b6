from __future__ import annotations

import json
from pathlib import Path

import pytest

from fakes import FakeOracle, make_document, oracle_range
from vellum.config import VellumConfig
from vellum.exceptions import (
    VellumOracleAuthError,
    VellumOracleResponseError,
    VellumOracleTimeoutError,
    VellumPipelineError,
)
from vellum.models import (
    CleaningStep,
    ContentType,
    ContentTypeFlags,
    DetectedPatterns,
    RunStatus,
    SectionType,
    StepStatus,
)
from vellum.pipeline import CancellationToken, PipelineOrchestrator
from vellum.utils.llm_debug_logger import LLMDebugLogger


def _orchestrator(oracle: FakeOracle, **kwargs) -> PipelineOrchestrator:
    return PipelineOrchestrator(oracle=oracle, sleep=lambda seconds: None, **kwargs)


def _document() -> str:
    return make_document(500, {420: "BIBLIOGRAPHY"})


def test_rejected_oracle_range_is_replaced_by_heuristic() -> None:
    oracle = FakeOracle(boundaries={SectionType.BACK_MATTER: oracle_range(4, 414, 0.9)})

    content = _orchestrator(oracle).run(_document(), document_id="book")

    result = content.run.result_for(CleaningStep.REMOVE_BACK_MATTER)
    assert content.run.status is RunStatus.COMPLETED
    assert result.status is StepStatus.COMPLETED
    assert result.change_count == 80
    assert "BIBLIOGRAPHY" not in content.text
    assert content.metadata.title == "Test Book"
    assert "# Test Book" in content.text


def test_out_of_bounds_range_without_fallback_match_is_skipped() -> None:
    oracle = FakeOracle(boundaries={SectionType.BACK_MATTER: oracle_range(400, 599, 0.9)})

    content = _orchestrator(oracle).run(make_document(500), document_id="plain")

    results = content.run.step_results
    index = content.run.completed_steps.index(CleaningStep.REMOVE_BACK_MATTER)
    result = results[index]
    assert content.run.status is RunStatus.COMPLETED
    assert result.status is StepStatus.SKIPPED
    assert "out_of_bounds" in result.skip_reason
    assert "no heuristic match" in result.skip_reason
    assert result.change_count == 0
    assert result.text == results[index - 1].text
    assert "detect_boundary:back_matter" in oracle.calls


def test_every_enabled_step_is_recorded_in_order() -> None:
    config = VellumConfig()
    content = _orchestrator(FakeOracle()).run(_document(), config=config)

    assert content.run.completed_steps == config.enabled_steps
    assert content.document_id
    skipped = content.run.result_for(CleaningStep.REMOVE_INDEX)
    assert skipped.skipped
    assert skipped.skip_reason == "no index detected"
    assert skipped.confidence == 1.0


def test_cancellation_between_steps() -> None:
    token = CancellationToken()
    completed = []

    def on_complete(step, result, reason) -> None:
        completed.append(step)
        if len(completed) == 5:
            token.cancel()

    content = _orchestrator(FakeOracle(), on_step_complete=on_complete).run(
        _document(),
        config=VellumConfig.from_preset("training"),
        cancellation=token,
    )

    assert content.cancelled
    assert len(content.run) == 5
    assert content.text == content.run.step_results[-1].text
    with pytest.raises(RuntimeError):
        content.run.finalize(RunStatus.COMPLETED)


def test_retries_exhausted_fall_back_to_heuristic() -> None:
    oracle = FakeOracle(
        errors={
            "detect_boundary:back_matter": [
                VellumOracleTimeoutError("timed out") for _ in range(3)
            ]
        }
    )

    content = _orchestrator(oracle).run(_document())

    result = content.run.result_for(CleaningStep.REMOVE_BACK_MATTER)
    assert result.api_calls == 3
    assert result.change_count == 80
    assert any("oracle error" in warning for warning in result.warnings)
    assert "BIBLIOGRAPHY" not in content.text


def test_transient_failure_then_success() -> None:
    oracle = FakeOracle(
        boundaries={SectionType.BACK_MATTER: oracle_range(420, 499, 0.8)},
        errors={"detect_boundary:back_matter": [VellumOracleTimeoutError("timed out")]},
    )

    content = _orchestrator(oracle).run(_document())

    result = content.run.result_for(CleaningStep.REMOVE_BACK_MATTER)
    assert result.api_calls == 2
    assert result.change_count == 80
    assert not result.warnings


def test_fatal_rewrite_error_keeps_completed_results() -> None:
    oracle = FakeOracle(errors={"reflow_chunk": [VellumOracleResponseError("garbled")]})
    failures = []

    with pytest.raises(VellumPipelineError) as excinfo:
        _orchestrator(
            oracle, on_step_complete=lambda step, result, reason: failures.append(reason)
        ).run(_document())

    error = excinfo.value
    assert error.stage_name == "reflow_paragraphs"
    assert len(error.completed_results) == 8
    assert error.completed_results[-1].step is CleaningStep.CLEAN_SPECIAL_CHARACTERS
    assert error.run.status is RunStatus.FAILED
    assert failures[-1].startswith("reflow_paragraphs")
    assert oracle.tags_seen[-1] == {"pipeline_stage": "reflow_paragraphs", "chunk_index": 0}
    assert oracle.call_tags == {}


def test_metadata_failure_is_fatal() -> None:
    oracle = FakeOracle(errors={"extract_metadata": [VellumOracleAuthError("bad key")]})

    with pytest.raises(VellumPipelineError) as excinfo:
        _orchestrator(oracle).run(_document())

    assert excinfo.value.stage_name == "extract_metadata"
    assert excinfo.value.completed_results == []


def test_pattern_detection_failure_falls_back() -> None:
    oracle = FakeOracle(errors={"detect_patterns": [VellumOracleResponseError("garbled")]})

    content = _orchestrator(oracle).run(_document())

    result = content.run.result_for(CleaningStep.EXTRACT_METADATA)
    assert content.run.status is RunStatus.COMPLETED
    assert result.confidence == 0.5
    assert any("pattern detection failed" in warning for warning in result.warnings)
    assert content.patterns.page_number_patterns


def test_poetry_skips_reflow() -> None:
    patterns = DetectedPatterns(
        document_id="poems",
        content_type=ContentTypeFlags(has_poetry=True, primary_type=ContentType.POETRY),
        confidence=0.9,
    )
    oracle = FakeOracle(patterns=patterns)

    content = _orchestrator(oracle).run(_document(), document_id="poems")

    result = content.run.result_for(CleaningStep.REFLOW_PARAGRAPHS)
    assert result.skipped
    assert "poetry" in result.skip_reason
    assert "reflow_chunk" not in oracle.calls


def test_cost_attribution_and_call_tags() -> None:
    oracle = FakeOracle()

    content = _orchestrator(oracle).run(_document())

    metadata = content.run.result_for(CleaningStep.EXTRACT_METADATA)
    assert (metadata.api_calls, metadata.cost) == (2, 20)
    assert content.total_cost == oracle.usage.tokens

    reflow_tags = [
        tags for call, tags in zip(oracle.calls, oracle.tags_seen) if call == "reflow_chunk"
    ]
    assert reflow_tags[0] == {"pipeline_stage": "reflow_paragraphs", "chunk_index": 0}
    assert oracle.call_tags == {}


def test_pattern_cache_is_reused_across_runs() -> None:
    oracle = FakeOracle()
    orchestrator = _orchestrator(oracle)
    text = _document()

    orchestrator.run(text, document_id="book")
    second = orchestrator.run(text, document_id="book")

    assert oracle.calls.count("detect_patterns") == 1
    assert second.run.result_for(CleaningStep.EXTRACT_METADATA).api_calls == 1
    assert orchestrator.cache.hits == 1


def test_debug_logger_receives_step_and_defense_events(tmp_path: Path) -> None:
    log_path = tmp_path / "trace.jsonl"
    debug_logger = LLMDebugLogger(log_path=log_path, run_id="r1", input_path="book.txt", model="fake")
    oracle = FakeOracle(boundaries={SectionType.BACK_MATTER: oracle_range(4, 414, 0.9)})

    _orchestrator(oracle, debug_logger=debug_logger).run(_document(), document_id="book")

    events = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    types = [event["type"] for event in events]
    assert types[0] == "run_start"
    assert types[-1] == "run_complete"
    assert types.count("step_complete") == len(VellumConfig().enabled_steps)

    back_matter = [
        event
        for event in events
        if event["type"] == "defense_decision" and event["section_type"] == "back_matter"
    ]
    assert back_matter[0]["rejection_reason"] == "position_too_early"
    assert back_matter[0]["source"] == "heuristic"
    assert back_matter[0]["document_id"] == "book"
    assert events[-1]["metrics"]["defense_rejections"] >= 1
