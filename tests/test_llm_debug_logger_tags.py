from __future__ import annotations

import json
from pathlib import Path

from vellum.utils.llm_debug_logger import LLMDebugLogger


def _events(log_path: Path) -> list:
    return [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]


def test_llm_debug_logger_surfaces_call_tags(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "trace.jsonl"
    logger = LLMDebugLogger(log_path=log_path, run_id="run", input_path="book.txt", model="m")

    logger.log_call(
        prompt="p",
        system_prompt="s",
        response_content="r",
        tokens_used=1,
        success=True,
        tags={
            "pipeline_stage": "reflow_paragraphs",
            "call_kind": "reflow_chunk",
            "chunk_index": 3,
            "other": 123,
        },
    )

    start, event = _events(log_path)
    assert start["type"] == "run_start"
    assert start["input_path"] == "book.txt"
    assert event["type"] == "llm_call"
    assert event["pipeline_stage"] == "reflow_paragraphs"
    assert event["call_kind"] == "reflow_chunk"
    assert event["chunk_index"] == 3
    assert "other" not in event
    assert event["tags"]["other"] == 123
    assert (start["seq"], event["seq"]) == (1, 2)


def test_llm_debug_logger_writes_pipeline_events(tmp_path: Path) -> None:
    log_path = tmp_path / "trace.jsonl"
    logger = LLMDebugLogger(log_path=log_path, run_id="run", input_path="x", model="m")

    logger.log_event("defense_decision", section_type="index", accepted=False)

    event = _events(log_path)[-1]
    assert event["type"] == "defense_decision"
    assert event["run_id"] == "run"
    assert event["section_type"] == "index"
    assert event["accepted"] is False
    assert logger.events_written == 2
