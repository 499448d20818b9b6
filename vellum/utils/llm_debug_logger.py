"""JSONL trace of oracle calls and pipeline events for one run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Optional, Dict, Any

# Tags copied to the top level of llm_call events so traces can be filtered
# with a plain ``jq 'select(.pipeline_stage == "...")'``.
SURFACED_TAGS = ("pipeline_stage", "call_kind", "section_type", "chunk_index")


@dataclass
class LLMDebugLogger:
    """Append-only JSONL logger.

    Every line is one event with ``type``, ``run_id``, ``seq`` and
    ``timestamp``. The first event is ``run_start``.
    """

    log_path: Path
    run_id: str
    input_path: str
    model: str
    _seq: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.log_path = Path(self.log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._write(
            "run_start",
            {
                "input_path": self.input_path,
                "model": self.model,
                "log_path": str(self.log_path),
            },
        )

    def log_call(
        self,
        *,
        prompt: str,
        system_prompt: Optional[str],
        response_content: str,
        tokens_used: int,
        success: bool,
        error: Optional[str] = None,
        tags: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record one oracle call with its prompt, reply and call tags."""
        event: Dict[str, Any] = {
            "prompt": prompt,
            "system_prompt": system_prompt,
            "response": response_content,
            "tokens_used": tokens_used,
            "success": success,
            "error": error,
        }
        if tags:
            event.update({key: tags[key] for key in SURFACED_TAGS if key in tags})
            event["tags"] = dict(tags)
        self._write("llm_call", event)

    def log_event(self, event_type: str, **fields: Any) -> None:
        """Record a pipeline event such as a step outcome or defense decision."""
        self._write(event_type, fields)

    @property
    def events_written(self) -> int:
        return self._seq

    def _write(self, event_type: str, fields: Dict[str, Any]) -> None:
        self._seq += 1
        event: Dict[str, Any] = {
            "type": event_type,
            "run_id": self.run_id,
            "seq": self._seq,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(fields)
        with self.log_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(event, ensure_ascii=True, default=str) + "\n")
