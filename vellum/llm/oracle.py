"""Boundary oracle interface and its LLM-backed implementation.

The oracle is untrusted: every boundary or pattern it returns is checked by
the defense chain before any text is removed.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple

from vellum.exceptions import VellumOracleResponseError
from vellum.llm.base import LLMProvider
from vellum.llm.parsing import (
    coerce_bool,
    coerce_confidence,
    coerce_int,
    coerce_int_list,
    coerce_str_list,
    extract_json_object,
    raise_for_response,
)
from vellum.llm.prompts.boundary import BOUNDARY_DETECTION_SYSTEM, format_boundary_prompt
from vellum.llm.prompts.metadata import METADATA_SYSTEM, format_metadata_prompt
from vellum.llm.prompts.patterns import PATTERN_DETECTION_SYSTEM, format_pattern_prompt
from vellum.llm.prompts.reflow import (
    OPTIMIZE_SYSTEM,
    REFLOW_SYSTEM,
    format_optimize_prompt,
    format_reflow_prompt,
)
from vellum.models import (
    BoundaryCandidate,
    CandidateSource,
    ContentTypeFlags,
    DetectedPatterns,
    DocumentMetadata,
    SectionType,
)
from vellum.utils.token_counter import TokenCounter

logger = logging.getLogger(__name__)

# Sections found near the end of a document are sampled from the tail.
_TAIL_SECTIONS = frozenset(
    {SectionType.BACK_MATTER, SectionType.INDEX, SectionType.FOOTNOTES}
)

_MAX_PROMPT_LINE_CHARS = 200
_WRAPPER_RE = re.compile(r"^\s*<(text|previous)>\s*|\s*</(text|previous)>\s*$")
_FENCE_WRAP_RE = re.compile(r"^\s*```[a-zA-Z]*\n([\s\S]*?)\n```\s*$")

_METADATA_FIELDS = (
    "title",
    "subtitle",
    "author",
    "translator",
    "editor",
    "publisher",
    "publish_date",
    "isbn",
    "language",
    "genre",
    "series",
    "edition",
)


@dataclass
class OracleUsage:
    """Running totals of oracle traffic."""

    calls: int = 0
    tokens: int = 0

    def snapshot(self) -> Tuple[int, int]:
        return self.calls, self.tokens


class BoundaryOracleClient(ABC):
    """External reasoning service that locates sections and rewrites chunks.

    Implementations raise the ``VellumOracle*`` errors on failure and must
    record every call through ``record_call`` so the pipeline can attribute
    cost to steps.
    """

    @property
    def usage(self) -> OracleUsage:
        usage = getattr(self, "_usage", None)
        if usage is None:
            usage = OracleUsage()
            self._usage = usage
        return usage

    def record_call(self, tokens: int = 0) -> None:
        self.usage.calls += 1
        self.usage.tokens += max(0, tokens)

    @property
    def call_tags(self) -> Dict[str, Any]:
        """Tags attached to subsequent calls (pipeline stage, chunk index)."""
        tags = getattr(self, "_call_tags", None)
        if tags is None:
            tags = {}
            self._call_tags = tags
        return tags

    def set_call_tags(self, **tags: Any) -> None:
        """Replace the tags attached to subsequent calls."""
        self.call_tags.clear()
        self.call_tags.update({k: v for k, v in tags.items() if v is not None})

    @abstractmethod
    def detect_boundary(
        self, text: str, section_type: SectionType
    ) -> Optional[BoundaryCandidate]:
        """Locate a section in the current text.

        Args:
            text: Current document text
            section_type: Section to locate

        Returns:
            Half-open candidate range, or None when the oracle reports that
            the document has no such section
        """
        pass

    @abstractmethod
    def detect_patterns(self, text: str, document_id: str = "") -> DetectedPatterns:
        """Detect recurring patterns (page numbers, headers, citations)."""
        pass

    @abstractmethod
    def reflow_chunk(self, text: str, previous_context: Optional[str] = None) -> str:
        """Rejoin broken lines and restore paragraph breaks in one chunk."""
        pass

    @abstractmethod
    def optimize_chunk(self, text: str, max_words: int, min_words: int = 40) -> str:
        """Split paragraphs longer than ``max_words`` in one chunk."""
        pass

    @abstractmethod
    def extract_metadata(self, text: str) -> DocumentMetadata:
        """Extract bibliographic metadata from the opening of a document."""
        pass


class LLMBoundaryOracle(BoundaryOracleClient):
    """Boundary oracle backed by an ``LLMProvider``."""

    def __init__(
        self,
        provider: LLMProvider,
        token_counter: Optional[TokenCounter] = None,
        sample_lines: int = 800,
        pattern_sample_chars: int = 30000,
    ) -> None:
        """Initialize the oracle.

        Args:
            provider: LLM provider used for every call
            token_counter: Counts tokens when the provider does not report usage
            sample_lines: Lines shown to the model for boundary detection
            pattern_sample_chars: Characters shown for pattern detection
        """
        self._provider = provider
        self._token_counter = token_counter
        self._sample_lines = max(50, sample_lines)
        self._pattern_sample_chars = pattern_sample_chars

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    def detect_boundary(
        self, text: str, section_type: SectionType
    ) -> Optional[BoundaryCandidate]:
        lines = text.split("\n")
        total = len(lines)
        if total == 0 or not text.strip():
            return None

        first, last = self._sample_window(total, section_type)
        numbered = "\n".join(
            f"{index}|{lines[index][:_MAX_PROMPT_LINE_CHARS]}"
            for index in range(first, last)
        )
        prompt = format_boundary_prompt(
            section_type=section_type,
            numbered_lines=numbered,
            total_lines=total,
            first_line=first,
            last_line=last - 1,
        )
        data = self._call_json(
            prompt,
            BOUNDARY_DETECTION_SYSTEM,
            {"call_kind": "detect_boundary", "section_type": section_type.value},
        )
        candidate = self._parse_boundary(data, total)
        logger.debug(
            f"Oracle {section_type.value}: "
            f"{candidate.describe() if candidate else 'not found'}"
        )
        return candidate

    def _sample_window(self, total: int, section_type: SectionType) -> Tuple[int, int]:
        if total <= self._sample_lines:
            return 0, total
        if section_type in _TAIL_SECTIONS:
            return total - self._sample_lines, total
        return 0, self._sample_lines

    @staticmethod
    def _parse_boundary(data: Dict[str, Any], total: int) -> Optional[BoundaryCandidate]:
        if "found" in data and not coerce_bool(data.get("found")):
            return None

        start = coerce_int(data.get("start_line", data.get("start")))
        if start is None:
            return None

        end_inclusive = coerce_int(data.get("end_line", data.get("end")))
        if end_inclusive is None:
            end_inclusive = total - 1

        return BoundaryCandidate(
            start_line=start,
            end_line=end_inclusive + 1,
            confidence=coerce_confidence(data.get("confidence"), default=0.0),
            rationale=str(data.get("rationale") or data.get("reason") or ""),
            source=CandidateSource.ORACLE,
        )

    def detect_patterns(self, text: str, document_id: str = "") -> DetectedPatterns:
        prompt = format_pattern_prompt(text[: self._pattern_sample_chars])
        data = self._call_json(
            prompt,
            PATTERN_DETECTION_SYSTEM,
            {"call_kind": "detect_patterns"},
        )

        content_type = data.get("content_type")
        patterns = DetectedPatterns(
            document_id=document_id,
            page_number_patterns=coerce_str_list(data.get("page_number_patterns")),
            header_patterns=coerce_str_list(data.get("header_patterns")),
            footer_patterns=coerce_str_list(data.get("footer_patterns")),
            citation_patterns=coerce_str_list(data.get("citation_patterns")),
            citation_style=_optional_str(data.get("citation_style")),
            footnote_marker_patterns=coerce_str_list(data.get("footnote_marker_patterns")),
            special_characters_to_remove=coerce_str_list(
                data.get("special_characters_to_remove")
            ),
            has_front_matter=coerce_bool(data.get("has_front_matter")),
            front_matter_end_line=coerce_int(data.get("front_matter_end_line")),
            toc_start_line=coerce_int(data.get("toc_start_line")),
            toc_end_line=coerce_int(data.get("toc_end_line")),
            index_start_line=coerce_int(data.get("index_start_line")),
            back_matter_start_line=coerce_int(data.get("back_matter_start_line")),
            chapter_start_lines=coerce_int_list(data.get("chapter_start_lines")),
            chapter_titles=coerce_str_list(data.get("chapter_titles")),
            content_type=ContentTypeFlags.from_dict(
                content_type if isinstance(content_type, dict) else None
            ),
            confidence=coerce_confidence(data.get("confidence"), default=0.5),
            analysis_notes=str(data.get("notes") or ""),
        )
        if patterns.citation_style == "none":
            patterns.citation_style = None
        return patterns

    def reflow_chunk(self, text: str, previous_context: Optional[str] = None) -> str:
        prompt = format_reflow_prompt(text, previous_context or "")
        return self._call_text(prompt, REFLOW_SYSTEM, {"call_kind": "reflow_chunk"})

    def optimize_chunk(self, text: str, max_words: int, min_words: int = 40) -> str:
        prompt = format_optimize_prompt(text, max_words, min_words)
        return self._call_text(prompt, OPTIMIZE_SYSTEM, {"call_kind": "optimize_chunk"})

    def extract_metadata(self, text: str) -> DocumentMetadata:
        data = self._call_json(
            format_metadata_prompt(text),
            METADATA_SYSTEM,
            {"call_kind": "extract_metadata"},
        )
        values = {name: _optional_str(data.get(name)) for name in _METADATA_FIELDS}
        values["title"] = values["title"] or "Untitled"
        return DocumentMetadata(**values)

    def _call_json(
        self, prompt: str, system_prompt: str, tags: Dict[str, Any]
    ) -> Dict[str, Any]:
        content = self._call(prompt, system_prompt, tags)
        return extract_json_object(content)

    def _call_text(self, prompt: str, system_prompt: str, tags: Dict[str, Any]) -> str:
        content = _unwrap_text(self._call(prompt, system_prompt, tags))
        if not content.strip():
            raise VellumOracleResponseError("Empty rewrite returned", raw_response=content)
        return content

    def _call(self, prompt: str, system_prompt: str, tags: Dict[str, Any]) -> str:
        response = self._provider.complete(prompt, system_prompt, {**self.call_tags, **tags})
        tokens = response.tokens_used
        if not tokens and self._token_counter is not None:
            tokens = self._token_counter.count_call(prompt, system_prompt, response.content)
        self.record_call(tokens)
        raise_for_response(response)
        return response.content


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ("null", "none", "unknown", "n/a"):
        return None
    return text


def _unwrap_text(content: str) -> str:
    """Strip code fences and echo tags the model sometimes adds."""
    text = content or ""
    match = _FENCE_WRAP_RE.match(text)
    if match:
        text = match.group(1)
    return _WRAPPER_RE.sub("", text).strip("\n")

