"""Metadata extraction and document-wide pattern detection."""

import logging
import time

from vellum.defense.heuristic import repeated_line_patterns
from vellum.exceptions import VellumOracleError
from vellum.models import CleaningStep, DetectedPatterns
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext

logger = logging.getLogger(__name__)

_FALLBACK_CONFIDENCE = 0.5


class ExtractMetadataStep(StepHandler):
    """Extracts bibliographic metadata and detects recurring patterns.

    Metadata extraction failing is fatal. Pattern detection failing is not:
    the run continues on built-in defaults and repeated-line headers.
    """

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.EXTRACT_METADATA

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        """Populate ``context.metadata`` and ``context.patterns``.

        Args:
            text: Current document text
            context: Shared run context

        Returns:
            StepOutcome with the text unchanged
        """
        start_time = time.time()
        config = context.config
        outcome = StepOutcome(text=text)

        metadata = context.call_oracle(
            context.oracle.extract_metadata, text[: config.metadata_sample_chars]
        )

        def detect() -> DetectedPatterns:
            return context.call_oracle(
                context.oracle.detect_patterns, text, context.document_id
            )

        try:
            patterns = context.cache.get_or_detect(context.document_id, text, detect)
            context.patterns_from_oracle = True
            outcome.confidence = max(patterns.confidence, _FALLBACK_CONFIDENCE)
        except VellumOracleError as e:
            logger.warning(f"Pattern detection failed, using defaults: {e}")
            patterns = DetectedPatterns.defaults(context.document_id)
            patterns.header_patterns = repeated_line_patterns(text)
            outcome.warnings.append(f"pattern detection failed ({e}); using default patterns")
            outcome.confidence = _FALLBACK_CONFIDENCE

        patterns.with_defaults()
        metadata.content_type = patterns.content_type
        context.metadata = metadata
        context.patterns = patterns

        # Hints are advisory; boundary steps re-detect on the current text.
        context.log_event(
            "patterns_detected",
            from_oracle=context.patterns_from_oracle,
            confidence=patterns.confidence,
            has_front_matter=patterns.has_front_matter,
            front_matter_end_line=patterns.front_matter_end_line,
            toc_lines=[patterns.toc_start_line, patterns.toc_end_line],
            index_start_line=patterns.index_start_line,
            back_matter_start_line=patterns.back_matter_start_line,
            chapter_start_lines=patterns.chapter_start_lines,
        )
        context.add_metric("metadata_title", metadata.title)
        context.add_metric("content_type", patterns.content_type.primary_type.value)
        context.add_metric("metadata_time", time.time() - start_time)
        logger.info(
            f"Metadata: '{metadata.title}' by {metadata.author or 'unknown author'} "
            f"({patterns.content_type.primary_type.value})"
        )
        return outcome
