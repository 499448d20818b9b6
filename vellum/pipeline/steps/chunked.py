"""Oracle rewrite steps that work chunk by chunk."""

import logging
from typing import Callable, List, Optional, Tuple

from vellum.exceptions import VellumError
from vellum.models import CleaningStep
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext
from vellum.text.chunking import (
    TextChunk,
    chunk_paragraphs,
    longest_paragraph_words,
    merge_chunks,
    split_paragraphs,
)
from vellum.text.shield import PLACEHOLDER_RE, ContentShield, ShieldedContent
from vellum.text.transform import count_changed_lines, count_words

logger = logging.getLogger(__name__)

# A rewrite that loses more words than this is discarded.
MIN_WORD_RETENTION = 0.8
_CONTEXT_WORDS = 60
_CHUNK_CONFIDENCE = 0.9


def _tail_context(text: str) -> str:
    """Last paragraph of the previous chunk, trimmed to a few dozen words."""
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        return ""
    words = paragraphs[-1].split()
    return " ".join(words[-_CONTEXT_WORDS:])


class _ChunkedRewriteStep(StepHandler):
    """Shield the document, rewrite it chunk by chunk, then restore it.

    Protected regions are swapped for placeholders before paragraphs are
    split, so a code block with blank lines stays one atomic paragraph and
    never reaches the oracle.
    """

    def _shield(self, text: str, context: PipelineContext) -> Tuple[ContentShield, str, ShieldedContent]:
        shield = context.make_shield()
        shielded_text, shielded = shield.protect(text)
        if shielded:
            logger.debug(f"{self.step.value}: shielded {shielded.counts()}")
        return shield, shielded_text, shielded

    def _rewrite(
        self,
        chunk: TextChunk,
        context: PipelineContext,
        call: Callable[[str], str],
        warnings: List[str],
    ) -> Optional[str]:
        """Rewrite one shielded chunk; returns None when the original must be kept."""
        context.oracle.set_call_tags(pipeline_stage=self.step.value, chunk_index=chunk.index)
        rewritten = context.call_oracle(call, chunk.text)

        missing = [p for p in PLACEHOLDER_RE.findall(chunk.text) if p not in rewritten]
        if missing:
            warnings.append(
                f"chunk {chunk.index}: {len(missing)} protected regions lost; kept original"
            )
            return None

        before = chunk.word_count
        after = count_words(rewritten)
        if before and after < before * MIN_WORD_RETENTION:
            warnings.append(
                f"chunk {chunk.index}: rewrite dropped {before - after} of {before} words; "
                f"kept original"
            )
            return None
        return rewritten

    def _finish(
        self,
        text: str,
        chunks: List[TextChunk],
        shield: ContentShield,
        shielded: ShieldedContent,
        rewritten: int,
        warnings: List[str],
    ) -> StepOutcome:
        restored = shield.restore(merge_chunks(chunks), shielded)
        if not restored.complete:
            # Every kept chunk was checked for its placeholders.
            raise VellumError(
                f"{self.step.value}: {len(restored.missing)} protected regions missing after merge"
            )
        new_text = restored.text
        total = len(chunks)
        return StepOutcome(
            text=new_text,
            change_count=count_changed_lines(text, new_text),
            confidence=_CHUNK_CONFIDENCE * rewritten / total if total else 0.0,
            warnings=warnings,
            details={"chunks": total, "chunks_rewritten": rewritten},
        )


class ReflowParagraphsStep(_ChunkedRewriteStep):
    """Rejoins lines broken by page layout and restores paragraph breaks."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.REFLOW_PARAGRAPHS

    def should_skip(self, text: str, context: PipelineContext) -> Optional[str]:
        if context.require_patterns().content_type.preserves_line_breaks:
            return "content type preserves line breaks (poetry or drama)"
        if not text.strip():
            return "no content to reflow"
        return None

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        """Reflow every chunk, passing the previous chunk's tail as context.

        Args:
            text: Current document text
            context: Shared run context

        Returns:
            StepOutcome with reflowed text
        """
        shield, shielded_text, shielded = self._shield(text, context)
        chunks = chunk_paragraphs(shielded_text, context.config.chunk_target_words)
        warnings: List[str] = []
        result: List[TextChunk] = []
        rewritten = 0
        previous = ""

        for chunk in chunks:
            reflowed = self._rewrite(
                chunk,
                context,
                lambda value: context.oracle.reflow_chunk(value, previous or None),
                warnings,
            )
            if reflowed is None:
                result.append(chunk)
            else:
                rewritten += 1
                result.append(TextChunk(chunk.index, reflowed, count_words(reflowed)))
            previous = _tail_context(result[-1].text)

        logger.info(f"Reflowed {rewritten}/{len(chunks)} chunks")
        return self._finish(text, result, shield, shielded, rewritten, warnings)


class OptimizeParagraphLengthStep(_ChunkedRewriteStep):
    """Splits paragraphs longer than the configured maximum."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH

    def should_skip(self, text: str, context: PipelineContext) -> Optional[str]:
        max_words = context.config.max_paragraph_words
        if max_words <= 0:
            return "paragraph length optimization disabled"
        _, shielded_text, _ = self._shield(text, context)
        if longest_paragraph_words(shielded_text) <= max_words:
            return f"no paragraphs longer than {max_words} words"
        return None

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        config = context.config
        shield, shielded_text, shielded = self._shield(text, context)
        chunks = chunk_paragraphs(shielded_text, config.chunk_target_words)
        warnings: List[str] = []
        result: List[TextChunk] = []
        rewritten = 0
        sent = 0

        for chunk in chunks:
            if longest_paragraph_words(chunk.text) <= config.max_paragraph_words:
                result.append(chunk)
                continue
            sent += 1
            optimized = self._rewrite(
                chunk,
                context,
                lambda value: context.oracle.optimize_chunk(
                    value, config.max_paragraph_words, config.min_paragraph_words
                ),
                warnings,
            )
            if optimized is None:
                result.append(chunk)
            else:
                rewritten += 1
                result.append(TextChunk(chunk.index, optimized, count_words(optimized)))

        logger.info(f"Optimized {rewritten}/{sent} chunks with long paragraphs")
        outcome = self._finish(text, result, shield, shielded, rewritten, warnings)
        outcome.confidence = _CHUNK_CONFIDENCE * rewritten / sent if sent else 1.0
        outcome.details["chunks_sent"] = sent
        return outcome
