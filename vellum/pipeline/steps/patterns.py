"""Steps that remove whole lines matched by detected patterns."""

import logging
from typing import List, Optional

from vellum.models import CandidateSource, CleaningStep, PatternCandidate, SectionType
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext
from vellum.pipeline.steps._decisions import log_decision
from vellum.text.transform import remove_matching_lines

logger = logging.getLogger(__name__)


def oracle_candidate(
    context: PipelineContext, patterns: List[str], scope: str = "line"
) -> Optional[PatternCandidate]:
    """Wrap patterns from oracle detection as a candidate.

    Returns None when patterns came from the built-in defaults, so the
    chain treats them as a fallback rather than as an oracle answer.
    """
    if not context.patterns_from_oracle or not patterns:
        return None
    return PatternCandidate(
        patterns=list(patterns),
        confidence=context.require_patterns().confidence,
        source=CandidateSource.ORACLE,
        scope=scope,
    )


class PatternRemovalStep(StepHandler):
    """Removes page numbers or running headers and footers."""

    def __init__(self, step: CleaningStep) -> None:
        if step is CleaningStep.REMOVE_PAGE_NUMBERS:
            self.section_type = SectionType.PAGE_NUMBERS
        elif step is CleaningStep.REMOVE_HEADERS_FOOTERS:
            self.section_type = SectionType.HEADERS_FOOTERS
        else:
            raise ValueError(f"{step.value} is not a line pattern step")
        self._step = step

    @property
    def step(self) -> CleaningStep:
        return self._step

    def _oracle_patterns(self, context: PipelineContext) -> List[str]:
        patterns = context.require_patterns()
        if self.section_type is SectionType.PAGE_NUMBERS:
            return patterns.page_number_patterns
        return patterns.header_patterns + patterns.footer_patterns

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        candidate = oracle_candidate(context, self._oracle_patterns(context))
        decision = context.chain.evaluate_patterns(text, candidate, self.section_type)
        log_decision(context, self.step, decision)

        if not decision.accepted:
            return StepOutcome.skipped(
                text,
                decision.skip_reason or f"no {self.section_type.label} patterns",
                oracle_detected=decision.oracle_detected,
            )

        new_text, removed = remove_matching_lines(text, decision.candidate.patterns)
        logger.info(f"Removed {removed} {self.section_type.label} lines")
        return StepOutcome(
            text=new_text,
            change_count=removed,
            confidence=decision.confidence,
            oracle_detected=decision.oracle_detected,
            details={"source": decision.source.value},
        )
