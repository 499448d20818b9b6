"""Citation and footnote removal.

Both steps run on shielded text so code, math and tables never lose
bracketed numbers that happen to look like references.
"""

import logging
from typing import List

from vellum.models import CleaningStep, SectionType
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext
from vellum.pipeline.steps._decisions import detect_boundary, log_decision
from vellum.pipeline.steps.patterns import oracle_candidate
from vellum.text.citations import clean_orphaned_brackets, is_bibliography_line
from vellum.text.shield import ContentShield, ShieldedContent
from vellum.text.transform import remove_line_range, remove_patterns_inline

logger = logging.getLogger(__name__)


def _restore(
    shield: ContentShield, text: str, shielded: ShieldedContent, warnings: List[str]
) -> str:
    result = shield.restore(text, shielded)
    if not result.complete:
        warnings.append(f"{len(result.missing)} protected regions could not be restored")
    return result.text


class RemoveCitationsStep(StepHandler):
    """Removes inline citations, leaving reference-list lines intact."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.REMOVE_CITATIONS

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        shield = context.make_shield()
        shielded_text, shielded = shield.protect(text)

        candidate = oracle_candidate(
            context, context.require_patterns().citation_patterns, scope="inline"
        )
        decision = context.chain.evaluate_patterns(
            shielded_text,
            candidate,
            SectionType.CITATIONS,
            skip_line=is_bibliography_line,
        )
        log_decision(context, self.step, decision)

        if not decision.accepted:
            return StepOutcome.skipped(
                text,
                decision.skip_reason or "no citations detected",
                oracle_detected=decision.oracle_detected,
            )

        stripped, removed = remove_patterns_inline(
            shielded_text, decision.candidate.patterns, skip_line=is_bibliography_line
        )
        if removed:
            stripped = clean_orphaned_brackets(stripped)

        warnings: List[str] = []
        new_text = _restore(shield, stripped, shielded, warnings)
        logger.info(f"Removed {removed} citations")
        return StepOutcome(
            text=new_text,
            change_count=removed,
            confidence=decision.confidence,
            warnings=warnings,
            oracle_detected=decision.oracle_detected,
            details={"source": decision.source.value, "style": context.require_patterns().citation_style},
        )


class RemoveFootnotesStep(StepHandler):
    """Removes a notes section, then inline footnote markers outside reference-list lines."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.REMOVE_FOOTNOTES_ENDNOTES

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        warnings: List[str] = []
        confidences: List[float] = []
        skip_reasons: List[str] = []
        change_count = 0

        # Notes section
        candidate, oracle_error = detect_boundary(context, text, SectionType.FOOTNOTES)
        if oracle_error:
            warnings.append(oracle_error)
        section = context.chain.evaluate_boundary(
            text, candidate, SectionType.FOOTNOTES, oracle_error
        )
        log_decision(context, self.step, section)
        if section.accepted:
            span = section.candidate
            text = remove_line_range(text, span.start_line, span.end_line)
            change_count += span.line_count
            confidences.append(section.confidence)
            logger.info(f"Removed notes section {span.describe()}")
        else:
            skip_reasons.append(section.skip_reason or "no notes section")

        # Inline markers
        shield = context.make_shield()
        shielded_text, shielded = shield.protect(text)
        markers = context.chain.evaluate_patterns(
            shielded_text,
            oracle_candidate(
                context, context.require_patterns().footnote_marker_patterns, scope="inline"
            ),
            SectionType.FOOTNOTE_MARKERS,
            skip_line=is_bibliography_line,
        )
        log_decision(context, self.step, markers)
        if markers.accepted:
            stripped, removed = remove_patterns_inline(
                shielded_text, markers.candidate.patterns, skip_line=is_bibliography_line
            )
            text = _restore(shield, stripped, shielded, warnings)
            change_count += removed
            confidences.append(markers.confidence)
            logger.info(f"Removed {removed} footnote markers")
        else:
            skip_reasons.append(markers.skip_reason or "no footnote markers")

        oracle_detected = section.oracle_detected or markers.oracle_detected
        if not confidences:
            return StepOutcome.skipped(
                text,
                "; ".join(skip_reasons),
                warnings=warnings,
                oracle_detected=oracle_detected,
            )
        return StepOutcome(
            text=text,
            change_count=change_count,
            confidence=sum(confidences) / len(confidences),
            warnings=warnings,
            oracle_detected=oracle_detected,
        )
