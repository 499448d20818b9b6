"""Steps that remove a detected line range."""

import logging
from typing import Dict

from vellum.models import CleaningStep, SectionType
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext
from vellum.pipeline.steps._decisions import detect_boundary, log_decision
from vellum.text.transform import remove_line_range

logger = logging.getLogger(__name__)

BOUNDARY_SECTIONS: Dict[CleaningStep, SectionType] = {
    CleaningStep.REMOVE_FRONT_MATTER: SectionType.FRONT_MATTER,
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: SectionType.TABLE_OF_CONTENTS,
    CleaningStep.REMOVE_BACK_MATTER: SectionType.BACK_MATTER,
    CleaningStep.REMOVE_INDEX: SectionType.INDEX,
    CleaningStep.REMOVE_AUXILIARY_LISTS: SectionType.AUXILIARY_LIST,
}


class BoundaryRemovalStep(StepHandler):
    """Detects one section on the current text and removes it.

    Line numbers are always fresh: every step asks the oracle again, since
    earlier steps shift the text.
    """

    def __init__(self, step: CleaningStep) -> None:
        if step not in BOUNDARY_SECTIONS:
            raise ValueError(f"{step.value} is not a boundary removal step")
        self._step = step
        self.section_type = BOUNDARY_SECTIONS[step]

    @property
    def step(self) -> CleaningStep:
        return self._step

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        candidate, oracle_error = detect_boundary(context, text, self.section_type)
        decision = context.chain.evaluate_boundary(
            text, candidate, self.section_type, oracle_error
        )
        log_decision(context, self.step, decision)

        warnings = []
        if oracle_error:
            warnings.append(oracle_error)

        if not decision.accepted:
            return StepOutcome.skipped(
                text,
                decision.skip_reason or f"no {self.section_type.label} removed",
                warnings=warnings,
                oracle_detected=decision.oracle_detected,
            )

        span = decision.candidate
        new_text = remove_line_range(text, span.start_line, span.end_line)
        logger.info(
            f"Removed {self.section_type.label} {span.describe()} "
            f"({decision.source.value})"
        )
        return StepOutcome(
            text=new_text,
            change_count=span.line_count,
            confidence=decision.confidence,
            warnings=warnings,
            oracle_detected=decision.oracle_detected,
            details={"source": decision.source.value, "range": [span.start_line, span.end_line]},
        )
