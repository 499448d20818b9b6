"""Shared handling of defense chain decisions."""

import logging
from typing import Optional, Tuple

from vellum.defense import DefenseDecision
from vellum.exceptions import VellumOracleError
from vellum.models import BoundaryCandidate, CleaningStep, SectionType
from vellum.pipeline.context import PipelineContext

logger = logging.getLogger(__name__)


def detect_boundary(
    context: PipelineContext, text: str, section_type: SectionType
) -> Tuple[Optional[BoundaryCandidate], Optional[str]]:
    """Ask the oracle for a section on the current text.

    Returns:
        (candidate, oracle error message); the error is set when the oracle
        failed after retries
    """
    try:
        return context.call_oracle(context.oracle.detect_boundary, text, section_type), None
    except VellumOracleError as e:
        logger.warning(f"Oracle failed on {section_type.label}: {e}")
        return None, f"oracle error: {e}"


def log_decision(
    context: PipelineContext, step: CleaningStep, decision: DefenseDecision
) -> None:
    rejection = decision.rejection
    context.log_event(
        "defense_decision",
        pipeline_stage=step.value,
        section_type=decision.section_type.value,
        accepted=decision.accepted,
        source=decision.source.value if decision.source else None,
        confidence=decision.confidence,
        rejection_reason=rejection.reason.value if rejection and rejection.reason else None,
        rejection_detail=rejection.detail if rejection else None,
        skip_reason=decision.skip_reason,
    )
    if rejection is not None:
        context.increment_metric("defense_rejections")
    if decision.accepted and decision.source is not None and decision.source.value != "oracle":
        context.increment_metric("fallbacks_used")
