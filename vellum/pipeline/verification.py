"""Post-step anomaly checks.

Anomalies never stop a run; they are recorded on the StepResult and
surfaced in the report.
"""

from typing import List

from vellum.config import VellumConfig
from vellum.models import AnomalySeverity, CleaningStep, StepAnomaly
from vellum.pipeline.base import StepOutcome
from vellum.text.transform import count_lines

_REFERENCE_STEPS = (CleaningStep.REMOVE_CITATIONS, CleaningStep.REMOVE_FOOTNOTES_ENDNOTES)
_CRITICAL_REMOVAL_FRACTION = 0.5


def verify_step_effect(
    step: CleaningStep,
    before: str,
    outcome: StepOutcome,
    api_calls: int,
    config: VellumConfig,
) -> List[StepAnomaly]:
    """Compare a step's input and output for unexpected effects.

    Args:
        step: Step that ran
        before: Text the step received
        outcome: What the step produced
        api_calls: Oracle calls made by the step
        config: Run configuration

    Returns:
        Anomalies, possibly empty
    """
    anomalies: List[StepAnomaly] = []
    lines_before = count_lines(before)
    lines_after = count_lines(outcome.text)

    if step.is_boundary_step and outcome.oracle_detected and outcome.change_count == 0:
        anomalies.append(
            StepAnomaly(
                step,
                "oracle reported a section but no lines were removed",
                AnomalySeverity.WARNING,
            )
        )

    if step in _REFERENCE_STEPS and api_calls > 0 and outcome.change_count == 0:
        anomalies.append(
            StepAnomaly(
                step,
                f"{api_calls} oracle calls made but nothing was removed",
                AnomalySeverity.WARNING,
            )
        )

    if (
        step is CleaningStep.ADD_STRUCTURE
        and config.chapter_marker_style.inserts_markers
        and outcome.details.get("chapters_found", 0) == 0
    ):
        anomalies.append(
            StepAnomaly(step, "no chapter headings found for markers", AnomalySeverity.INFO)
        )

    if lines_before > 0 and (lines_before - lines_after) / lines_before > _CRITICAL_REMOVAL_FRACTION:
        anomalies.append(
            StepAnomaly(
                step,
                f"removed {lines_before - lines_after} of {lines_before} lines",
                AnomalySeverity.CRITICAL,
            )
        )

    if step.is_removal_step and lines_after > lines_before:
        anomalies.append(
            StepAnomaly(
                step,
                f"removal step grew the text from {lines_before} to {lines_after} lines",
                AnomalySeverity.WARNING,
            )
        )

    return anomalies
