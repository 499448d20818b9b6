from __future__ import annotations

from vellum.config import VellumConfig
from vellum.models import AnomalySeverity, ChapterMarkerStyle, CleaningStep
from vellum.pipeline import StepOutcome, verify_step_effect

TEXT = "\n".join(f"line {i}" for i in range(10))


def _severities(anomalies) -> list:
    return [anomaly.severity for anomaly in anomalies]


def test_detected_section_with_no_removal_warns() -> None:
    outcome = StepOutcome.skipped(TEXT, "rejected", oracle_detected=True)
    anomalies = verify_step_effect(
        CleaningStep.REMOVE_INDEX, TEXT, outcome, api_calls=1, config=VellumConfig()
    )
    assert _severities(anomalies) == [AnomalySeverity.WARNING]


def test_reference_step_calls_without_effect_warn() -> None:
    outcome = StepOutcome(text=TEXT)
    anomalies = verify_step_effect(
        CleaningStep.REMOVE_CITATIONS, TEXT, outcome, api_calls=2, config=VellumConfig()
    )
    assert _severities(anomalies) == [AnomalySeverity.WARNING]
    assert "2 oracle calls" in anomalies[0].description


def test_structure_without_chapters_is_informational() -> None:
    outcome = StepOutcome(text=TEXT, details={"chapters_found": 0})
    with_markers = verify_step_effect(
        CleaningStep.ADD_STRUCTURE, TEXT, outcome, api_calls=0, config=VellumConfig()
    )
    without_markers = verify_step_effect(
        CleaningStep.ADD_STRUCTURE,
        TEXT,
        outcome,
        api_calls=0,
        config=VellumConfig(chapter_marker_style=ChapterMarkerStyle.NONE),
    )
    assert _severities(with_markers) == [AnomalySeverity.INFO]
    assert without_markers == []


def test_removing_most_of_the_text_is_critical() -> None:
    outcome = StepOutcome(text="line 0\nline 1", change_count=8)
    anomalies = verify_step_effect(
        CleaningStep.REMOVE_BACK_MATTER, TEXT, outcome, api_calls=1, config=VellumConfig()
    )
    assert _severities(anomalies) == [AnomalySeverity.CRITICAL]


def test_removal_step_that_grows_text_warns() -> None:
    outcome = StepOutcome(text=TEXT + "\nextra", change_count=1)
    anomalies = verify_step_effect(
        CleaningStep.REMOVE_PAGE_NUMBERS, TEXT, outcome, api_calls=0, config=VellumConfig()
    )
    assert _severities(anomalies) == [AnomalySeverity.WARNING]


def test_normal_step_has_no_anomalies() -> None:
    outcome = StepOutcome(text="\n".join(TEXT.split("\n")[:8]), change_count=2)
    assert (
        verify_step_effect(
            CleaningStep.REMOVE_INDEX, TEXT, outcome, api_calls=1, config=VellumConfig()
        )
        == []
    )
