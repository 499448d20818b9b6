from __future__ import annotations

from vellum.defense.validator import pattern_error, validate, validate_patterns
from vellum.models import (
    BoundaryCandidate,
    PatternCandidate,
    RejectionReason,
    SectionType,
)


def test_back_matter_starting_near_the_top_is_too_early() -> None:
    verdict = validate(BoundaryCandidate(4, 415, 0.95), SectionType.BACK_MATTER, 415)
    assert verdict.is_rejected
    assert verdict.reason == RejectionReason.POSITION_TOO_EARLY


def test_valid_back_matter_is_accepted() -> None:
    verdict = validate(BoundaryCandidate(300, 400, 0.8), SectionType.BACK_MATTER, 500)
    assert verdict.is_accepted
    assert verdict.confidence == 0.8


def test_range_outside_document_is_out_of_bounds() -> None:
    verdict = validate(BoundaryCandidate(450, 520, 0.9), SectionType.BACK_MATTER, 500)
    assert verdict.reason == RejectionReason.OUT_OF_BOUNDS


def test_empty_range_is_invalid() -> None:
    verdict = validate(BoundaryCandidate(300, 300, 0.9), SectionType.BACK_MATTER, 500)
    assert verdict.reason == RejectionReason.INVALID_RANGE


def test_bounds_are_checked_before_position() -> None:
    verdict = validate(BoundaryCandidate(-1, 10, 0.9), SectionType.BACK_MATTER, 500)
    assert verdict.reason == RejectionReason.OUT_OF_BOUNDS


def test_front_matter_ending_too_late() -> None:
    verdict = validate(BoundaryCandidate(0, 250, 0.9), SectionType.FRONT_MATTER, 500)
    assert verdict.reason == RejectionReason.POSITION_TOO_LATE


def test_excessive_removal() -> None:
    verdict = validate(BoundaryCandidate(260, 500, 0.9), SectionType.BACK_MATTER, 500)
    assert verdict.reason == RejectionReason.EXCESSIVE_REMOVAL


def test_section_too_small() -> None:
    verdict = validate(BoundaryCandidate(480, 483, 0.9), SectionType.BACK_MATTER, 500)
    assert verdict.reason == RejectionReason.SECTION_TOO_SMALL


def test_low_confidence_and_config_floor() -> None:
    low = validate(BoundaryCandidate(300, 400, 0.6), SectionType.BACK_MATTER, 500)
    assert low.reason == RejectionReason.LOW_CONFIDENCE

    floored = validate(
        BoundaryCandidate(300, 400, 0.8),
        SectionType.BACK_MATTER,
        500,
        min_confidence_floor=0.85,
    )
    assert floored.reason == RejectionReason.LOW_CONFIDENCE

    # A floor below the profile threshold never lowers it.
    still_low = validate(
        BoundaryCandidate(300, 400, 0.6),
        SectionType.BACK_MATTER,
        500,
        min_confidence_floor=0.1,
    )
    assert still_low.is_rejected


def test_footnotes_in_first_half_use_tighter_removal_limit() -> None:
    early = validate(BoundaryCandidate(100, 140, 0.9), SectionType.FOOTNOTES, 500)
    assert early.reason == RejectionReason.EXCESSIVE_REMOVAL

    late = validate(BoundaryCandidate(400, 440, 0.9), SectionType.FOOTNOTES, 500)
    assert late.is_accepted


def test_pattern_errors() -> None:
    assert pattern_error(PatternCandidate(patterns=[])).reason == RejectionReason.INVALID_PATTERN
    assert pattern_error(PatternCandidate(patterns=["("])).reason == RejectionReason.INVALID_PATTERN
    assert pattern_error(PatternCandidate(patterns=[".*"])).reason == RejectionReason.INVALID_PATTERN
    assert pattern_error(PatternCandidate(patterns=[r"^\d+$"])) is None


def test_pattern_removal_share() -> None:
    candidate = PatternCandidate(patterns=[r"^\d+$"], confidence=0.9)
    too_much = validate_patterns(candidate, SectionType.PAGE_NUMBERS, 500, 100)
    assert too_much.reason == RejectionReason.EXCESSIVE_REMOVAL

    fine = validate_patterns(candidate, SectionType.PAGE_NUMBERS, 500, 20)
    assert fine.is_accepted
