"""Phase A: static position, size and confidence constraints."""

import re
from typing import Optional

from vellum.defense.constraints import profile_for
from vellum.models import (
    BoundaryCandidate,
    PatternCandidate,
    RejectionReason,
    SectionType,
    ValidationVerdict,
)


def validate(
    candidate: BoundaryCandidate,
    section_type: SectionType,
    total_lines: int,
    min_confidence_floor: float = 0.0,
) -> ValidationVerdict:
    """Check a boundary candidate against its section profile.

    Checks run in priority order and the first violation wins: bounds,
    range, position, removal size, minimum size, confidence.

    Args:
        candidate: Proposed half-open line range
        section_type: Section the candidate claims to be
        total_lines: Line count of the current text
        min_confidence_floor: Raises (never lowers) the profile threshold

    Returns:
        Accepting or rejecting verdict
    """
    profile = profile_for(section_type)
    start, end = candidate.start_line, candidate.end_line

    if total_lines <= 0 or start < 0 or end > total_lines:
        return ValidationVerdict.reject(
            RejectionReason.OUT_OF_BOUNDS,
            f"range {start}-{end} outside 0-{total_lines}",
        )
    if start >= end:
        return ValidationVerdict.reject(
            RejectionReason.INVALID_RANGE, f"start {start} >= end {end}"
        )

    start_fraction = start / total_lines
    end_fraction = end / total_lines

    if profile.min_start_fraction is not None and start_fraction < profile.min_start_fraction:
        return ValidationVerdict.reject(
            RejectionReason.POSITION_TOO_EARLY,
            f"starts at {start_fraction:.0%}, expected >= {profile.min_start_fraction:.0%}",
        )
    if profile.max_end_fraction is not None and end_fraction > profile.max_end_fraction:
        return ValidationVerdict.reject(
            RejectionReason.POSITION_TOO_LATE,
            f"ends at {end_fraction:.0%}, expected <= {profile.max_end_fraction:.0%}",
        )

    removal_fraction = (end - start) / total_lines
    limit = profile.removal_limit(start_fraction)
    if removal_fraction > limit:
        return ValidationVerdict.reject(
            RejectionReason.EXCESSIVE_REMOVAL,
            f"removes {removal_fraction:.0%} of lines, limit {limit:.0%}",
        )

    if end - start < profile.min_lines:
        return ValidationVerdict.reject(
            RejectionReason.SECTION_TOO_SMALL,
            f"{end - start} lines, minimum {profile.min_lines}",
        )

    threshold = max(profile.min_confidence, min_confidence_floor)
    if candidate.confidence < threshold:
        return ValidationVerdict.reject(
            RejectionReason.LOW_CONFIDENCE,
            f"confidence {candidate.confidence:.2f} below {threshold:.2f}",
        )

    return ValidationVerdict.accept(candidate.confidence)


def validate_patterns(
    candidate: PatternCandidate,
    section_type: SectionType,
    total_units: int,
    removed_units: int,
    min_confidence_floor: float = 0.0,
) -> ValidationVerdict:
    """Check a pattern candidate and the removal it would cause.

    Args:
        candidate: Proposed patterns
        section_type: Section the patterns target
        total_units: Lines or characters in the current text (per profile unit)
        removed_units: Lines or characters the patterns would remove
        min_confidence_floor: Raises (never lowers) the profile threshold

    Returns:
        Accepting or rejecting verdict
    """
    profile = profile_for(section_type)

    invalid = pattern_error(candidate)
    if invalid is not None:
        return invalid

    if total_units > 0:
        fraction = removed_units / total_units
        if fraction > profile.max_removal_fraction:
            return ValidationVerdict.reject(
                RejectionReason.EXCESSIVE_REMOVAL,
                f"removes {fraction:.0%} of {profile.unit}, "
                f"limit {profile.max_removal_fraction:.0%}",
            )

    threshold = max(profile.min_confidence, min_confidence_floor)
    if candidate.confidence < threshold:
        return ValidationVerdict.reject(
            RejectionReason.LOW_CONFIDENCE,
            f"confidence {candidate.confidence:.2f} below {threshold:.2f}",
        )

    return ValidationVerdict.accept(candidate.confidence)


def pattern_error(candidate: PatternCandidate) -> Optional[ValidationVerdict]:
    """Rejection for an empty, uncompilable or empty-matching pattern set."""
    if candidate.is_empty:
        return ValidationVerdict.reject(RejectionReason.INVALID_PATTERN, "no patterns")
    for pattern in candidate.patterns:
        if not pattern:
            return ValidationVerdict.reject(RejectionReason.INVALID_PATTERN, "empty pattern")
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            return ValidationVerdict.reject(
                RejectionReason.INVALID_PATTERN, f"{pattern!r}: {e}"
            )
        if compiled.fullmatch("") is not None:
            return ValidationVerdict.reject(
                RejectionReason.INVALID_PATTERN, f"{pattern!r} matches empty text"
            )
    return None
