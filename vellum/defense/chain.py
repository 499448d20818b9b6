"""Three-phase defense chain guarding every destructive step."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from vellum.defense import heuristic
from vellum.defense.constraints import profile_for
from vellum.defense.validator import pattern_error, validate, validate_patterns
from vellum.defense.verifier import verify, verify_patterns
from vellum.models import (
    BoundaryCandidate,
    CandidateSource,
    PatternCandidate,
    SectionType,
    ValidationVerdict,
)
from vellum.text.transform import (
    LinePredicate,
    count_lines,
    find_inline_matches,
    find_matching_lines,
)

logger = logging.getLogger(__name__)

Candidate = Union[BoundaryCandidate, PatternCandidate]


@dataclass
class DefenseDecision:
    """Final answer of the chain for one section.

    ``candidate`` is None when nothing may be removed; ``skip_reason`` then
    says why.
    """

    section_type: SectionType
    candidate: Optional[Candidate] = None
    confidence: float = 0.0
    verdicts: List[Tuple[str, ValidationVerdict]] = field(default_factory=list)
    skip_reason: Optional[str] = None
    oracle_detected: bool = False

    @property
    def accepted(self) -> bool:
        return self.candidate is not None

    @property
    def source(self) -> Optional[CandidateSource]:
        return self.candidate.source if self.candidate is not None else None

    @property
    def rejection(self) -> Optional[ValidationVerdict]:
        for _, verdict in self.verdicts:
            if verdict.is_rejected:
                return verdict
        return None


class DefenseChain:
    """Runs Phase A, then Phase B, then (on rejection) Phase C."""

    def __init__(
        self,
        min_confidence_floor: float = 0.0,
        heuristic_fallback: bool = True,
    ) -> None:
        """Initialize the chain.

        Args:
            min_confidence_floor: Raises every profile's confidence threshold
            heuristic_fallback: Whether Phase C may supply a candidate
        """
        self._floor = min_confidence_floor
        self._heuristic_fallback = heuristic_fallback

    def evaluate_boundary(
        self,
        text: str,
        candidate: Optional[BoundaryCandidate],
        section_type: SectionType,
        oracle_error: Optional[str] = None,
    ) -> DefenseDecision:
        """Decide which line range, if any, may be removed.

        Args:
            text: Current document text
            candidate: Oracle answer; None means none (or the oracle failed)
            section_type: Section being removed
            oracle_error: Set when the oracle failed after retries

        Returns:
            DefenseDecision
        """
        decision = DefenseDecision(section_type=section_type)

        if candidate is None and oracle_error is None:
            decision.skip_reason = f"no {section_type.label} detected"
            return decision

        if candidate is not None:
            decision.oracle_detected = True
            phase_a = validate(candidate, section_type, count_lines(text), self._floor)
            decision.verdicts.append(("phase_a", phase_a))
            if phase_a.is_accepted:
                phase_b = verify(text, candidate, section_type)
                decision.verdicts.append(("phase_b", phase_b))
                if phase_b.is_accepted:
                    decision.candidate = candidate
                    decision.confidence = (candidate.confidence + phase_b.confidence) / 2
                    return decision
            logger.info(
                f"Rejected {section_type.label} candidate {candidate.describe()}: "
                f"{decision.rejection}"
            )

        reason = oracle_error or str(decision.rejection)
        if self._heuristic_fallback:
            fallback = heuristic.detect(text, section_type)
            if fallback is not None:
                logger.info(f"Heuristic fallback for {section_type.label}: {fallback.describe()}")
                decision.candidate = fallback
                decision.confidence = fallback.confidence
                return decision

        decision.skip_reason = f"{reason}; no heuristic match"
        return decision

    def evaluate_patterns(
        self,
        text: str,
        candidate: Optional[PatternCandidate],
        section_type: SectionType,
        oracle_error: Optional[str] = None,
        skip_line: LinePredicate = None,
    ) -> DefenseDecision:
        """Decide which patterns, if any, may be used for removal.

        Oracle patterns go through Phase A (validity, removal share,
        confidence) and Phase B (matched text looks right). On rejection the
        built-in default patterns are used, provided their removal stays
        within the section's share.

        Args:
            text: Current document text
            candidate: Oracle patterns, or None
            section_type: Pattern section
            oracle_error: Set when the oracle failed after retries
            skip_line: Lines excluded from matching

        Returns:
            DefenseDecision
        """
        decision = DefenseDecision(section_type=section_type)

        if candidate is not None and not candidate.is_empty:
            decision.oracle_detected = True
            phase_a = self._validate_patterns(text, candidate, section_type, skip_line)
            decision.verdicts.append(("phase_a", phase_a))
            if phase_a.is_accepted:
                phase_b = verify_patterns(
                    self._matches(text, candidate, skip_line), section_type
                )
                decision.verdicts.append(("phase_b", phase_b))
                if phase_b.is_accepted:
                    decision.candidate = candidate
                    decision.confidence = candidate.confidence
                    return decision
            logger.info(f"Rejected {section_type.label} patterns: {decision.rejection}")

        if oracle_error:
            reason = oracle_error
        elif decision.rejection is not None:
            reason = str(decision.rejection)
        else:
            reason = f"no {section_type.label} patterns detected"

        if self._heuristic_fallback:
            fallback = heuristic.default_patterns(section_type, text)
            if fallback is not None:
                total, removed = self._measure(text, fallback, skip_line)
                limit = profile_for(section_type).max_removal_fraction
                if total == 0 or removed / total <= limit:
                    decision.candidate = fallback
                    decision.confidence = fallback.confidence
                    return decision
                logger.info(
                    f"Default {section_type.label} patterns would remove "
                    f"{removed}/{total}; skipping"
                )

        decision.skip_reason = reason
        return decision

    def _validate_patterns(
        self,
        text: str,
        candidate: PatternCandidate,
        section_type: SectionType,
        skip_line: LinePredicate,
    ) -> ValidationVerdict:
        invalid = pattern_error(candidate)
        if invalid is not None:
            return invalid
        total, removed = self._measure(text, candidate, skip_line)
        return validate_patterns(candidate, section_type, total, removed, self._floor)

    @staticmethod
    def _matches(
        text: str, candidate: PatternCandidate, skip_line: LinePredicate
    ) -> List[str]:
        if candidate.scope == "inline":
            return find_inline_matches(text, candidate.patterns, skip_line)
        return find_matching_lines(text, candidate.patterns, skip_line)

    def _measure(
        self, text: str, candidate: PatternCandidate, skip_line: LinePredicate
    ) -> Tuple[int, int]:
        """(total units, removed units) in the section's measuring unit."""
        matches = self._matches(text, candidate, skip_line)
        if candidate.scope == "inline":
            return len(text), sum(len(m) for m in matches)
        return count_lines(text), len(matches)

