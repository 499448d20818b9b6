"""Boundary and validation models for Vellum."""

from dataclasses import dataclass, field
from typing import Optional, List

from vellum.models.enums import CandidateSource, RejectionReason


@dataclass(frozen=True)
class BoundaryCandidate:
    """A proposed section boundary.

    Lines are 0-based and the range is half-open: ``start_line`` is the first
    line of the section and ``end_line`` is the first line after it.
    """

    start_line: int
    end_line: int
    confidence: float
    rationale: str = ""
    source: CandidateSource = CandidateSource.ORACLE

    @property
    def line_count(self) -> int:
        """Number of lines spanned (0 for inverted ranges)."""
        return max(0, self.end_line - self.start_line)

    def span(self, lines: List[str]) -> List[str]:
        """Return the lines covered by this candidate."""
        start = max(0, self.start_line)
        end = min(len(lines), self.end_line)
        return lines[start:end]

    def describe(self) -> str:
        return (
            f"lines {self.start_line}-{self.end_line} "
            f"(confidence {self.confidence:.2f}, {self.source.value})"
        )


@dataclass(frozen=True)
class PatternCandidate:
    """A proposed set of removal patterns for a pattern-based step.

    ``scope`` is ``"line"`` when each pattern must match a whole (stripped)
    line, or ``"inline"`` when matches are removed from within lines.
    """

    patterns: List[str] = field(default_factory=list)
    confidence: float = 0.0
    source: CandidateSource = CandidateSource.ORACLE
    scope: str = "line"

    @property
    def is_empty(self) -> bool:
        return len(self.patterns) == 0


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of a defense phase: accepted, or rejected with a reason."""

    accepted: bool
    reason: Optional[RejectionReason] = None
    detail: str = ""
    confidence: float = 1.0

    @classmethod
    def accept(cls, confidence: float = 1.0, detail: str = "") -> "ValidationVerdict":
        return cls(accepted=True, confidence=confidence, detail=detail)

    @classmethod
    def reject(cls, reason: RejectionReason, detail: str = "") -> "ValidationVerdict":
        return cls(accepted=False, reason=reason, detail=detail, confidence=0.0)

    @property
    def is_accepted(self) -> bool:
        return self.accepted

    @property
    def is_rejected(self) -> bool:
        return not self.accepted

    def __str__(self) -> str:
        if self.accepted:
            return f"accepted ({self.confidence:.2f})"
        reason = self.reason.value if self.reason else "unknown"
        return f"rejected: {reason}" + (f" ({self.detail})" if self.detail else "")
