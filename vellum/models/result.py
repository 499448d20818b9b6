"""Result models for Vellum."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from vellum.models.enums import (
    AnomalySeverity,
    CleaningStep,
    MethodKind,
    RunStatus,
    StepStatus,
)
from vellum.models.patterns import DetectedPatterns, DocumentMetadata


@dataclass(frozen=True)
class StepAnomaly:
    """Unexpected effect observed after a step ran."""

    step: CleaningStep
    description: str
    severity: AnomalySeverity = AnomalySeverity.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step.value,
            "description": self.description,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class StepResult:
    """Outcome of one pipeline step. Immutable once recorded."""

    step: CleaningStep
    text: str
    word_count_before: int
    word_count_after: int
    change_count: int = 0
    confidence: float = 1.0
    cost: int = 0
    api_calls: int = 0
    status: StepStatus = StepStatus.COMPLETED
    skip_reason: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    anomalies: Tuple[StepAnomaly, ...] = ()
    duration: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.status is StepStatus.SKIPPED

    @property
    def words_removed(self) -> int:
        return self.word_count_before - self.word_count_after

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization (text omitted)."""
        return {
            "step": self.step.value,
            "label": self.step.label,
            "status": self.status.value,
            "skip_reason": self.skip_reason,
            "word_count_before": self.word_count_before,
            "word_count_after": self.word_count_after,
            "change_count": self.change_count,
            "confidence": self.confidence,
            "cost": self.cost,
            "api_calls": self.api_calls,
            "warnings": list(self.warnings),
            "anomalies": [a.to_dict() for a in self.anomalies],
            "duration": self.duration,
        }


# Weight of each step in the overall confidence average.
_CONFIDENCE_WEIGHTS = {
    MethodKind.ORACLE_CHUNKED: 1.5,
    MethodKind.ORACLE_ONLY: 1.0,
    MethodKind.HYBRID: 1.0,
    MethodKind.LOCAL_ONLY: 0.5,
}
_SKIPPED_WEIGHT = 0.25


class PipelineRun:
    """Ordered record of a pipeline execution.

    Results can only be appended while the run is active; ``finalize`` makes
    the record immutable.
    """

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        self._results: List[StepResult] = []
        self._status = RunStatus.RUNNING
        self._failure_reason: Optional[str] = None

    def append(self, result: StepResult) -> None:
        """Record a completed step.

        Raises:
            RuntimeError: If the run is already finalized
        """
        if self._status.is_terminal:
            raise RuntimeError(
                f"Cannot append to a {self._status.value} run for {self.document_id}"
            )
        self._results.append(result)

    def finalize(self, status: RunStatus, failure_reason: Optional[str] = None) -> None:
        """Freeze the run with a terminal status."""
        if not status.is_terminal:
            raise ValueError("A run can only be finalized with a terminal status")
        if self._status.is_terminal:
            raise RuntimeError(f"Run already finalized as {self._status.value}")
        self._status = status
        self._failure_reason = failure_reason

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure_reason

    @property
    def is_finalized(self) -> bool:
        return self._status.is_terminal

    @property
    def step_results(self) -> Tuple[StepResult, ...]:
        return tuple(self._results)

    @property
    def completed_steps(self) -> List[CleaningStep]:
        return [r.step for r in self._results]

    @property
    def total_cost(self) -> int:
        return sum(r.cost for r in self._results)

    @property
    def total_api_calls(self) -> int:
        return sum(r.api_calls for r in self._results)

    @property
    def overall_confidence(self) -> float:
        """Weighted average of per-step confidence."""
        total_weight = 0.0
        weighted = 0.0
        for result in self._results:
            if result.skipped:
                weight = _SKIPPED_WEIGHT
            else:
                weight = _CONFIDENCE_WEIGHTS[result.step.method_kind]
            total_weight += weight
            weighted += weight * result.confidence
        if total_weight == 0:
            return 0.0
        return weighted / total_weight

    @property
    def anomalies(self) -> List[StepAnomaly]:
        return [a for r in self._results for a in r.anomalies]

    @property
    def warnings(self) -> List[str]:
        return [f"{r.step.value}: {w}" for r in self._results for w in r.warnings]

    def result_for(self, step: CleaningStep) -> Optional[StepResult]:
        for result in self._results:
            if result.step is step:
                return result
        return None

    def __len__(self) -> int:
        return len(self._results)


@dataclass
class CleanedContent:
    """Final output of a pipeline run."""

    text: str
    original_text: str
    document_id: str
    run: PipelineRun
    metadata: Optional[DocumentMetadata] = None
    patterns: Optional[DetectedPatterns] = None

    @property
    def cancelled(self) -> bool:
        return self.run.status is RunStatus.CANCELLED

    @property
    def step_results(self) -> Tuple[StepResult, ...]:
        return self.run.step_results

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def original_word_count(self) -> int:
        return len(self.original_text.split())

    @property
    def reduction_percentage(self) -> float:
        """Percentage of words removed relative to the input."""
        original = self.original_word_count
        if original == 0:
            return 0.0
        return max(0.0, (original - self.word_count) / original * 100.0)

    @property
    def overall_confidence(self) -> float:
        return self.run.overall_confidence

    @property
    def total_cost(self) -> int:
        return self.run.total_cost

    @property
    def warnings(self) -> List[str]:
        return self.run.warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "document_id": self.document_id,
            "status": self.run.status.value,
            "word_count": self.word_count,
            "original_word_count": self.original_word_count,
            "reduction_percentage": self.reduction_percentage,
            "overall_confidence": self.overall_confidence,
            "total_cost": self.total_cost,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "steps": [r.to_dict() for r in self.step_results],
            "warnings": self.warnings,
        }


@dataclass
class VellumResult:
    """Cleaned content plus the files written for it."""

    content: CleanedContent
    output_path: Optional[str] = None
    report_path: Optional[str] = None
    debug_log_path: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.content.run.status is RunStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.content.cancelled
