"""Base classes for pipeline steps."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from vellum.models import CleaningStep

if TYPE_CHECKING:
    from vellum.pipeline.context import PipelineContext


@dataclass
class StepOutcome:
    """What a handler produced; the orchestrator turns it into a StepResult."""

    text: str
    change_count: int = 0
    confidence: float = 1.0
    skip_reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    oracle_detected: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def skipped(cls, text: str, reason: str, **kwargs: Any) -> "StepOutcome":
        return cls(text=text, skip_reason=reason, **kwargs)

    @property
    def is_skipped(self) -> bool:
        return self.skip_reason is not None


class StepHandler(ABC):
    """Base class for all cleaning step handlers."""

    @property
    @abstractmethod
    def step(self) -> CleaningStep:
        """Step this handler implements."""
        pass

    @property
    def name(self) -> str:
        """Step name for logging and metrics."""
        return self.step.value

    @abstractmethod
    def process(self, text: str, context: "PipelineContext") -> StepOutcome:
        """Run the step on the current text.

        Args:
            text: Output of the previous step
            context: Shared run context

        Returns:
            StepOutcome with the new text
        """
        pass

    def should_skip(self, text: str, context: "PipelineContext") -> Optional[str]:
        """Override to conditionally skip this step.

        Returns:
            A skip reason, or None to run the step
        """
        return None
