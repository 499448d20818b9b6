"""Cleaning pipeline."""

from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.cancellation import CancellationToken
from vellum.pipeline.context import PipelineContext
from vellum.pipeline.orchestrator import PipelineOrchestrator
from vellum.pipeline.verification import verify_step_effect

__all__ = [
    "StepHandler",
    "StepOutcome",
    "CancellationToken",
    "PipelineContext",
    "PipelineOrchestrator",
    "verify_step_effect",
]
