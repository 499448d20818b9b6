"""
Vellum: Document Cleaning Library

Strip front matter, back matter, page furniture and references from raw
document text without ever trusting the language model with a deletion.
"""

from vellum.config import VellumConfig, suggest_preset
from vellum.vellum import Vellum, VellumBuilder
from vellum.models import (
    CleanedContent,
    CleaningStep,
    DocumentMetadata,
    PipelineRun,
    PresetType,
    SectionType,
    StepResult,
    VellumResult,
)
from vellum.pipeline import CancellationToken, PipelineOrchestrator
from vellum.exceptions import (
    VellumError,
    VellumConfigError,
    VellumLLMError,
    VellumOracleError,
    VellumPipelineError,
    VellumValidationError,
)

__version__ = "1.0.0"
__all__ = [
    # Main classes
    "Vellum",
    "VellumBuilder",
    "VellumConfig",
    "PipelineOrchestrator",
    "CancellationToken",
    "suggest_preset",
    # Models
    "CleanedContent",
    "DocumentMetadata",
    "PipelineRun",
    "StepResult",
    "VellumResult",
    # Enums
    "CleaningStep",
    "PresetType",
    "SectionType",
    # Exceptions
    "VellumError",
    "VellumConfigError",
    "VellumLLMError",
    "VellumOracleError",
    "VellumPipelineError",
    "VellumValidationError",
]
