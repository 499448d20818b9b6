"""Data models for Vellum."""

from vellum.models.enums import (
    AnomalySeverity,
    CandidateSource,
    ChapterMarkerStyle,
    CleaningStep,
    ContentType,
    EndMarkerStyle,
    MetadataFormat,
    MethodKind,
    PresetType,
    RejectionReason,
    RunStatus,
    SectionType,
    StepStatus,
)
from vellum.models.boundary import BoundaryCandidate, PatternCandidate, ValidationVerdict
from vellum.models.patterns import (
    ContentTypeFlags,
    DetectedPatterns,
    DocumentMetadata,
    DEFAULT_PAGE_NUMBER_PATTERNS,
    DEFAULT_SPECIAL_CHARACTERS,
)
from vellum.models.result import (
    CleanedContent,
    PipelineRun,
    StepAnomaly,
    StepResult,
    VellumResult,
)

__all__ = [
    "AnomalySeverity",
    "CandidateSource",
    "ChapterMarkerStyle",
    "CleaningStep",
    "ContentType",
    "EndMarkerStyle",
    "MetadataFormat",
    "MethodKind",
    "PresetType",
    "RejectionReason",
    "RunStatus",
    "SectionType",
    "StepStatus",
    "BoundaryCandidate",
    "PatternCandidate",
    "ValidationVerdict",
    "ContentTypeFlags",
    "DetectedPatterns",
    "DocumentMetadata",
    "DEFAULT_PAGE_NUMBER_PATTERNS",
    "DEFAULT_SPECIAL_CHARACTERS",
    "CleanedContent",
    "PipelineRun",
    "StepAnomaly",
    "StepResult",
    "VellumResult",
]
