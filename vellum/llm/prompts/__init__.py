"""Prompt templates for LLM operations."""

from vellum.llm.prompts.boundary import (
    BOUNDARY_DETECTION_SYSTEM,
    BOUNDARY_DETECTION_TEMPLATE,
)
from vellum.llm.prompts.patterns import (
    PATTERN_DETECTION_SYSTEM,
    PATTERN_DETECTION_TEMPLATE,
)
from vellum.llm.prompts.metadata import (
    METADATA_SYSTEM,
    METADATA_TEMPLATE,
)
from vellum.llm.prompts.reflow import (
    OPTIMIZE_SYSTEM,
    OPTIMIZE_TEMPLATE,
    REFLOW_SYSTEM,
    REFLOW_TEMPLATE,
)

__all__ = [
    "BOUNDARY_DETECTION_SYSTEM",
    "BOUNDARY_DETECTION_TEMPLATE",
    "PATTERN_DETECTION_SYSTEM",
    "PATTERN_DETECTION_TEMPLATE",
    "METADATA_SYSTEM",
    "METADATA_TEMPLATE",
    "OPTIMIZE_SYSTEM",
    "OPTIMIZE_TEMPLATE",
    "REFLOW_SYSTEM",
    "REFLOW_TEMPLATE",
]
