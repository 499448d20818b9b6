"""Step handlers, one per cleaning step."""

from typing import Dict

from vellum.models import CleaningStep
from vellum.pipeline.base import StepHandler
from vellum.pipeline.steps.boundary import BOUNDARY_SECTIONS, BoundaryRemovalStep
from vellum.pipeline.steps.chunked import OptimizeParagraphLengthStep, ReflowParagraphsStep
from vellum.pipeline.steps.local import AddStructureStep, CleanSpecialCharactersStep
from vellum.pipeline.steps.metadata import ExtractMetadataStep
from vellum.pipeline.steps.patterns import PatternRemovalStep
from vellum.pipeline.steps.reference import RemoveCitationsStep, RemoveFootnotesStep


def build_step_handlers() -> Dict[CleaningStep, StepHandler]:
    """Default handler for every cleaning step."""
    handlers: Dict[CleaningStep, StepHandler] = {
        CleaningStep.EXTRACT_METADATA: ExtractMetadataStep(),
        CleaningStep.REMOVE_PAGE_NUMBERS: PatternRemovalStep(CleaningStep.REMOVE_PAGE_NUMBERS),
        CleaningStep.REMOVE_HEADERS_FOOTERS: PatternRemovalStep(
            CleaningStep.REMOVE_HEADERS_FOOTERS
        ),
        CleaningStep.REMOVE_CITATIONS: RemoveCitationsStep(),
        CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: RemoveFootnotesStep(),
        CleaningStep.CLEAN_SPECIAL_CHARACTERS: CleanSpecialCharactersStep(),
        CleaningStep.REFLOW_PARAGRAPHS: ReflowParagraphsStep(),
        CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH: OptimizeParagraphLengthStep(),
        CleaningStep.ADD_STRUCTURE: AddStructureStep(),
    }
    for step in BOUNDARY_SECTIONS:
        handlers[step] = BoundaryRemovalStep(step)

    assert set(handlers) == set(CleaningStep), "every cleaning step needs a handler"
    return handlers


__all__ = [
    "build_step_handlers",
    "ExtractMetadataStep",
    "PatternRemovalStep",
    "BoundaryRemovalStep",
    "RemoveCitationsStep",
    "RemoveFootnotesStep",
    "CleanSpecialCharactersStep",
    "ReflowParagraphsStep",
    "OptimizeParagraphLengthStep",
    "AddStructureStep",
]
