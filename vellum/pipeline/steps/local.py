"""Steps that never call the oracle."""

import logging

from vellum.models import CleaningStep, DocumentMetadata
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.context import PipelineContext
from vellum.text.normalize import normalize_special_characters
from vellum.text.structure import apply_structure
from vellum.text.transform import count_changed_lines

logger = logging.getLogger(__name__)


class CleanSpecialCharactersStep(StepHandler):
    """Repairs encoding damage and strips noise characters outside protected regions."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.CLEAN_SPECIAL_CHARACTERS

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        shield = context.make_shield()
        shielded_text, shielded = shield.protect(text)
        normalized = normalize_special_characters(
            shielded_text, context.require_patterns().special_characters_to_remove
        )
        restored = shield.restore(normalized, shielded)

        warnings = []
        if not restored.complete:
            warnings.append(f"{len(restored.missing)} protected regions could not be restored")
        return StepOutcome(
            text=restored.text,
            change_count=count_changed_lines(text, restored.text),
            warnings=warnings,
            details={"protected": shielded.counts()},
        )


class AddStructureStep(StepHandler):
    """Wraps the content in title, metadata block, chapter and end markers."""

    @property
    def step(self) -> CleaningStep:
        return CleaningStep.ADD_STRUCTURE

    def process(self, text: str, context: PipelineContext) -> StepOutcome:
        config = context.config
        if context.metadata is None:
            context.metadata = DocumentMetadata()
        metadata = context.metadata

        result = apply_structure(
            text,
            metadata,
            metadata_format=config.metadata_format,
            chapter_style=config.chapter_marker_style,
            end_style=config.end_marker_style,
            chapter_titles=context.require_patterns().chapter_titles,
        )
        metadata.chapters_detected = result.chapters_found
        context.add_metric("chapters_detected", result.chapters_found)
        logger.info(f"Structured document with {result.chapters_found} chapters")

        return StepOutcome(
            text=result.text,
            change_count=count_changed_lines(text, result.text),
            details={"chapters_found": result.chapters_found},
        )
