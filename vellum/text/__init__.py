"""Stateless text transformations."""

from vellum.text.chunking import TextChunk, chunk_paragraphs, merge_chunks
from vellum.text.normalize import normalize_special_characters
from vellum.text.shield import ContentShield, RestoreResult, ShieldedContent
from vellum.text.structure import StructureResult, apply_structure
from vellum.text.transform import (
    count_changed_lines,
    count_lines,
    count_words,
    remove_line_range,
    remove_line_ranges,
    remove_matching_lines,
    remove_patterns_inline,
)

__all__ = [
    "TextChunk",
    "chunk_paragraphs",
    "merge_chunks",
    "normalize_special_characters",
    "ContentShield",
    "RestoreResult",
    "ShieldedContent",
    "StructureResult",
    "apply_structure",
    "count_changed_lines",
    "count_lines",
    "count_words",
    "remove_line_range",
    "remove_line_ranges",
    "remove_matching_lines",
    "remove_patterns_inline",
]
