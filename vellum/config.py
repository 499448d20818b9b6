"""Configuration for Vellum."""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Dict, Any, List
import os

import yaml

from vellum.exceptions import VellumConfigError
from vellum.models.enums import (
    ChapterMarkerStyle,
    CleaningStep,
    ContentType,
    EndMarkerStyle,
    MetadataFormat,
    PresetType,
)
from vellum.models.patterns import ContentTypeFlags


# Config attribute that toggles each optional step.
STEP_TOGGLES: Dict[CleaningStep, str] = {
    CleaningStep.REMOVE_PAGE_NUMBERS: "remove_page_numbers",
    CleaningStep.REMOVE_HEADERS_FOOTERS: "remove_headers_footers",
    CleaningStep.REMOVE_FRONT_MATTER: "remove_front_matter",
    CleaningStep.REMOVE_TABLE_OF_CONTENTS: "remove_table_of_contents",
    CleaningStep.REMOVE_BACK_MATTER: "remove_back_matter",
    CleaningStep.REMOVE_INDEX: "remove_index",
    CleaningStep.REMOVE_AUXILIARY_LISTS: "remove_auxiliary_lists",
    CleaningStep.REMOVE_CITATIONS: "remove_citations",
    CleaningStep.REMOVE_FOOTNOTES_ENDNOTES: "remove_footnotes_endnotes",
    CleaningStep.CLEAN_SPECIAL_CHARACTERS: "clean_special_characters",
    CleaningStep.REFLOW_PARAGRAPHS: "reflow_paragraphs",
    CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH: "optimize_paragraph_length",
}

assert set(STEP_TOGGLES) | {
    s for s in CleaningStep if s.is_mandatory
} == set(CleaningStep)


@dataclass
class VellumConfig:
    """Configuration for Vellum processing."""

    preset: PresetType = PresetType.DEFAULT
    """Preset this configuration was derived from."""

    # Step toggles (extract_metadata and add_structure always run)
    remove_page_numbers: bool = True
    """Remove standalone page-number lines."""

    remove_headers_footers: bool = True
    """Remove running headers and footers."""

    remove_front_matter: bool = True
    """Remove copyright pages, dedications and similar front matter."""

    remove_table_of_contents: bool = True
    """Remove the table of contents."""

    remove_back_matter: bool = True
    """Remove bibliographies, appendices and other back matter."""

    remove_index: bool = True
    """Remove the index."""

    remove_auxiliary_lists: bool = False
    """Remove lists of figures, tables and abbreviations."""

    remove_citations: bool = False
    """Remove inline citations."""

    remove_footnotes_endnotes: bool = False
    """Remove footnote markers and notes sections."""

    clean_special_characters: bool = True
    """Repair mojibake and strip markdown/OCR artifacts."""

    reflow_paragraphs: bool = True
    """Rejoin paragraphs broken by OCR line wrapping."""

    optimize_paragraph_length: bool = True
    """Split paragraphs longer than max_paragraph_words."""

    # Paragraph length targets
    min_paragraph_words: int = 40
    """Lower bound of the target paragraph length."""

    max_paragraph_words: int = 250
    """Upper bound of the target paragraph length (0 disables optimization)."""

    # Structure
    chapter_marker_style: ChapterMarkerStyle = ChapterMarkerStyle.HTML_COMMENTS
    """How chapter starts are marked in the output."""

    end_marker_style: EndMarkerStyle = EndMarkerStyle.STANDARD
    """End-of-document marker."""

    metadata_format: MetadataFormat = MetadataFormat.YAML
    """Format of the metadata block at the top of the output."""

    # Content protection
    preserve_code_blocks: bool = True
    """Shield code blocks from character cleaning and rewriting."""

    preserve_math_symbols: bool = True
    """Shield math expressions from character cleaning and rewriting."""

    preserve_tables: bool = True
    """Shield markdown tables from character cleaning and rewriting."""

    # Defense chain
    min_boundary_confidence: float = 0.0
    """Optional floor raised above each section's own confidence threshold."""

    heuristic_fallback_enabled: bool = True
    """Run AI-independent detection when the oracle answer is rejected."""

    # Oracle usage
    chunk_target_words: int = 1500
    """Approximate words per chunk for chunked oracle steps."""

    oracle_sample_lines: int = 800
    """Maximum numbered lines sent for a boundary detection."""

    metadata_sample_chars: int = 5000
    """Characters from the document start sent for metadata extraction."""

    pattern_sample_chars: int = 30000
    """Characters sampled for document-wide pattern detection."""

    # Retry behaviour
    retry_attempts: int = 3
    """Attempts for transient oracle failures (timeouts, rate limits)."""

    retry_delay: float = 1.0
    """Initial backoff delay in seconds."""

    retry_max_delay: float = 30.0
    """Maximum backoff delay in seconds."""

    # Caching
    pattern_cache_ttl: float = 3600.0
    """Seconds a detected-pattern entry stays valid."""

    # LLM settings
    llm_model: str = "gpt-4o"
    """Default LLM model name."""

    llm_temperature: float = 0.1
    """Temperature for LLM calls."""

    llm_max_tokens: int = 4096
    """Maximum tokens for LLM response."""

    token_model: str = "gpt-4"
    """Model name for tiktoken token counting."""

    # Logging
    verbose: bool = False
    """Enable verbose logging output."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._coerce_enums()
        self._validate()

    def _coerce_enums(self) -> None:
        if not isinstance(self.preset, PresetType):
            try:
                self.preset = PresetType.from_string(self.preset)
            except ValueError:
                raise VellumConfigError(f"Unknown preset: {self.preset}", "preset")
        if not isinstance(self.chapter_marker_style, ChapterMarkerStyle):
            self.chapter_marker_style = ChapterMarkerStyle.from_string(
                self.chapter_marker_style
            )
        if not isinstance(self.end_marker_style, EndMarkerStyle):
            self.end_marker_style = EndMarkerStyle.from_string(self.end_marker_style)
        if not isinstance(self.metadata_format, MetadataFormat):
            self.metadata_format = MetadataFormat.from_string(self.metadata_format)

    def _validate(self) -> None:
        """Validate configuration values."""
        if self.min_paragraph_words < 0:
            raise VellumConfigError(
                f"min_paragraph_words must be non-negative, got {self.min_paragraph_words}",
                "min_paragraph_words",
            )

        if self.max_paragraph_words < 0:
            raise VellumConfigError(
                f"max_paragraph_words must be non-negative, got {self.max_paragraph_words}",
                "max_paragraph_words",
            )

        if self.max_paragraph_words and self.max_paragraph_words < self.min_paragraph_words:
            raise VellumConfigError(
                f"max_paragraph_words ({self.max_paragraph_words}) must be >= "
                f"min_paragraph_words ({self.min_paragraph_words})",
                "max_paragraph_words",
            )

        if self.optimize_paragraph_length and self.max_paragraph_words == 0:
            raise VellumConfigError(
                "optimize_paragraph_length requires max_paragraph_words > 0",
                "optimize_paragraph_length",
            )

        if not 0.0 <= self.min_boundary_confidence <= 1.0:
            raise VellumConfigError(
                f"min_boundary_confidence must be between 0.0 and 1.0, got {self.min_boundary_confidence}",
                "min_boundary_confidence",
            )

        if self.chunk_target_words < 100:
            raise VellumConfigError(
                f"chunk_target_words must be at least 100, got {self.chunk_target_words}",
                "chunk_target_words",
            )

        if self.oracle_sample_lines < 50:
            raise VellumConfigError(
                f"oracle_sample_lines must be at least 50, got {self.oracle_sample_lines}",
                "oracle_sample_lines",
            )

        if self.retry_attempts < 1:
            raise VellumConfigError(
                f"retry_attempts must be at least 1, got {self.retry_attempts}",
                "retry_attempts",
            )

        if self.retry_delay < 0 or self.retry_max_delay < 0:
            raise VellumConfigError(
                "retry delays must be non-negative",
                "retry_delay",
            )

        if self.pattern_cache_ttl <= 0:
            raise VellumConfigError(
                f"pattern_cache_ttl must be positive, got {self.pattern_cache_ttl}",
                "pattern_cache_ttl",
            )

    # Steps

    def is_step_enabled(self, step: CleaningStep) -> bool:
        """Check whether a step will run."""
        if step.is_mandatory:
            return True
        return bool(getattr(self, STEP_TOGGLES[step]))

    @property
    def enabled_steps(self) -> List[CleaningStep]:
        """Enabled steps in canonical order."""
        return [s for s in CleaningStep.canonical_order() if self.is_step_enabled(s)]

    def set_step_enabled(self, step: CleaningStep, enabled: bool) -> None:
        """Toggle a step. A rejected change leaves the config untouched.

        Raises:
            VellumConfigError: If the step is mandatory and enabled is False,
                or the change conflicts with other settings
        """
        if step.is_mandatory:
            if not enabled:
                raise VellumConfigError(
                    f"Step '{step.value}' is mandatory and cannot be disabled",
                    step.value,
                )
            return
        name = STEP_TOGGLES[step]
        # replace() runs __post_init__ validation on the copy
        replace(self, **{name: enabled})
        setattr(self, name, enabled)

    # Presets

    @classmethod
    def from_preset(cls, preset: Any, **overrides: Any) -> "VellumConfig":
        """Create configuration from a named preset.

        Args:
            preset: PresetType or preset name (aliases accepted)
            **overrides: Field values applied on top of the preset

        Returns:
            VellumConfig instance
        """
        if not isinstance(preset, PresetType):
            try:
                preset = PresetType.from_string(preset)
            except ValueError:
                raise VellumConfigError(f"Unknown preset: {preset}", "preset")

        values = dict(_PRESETS[preset])
        values.update(overrides)
        values["preset"] = preset
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VellumConfig":
        """Create configuration from dictionary."""
        flat_data: Dict[str, Any] = {}

        if "steps" in data:
            steps = data["steps"] or {}
            for name, enabled in steps.items():
                try:
                    step = CleaningStep.from_string(name)
                except ValueError:
                    raise VellumConfigError(f"Unknown step: {name}", f"steps.{name}")
                if step.is_mandatory:
                    if not enabled:
                        raise VellumConfigError(
                            f"Step '{step.value}' is mandatory and cannot be disabled",
                            f"steps.{name}",
                        )
                    continue
                flat_data[STEP_TOGGLES[step]] = bool(enabled)

        if "paragraphs" in data:
            paragraphs = data["paragraphs"] or {}
            for key in ("min_words", "max_words"):
                if key in paragraphs:
                    flat_data[f"{key.split('_')[0]}_paragraph_words"] = paragraphs[key]
            if "chunk_target_words" in paragraphs:
                flat_data["chunk_target_words"] = paragraphs["chunk_target_words"]

        if "structure" in data:
            structure = data["structure"] or {}
            if "chapter_markers" in structure:
                flat_data["chapter_marker_style"] = structure["chapter_markers"]
            if "end_marker" in structure:
                flat_data["end_marker_style"] = structure["end_marker"]
            if "metadata_format" in structure:
                flat_data["metadata_format"] = structure["metadata_format"]

        if "defense" in data:
            defense = data["defense"] or {}
            if "min_boundary_confidence" in defense:
                flat_data["min_boundary_confidence"] = defense["min_boundary_confidence"]
            if "heuristic_fallback" in defense:
                flat_data["heuristic_fallback_enabled"] = defense["heuristic_fallback"]
            if "sample_lines" in defense:
                flat_data["oracle_sample_lines"] = defense["sample_lines"]

        if "behavior" in data:
            behavior = data["behavior"] or {}
            for key in ("retry_attempts", "retry_delay", "retry_max_delay", "verbose"):
                if key in behavior:
                    flat_data[key] = behavior[key]
            if "cache_ttl" in behavior:
                flat_data["pattern_cache_ttl"] = behavior["cache_ttl"]

        if "llm" in data:
            llm = data["llm"] or {}
            if "model" in llm:
                flat_data["llm_model"] = llm["model"]
            if "temperature" in llm:
                flat_data["llm_temperature"] = llm["temperature"]
            if "max_tokens" in llm:
                flat_data["llm_max_tokens"] = llm["max_tokens"]

        # Also accept flat keys
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key in known and key not in flat_data:
                flat_data[key] = value

        preset = flat_data.pop("preset", None)
        if preset is not None:
            return cls.from_preset(preset, **flat_data)
        return cls(**flat_data)

    @classmethod
    def from_yaml(cls, path: str) -> "VellumConfig":
        """Load configuration from YAML file."""
        file_path = Path(path)
        if not file_path.exists():
            raise VellumConfigError(f"Config file not found: {path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise VellumConfigError(f"Invalid YAML in config file: {e}")

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise VellumConfigError(f"Config file must contain a mapping: {path}")

        # Handle environment variable substitution
        data = cls._substitute_env_vars(data)

        return cls.from_dict(data)

    @classmethod
    def _substitute_env_vars(cls, data: Any) -> Any:
        """Recursively substitute environment variables in config."""
        if isinstance(data, dict):
            return {k: cls._substitute_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars(item) for item in data]
        elif isinstance(data, str) and data.startswith("${") and data.endswith("}"):
            env_var = data[2:-1]
            return os.environ.get(env_var, "")
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a flat dictionary."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if hasattr(value, "value"):
                value = value.value
            result[f.name] = value
        return result


_PRESETS: Dict[PresetType, Dict[str, Any]] = {
    PresetType.DEFAULT: {
        "remove_auxiliary_lists": False,
        "remove_citations": False,
        "remove_footnotes_endnotes": False,
        "max_paragraph_words": 250,
        "optimize_paragraph_length": True,
        "remove_front_matter": True,
        "remove_table_of_contents": True,
        "remove_index": True,
        "remove_back_matter": True,
        "chapter_marker_style": ChapterMarkerStyle.HTML_COMMENTS,
        "end_marker_style": EndMarkerStyle.STANDARD,
        "min_boundary_confidence": 0.0,
    },
    PresetType.TRAINING: {
        "remove_auxiliary_lists": True,
        "remove_citations": True,
        "remove_footnotes_endnotes": True,
        "max_paragraph_words": 250,
        "optimize_paragraph_length": True,
        "remove_front_matter": True,
        "remove_table_of_contents": True,
        "remove_index": True,
        "remove_back_matter": True,
        "chapter_marker_style": ChapterMarkerStyle.TOKEN_STYLE,
        "end_marker_style": EndMarkerStyle.TOKEN,
        "min_boundary_confidence": 0.0,
    },
    PresetType.MINIMAL: {
        "remove_auxiliary_lists": False,
        "remove_citations": False,
        "remove_footnotes_endnotes": False,
        "min_paragraph_words": 0,
        "max_paragraph_words": 0,
        "optimize_paragraph_length": False,
        "remove_front_matter": False,
        "remove_table_of_contents": False,
        "remove_index": False,
        "remove_back_matter": False,
        "chapter_marker_style": ChapterMarkerStyle.NONE,
        "end_marker_style": EndMarkerStyle.MINIMAL,
        "min_boundary_confidence": 0.85,
    },
    PresetType.SCHOLARLY: {
        "remove_auxiliary_lists": True,
        "remove_citations": True,
        "remove_footnotes_endnotes": True,
        "max_paragraph_words": 300,
        "optimize_paragraph_length": True,
        "remove_front_matter": True,
        "remove_table_of_contents": True,
        "remove_index": False,
        "remove_back_matter": False,
        "chapter_marker_style": ChapterMarkerStyle.HTML_COMMENTS,
        "end_marker_style": EndMarkerStyle.STANDARD,
        "min_boundary_confidence": 0.0,
    },
}

assert set(_PRESETS) == set(PresetType)


def suggest_preset(flags: Optional[ContentTypeFlags]) -> PresetType:
    """Suggest a preset from detected content characteristics."""
    if flags is None:
        return PresetType.DEFAULT
    if flags.is_academic or flags.primary_type is ContentType.ACADEMIC:
        return PresetType.SCHOLARLY
    return PresetType.DEFAULT
