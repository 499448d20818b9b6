from __future__ import annotations

import pytest

from vellum.config import VellumConfig, suggest_preset
from vellum.exceptions import VellumConfigError
from vellum.models import (
    ChapterMarkerStyle,
    CleaningStep,
    ContentType,
    ContentTypeFlags,
    EndMarkerStyle,
    PresetType,
)


def test_default_steps_in_canonical_order() -> None:
    steps = VellumConfig().enabled_steps
    assert steps[0] is CleaningStep.EXTRACT_METADATA
    assert steps[-1] is CleaningStep.ADD_STRUCTURE
    assert CleaningStep.REMOVE_CITATIONS not in steps
    assert steps == sorted(steps, key=lambda step: step.ordinal)


def test_mandatory_steps_cannot_be_disabled() -> None:
    config = VellumConfig()
    with pytest.raises(VellumConfigError):
        config.set_step_enabled(CleaningStep.ADD_STRUCTURE, False)
    with pytest.raises(VellumConfigError):
        VellumConfig.from_dict({"steps": {"extract_metadata": False}})

    config.set_step_enabled(CleaningStep.REMOVE_CITATIONS, True)
    assert config.is_step_enabled(CleaningStep.REMOVE_CITATIONS)


def test_rejected_step_toggle_leaves_config_unchanged() -> None:
    config = VellumConfig(max_paragraph_words=0, optimize_paragraph_length=False)
    before = config.to_dict()

    with pytest.raises(VellumConfigError):
        config.set_step_enabled(CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH, True)

    assert not config.is_step_enabled(CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH)
    assert config.to_dict() == before


def test_contradictory_paragraph_bounds() -> None:
    with pytest.raises(VellumConfigError):
        VellumConfig(min_paragraph_words=300, max_paragraph_words=100)
    with pytest.raises(VellumConfigError):
        VellumConfig(max_paragraph_words=0, optimize_paragraph_length=True)
    with pytest.raises(VellumConfigError):
        VellumConfig(min_boundary_confidence=1.5)


def test_presets_and_aliases() -> None:
    training = VellumConfig.from_preset("aggressive")
    assert training.preset is PresetType.TRAINING
    assert training.is_step_enabled(CleaningStep.REMOVE_CITATIONS)
    assert training.chapter_marker_style is ChapterMarkerStyle.TOKEN_STYLE
    assert training.end_marker_style is EndMarkerStyle.TOKEN

    minimal = VellumConfig.from_preset("conservative")
    assert minimal.min_boundary_confidence == 0.85
    assert not minimal.is_step_enabled(CleaningStep.REMOVE_BACK_MATTER)

    scholarly = VellumConfig.from_preset(PresetType.SCHOLARLY, remove_index=True)
    assert scholarly.remove_index

    with pytest.raises(VellumConfigError):
        VellumConfig.from_preset("nonexistent")


def test_from_dict_nested_and_flat() -> None:
    config = VellumConfig.from_dict(
        {
            "preset": "scholarly",
            "steps": {"remove-index": True, "4": False},
            "paragraphs": {"min_words": 20, "max_words": 120},
            "structure": {"chapter_markers": "markdown_h2", "end_marker": "none"},
            "defense": {"min_boundary_confidence": 0.7, "heuristic_fallback": False},
            "retry_attempts": 5,
        }
    )

    assert config.preset is PresetType.SCHOLARLY
    assert config.remove_index
    assert not config.remove_front_matter
    assert (config.min_paragraph_words, config.max_paragraph_words) == (20, 120)
    assert config.chapter_marker_style is ChapterMarkerStyle.MARKDOWN_H2
    assert config.end_marker_style is EndMarkerStyle.NONE
    assert config.min_boundary_confidence == 0.7
    assert not config.heuristic_fallback_enabled
    assert config.retry_attempts == 5

    with pytest.raises(VellumConfigError):
        VellumConfig.from_dict({"steps": {"remove_everything": True}})


def test_to_dict_round_trip() -> None:
    config = VellumConfig.from_preset("training", max_paragraph_words=180)
    data = config.to_dict()
    assert data["chapter_marker_style"] == "token_style"
    assert VellumConfig.from_dict(data) == config


def test_from_yaml_substitutes_env(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("VELLUM_TEST_MODEL", "gpt-4o-mini")
    path = tmp_path / "vellum.yaml"
    path.write_text(
        "llm:\n  model: ${VELLUM_TEST_MODEL}\nbehavior:\n  cache_ttl: 60\n",
        encoding="utf-8",
    )

    config = VellumConfig.from_yaml(str(path))

    assert config.llm_model == "gpt-4o-mini"
    assert config.pattern_cache_ttl == 60


def test_from_yaml_errors(tmp_path) -> None:
    with pytest.raises(VellumConfigError):
        VellumConfig.from_yaml(str(tmp_path / "missing.yaml"))

    path = tmp_path / "list.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")
    with pytest.raises(VellumConfigError):
        VellumConfig.from_yaml(str(path))


def test_suggest_preset() -> None:
    assert suggest_preset(None) is PresetType.DEFAULT
    assert suggest_preset(ContentTypeFlags(is_academic=True)) is PresetType.SCHOLARLY
    assert (
        suggest_preset(ContentTypeFlags(primary_type=ContentType.POETRY))
        is PresetType.DEFAULT
    )
