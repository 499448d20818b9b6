from __future__ import annotations

import pytest
from click.testing import CliRunner

from vellum.cli.main import build_config, cli
from vellum.exceptions import VellumConfigError
from vellum.models import ChapterMarkerStyle, CleaningStep, PresetType


def test_build_config_layers_preset_overrides_and_toggles() -> None:
    config = build_config(
        None,
        "scholarly",
        ("remove_index",),
        ("reflow_paragraphs",),
        {"chapter_marker_style": "markdown_h1", "max_paragraph_words": None},
    )

    assert config.preset is PresetType.SCHOLARLY
    assert config.chapter_marker_style is ChapterMarkerStyle.MARKDOWN_H1
    assert config.max_paragraph_words == 300
    assert config.is_step_enabled(CleaningStep.REMOVE_INDEX)
    assert not config.is_step_enabled(CleaningStep.REFLOW_PARAGRAPHS)


def test_build_config_rejects_disabling_mandatory_steps() -> None:
    with pytest.raises(VellumConfigError):
        build_config(None, None, (), ("add_structure",), {})


def test_cli_requires_api_key(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    source = tmp_path / "book.txt"
    source.write_text("Some text.", encoding="utf-8")

    result = CliRunner().invoke(cli, [str(source)])

    assert result.exit_code == 1
    assert "API key required" in result.output


def test_cli_reports_configuration_errors(tmp_path) -> None:
    source = tmp_path / "book.txt"
    source.write_text("Some text.", encoding="utf-8")

    result = CliRunner().invoke(
        cli, [str(source), "-k", "sk-test", "--disable", "extract_metadata"]
    )

    assert result.exit_code == 1
    assert "Configuration error" in result.output
