from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeOracle, make_document
from vellum import Vellum
from vellum.exceptions import VellumConfigError, VellumValidationError


def test_clean_writes_document_report_and_trace(tmp_path: Path) -> None:
    source = tmp_path / "book.txt"
    source.write_text(make_document(200, {150: "BIBLIOGRAPHY"}), encoding="utf-8")
    vellum = Vellum.builder().with_oracle(FakeOracle()).with_preset("default").build()

    result = vellum.clean(str(source), output_dir=str(tmp_path / "out"))

    assert result.success
    assert not result.cancelled
    cleaned = Path(result.output_path)
    assert cleaned.name == "book_cleaned.md"
    assert cleaned.read_text(encoding="utf-8").startswith("# Test Book")
    assert "## Steps" in Path(result.report_path).read_text(encoding="utf-8")
    assert Path(result.debug_log_path).exists()


def test_clean_rejects_non_utf8_input(tmp_path: Path) -> None:
    source = tmp_path / "latin1.txt"
    source.write_bytes("caf\xe9".encode("latin-1"))

    with pytest.raises(VellumValidationError):
        Vellum(oracle=FakeOracle()).clean(str(source), output_dir=str(tmp_path))


def test_clean_text_returns_content() -> None:
    content = Vellum(oracle=FakeOracle()).clean_text(make_document(60), document_id="doc")
    assert content.document_id == "doc"
    assert content.metadata.author == "A. Writer"


def test_requires_a_backend() -> None:
    with pytest.raises(VellumConfigError):
        Vellum()
