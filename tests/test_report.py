from __future__ import annotations

import json
from pathlib import Path

from vellum.models import (
    AnomalySeverity,
    CleanedContent,
    CleaningStep,
    DocumentMetadata,
    PipelineRun,
    RunStatus,
    StepAnomaly,
    StepResult,
    StepStatus,
)
from vellum.output import MarkdownFormatter, ReportFormatter
from vellum.output.report import ProcessingReport


def _content() -> CleanedContent:
    run = PipelineRun("book")
    run.append(
        StepResult(
            step=CleaningStep.EXTRACT_METADATA,
            text="one two three four",
            word_count_before=4,
            word_count_after=4,
            cost=20,
            api_calls=2,
        )
    )
    run.append(
        StepResult(
            step=CleaningStep.REMOVE_BACK_MATTER,
            text="one two",
            word_count_before=4,
            word_count_after=2,
            change_count=1,
            confidence=0.8,
            cost=10,
            api_calls=1,
            warnings=("oracle error: timed out",),
            anomalies=(
                StepAnomaly(
                    CleaningStep.REMOVE_BACK_MATTER,
                    "removed 1 of 2 lines",
                    AnomalySeverity.CRITICAL,
                ),
            ),
        )
    )
    run.append(
        StepResult(
            step=CleaningStep.REMOVE_INDEX,
            text="one two",
            word_count_before=2,
            word_count_after=2,
            status=StepStatus.SKIPPED,
            skip_reason="no index | found",
        )
    )
    run.finalize(RunStatus.COMPLETED)
    return CleanedContent(
        text="one two",
        original_text="one two three four",
        document_id="book",
        run=run,
        metadata=DocumentMetadata(title="The Book"),
    )


def test_report_summary() -> None:
    report = ProcessingReport.from_content(_content())

    assert report.title == "The Book"
    assert report.reduction_percentage == 50.0
    assert (report.total_cost, report.total_api_calls) == (30, 3)
    assert report.critical_anomalies == 1
    assert report.warnings == ["remove_back_matter: oracle error: timed out"]


def test_markdown_report() -> None:
    markdown = ProcessingReport.from_content(_content()).to_markdown()

    assert markdown.startswith("# Cleaning Report: The Book\n")
    assert "| 6 | Remove Back Matter | completed | 1 | 0.80 | 2 |  |" in markdown
    assert "no index \\| found" in markdown
    assert "- **critical** Remove Back Matter: removed 1 of 2 lines" in markdown


def test_formatters_write_files(tmp_path) -> None:
    content = _content()

    report_path = ReportFormatter(as_json=True).format(content, str(tmp_path / "report.json"))
    cleaned_path = MarkdownFormatter().format(content, str(tmp_path / "out" / "book.md"))

    data = json.loads((tmp_path / "report.json").read_text(encoding="utf-8"))
    assert report_path == str(tmp_path / "report.json")
    assert data["status"] == "completed"
    assert [step["step"] for step in data["steps"]] == [
        "extract_metadata",
        "remove_back_matter",
        "remove_index",
    ]
    assert Path(cleaned_path).read_text(encoding="utf-8") == "one two\n"
