"""Processing report: what each step did and how sure it was."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from vellum.models import AnomalySeverity, CleanedContent, StepResult
from vellum.output.base import OutputFormatter


@dataclass
class ProcessingReport:
    """Summary of a pipeline run, renderable as markdown or a dict."""

    document_id: str
    title: str
    status: str
    original_word_count: int
    word_count: int
    reduction_percentage: float
    overall_confidence: float
    total_cost: int
    total_api_calls: int
    steps: List[StepResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    failure_reason: str = ""

    @classmethod
    def from_content(cls, content: CleanedContent) -> "ProcessingReport":
        run = content.run
        return cls(
            document_id=content.document_id,
            title=content.metadata.title if content.metadata else "Untitled",
            status=run.status.value,
            original_word_count=content.original_word_count,
            word_count=content.word_count,
            reduction_percentage=content.reduction_percentage,
            overall_confidence=content.overall_confidence,
            total_cost=run.total_cost,
            total_api_calls=run.total_api_calls,
            steps=list(run.step_results),
            warnings=run.warnings,
            failure_reason=run.failure_reason or "",
        )

    @property
    def critical_anomalies(self) -> int:
        return sum(
            1
            for step in self.steps
            for anomaly in step.anomalies
            if anomaly.severity is AnomalySeverity.CRITICAL
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "title": self.title,
            "status": self.status,
            "original_word_count": self.original_word_count,
            "word_count": self.word_count,
            "reduction_percentage": round(self.reduction_percentage, 2),
            "overall_confidence": round(self.overall_confidence, 3),
            "total_cost": self.total_cost,
            "total_api_calls": self.total_api_calls,
            "failure_reason": self.failure_reason or None,
            "steps": [step.to_dict() for step in self.steps],
            "warnings": list(self.warnings),
        }

    def to_markdown(self) -> str:
        lines = [
            f"# Cleaning Report: {self.title}",
            "",
            f"- **Document:** {self.document_id}",
            f"- **Status:** {self.status}",
            f"- **Words:** {self.original_word_count} → {self.word_count} "
            f"({self.reduction_percentage:.1f}% removed)",
            f"- **Confidence:** {self.overall_confidence:.0%}",
            f"- **Cost:** {self.total_cost} tokens in {self.total_api_calls} calls",
        ]
        if self.failure_reason:
            lines.append(f"- **Stopped:** {self.failure_reason}")

        lines += [
            "",
            "## Steps",
            "",
            "| # | Step | Status | Changes | Confidence | Words removed | Notes |",
            "|---|---|---|---|---|---|---|",
        ]
        for step in self.steps:
            notes = step.skip_reason or ""
            lines.append(
                f"| {step.step.ordinal} | {step.step.label} | {step.status.value} | "
                f"{step.change_count} | {step.confidence:.2f} | {step.words_removed} | "
                f"{_cell(notes)} |"
            )

        anomalies = [a for step in self.steps for a in step.anomalies]
        if anomalies:
            lines += ["", "## Anomalies", ""]
            lines += [
                f"- **{a.severity.value}** {a.step.label}: {a.description}" for a in anomalies
            ]

        if self.warnings:
            lines += ["", "## Warnings", ""]
            lines += [f"- {warning}" for warning in self.warnings]

        return "\n".join(lines) + "\n"


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


class ReportFormatter(OutputFormatter):
    """Writes the processing report as markdown or JSON."""

    def __init__(self, as_json: bool = False) -> None:
        self._as_json = as_json

    def render(self, content: CleanedContent) -> str:
        report = ProcessingReport.from_content(content)
        if self._as_json:
            return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"
        return report.to_markdown()
