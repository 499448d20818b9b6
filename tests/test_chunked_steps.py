from __future__ import annotations

from fakes import FakeOracle, make_document
from vellum.cache import PatternCache
from vellum.config import VellumConfig
from vellum.defense import DefenseChain
from vellum.models import CleaningStep, DetectedPatterns
from vellum.pipeline import PipelineContext, PipelineOrchestrator
from vellum.pipeline.steps.chunked import OptimizeParagraphLengthStep, ReflowParagraphsStep
from vellum.utils.retry import RetryHandler

SPACED_FENCE = "```\nx = 1\n\n\n\ny = 2\n```"


def _with_block(block: str, total: int = 60) -> str:
    lines = make_document(total).split("\n")
    half = total // 2
    return "\n".join(lines[:half]) + "\n\n" + block + "\n\n" + "\n".join(lines[half:])


def _context(text: str, oracle: FakeOracle, config: VellumConfig) -> PipelineContext:
    return PipelineContext(
        document_id="doc",
        original_text=text,
        config=config,
        oracle=oracle,
        cache=PatternCache(),
        chain=DefenseChain(),
        retry=RetryHandler(sleep=lambda seconds: None),
        patterns=DetectedPatterns.defaults("doc"),
    )


def test_code_block_blank_lines_survive_a_full_run() -> None:
    oracle = FakeOracle()

    content = PipelineOrchestrator(oracle=oracle, sleep=lambda seconds: None).run(
        _with_block(SPACED_FENCE), document_id="code"
    )

    assert "reflow_chunk" in oracle.calls
    assert SPACED_FENCE in content.text


def test_code_block_larger_than_a_chunk_never_reaches_the_oracle() -> None:
    code_lines = [" ".join(f"tok{row}_{col}" for col in range(10)) for row in range(12)]
    fence = "```\n" + "\n".join(code_lines[:6]) + "\n\n" + "\n".join(code_lines[6:]) + "\n```"
    text = _with_block(fence)
    seen = []

    def shout(chunk: str) -> str:
        seen.append(chunk)
        return chunk.upper()

    oracle = FakeOracle(rewrite=shout)
    config = VellumConfig(chunk_target_words=100)

    outcome = ReflowParagraphsStep().process(text, _context(text, oracle, config))

    assert fence in outcome.text
    assert "THE " in outcome.text
    assert all("tok0_0" not in chunk for chunk in seen)
    assert outcome.details["chunks_rewritten"] == outcome.details["chunks"]


def test_rewrite_that_drops_a_placeholder_keeps_the_chunk() -> None:
    text = _with_block(SPACED_FENCE)
    oracle = FakeOracle(rewrite=lambda chunk: chunk.replace("⟦VELLUM:CODE:0⟧", ""))

    outcome = ReflowParagraphsStep().process(text, _context(text, oracle, VellumConfig()))

    assert SPACED_FENCE in outcome.text
    assert outcome.details["chunks_rewritten"] == 0
    assert any("protected regions lost" in warning for warning in outcome.warnings)


def test_long_code_block_does_not_trigger_optimization() -> None:
    fence = "```\n" + " ".join(f"word{i}" for i in range(400)) + "\n```"
    text = _with_block(fence, total=20)
    oracle = FakeOracle()
    context = _context(text, oracle, VellumConfig())

    step = OptimizeParagraphLengthStep()

    assert step.step is CleaningStep.OPTIMIZE_PARAGRAPH_LENGTH
    assert step.should_skip(text, context) == "no paragraphs longer than 250 words"
