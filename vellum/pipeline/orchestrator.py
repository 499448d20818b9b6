"""Pipeline orchestrator - runs the cleaning steps in canonical order."""

import logging
import time
from typing import Callable, Dict, Optional

from vellum.cache import PatternCache, text_hash
from vellum.config import VellumConfig
from vellum.defense import DefenseChain
from vellum.exceptions import VellumPipelineError
from vellum.llm.oracle import BoundaryOracleClient
from vellum.models import (
    CleanedContent,
    CleaningStep,
    PipelineRun,
    RunStatus,
    StepResult,
    StepStatus,
)
from vellum.pipeline.base import StepHandler, StepOutcome
from vellum.pipeline.cancellation import CancellationToken
from vellum.pipeline.context import PipelineContext
from vellum.pipeline.steps import build_step_handlers
from vellum.pipeline.verification import verify_step_effect
from vellum.text.transform import count_words
from vellum.utils.llm_debug_logger import LLMDebugLogger
from vellum.utils.retry import RetryHandler

logger = logging.getLogger(__name__)

StepStartCallback = Callable[[CleaningStep, int, int], None]
StepCompleteCallback = Callable[[CleaningStep, Optional[StepResult], Optional[str]], None]


class PipelineOrchestrator:
    """Drives one document through the enabled cleaning steps.

    The orchestrator is the only writer of the PipelineRun. Steps run
    sequentially; cancellation is checked between steps.
    """

    def __init__(
        self,
        oracle: BoundaryOracleClient,
        config: Optional[VellumConfig] = None,
        cache: Optional[PatternCache] = None,
        handlers: Optional[Dict[CleaningStep, StepHandler]] = None,
        progress_callback: Optional[Callable[[str, float], None]] = None,
        on_step_start: Optional[StepStartCallback] = None,
        on_step_complete: Optional[StepCompleteCallback] = None,
        debug_logger: Optional[LLMDebugLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            oracle: Boundary oracle used by every oracle-backed step
            config: Default configuration for runs
            cache: Pattern cache shared across runs
            handlers: Step handler overrides, merged over the defaults
            progress_callback: Called with (label, fraction) after each step
            on_step_start: Called with (step, index, total) before each step
            on_step_complete: Called with (step, result, failure reason)
            debug_logger: Receives step and defense events
            sleep: Wait function used between retries
        """
        self._oracle = oracle
        self._config = config or VellumConfig()
        self._cache = cache or PatternCache(ttl=self._config.pattern_cache_ttl)
        self._handlers = build_step_handlers()
        if handlers:
            self._handlers.update(handlers)
        self._progress_callback = progress_callback
        self._on_step_start = on_step_start
        self._on_step_complete = on_step_complete
        self._debug_logger = debug_logger
        self._sleep = sleep

    @property
    def cache(self) -> PatternCache:
        return self._cache

    def run(
        self,
        document_text: str,
        config: Optional[VellumConfig] = None,
        document_id: Optional[str] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> CleanedContent:
        """Clean a document.

        Args:
            document_text: Raw document text
            config: Configuration for this run; defaults to the orchestrator's
            document_id: Identifier used for caching; defaults to a content hash
            cancellation: Token checked before each step

        Returns:
            CleanedContent; its run is ``completed`` or ``cancelled``

        Raises:
            VellumPipelineError: If a step fails irrecoverably. The error
                carries every completed StepResult and the finalized run.
        """
        config = config or self._config
        document_id = document_id or text_hash(document_text)[:16]
        run = PipelineRun(document_id)
        context = self._build_context(document_text, document_id, config)

        steps = config.enabled_steps
        total = len(steps)
        text = document_text
        start_time = time.time()
        logger.info(f"Cleaning {document_id}: {total} steps, {count_words(text)} words")

        for index, step in enumerate(steps):
            if cancellation is not None and cancellation.is_cancelled:
                logger.warning(f"Run cancelled before step {step.value}")
                run.finalize(RunStatus.CANCELLED, f"cancelled before {step.value}")
                context.log_event("run_cancelled", pipeline_stage=step.value)
                break

            if self._on_step_start:
                self._on_step_start(step, index, total)

            try:
                result = self._run_step(step, text, context)
            except Exception as e:
                reason = f"{step.value}: {e}"
                logger.error(f"Error in step {step.value}: {e}")
                run.finalize(RunStatus.FAILED, reason)
                context.log_event("step_failed", pipeline_stage=step.value, error=str(e))
                if self._on_step_complete:
                    self._on_step_complete(step, None, reason)
                raise VellumPipelineError(
                    reason,
                    stage_name=step.value,
                    completed_results=list(run.step_results),
                    run=run,
                ) from e

            run.append(result)
            text = result.text
            if self._on_step_complete:
                self._on_step_complete(step, result, None)
            if self._progress_callback:
                self._progress_callback(step.label, (index + 1) / total)

        if not run.is_finalized:
            run.finalize(RunStatus.COMPLETED)

        context.add_metric("total_time", time.time() - start_time)
        context.log_event(
            "run_complete",
            status=run.status.value,
            steps=len(run),
            total_cost=run.total_cost,
            metrics=context.metrics,
        )
        return CleanedContent(
            text=text,
            original_text=document_text,
            document_id=document_id,
            run=run,
            metadata=context.metadata,
            patterns=context.patterns,
        )

    def _build_context(
        self, document_text: str, document_id: str, config: VellumConfig
    ) -> PipelineContext:
        retry = RetryHandler(
            max_attempts=config.retry_attempts,
            base_delay=config.retry_delay,
            max_delay=config.retry_max_delay,
            sleep=self._sleep,
        )
        chain = DefenseChain(
            min_confidence_floor=config.min_boundary_confidence,
            heuristic_fallback=config.heuristic_fallback_enabled,
        )
        return PipelineContext(
            document_id=document_id,
            original_text=document_text,
            config=config,
            oracle=self._oracle,
            cache=self._cache,
            chain=chain,
            retry=retry,
            debug_logger=self._debug_logger,
        )

    def _run_step(
        self, step: CleaningStep, text: str, context: PipelineContext
    ) -> StepResult:
        handler = self._handlers[step]
        calls_before, tokens_before = self._oracle.usage.snapshot()
        self._oracle.set_call_tags(pipeline_stage=step.value)
        step_start = time.time()

        try:
            skip_reason = handler.should_skip(text, context)
            if skip_reason is not None:
                logger.info(f"Skipping {step.value}: {skip_reason}")
                outcome = StepOutcome.skipped(text, skip_reason)
            else:
                logger.info(f"Executing step: {step.value}")
                outcome = handler.process(text, context)
        finally:
            self._oracle.set_call_tags()

        duration = time.time() - step_start
        calls_after, tokens_after = self._oracle.usage.snapshot()
        api_calls = calls_after - calls_before

        anomalies = verify_step_effect(step, text, outcome, api_calls, context.config)
        for anomaly in anomalies:
            logger.warning(f"{step.value}: {anomaly.description} ({anomaly.severity.value})")

        result = StepResult(
            step=step,
            text=outcome.text,
            word_count_before=count_words(text),
            word_count_after=count_words(outcome.text),
            change_count=outcome.change_count,
            confidence=outcome.confidence,
            cost=tokens_after - tokens_before,
            api_calls=api_calls,
            status=StepStatus.SKIPPED if outcome.is_skipped else StepStatus.COMPLETED,
            skip_reason=outcome.skip_reason,
            warnings=tuple(outcome.warnings),
            anomalies=tuple(anomalies),
            duration=duration,
        )

        if self._config.verbose or context.config.verbose:
            logger.info(f"Step {step.value} completed in {duration:.2f}s")
        context.log_event(
            "step_complete",
            pipeline_stage=step.value,
            status=result.status.value,
            skip_reason=result.skip_reason,
            change_count=result.change_count,
            confidence=result.confidence,
            api_calls=result.api_calls,
            cost=result.cost,
            anomalies=[a.to_dict() for a in anomalies],
        )
        return result
