"""Main Vellum class - entry point for the library."""

from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Optional, Callable

from vellum.cache import PatternCache
from vellum.config import VellumConfig
from vellum.models import CleanedContent, VellumResult
from vellum.llm.base import LLMProvider
from vellum.llm.openai_provider import OpenAIProvider
from vellum.llm.oracle import BoundaryOracleClient, LLMBoundaryOracle
from vellum.output.base import OutputFormatter
from vellum.output.markdown_formatter import MarkdownFormatter
from vellum.output.report import ReportFormatter
from vellum.pipeline.cancellation import CancellationToken
from vellum.pipeline.orchestrator import PipelineOrchestrator
from vellum.utils.token_counter import TokenCounter
from vellum.utils.llm_debug_logger import LLMDebugLogger
from vellum.exceptions import VellumConfigError, VellumValidationError

logger = logging.getLogger(__name__)


class Vellum:
    """Main Vellum class for cleaning raw document text."""

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[VellumConfig] = None,
        llm_provider: Optional[LLMProvider] = None,
        oracle: Optional[BoundaryOracleClient] = None,
        output_formatter: Optional[OutputFormatter] = None,
    ) -> None:
        """Initialize Vellum.

        Args:
            openai_api_key: OpenAI API key (required without a provider or oracle)
            model: OpenAI model name; defaults to ``config.llm_model``
            config: Configuration object
            llm_provider: Custom LLM provider (overrides openai_api_key/model)
            oracle: Custom boundary oracle (overrides every LLM setting)
            output_formatter: Custom formatter for the cleaned document
        """
        self._config = config or VellumConfig()
        self._llm_provider: Optional[LLMProvider] = None

        if oracle is not None:
            self._oracle = oracle
        else:
            if llm_provider:
                self._llm_provider = llm_provider
            elif openai_api_key:
                self._llm_provider = OpenAIProvider(
                    api_key=openai_api_key,
                    model=model or self._config.llm_model,
                    temperature=self._config.llm_temperature,
                    max_tokens=self._config.llm_max_tokens,
                )
            else:
                raise VellumConfigError(
                    "Either openai_api_key, llm_provider or oracle must be provided"
                )
            self._oracle = LLMBoundaryOracle(
                self._llm_provider,
                token_counter=TokenCounter(model=self._config.token_model),
                sample_lines=self._config.oracle_sample_lines,
                pattern_sample_chars=self._config.pattern_sample_chars,
            )

        self._output_formatter = output_formatter or MarkdownFormatter()
        # Shared so repeated runs on the same text reuse detected patterns.
        self._cache = PatternCache(ttl=self._config.pattern_cache_ttl)

    @classmethod
    def builder(cls) -> "VellumBuilder":
        """Create a builder for fluent configuration.

        Returns:
            VellumBuilder instance
        """
        return VellumBuilder()

    @property
    def config(self) -> VellumConfig:
        """Get the configuration."""
        return self._config

    @property
    def oracle(self) -> BoundaryOracleClient:
        return self._oracle

    def clean(
        self,
        input_file: str,
        output_dir: str = "./output",
        progress_callback: Optional[Callable[[str, float], None]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> VellumResult:
        """Clean a text or markdown file and write the results.

        Writes ``<stem>_cleaned.md``, ``<stem>_report.md`` and a JSONL trace
        of every LLM call into ``output_dir``.

        Args:
            input_file: Path to the raw document
            output_dir: Output directory for results
            progress_callback: Optional callback for progress updates
            cancellation: Optional token to stop between steps

        Returns:
            VellumResult with the cleaned content and written paths

        Raises:
            VellumValidationError: If the input cannot be read as UTF-8 text
            VellumPipelineError: If a step fails irrecoverably
        """
        input_path = Path(input_file)
        try:
            text = input_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise VellumValidationError(
                f"{input_file} is not UTF-8 text: {e}", field_name="input_file"
            ) from e

        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        input_name = input_path.stem or "input"
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        run_id = f"{input_name}_{timestamp}"
        debug_log_path = output_path / f"Vellum_llm_debug_{run_id}.jsonl"
        debug_logger = LLMDebugLogger(
            log_path=debug_log_path,
            run_id=run_id,
            input_path=input_file,
            model=self._model_name(),
        )
        self._attach_debug_logger(debug_logger)

        try:
            content = self._orchestrator(progress_callback, debug_logger).run(
                text,
                config=self._config,
                document_id=input_name,
                cancellation=cancellation,
            )
        finally:
            self._attach_debug_logger(None)

        cleaned_path = self._output_formatter.format(
            content, str(output_path / f"{input_name}_cleaned.md")
        )
        report_path = ReportFormatter().format(
            content, str(output_path / f"{input_name}_report.md")
        )
        logger.info(f"Wrote {cleaned_path} ({content.reduction_percentage:.1f}% removed)")

        return VellumResult(
            content=content,
            output_path=cleaned_path,
            report_path=report_path,
            debug_log_path=str(debug_log_path),
        )

    def clean_text(
        self,
        text: str,
        document_id: Optional[str] = None,
        progress_callback: Optional[Callable[[str, float], None]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> CleanedContent:
        """Clean text directly without touching the filesystem.

        Args:
            text: Raw document text
            document_id: Optional identifier; defaults to a content hash

        Returns:
            CleanedContent
        """
        return self._orchestrator(progress_callback, None).run(
            text,
            config=self._config,
            document_id=document_id,
            cancellation=cancellation,
        )

    def _orchestrator(
        self,
        progress_callback: Optional[Callable[[str, float], None]],
        debug_logger: Optional[LLMDebugLogger],
    ) -> PipelineOrchestrator:
        return PipelineOrchestrator(
            oracle=self._oracle,
            config=self._config,
            cache=self._cache,
            progress_callback=progress_callback,
            debug_logger=debug_logger,
        )

    def _model_name(self) -> str:
        if self._llm_provider is not None:
            return self._llm_provider.model_name
        return getattr(self._oracle, "model_name", type(self._oracle).__name__)

    def _attach_debug_logger(self, debug_logger: Optional[LLMDebugLogger]) -> None:
        if self._llm_provider is None:
            return
        if hasattr(self._llm_provider, "set_debug_logger"):
            self._llm_provider.set_debug_logger(debug_logger)
        elif debug_logger is not None:
            logger.info(
                "LLM provider does not support debug logging; skipping LLM prompt log."
            )


class VellumBuilder:
    """Builder for fluent Vellum configuration."""

    def __init__(self) -> None:
        """Initialize the builder."""
        self._config: Optional[VellumConfig] = None
        self._llm_provider: Optional[LLMProvider] = None
        self._oracle: Optional[BoundaryOracleClient] = None
        self._output_formatter: Optional[OutputFormatter] = None
        self._openai_api_key: Optional[str] = None
        self._model: Optional[str] = None

    def with_config(self, config: VellumConfig) -> "VellumBuilder":
        """Set configuration.

        Args:
            config: VellumConfig instance

        Returns:
            Self for chaining
        """
        self._config = config
        return self

    def with_preset(self, preset: str, **overrides) -> "VellumBuilder":
        """Use a named preset, optionally overriding fields."""
        self._config = VellumConfig.from_preset(preset, **overrides)
        return self

    def with_llm_provider(self, provider: LLMProvider) -> "VellumBuilder":
        """Set LLM provider.

        Args:
            provider: LLMProvider instance

        Returns:
            Self for chaining
        """
        self._llm_provider = provider
        return self

    def with_oracle(self, oracle: BoundaryOracleClient) -> "VellumBuilder":
        self._oracle = oracle
        return self

    def with_output_formatter(self, formatter: OutputFormatter) -> "VellumBuilder":
        self._output_formatter = formatter
        return self

    def with_openai(self, api_key: str, model: Optional[str] = None) -> "VellumBuilder":
        """Configure OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model name

        Returns:
            Self for chaining
        """
        self._openai_api_key = api_key
        self._model = model
        return self

    def build(self) -> Vellum:
        """Build the Vellum instance.

        Returns:
            Configured Vellum instance
        """
        return Vellum(
            openai_api_key=self._openai_api_key,
            model=self._model,
            config=self._config,
            llm_provider=self._llm_provider,
            oracle=self._oracle,
            output_formatter=self._output_formatter,
        )
