"""Run context shared by the step handlers."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

from vellum.cache import PatternCache
from vellum.config import VellumConfig
from vellum.defense import DefenseChain
from vellum.llm.oracle import BoundaryOracleClient
from vellum.models import DetectedPatterns, DocumentMetadata
from vellum.text.shield import ContentShield
from vellum.utils.llm_debug_logger import LLMDebugLogger
from vellum.utils.retry import RetryHandler

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Collaborators and run-wide state.

    The current text is not stored here; the orchestrator threads it from
    step to step.
    """

    document_id: str
    original_text: str
    config: VellumConfig
    oracle: BoundaryOracleClient
    cache: PatternCache
    chain: DefenseChain
    retry: RetryHandler

    # Populated by extract_metadata
    metadata: Optional[DocumentMetadata] = None
    patterns: Optional[DetectedPatterns] = None
    patterns_from_oracle: bool = False

    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    debug_logger: Optional[LLMDebugLogger] = None

    def call_oracle(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call an oracle method with transient-error retries."""
        return self.retry.execute(func, *args, **kwargs)

    def make_shield(self) -> ContentShield:
        return ContentShield(
            protect_code=self.config.preserve_code_blocks,
            protect_math=self.config.preserve_math_symbols,
            protect_tables=self.config.preserve_tables,
        )

    def require_patterns(self) -> DetectedPatterns:
        if self.patterns is None:
            self.patterns = DetectedPatterns.defaults(self.document_id)
        return self.patterns

    def log_event(self, event_type: str, **fields: Any) -> None:
        """Write a pipeline event to the debug log, when one is attached."""
        if self.debug_logger is not None:
            self.debug_logger.log_event(event_type, document_id=self.document_id, **fields)

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def add_metric(self, key: str, value: Any) -> None:
        """Add or update a metric."""
        self.metrics[key] = value

    def increment_metric(self, key: str, amount: int = 1) -> None:
        """Increment a numeric metric."""
        self.metrics[key] = self.metrics.get(key, 0) + amount
