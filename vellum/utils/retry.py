"""Bounded exponential backoff for transient oracle failures."""

import time
import logging
from typing import TypeVar, Callable, Optional, Tuple

from vellum.exceptions import TRANSIENT_ORACLE_ERRORS, VellumLLMError

T = TypeVar("T")
logger = logging.getLogger(__name__)


class RetryHandler:
    """Retries a call while it fails with a transient error.

    Timeouts and rate limits are retried up to ``max_attempts`` times in
    total, waiting ``min(base_delay * 2**attempt, max_delay)`` in between.
    Any other exception propagates on the first attempt. When attempts run
    out the last error is raised with ``retries_attempted`` set.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        on_retry: Optional[Callable[[int, Exception], None]] = None,
        retry_on: Tuple[type, ...] = TRANSIENT_ORACLE_ERRORS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the retry handler.

        Args:
            max_attempts: Attempts per call, including the first
            base_delay: Wait after the first failure, in seconds
            max_delay: Upper bound for any single wait
            on_retry: Called with (attempt index, error) before each wait
            retry_on: Exception types treated as transient
            sleep: Wait function, replaced in tests
        """
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.on_retry = on_retry
        self.retry_on = retry_on
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Wait after the given 0-based failed attempt."""
        return min(self.base_delay * (2**attempt), self.max_delay)

    def execute(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Call ``func(*args, **kwargs)``, retrying transient failures.

        Raises:
            The last transient error once attempts are exhausted, or any
            non-transient error immediately
        """
        name = getattr(func, "__name__", "call")
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except self.retry_on as e:
                if attempt + 1 >= self.max_attempts:
                    if isinstance(e, VellumLLMError):
                        e.retries_attempted = attempt
                    logger.warning(f"{name} failed after {attempt + 1} attempts: {e}")
                    raise
                delay = self.delay_for(attempt)
                if self.on_retry:
                    self.on_retry(attempt, e)
                logger.warning(f"{name} attempt {attempt + 1} failed ({e}); retrying in {delay:.1f}s")
                self._sleep(delay)
                attempt += 1
