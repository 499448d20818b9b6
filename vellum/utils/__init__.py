"""Utility modules for Vellum."""

from vellum.utils.retry import RetryHandler
from vellum.utils.token_counter import TokenCounter
from vellum.utils.llm_debug_logger import LLMDebugLogger

__all__ = [
    "RetryHandler",
    "TokenCounter",
    "LLMDebugLogger",
]
