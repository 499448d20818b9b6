"""LLM providers and the boundary oracle."""

from vellum.llm.base import LLMProvider, LLMResponse
from vellum.llm.openai_provider import OpenAIProvider
from vellum.llm.oracle import BoundaryOracleClient, LLMBoundaryOracle, OracleUsage

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "BoundaryOracleClient",
    "LLMBoundaryOracle",
    "OracleUsage",
]
