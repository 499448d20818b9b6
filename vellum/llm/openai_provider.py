"""OpenAI LLM provider."""

import logging
from typing import Optional, Dict, Any

from vellum.llm.base import LLMProvider, LLMResponse
from vellum.exceptions import VellumLLMError
from vellum.utils.llm_debug_logger import LLMDebugLogger

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM provider using OpenAI API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.1,
        max_tokens: int = 4096,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            temperature: Temperature for generation
            max_tokens: Maximum tokens in response
            base_url: Optional custom base URL for API
            timeout: Request timeout in seconds
        """
        try:
            from openai import OpenAI
        except ImportError:
            raise VellumLLMError(
                "openai is not installed. Install it with: pip install openai"
            )

        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._debug_logger: Optional[LLMDebugLogger] = None

        client_kwargs: Dict[str, Any] = {"api_key": api_key, "timeout": timeout}
        if base_url:
            client_kwargs["base_url"] = base_url

        # Retries are owned by RetryHandler
        client_kwargs["max_retries"] = 0

        self._client = OpenAI(**client_kwargs)

    def set_debug_logger(self, debug_logger: Optional[LLMDebugLogger]) -> None:
        """Attach a JSONL trace logger for every call."""
        self._debug_logger = debug_logger

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        tags: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: The user prompt
            system_prompt: Optional system prompt
            tags: Optional call tags recorded in debug traces

        Returns:
            LLMResponse with the generated content
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )

            content = response.choices[0].message.content or ""
            tokens_used = response.usage.total_tokens if response.usage else 0

            result = LLMResponse(
                content=content,
                tokens_used=tokens_used,
                model=self._model,
                success=True,
            )

        except Exception as e:
            logger.warning(f"OpenAI call failed: {e}")
            result = LLMResponse(
                content="",
                tokens_used=0,
                model=self._model,
                success=False,
                error=str(e),
                error_kind=self._classify_error(e),
            )

        self._trace(prompt, system_prompt, result, tags)
        return result

    @property
    def model_name(self) -> str:
        """Return the model name being used."""
        return self._model

    @staticmethod
    def _classify_error(error: Exception) -> str:
        """Map an OpenAI SDK exception onto an error kind."""
        import openai

        if isinstance(error, (openai.APITimeoutError, openai.APIConnectionError)):
            return "timeout"
        if isinstance(error, openai.RateLimitError):
            return "rate_limit"
        if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return "auth"
        if isinstance(error, openai.InternalServerError):
            return "timeout"
        return "other"

    def _trace(
        self,
        prompt: str,
        system_prompt: Optional[str],
        response: LLMResponse,
        tags: Optional[Dict[str, Any]],
    ) -> None:
        if self._debug_logger is None:
            return
        self._debug_logger.log_call(
            prompt=prompt,
            system_prompt=system_prompt,
            response_content=response.content,
            tokens_used=response.tokens_used,
            success=response.success,
            error=response.error,
            tags=tags,
        )
