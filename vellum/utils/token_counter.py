"""Token accounting for oracle calls."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Rough English average when no encoding is available.
_TOKENS_PER_WORD = 1.3


class TokenCounter:
    """Counts the tokens of an oracle exchange with tiktoken.

    Used when a provider does not report usage itself, so every call still
    carries a cost for per-step attribution.
    """

    def __init__(self, model: str = "gpt-4") -> None:
        """Initialize the token counter.

        Args:
            model: Model name used to pick the tiktoken encoding
        """
        self._model = model
        self._encoding = None
        self._encoding_failed = False

    @property
    def encoding(self):
        """Encoding for the model, loaded on first use."""
        if self._encoding is None:
            import tiktoken

            try:
                self._encoding = tiktoken.encoding_for_model(self._model)
            except KeyError:
                self._encoding = tiktoken.get_encoding("cl100k_base")
        return self._encoding

    def count(self, text: str) -> int:
        """Tokens in ``text``; approximated from words if the encoding cannot load."""
        if not text:
            return 0
        if not self._encoding_failed:
            try:
                return len(self.encoding.encode(text))
            except Exception as e:
                # Encoding files are fetched on first use and may be unreachable.
                logger.warning(f"tiktoken unavailable for {self._model}, approximating: {e}")
                self._encoding_failed = True
        return int(len(text.split()) * _TOKENS_PER_WORD)

    def count_call(
        self, prompt: str, system_prompt: Optional[str] = None, response: str = ""
    ) -> int:
        """Tokens sent and received by one call."""
        return self.count(system_prompt or "") + self.count(prompt) + self.count(response)
