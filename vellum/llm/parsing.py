"""Tolerant parsing of structured LLM replies."""

import json
import re
import logging
from typing import Any, Dict, List, Optional

from vellum.exceptions import (
    VellumOracleAuthError,
    VellumOracleError,
    VellumOracleRateLimitError,
    VellumOracleResponseError,
    VellumOracleTimeoutError,
)
from vellum.llm.base import LLMResponse

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def raise_for_response(response: LLMResponse) -> None:
    """Raise the typed oracle error matching a failed response."""
    if response.success:
        return
    message = f"LLM call failed: {response.error}"
    kind = response.error_kind or "other"
    if kind == "timeout":
        raise VellumOracleTimeoutError(message)
    if kind == "rate_limit":
        raise VellumOracleRateLimitError(message)
    if kind == "auth":
        raise VellumOracleAuthError(message)
    raise VellumOracleError(message)


def extract_json_object(content: str) -> Dict[str, Any]:
    """Parse a JSON object out of a possibly wrapped reply.

    Handles markdown code fences, prose before or after the object, and
    trailing commas.

    Raises:
        VellumOracleResponseError: If no JSON object can be recovered
    """
    text = (content or "").strip()
    if not text:
        raise VellumOracleResponseError("Empty response", raw_response=content)

    candidates: List[str] = []
    match = _FENCE_RE.search(text)
    if match:
        candidates.append(match.group(1))
    candidates.append(text)
    balanced = _first_balanced_object(text)
    if balanced:
        candidates.append(balanced)

    for candidate in candidates:
        for attempt in (candidate, _TRAILING_COMMA_RE.sub(r"\1", candidate)):
            try:
                parsed = json.loads(attempt)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed
            if isinstance(parsed, list) and parsed and isinstance(parsed[0], dict):
                return parsed[0]

    raise VellumOracleResponseError(
        f"Failed to parse JSON response: {text[:200]}",
        raw_response=content,
    )


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first brace-balanced ``{...}`` substring, string-aware."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort integer extraction (``"12"``, ``12.0``, ``"line 12"``)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _NUMBER_RE.search(str(value))
    if not match:
        return None
    return int(float(match.group(0)))


def coerce_confidence(value: Any, default: float = 0.0) -> float:
    """Best-effort confidence in [0, 1]; percentages are rescaled."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_RE.search(str(value))
        if not match:
            return default
        number = float(match.group(0))
        if "%" in str(value):
            number /= 100.0
    if number > 1.0:
        number = number / 100.0 if number <= 100.0 else 1.0
    return max(0.0, min(1.0, number))


def coerce_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in ("true", "yes", "1", "y")


def coerce_str_list(value: Any) -> List[str]:
    """Accept a list, a single string, or nothing."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return []


def coerce_int_list(value: Any) -> List[int]:
    if not isinstance(value, (list, tuple)):
        return []
    result = []
    for item in value:
        number = coerce_int(item)
        if number is not None:
            result.append(number)
    return result
