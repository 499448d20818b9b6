"""Custom exceptions for Vellum."""

from typing import Optional, List, Any


class VellumError(Exception):
    """Base exception for all Vellum errors."""

    pass


class VellumConfigError(VellumError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key


class VellumLLMError(VellumError):
    """Raised when LLM operations fail."""

    def __init__(self, message: str, retries_attempted: int = 0):
        super().__init__(message)
        self.retries_attempted = retries_attempted


class VellumOracleError(VellumLLMError):
    """Raised when the boundary oracle cannot produce a usable answer."""

    transient = False

    def __init__(self, message: str, retries_attempted: int = 0):
        super().__init__(message, retries_attempted)


class VellumOracleTimeoutError(VellumOracleError):
    """Raised when an oracle call times out or the connection drops."""

    transient = True


class VellumOracleRateLimitError(VellumOracleError):
    """Raised when the oracle rejects a call due to rate limiting."""

    transient = True


class VellumOracleAuthError(VellumOracleError):
    """Raised when the oracle rejects the credentials."""

    pass


class VellumOracleResponseError(VellumOracleError):
    """Raised when an oracle reply cannot be parsed into the expected shape."""

    def __init__(
        self,
        message: str,
        raw_response: Optional[str] = None,
        retries_attempted: int = 0,
    ):
        super().__init__(message, retries_attempted)
        self.raw_response = raw_response


class VellumPipelineError(VellumError):
    """Raised when pipeline execution fails.

    Carries every StepResult completed before the failure so callers never
    lose partial work.
    """

    def __init__(
        self,
        message: str,
        stage_name: Optional[str] = None,
        completed_results: Optional[List[Any]] = None,
        run: Optional[Any] = None,
    ):
        super().__init__(message)
        self.stage_name = stage_name
        self.completed_results = list(completed_results or [])
        self.run = run


class VellumValidationError(VellumError):
    """Raised when validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.field_name = field_name


TRANSIENT_ORACLE_ERRORS = (VellumOracleTimeoutError, VellumOracleRateLimitError)
