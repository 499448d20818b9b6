from __future__ import annotations

import pytest

from vellum.exceptions import (
    VellumOracleAuthError,
    VellumOracleRateLimitError,
    VellumOracleTimeoutError,
)
from vellum.utils.retry import RetryHandler


def test_transient_errors_are_retried_with_backoff() -> None:
    delays = []
    handler = RetryHandler(max_attempts=3, base_delay=1.0, max_delay=1.5, sleep=delays.append)
    attempts = []

    def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise VellumOracleRateLimitError("slow down")
        return "ok"

    assert handler.execute(flaky) == "ok"
    assert delays == [1.0, 1.5]


def test_exhausted_retries_raise_last_error() -> None:
    handler = RetryHandler(max_attempts=2, sleep=lambda seconds: None)

    def always_times_out() -> None:
        raise VellumOracleTimeoutError("timed out")

    with pytest.raises(VellumOracleTimeoutError) as excinfo:
        handler.execute(always_times_out)
    assert excinfo.value.retries_attempted == 1


def test_non_transient_errors_are_not_retried() -> None:
    handler = RetryHandler(sleep=lambda seconds: pytest.fail("should not wait"))
    attempts = []

    def denied() -> None:
        attempts.append(1)
        raise VellumOracleAuthError("bad key")

    with pytest.raises(VellumOracleAuthError):
        handler.execute(denied)
    assert len(attempts) == 1
