"""Cooperative cancellation."""

import threading


class CancellationToken:
    """Thread-safe flag checked by the orchestrator between steps."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
