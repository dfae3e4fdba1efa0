"""Cooperative cancellation for long-running walks and hashing loops."""

from __future__ import annotations

import threading

from depbundle.exceptions import OperationCancelledError


class CancellationToken:
    """A thread-safe, one-way cancellation flag.

    Loops call ``raise_if_cancelled()`` between units of work (graph nodes,
    content chunks). Once cancelled, a token stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``OperationCancelledError`` if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelledError("Operation was cancelled")
