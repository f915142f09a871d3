"""
Cooperative Cancellation.

The orchestrator checks a ``CancellationToken`` before starting each file,
so a host process that is interrupted can stop issuing further exports
while files already in progress finish normally.
"""

import threading


class CancellationToken:
    """Thread-safe flag for cooperative cancellation.

    Usage:
        token = CancellationToken()
        # From a signal handler or another thread
        token.cancel()
        # In the export loop
        if token.is_cancelled():
            ...
    """

    def __init__(self) -> None:
        """Initialize an uncancelled token."""
        self._cancelled = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        """Request cancellation."""
        with self._lock:
            self._cancelled.set()

    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._cancelled.is_set()

    def reset(self) -> None:
        """Clear a previous cancellation request (mainly for testing)."""
        with self._lock:
            self._cancelled.clear()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled()})"
