"""
Cooperative cancellation for grouping runs.
"""

from __future__ import annotations

import threading


class CancellationToken:
    """
    Thread-safe cancellation flag polled by long-running loops.

    Cancelling never interrupts work in progress; loops stop at their
    next check.
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        """Check if cancellation has been requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()


__all__ = ['CancellationToken']
