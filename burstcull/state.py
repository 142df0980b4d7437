"""
State of the background grouping job served by the HTTP API.

Only one grouping run may be active per application. Progress callbacks
arrive on the worker thread while status requests read from request
threads, so every access goes through a lock.
"""

import threading
from datetime import datetime
from typing import Optional

from .grouping import AutoGrouper, CancellationToken, GroupingState


class GroupingJobState:
    """
    Tracks the current (or last) grouping job.

    Attributes mirror what /api/status reports: state, processed, total,
    message, group_count and error.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.grouper: Optional[AutoGrouper] = None
        self.token: Optional[CancellationToken] = None
        self.thread: Optional[threading.Thread] = None
        self.reset()

    def reset(self):
        """Reset state to initial values."""
        with self._lock:
            self.state = GroupingState.IDLE
            self.processed = 0
            self.total = 0
            self.message = ''
            self.group_count = 0
            self.error: Optional[str] = None
            self.started_at: Optional[str] = None
            self.finished_at: Optional[str] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self.state == GroupingState.RUNNING

    def begin(self, grouper: AutoGrouper) -> bool:
        """
        Claim the job slot for a new run.

        Returns:
            False if a run is already active
        """
        with self._lock:
            if self.state == GroupingState.RUNNING:
                return False
            self.grouper = grouper
            self.token = CancellationToken()
            self.state = GroupingState.RUNNING
            self.processed = 0
            self.total = 0
            self.message = 'Queued'
            self.group_count = 0
            self.error = None
            self.started_at = datetime.now().isoformat()
            self.finished_at = None
            return True

    def update_progress(self, processed: int, total: int, message: str):
        """Progress callback for GroupingOptions.on_progress."""
        with self._lock:
            self.processed = processed
            self.total = total
            self.message = message

    def finish(self, group_count: int, error: Optional[str] = None):
        """Record the outcome reported by the grouper."""
        with self._lock:
            grouper_state = self.grouper.state if self.grouper else GroupingState.COMPLETED
            if error is not None:
                self.state = GroupingState.FAILED
                self.message = 'Grouping failed'
            else:
                self.state = grouper_state
                self.message = (
                    'Grouping aborted' if grouper_state == GroupingState.ABORTED
                    else 'Grouping complete'
                )
            self.group_count = group_count
            self.error = error
            self.finished_at = datetime.now().isoformat()

    def request_abort(self) -> bool:
        """
        Ask the running grouper to stop.

        The token is handed to the grouper when the job starts, so an abort
        sent before the worker thread gets going is still honoured.

        Returns:
            False if nothing is running
        """
        with self._lock:
            if self.state != GroupingState.RUNNING or self.token is None:
                return False
            self.token.cancel()
        return True

    def to_dict(self) -> dict:
        with self._lock:
            return {
                'state': self.state.value,
                'processed': self.processed,
                'total': self.total,
                'message': self.message,
                'group_count': self.group_count,
                'error': self.error,
                'started_at': self.started_at,
                'finished_at': self.finished_at,
            }
