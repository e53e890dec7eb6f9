"""
Cancellation token threaded through the pipeline.

Tracing and component labelling can be slow on very large rasters; a Deadline
lets the caller bound a run by wall-clock time or cancel it from another
thread. Stages call `check()` at safe points.
"""

import threading
import time


class PipelineCancelled(RuntimeError):
    """Raised when a run passes its deadline or is cancelled."""


class Deadline:
    """
    Wall-clock limit plus an optional external cancel event.

    Either argument may be omitted; a Deadline with neither never expires.
    """

    def __init__(self, timeout=None, cancel_event=None):
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        self._expires_at = time.monotonic() + timeout if timeout is not None else None

    def cancel(self):
        self.cancel_event.set()

    @property
    def remaining(self):
        """Seconds left, or None when there is no time limit."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self):
        if self.cancel_event.is_set():
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, where=""):
        """Raise PipelineCancelled if the run should stop."""
        if self.cancel_event.is_set():
            raise PipelineCancelled(f"Cancelled during {where or 'pipeline'}")
        if self._expires_at is not None and time.monotonic() >= self._expires_at:
            raise PipelineCancelled(
                f"Deadline of {self.timeout:.2f}s exceeded during {where or 'pipeline'}"
            )


def ensure_deadline(deadline):
    """Accept None, a timeout in seconds or a Deadline."""
    if deadline is None:
        return Deadline()
    if isinstance(deadline, Deadline):
        return deadline
    return Deadline(timeout=float(deadline))
