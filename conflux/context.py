"""
Cancellation context passed through ``load`` and ``dump``.

Sources and dumpers doing I/O are expected to honour it; the controller
only checks it between steps and never imposes a timeout of its own.
"""

import threading
import time
from typing import Optional

from conflux.core.exceptions import LoadCancelledError


class Context:
    """
    Cancellation handle with an optional deadline.

    Args:
        timeout: Seconds from creation after which the context counts as
            cancelled; ``None`` means no deadline
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self):
        """Cancel the context."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, source: str, operation: str):
        """Raise ``LoadCancelledError`` if the context is cancelled."""
        if self.cancelled:
            reason = "deadline exceeded" if not self._cancelled.is_set() else "context cancelled"
            raise LoadCancelledError(source, operation, TimeoutError(reason))


def background() -> Context:
    """Return a context that is never cancelled."""
    return Context()
