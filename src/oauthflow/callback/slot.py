"""One-shot completion slot shared by the callback handler and the waiting caller."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from oauthflow.models import CallbackOutcome


class CompletionSlot:
    """Single-assignment, thread-safe handoff of a :data:`CallbackOutcome`.

    The first call to :meth:`resolve` wins; later calls return ``False`` and
    leave the stored outcome untouched. A successful write happens-before any
    :meth:`wait` that observes it.
    """

    def __init__(self) -> None:
        self._future: Future[CallbackOutcome] = Future()
        self._lock = threading.Lock()

    def resolve(self, outcome: CallbackOutcome) -> bool:
        """Store *outcome* unless the slot has already been written.

        Returns:
            ``True`` if this call performed the write, ``False`` otherwise.
        """
        with self._lock:
            if self._future.done():
                return False
            self._future.set_result(outcome)
            return True

    def wait(self, timeout: Optional[float] = None) -> Optional[CallbackOutcome]:
        """Block until the slot is written or *timeout* seconds elapse.

        Returns:
            The stored outcome, or ``None`` on timeout.
        """
        try:
            return self._future.result(timeout=timeout)
        except FutureTimeoutError:
            return None

    @property
    def is_resolved(self) -> bool:
        return self._future.done()
