"""A watchdog timer that calls a function once unless it is kicked in time."""

from __future__ import annotations

import threading
from collections.abc import Callable


class Watchdog:
    """Call callback once after interval seconds; each kick restarts the countdown.

    Kicking after the callback has run, or after stop(), starts the countdown again.
    """

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        self.interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._start()

    def _start(self) -> None:
        timer = threading.Timer(self.interval, self._callback)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def stop(self) -> None:
        """Cancel the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def kick(self) -> None:
        """Restart the countdown from the full interval."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._start()