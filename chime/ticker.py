from __future__ import annotations

import logging
import time
from threading import Event, Thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread.

    Deadlines are computed from the start time, so a slow callback does not
    push later ticks back. Missed deadlines are skipped, not replayed.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "ticker"):
        if interval <= 0:
            raise ValueError("Ticker interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.debug("Ticker %s started (interval=%.3fs)", self.name, self.interval)

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.debug("Ticker %s stopped", self.name)

    def _loop(self) -> None:
        next_deadline = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, next_deadline - time.monotonic())):
            try:
                self.callback()
            except Exception:
                logger.error("Ticker %s callback failed", self.name, exc_info=True)
            now = time.monotonic()
            next_deadline += self.interval
            if next_deadline <= now:
                skipped = int((now - next_deadline) // self.interval) + 1
                next_deadline += skipped * self.interval
