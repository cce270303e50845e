from __future__ import annotations

import logging
import threading
from typing import Optional

from ..core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from .service import EventStatusSweeper

logger = logging.getLogger(__name__)


class SweepScheduler:
    """Background loop running the status sweep every ``interval_seconds``."""

    def __init__(self, sweeper: EventStatusSweeper, interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sweeper = sweeper
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                self._sweeper.run()
            except Exception:
                # Keep the loop alive; the next tick tries again.
                logger.exception("Event status sweep failed")
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="event-status-sweep", daemon=True)
        self._thread.start()
        logger.info("Event status sweep started (every %ss)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
