"""Cancellable periodic task driving the simulation."""

from __future__ import annotations

import logging
from threading import Event, Lock, Thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Call ``callback`` every ``interval`` seconds on a background thread.

    ``start`` and ``stop`` are idempotent. Stopping waits for an in-flight
    call to finish; it never interrupts one.
    """

    def __init__(self, interval: float, callback: Callable[[], object], name: str = "ticker") -> None:
        if interval <= 0:
            raise ValueError("Ticker interval must be positive.")
        self.interval = interval
        self.name = name
        self._callback = callback
        self._lock = Lock()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> bool:
        """Begin ticking; returns False when already running."""
        with self._lock:
            if self.running:
                return False
            self._stop_event = Event()
            self._thread = Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self.name,
                daemon=True,
            )
            self._thread.start()
        logger.info("Ticker started", extra={"interval": self.interval})
        return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Stop ticking; returns False when it was not running."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return False
            self._stop_event.set()
            self._thread = None
        thread.join(timeout=timeout)
        logger.info("Ticker stopped", extra={"interval": self.interval})
        return True

    def _run(self, stop_event: Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:  # noqa: BLE001 - one bad tick must not end the stream
                logger.exception("Ticker callback failed")
