"""Interval scheduling for the notification pollers."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Ticker(Protocol):
    def start(self, interval: float, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    @property
    def running(self) -> bool: ...


class IntervalTicker:
    """
    Runs `callback` on a daemon thread: once immediately, then every `interval` seconds.

    A tick always completes before the next wait starts, so ticks never
    overlap. `stop()` does not interrupt a tick that is already running.
    """

    def __init__(self, name: str = "poller") -> None:
        self.name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        if self.running:
            logger.warning("Ticker %s is already running", self.name)
            return

        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval, callback, self._stop_event),
            name=f"{self.name}-ticker",
            daemon=True,
        )
        self._thread.start()
        logger.info("Started %s ticker (interval: %ss)", self.name, interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Stopped %s ticker", self.name)

    def _loop(self, interval: float, callback: Callable[[], None], stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            try:
                callback()
            except Exception as e:
                logger.error("Ticker %s callback error: %s", self.name, e)
            # Event.wait returns early on stop
            if stop_event.wait(interval):
                break


class ManualTicker:
    """Ticker driven by explicit `fire()` calls; lets tests step pollers deterministically."""

    def __init__(self) -> None:
        self.interval: Optional[float] = None
        self._callback: Optional[Callable[[], None]] = None
        self.start_count = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self._callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self._callback = None

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self._callback is None:
                return
            self._callback()
