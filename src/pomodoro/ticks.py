"""Single-stream periodic tick source driven by a daemon thread."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional


class TickSource:
    """Calls a callback once per interval; at most one stream at a time."""

    def __init__(
        self,
        *,
        interval_seconds: float = 1.0,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._interval = float(interval_seconds)
        self._logger = logger or logging.getLogger("pomodoro.ticks")
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._stop_locked()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(callback, stop_event),
                daemon=True,
                name="timer-ticks",
            )
            self._stop_event = stop_event
            self._thread = thread
            thread.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        # Never joins: stop() may be called from inside a tick callback.
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    def _run(self, callback: Callable[[], None], stop_event: threading.Event) -> None:
        deadline = time.monotonic() + self._interval
        while not stop_event.wait(max(0.0, deadline - time.monotonic())):
            if stop_event.is_set():
                break
            try:
                callback()
            except Exception as error:
                self._logger.error("Tick handler failed: %s", error, exc_info=True)
            deadline += self._interval
