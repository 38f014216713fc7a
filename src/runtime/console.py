"""Line-driven console front end for one focus session."""

from __future__ import annotations

import concurrent.futures
import logging
import sys
from typing import Iterable, Optional, TextIO

from pomodoro import TimerActionResult, TimerEngine, TimerSnapshot, format_clock, status_text

PAUSE_COMMANDS = frozenset({"p", "pause"})
RESUME_COMMANDS = frozenset({"r", "resume"})
STOP_COMMANDS = frozenset({"s", "stop", "q", "quit"})
HELP_TEXT = "Commands: p = pause, r = resume, s = stop and sync, q = quit"


class FocusConsole:
    """Runs a session on the engine and renders every snapshot as one line."""

    def __init__(
        self,
        engine: TimerEngine,
        *,
        output: Optional[TextIO] = None,
        sync_timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._engine = engine
        self._output = output or sys.stdout
        self._sync_timeout_seconds = sync_timeout_seconds
        self._logger = logger or logging.getLogger("runtime.console")

    def run(
        self,
        commands: Iterable[str],
        *,
        title: str,
        event_id: Optional[str] = None,
        event_is_all_day: bool = False,
    ) -> int:
        self._engine.add_listener(self._render)
        try:
            started = self._engine.start(
                title,
                event_id=event_id,
                event_is_all_day=event_is_all_day,
            )
            if not started.accepted:
                self._write(f"Could not start session: {started.reason}\n")
                return 1

            self._write(HELP_TEXT + "\n")
            for line in commands:
                command = line.strip().lower()
                if not command:
                    continue
                if command in STOP_COMMANDS:
                    break
                if command in PAUSE_COMMANDS:
                    self._report(self._engine.pause())
                elif command in RESUME_COMMANDS:
                    self._report(self._engine.resume())
                else:
                    self._write(HELP_TEXT + "\n")
        finally:
            stopped = self._engine.stop()
            self._engine.remove_listener(self._render)

        self._write(f"\nSession finished: {format_clock(_worked_seconds(stopped))} of work\n")
        if stopped.sync_request is None:
            self._write("Nothing to sync.\n")
            return 0
        return self._await_sync()

    def _await_sync(self) -> int:
        try:
            result = self._engine.wait_for_sync(timeout=self._sync_timeout_seconds)
        except concurrent.futures.TimeoutError:
            self._logger.warning("Calendar sync still running after %ss", self._sync_timeout_seconds)
            self._write("Calendar sync is still running.\n")
            return 1

        if result is None:
            self._write("Calendar sync disabled.\n")
            return 0
        if result.error:
            self._write(f"Calendar sync failed: {result.error}\n")
            return 1
        self._write(f"Calendar {result.action}: {result.event_id or '-'}\n")
        return 0

    def _report(self, result: TimerActionResult) -> None:
        if not result.accepted:
            self._write(f"\n{result.action} ignored: {result.reason}\n")

    def _render(self, snapshot: TimerSnapshot) -> None:
        if not snapshot.is_active:
            return
        self._write(
            f"\r{status_text(snapshot):<9} {format_clock(snapshot.display_seconds):>8}  {snapshot.title}"
        )

    def _write(self, text: str) -> None:
        self._output.write(text)
        self._output.flush()


def _worked_seconds(result: TimerActionResult) -> int:
    if result.sync_request is None:
        return 0
    return result.sync_request.duration_seconds
