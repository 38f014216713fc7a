"""Phase-boundary notification texts and the logging-backed sink."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

WORK_END_TITLE = "Pomodoro Complete"
BREAK_END_TITLE = "Break Complete"


@dataclass(frozen=True)
class Notification:
    """Title/body pair delivered at a phase boundary."""
    title: str
    body: str


def work_end_notification(task_title: str) -> Notification:
    title = " ".join((task_title or "").split())
    body = f"Finished: {title}" if title else "Time to take a break."
    return Notification(title=WORK_END_TITLE, body=body)


def break_end_notification() -> Notification:
    return Notification(title=BREAK_END_TITLE, body="Back to work.")


class LoggingNotificationSink:
    """Writes notifications to the log and an optional console callback."""

    def __init__(
        self,
        *,
        echo: Optional[Callable[[Notification], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._echo = echo
        self._logger = logger or logging.getLogger("runtime.notifications")

    def notify_work_ended(self, task_title: str) -> None:
        self._deliver(work_end_notification(task_title))

    def notify_break_ended(self) -> None:
        self._deliver(break_end_notification())

    def _deliver(self, notification: Notification) -> None:
        self._logger.info("%s: %s", notification.title, notification.body)
        if self._echo is not None:
            self._echo(notification)
