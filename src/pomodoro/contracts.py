"""Collaborator protocols used by the timer engine."""

from __future__ import annotations

from typing import Callable, Protocol

from gcal.models import SyncRequest, SyncResult


class TickSourceLike(Protocol):
    """Periodic one-second ticker; `start()` replaces any running stream."""
    def start(self, callback: Callable[[], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class NotificationSinkLike(Protocol):
    """Delivers phase-boundary notifications to the user."""
    def notify_work_ended(self, task_title: str) -> None:
        ...

    def notify_break_ended(self) -> None:
        ...


class SyncCoordinatorLike(Protocol):
    """Mirrors a finalized session onto the calendar."""
    def sync(self, request: SyncRequest) -> SyncResult:
        ...
