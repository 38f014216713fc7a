"""Value types exchanged between the timer, the sync policy and the gateway."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Literal, Optional

SyncAction = Literal["skipped", "created", "updated", "converted", "failed"]

SYNC_SKIPPED = "skipped"
SYNC_CREATED = "created"
SYNC_UPDATED = "updated"
SYNC_CONVERTED = "converted"
SYNC_FAILED = "failed"

UNTITLED_EVENT = "Untitled Event"


@dataclass(frozen=True)
class CalendarEventSummary:
    """Normalized calendar item shown in the event picker."""
    id: str
    title: str
    start: dt.datetime
    end: dt.datetime
    is_all_day: bool


@dataclass(frozen=True)
class SyncRequest:
    """One finalized focus session to mirror onto the calendar."""
    event_id: Optional[str]
    title: str
    start: dt.datetime
    end: dt.datetime
    event_is_all_day: bool = False

    @property
    def duration_seconds(self) -> int:
        return int((self.end - self.start).total_seconds())


@dataclass(frozen=True)
class SyncResult:
    """Outcome envelope returned by the sync coordinator."""
    action: SyncAction
    event_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
