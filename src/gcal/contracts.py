"""Protocols for the collaborators the calendar layer depends on."""

from __future__ import annotations

import datetime as dt
from typing import Protocol

from .models import CalendarEventSummary


class AccessTokenProviderLike(Protocol):
    """Supplies a currently valid bearer token, refreshing when needed."""
    def valid_access_token(self) -> str:
        ...


class CalendarGatewayLike(Protocol):
    """Calendar operations used by the sync coordinator and event picker."""
    def fetch_todays_events(self) -> list[CalendarEventSummary]:
        ...

    def create_event(self, title: str, start: dt.datetime, end: dt.datetime) -> str:
        ...

    def create_all_day_event(self, title: str, day: dt.date) -> str:
        ...

    def update_event(
        self,
        event_id: str,
        start: dt.datetime,
        end: dt.datetime,
        force_timed: bool = False,
    ) -> None:
        ...
