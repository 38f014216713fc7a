"""Today's-events picker state used to bind a focus session to an event."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Optional

from auth.errors import AuthError

from .contracts import CalendarGatewayLike
from .errors import CalendarError
from .models import CalendarEventSummary


class EventSelection:
    """Holds today's events and the event a session should be bound to.

    Only all-day placeholders survive a refresh as the selection; a timed
    event selected earlier is dropped once the list is reloaded.
    """

    def __init__(
        self,
        gateway: CalendarGatewayLike,
        *,
        today_fn: Optional[Callable[[], dt.date]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._gateway = gateway
        self._today = today_fn or (lambda: dt.datetime.now().astimezone().date())
        self._logger = logger or logging.getLogger("gcal.selection")
        self._events: list[CalendarEventSummary] = []
        self._selected_event_id: Optional[str] = None
        self._error_message: Optional[str] = None

    @property
    def events(self) -> list[CalendarEventSummary]:
        return list(self._events)

    @property
    def selected_event_id(self) -> Optional[str]:
        return self._selected_event_id

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def selected_event(self) -> Optional[CalendarEventSummary]:
        if self._selected_event_id is None:
            return None
        for event in self._events:
            if event.id == self._selected_event_id:
                return event
        return None

    def refresh(self) -> None:
        try:
            events = self._gateway.fetch_todays_events()
        except (CalendarError, AuthError) as error:
            self._logger.warning("Failed to load today's events: %s", error)
            self._events = []
            self._error_message = str(error)
            return

        self._events = events
        selected = self.selected_event
        if selected is None or not selected.is_all_day:
            self._selected_event_id = None
        self._error_message = None

    def select(self, event_id: Optional[str]) -> bool:
        if event_id is None:
            self._selected_event_id = None
            return True
        if not any(event.id == event_id for event in self._events):
            return False
        self._selected_event_id = event_id
        return True

    def clear(self) -> None:
        self._events = []
        self._selected_event_id = None
        self._error_message = None

    def create_all_day_placeholder(self, title: str) -> Optional[str]:
        """Create today's placeholder, reload, and select it."""
        try:
            event_id = self._gateway.create_all_day_event(title, self._today())
        except (CalendarError, AuthError) as error:
            self._logger.warning("Failed to create all-day placeholder: %s", error)
            self._error_message = str(error)
            return None

        self.refresh()
        self._selected_event_id = event_id
        self._error_message = None
        return event_id
