"""Google Calendar v3 request/response mapping with per-call bearer tokens."""

from __future__ import annotations

import datetime as dt
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .contracts import AccessTokenProviderLike
from .errors import (
    ApiError,
    CalendarConfigurationError,
    CalendarRequestError,
    MissingEventId,
)
from .models import UNTITLED_EVENT, CalendarEventSummary

# All-day placeholders are converted to at least this many seconds.
MIN_TIMED_EVENT_SECONDS = 60

_FRACTION_RE = re.compile(r"^(.*T\d{2}:\d{2}:\d{2})\.(\d+)(.*)$")


class GoogleCalendarGateway:
    """Stateless wrapper over the Calendar API; no retries, no caching."""

    def __init__(
        self,
        token_provider: AccessTokenProviderLike,
        *,
        calendar_id: str = "primary",
        max_results: int = 50,
        api: Any = None,
        now_fn: Optional[Callable[[], dt.datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not calendar_id.strip():
            raise CalendarConfigurationError("calendar_id cannot be empty")
        if max_results < 1:
            raise CalendarConfigurationError(f"max_results must be >= 1, got: {max_results}")

        self._token_provider = token_provider
        self._calendar_id = calendar_id
        self._max_results = max_results
        self._now = now_fn or (lambda: dt.datetime.now().astimezone())
        self._logger = logger or logging.getLogger("gcal")
        self._api = api if api is not None else self._build_api()

    @staticmethod
    def _build_api():
        # Unauthenticated transport; the bearer header is attached per request.
        return build(
            "calendar",
            "v3",
            http=httplib2.Http(timeout=30),
            cache_discovery=False,
            static_discovery=True,
        )

    def fetch_upcoming_events(
        self,
        window_start: dt.datetime,
        window_end: dt.datetime,
    ) -> List[CalendarEventSummary]:
        """List single-occurrence events in `[window_start, window_end)`."""
        request = self._api.events().list(
            calendarId=self._calendar_id,
            maxResults=self._max_results,
            orderBy="startTime",
            singleEvents=True,
            timeMin=rfc3339_utc(window_start),
            timeMax=rfc3339_utc(window_end),
        )
        payload = self._execute(request)

        items = payload.get("items") or []
        events: List[CalendarEventSummary] = []
        for item in items:
            summary = parse_event_item(item)
            if summary is None:
                self._logger.debug("Skipping calendar item with unreadable dates")
                continue
            events.append(summary)
        return events

    def fetch_todays_events(self) -> List[CalendarEventSummary]:
        today = self._now().astimezone().date()
        start_of_day = _local_midnight(today)
        end_of_day = _local_midnight(today + dt.timedelta(days=1))
        return self.fetch_upcoming_events(start_of_day, end_of_day)

    def create_event(self, title: str, start: dt.datetime, end: dt.datetime) -> str:
        body: Dict[str, Any] = {
            "summary": title,
            "start": {"dateTime": rfc3339_local(start)},
            "end": {"dateTime": rfc3339_local(end)},
            "reminders": {"useDefault": False, "overrides": []},
        }
        request = self._api.events().insert(calendarId=self._calendar_id, body=body)
        event_id = _event_id(self._execute(request))
        self._logger.info("Created calendar event %s", event_id)
        return event_id

    def create_all_day_event(self, title: str, day: dt.date) -> str:
        """Create a date-only placeholder spanning one local calendar day."""
        if isinstance(day, dt.datetime):
            day = _aware(day).astimezone().date()
        body: Dict[str, Any] = {
            "summary": title,
            "start": {"date": day.isoformat()},
            "end": {"date": (day + dt.timedelta(days=1)).isoformat()},
            "reminders": {"useDefault": False, "overrides": []},
        }
        request = self._api.events().insert(calendarId=self._calendar_id, body=body)
        event_id = _event_id(self._execute(request))
        self._logger.info("Created all-day placeholder %s for %s", event_id, day)
        return event_id

    def update_event(
        self,
        event_id: str,
        start: dt.datetime,
        end: dt.datetime,
        force_timed: bool = False,
    ) -> None:
        """Patch an event's timing; `force_timed` converts an all-day event."""
        if not event_id.strip():
            raise ValueError("event_id cannot be empty")

        start = _aware(start)
        end = _aware(end)
        if force_timed:
            if end <= start:
                end = start + dt.timedelta(seconds=MIN_TIMED_EVENT_SECONDS)
            body: Dict[str, Any] = {
                "start": {"dateTime": rfc3339_local(start), "date": None},
                "end": {"dateTime": rfc3339_local(end), "date": None},
            }
        else:
            body = {
                "start": {"dateTime": rfc3339_local(start)},
                "end": {"dateTime": rfc3339_local(end)},
            }

        request = self._api.events().patch(
            calendarId=self._calendar_id,
            eventId=event_id,
            body=body,
        )
        self._execute(request)
        self._logger.info(
            "Updated calendar event %s (force_timed=%s)",
            event_id,
            force_timed,
        )

    def _execute(self, request) -> Dict[str, Any]:
        access_token = self._token_provider.valid_access_token()
        request.headers["authorization"] = f"Bearer {access_token}"
        try:
            response = request.execute(num_retries=0)
        except HttpError as error:
            raise api_error_from_http_error(error) from error
        except (httplib2.HttpLib2Error, OSError) as error:
            raise CalendarRequestError(
                f"Google Calendar request failed: {error}"
            ) from error
        return response if isinstance(response, dict) else {}


def api_error_from_http_error(error: HttpError) -> ApiError:
    status = int(getattr(error.resp, "status", 0) or 0)
    message = google_error_message(error.content) or f"HTTP {status}"
    return ApiError(status_code=status, message=message)


def google_error_message(content: Any) -> Optional[str]:
    """Extract `error.message` plus the first reason code from an error body."""
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not isinstance(content, str):
        return None
    try:
        payload = json.loads(content)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if not isinstance(message, str) or not message:
        return None

    details = error.get("errors")
    if isinstance(details, list) and details:
        first = details[0] if isinstance(details[0], dict) else {}
        reason = first.get("reason")
        return f"{message} ({reason or 'unknown'})"
    return message


def parse_event_item(item: Any) -> Optional[CalendarEventSummary]:
    if not isinstance(item, dict):
        return None
    event_id = item.get("id")
    if not isinstance(event_id, str) or not event_id:
        return None

    start = _parse_event_date(item.get("start"))
    end = _parse_event_date(item.get("end"))
    if start is None or end is None:
        return None

    summary = item.get("summary")
    return CalendarEventSummary(
        id=event_id,
        title=summary if isinstance(summary, str) and summary else UNTITLED_EVENT,
        start=start[0],
        end=end[0],
        is_all_day=start[1] or end[1],
    )


def parse_rfc3339(value: Any) -> Optional[dt.datetime]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    match = _FRACTION_RE.match(text)
    if match:
        head, fraction, tail = match.groups()
        text = f"{head}.{fraction[:6].ljust(6, '0')}{tail}"
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def rfc3339_local(value: dt.datetime) -> str:
    return _aware(value).astimezone().isoformat(timespec="seconds")


def rfc3339_utc(value: dt.datetime) -> str:
    utc_value = _aware(value).astimezone(dt.timezone.utc)
    return utc_value.isoformat(timespec="seconds").replace("+00:00", "Z")


def _parse_event_date(value: Any) -> Optional[Tuple[dt.datetime, bool]]:
    if not isinstance(value, dict):
        return None

    date_time = value.get("dateTime")
    if date_time is not None:
        parsed = parse_rfc3339(date_time)
        return (parsed, False) if parsed is not None else None

    date_only = value.get("date")
    if isinstance(date_only, str):
        try:
            day = dt.date.fromisoformat(date_only.strip())
        except ValueError:
            return None
        return _local_midnight(day), True
    return None


def _local_midnight(day: dt.date) -> dt.datetime:
    return dt.datetime.combine(day, dt.time.min).astimezone()


def _aware(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.astimezone()
    return value


def _event_id(payload: Dict[str, Any]) -> str:
    event_id = payload.get("id")
    if not isinstance(event_id, str) or not event_id:
        raise MissingEventId()
    return event_id
