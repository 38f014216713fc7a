class CalendarError(Exception):
    """Base exception for Google Calendar operations."""


class CalendarConfigurationError(CalendarError):
    """Raised when calendar configuration is invalid."""


class CalendarRequestError(CalendarError):
    """Raised when a calendar request cannot reach the API."""


class ApiError(CalendarError):
    """Raised when the Calendar API answers with a non-success status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Calendar API error ({status_code}): {message}")


class MissingEventId(CalendarError):
    """Raised when a create call succeeds without returning an event id."""

    def __init__(self, message: str = "Calendar event id missing"):
        super().__init__(message)
