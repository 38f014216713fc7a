"""Google Calendar gateway, sync policy, and event picker."""

from .contracts import AccessTokenProviderLike, CalendarGatewayLike
from .errors import (
    ApiError,
    CalendarConfigurationError,
    CalendarError,
    CalendarRequestError,
    MissingEventId,
)
from .gateway import GoogleCalendarGateway
from .models import (
    SYNC_CONVERTED,
    SYNC_CREATED,
    SYNC_FAILED,
    SYNC_SKIPPED,
    SYNC_UPDATED,
    CalendarEventSummary,
    SyncAction,
    SyncRequest,
    SyncResult,
)
from .selection import EventSelection
from .sync import CalendarSyncCoordinator

__all__ = [
    "AccessTokenProviderLike",
    "ApiError",
    "CalendarConfigurationError",
    "CalendarError",
    "CalendarEventSummary",
    "CalendarGatewayLike",
    "CalendarRequestError",
    "CalendarSyncCoordinator",
    "EventSelection",
    "GoogleCalendarGateway",
    "MissingEventId",
    "SYNC_CONVERTED",
    "SYNC_CREATED",
    "SYNC_FAILED",
    "SYNC_SKIPPED",
    "SYNC_UPDATED",
    "SyncAction",
    "SyncRequest",
    "SyncResult",
]
