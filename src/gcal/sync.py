"""Create-vs-update policy for mirroring finished sessions onto the calendar."""

from __future__ import annotations

import logging
from typing import Optional

from auth.errors import AuthError

from .contracts import CalendarGatewayLike
from .errors import CalendarError
from .models import (
    SYNC_CONVERTED,
    SYNC_CREATED,
    SYNC_FAILED,
    SYNC_SKIPPED,
    SYNC_UPDATED,
    SyncRequest,
    SyncResult,
)


class CalendarSyncCoordinator:
    """Applies one SyncRequest to the calendar; failures become results."""

    def __init__(
        self,
        gateway: CalendarGatewayLike,
        logger: Optional[logging.Logger] = None,
    ):
        self._gateway = gateway
        self._logger = logger or logging.getLogger("gcal.sync")

    def sync(self, request: SyncRequest) -> SyncResult:
        if request.end <= request.start:
            self._logger.info("Nothing to sync: session has no positive duration")
            return SyncResult(action=SYNC_SKIPPED, event_id=request.event_id)

        try:
            if request.event_id is None:
                event_id = self._gateway.create_event(
                    request.title,
                    request.start,
                    request.end,
                )
                self._logger.info(
                    "Session synced as new event %s (%ss)",
                    event_id,
                    request.duration_seconds,
                )
                return SyncResult(action=SYNC_CREATED, event_id=event_id)

            self._gateway.update_event(
                request.event_id,
                request.start,
                request.end,
                force_timed=request.event_is_all_day,
            )
        except (CalendarError, AuthError) as error:
            self._logger.warning("Calendar sync failed: %s", error)
            return SyncResult(
                action=SYNC_FAILED,
                event_id=request.event_id,
                error=str(error),
            )

        action = SYNC_CONVERTED if request.event_is_all_day else SYNC_UPDATED
        self._logger.info(
            "Session synced to event %s (%s, %ss)",
            request.event_id,
            action,
            request.duration_seconds,
        )
        return SyncResult(action=action, event_id=request.event_id)
