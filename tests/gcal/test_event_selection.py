import datetime as dt
import unittest
from typing import Optional

from gcal import ApiError, CalendarEventSummary, EventSelection

TODAY = dt.date(2026, 3, 2)


def _event(event_id: str, *, all_day: bool) -> CalendarEventSummary:
    start = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)
    return CalendarEventSummary(
        id=event_id,
        title=event_id.title(),
        start=start,
        end=start + dt.timedelta(hours=1),
        is_all_day=all_day,
    )


class _GatewayStub:
    def __init__(self, events: list[CalendarEventSummary]):
        self.events = list(events)
        self.error: Optional[Exception] = None
        self.created: list[tuple[str, dt.date]] = []

    def fetch_todays_events(self) -> list[CalendarEventSummary]:
        if self.error is not None:
            raise self.error
        return list(self.events)

    def create_all_day_event(self, title: str, day: dt.date) -> str:
        if self.error is not None:
            raise self.error
        event_id = f"placeholder-{len(self.created) + 1}"
        self.created.append((title, day))
        self.events.append(
            CalendarEventSummary(
                id=event_id,
                title=title,
                start=dt.datetime(2026, 3, 2).astimezone(),
                end=dt.datetime(2026, 3, 3).astimezone(),
                is_all_day=True,
            )
        )
        return event_id


class EventSelectionTests(unittest.TestCase):
    def test_refresh_keeps_all_day_selection(self) -> None:
        gateway = _GatewayStub([_event("allday", all_day=True), _event("timed", all_day=False)])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)
        selection.refresh()

        self.assertTrue(selection.select("allday"))
        selection.refresh()

        self.assertEqual("allday", selection.selected_event_id)

    def test_refresh_drops_timed_selection(self) -> None:
        gateway = _GatewayStub([_event("timed", all_day=False)])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)
        selection.refresh()
        selection.select("timed")

        selection.refresh()

        self.assertIsNone(selection.selected_event_id)

    def test_refresh_drops_selection_that_disappeared(self) -> None:
        gateway = _GatewayStub([_event("allday", all_day=True)])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)
        selection.refresh()
        selection.select("allday")
        gateway.events = []

        selection.refresh()

        self.assertIsNone(selection.selected_event_id)
        self.assertIsNone(selection.selected_event)

    def test_select_unknown_event_is_rejected(self) -> None:
        selection = EventSelection(_GatewayStub([_event("a", all_day=False)]), today_fn=lambda: TODAY)
        selection.refresh()

        self.assertFalse(selection.select("missing"))
        self.assertIsNone(selection.selected_event_id)
        self.assertTrue(selection.select(None))

    def test_refresh_failure_clears_events_and_keeps_message(self) -> None:
        gateway = _GatewayStub([_event("a", all_day=True)])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)
        selection.refresh()
        gateway.error = ApiError(401, "Invalid Credentials")

        selection.refresh()

        self.assertEqual([], selection.events)
        self.assertEqual("Calendar API error (401): Invalid Credentials", selection.error_message)

    def test_create_placeholder_selects_new_event(self) -> None:
        gateway = _GatewayStub([])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)

        event_id = selection.create_all_day_placeholder("Deep work")

        self.assertEqual("placeholder-1", event_id)
        self.assertEqual([("Deep work", TODAY)], gateway.created)
        self.assertEqual("placeholder-1", selection.selected_event_id)
        selected = selection.selected_event
        self.assertIsNotNone(selected)
        if selected is None:
            self.fail("Expected the placeholder to be selected")
        self.assertTrue(selected.is_all_day)

    def test_create_placeholder_failure_returns_none(self) -> None:
        gateway = _GatewayStub([])
        gateway.error = ApiError(403, "Forbidden")
        selection = EventSelection(gateway, today_fn=lambda: TODAY)

        self.assertIsNone(selection.create_all_day_placeholder("Deep work"))
        self.assertIsNone(selection.selected_event_id)
        self.assertEqual("Calendar API error (403): Forbidden", selection.error_message)

    def test_clear_resets_everything(self) -> None:
        gateway = _GatewayStub([_event("a", all_day=True)])
        selection = EventSelection(gateway, today_fn=lambda: TODAY)
        selection.refresh()
        selection.select("a")

        selection.clear()

        self.assertEqual([], selection.events)
        self.assertIsNone(selection.selected_event_id)
        self.assertIsNone(selection.error_message)


if __name__ == "__main__":
    unittest.main()
