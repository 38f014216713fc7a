import contextlib
import datetime as dt
import io
import unittest
from concurrent.futures import Executor, Future
from typing import Iterator, Optional
from unittest.mock import patch

import main
from app_config_schema import AppConfigurationError
from auth import UserCanceled
from gcal import CalendarEventSummary
from gcal.models import SyncRequest, SyncResult
from pomodoro import TimerEngine


class _AuthStub:
    def __init__(self, sign_in_error=None):
        self.status = "signed_in"
        self.signed_out = False
        self.canceled = False
        self._sign_in_error = sign_in_error

    def sign_in(self) -> None:
        if self._sign_in_error is not None:
            raise self._sign_in_error

    def sign_out(self) -> None:
        self.signed_out = True
        self.status = "signed_out"

    def cancel_sign_in(self) -> None:
        self.canceled = True


class _SelectionStub:
    def __init__(self, placeholder_id=None, error_message=None, events=None):
        self.events = list(events or [])
        self.error_message = error_message
        self.selected_event = None
        self.refresh_calls = 0
        self._placeholder_id = placeholder_id
        self.placeholder_titles: list[str] = []

    def refresh(self) -> None:
        self.refresh_calls += 1

    def select(self, event_id) -> bool:
        for event in self.events:
            if event.id == event_id:
                self.selected_event = event
                return True
        return False

    def create_all_day_placeholder(self, title: str):
        self.placeholder_titles.append(title)
        return self._placeholder_id


class _TickSourceStub:
    def start(self, callback) -> None:
        pass

    def stop(self) -> None:
        pass


class _InlineExecutor(Executor):
    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


class _CoordinatorStub:
    def __init__(self):
        self.requests: list[SyncRequest] = []

    def sync(self, request: SyncRequest) -> SyncResult:
        self.requests.append(request)
        return SyncResult(action="converted", event_id=request.event_id)


class _ComponentsStub:
    def __init__(self, auth=None, selection=None):
        self.auth = auth or _AuthStub()
        self.selection = selection or _SelectionStub()
        self.coordinator = _CoordinatorStub()
        self.engine: Optional[TimerEngine] = None
        self.closed = False

    def build_engine(self, *, notifier=None, sync=True, logger=None) -> TimerEngine:
        self.engine = TimerEngine(
            sync_coordinator=self.coordinator if sync else None,
            notifier=notifier,
            tick_source=_TickSourceStub(),
            sync_executor=_InlineExecutor(),
        )
        return self.engine

    def close(self) -> None:
        self.closed = True


def _all_day_event(event_id: str, title: str) -> CalendarEventSummary:
    start = dt.datetime(2026, 3, 2).astimezone()
    return CalendarEventSummary(
        id=event_id,
        title=title,
        start=start,
        end=start + dt.timedelta(days=1),
        is_all_day=True,
    )


def _run(argv, components):
    output = io.StringIO()
    with patch("main.setup_logging"), patch("main.load_app_config"), patch(
        "main.load_secret_config"
    ), patch("main.build_runtime", return_value=components), contextlib.redirect_stdout(output):
        exit_code = main.main(argv)
    return exit_code, output.getvalue()


class CliCommandTests(unittest.TestCase):
    def test_parser_requires_a_command(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            main.build_parser().parse_args([])

    def test_focus_flags(self) -> None:
        args = main.build_parser().parse_args(
            ["focus", "--title", "Deep work", "--event-id", "evt-1", "--all-day", "--mode", "plain", "--no-sync"]
        )

        self.assertEqual("Deep work", args.title)
        self.assertEqual("evt-1", args.event_id)
        self.assertTrue(args.all_day)
        self.assertEqual("plain", args.mode)
        self.assertTrue(args.no_sync)

    def test_status_prints_sign_in_state(self) -> None:
        components = _ComponentsStub()

        exit_code, output = _run(["status"], components)

        self.assertEqual(0, exit_code)
        self.assertIn("Google Calendar: signed in", output)
        self.assertTrue(components.closed)

    def test_signout_clears_credential(self) -> None:
        components = _ComponentsStub()

        exit_code, output = _run(["signout"], components)

        self.assertEqual(0, exit_code)
        self.assertTrue(components.auth.signed_out)
        self.assertIn("Signed out.", output)

    def test_signin_cancel_is_reported(self) -> None:
        components = _ComponentsStub(auth=_AuthStub(UserCanceled("Sign-in canceled")))

        exit_code, output = _run(["signin"], components)

        self.assertEqual(1, exit_code)
        self.assertIn("Sign-in canceled", output)

    def test_signin_interrupt_cancels_presenter(self) -> None:
        components = _ComponentsStub(auth=_AuthStub(KeyboardInterrupt()))

        exit_code, _ = _run(["signin"], components)

        self.assertEqual(1, exit_code)
        self.assertTrue(components.auth.canceled)

    def test_placeholder_success_and_failure(self) -> None:
        created = _ComponentsStub(selection=_SelectionStub(placeholder_id="evt-9"))
        exit_code, output = _run(["placeholder", "--title", "Deep work"], created)
        self.assertEqual(0, exit_code)
        self.assertIn("Created all-day placeholder evt-9", output)
        self.assertEqual(["Deep work"], created.selection.placeholder_titles)

        failed = _ComponentsStub(selection=_SelectionStub(error_message="Calendar API error (403): Forbidden"))
        exit_code, output = _run(["placeholder", "--title", "Deep work"], failed)
        self.assertEqual(1, exit_code)
        self.assertIn("Forbidden", output)

    def test_events_reports_load_failure(self) -> None:
        components = _ComponentsStub(selection=_SelectionStub(error_message="Not authenticated"))

        exit_code, output = _run(["events"], components)

        self.assertEqual(1, exit_code)
        self.assertIn("Could not load events: Not authenticated", output)

    def test_focus_with_title_still_converts_bound_all_day_event(self) -> None:
        selection = _SelectionStub(events=[_all_day_event("ph1", "Placeholder")])
        components = _ComponentsStub(selection=selection)

        def commands() -> Iterator[str]:
            if components.engine is not None:
                components.engine.tick()
            yield "s"

        with patch("main.sys.stdin", commands()):
            exit_code, output = _run(
                ["focus", "--event-id", "ph1", "--title", "Write"],
                components,
            )

        self.assertEqual(0, exit_code)
        self.assertEqual(1, selection.refresh_calls)
        request = components.coordinator.requests[0]
        self.assertEqual("ph1", request.event_id)
        self.assertEqual("Write", request.title)
        self.assertTrue(request.event_is_all_day)
        self.assertIn("Calendar converted: ph1", output)

    def test_focus_takes_title_from_bound_event_when_missing(self) -> None:
        selection = _SelectionStub(events=[_all_day_event("ph1", "Placeholder")])
        components = _ComponentsStub(selection=selection)

        def commands() -> Iterator[str]:
            if components.engine is not None:
                components.engine.tick()
            yield "s"

        with patch("main.sys.stdin", commands()):
            exit_code, _ = _run(["focus", "--event-id", "ph1"], components)

        self.assertEqual(0, exit_code)
        self.assertEqual("Placeholder", components.coordinator.requests[0].title)

    def test_configuration_error_exits_with_one(self) -> None:
        with patch("main.setup_logging"), patch(
            "main.load_app_config", side_effect=AppConfigurationError("bad")
        ), patch("main.build_runtime") as build_runtime:
            exit_code = main.main(["status"])

        self.assertEqual(1, exit_code)
        build_runtime.assert_not_called()


if __name__ == "__main__":
    unittest.main()
