import argparse
import logging
import sys
from typing import Optional, Sequence

from app_config import (
    AppConfigurationError,
    load_app_config,
    load_secret_config,
    resolve_config_path,
)
from auth import AuthError, UserCanceled
from gcal import CalendarError
from pomodoro import MODE_PLAIN, MODE_POMODORO, format_clock
from runtime import FocusConsole, LoggingNotificationSink, RuntimeComponents, build_runtime


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_calendar")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pomodoro-calendar",
        description="Focus timer that mirrors finished sessions onto Google Calendar",
    )
    parser.add_argument("--config", help="Path to config.toml (default: $APP_CONFIG_FILE or ./config.toml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("signin", help="Sign in with Google in the browser")
    subparsers.add_parser("signout", help="Forget the stored Google credential")
    subparsers.add_parser("status", help="Show sign-in status")
    subparsers.add_parser("events", help="List today's calendar events")

    placeholder_parser = subparsers.add_parser(
        "placeholder",
        help="Create an all-day placeholder event for today",
    )
    placeholder_parser.add_argument("--title", required=True, help="Placeholder title")

    focus_parser = subparsers.add_parser("focus", help="Run a focus session and sync it on stop")
    focus_parser.add_argument("--title", default="", help="Task title")
    focus_parser.add_argument("--event-id", help="Calendar event to update instead of creating one")
    focus_parser.add_argument(
        "--all-day",
        action="store_true",
        help="The bound event is an all-day placeholder to convert",
    )
    focus_parser.add_argument("--mode", choices=(MODE_POMODORO, MODE_PLAIN), help="Override timer mode")
    focus_parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Run the timer without touching the calendar",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one CLI command and return the process exit code."""
    args = build_parser().parse_args(argv)
    logger = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config_path = resolve_config_path(args.config)
        app_config = load_app_config(args.config)
        secret_config = load_secret_config()
        logger.info("Loaded runtime config: %s", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    try:
        components = build_runtime(app_config, secret_config)
    except (AuthError, CalendarError) as error:
        logger.error("Startup failed: %s", error)
        return 1

    try:
        return _run_command(args, components, logger)
    except (AuthError, CalendarError) as error:
        logger.error("%s failed: %s", args.command, error)
        return 1
    finally:
        components.close()


def _run_command(
    args: argparse.Namespace,
    components: RuntimeComponents,
    logger: logging.Logger,
) -> int:
    if args.command == "signin":
        return _sign_in(components, logger)

    if args.command == "signout":
        components.auth.sign_out()
        print("Signed out.")
        return 0

    if args.command == "status":
        print(f"Google Calendar: {components.auth.status.replace('_', ' ')}")
        return 0

    if args.command == "events":
        return _list_events(components)

    if args.command == "placeholder":
        event_id = components.selection.create_all_day_placeholder(args.title)
        if event_id is None:
            print(f"Could not create placeholder: {components.selection.error_message}")
            return 1
        print(f"Created all-day placeholder {event_id}")
        return 0

    if args.command == "focus":
        return _focus(args, components)

    logger.error("Unknown command: %s", args.command)
    return 1


def _sign_in(components: RuntimeComponents, logger: logging.Logger) -> int:
    try:
        components.auth.sign_in()
    except KeyboardInterrupt:
        components.auth.cancel_sign_in()
        print("\nSign-in canceled.")
        return 1
    except UserCanceled as error:
        print(str(error))
        return 1
    logger.info("Signed in to Google Calendar")
    print("Signed in.")
    return 0


def _list_events(components: RuntimeComponents) -> int:
    selection = components.selection
    selection.refresh()
    if selection.error_message:
        print(f"Could not load events: {selection.error_message}")
        return 1
    if not selection.events:
        print("No events today.")
        return 0
    for event in selection.events:
        if event.is_all_day:
            when = "all day"
        else:
            when = f"{event.start:%H:%M}-{event.end:%H:%M}"
        print(f"{when:>11}  {event.title}  [{event.id}]")
    return 0


def _focus(args: argparse.Namespace, components: RuntimeComponents) -> int:
    notifier = LoggingNotificationSink(
        echo=lambda notification: print(f"\n*** {notification.title}: {notification.body}"),
        logger=logging.getLogger("runtime.notifications"),
    )
    engine = components.build_engine(notifier=notifier, sync=not args.no_sync)
    if args.mode:
        engine.set_mode(args.mode)

    title = args.title
    event_is_all_day = bool(args.all_day)
    if args.event_id:
        selection = components.selection
        selection.refresh()
        selected = selection.selected_event if selection.select(args.event_id) else None
        if selected is not None:
            event_is_all_day = event_is_all_day or selected.is_all_day
            if not title:
                title = selected.title

    console = FocusConsole(engine, logger=logging.getLogger("runtime.console"))
    print(f"Work {format_clock(engine.preferences.work_minutes * 60)}, mode {engine.snapshot().mode}")
    try:
        return console.run(
            sys.stdin,
            title=title,
            event_id=args.event_id,
            event_is_all_day=event_is_all_day,
        )
    except KeyboardInterrupt:
        print()
        return 0
    finally:
        engine.close()


if __name__ == "__main__":
    sys.exit(main())
