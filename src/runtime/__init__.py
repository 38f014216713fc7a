"""Runtime wiring exports."""

from .bootstrap import RuntimeComponents, build_runtime, build_secret_store
from .console import FocusConsole
from .notifications import LoggingNotificationSink, Notification

__all__ = [
    "FocusConsole",
    "LoggingNotificationSink",
    "Notification",
    "RuntimeComponents",
    "build_runtime",
    "build_secret_store",
]
