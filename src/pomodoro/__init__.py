from .constants import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    MODE_PLAIN,
    MODE_POMODORO,
    PHASE_REST,
    PHASE_WORK,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
    UNTITLED_TASK,
)
from .contracts import NotificationSinkLike, SyncCoordinatorLike, TickSourceLike
from .engine import (
    RunState,
    TimerAction,
    TimerActionResult,
    TimerEngine,
    TimerMode,
    TimerPhase,
    TimerPreferences,
    TimerSnapshot,
)
from .formatting import format_clock, status_text
from .ticks import TickSource

__all__ = [
    "DEFAULT_BREAK_MINUTES",
    "DEFAULT_WORK_MINUTES",
    "MODE_PLAIN",
    "MODE_POMODORO",
    "NotificationSinkLike",
    "PHASE_REST",
    "PHASE_WORK",
    "RunState",
    "STATE_IDLE",
    "STATE_PAUSED",
    "STATE_RUNNING",
    "SyncCoordinatorLike",
    "TickSource",
    "TickSourceLike",
    "TimerAction",
    "TimerActionResult",
    "TimerEngine",
    "TimerMode",
    "TimerPhase",
    "TimerPreferences",
    "TimerSnapshot",
    "UNTITLED_TASK",
    "format_clock",
    "status_text",
]
