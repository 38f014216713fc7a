"""Mode, phase, state, action, and reason constants used by the timer engine."""

from __future__ import annotations

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
UNTITLED_TASK = "Untitled Task"

MODE_POMODORO = "pomodoro"
MODE_PLAIN = "plain"

TIMER_MODES: frozenset[str] = frozenset({MODE_POMODORO, MODE_PLAIN})

PHASE_WORK = "work"
PHASE_REST = "rest"

STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"

ACTIVE_STATES: frozenset[str] = frozenset({STATE_RUNNING, STATE_PAUSED})

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_STOP = "stop"
ACTION_SET_MODE = "set_mode"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_STOPPED = "stopped"
REASON_MODE_CHANGED = "mode_changed"
REASON_ALREADY_ACTIVE = "already_active"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ACTIVE = "not_active"
REASON_INVALID_MODE = "invalid_mode"
