"""Thread-safe work/rest session state machine driven by one-second ticks."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from app_config_schema import AppConfig
from gcal.models import SYNC_FAILED, SyncRequest, SyncResult

from .constants import (
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_SET_MODE,
    ACTION_START,
    ACTION_STOP,
    ACTIVE_STATES,
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    MODE_PLAIN,
    MODE_POMODORO,
    PHASE_REST,
    PHASE_WORK,
    REASON_ALREADY_ACTIVE,
    REASON_INVALID_MODE,
    REASON_MODE_CHANGED,
    REASON_NOT_ACTIVE,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_STOPPED,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
    TIMER_MODES,
    UNTITLED_TASK,
)
from .contracts import NotificationSinkLike, SyncCoordinatorLike, TickSourceLike
from .ticks import TickSource

TimerMode = Literal["pomodoro", "plain"]
TimerPhase = Literal["work", "rest"]
RunState = Literal["idle", "running", "paused"]
TimerAction = Literal["start", "pause", "resume", "stop", "set_mode"]
SnapshotListener = Callable[["TimerSnapshot"], None]


@dataclass(frozen=True)
class TimerPreferences:
    """User-adjustable durations and notification switches."""
    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    notifications_enabled: bool = True
    work_end_notifications: bool = True
    break_end_notifications: bool = False

    def __post_init__(self) -> None:
        if self.work_minutes < 1:
            raise ValueError("work_minutes must be >= 1")
        if self.break_minutes < 0:
            raise ValueError("break_minutes must be >= 0")

    @classmethod
    def from_config(cls, config: AppConfig) -> "TimerPreferences":
        return cls(
            work_minutes=config.timer.work_minutes,
            break_minutes=config.timer.break_minutes,
            notifications_enabled=config.notifications.enabled,
            work_end_notifications=config.notifications.work_end,
            break_end_notifications=config.notifications.break_end,
        )


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable session view broadcast to listeners."""
    mode: TimerMode
    phase: TimerPhase
    run_state: RunState
    title: str
    elapsed_seconds: int
    work_seconds: int
    duration_seconds: int
    display_seconds: int
    event_id: Optional[str]
    event_is_all_day: bool
    started_at: Optional[dt.datetime]
    sync_message: Optional[str]

    @property
    def is_active(self) -> bool:
        return self.run_state in ACTIVE_STATES


@dataclass(frozen=True)
class TimerActionResult:
    """Result envelope returned after applying a timer action."""
    action: TimerAction
    accepted: bool
    reason: str
    snapshot: TimerSnapshot
    sync_request: Optional[SyncRequest] = None


class TimerEngine:
    """Work/rest session machine; time only advances through `tick()`.

    Automatic phase transitions never touch the calendar. Only `stop()`
    produces a `SyncRequest`, which is handed to the coordinator on a
    background executor after the machine is already idle.
    """

    def __init__(
        self,
        *,
        preferences: Optional[TimerPreferences] = None,
        mode: str = MODE_POMODORO,
        sync_coordinator: Optional[SyncCoordinatorLike] = None,
        notifier: Optional[NotificationSinkLike] = None,
        tick_source: Optional[TickSourceLike] = None,
        sync_executor: Optional[Executor] = None,
        now_fn: Optional[Callable[[], dt.datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if mode not in TIMER_MODES:
            raise ValueError(f"Unsupported timer mode: {mode}")

        self._preferences = preferences or TimerPreferences()
        self._coordinator = sync_coordinator
        self._notifier = notifier
        self._logger = logger or logging.getLogger("pomodoro")
        self._tick_source = tick_source or TickSource(logger=self._logger.getChild("ticks"))
        self._sync_executor = sync_executor
        self._owns_executor = sync_executor is None
        self._now = now_fn or (lambda: dt.datetime.now().astimezone())
        self._lock = threading.Lock()
        self._listeners: list[SnapshotListener] = []
        self._pending_syncs: list[Future] = []

        self._mode: TimerMode = mode  # type: ignore[assignment]
        self._phase: TimerPhase = PHASE_WORK
        self._run_state: RunState = STATE_IDLE
        self._title = ""
        self._elapsed_seconds = 0
        self._work_seconds = 0
        self._duration_seconds = 0
        self._event_id: Optional[str] = None
        self._event_is_all_day = False
        self._started_at: Optional[dt.datetime] = None
        self._sync_message: Optional[str] = None
        self._last_sync_result: Optional[SyncResult] = None
        self._tick_generation = 0

    @property
    def preferences(self) -> TimerPreferences:
        with self._lock:
            return self._preferences

    @property
    def last_sync_result(self) -> Optional[SyncResult]:
        with self._lock:
            return self._last_sync_result

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def add_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def update_preferences(self, preferences: TimerPreferences) -> None:
        with self._lock:
            self._preferences = preferences
            snapshot = self._snapshot_locked()
        self._logger.info(
            "Timer preferences updated: work=%smin break=%smin",
            preferences.work_minutes,
            preferences.break_minutes,
        )
        self._broadcast(snapshot)

    def set_mode(self, mode: str) -> TimerActionResult:
        with self._lock:
            if mode not in TIMER_MODES:
                return self._result_locked(ACTION_SET_MODE, False, REASON_INVALID_MODE)
            if self._run_state != STATE_IDLE:
                return self._result_locked(ACTION_SET_MODE, False, REASON_ALREADY_ACTIVE)
            self._mode = mode  # type: ignore[assignment]
            result = self._result_locked(ACTION_SET_MODE, True, REASON_MODE_CHANGED)

        self._logger.info("Timer mode set: %s", mode)
        self._broadcast(result.snapshot)
        return result

    def start(
        self,
        title: str = "",
        *,
        event_id: Optional[str] = None,
        event_is_all_day: bool = False,
    ) -> TimerActionResult:
        with self._lock:
            if self._run_state != STATE_IDLE:
                return self._result_locked(ACTION_START, False, REASON_ALREADY_ACTIVE)

            self._title = _sanitize_title(title)
            self._event_id = event_id or None
            self._event_is_all_day = bool(event_is_all_day) and self._event_id is not None
            self._started_at = self._now()
            self._work_seconds = 0
            self._sync_message = None
            self._begin_phase_locked(PHASE_WORK)
            self._run_state = STATE_RUNNING
            self._start_ticks_locked()
            result = self._result_locked(ACTION_START, True, REASON_STARTED)

        self._logger.info(
            "Session started: mode=%s title=%s event=%s duration=%ss",
            result.snapshot.mode,
            result.snapshot.title,
            result.snapshot.event_id,
            result.snapshot.duration_seconds,
        )
        self._broadcast(result.snapshot)
        return result

    def pause(self) -> TimerActionResult:
        with self._lock:
            if self._run_state != STATE_RUNNING:
                return self._result_locked(ACTION_PAUSE, False, REASON_NOT_RUNNING)
            self._run_state = STATE_PAUSED
            self._tick_source.stop()
            result = self._result_locked(ACTION_PAUSE, True, REASON_PAUSED)

        self._logger.info("Session paused: elapsed=%ss", result.snapshot.elapsed_seconds)
        self._broadcast(result.snapshot)
        return result

    def resume(self) -> TimerActionResult:
        with self._lock:
            if self._run_state != STATE_PAUSED:
                return self._result_locked(ACTION_RESUME, False, REASON_NOT_PAUSED)
            self._run_state = STATE_RUNNING
            self._start_ticks_locked()
            result = self._result_locked(ACTION_RESUME, True, REASON_RESUMED)

        self._logger.info("Session resumed")
        self._broadcast(result.snapshot)
        return result

    def stop(self) -> TimerActionResult:
        with self._lock:
            if self._run_state not in ACTIVE_STATES:
                return self._result_locked(ACTION_STOP, False, REASON_NOT_ACTIVE)

            if self._mode == MODE_PLAIN or self._phase == PHASE_WORK:
                self._work_seconds += self._elapsed_seconds
            request = self._sync_request_locked()
            work_seconds = self._work_seconds
            self._tick_source.stop()
            self._reset_locked()
            result = self._result_locked(
                ACTION_STOP,
                True,
                REASON_STOPPED,
                sync_request=request,
            )

        self._logger.info("Session stopped: work=%ss", work_seconds)
        if request is not None:
            self._dispatch_sync(request)
        self._broadcast(result.snapshot)
        return result

    def tick(self) -> Optional[TimerSnapshot]:
        """Advance one second; ignored unless the session is running."""
        return self._advance(None)

    def _advance(self, generation: Optional[int]) -> Optional[TimerSnapshot]:
        effects: list[Callable[[], None]] = []
        with self._lock:
            if self._run_state != STATE_RUNNING:
                return None
            if generation is not None and generation != self._tick_generation:
                self._logger.debug("Ignoring tick from a replaced stream")
                return None

            self._elapsed_seconds += 1
            if (
                self._mode == MODE_POMODORO
                and self._duration_seconds > 0
                and self._elapsed_seconds >= self._duration_seconds
            ):
                if self._phase == PHASE_WORK:
                    effects = self._complete_work_phase_locked()
                else:
                    effects = self._complete_rest_phase_locked()
            snapshot = self._snapshot_locked()

        for effect in effects:
            effect()
        self._broadcast(snapshot)
        return snapshot

    def wait_for_sync(self, timeout: Optional[float] = None) -> Optional[SyncResult]:
        """Block until dispatched calendar syncs finish; returns the last result."""
        with self._lock:
            pending = list(self._pending_syncs)
        for future in pending:
            future.exception(timeout=timeout)
        return self.last_sync_result

    def close(self) -> None:
        self._tick_source.stop()
        if self._owns_executor and self._sync_executor is not None:
            self._sync_executor.shutdown(wait=True)

    def _complete_work_phase_locked(self) -> list[Callable[[], None]]:
        self._work_seconds += self._elapsed_seconds
        effects: list[Callable[[], None]] = []
        prefs = self._preferences
        if prefs.notifications_enabled and prefs.work_end_notifications:
            title = self._title
            effects.append(lambda: self._notify(lambda sink: sink.notify_work_ended(title)))

        if prefs.break_minutes > 0:
            self._begin_phase_locked(PHASE_REST)
        else:
            self._begin_phase_locked(PHASE_WORK)
        self._logger.info(
            "Work phase complete: work=%ss next=%s",
            self._work_seconds,
            self._phase,
        )
        return effects

    def _complete_rest_phase_locked(self) -> list[Callable[[], None]]:
        effects: list[Callable[[], None]] = []
        prefs = self._preferences
        if prefs.notifications_enabled and prefs.break_end_notifications:
            effects.append(lambda: self._notify(lambda sink: sink.notify_break_ended()))

        self._begin_phase_locked(PHASE_WORK)
        self._logger.info("Rest phase complete")
        return effects

    def _start_ticks_locked(self) -> None:
        self._tick_generation += 1
        generation = self._tick_generation
        self._tick_source.start(lambda: self._advance(generation))

    def _begin_phase_locked(self, phase: TimerPhase) -> None:
        self._phase = phase
        self._elapsed_seconds = 0
        if self._mode == MODE_PLAIN:
            self._duration_seconds = 0
        elif phase == PHASE_WORK:
            self._duration_seconds = self._preferences.work_minutes * 60
        else:
            self._duration_seconds = self._preferences.break_minutes * 60

    def _reset_locked(self) -> None:
        self._run_state = STATE_IDLE
        self._phase = PHASE_WORK
        self._title = ""
        self._elapsed_seconds = 0
        self._work_seconds = 0
        self._duration_seconds = 0
        self._event_id = None
        self._event_is_all_day = False
        self._started_at = None

    def _sync_request_locked(self) -> Optional[SyncRequest]:
        if self._work_seconds <= 0 or self._started_at is None:
            return None
        return SyncRequest(
            event_id=self._event_id,
            title=self._title,
            start=self._started_at,
            end=self._started_at + dt.timedelta(seconds=self._work_seconds),
            event_is_all_day=self._event_is_all_day,
        )

    def _dispatch_sync(self, request: SyncRequest) -> None:
        if self._coordinator is None:
            self._logger.debug("No calendar sync coordinator configured; skipping sync")
            return

        with self._lock:
            if self._sync_executor is None:
                self._sync_executor = ThreadPoolExecutor(
                    max_workers=1,
                    thread_name_prefix="calendar-sync",
                )
            executor = self._sync_executor

        future = executor.submit(self._run_sync, self._coordinator, request)
        with self._lock:
            self._pending_syncs = [item for item in self._pending_syncs if not item.done()]
            self._pending_syncs.append(future)

    def _run_sync(self, coordinator: SyncCoordinatorLike, request: SyncRequest) -> None:
        try:
            result = coordinator.sync(request)
        except Exception as error:
            self._logger.error("Calendar sync crashed: %s", error, exc_info=True)
            result = SyncResult(action=SYNC_FAILED, error=str(error) or error.__class__.__name__)

        with self._lock:
            self._last_sync_result = result
            self._sync_message = result.error
            snapshot = self._snapshot_locked()

        if result.error:
            self._logger.warning("Calendar sync failed: %s", result.error)
        else:
            self._logger.info("Calendar sync finished: action=%s event=%s", result.action, result.event_id)
        self._broadcast(snapshot)

    def _notify(self, deliver: Callable[[NotificationSinkLike], None]) -> None:
        if self._notifier is None:
            return
        try:
            deliver(self._notifier)
        except Exception as error:
            self._logger.warning("Notification delivery failed: %s", error)

    def _broadcast(self, snapshot: TimerSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as error:
                self._logger.warning("Timer listener failed: %s", error, exc_info=True)

    def _result_locked(
        self,
        action: TimerAction,
        accepted: bool,
        reason: str,
        *,
        sync_request: Optional[SyncRequest] = None,
    ) -> TimerActionResult:
        return TimerActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(),
            sync_request=sync_request,
        )

    def _snapshot_locked(self) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            phase=self._phase,
            run_state=self._run_state,
            title=self._title,
            elapsed_seconds=self._elapsed_seconds,
            work_seconds=self._work_seconds,
            duration_seconds=self._duration_seconds,
            display_seconds=self._display_seconds_locked(),
            event_id=self._event_id,
            event_is_all_day=self._event_is_all_day,
            started_at=self._started_at,
            sync_message=self._sync_message,
        )

    def _display_seconds_locked(self) -> int:
        if self._mode == MODE_PLAIN:
            return self._elapsed_seconds
        if self._run_state == STATE_IDLE:
            return self._preferences.work_minutes * 60
        return max(0, self._duration_seconds - self._elapsed_seconds)


def _sanitize_title(title: Optional[str]) -> str:
    compact = " ".join((title or "").split())
    return compact or UNTITLED_TASK
