"""Display helpers for timer snapshots."""

from __future__ import annotations

from .constants import MODE_PLAIN, PHASE_REST, STATE_IDLE, STATE_PAUSED
from .engine import TimerSnapshot


def format_clock(seconds: int) -> str:
    """Render `MM:SS`, or `H:MM:SS` once the value reaches one hour."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def status_text(snapshot: TimerSnapshot) -> str:
    if snapshot.run_state == STATE_IDLE:
        return "Ready to time" if snapshot.mode == MODE_PLAIN else "Ready to focus"
    if snapshot.run_state == STATE_PAUSED:
        return "Paused"
    if snapshot.mode == MODE_PLAIN:
        return "Timing"
    return "Break" if snapshot.phase == PHASE_REST else "Focusing"
