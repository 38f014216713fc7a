"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Session timing values loaded from `[timer]`."""
    mode: str = "pomodoro"
    work_minutes: int = 25
    break_minutes: int = 5


@dataclass(frozen=True)
class NotificationSettings:
    """Phase-boundary notification switches from `[notifications]`."""
    enabled: bool = True
    work_end: bool = True
    break_end: bool = False


@dataclass(frozen=True)
class CalendarSettings:
    """Google Calendar target settings from `[calendar]`."""
    calendar_id: str = "primary"
    max_results: int = 50


@dataclass(frozen=True)
class AuthSettings:
    """OAuth redirect and credential storage settings from `[auth]`."""
    redirect_uri: str = "http://127.0.0.1:8765/oauth2redirect"
    token_store: str = "keyring"
    token_file: str = ""
    keyring_service: str = "pomodoro-calendar"
    authorization_timeout_seconds: float = 300.0


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    notifications: NotificationSettings
    calendar: CalendarSettings
    auth: AuthSettings
    source_file: str


@dataclass(frozen=True)
class SecretConfig:
    """Environment-provided secrets kept out of `config.toml`."""
    google_client_id: str
    google_client_secret: Optional[str]
