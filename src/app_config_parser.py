"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    AuthSettings,
    CalendarSettings,
    NotificationSettings,
    TimerSettings,
)

_ALLOWED_TIMER_MODES = {"pomodoro", "plain"}
_ALLOWED_TOKEN_STORES = {"keyring", "file", "memory"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    timer = _parse_timer_settings(_section(raw, "timer"))
    notifications = _parse_notification_settings(_section(raw, "notifications"))
    calendar = _parse_calendar_settings(_section(raw, "calendar"))
    auth = _parse_auth_settings(_section(raw, "auth"), base_dir=base_dir)

    return AppConfig(
        timer=timer,
        notifications=notifications,
        calendar=calendar,
        auth=auth,
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    work_minutes = _as_int(section.get("work_minutes", 25), "timer.work_minutes")
    if work_minutes < 1:
        raise AppConfigurationError("timer.work_minutes must be >= 1.")
    break_minutes = _as_int(section.get("break_minutes", 5), "timer.break_minutes")
    if break_minutes < 0:
        raise AppConfigurationError("timer.break_minutes must be >= 0.")
    return TimerSettings(
        mode=_as_choice(
            section.get("mode", "pomodoro"),
            "timer.mode",
            _ALLOWED_TIMER_MODES,
        ),
        work_minutes=work_minutes,
        break_minutes=break_minutes,
    )


def _parse_notification_settings(section: Mapping[str, Any]) -> NotificationSettings:
    return NotificationSettings(
        enabled=_as_bool(section.get("enabled", True), "notifications.enabled"),
        work_end=_as_bool(section.get("work_end", True), "notifications.work_end"),
        break_end=_as_bool(
            section.get("break_end", False),
            "notifications.break_end",
        ),
    )


def _parse_calendar_settings(section: Mapping[str, Any]) -> CalendarSettings:
    max_results = _as_int(section.get("max_results", 50), "calendar.max_results")
    if max_results < 1:
        raise AppConfigurationError("calendar.max_results must be >= 1.")
    return CalendarSettings(
        calendar_id=(
            _as_str(section.get("calendar_id", "primary"), "calendar.calendar_id")
            or "primary"
        ),
        max_results=max_results,
    )


def _parse_auth_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> AuthSettings:
    _forbid_secret_fields(section, "auth", ("client_id", "client_secret"))
    token_file = _as_str(section.get("token_file", ""), "auth.token_file")
    timeout = _as_float(
        section.get("authorization_timeout_seconds", 300.0),
        "auth.authorization_timeout_seconds",
    )
    if timeout <= 0:
        raise AppConfigurationError("auth.authorization_timeout_seconds must be > 0.")
    return AuthSettings(
        redirect_uri=_as_str(
            section.get("redirect_uri", "http://127.0.0.1:8765/oauth2redirect"),
            "auth.redirect_uri",
        ),
        token_store=_as_choice(
            section.get("token_store", "keyring"),
            "auth.token_store",
            _ALLOWED_TOKEN_STORES,
        ),
        token_file=_resolve_path(base_dir, token_file) if token_file else "",
        keyring_service=(
            _as_str(
                section.get("keyring_service", "pomodoro-calendar"),
                "auth.keyring_service",
            )
            or "pomodoro-calendar"
        ),
        authorization_timeout_seconds=timeout,
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_choice(value: Any, field: str, allowed: set[str]) -> str:
    name = _as_str(value, field).lower()
    if name not in allowed:
        joined = ", ".join(sorted(allowed))
        raise AppConfigurationError(f"{field} must be one of: {joined}.")
    return name


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


def _forbid_secret_fields(
    section: Mapping[str, Any],
    section_name: str,
    fields: tuple[str, ...],
) -> None:
    present = [field for field in fields if field in section]
    if present:
        joined = ", ".join(f"{section_name}.{field}" for field in present)
        raise AppConfigurationError(
            f"Secret values must not be stored in config.toml: {joined}. "
            "Move them to environment variables."
        )
