"""Builds the auth, calendar, and timer components from typed configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from app_config_schema import AppConfig, AuthSettings, SecretConfig
from auth import (
    AuthorizationPresenterLike,
    AuthTokenManager,
    FileSecretStore,
    KeyringSecretStore,
    LoopbackAuthorizationPresenter,
    MemorySecretStore,
    OAuthConfig,
    SecretStoreLike,
    TokenStore,
)
from gcal import CalendarSyncCoordinator, EventSelection, GoogleCalendarGateway
from pomodoro import NotificationSinkLike, TimerEngine, TimerPreferences

DEFAULT_TOKEN_DIRECTORY = "~/.config/pomodoro-calendar"


@dataclass(frozen=True)
class RuntimeComponents:
    """Dependency bundle shared by the CLI commands."""
    app_config: AppConfig
    auth: AuthTokenManager
    gateway: GoogleCalendarGateway
    coordinator: CalendarSyncCoordinator
    selection: EventSelection

    def build_engine(
        self,
        *,
        notifier: Optional[NotificationSinkLike] = None,
        sync: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> TimerEngine:
        return TimerEngine(
            preferences=TimerPreferences.from_config(self.app_config),
            mode=self.app_config.timer.mode,
            sync_coordinator=self.coordinator if sync else None,
            notifier=notifier,
            logger=logger or logging.getLogger("pomodoro"),
        )

    def close(self) -> None:
        self.auth.close()


def build_secret_store(settings: AuthSettings) -> SecretStoreLike:
    if settings.token_store == "memory":
        return MemorySecretStore()
    if settings.token_store == "file":
        directory = settings.token_file or DEFAULT_TOKEN_DIRECTORY
        return FileSecretStore(
            Path(directory).expanduser(),
            logger=logging.getLogger("auth.secrets"),
        )
    return KeyringSecretStore(
        service_name=settings.keyring_service,
        logger=logging.getLogger("auth.secrets"),
    )


def build_runtime(
    app_config: AppConfig,
    secret_config: SecretConfig,
    *,
    presenter: Optional[AuthorizationPresenterLike] = None,
    secret_store: Optional[SecretStoreLike] = None,
    calendar_api: Any = None,
) -> RuntimeComponents:
    """Wire the component graph leaf-first, sharing one credential owner."""
    oauth_config = OAuthConfig.from_settings(
        app_config.auth,
        client_id=secret_config.google_client_id,
        client_secret=secret_config.google_client_secret,
    )
    store = secret_store or build_secret_store(app_config.auth)
    token_store = TokenStore(store, logger=logging.getLogger("auth.token_store"))
    auth_manager = AuthTokenManager(
        oauth_config,
        token_store,
        presenter
        or LoopbackAuthorizationPresenter(
            timeout_seconds=app_config.auth.authorization_timeout_seconds,
            logger=logging.getLogger("auth.presenter"),
        ),
        logger=logging.getLogger("auth"),
    )
    gateway = GoogleCalendarGateway(
        auth_manager,
        calendar_id=app_config.calendar.calendar_id,
        max_results=app_config.calendar.max_results,
        api=calendar_api,
        logger=logging.getLogger("gcal"),
    )
    coordinator = CalendarSyncCoordinator(gateway, logger=logging.getLogger("gcal.sync"))
    selection = EventSelection(gateway, logger=logging.getLogger("gcal.selection"))
    return RuntimeComponents(
        app_config=app_config,
        auth=auth_manager,
        gateway=gateway,
        coordinator=coordinator,
        selection=selection,
    )
