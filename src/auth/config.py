from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"
CALENDAR_EVENTS_SCOPE = "https://www.googleapis.com/auth/calendar.events"
DEFAULT_SCOPES: tuple[str, ...] = (CALENDAR_READONLY_SCOPE, CALENDAR_EVENTS_SCOPE)


@dataclass(frozen=True)
class OAuthConfig:
    client_id: str
    redirect_uri: str
    client_secret: Optional[str] = None
    scopes: tuple[str, ...] = DEFAULT_SCOPES
    authorization_endpoint: str = AUTHORIZATION_ENDPOINT
    token_endpoint: str = TOKEN_ENDPOINT
    request_timeout_seconds: float = 30.0

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id.strip() and self.redirect_uri.strip())

    @classmethod
    def from_settings(
        cls,
        settings,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> "OAuthConfig":
        return cls(
            client_id=(client_id or "").strip(),
            redirect_uri=str(settings.redirect_uri).strip(),
            client_secret=(client_secret or "").strip() or None,
        )
