"""Credential value types owned by the token manager."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Literal, Optional

AuthStatus = Literal["signed_out", "signed_in"]

STATUS_SIGNED_OUT = "signed_out"
STATUS_SIGNED_IN = "signed_in"

# Tokens are treated as expired this many seconds before the server says so.
EXPIRY_SAFETY_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class Credential:
    """Immutable OAuth credential; replaced wholesale, never mutated."""
    access_token: str
    refresh_token: Optional[str]
    expires_at: dt.datetime

    def __post_init__(self) -> None:
        if not self.access_token:
            raise ValueError("access_token cannot be empty")
        if self.expires_at.tzinfo is None:
            raise ValueError("expires_at must include timezone information")

    def is_valid_at(self, now: dt.datetime) -> bool:
        return self.expires_at > now

    def to_payload(self) -> dict[str, Optional[str]]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.astimezone(dt.timezone.utc).isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> "Credential":
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_at = payload.get("expires_at")
        if not isinstance(access_token, str) or not isinstance(expires_at, str):
            raise ValueError("credential record is missing required fields")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise ValueError("refresh_token must be a string")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token or None,
            expires_at=dt.datetime.fromisoformat(expires_at),
        )

    @classmethod
    def from_token_response(
        cls,
        payload: dict,
        *,
        now: dt.datetime,
        fallback_refresh_token: Optional[str] = None,
    ) -> "Credential":
        """Build a credential from a token-endpoint success body."""
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            raise ValueError("token response is missing access_token")
        expires_in = payload.get("expires_in")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise ValueError("token response is missing expires_in")
        refresh_token = payload.get("refresh_token")
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = fallback_refresh_token
        lifetime = max(0, int(expires_in) - EXPIRY_SAFETY_MARGIN_SECONDS)
        return cls(
            access_token=access_token.strip(),
            refresh_token=refresh_token,
            expires_at=now + dt.timedelta(seconds=lifetime),
        )
