"""Capability protocols consumed by the token manager."""

from __future__ import annotations

from typing import Optional, Protocol


class SecretStoreLike(Protocol):
    """Opaque byte storage keyed by name, backed by an OS or file secret store."""
    def put(self, key: str, value: bytes) -> None:
        ...

    def get(self, key: str) -> Optional[bytes]:
        ...

    def delete(self, key: str) -> None:
        ...


class AuthorizationPresenterLike(Protocol):
    """Interactive browser session returning the redirect callback URL.

    Implementations raise `auth.errors.UserCanceled` when the user dismisses
    the session or `cancel()` is called while it is in flight.
    """
    def present_authorization(self, url: str, callback_prefix: str) -> str:
        ...

    def cancel(self) -> None:
        ...
