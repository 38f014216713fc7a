"""Google OAuth2 PKCE sign-in and single-flight access-token refresh."""

from __future__ import annotations

import datetime as dt
import logging
import threading
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx

from .config import OAuthConfig
from .contracts import AuthorizationPresenterLike
from .errors import (
    AuthError,
    CredentialStorageError,
    InvalidCallback,
    MissingAuthCode,
    MissingConfiguration,
    NotAuthenticated,
    OAuthError,
    TokenExchangeFailed,
    TokenRefreshFailed,
)
from .models import STATUS_SIGNED_IN, STATUS_SIGNED_OUT, AuthStatus, Credential
from .pkce import CHALLENGE_METHOD, generate_pkce_pair
from .token_store import TokenStore


class AuthTokenManager:
    """Owns the one credential: acquires it, persists it, refreshes it."""

    def __init__(
        self,
        config: OAuthConfig,
        token_store: TokenStore,
        presenter: Optional[AuthorizationPresenterLike] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        now_fn: Optional[Callable[[], dt.datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._token_store = token_store
        self._presenter = presenter
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(timeout=config.request_timeout_seconds)
        self._now = now_fn or (lambda: dt.datetime.now(dt.timezone.utc))
        self._logger = logger or logging.getLogger("auth")
        self._refresh_lock = threading.Lock()

        self._credential: Optional[Credential] = token_store.load()
        self._status: AuthStatus = (
            STATUS_SIGNED_IN if self._credential is not None else STATUS_SIGNED_OUT
        )

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def is_signed_in(self) -> bool:
        return self._status == STATUS_SIGNED_IN

    def authorization_url(self, code_challenge: str) -> str:
        query = urlencode(
            [
                ("client_id", self._config.client_id),
                ("redirect_uri", self._config.redirect_uri),
                ("response_type", "code"),
                ("scope", " ".join(self._config.scopes)),
                ("code_challenge", code_challenge),
                ("code_challenge_method", CHALLENGE_METHOD),
                ("access_type", "offline"),
                ("prompt", "consent"),
                ("include_granted_scopes", "true"),
            ]
        )
        return f"{self._config.authorization_endpoint}?{query}"

    def sign_in(self) -> None:
        """Run the interactive PKCE flow and persist the resulting credential."""
        if not self._config.is_complete:
            raise MissingConfiguration()
        if self._presenter is None:
            raise MissingConfiguration("No authorization presenter configured")

        pkce = generate_pkce_pair()
        url = self.authorization_url(pkce.challenge)
        self._logger.info("Starting Google sign-in")
        callback_url = self._presenter.present_authorization(
            url,
            self._config.redirect_uri,
        )
        if not callback_url:
            raise InvalidCallback()

        code = extract_authorization_code(callback_url)
        credential = self._exchange_code(code, pkce.verifier)
        with self._refresh_lock:
            self._store_credential(credential)
        self._logger.info("Google sign-in complete")

    def cancel_sign_in(self) -> None:
        if self._presenter is not None:
            self._presenter.cancel()

    def sign_out(self) -> None:
        with self._refresh_lock:
            self._clear_credential_locked()
        self._logger.info("Signed out")

    def valid_access_token(self) -> str:
        """Return an unexpired access token, refreshing at most once at a time."""
        credential = self._credential
        if credential is None:
            raise NotAuthenticated()
        if credential.is_valid_at(self._now()):
            return credential.access_token

        with self._refresh_lock:
            # Another caller may have refreshed while this one waited.
            credential = self._credential
            if credential is None:
                raise NotAuthenticated()
            if credential.is_valid_at(self._now()):
                return credential.access_token

            if not credential.refresh_token:
                self._logger.warning("Access token expired and no refresh token is stored")
                self._clear_credential_locked()
                raise NotAuthenticated()

            refreshed = self._refresh(credential.refresh_token)
            try:
                self._store_credential(refreshed)
            except CredentialStorageError as error:
                # The in-memory credential stays current when persisting fails.
                self._logger.error("Failed to persist refreshed credential: %s", error)
            self._logger.info("Access token refreshed")
            return refreshed.access_token

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def _exchange_code(self, code: str, verifier: str) -> Credential:
        form = {
            "client_id": self._config.client_id,
            "code": code,
            "code_verifier": verifier,
            "redirect_uri": self._config.redirect_uri,
            "grant_type": "authorization_code",
        }
        if self._config.client_secret:
            form["client_secret"] = self._config.client_secret

        try:
            response = self._post_token_endpoint(form)
        except httpx.HTTPError as error:
            raise TokenExchangeFailed(str(error)) from error

        if response.status_code != 200:
            raise TokenExchangeFailed(
                token_error_reason(response) or f"HTTP {response.status_code}"
            )

        try:
            return Credential.from_token_response(_json_object(response), now=self._now())
        except ValueError as error:
            raise TokenExchangeFailed(str(error)) from error

    def _refresh(self, refresh_token: str) -> Credential:
        form = {
            "client_id": self._config.client_id,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        if self._config.client_secret:
            form["client_secret"] = self._config.client_secret

        try:
            response = self._post_token_endpoint(form)
        except httpx.HTTPError as error:
            raise TokenRefreshFailed(f"Token refresh failed: {error}") from error

        if response.status_code != 200:
            reason = token_error_reason(response) or f"HTTP {response.status_code}"
            self._logger.warning("Token refresh rejected: %s", reason)
            if _token_error_code(response) == "invalid_grant":
                self._clear_credential_locked()
            raise TokenRefreshFailed(f"Token refresh failed: {reason}")

        try:
            return Credential.from_token_response(
                _json_object(response),
                now=self._now(),
                fallback_refresh_token=refresh_token,
            )
        except ValueError as error:
            raise TokenRefreshFailed(f"Token refresh failed: {error}") from error

    def _post_token_endpoint(self, form: dict[str, str]) -> httpx.Response:
        return self._http.post(
            self._config.token_endpoint,
            data=form,
            headers={"Accept": "application/json"},
        )

    def _store_credential(self, credential: Credential) -> None:
        self._credential = credential
        self._status = STATUS_SIGNED_IN
        self._token_store.save(credential)

    def _clear_credential_locked(self) -> None:
        try:
            self._token_store.clear()
        except (AuthError, OSError) as error:
            self._logger.warning("Failed to clear stored credential: %s", error)
        self._credential = None
        self._status = STATUS_SIGNED_OUT


def extract_authorization_code(callback_url: str) -> str:
    """Return the `code` query value or raise the matching sign-in error."""
    query = parse_qs(urlsplit(callback_url).query)
    error_values = query.get("error")
    if error_values and error_values[0]:
        raise OAuthError(error_values[0])
    code_values = query.get("code")
    if not code_values or not code_values[0]:
        raise MissingAuthCode()
    return code_values[0]


def token_error_reason(response: httpx.Response) -> Optional[str]:
    payload = _safe_json(response)
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, str) or not error:
        return None
    description = payload.get("error_description")
    if isinstance(description, str) and description:
        return f"{error}: {description}"
    return error


def _token_error_code(response: httpx.Response) -> Optional[str]:
    payload = _safe_json(response)
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return None


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _json_object(response: httpx.Response) -> dict[str, Any]:
    payload = _safe_json(response)
    if not isinstance(payload, dict):
        raise ValueError("token endpoint returned an unexpected payload")
    return payload
