"""Google OAuth2 PKCE sign-in and credential lifecycle."""

from .config import OAuthConfig
from .contracts import AuthorizationPresenterLike, SecretStoreLike
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
    UserCanceled,
)
from .models import STATUS_SIGNED_IN, STATUS_SIGNED_OUT, AuthStatus, Credential
from .pkce import PKCEPair, generate_pkce_pair
from .presenter import LoopbackAuthorizationPresenter
from .secret_stores import FileSecretStore, KeyringSecretStore, MemorySecretStore
from .service import AuthTokenManager
from .token_store import TOKEN_KEY, TokenStore

__all__ = [
    "AuthError",
    "AuthStatus",
    "AuthTokenManager",
    "AuthorizationPresenterLike",
    "Credential",
    "CredentialStorageError",
    "FileSecretStore",
    "InvalidCallback",
    "KeyringSecretStore",
    "LoopbackAuthorizationPresenter",
    "MemorySecretStore",
    "MissingAuthCode",
    "MissingConfiguration",
    "NotAuthenticated",
    "OAuthConfig",
    "OAuthError",
    "PKCEPair",
    "STATUS_SIGNED_IN",
    "STATUS_SIGNED_OUT",
    "SecretStoreLike",
    "TOKEN_KEY",
    "TokenExchangeFailed",
    "TokenRefreshFailed",
    "TokenStore",
    "UserCanceled",
    "generate_pkce_pair",
]
