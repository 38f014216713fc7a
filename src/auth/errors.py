class AuthError(Exception):
    """Base exception for Google sign-in and token handling."""


class MissingConfiguration(AuthError):
    """Raised when the OAuth client id or redirect URI is not configured."""

    def __init__(self, message: str = "Missing Google OAuth configuration"):
        super().__init__(message)


class UserCanceled(AuthError):
    """Raised when the interactive authorization session is dismissed."""

    def __init__(self, message: str = "Sign-in canceled"):
        super().__init__(message)


class InvalidCallback(AuthError):
    """Raised when the authorization session ends without a callback URL."""

    def __init__(self, message: str = "Invalid auth callback"):
        super().__init__(message)


class OAuthError(AuthError):
    """Raised when the callback carries an `error` parameter."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"OAuth error: {code}")


class MissingAuthCode(AuthError):
    """Raised when the callback carries neither `code` nor `error`."""

    def __init__(self, message: str = "Missing authorization code"):
        super().__init__(message)


class TokenExchangeFailed(AuthError):
    """Raised when the authorization-code grant is rejected."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Token exchange failed: {reason}")


class NotAuthenticated(AuthError):
    """Raised when no usable credential exists."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class TokenRefreshFailed(AuthError):
    """Raised when the refresh-token grant is rejected or unreachable."""

    def __init__(self, message: str = "Token refresh failed"):
        super().__init__(message)


class CredentialStorageError(AuthError):
    """Raised when the secret store cannot persist the credential record."""
