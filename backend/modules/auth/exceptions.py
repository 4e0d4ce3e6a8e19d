"""
Authentication module exceptions.

The message of an ``AuthError`` is the reason reported by the auth backend
and is meant to be shown to the user as-is.
"""

from typing import Optional

from shared.exceptions import AuthenticationError
from shared.models import Identity


class AuthError(AuthenticationError):
    """Raised when a sign-in, sign-up or sign-out call fails."""

    def __init__(self, reason: str, code: str = "AUTH_ERROR"):
        super().__init__(reason, code=code, details={"reason": reason})
        self.reason = reason


class InvalidTokenError(AuthError):
    """Raised when a session access token is invalid or malformed."""

    def __init__(self, reason: str = "Invalid authentication token"):
        super().__init__(reason, code="INVALID_TOKEN")


class ExpiredTokenError(AuthError):
    """Raised when a session access token has expired."""

    def __init__(self, reason: str = "Authentication token has expired"):
        super().__init__(reason, code="TOKEN_EXPIRED")


class ProviderLoginCancelledError(AuthError):
    """Raised when the user abandons a federated login."""

    def __init__(self, provider: str):
        super().__init__(
            f"Sign-in with {provider} was cancelled",
            code="PROVIDER_LOGIN_CANCELLED",
        )
        self.details["provider"] = provider


class ProfileUpdateError(AuthError):
    """
    Raised when signup created the account but setting the display name failed.

    The account exists and is signed in; ``identity`` is that account.
    """

    def __init__(self, reason: str, identity: Optional[Identity]):
        super().__init__(reason, code="PROFILE_UPDATE_FAILED")
        self.identity = identity
        if identity is not None:
            self.details["user_id"] = identity.id
