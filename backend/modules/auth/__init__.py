"""
Authentication module.

Holds the signed-in identity and the login/logout/signup actions.

Public API:
- Session: Current identity, lifecycle and auth actions
- IAuthBackend: Interface to the authentication provider
- SupabaseAuthBackend / InMemoryAuthBackend: Backend implementations
- Auth exceptions: AuthError, InvalidTokenError, etc.
"""

from .interfaces import IAuthBackend, ProviderAuthorizer
from .models import AuthState, JWTPayload
from .backend import SupabaseAuthBackend, InMemoryAuthBackend, identity_from_access_token
from .session import Session
from .exceptions import (
    AuthError,
    InvalidTokenError,
    ExpiredTokenError,
    ProviderLoginCancelledError,
    ProfileUpdateError,
)

__all__ = [
    # Interface
    "IAuthBackend",
    "ProviderAuthorizer",
    # Models
    "AuthState",
    "JWTPayload",
    # Implementations
    "Session",
    "SupabaseAuthBackend",
    "InMemoryAuthBackend",
    "identity_from_access_token",
    # Exceptions
    "AuthError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "ProviderLoginCancelledError",
    "ProfileUpdateError",
]
