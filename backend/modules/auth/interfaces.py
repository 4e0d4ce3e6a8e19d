"""
Authentication module interface.

The session depends on IAuthBackend, not on Supabase directly.
This enables testing with the in-memory backend.
"""

from typing import Awaitable, Callable, Optional, Protocol, runtime_checkable

from shared.models import Identity

AuthStateCallback = Callable[[Optional[Identity]], None]


@runtime_checkable
class IAuthBackend(Protocol):
    """
    Interface to the authentication provider.

    Every method that talks to the provider raises ``AuthError`` carrying
    the provider's reason on failure.
    """

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Returns:
            The signed-in identity

        Raises:
            AuthError: On invalid credentials or network failure
        """
        ...

    async def start_provider_sign_in(self, provider: str, redirect_to: str) -> str:
        """
        Begin a federated sign-in.

        Returns:
            The authorization URL the user must visit
        """
        ...

    async def complete_provider_sign_in(self, auth_code: str) -> Identity:
        """Exchange the code returned to the redirect URL for a session."""
        ...

    async def sign_up(self, email: str, password: str) -> Identity:
        """Create an account and sign it in."""
        ...

    async def update_display_name(self, display_name: str) -> Identity:
        """Set the display name of the signed-in account."""
        ...

    async def sign_out(self) -> None:
        """End the current session."""
        ...

    async def on_auth_state_change(
        self,
        callback: AuthStateCallback,
    ) -> Callable[[], None]:
        """
        Listen for auth-state changes.

        The callback is invoked once with the current state as soon as it
        is known, then on every change.

        Returns:
            A callable that stops the listener
        """
        ...


ProviderAuthorizer = Callable[[str], Awaitable[Optional[str]]]
"""Shows the authorization URL to the user and returns the auth code, or None if cancelled."""
