"""
Session holder.

Tracks the signed-in identity for one application instance. The identity
only ever changes in response to auth-state events from the backend; the
login/logout actions trigger those events but never set the identity
directly.
"""

import logging
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.handles import ListenerHandle, ListenerRegistry
from shared.models import Identity

from .exceptions import AuthError, ProfileUpdateError, ProviderLoginCancelledError
from .interfaces import IAuthBackend, ProviderAuthorizer
from .models import AuthState

logger = logging.getLogger(__name__)


class Session:
    """
    Current identity and its lifecycle.

    Until the first auth-state event arrives ``is_resolving`` is True and
    ``current_identity`` must be treated as unknown, not as signed out.
    """

    def __init__(self, backend: IAuthBackend, settings: Optional[Settings] = None):
        self._backend = backend
        self._settings = settings or get_settings()
        self._identity: Optional[Identity] = None
        self._resolving = True
        self._listeners: ListenerRegistry[Optional[Identity]] = ListenerRegistry("session")
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._closed = False

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def is_resolving(self) -> bool:
        return self._resolving

    @property
    def status(self) -> AuthState:
        if self._resolving:
            return AuthState.PENDING
        if self._identity is None:
            return AuthState.SIGNED_OUT
        return AuthState.SIGNED_IN

    async def start(self) -> None:
        """Begin listening for auth-state changes. Idempotent."""
        if self._unsubscribe is not None or self._closed:
            return
        self._unsubscribe = await self._backend.on_auth_state_change(self._handle_auth_event)

    def close(self) -> None:
        """Release the backend listener and all session listeners."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def add_listener(self, callback: Callable[[Optional[Identity]], None]) -> ListenerHandle:
        """
        Register a callback invoked with the new identity on every change.

        The first resolution counts as a change even when it reports
        signed out.
        """
        return self._listeners.add(callback)

    def _handle_auth_event(self, identity: Optional[Identity]) -> None:
        if self._closed:
            return

        changed = self._resolving or identity != self._identity
        self._identity = identity
        self._resolving = False

        if not changed:
            return

        if identity is None:
            logger.info("Session signed out")
        else:
            logger.info(f"Session signed in as {identity.id}")
        self._listeners.emit(identity)

    async def login(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        try:
            return await self._backend.sign_in_with_password(email, password)
        except AuthError as e:
            logger.warning(f"Login failed: {e.reason}")
            raise

    async def login_with_provider(self, authorize: ProviderAuthorizer) -> Identity:
        """
        Sign in with the configured federated provider.

        Args:
            authorize: Shows the authorization URL to the user and returns
                the code delivered to the redirect URL, or None if the user
                gave up.

        Raises:
            ProviderLoginCancelledError: If ``authorize`` returned no code
            AuthError: On any backend failure
        """
        provider = self._settings.oauth_provider
        try:
            url = await self._backend.start_provider_sign_in(
                provider, self._settings.oauth_redirect_url
            )
            auth_code = await authorize(url)
            if not auth_code:
                raise ProviderLoginCancelledError(provider)
            return await self._backend.complete_provider_sign_in(auth_code)
        except AuthError as e:
            logger.warning(f"Login with {provider} failed: {e.reason}")
            raise

    async def signup(self, name: str, email: str, password: str) -> Identity:
        """
        Create an account, then set its display name.

        The two steps are not atomic. If the second fails the account
        still exists and a ProfileUpdateError carrying it is raised.
        """
        try:
            identity = await self._backend.sign_up(email, password)
        except AuthError as e:
            logger.warning(f"Signup failed: {e.reason}")
            raise

        try:
            return await self._backend.update_display_name(name)
        except AuthError as e:
            logger.warning(f"Account {identity.id} created but display name update failed: {e.reason}")
            raise ProfileUpdateError(e.reason, identity) from e

    async def logout(self) -> None:
        try:
            await self._backend.sign_out()
        except AuthError as e:
            logger.warning(f"Logout failed: {e.reason}")
            raise
