"""
Authentication backends.

Provides a Supabase Auth implementation for production and an in-memory
implementation for testing and development.
"""

import logging
import uuid
from typing import Any, Callable, Optional

import jwt
from supabase import AsyncClient
from supabase_auth.errors import AuthError as SupabaseAuthError

from shared.models import Identity

from .exceptions import AuthError, ExpiredTokenError, InvalidTokenError
from .interfaces import AuthStateCallback
from .models import JWTPayload, display_name_from_metadata

logger = logging.getLogger(__name__)


def identity_from_access_token(token: str, jwt_secret: str) -> Identity:
    """
    Verify a Supabase access token and build the identity from its claims.

    Raises:
        ExpiredTokenError: If the token has expired
        InvalidTokenError: If the token is malformed or the signature is wrong
    """
    if not token:
        raise InvalidTokenError("Missing access token")

    try:
        payload = jwt.decode(
            token,
            jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError()
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(str(e))

    return JWTPayload(**payload).to_identity()


def identity_from_user(user: Any) -> Identity:
    """Map a Supabase ``User`` object to an Identity."""
    return Identity(
        id=str(user.id),
        email=user.email,
        display_name=display_name_from_metadata(user.user_metadata),
    )


class SupabaseAuthBackend:
    """
    Supabase Auth implementation of IAuthBackend.

    Session persistence across restarts is handled by the Supabase client's
    storage; this class never stores tokens itself.
    """

    def __init__(self, client: AsyncClient, jwt_secret: str = ""):
        self._auth = client.auth
        self._jwt_secret = jwt_secret

    def _identity_from_session(self, session: Any) -> Optional[Identity]:
        if session is None:
            return None
        if self._jwt_secret:
            return identity_from_access_token(session.access_token, self._jwt_secret)
        return identity_from_user(session.user)

    def _identity_from_response(self, response: Any) -> Identity:
        if response.session is not None:
            return self._identity_from_session(response.session)
        if response.user is None:
            raise AuthError("Authentication backend returned no user")
        return identity_from_user(response.user)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        try:
            response = await self._auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        return self._identity_from_response(response)

    async def start_provider_sign_in(self, provider: str, redirect_to: str) -> str:
        try:
            response = await self._auth.sign_in_with_oauth(
                {"provider": provider, "options": {"redirect_to": redirect_to}}
            )
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        return response.url

    async def complete_provider_sign_in(self, auth_code: str) -> Identity:
        try:
            response = await self._auth.exchange_code_for_session(
                {"auth_code": auth_code}
            )
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        return self._identity_from_response(response)

    async def sign_up(self, email: str, password: str) -> Identity:
        try:
            response = await self._auth.sign_up({"email": email, "password": password})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        return self._identity_from_response(response)

    async def update_display_name(self, display_name: str) -> Identity:
        try:
            response = await self._auth.update_user({"data": {"display_name": display_name}})
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e
        return identity_from_user(response.user)

    async def sign_out(self) -> None:
        try:
            await self._auth.sign_out()
        except SupabaseAuthError as e:
            raise AuthError(e.message) from e

    async def on_auth_state_change(
        self,
        callback: AuthStateCallback,
    ) -> Callable[[], None]:
        def handle_event(event: str, session: Any) -> None:
            try:
                identity = self._identity_from_session(session)
            except AuthError as e:
                logger.warning(f"Rejected session from auth event {event}: {e.reason}")
                identity = None
            callback(identity)

        subscription = self._auth.on_auth_state_change(handle_event)

        # Report the restored (or absent) session as the initial state
        try:
            session = await self._auth.get_session()
        except SupabaseAuthError as e:
            subscription.unsubscribe()
            raise AuthError(e.message) from e
        handle_event("INITIAL_SESSION", session)

        return subscription.unsubscribe


class InMemoryAuthBackend:
    """
    In-memory implementation of IAuthBackend.

    For testing and development. Accounts live in a dict keyed by email;
    failures can be injected by setting the ``fail_*`` attributes to the
    reason the backend should report.
    """

    def __init__(self, restored: Optional[Identity] = None):
        self._accounts: dict[str, tuple[str, Identity]] = {}
        self._provider_codes: dict[str, Identity] = {}
        self._current: Optional[Identity] = restored
        self._callbacks: list[AuthStateCallback] = []
        self.fail_sign_in: Optional[str] = None
        self.fail_display_name_update: Optional[str] = None
        self.fail_sign_out: Optional[str] = None
        self.calls: list[str] = []

    @property
    def current(self) -> Optional[Identity]:
        return self._current

    def add_account(self, email: str, password: str, display_name: Optional[str] = None) -> Identity:
        identity = Identity(id=str(uuid.uuid4()), email=email, display_name=display_name)
        self._accounts[email] = (password, identity)
        return identity

    def add_provider_code(self, auth_code: str, identity: Identity) -> None:
        self._provider_codes[auth_code] = identity

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        for callback in list(self._callbacks):
            callback(identity)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        self.calls.append("sign_in_with_password")
        if self.fail_sign_in:
            raise AuthError(self.fail_sign_in)
        account = self._accounts.get(email)
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials")
        self._set_current(account[1])
        return account[1]

    async def start_provider_sign_in(self, provider: str, redirect_to: str) -> str:
        self.calls.append("start_provider_sign_in")
        return f"memory://authorize?provider={provider}&redirect_to={redirect_to}"

    async def complete_provider_sign_in(self, auth_code: str) -> Identity:
        self.calls.append("complete_provider_sign_in")
        identity = self._provider_codes.get(auth_code)
        if identity is None:
            raise AuthError("Invalid authorization code")
        self._set_current(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Identity:
        self.calls.append("sign_up")
        if email in self._accounts:
            raise AuthError("User already registered")
        identity = self.add_account(email, password)
        self._set_current(identity)
        return identity

    async def update_display_name(self, display_name: str) -> Identity:
        self.calls.append("update_display_name")
        if self._current is None:
            raise AuthError("Auth session missing!")
        if self.fail_display_name_update:
            raise AuthError(self.fail_display_name_update)
        identity = self._current.model_copy(update={"display_name": display_name})
        password = self._accounts[identity.email][0] if identity.email in self._accounts else ""
        self._accounts[identity.email] = (password, identity)
        self._set_current(identity)
        return identity

    async def sign_out(self) -> None:
        self.calls.append("sign_out")
        if self.fail_sign_out:
            raise AuthError(self.fail_sign_out)
        self._set_current(None)

    async def on_auth_state_change(
        self,
        callback: AuthStateCallback,
    ) -> Callable[[], None]:
        self._callbacks.append(callback)
        callback(self._current)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe
