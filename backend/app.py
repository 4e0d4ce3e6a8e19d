"""
Application container.

Wires the session, mirror, mutators and stats feed of one Freelance Desk
instance, and keeps the mirror bound to whoever is signed in.
"""

import asyncio
import logging
from typing import Optional

from modules.auth import IAuthBackend, Session, SupabaseAuthBackend
from modules.dashboard import DashboardStatsFeed
from modules.records import (
    IDocumentStore,
    LiveCollectionMirror,
    RecordMutators,
    RemoteSubscriptionError,
    SupabaseDocumentStore,
)
from shared.config import Settings, get_settings
from shared.database import get_supabase_client
from shared.handles import ListenerHandle
from shared.models import Identity

logger = logging.getLogger(__name__)


class FreelanceDesk:
    """
    One application instance.

    Every identity change from the session rebinds the mirror. Signing out
    empties the lists before the listener returns; the live queries are
    cancelled shortly after.
    """

    def __init__(
        self,
        auth_backend: IAuthBackend,
        store: IDocumentStore,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.session = Session(auth_backend, self.settings)
        self.mirror = LiveCollectionMirror(store, self.settings)
        self.records = RecordMutators(store, self.session, self.settings)
        self.stats = DashboardStatsFeed(self.mirror)
        self._session_handle: Optional[ListenerHandle] = None
        self._pending: set[asyncio.Task] = set()
        self._last_bind_error: Optional[RemoteSubscriptionError] = None

    @property
    def last_bind_error(self) -> Optional[RemoteSubscriptionError]:
        """The error of the most recent failed rebind, if any."""
        return self._last_bind_error

    async def start(self) -> None:
        """Start listening for auth changes. The first one binds the mirror."""
        if self._session_handle is None:
            self._session_handle = self.session.add_listener(self._on_identity)
        await self.session.start()

    async def settle(self) -> None:
        """Wait for every rebind triggered so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def close(self) -> None:
        if self._session_handle is not None:
            self._session_handle.close()
            self._session_handle = None
        self.session.close()
        await self.settle()
        self.stats.close()
        await self.mirror.close()

    def _on_identity(self, identity: Optional[Identity]) -> None:
        if identity is None:
            self.mirror.reset()
        task = asyncio.get_running_loop().create_task(self._rebind(identity))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _rebind(self, identity: Optional[Identity]) -> None:
        try:
            await self.mirror.bind(identity)
        except RemoteSubscriptionError as e:
            self._last_bind_error = e
            return
        self._last_bind_error = None


async def create_supabase_app(settings: Optional[Settings] = None) -> FreelanceDesk:
    """
    Build an instance backed by Supabase.

    Raises:
        RuntimeError: If Supabase is not configured
    """
    settings = settings or get_settings()
    client = await get_supabase_client()
    return FreelanceDesk(
        SupabaseAuthBackend(client, settings.supabase_jwt_secret),
        SupabaseDocumentStore(client),
        settings,
    )
