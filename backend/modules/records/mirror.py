"""
Live collection mirror.

Keeps one in-memory list per record kind in step with the remote store for
the current identity. Every push from the store replaces the whole list;
nothing here patches lists incrementally or writes to them from elsewhere.
"""

import asyncio
import logging
from functools import partial
from typing import Callable, Generic, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.handles import ListenerHandle, ListenerRegistry
from shared.models import Identity

from .exceptions import RemoteSubscriptionError
from .interfaces import IDocumentStore, IStoreSubscription, Row
from .models import RECORD_MODELS, Client, Payment, Project, Record, RecordKind

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


def collection_name(kind: RecordKind, settings: Settings) -> str:
    """Remote collection (table) holding records of ``kind``."""
    return {
        RecordKind.PROJECTS: settings.projects_table,
        RecordKind.CLIENTS: settings.clients_table,
        RecordKind.PAYMENTS: settings.payments_table,
    }[kind]


def parse_snapshot(model: type[R], rows: list[Row]) -> tuple[R, ...]:
    """
    Convert a snapshot's rows to records, newest first.

    Rows that fail validation are logged and skipped so one bad row does not
    blank the whole list.
    """
    records: list[R] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(
                f"Skipping malformed {model.__name__} row {row.get('id')!r}: "
                f"{e.error_count()} validation error(s)"
            )
    records.sort(key=lambda record: record.created_at, reverse=True)
    return tuple(records)


class CollectionStream(Generic[R]):
    """
    Observable list of one record kind.

    ``items`` is an immutable snapshot; consumers that need updates register
    with ``subscribe`` and release the returned handle on teardown.
    """

    def __init__(self, kind: RecordKind, model: type[R]):
        self.kind = kind
        self.model = model
        self._items: tuple[R, ...] = ()
        self._ready = False
        self._listeners: ListenerRegistry[tuple[R, ...]] = ListenerRegistry(f"{kind.value} stream")

    @property
    def items(self) -> tuple[R, ...]:
        return self._items

    @property
    def ready(self) -> bool:
        """True once the first snapshot for the current identity has arrived."""
        return self._ready

    def __len__(self) -> int:
        return len(self._items)

    def get(self, record_id: str) -> Optional[R]:
        return next((item for item in self._items if item.id == record_id), None)

    def subscribe(self, callback: Callable[[tuple[R, ...]], None]) -> ListenerHandle:
        return self._listeners.add(callback)

    def _publish(self, items: tuple[R, ...]) -> None:
        self._items = items
        self._ready = True
        self._listeners.emit(items)

    def _reset(self) -> bool:
        """Empty the list. Returns True if anything changed."""
        changed = bool(self._items) or self._ready
        self._items = ()
        self._ready = False
        if changed:
            self._listeners.emit(self._items)
        return changed


class LiveCollectionMirror:
    """
    The three mirrored collections of the current identity.

    Guarantees at most one live query per kind. Snapshots arriving from a
    query that has since been replaced or cancelled are dropped.
    """

    def __init__(self, store: IDocumentStore, settings: Optional[Settings] = None):
        self._store = store
        self._settings = settings or get_settings()
        self.projects: CollectionStream[Project] = CollectionStream(RecordKind.PROJECTS, Project)
        self.clients: CollectionStream[Client] = CollectionStream(RecordKind.CLIENTS, Client)
        self.payments: CollectionStream[Payment] = CollectionStream(RecordKind.PAYMENTS, Payment)
        self._streams: dict[RecordKind, CollectionStream] = {
            RecordKind.PROJECTS: self.projects,
            RecordKind.CLIENTS: self.clients,
            RecordKind.PAYMENTS: self.payments,
        }
        self._subscriptions: dict[RecordKind, IStoreSubscription] = {}
        self._identity: Optional[Identity] = None
        self._generation = 0
        self._lock = asyncio.Lock()
        self._changes: ListenerRegistry[RecordKind] = ListenerRegistry("mirror")
        self._errors: ListenerRegistry[RemoteSubscriptionError] = ListenerRegistry("mirror errors")
        self._ready = asyncio.Event()

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def active_kinds(self) -> set[RecordKind]:
        return set(self._subscriptions)

    def stream(self, kind: RecordKind) -> CollectionStream:
        return self._streams[kind]

    def on_change(self, callback: Callable[[RecordKind], None]) -> ListenerHandle:
        """Register a callback invoked with the kind whose list was replaced."""
        return self._changes.add(callback)

    def on_error(self, callback: Callable[[RemoteSubscriptionError], None]) -> ListenerHandle:
        """Register a callback for live-query failures reported after setup."""
        return self._errors.add(callback)

    async def wait_until_ready(self) -> None:
        """Wait until every kind has received its first snapshot."""
        await self._ready.wait()

    def reset(self) -> None:
        """
        Empty all lists now and make in-flight snapshots stale.

        Live queries are left for ``bind`` to cancel.
        """
        self._generation += 1
        self._identity = None
        self._ready.clear()
        for kind, stream in self._streams.items():
            if stream._reset():
                self._changes.emit(kind)

    async def bind(self, identity: Optional[Identity]) -> None:
        """
        Point the mirror at ``identity``.

        Binding to None clears every list and cancels every live query.
        Binding to a different identity starts over from empty lists.
        Binding to the identity already bound keeps the live queries.

        Raises:
            RemoteSubscriptionError: If a live query cannot be established;
                the mirror is left unbound
        """
        async with self._lock:
            if (
                identity is not None
                and self._identity is not None
                and identity.id == self._identity.id
                and self._subscriptions
            ):
                self._identity = identity
                return

            previous = self._subscriptions
            self._subscriptions = {}
            self.reset()
            await self._cancel(previous)

            if identity is None:
                logger.debug("Mirror unbound")
                return

            self._identity = identity
            generation = self._generation
            try:
                for kind in RecordKind:
                    self._subscriptions[kind] = await self._store.subscribe(
                        collection_name(kind, self._settings),
                        self._settings.owner_field,
                        identity.id,
                        on_snapshot=partial(self._on_snapshot, kind, generation),
                        on_error=partial(self._on_error, kind, generation),
                    )
            except RemoteSubscriptionError as e:
                logger.error(f"Could not mirror records for {identity.id}: {e.message}")
                established = self._subscriptions
                self._subscriptions = {}
                self.reset()
                await self._cancel(established)
                raise

            logger.debug(f"Mirror bound to {identity.id}")

    async def close(self) -> None:
        """Cancel all live queries and release all listeners."""
        await self.bind(None)
        self._changes.clear()
        self._errors.clear()

    async def _cancel(self, subscriptions: dict[RecordKind, IStoreSubscription]) -> None:
        for subscription in subscriptions.values():
            await subscription.cancel()

    def _on_snapshot(self, kind: RecordKind, generation: int, rows: list[Row]) -> None:
        if generation != self._generation:
            logger.debug(f"Dropping stale {kind.value} snapshot")
            return

        stream = self._streams[kind]
        stream._publish(parse_snapshot(RECORD_MODELS[kind], rows))
        logger.debug(f"{kind.value} snapshot: {len(stream)} record(s)")

        if all(s.ready for s in self._streams.values()):
            self._ready.set()
        self._changes.emit(kind)

    def _on_error(self, kind: RecordKind, generation: int, error: Exception) -> None:
        if generation != self._generation:
            return
        if not isinstance(error, RemoteSubscriptionError):
            error = RemoteSubscriptionError(collection_name(kind, self._settings), str(error))
        logger.warning(f"Live query on {kind.value} reported an error: {error.message}")
        self._errors.emit(error)
