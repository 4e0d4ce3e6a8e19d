"""
Document store implementations.

Provides a Supabase-backed store (Postgres tables + Realtime) for
production and an in-memory store for testing and development.
"""

import asyncio
import copy
import logging
import uuid
from typing import Any, Awaitable, Callable, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from .exceptions import RemoteSubscriptionError, RemoteWriteError
from .interfaces import ErrorCallback, Row, SnapshotCallback

logger = logging.getLogger(__name__)

# Failures raised by the PostgREST client for a single request
_REQUEST_ERRORS = (APIError, httpx.HTTPError)

_CHANNEL_FAILURE_STATES = {"CHANNEL_ERROR", "TIMED_OUT"}


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


class SnapshotPump:
    """
    Delivers full snapshots of one live query, newest last.

    Change notifications only request a refresh; refreshes run one at a time
    and requests arriving while one is in flight collapse into a single
    follow-up fetch. A snapshot is therefore never overtaken by an older one.
    """

    def __init__(
        self,
        collection: str,
        fetch: Callable[[], Awaitable[list[Row]]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ):
        self._collection = collection
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._lock = asyncio.Lock()
        self._pending = False
        self._task: Optional[asyncio.Task] = None
        self._cancelled = False

    async def prime(self) -> None:
        """Fetch and deliver the initial snapshot, raising on failure."""
        async with self._lock:
            try:
                rows = await self._fetch()
            except _REQUEST_ERRORS as e:
                raise RemoteSubscriptionError(self._collection, _error_message(e)) from e
            if not self._cancelled:
                self._on_snapshot(rows)

    def request(self) -> None:
        """Ask for a fresh snapshot. Called from realtime callbacks."""
        if self._cancelled:
            return
        self._pending = True
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending and not self._cancelled:
            self._pending = False
            async with self._lock:
                try:
                    rows = await self._fetch()
                except _REQUEST_ERRORS as e:
                    logger.warning(f"Snapshot refresh of {self._collection} failed: {e}")
                    if not self._cancelled:
                        self._on_error(RemoteSubscriptionError(self._collection, _error_message(e)))
                    continue
                if not self._cancelled:
                    self._on_snapshot(rows)

    async def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass


class SupabaseSubscription:
    """A realtime channel plus the pump that turns its events into snapshots."""

    def __init__(self, client: AsyncClient, channel: Any, pump: SnapshotPump):
        self._client = client
        self._channel = channel
        self._pump = pump
        self._cancelled = False

    async def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        await self._pump.cancel()
        await self._client.remove_channel(self._channel)


class SupabaseDocumentStore:
    """
    Supabase implementation of IDocumentStore.

    Realtime postgres-change events carry single-row diffs; each one
    triggers a re-query of the owner's rows so subscribers always receive
    complete snapshots.
    """

    def __init__(self, client: AsyncClient, schema: str = "public"):
        self._db = client
        self._schema = schema

    async def _select_owned(self, collection: str, owner_field: str, owner_id: str) -> list[Row]:
        result = await self._db.table(collection).select("*").eq(owner_field, owner_id).execute()
        return result.data

    async def subscribe(
        self,
        collection: str,
        owner_field: str,
        owner_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> SupabaseSubscription:
        async def fetch() -> list[Row]:
            return await self._select_owned(collection, owner_field, owner_id)

        pump = SnapshotPump(collection, fetch, on_snapshot, on_error)

        def on_change(payload: Any) -> None:
            pump.request()

        def on_status(status: Any, error: Optional[Exception]) -> None:
            state = getattr(status, "value", status)
            if error is not None or state in _CHANNEL_FAILURE_STATES:
                message = _error_message(error) if error is not None else str(state)
                logger.warning(f"Realtime channel for {collection} reported {state}: {message}")
                on_error(RemoteSubscriptionError(collection, message))

        channel = self._db.channel(f"{collection}:{owner_id}")
        channel.on_postgres_changes(
            "*",
            schema=self._schema,
            table=collection,
            filter=f"{owner_field}=eq.{owner_id}",
            callback=on_change,
        )
        # Delete events cannot be filtered server-side
        channel.on_postgres_changes(
            "DELETE",
            schema=self._schema,
            table=collection,
            callback=on_change,
        )

        try:
            await channel.subscribe(on_status)
        except Exception as e:
            await self._db.remove_channel(channel)
            raise RemoteSubscriptionError(collection, _error_message(e)) from e

        subscription = SupabaseSubscription(self._db, channel, pump)
        try:
            await pump.prime()
        except RemoteSubscriptionError:
            await subscription.cancel()
            raise

        logger.debug(f"Live query on {collection} established for {owner_id}")
        return subscription

    async def add(self, collection: str, data: Row) -> str:
        try:
            result = await self._db.table(collection).insert(data).execute()
        except _REQUEST_ERRORS as e:
            raise RemoteWriteError("add", collection, _error_message(e)) from e
        if not result.data:
            raise RemoteWriteError("add", collection, "Insert returned no record")
        return str(result.data[0]["id"])

    async def update(self, collection: str, record_id: str, data: Row) -> None:
        try:
            result = await self._db.table(collection).update(data).eq("id", record_id).execute()
        except _REQUEST_ERRORS as e:
            raise RemoteWriteError("update", collection, _error_message(e)) from e
        # Row level security hides rows the user does not own
        if not result.data:
            raise RemoteWriteError("update", collection, f"No record with id {record_id}")

    async def delete(self, collection: str, record_id: str) -> None:
        try:
            await self._db.table(collection).delete().eq("id", record_id).execute()
        except _REQUEST_ERRORS as e:
            raise RemoteWriteError("delete", collection, _error_message(e)) from e


class InMemorySubscription:
    def __init__(self, store: "InMemoryDocumentStore", collection: str, owner_field: str,
                 owner_id: str, on_snapshot: SnapshotCallback):
        self._store = store
        self.collection = collection
        self.owner_field = owner_field
        self.owner_id = owner_id
        self.on_snapshot = on_snapshot
        self.cancelled = False

    async def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self._store._subscriptions.remove(self)


class InMemoryDocumentStore:
    """
    In-memory implementation of IDocumentStore.

    For testing and development. Like a remote store, snapshots are pushed
    asynchronously: a write returns before subscribers see its effect. Call
    ``drain()`` to let pending pushes run. Failures can be injected through
    the ``fail_*`` attributes.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, Row]] = {}
        self._subscriptions: list[InMemorySubscription] = []
        self._pending_pushes = 0
        self.fail_writes: Optional[str] = None
        self.fail_subscribe: Optional[str] = None
        self.writes: list[tuple[str, str, str]] = []

    @property
    def active_subscriptions(self) -> list[InMemorySubscription]:
        return list(self._subscriptions)

    def rows(self, collection: str) -> list[Row]:
        return [copy.deepcopy(row) for row in self._collections.get(collection, {}).values()]

    def seed(self, collection: str, rows: list[Row]) -> None:
        """Load rows directly, bypassing write bookkeeping, and notify subscribers."""
        table = self._collections.setdefault(collection, {})
        for row in rows:
            row = copy.deepcopy(row)
            row.setdefault("id", str(uuid.uuid4()))
            table[row["id"]] = row
        self._notify(collection)

    def _snapshot_for(self, subscription: InMemorySubscription) -> list[Row]:
        return [
            copy.deepcopy(row)
            for row in self._collections.get(subscription.collection, {}).values()
            if row.get(subscription.owner_field) == subscription.owner_id
        ]

    def _schedule_push(self, subscription: InMemorySubscription) -> None:
        self._pending_pushes += 1

        def push() -> None:
            self._pending_pushes -= 1
            if not subscription.cancelled:
                subscription.on_snapshot(self._snapshot_for(subscription))

        asyncio.get_running_loop().call_soon(push)

    def _notify(self, collection: str) -> None:
        for subscription in self._subscriptions:
            if subscription.collection == collection:
                self._schedule_push(subscription)

    async def drain(self) -> None:
        """Wait until every scheduled snapshot push has been delivered."""
        while self._pending_pushes:
            await asyncio.sleep(0)

    async def subscribe(
        self,
        collection: str,
        owner_field: str,
        owner_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> InMemorySubscription:
        if self.fail_subscribe:
            raise RemoteSubscriptionError(collection, self.fail_subscribe)
        subscription = InMemorySubscription(self, collection, owner_field, owner_id, on_snapshot)
        self._subscriptions.append(subscription)
        self._schedule_push(subscription)
        return subscription

    def _check_write(self, operation: str, collection: str) -> None:
        if self.fail_writes:
            raise RemoteWriteError(operation, collection, self.fail_writes)

    async def add(self, collection: str, data: Row) -> str:
        self._check_write("add", collection)
        record_id = str(uuid.uuid4())
        self._collections.setdefault(collection, {})[record_id] = {**copy.deepcopy(data), "id": record_id}
        self.writes.append(("add", collection, record_id))
        self._notify(collection)
        return record_id

    async def update(self, collection: str, record_id: str, data: Row) -> None:
        self._check_write("update", collection)
        table = self._collections.get(collection, {})
        if record_id not in table:
            raise RemoteWriteError("update", collection, f"No record with id {record_id}")
        table[record_id].update(copy.deepcopy(data))
        self.writes.append(("update", collection, record_id))
        self._notify(collection)

    async def delete(self, collection: str, record_id: str) -> None:
        self._check_write("delete", collection)
        self._collections.get(collection, {}).pop(record_id, None)
        self.writes.append(("delete", collection, record_id))
        self._notify(collection)
