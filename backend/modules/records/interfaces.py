"""
Records module interfaces.

The mirror and the mutators depend on IDocumentStore, not on Supabase.
Rows cross this boundary as plain dicts with snake_case keys.
"""

from typing import Any, Callable, Protocol, runtime_checkable

Row = dict[str, Any]
SnapshotCallback = Callable[[list[Row]], None]
ErrorCallback = Callable[[Exception], None]


@runtime_checkable
class IStoreSubscription(Protocol):
    """A live query. Callbacks stop once it is cancelled."""

    async def cancel(self) -> None:
        """Stop the live query. Safe to call more than once."""
        ...


@runtime_checkable
class IDocumentStore(Protocol):
    """
    Interface to the remote document store.

    Write methods raise RemoteWriteError; subscribe raises
    RemoteSubscriptionError.
    """

    async def subscribe(
        self,
        collection: str,
        owner_field: str,
        owner_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> IStoreSubscription:
        """
        Start a live query on rows where ``owner_field == owner_id``.

        ``on_snapshot`` receives the complete matching row set, first once
        the query is established and then after every change. Each call
        supersedes the previous one.
        """
        ...

    async def add(self, collection: str, data: Row) -> str:
        """Insert a row and return its store-issued ID."""
        ...

    async def update(self, collection: str, record_id: str, data: Row) -> None:
        """Update the given fields of an existing row."""
        ...

    async def delete(self, collection: str, record_id: str) -> None:
        """Delete a row by ID. Deleting a missing row is not an error."""
        ...
