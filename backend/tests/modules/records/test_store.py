"""Tests for document store implementations."""

import asyncio
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from postgrest.exceptions import APIError

from modules.records.exceptions import RemoteSubscriptionError, RemoteWriteError
from modules.records.store import InMemoryDocumentStore, SnapshotPump, SupabaseDocumentStore


def collect():
    snapshots, errors = [], []
    return snapshots, errors


class TestInMemoryDocumentStore:
    @pytest.mark.asyncio
    async def test_subscribe_pushes_owner_rows_only(self, store):
        store.seed("projects", [
            {"id": "a", "user_id": "u1", "title": "Mine"},
            {"id": "b", "user_id": "u2", "title": "Theirs"},
        ])
        snapshots, errors = collect()

        await store.subscribe("projects", "user_id", "u1", snapshots.append, errors.append)
        await store.drain()

        assert [[row["id"] for row in s] for s in snapshots] == [["a"]]

    @pytest.mark.asyncio
    async def test_write_returns_before_push(self, store):
        """Subscribers see a write only after the push is delivered."""
        snapshots, errors = collect()
        await store.subscribe("projects", "user_id", "u1", snapshots.append, errors.append)
        await store.drain()

        await store.add("projects", {"user_id": "u1", "title": "New"})
        assert len(snapshots[-1]) == 0

        await store.drain()
        assert [row["title"] for row in snapshots[-1]] == ["New"]

    @pytest.mark.asyncio
    async def test_cancelled_subscription_gets_no_pushes(self, store):
        snapshots, errors = collect()
        subscription = await store.subscribe("projects", "user_id", "u1", snapshots.append, errors.append)

        await subscription.cancel()
        await store.add("projects", {"user_id": "u1"})
        await store.drain()

        assert snapshots == []
        assert store.active_subscriptions == []

    @pytest.mark.asyncio
    async def test_update_missing_record_raises(self, store):
        with pytest.raises(RemoteWriteError):
            await store.update("projects", "missing", {"title": "x"})

    @pytest.mark.asyncio
    async def test_delete_missing_record_is_noop(self, store):
        await store.delete("projects", "missing")
        assert store.writes == [("delete", "projects", "missing")]

    @pytest.mark.asyncio
    async def test_injected_failures(self, store):
        store.fail_writes = "offline"
        with pytest.raises(RemoteWriteError, match="offline"):
            await store.add("projects", {})

        store.fail_subscribe = "denied"
        with pytest.raises(RemoteSubscriptionError, match="denied"):
            await store.subscribe("projects", "user_id", "u1", lambda rows: None, lambda e: None)


class TestSnapshotPump:
    @pytest.mark.asyncio
    async def test_prime_delivers_initial_snapshot(self):
        fetch = AsyncMock(return_value=[{"id": "a"}])
        snapshots = []
        pump = SnapshotPump("projects", fetch, snapshots.append, lambda e: None)

        await pump.prime()

        assert snapshots == [[{"id": "a"}]]

    @pytest.mark.asyncio
    async def test_prime_failure_raises_subscription_error(self):
        fetch = AsyncMock(side_effect=APIError({"message": "permission denied"}))
        pump = SnapshotPump("projects", fetch, lambda rows: None, lambda e: None)

        with pytest.raises(RemoteSubscriptionError, match="permission denied"):
            await pump.prime()

    @pytest.mark.asyncio
    async def test_requests_coalesce_and_deliver_newest_last(self):
        """Requests during a refresh collapse into one follow-up fetch."""
        release = asyncio.Event()
        versions = iter(range(1, 10))

        async def fetch():
            version = next(versions)
            if version == 1:
                await release.wait()
            return [{"version": version}]

        snapshots = []
        pump = SnapshotPump("projects", fetch, snapshots.append, lambda e: None)

        pump.request()
        await asyncio.sleep(0)
        pump.request()
        pump.request()
        release.set()
        for _ in range(10):
            await asyncio.sleep(0)

        assert snapshots == [[{"version": 1}], [{"version": 2}]]

    @pytest.mark.asyncio
    async def test_refresh_failure_reported_to_error_callback(self):
        fetch = AsyncMock(side_effect=APIError({"message": "boom"}))
        errors = []
        pump = SnapshotPump("projects", fetch, lambda rows: None, errors.append)

        pump.request()
        for _ in range(5):
            await asyncio.sleep(0)

        assert len(errors) == 1
        assert isinstance(errors[0], RemoteSubscriptionError)

    @pytest.mark.asyncio
    async def test_cancel_suppresses_delivery(self):
        release = asyncio.Event()

        async def fetch():
            await release.wait()
            return []

        snapshots = []
        pump = SnapshotPump("projects", fetch, snapshots.append, lambda e: None)
        pump.request()
        await asyncio.sleep(0)

        await pump.cancel()
        release.set()
        pump.request()
        await asyncio.sleep(0)

        assert snapshots == []


def mock_supabase(rows=None):
    """A Supabase client mock with one realtime channel and chainable queries."""
    client = MagicMock()
    query = MagicMock()
    query.select.return_value = query
    query.insert.return_value = query
    query.update.return_value = query
    query.delete.return_value = query
    query.eq.return_value = query
    query.execute = AsyncMock(return_value=SimpleNamespace(data=rows if rows is not None else []))
    client.table.return_value = query

    channel = MagicMock()
    channel.subscribe = AsyncMock(return_value=channel)
    client.channel.return_value = channel
    client.remove_channel = AsyncMock()
    return client, query, channel


class TestSupabaseDocumentStore:
    @pytest.mark.asyncio
    async def test_subscribe_primes_with_owner_query(self):
        client, query, channel = mock_supabase([{"id": "a", "user_id": "u1"}])
        snapshots = []

        await SupabaseDocumentStore(client).subscribe(
            "projects", "user_id", "u1", snapshots.append, lambda e: None
        )

        client.table.assert_called_with("projects")
        query.eq.assert_called_with("user_id", "u1")
        client.channel.assert_called_once_with("projects:u1")
        assert snapshots == [[{"id": "a", "user_id": "u1"}]]

    @pytest.mark.asyncio
    async def test_subscribe_listens_for_owner_changes_and_deletes(self):
        client, _, channel = mock_supabase()

        await SupabaseDocumentStore(client).subscribe(
            "projects", "user_id", "u1", lambda rows: None, lambda e: None
        )

        calls = channel.on_postgres_changes.call_args_list
        assert calls[0].args == ("*",)
        assert calls[0].kwargs["filter"] == "user_id=eq.u1"
        assert calls[1].args == ("DELETE",)
        assert "filter" not in calls[1].kwargs

    @pytest.mark.asyncio
    async def test_change_event_triggers_refetch(self):
        client, query, channel = mock_supabase([])
        snapshots = []
        await SupabaseDocumentStore(client).subscribe(
            "projects", "user_id", "u1", snapshots.append, lambda e: None
        )
        query.execute.return_value = SimpleNamespace(data=[{"id": "new"}])

        callback = channel.on_postgres_changes.call_args_list[0].kwargs["callback"]
        callback({"eventType": "INSERT"})
        for _ in range(5):
            await asyncio.sleep(0)

        assert snapshots[-1] == [{"id": "new"}]

    @pytest.mark.asyncio
    async def test_channel_error_reported(self):
        client, _, channel = mock_supabase()
        errors = []
        await SupabaseDocumentStore(client).subscribe(
            "projects", "user_id", "u1", lambda rows: None, errors.append
        )

        on_status = channel.subscribe.call_args.args[0]
        on_status("CHANNEL_ERROR", None)
        on_status("SUBSCRIBED", None)

        assert len(errors) == 1
        assert isinstance(errors[0], RemoteSubscriptionError)

    @pytest.mark.asyncio
    async def test_failed_initial_query_removes_channel(self):
        client, query, channel = mock_supabase()
        query.execute.side_effect = APIError({"message": "permission denied"})

        with pytest.raises(RemoteSubscriptionError):
            await SupabaseDocumentStore(client).subscribe(
                "projects", "user_id", "u1", lambda rows: None, lambda e: None
            )

        client.remove_channel.assert_awaited_once_with(channel)

    @pytest.mark.asyncio
    async def test_cancel_removes_channel_once(self):
        client, _, channel = mock_supabase()
        subscription = await SupabaseDocumentStore(client).subscribe(
            "projects", "user_id", "u1", lambda rows: None, lambda e: None
        )

        await subscription.cancel()
        await subscription.cancel()

        client.remove_channel.assert_awaited_once_with(channel)

    @pytest.mark.asyncio
    async def test_add_returns_id(self):
        client, query, _ = mock_supabase([{"id": "new-id"}])

        record_id = await SupabaseDocumentStore(client).add("projects", {"title": "T"})

        query.insert.assert_called_once_with({"title": "T"})
        assert record_id == "new-id"

    @pytest.mark.asyncio
    async def test_add_with_no_returned_row_raises(self):
        client, _, _ = mock_supabase([])

        with pytest.raises(RemoteWriteError, match="Insert returned no record") as exc_info:
            await SupabaseDocumentStore(client).add("projects", {"title": "T"})

        assert exc_info.value.operation == "add"

    @pytest.mark.asyncio
    async def test_update_of_hidden_row_raises(self):
        """Updating a row the user cannot see matches nothing and fails."""
        client, _, _ = mock_supabase([])

        with pytest.raises(RemoteWriteError):
            await SupabaseDocumentStore(client).update("projects", "someone-elses", {"title": "x"})

    @pytest.mark.asyncio
    async def test_write_errors_wrapped(self):
        client, query, _ = mock_supabase()
        query.execute.side_effect = APIError({"message": "violates row-level security"})

        with pytest.raises(RemoteWriteError) as exc_info:
            await SupabaseDocumentStore(client).delete("projects", "a")

        assert exc_info.value.service == "document_store"
        assert isinstance(exc_info.value.__cause__, APIError)
