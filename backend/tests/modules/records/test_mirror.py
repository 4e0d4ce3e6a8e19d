"""Tests for the live collection mirror."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from modules.records import (
    Client,
    LiveCollectionMirror,
    Project,
    RecordKind,
    RemoteSubscriptionError,
    parse_snapshot,
)
from tests.conftest import client_row, payment_row, project_row


@pytest.fixture
def mirror(store, settings):
    return LiveCollectionMirror(store, settings)


class TestParseSnapshot:
    def test_sorted_newest_first(self):
        rows = [
            {**project_row(title="Old", created_at="2024-01-01T00:00:00+00:00"), "id": "1"},
            {**project_row(title="New", created_at="2024-03-01T00:00:00+00:00"), "id": "2"},
            {**project_row(title="Mid", created_at="2024-02-01T00:00:00+00:00"), "id": "3"},
        ]

        projects = parse_snapshot(Project, rows)

        assert [p.title for p in projects] == ["New", "Mid", "Old"]

    def test_malformed_rows_skipped(self):
        rows = [{**project_row(), "id": "1"}, {"id": "2", "title": "No deadline"}]
        assert [p.id for p in parse_snapshot(Project, rows)] == ["1"]

    def test_rows_without_timestamps_load_as_now(self):
        before = datetime.now(timezone.utc)
        rows = [{"id": "c1", "user_id": "u", "name": "Acme", "email": "a@acme.test", "phone": "1"}]

        clients = parse_snapshot(Client, rows)

        assert [c.id for c in clients] == ["c1"]
        assert before <= clients[0].created_at <= datetime.now(timezone.utc)
        assert clients[0].updated_at.tzinfo is not None

    def test_unparseable_timestamp_loads_as_now(self):
        rows = [{**project_row(created_at="not-a-timestamp"), "id": "1"}]

        projects = parse_snapshot(Project, rows)

        assert len(projects) == 1
        assert datetime.now(timezone.utc) - projects[0].created_at < timedelta(minutes=1)


class TestBind:
    @pytest.mark.asyncio
    async def test_bind_mirrors_only_owner_records(self, mirror, store, identity, other_identity):
        store.seed("projects", [project_row(title="Mine"), project_row(user_id=other_identity.id)])
        store.seed("clients", [client_row()])
        store.seed("payments", [payment_row(), payment_row(user_id=other_identity.id)])

        await mirror.bind(identity)
        await store.drain()

        assert [p.title for p in mirror.projects.items] == ["Mine"]
        assert len(mirror.clients) == 1
        assert len(mirror.payments) == 1
        assert all(p.user_id == identity.id for p in mirror.projects.items)

    @pytest.mark.asyncio
    async def test_one_live_query_per_kind(self, mirror, store, identity):
        await mirror.bind(identity)
        await mirror.bind(identity)

        assert mirror.active_kinds == set(RecordKind)
        assert len(store.active_subscriptions) == 3

    @pytest.mark.asyncio
    async def test_lists_follow_remote_changes(self, mirror, store, identity):
        await mirror.bind(identity)
        await store.drain()
        assert mirror.projects.items == ()

        store.seed("projects", [project_row()])
        await store.drain()

        assert len(mirror.projects) == 1

    @pytest.mark.asyncio
    async def test_unbind_clears_lists_and_cancels(self, mirror, store, identity):
        store.seed("projects", [project_row()])
        await mirror.bind(identity)
        await store.drain()

        await mirror.bind(None)

        assert mirror.projects.items == ()
        assert mirror.identity is None
        assert store.active_subscriptions == []

    @pytest.mark.asyncio
    async def test_identity_switch_never_shows_previous_records(
        self, mirror, store, identity, other_identity
    ):
        """After a rebind every observed list belongs to the new identity."""
        store.seed("projects", [project_row(title="First's"), project_row(user_id=other_identity.id, title="Second's")])
        await mirror.bind(identity)
        await store.drain()
        observed = []
        mirror.projects.subscribe(lambda items: observed.append([p.user_id for p in items]))

        await mirror.bind(other_identity)
        await store.drain()

        assert observed[0] == []
        assert all(owner == other_identity.id for snapshot in observed for owner in snapshot)
        assert [p.title for p in mirror.projects.items] == ["Second's"]

    @pytest.mark.asyncio
    async def test_stale_snapshot_dropped_after_reset(self, mirror, store, identity):
        """A push scheduled before sign-out must not repopulate the lists."""
        store.seed("projects", [project_row()])
        await mirror.bind(identity)

        mirror.reset()
        await store.drain()

        assert mirror.projects.items == ()
        assert mirror.projects.ready is False

    @pytest.mark.asyncio
    async def test_subscribe_failure_leaves_mirror_unbound(self, mirror, store, identity):
        store.fail_subscribe = "permission denied"

        with pytest.raises(RemoteSubscriptionError):
            await mirror.bind(identity)

        assert mirror.identity is None
        assert mirror.active_kinds == set()

    @pytest.mark.asyncio
    async def test_partial_subscribe_failure_cancels_established(self, settings, identity):
        store = AsyncMock()
        first = AsyncMock()
        store.subscribe.side_effect = [first, RemoteSubscriptionError("clients", "denied")]
        mirror = LiveCollectionMirror(store, settings)

        with pytest.raises(RemoteSubscriptionError):
            await mirror.bind(identity)

        first.cancel.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_wait_until_ready(self, mirror, store, identity):
        await mirror.bind(identity)
        await store.drain()

        await mirror.wait_until_ready()

        assert all(mirror.stream(kind).ready for kind in RecordKind)


class TestNotifications:
    @pytest.mark.asyncio
    async def test_on_change_reports_kind(self, mirror, store, identity):
        changes = []
        mirror.on_change(changes.append)

        await mirror.bind(identity)
        await store.drain()

        assert set(changes) == set(RecordKind)

    @pytest.mark.asyncio
    async def test_released_handle_not_called(self, mirror, store, identity):
        received = []
        handle = mirror.projects.subscribe(received.append)
        handle.close()

        await mirror.bind(identity)
        store.seed("projects", [project_row()])
        await store.drain()

        assert received == []

    @pytest.mark.asyncio
    async def test_errors_after_setup_reach_error_listeners(self, settings, identity):
        store = AsyncMock()
        mirror = LiveCollectionMirror(store, settings)
        errors = []
        mirror.on_error(errors.append)
        await mirror.bind(identity)

        on_error = store.subscribe.call_args_list[0].kwargs["on_error"]
        on_error(RemoteSubscriptionError("projects", "socket closed"))

        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_close_releases_everything(self, mirror, store, identity):
        changes = []
        mirror.on_change(changes.append)
        await mirror.bind(identity)

        await mirror.close()
        store.seed("projects", [project_row()])
        await store.drain()

        assert store.active_subscriptions == []
        assert mirror.projects.items == ()
