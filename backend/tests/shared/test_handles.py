"""Tests for shared/handles.py."""

from shared.handles import ListenerHandle, ListenerRegistry


class TestListenerHandle:
    def test_close_releases_once(self):
        released = []
        handle = ListenerHandle(released.append)

        handle.close()
        handle.close()

        assert released == [handle]
        assert handle.active is False

    def test_context_manager_closes(self):
        released = []
        with ListenerHandle(released.append) as handle:
            assert handle.active
        assert not handle.active
        assert released == [handle]


class TestListenerRegistry:
    def test_emits_in_registration_order(self):
        registry = ListenerRegistry("test")
        received = []
        registry.add(lambda v: received.append(("a", v)))
        registry.add(lambda v: received.append(("b", v)))

        registry.emit(1)

        assert received == [("a", 1), ("b", 1)]

    def test_closed_handle_stops_callbacks(self):
        registry = ListenerRegistry("test")
        received = []
        handle = registry.add(received.append)

        registry.emit(1)
        handle.close()
        registry.emit(2)

        assert received == [1]
        assert len(registry) == 0

    def test_listener_closed_during_emit_is_skipped(self):
        """A callback releasing a later listener prevents its invocation."""
        registry = ListenerRegistry("test")
        received = []
        handles = {}
        registry.add(lambda v: handles["second"].close())
        handles["second"] = registry.add(received.append)

        registry.emit(1)

        assert received == []

    def test_failing_listener_does_not_block_others(self):
        registry = ListenerRegistry("test")
        received = []

        def boom(value):
            raise RuntimeError("listener failed")

        registry.add(boom)
        registry.add(received.append)

        registry.emit(1)

        assert received == [1]

    def test_clear_deactivates_handles(self):
        registry = ListenerRegistry("test")
        handle = registry.add(lambda v: None)

        registry.clear()

        assert not handle.active
        assert len(registry) == 0
