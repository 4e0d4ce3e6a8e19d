"""
Listener registration with explicit, cancellable handles.

Consumers never rely on enclosing-scope cleanup: every registration returns
a handle, and a released handle guarantees its callback is not invoked again.
"""

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ListenerHandle:
    """Handle returned by ``subscribe``-style calls. Release it on teardown."""

    def __init__(self, release: Callable[["ListenerHandle"], None]):
        self._release = release
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        """Stop receiving callbacks. Safe to call more than once."""
        if self._active:
            self._active = False
            self._release(self)

    def __enter__(self) -> "ListenerHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ListenerRegistry(Generic[T]):
    """
    Ordered set of callbacks receiving values of type ``T``.

    Callbacks are invoked synchronously in registration order. A callback
    that raises is logged and does not prevent the remaining callbacks from
    running.
    """

    def __init__(self, name: str):
        self._name = name
        self._listeners: dict[ListenerHandle, Callable[[T], None]] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, callback: Callable[[T], None]) -> ListenerHandle:
        handle = ListenerHandle(self._remove)
        self._listeners[handle] = callback
        return handle

    def _remove(self, handle: ListenerHandle) -> None:
        self._listeners.pop(handle, None)

    def emit(self, value: T) -> None:
        # Copy: callbacks may release their own handle while we iterate
        for handle, callback in list(self._listeners.items()):
            if not handle.active:
                continue
            try:
                callback(value)
            except Exception:
                logger.exception("Listener on %s failed", self._name)

    def clear(self) -> None:
        for handle in list(self._listeners):
            handle.close()
