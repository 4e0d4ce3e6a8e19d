"""
Live dashboard statistics.

Recomputes the stats synchronously every time the mirror replaces one of
its lists.
"""

from datetime import datetime
from typing import Callable, Optional

from modules.records.mirror import LiveCollectionMirror
from modules.records.models import RecordKind, utcnow
from shared.handles import ListenerHandle, ListenerRegistry

from .models import DashboardStats
from .stats import compute_stats


class DashboardStatsFeed:
    """Current DashboardStats of a mirror, plus change notifications."""

    def __init__(
        self,
        mirror: LiveCollectionMirror,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._mirror = mirror
        self._clock = clock
        self._listeners: ListenerRegistry[DashboardStats] = ListenerRegistry("dashboard stats")
        self._current = self._compute()
        self._handle: Optional[ListenerHandle] = mirror.on_change(self._on_change)

    @property
    def current(self) -> DashboardStats:
        return self._current

    def subscribe(self, callback: Callable[[DashboardStats], None]) -> ListenerHandle:
        return self._listeners.add(callback)

    def _compute(self) -> DashboardStats:
        return compute_stats(
            self._mirror.projects.items,
            self._mirror.clients.items,
            self._mirror.payments.items,
            now=self._clock(),
        )

    def refresh(self) -> DashboardStats:
        """Recompute now, e.g. when time alone may have made items overdue."""
        self._current = self._compute()
        self._listeners.emit(self._current)
        return self._current

    def _on_change(self, kind: RecordKind) -> None:
        self.refresh()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._listeners.clear()
