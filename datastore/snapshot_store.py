from __future__ import annotations

from threading import Lock
from typing import Callable, Optional

from app.schemas import MonitorSnapshot

SnapshotUpdater = Callable[[Optional[MonitorSnapshot]], MonitorSnapshot]


class SnapshotStore:
    """Single-slot holder for the latest monitor snapshot (last write wins)."""

    def __init__(self) -> None:
        self._snapshot: Optional[MonitorSnapshot] = None
        self._lock = Lock()

    def get(self) -> Optional[MonitorSnapshot]:
        with self._lock:
            if self._snapshot is None:
                return None
            return self._snapshot.model_copy(deep=True)

    def apply(self, updater: SnapshotUpdater) -> MonitorSnapshot:
        """Replace the slot with ``updater(current)`` under the store lock."""

        with self._lock:
            current = None if self._snapshot is None else self._snapshot.model_copy(deep=True)
            updated = updater(current)
            self._snapshot = updated.model_copy(deep=True)
            return updated.model_copy(deep=True)
