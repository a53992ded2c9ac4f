from __future__ import annotations

import json
import logging
from functools import lru_cache
from itertools import count
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Mapping, Optional, Tuple

from feeds.base import Subscription, ValueCallback
from feeds.tree import Segments, get_at, is_related, join_path, set_at, split_path, update_at

logger = logging.getLogger(__name__)


class MockRealtimeDatabase:
    """In-process stand-in for a hosted realtime JSON database.

    Every write notifies the subscribers whose path is related to the written
    path, passing the full current value at the subscriber's own path.
    Callbacks run synchronously on the writing thread, outside the data lock.
    Deliveries are serialised, so a subscriber's last callback always carries
    the value currently stored, even when a callback writes back.
    """

    name = "mock"

    def __init__(self, seed_path: Optional[Path] = None) -> None:
        self._root: Any = None
        self._listeners: Dict[int, Tuple[Segments, ValueCallback]] = {}
        self._ids = count(1)
        self._lock = RLock()
        self._delivery_lock = RLock()
        self.seed_path = seed_path
        if seed_path:
            self._load_seed(seed_path)

    def get(self, path: str = "/") -> Any:
        segments = split_path(path)
        with self._lock:
            return get_at(self._root, segments)

    def set(self, path: str, value: Any) -> None:
        segments = split_path(path)
        with self._lock:
            self._root = set_at(self._root, segments, value)
        self._notify(segments)

    def update(self, path: str, changes: Mapping[str, Any]) -> None:
        segments = split_path(path)
        with self._lock:
            self._root = update_at(self._root, segments, changes)
        self._notify(segments)

    def delete(self, path: str) -> None:
        self.set(path, None)

    def subscribe(self, path: str, callback: ValueCallback) -> Subscription:
        segments = split_path(path)
        with self._delivery_lock:
            with self._lock:
                listener_id = next(self._ids)
                self._listeners[listener_id] = (segments, callback)
                current = get_at(self._root, segments)

            logger.info(
                "Listener attached", extra={"feed_path": join_path(segments), "backend": self.name}
            )
            callback(current)
        return Subscription(join_path(segments), lambda: self._remove_listener(listener_id))

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _remove_listener(self, listener_id: int) -> None:
        with self._lock:
            self._listeners.pop(listener_id, None)

    def _notify(self, written: Segments) -> None:
        with self._delivery_lock:
            with self._lock:
                targets = [
                    listener_id
                    for listener_id, (segments, _) in self._listeners.items()
                    if is_related(segments, written)
                ]
            for listener_id in targets:
                # A callback may have written since the last delivery; always hand
                # out the value as it is now.
                with self._lock:
                    entry = self._listeners.get(listener_id)
                    if entry is None:
                        continue
                    segments, callback = entry
                    value = get_at(self._root, segments)
                callback(value)

    def _load_seed(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text() or "null")
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable seed file %s: %s", path, exc)
            return
        self._root = set_at(None, (), data)


@lru_cache
def build_default_database(seed_path: Optional[str] = None) -> MockRealtimeDatabase:
    return MockRealtimeDatabase(seed_path=Path(seed_path) if seed_path else None)
