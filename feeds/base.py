from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

ValueCallback = Callable[[Any], None]


class Subscription:
    """Handle returned by ``subscribe``; closing it stops delivery."""

    def __init__(self, path: str, on_close: Callable[[], None]) -> None:
        self.path = path
        self._on_close: Optional[Callable[[], None]] = on_close
        self._lock = Lock()

    @property
    def active(self) -> bool:
        with self._lock:
            return self._on_close is not None

    def close(self) -> None:
        with self._lock:
            on_close, self._on_close = self._on_close, None
        if on_close is None:
            return
        on_close()
        logger.debug("Subscription closed", extra={"feed_path": self.path})


class DataSource(Protocol):
    """A push-style realtime data feed addressed by slash-separated paths."""

    name: str

    def subscribe(self, path: str, callback: ValueCallback) -> Subscription:
        """Deliver the current value at ``path`` now and after every change."""
        ...

    def set(self, path: str, value: Any) -> None:
        ...
