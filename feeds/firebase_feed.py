"""Firebase Realtime Database feed backed by ``firebase_admin``."""

from __future__ import annotations

import logging
import os
from threading import Lock
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, db

from feeds.base import Subscription, ValueCallback
from feeds.tree import get_at, set_at, split_path, update_at

logger = logging.getLogger(__name__)


class _FoldedValue:
    """Rebuilds the full value at a listened path from put/patch events.

    Event paths are relative to the listened reference, so ``"/"`` replaces the
    whole value and ``"/temperature"`` touches a single child.
    """

    def __init__(self) -> None:
        self._value: Any = None
        self._lock = Lock()

    def apply(self, event_type: str, path: str, data: Any) -> Any:
        segments = split_path(path or "/")
        with self._lock:
            if event_type == "patch" and isinstance(data, dict):
                self._value = update_at(self._value, segments, data)
            else:
                self._value = set_at(self._value, segments, data)
            return get_at(self._value, ())


class FirebaseRealtimeSource:
    """Subscribes to a Firebase Realtime Database path."""

    name = "firebase"

    def __init__(self, app: Optional[firebase_admin.App] = None) -> None:
        self._app = app

    @classmethod
    def connect(cls, database_url: str, credentials_path: str) -> "FirebaseRealtimeSource":
        """Initialise (or reuse) the default Firebase app for ``database_url``."""
        try:
            app = firebase_admin.get_app()
        except ValueError:
            if not os.path.exists(credentials_path):
                raise FileNotFoundError(
                    f"Firebase credentials not found at {credentials_path}"
                ) from None
            logger.info("Loading Firebase credentials from: %s", credentials_path)
            cred = credentials.Certificate(credentials_path)
            app = firebase_admin.initialize_app(cred, {"databaseURL": database_url})
        logger.info("Connected to Firebase Realtime Database at %s", database_url)
        return cls(app=app)

    def subscribe(self, path: str, callback: ValueCallback) -> Subscription:
        reference = db.reference(path, app=self._app)
        folded = _FoldedValue()

        def on_event(event: Any) -> None:
            logger.debug(
                "Realtime event received",
                extra={"feed_path": path, "event_type": event.event_type},
            )
            callback(folded.apply(event.event_type, event.path, event.data))

        registration = reference.listen(on_event)
        logger.info("Listener attached", extra={"feed_path": path, "backend": self.name})
        return Subscription(path, registration.close)

    def set(self, path: str, value: Any) -> None:
        db.reference(path, app=self._app).set(value)
