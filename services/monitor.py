"""Feed subscription, classification and alert dispatch."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import Any, Callable, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from app.schemas import (
    Classification,
    FieldStatusModel,
    MonitorSnapshot,
    SensorReadingPayload,
    ThresholdReport,
)
from datastore.snapshot_store import SnapshotStore
from feeds.base import DataSource, Subscription
from feeds.firebase_feed import FirebaseRealtimeSource
from feeds.mock_realtime_db import build_default_database
from models.records import AlertClassification, AlertLevel, SensorReading
from models.thresholds import DEFAULT_THRESHOLDS
from services.classifier import AlertClassifier
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

Notifier = Callable[[MonitorSnapshot], None]


class ReadingValidationError(ValueError):
    """Raised when a feed value cannot be turned into a sensor reading."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def _summarize_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "value"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_reading(raw: Any) -> Optional[SensorReading]:
    """Validate a raw feed value; ``None`` means no reading has been published."""
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ReadingValidationError(f"expected an object, got {type(raw).__name__}")
    try:
        payload = SensorReadingPayload.model_validate(dict(raw))
    except ValidationError as exc:
        raise ReadingValidationError(_summarize_validation_error(exc)) from exc
    return payload.to_reading()


def log_alert(snapshot: MonitorSnapshot) -> None:
    logger.warning(
        "Flood alert: %s",
        snapshot.classification.message,
        extra={"level": snapshot.classification.level.value},
    )


class MonitorService:
    """Keeps the latest classified reading for one feed path."""

    def __init__(
        self,
        source: DataSource,
        classifier: AlertClassifier,
        store: Optional[SnapshotStore] = None,
        feed_path: str = "/sensors",
        notifiers: Optional[Iterable[Notifier]] = None,
    ) -> None:
        self.source = source
        self.classifier = classifier
        self.store = store or SnapshotStore()
        self.feed_path = feed_path
        self._notifiers: List[Notifier] = list(notifiers) if notifiers is not None else [log_alert]
        self._subscription: Optional[Subscription] = None
        # Reentrant: sources may deliver the first value before subscribe() returns.
        self._subscription_lock = RLock()

        for field in classifier.thresholds.inconsistent_fields():
            threshold = classifier.thresholds[field]
            logger.warning(
                "Danger threshold %s does not lie beyond warning threshold %s",
                threshold.danger,
                threshold.warning,
                extra={"field": field},
            )

    @property
    def running(self) -> bool:
        with self._subscription_lock:
            return self._subscription is not None and self._subscription.active

    def start(self) -> None:
        with self._subscription_lock:
            if self._subscription is not None and self._subscription.active:
                return
            self._subscription = self.source.subscribe(self.feed_path, self.handle_update)
        logger.info(
            "Monitoring feed",
            extra={"feed_path": self.feed_path, "backend": self.source.name},
        )

    def stop(self) -> None:
        with self._subscription_lock:
            subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.close()

    def add_notifier(self, notifier: Notifier) -> None:
        self._notifiers.append(notifier)

    def handle_update(self, raw: Any) -> MonitorSnapshot:
        """Classify a value delivered by the feed and store the result."""
        try:
            reading = parse_reading(raw)
        except ReadingValidationError as exc:
            snapshot = self.store.apply(lambda current: self._with_rejection(current, exc.reason))
            logger.warning(
                "Rejected feed update",
                extra={
                    "feed_path": self.feed_path,
                    "reason": exc.reason,
                    "rejected": snapshot.rejected_updates,
                },
            )
            return snapshot

        classification = self.classifier.classify(reading)
        snapshot = self.store.apply(
            lambda current: self._build_snapshot(reading, classification, current)
        )
        logger.info(
            "Reading classified",
            extra={
                "feed_path": self.feed_path,
                "level": classification.level.value,
                "accepted": snapshot.accepted_updates,
            },
        )
        if classification.level is not AlertLevel.normal:
            self._dispatch(snapshot)
        return snapshot

    def latest(self) -> MonitorSnapshot:
        return self.store.get() or self._empty_snapshot()

    def publish(self, reading: SensorReading) -> MonitorSnapshot:
        """Write ``reading`` to the monitored path and return the latest snapshot.

        Hosted feeds deliver the change asynchronously, so the returned snapshot
        may still describe the previous reading.
        """
        payload = SensorReadingPayload.from_reading(reading)
        self.source.set(self.feed_path, payload.model_dump())
        return self.latest()

    def classify(self, reading: Optional[SensorReading]) -> AlertClassification:
        return self.classifier.classify(reading)

    def threshold_report(self) -> ThresholdReport:
        return ThresholdReport.from_table(
            self.classifier.thresholds,
            feed_path=self.feed_path,
            backend=self.source.name,
        )

    def _dispatch(self, snapshot: MonitorSnapshot) -> None:
        for notifier in list(self._notifiers):
            try:
                notifier(snapshot)
            except Exception:
                logger.exception(
                    "Alert notifier %r failed",
                    notifier,
                    extra={"level": snapshot.classification.level.value},
                )

    def _empty_snapshot(self) -> MonitorSnapshot:
        return MonitorSnapshot(
            classification=Classification.from_domain(self.classifier.classify(None))
        )

    def _build_snapshot(
        self,
        reading: Optional[SensorReading],
        classification: AlertClassification,
        current: Optional[MonitorSnapshot],
    ) -> MonitorSnapshot:
        previous = current or self._empty_snapshot()
        sensors = [] if reading is None else self.classifier.field_statuses(reading)
        return MonitorSnapshot(
            reading=None if reading is None else SensorReadingPayload.from_reading(reading),
            classification=Classification.from_domain(classification),
            sensors=[FieldStatusModel.from_domain(status) for status in sensors],
            updated_at=datetime.now(timezone.utc),
            accepted_updates=previous.accepted_updates + 1,
            rejected_updates=previous.rejected_updates,
            last_rejection=previous.last_rejection,
        )

    def _with_rejection(self, current: Optional[MonitorSnapshot], reason: str) -> MonitorSnapshot:
        previous = current or self._empty_snapshot()
        return previous.model_copy(
            update={
                "rejected_updates": previous.rejected_updates + 1,
                "last_rejection": reason,
            }
        )


def _build_source(settings: Settings) -> DataSource:
    if settings.feed_backend == "firebase":
        if not settings.firebase_database_url:
            raise ValueError("FIREBASE_DATABASE_URL must be set for the firebase feed backend.")
        return FirebaseRealtimeSource.connect(
            settings.firebase_database_url, settings.firebase_credentials_path
        )
    return build_default_database(settings.mock_seed_path)


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor from environment settings."""
    settings = get_settings()
    thresholds = DEFAULT_THRESHOLDS.with_overrides(settings.threshold_overrides)
    return MonitorService(
        source=_build_source(settings),
        classifier=AlertClassifier(thresholds),
        feed_path=settings.feed_path,
    )
