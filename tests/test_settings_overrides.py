from __future__ import annotations

from typing import Iterable

import pytest

from feeds.mock_realtime_db import build_default_database
from services.monitor import build_default_monitor
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture()
def fresh_caches() -> Iterable[None]:
    caches = (get_settings, build_default_database, build_default_monitor)
    _clear_caches(caches)
    yield
    _clear_caches(caches)


def test_environment_overrides_apply(monkeypatch, fresh_caches) -> None:
    monkeypatch.setenv("FEED_BACKEND", "MOCK")
    monkeypatch.setenv("FEED_PATH", "stations/river-1/sensors/")
    monkeypatch.setenv("THRESHOLD_TEMPERATURE_DANGER", "32")
    monkeypatch.setenv("THRESHOLD_HUMIDITY_WARNING", "not-a-number")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    monitor = build_default_monitor()

    assert settings.feed_backend == "mock"
    assert settings.feed_path == "/stations/river-1/sensors"
    assert settings.log_level == "DEBUG"
    assert settings.threshold_overrides == {"temperature": {"danger": 32.0}}
    assert monitor.feed_path == "/stations/river-1/sensors"
    assert monitor.classifier.thresholds["temperature"].danger == 32.0
    assert monitor.classifier.thresholds["humidity"].warning == 80.0
    assert monitor.threshold_report().inconsistent_fields == []


def test_unknown_backend_falls_back_to_mock(monkeypatch, fresh_caches) -> None:
    monkeypatch.setenv("FEED_BACKEND", "carrier-pigeon")

    assert get_settings().feed_backend == "mock"
    assert build_default_monitor().source.name == "mock"


def test_firebase_backend_requires_database_url(monkeypatch, fresh_caches) -> None:
    monkeypatch.setenv("FEED_BACKEND", "firebase")
    monkeypatch.delenv("FIREBASE_DATABASE_URL", raising=False)

    with pytest.raises(ValueError, match="FIREBASE_DATABASE_URL"):
        build_default_monitor()


def test_mock_seed_path_preloads_feed(monkeypatch, fresh_caches, tmp_path) -> None:
    seed = tmp_path / "seed.json"
    seed.write_text('{"sensors": {"temperature": 20, "humidity": 50, "distance_cm": 2, "flow_rate_lpm": 30}}')
    monkeypatch.setenv("MOCK_FEED_SEED_PATH", str(seed))

    monitor = build_default_monitor()
    monitor.start()
    try:
        assert monitor.latest().classification.level.value == "warning"
    finally:
        monitor.stop()
