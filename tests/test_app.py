from typing import Iterator, List

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from feeds.mock_realtime_db import MockRealtimeDatabase
from services.classifier import AlertClassifier
from services.monitor import MonitorService, build_default_monitor

CRITICAL = {"temperature": 25.0, "humidity": 90.0, "distance_cm": 3.0, "flow_rate_lpm": 20.0}
WARNING = {"temperature": 20.0, "humidity": 50.0, "distance_cm": 2.0, "flow_rate_lpm": 22.0}


@pytest.fixture
def api_client(monkeypatch) -> Iterator[TestClient]:
    monitors: List[MonitorService] = []

    def build_test_monitor() -> MonitorService:
        if not monitors:
            monitors.append(
                MonitorService(
                    source=MockRealtimeDatabase(),
                    classifier=AlertClassifier(),
                    feed_path="/sensors",
                    notifiers=[],
                )
            )
        return monitors[0]

    def cache_clear() -> None:
        while monitors:
            monitors.pop().stop()

    build_test_monitor.cache_clear = cache_clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_monitor", build_test_monitor)
    monkeypatch.setattr("app.api.build_default_monitor", build_test_monitor)

    app = create_app()
    with TestClient(app) as client:
        yield client

    cache_clear()


def test_lifespan_starts_and_stops_monitor() -> None:
    app = create_app()

    with TestClient(app):
        monitor_during = build_default_monitor()
        assert monitor_during.running is True

    assert monitor_during.running is False
    monitor_after = build_default_monitor()
    try:
        assert monitor_after is not monitor_during
    finally:
        monitor_after.stop()
        build_default_monitor.cache_clear()


def test_status_before_any_reading(api_client: TestClient) -> None:
    response = api_client.get("/status")

    assert response.status_code == 200
    payload = response.json()
    assert payload["reading"] is None
    assert payload["sensors"] == []
    assert payload["classification"] == {
        "level": "normal",
        "message": "No data available",
        "color": "#4CAF50",
    }


def test_publish_reading_updates_status(api_client: TestClient) -> None:
    response = api_client.post("/readings", json=CRITICAL)

    assert response.status_code == 202
    assert response.json()["classification"]["level"] == "critical"

    status = api_client.get("/status").json()
    assert status["classification"]["color"] == "#F44336"
    assert status["reading"] == CRITICAL
    water_level = next(sensor for sensor in status["sensors"] if sensor["field"] == "distance_cm")
    assert water_level["label"] == "Water Level"
    assert water_level["color"] == "#F44336"


def test_publish_rejects_incomplete_reading(api_client: TestClient) -> None:
    response = api_client.post("/readings", json={"temperature": 20.0})

    assert response.status_code == 422


def test_classify_does_not_touch_state(api_client: TestClient) -> None:
    response = api_client.post("/classify", json=WARNING)

    assert response.status_code == 200
    assert response.json() == {
        "level": "warning",
        "message": "WARNING: Water levels and flow rate indicate high flood risk!",
        "color": "#FF9800",
    }
    assert api_client.get("/status").json()["reading"] is None


def test_thresholds_report_inconsistent_temperature(api_client: TestClient) -> None:
    response = api_client.get("/thresholds")

    assert response.status_code == 200
    payload = response.json()
    assert payload["feed_path"] == "/sensors"
    assert payload["backend"] == "mock"
    assert payload["thresholds"]["distance_cm"] == {"warning": 5.0, "danger": 3.0, "inverted": True}
    assert payload["inconsistent_fields"] == ["temperature"]


def test_health_reports_subscription(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "feed": "subscribed"}
