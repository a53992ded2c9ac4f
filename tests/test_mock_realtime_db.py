"""Unit tests for the in-process realtime database."""

from __future__ import annotations

import json
from typing import Any, List

import pytest

from feeds.mock_realtime_db import MockRealtimeDatabase

SAMPLE = {"temperature": 21.5, "humidity": 55.0, "distance_cm": 12.0, "flow_rate_lpm": 3.0}


def _recorder() -> tuple[List[Any], Any]:
    received: List[Any] = []
    return received, received.append


def test_subscribe_delivers_current_value_immediately() -> None:
    database = MockRealtimeDatabase()
    database.set("/sensors", SAMPLE)
    received, callback = _recorder()

    database.subscribe("/sensors", callback)

    assert received == [SAMPLE]


def test_subscribe_to_empty_path_delivers_none() -> None:
    database = MockRealtimeDatabase()
    received, callback = _recorder()

    database.subscribe("/sensors", callback)

    assert received == [None]


def test_writes_below_subscribed_path_deliver_full_value() -> None:
    database = MockRealtimeDatabase()
    database.set("/sensors", SAMPLE)
    received, callback = _recorder()
    database.subscribe("/sensors", callback)

    database.set("/sensors/temperature", 30.0)

    assert received[-1] == {**SAMPLE, "temperature": 30.0}


def test_writes_above_subscribed_path_notify() -> None:
    database = MockRealtimeDatabase()
    received, callback = _recorder()
    database.subscribe("/sensors", callback)

    database.set("/", {"sensors": SAMPLE, "other": 1})

    assert received == [None, SAMPLE]


def test_unrelated_writes_do_not_notify() -> None:
    database = MockRealtimeDatabase()
    received, callback = _recorder()
    database.subscribe("/sensors", callback)

    database.set("/devices/pump", True)

    assert received == [None]


def test_update_merges_children() -> None:
    database = MockRealtimeDatabase()
    database.set("/sensors", SAMPLE)

    database.update("/sensors", {"humidity": 91.0, "flow_rate_lpm": 22.0})

    assert database.get("/sensors") == {**SAMPLE, "humidity": 91.0, "flow_rate_lpm": 22.0}


def test_delete_prunes_empty_parents() -> None:
    database = MockRealtimeDatabase()
    database.set("/site/a/sensors", SAMPLE)

    database.delete("/site/a/sensors")

    assert database.get("/site") is None
    assert database.get("/") is None


def test_closed_subscription_stops_delivery() -> None:
    database = MockRealtimeDatabase()
    received, callback = _recorder()
    subscription = database.subscribe("/sensors", callback)

    subscription.close()
    subscription.close()
    database.set("/sensors", SAMPLE)

    assert received == [None]
    assert subscription.active is False
    assert database.listener_count() == 0


def test_values_are_copied_in_and_out() -> None:
    database = MockRealtimeDatabase()
    payload = dict(SAMPLE)
    database.set("/sensors", payload)

    payload["temperature"] = 99.0
    fetched = database.get("/sensors")
    fetched["humidity"] = 0.0

    assert database.get("/sensors") == SAMPLE


def test_empty_path_segment_is_rejected() -> None:
    database = MockRealtimeDatabase()

    with pytest.raises(ValueError, match="empty segment"):
        database.set("/sensors//temperature", 1.0)


def test_seed_file_populates_tree(tmp_path) -> None:
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({"sensors": SAMPLE}))

    database = MockRealtimeDatabase(seed_path=seed)

    assert database.get("/sensors") == SAMPLE


def test_unreadable_seed_file_is_ignored(tmp_path) -> None:
    seed = tmp_path / "seed.json"
    seed.write_text("{not json")

    database = MockRealtimeDatabase(seed_path=seed)

    assert database.get("/") is None


def test_write_back_during_delivery_leaves_later_subscribers_current() -> None:
    database = MockRealtimeDatabase()
    flooded = {**SAMPLE, "distance_cm": 2.0}

    def reset_on_flood(value: Any) -> None:
        if value == flooded:
            database.set("/sensors", SAMPLE)

    database.subscribe("/sensors", reset_on_flood)
    received, callback = _recorder()
    database.subscribe("/sensors", callback)

    database.set("/sensors", flooded)

    assert database.get("/sensors") == SAMPLE
    assert received[-1] == SAMPLE
    assert flooded not in received


def test_listener_closed_during_delivery_is_skipped() -> None:
    database = MockRealtimeDatabase()
    received, callback = _recorder()
    subscriptions = []

    def close_other(value: Any) -> None:
        if value is not None and subscriptions:
            subscriptions[0].close()

    database.subscribe("/sensors", close_other)
    subscriptions.append(database.subscribe("/sensors", callback))

    database.set("/sensors", SAMPLE)

    assert received == [None]
