#!/usr/bin/env python
"""Treadmill feed tests: turning machine updates into health samples."""

from datetime import datetime, timedelta

import pytest

pytest.importorskip("pyftms")

from termwatch import treadmill  # noqa: E402
from termwatch.health import HealthKind, HealthMetrics, InMemoryHealthStore  # noqa: E402
from termwatch.treadmill import TreadmillFeed  # noqa: E402


class SteppingClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 6, 3, 9, 0, 0)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_feed():
    store = InMemoryHealthStore()
    return store, TreadmillFeed(store, now=SteppingClock())


def test_feed_starts_disconnected():
    _, feed = make_feed()
    assert not feed.is_connected


def test_record_step_deltas():
    store, feed = make_feed()
    feed.record({"step_count": 100})
    feed.record({"step_count": 150})
    feed.record({"step_count": 150})

    values = [s.value for s in store.samples(HealthKind.STEP_COUNT)]
    assert values == [100.0, 50.0]


def test_record_new_session_resets_total():
    store, feed = make_feed()
    feed.record({"step_count": 400})
    feed.record({"step_count": 30})

    values = [s.value for s in store.samples(HealthKind.STEP_COUNT)]
    assert values == [400.0, 30.0]


def test_record_heart_rate_skips_zero():
    store, feed = make_feed()
    feed.record({"heart_rate": 0})
    feed.record({"heart_rate": 95, "speed_instant": 4.5})

    samples = store.samples(HealthKind.HEART_RATE)
    assert [s.value for s in samples] == [95.0]


def test_on_ftms_event_ignores_other_events():
    store, feed = make_feed()
    feed.on_ftms_event(object())  # type: ignore[arg-type]
    assert store.samples(HealthKind.STEP_COUNT) == []


@pytest.mark.asyncio
async def test_recorded_samples_feed_health_metrics():
    store, feed = make_feed()
    feed.record({"step_count": 1200, "heart_rate": 110})
    feed.record({"step_count": 1500, "heart_rate": 118})

    metrics = HealthMetrics(store)
    now = datetime(2024, 6, 3, 12, 0, 0)
    assert await metrics.query_steps_today(now=now) == "1500 steps"
    assert await metrics.query_latest_heart_rate() == "118 BPM"


class FakeUpdateEvent:
    def __init__(self, event_data: dict) -> None:
        self.event_data = event_data


def test_update_event_records_and_notifies(monkeypatch):
    """Each update is recorded before the listener is told about it."""
    monkeypatch.setattr(treadmill, "UpdateEvent", FakeUpdateEvent)
    store = InMemoryHealthStore()
    seen = []
    feed = TreadmillFeed(
        store,
        on_update=lambda: seen.append(len(store.samples(HealthKind.STEP_COUNT))),
        now=SteppingClock(),
    )

    feed.on_ftms_event(FakeUpdateEvent({"step_count": 40}))
    feed.on_ftms_event(FakeUpdateEvent({"step_count": 90}))

    assert seen == [1, 2]


def test_listener_errors_are_absorbed(monkeypatch):
    monkeypatch.setattr(treadmill, "UpdateEvent", FakeUpdateEvent)

    def broken():
        raise RuntimeError("aggregator gone")

    store = InMemoryHealthStore()
    feed = TreadmillFeed(store, on_update=broken, now=SteppingClock())
    feed.on_ftms_event(FakeUpdateEvent({"heart_rate": 101}))

    assert [s.value for s in store.samples(HealthKind.HEART_RATE)] == [101.0]


@pytest.mark.asyncio
async def test_wait_for_update_without_connection():
    _, feed = make_feed()
    assert await feed.wait_for_update(0.01) is False
