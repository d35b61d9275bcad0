#!/usr/bin/env python
"""Health metrics tests against the in-memory store."""

from datetime import datetime, timedelta

import pytest

from termwatch.health import (
    HealthKind,
    HealthMetrics,
    HealthStore,
    InMemoryHealthStore,
    QuantitySample,
)

NOW = datetime(2024, 6, 3, 15, 30, 0)


def steps(value, start):
    return QuantitySample(HealthKind.STEP_COUNT, value, start, start)


def heart_rate(value, start):
    return QuantitySample(HealthKind.HEART_RATE, value, start, start)


class FailingStore(InMemoryHealthStore):
    def request_authorization(self, share, read):
        raise RuntimeError("health service unavailable")

    def sum_quantity(self, kind, start, end):
        raise RuntimeError("query failed")


class NoHeartRateStore(InMemoryHealthStore):
    def quantity_type(self, identifier):
        if identifier == "heartRate":
            return None
        return super().quantity_type(identifier)


def test_quantity_type_unknown_identifier():
    """Unknown identifiers give None instead of raising."""
    store = InMemoryHealthStore()
    assert store.quantity_type("stepCount") is HealthKind.STEP_COUNT
    assert store.quantity_type("bloodGlucose") is None


@pytest.mark.asyncio
async def test_authorize_granted():
    store = InMemoryHealthStore()
    assert await HealthMetrics(store).authorize() is True
    assert store.authorization_requests == 1


@pytest.mark.asyncio
async def test_authorize_denied():
    store = InMemoryHealthStore(authorized=False)
    assert await HealthMetrics(store).authorize() is False


@pytest.mark.asyncio
async def test_authorize_store_error_is_denial():
    assert await HealthMetrics(FailingStore()).authorize() is False


@pytest.mark.asyncio
async def test_authorize_missing_type_is_denial():
    store = NoHeartRateStore()
    assert await HealthMetrics(store).authorize() is False
    assert store.authorization_requests == 0


@pytest.mark.asyncio
async def test_steps_today_without_samples():
    """No samples means no update."""
    metrics = HealthMetrics(InMemoryHealthStore())
    assert await metrics.query_steps_today(now=NOW) is None


@pytest.mark.asyncio
async def test_steps_today_sums_samples():
    store = InMemoryHealthStore(
        [
            steps(1000.0, NOW.replace(hour=8)),
            steps(500.0, NOW.replace(hour=12)),
        ]
    )
    assert await HealthMetrics(store).query_steps_today(now=NOW) == "1500 steps"


@pytest.mark.asyncio
async def test_steps_today_ignores_other_days():
    """Only samples starting between local midnight and now count."""
    midnight = NOW.replace(hour=0, minute=0)
    store = InMemoryHealthStore(
        [
            steps(700.0, midnight - timedelta(minutes=1)),
            steps(300.0, midnight),
            steps(200.0, NOW + timedelta(minutes=5)),
        ]
    )
    assert await HealthMetrics(store).query_steps_today(now=NOW) == "300 steps"


@pytest.mark.asyncio
async def test_steps_today_store_error():
    assert await HealthMetrics(FailingStore()).query_steps_today(now=NOW) is None


@pytest.mark.asyncio
async def test_latest_heart_rate_without_samples():
    metrics = HealthMetrics(InMemoryHealthStore())
    assert await metrics.query_latest_heart_rate() is None


@pytest.mark.asyncio
async def test_latest_heart_rate_single_sample():
    store = InMemoryHealthStore([heart_rate(62.4, NOW)])
    assert await HealthMetrics(store).query_latest_heart_rate() == "62 BPM"


@pytest.mark.asyncio
async def test_latest_heart_rate_picks_most_recent():
    """Samples are ordered by descending start time, not insertion."""
    store = InMemoryHealthStore(
        [
            heart_rate(88.0, NOW),
            heart_rate(70.0, NOW - timedelta(hours=1)),
        ]
    )
    assert await HealthMetrics(store).query_latest_heart_rate() == "88 BPM"


@pytest.mark.asyncio
async def test_missing_heart_rate_type_skips_query():
    store = NoHeartRateStore([heart_rate(60.0, NOW)])
    assert await HealthMetrics(store).query_latest_heart_rate() is None


def test_health_store_is_abstract():
    with pytest.raises(TypeError):
        HealthStore()  # type: ignore[abstract]
