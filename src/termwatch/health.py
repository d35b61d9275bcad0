"""
Health metrics: step count and heart rate behind an authorization gate.

The host health store is a blocking, permission-gated service. HealthMetrics
wraps it with async queries that run the store calls off the event loop and
return display-formatted strings (or None when there is nothing to show).
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class HealthKind(Enum):
    """Quantity types understood by the health store."""

    STEP_COUNT = "stepCount"
    HEART_RATE = "heartRate"


@dataclass(frozen=True)
class QuantitySample:
    """One measured quantity over a time interval."""

    kind: HealthKind
    value: float
    start: datetime
    end: datetime


class HealthStore(ABC):
    """Host service holding health samples."""

    def quantity_type(self, identifier: str) -> HealthKind | None:
        """Look up a quantity type by identifier.

        Args:
            identifier: Type identifier such as "stepCount"

        Returns:
            Matching HealthKind, or None if the store does not know it
        """
        try:
            return HealthKind(identifier)
        except ValueError:
            return None

    @abstractmethod
    def request_authorization(
        self, share: set[HealthKind], read: set[HealthKind]
    ) -> bool:
        """Ask for permission to write and read the given types.

        Returns:
            True if access was granted
        """

    @abstractmethod
    def sum_quantity(
        self, kind: HealthKind, start: datetime, end: datetime
    ) -> float | None:
        """Cumulative sum of samples starting within [start, end].

        Returns:
            Sum of sample values, or None if no samples match
        """

    @abstractmethod
    def latest_sample(self, kind: HealthKind) -> QuantitySample | None:
        """Most recent sample of a kind, by start time."""


class InMemoryHealthStore(HealthStore):
    """Thread-safe health store keeping samples in process memory."""

    def __init__(
        self, samples: Iterable[QuantitySample] = (), authorized: bool = True
    ) -> None:
        """Initialize store.

        Args:
            samples: Initial samples
            authorized: Whether authorization requests are granted
        """
        self._lock = threading.Lock()
        self._samples: list[QuantitySample] = list(samples)
        self.authorized = authorized
        self.authorization_requests = 0

    def add_sample(self, sample: QuantitySample) -> None:
        """Record a sample; safe to call from any thread."""
        with self._lock:
            self._samples.append(sample)

    def samples(self, kind: HealthKind) -> list[QuantitySample]:
        """Return a copy of all samples of a kind."""
        with self._lock:
            return [s for s in self._samples if s.kind is kind]

    def request_authorization(
        self, share: set[HealthKind], read: set[HealthKind]
    ) -> bool:
        with self._lock:
            self.authorization_requests += 1
        logger.debug(
            f"Authorization requested (share={sorted(k.value for k in share)}, "
            f"read={sorted(k.value for k in read)}): {self.authorized}"
        )
        return self.authorized

    def sum_quantity(
        self, kind: HealthKind, start: datetime, end: datetime
    ) -> float | None:
        matching = [s.value for s in self.samples(kind) if start <= s.start <= end]
        if not matching:
            return None
        return float(sum(matching))

    def latest_sample(self, kind: HealthKind) -> QuantitySample | None:
        samples = self.samples(kind)
        if not samples:
            return None
        return max(samples, key=lambda s: s.start)


class HealthMetrics:
    """Authorizes against a health store and queries steps and heart rate."""

    STEP_COUNT_ID = HealthKind.STEP_COUNT.value
    HEART_RATE_ID = HealthKind.HEART_RATE.value

    def __init__(self, store: HealthStore) -> None:
        """Initialize with the host health store.

        Args:
            store: Health store to authorize against and query
        """
        self._store = store
        self._step_type = store.quantity_type(self.STEP_COUNT_ID)
        self._heart_rate_type = store.quantity_type(self.HEART_RATE_ID)

    async def authorize(self) -> bool:
        """Request read access to steps and heart rate, write access to steps.

        Returns:
            True if authorized, False on denial or any store error
        """
        if self._step_type is None or self._heart_rate_type is None:
            logger.warning("Health store lacks step count or heart rate types")
            return False

        share = {self._step_type}
        read = {self._step_type, self._heart_rate_type}
        try:
            granted = await asyncio.to_thread(
                self._store.request_authorization, share, read
            )
        except Exception as e:
            logger.error(f"Health authorization failed: {e}")
            return False

        if not granted:
            logger.info("Health data access denied")
        return bool(granted)

    async def query_steps_today(self, now: Optional[datetime] = None) -> str | None:
        """Sum today's step samples from local midnight to now.

        Args:
            now: End of the query window (defaults to the wall clock)

        Returns:
            Formatted step count like "1500 steps", or None if no data
        """
        if self._step_type is None:
            return None
        if now is None:
            now = datetime.now()
        start_of_day = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)

        try:
            total = await asyncio.to_thread(
                self._store.sum_quantity, self._step_type, start_of_day, now
            )
        except Exception as e:
            logger.error(f"Step count query failed: {e}")
            return None

        if total is None:
            return None
        return self.format_steps(total)

    async def query_latest_heart_rate(self) -> str | None:
        """Fetch the most recent heart-rate sample.

        Returns:
            Formatted rate like "62 BPM", or None if no sample exists
        """
        if self._heart_rate_type is None:
            return None

        try:
            sample = await asyncio.to_thread(
                self._store.latest_sample, self._heart_rate_type
            )
        except Exception as e:
            logger.error(f"Heart rate query failed: {e}")
            return None

        if sample is None:
            return None
        return self.format_heart_rate(sample.value)

    @staticmethod
    def format_steps(count: float) -> str:
        return f"{count:.0f} steps"

    @staticmethod
    def format_heart_rate(bpm: float) -> str:
        return f"{bpm:.0f} BPM"
