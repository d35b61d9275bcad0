"""
Periodic multi-source status aggregator feeding the watch face view.

Owns the StatusSnapshot, drives the clock, battery, health and weather
sources, and notifies subscribers whenever a field changes. All snapshot
mutations happen on the event loop the aggregator was started on.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from .battery import BatteryProbe
from .clock import Clock
from .core import CLOCK_INTERVAL
from .health import HealthMetrics
from .snapshot import StatusSnapshot
from .weather import WeatherClient

logger = logging.getLogger(__name__)

Observer = Callable[[StatusSnapshot], Any]


class StatusAggregator:
    """Composes the status sources into one render-ready snapshot."""

    def __init__(
        self,
        clock: Clock,
        battery: BatteryProbe,
        health: Optional[HealthMetrics] = None,
        weather: Optional[WeatherClient] = None,
        tick_interval: float = CLOCK_INTERVAL,
    ) -> None:
        """Initialize aggregator with placeholder values.

        Args:
            clock: Time/date source
            battery: Battery level source
            health: Step and heart-rate source (skipped if None)
            weather: Temperature source (skipped if None)
            tick_interval: Seconds between clock refreshes
        """
        self.clock = clock
        self.battery = battery
        self.health = health
        self.weather = weather
        self.tick_interval = tick_interval

        time_str, date_str = clock.tick()
        self.snapshot = StatusSnapshot(time=time_str, date=date_str)

        self._observers: list[Observer] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._clock_task: Optional[asyncio.Task] = None
        self._startup_tasks: list[asyncio.Task] = []
        self._health_authorized = False
        self._health_task: Optional[asyncio.Task] = None
        self._health_stale = False

    @property
    def is_running(self) -> bool:
        """Check if the clock ticker is active."""
        return self._clock_task is not None and not self._clock_task.done()

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register an observer called with the snapshot after each change.

        Args:
            callback: Function receiving the StatusSnapshot

        Returns:
            Function that removes the observer
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def update(self, field: str, value: str) -> None:
        """Set one snapshot field and notify observers.

        Must be called on the aggregator's event loop.

        Args:
            field: Snapshot field name
            value: Formatted display value
        """
        self.snapshot.set(field, value)
        self._notify()

    def dispatch(self, field: str, value: str) -> None:
        """Schedule a field update from any thread.

        Args:
            field: Snapshot field name
            value: Formatted display value

        Raises:
            RuntimeError: If the aggregator has not been started
        """
        if self._loop is None:
            raise RuntimeError("Aggregator not started")
        self._loop.call_soon_threadsafe(self.update, field, value)

    def _notify(self) -> None:
        for callback in list(self._observers):
            try:
                callback(self.snapshot)
            except Exception as e:
                logger.error(f"Observer error: {e}")

    async def start(self) -> None:
        """Read the battery and launch the clock, health and weather tasks."""
        if self.is_running:
            logger.warning("Aggregator already running")
            return

        self._loop = asyncio.get_running_loop()
        self.refresh_battery()

        self._clock_task = asyncio.create_task(self._run_clock())
        if self.health is not None:
            self._startup_tasks.append(asyncio.create_task(self.refresh_health()))
        if self.weather is not None:
            self._startup_tasks.append(
                asyncio.create_task(self.refresh_temperature())
            )

    async def settle(self) -> None:
        """Wait until the startup requests and any health refresh complete."""
        if self._startup_tasks:
            await asyncio.gather(*self._startup_tasks, return_exceptions=True)
        if self._health_task is not None:
            await asyncio.gather(self._health_task, return_exceptions=True)

    async def stop(self) -> None:
        """Stop the clock ticker; in-flight requests run to completion."""
        if self._clock_task is None:
            return

        self._clock_task.cancel()
        try:
            await self._clock_task
        except asyncio.CancelledError:
            pass
        self._clock_task = None

    def refresh_clock(self) -> None:
        """Write the current time and date."""
        time_str, date_str = self.clock.tick()
        self.snapshot.set("time", time_str)
        self.snapshot.set("date", date_str)
        self._notify()

    def refresh_battery(self) -> None:
        """Read the battery level synchronously."""
        self.update("battery_percent", self.battery.read())

    async def refresh_health(self) -> None:
        """Authorize once, then query steps and heart rate concurrently."""
        health = self.health
        if health is None:
            return
        if not await health.authorize():
            return
        self._health_authorized = True
        await self._query_health(health)

    def request_health_refresh(self) -> None:
        """Re-run the health queries after new samples; safe from any thread.

        Ignored until authorization has been granted, since the startup
        refresh reads every sample recorded before that point.
        """
        if self._loop is None:
            logger.debug("Health refresh requested before start")
            return
        self._loop.call_soon_threadsafe(self._schedule_health_query)

    def _schedule_health_query(self) -> None:
        if self.health is None or not self._health_authorized:
            return
        if self._health_task is not None and not self._health_task.done():
            # Picked up by the running task once its queries finish
            self._health_stale = True
            return
        self._health_task = asyncio.create_task(self._run_health_queries(self.health))

    async def _run_health_queries(self, health: HealthMetrics) -> None:
        self._health_stale = True
        while self._health_stale:
            self._health_stale = False
            await self._query_health(health)

    async def _query_health(self, health: HealthMetrics) -> None:
        await asyncio.gather(
            self._refresh_steps(health), self._refresh_heart_rate(health)
        )

    async def _refresh_steps(self, health: HealthMetrics) -> None:
        steps = await health.query_steps_today()
        if steps is not None:
            self.update("step_count", steps)

    async def _refresh_heart_rate(self, health: HealthMetrics) -> None:
        heart_rate = await health.query_latest_heart_rate()
        if heart_rate is not None:
            self.update("heart_rate_bpm", heart_rate)

    async def refresh_temperature(self) -> None:
        """Fetch the temperature once."""
        if self.weather is None:
            return
        temperature = await self.weather.fetch_temperature()
        if temperature is not None:
            self.update("temperature_c", temperature)

    async def _run_clock(self) -> None:
        """Background task refreshing the clock lines."""
        try:
            while True:
                await asyncio.sleep(self.tick_interval)
                self.refresh_clock()
        except Exception as e:
            logger.error(f"Clock loop error: {e}")
