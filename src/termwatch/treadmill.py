"""
FTMS treadmill as a live source of health samples.

The feed connects to an FTMS-compatible treadmill with pyftms, turns each
update event into step and heart-rate samples in the health store, and
tells the aggregator to re-read the store so the watch face follows the
workout as it happens.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from bleak import BleakScanner
from pyftms import (
    FitnessMachine,
    FtmsEvents,
    MachineType,
    UpdateEvent,
    get_client,
    get_client_from_address,
)

from .cache import AddressCache
from .core import FTMS_SERVICE_UUID
from .health import HealthKind, InMemoryHealthStore, QuantitySample

logger = logging.getLogger(__name__)

Now = Callable[[], datetime]


class TreadmillFeed:
    """Records treadmill readings as health samples and signals each update."""

    DEVICE_NAME_HINTS = ("KS-AP-RQ3", "WALKINGPAD", "TREADMILL")

    def __init__(
        self,
        store: InMemoryHealthStore,
        on_update: Optional[Callable[[], None]] = None,
        now: Optional[Now] = None,
        cache: Optional[AddressCache] = None,
    ) -> None:
        """Initialize feed with no device connection.

        Args:
            store: Health store receiving the samples
            on_update: Called after each recorded update, from the BLE
                callback context (e.g. StatusAggregator.request_health_refresh)
            now: Clock used to timestamp samples
            cache: Treadmill address cache
        """
        self.store = store
        self.on_update = on_update
        self.cache = cache or AddressCache()
        self._now = now or datetime.now
        self._client: Optional[FitnessMachine] = None
        self._last_step_count: Optional[int] = None
        self._last_reading_at: Optional[datetime] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._updated: Optional[asyncio.Event] = None

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to a treadmill."""
        return self._client is not None and self._client.is_connected

    def clear_address_cache(self) -> None:
        """Forget the cached address, forcing a scan on next connect."""
        self.cache.clear()

    def _looks_like_treadmill(self, device: Any) -> bool:
        name = (device.name or "").upper()
        if any(hint in name for hint in self.DEVICE_NAME_HINTS):
            return True
        return FTMS_SERVICE_UUID in (getattr(device, "service_uuids", None) or [])

    async def discover(self, timeout: float = 10.0) -> Any:
        """Scan BLE for an FTMS treadmill.

        Returns:
            The BLE device, or None if nothing matched
        """
        try:
            devices = await BleakScanner.discover(timeout=timeout)
        except Exception as e:
            logger.error(f"Discovery failed: {e}")
            return None

        device = next((d for d in devices if self._looks_like_treadmill(d)), None)
        if device is None:
            logger.warning("No FTMS treadmill found")
        else:
            logger.info(f"Found treadmill: {device.name} ({device.address})")
        return device

    async def connect(self) -> bool:
        """Connect to the cached treadmill, or scan for one.

        Returns:
            True if connected and listening for updates
        """
        if self.is_connected:
            return True

        self._loop = asyncio.get_running_loop()
        self._updated = asyncio.Event()
        callbacks = {
            "on_ftms_event": self.on_ftms_event,
            "on_disconnect": self._on_device_disconnect,
        }

        address = self.cache.load()
        if address:
            try:
                client = await get_client_from_address(
                    address, scan_timeout=5.0, timeout=5.0, **callbacks
                )
                return await self._attach(client, address)
            except Exception as e:
                logger.warning(f"Cached treadmill {address} unreachable: {e}")

        device = await self.discover()
        if device is None:
            return False
        try:
            client = get_client(device, MachineType.TREADMILL, timeout=5.0, **callbacks)
            return await self._attach(client, device.address)
        except Exception as e:
            logger.error(f"Connection failed: {e}")
            return False

    async def _attach(self, client: FitnessMachine, address: str) -> bool:
        await client.connect()
        self._client = client
        self.cache.save(address)
        logger.info(f"Streaming health samples from {client.name}")
        return True

    async def wait_for_update(self, timeout: float) -> bool:
        """Wait until the first update from the treadmill is recorded.

        Returns:
            True if an update arrived within the timeout
        """
        if self._updated is None:
            return False
        try:
            await asyncio.wait_for(self._updated.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("No treadmill update received")
            return False

    async def disconnect(self) -> None:
        """Disconnect from the treadmill."""
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.disconnect()
        except Exception as e:
            logger.error(f"Disconnect failed: {e}")

    def on_ftms_event(self, event: FtmsEvents) -> None:
        """Handle FTMS events; called from the BLE callback context."""
        if not isinstance(event, UpdateEvent):
            return
        try:
            self.record(event.event_data)
            if self.on_update is not None:
                self.on_update()
            if self._loop is not None and self._updated is not None:
                self._loop.call_soon_threadsafe(self._updated.set)
        except Exception as e:
            logger.error(f"Event handler error: {e}")

    def record(self, data: dict) -> None:
        """Turn one treadmill update into health samples.

        Args:
            data: Update fields from the machine (step_count, heart_rate, ...)
        """
        now = self._now()
        start = self._last_reading_at or now
        self._last_reading_at = now

        step_count = data.get("step_count")
        if step_count is not None:
            step_count = int(step_count)
            previous = self._last_step_count
            # A lower total means the machine started a new session
            if previous is None or step_count < previous:
                delta = step_count
            else:
                delta = step_count - previous
            self._last_step_count = step_count
            if delta > 0:
                self.store.add_sample(
                    QuantitySample(HealthKind.STEP_COUNT, float(delta), start, now)
                )

        heart_rate = data.get("heart_rate")
        if heart_rate:
            self.store.add_sample(
                QuantitySample(HealthKind.HEART_RATE, float(heart_rate), now, now)
            )

    def _on_device_disconnect(self, client: FitnessMachine) -> None:
        logger.warning("Treadmill disconnected")
        self._client = None
