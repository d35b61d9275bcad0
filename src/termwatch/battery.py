"""
Battery level probe backed by psutil.

Reads the host battery charge as a fraction and formats it for the
battery line.
"""

import logging
from typing import Callable, Optional

import psutil

from .core import BATTERY_UNAVAILABLE

logger = logging.getLogger(__name__)

BatteryReader = Callable[[], Optional[float]]


def read_system_battery() -> float | None:
    """Read the host battery charge as a fraction in [0, 1].

    Returns:
        Charge fraction, or None if the machine reports no battery
    """
    sensors_battery = getattr(psutil, "sensors_battery", None)
    if sensors_battery is None:
        return None
    battery = sensors_battery()
    if battery is None:
        return None
    return float(battery.percent) / 100.0


class BatteryProbe:
    """Formats the instantaneous battery level on demand."""

    def __init__(self, reader: Optional[BatteryReader] = None) -> None:
        """Initialize probe.

        Args:
            reader: Callable returning a charge fraction (defaults to psutil)
        """
        self._reader = reader or read_system_battery
        self._monitoring = False

    @property
    def monitoring_enabled(self) -> bool:
        """Check if battery monitoring has been enabled."""
        return self._monitoring

    def enable_monitoring(self) -> None:
        """Enable battery monitoring (idempotent)."""
        if not self._monitoring:
            logger.debug("Battery monitoring enabled")
            self._monitoring = True

    def read(self) -> str:
        """Read battery level as an integer percentage.

        Returns:
            Percentage string like "73%", or "N/A" if the level is unavailable
        """
        self.enable_monitoring()
        try:
            level = self._reader()
        except Exception as e:
            logger.warning(f"Battery level unavailable: {e}")
            return BATTERY_UNAVAILABLE

        # Platforms report a negative sentinel when the level is unknown
        if level is None or level < 0:
            return BATTERY_UNAVAILABLE
        return self.format_percent(level)

    @staticmethod
    def format_percent(fraction: float) -> str:
        """Format a charge fraction as a whole percentage.

        Args:
            fraction: Charge in [0, 1]

        Returns:
            Formatted percentage string
        """
        return f"{fraction * 100:.0f}%"
