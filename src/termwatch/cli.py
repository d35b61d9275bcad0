"""
Command line entry point for the terminal watch face.

Runs the status aggregator and shows its snapshot either as a live
Rich view (default) or as a single frame once all sources have reported.
"""

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Optional

from .aggregator import StatusAggregator
from .battery import BatteryProbe
from .cache import AddressCache
from .clock import Clock
from .core import WEATHER_API_KEY
from .display import DisplayManager
from .health import HealthMetrics, InMemoryHealthStore
from .weather import WeatherClient

if TYPE_CHECKING:
    from .treadmill import TreadmillFeed

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


class WatchFaceApp:
    """Wires the sources, the aggregator and the display together."""

    # Seconds --once waits for the first treadmill reading
    FEED_WAIT = 5.0

    def __init__(
        self,
        weather_key: str = WEATHER_API_KEY,
        use_weather: bool = True,
        use_treadmill: bool = False,
        display: Optional[DisplayManager] = None,
    ) -> None:
        """Initialize app.

        Args:
            weather_key: weatherapi.com key
            use_weather: Fetch the temperature at startup
            use_treadmill: Feed health samples from an FTMS treadmill
            display: Display manager (creates one if None)
        """
        self.display = display or DisplayManager()
        self.store = InMemoryHealthStore()
        self.aggregator = StatusAggregator(
            clock=Clock(),
            battery=BatteryProbe(),
            health=HealthMetrics(self.store),
            weather=WeatherClient(api_key=weather_key) if use_weather else None,
        )
        self.feed: Optional["TreadmillFeed"] = None
        if use_treadmill:
            # pyftms is only needed when a treadmill is requested
            from .treadmill import TreadmillFeed

            self.feed = TreadmillFeed(
                self.store, on_update=self.aggregator.request_health_refresh
            )

    async def _connect_feed(self) -> bool:
        if self.feed is None:
            return False
        if not await self.feed.connect():
            logger.warning("Treadmill not connected; health fields keep placeholders")
            return False
        return True

    async def run_once(self) -> None:
        """Wait for every source to report, then print one frame."""
        try:
            await self.aggregator.start()
            if self.feed is not None and await self._connect_feed():
                await self.feed.wait_for_update(self.FEED_WAIT)
            await self.aggregator.settle()
            await self.aggregator.stop()
            self.display.print_snapshot(self.aggregator.snapshot)
        finally:
            if self.feed is not None:
                await self.feed.disconnect()

    async def run(self) -> None:
        """Show the live watch face until cancelled."""
        self.display.start_live(self.aggregator.snapshot)
        unsubscribe = self.aggregator.subscribe(self.display.update_live)
        try:
            await self.aggregator.start()
            await self._connect_feed()
            # Runs until Ctrl+C cancels the main task
            while True:
                await asyncio.sleep(3600)
        finally:
            unsubscribe()
            await self.aggregator.stop()
            self.display.stop_live()
            if self.feed is not None:
                await self.feed.disconnect()


def main() -> None:
    """Entry point for the watch face."""
    parser = argparse.ArgumentParser(
        description="Terminal-styled watch face",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  termwatch                  # Live watch face (Ctrl+C to exit)
  termwatch --once           # Print one frame after all sources report
  termwatch --treadmill      # Steps and heart rate from an FTMS treadmill
  termwatch --no-weather     # Skip the weather request
  termwatch --clear-cache    # Clear cached treadmill address
        """,
    )

    parser.add_argument(
        "--once", action="store_true", help="Print a single frame and exit"
    )
    parser.add_argument(
        "--no-weather", action="store_true", help="Skip the weather request"
    )
    parser.add_argument(
        "--weather-key",
        default=WEATHER_API_KEY,
        help="weatherapi.com API key",
    )
    parser.add_argument(
        "--treadmill",
        action="store_true",
        help="Feed steps and heart rate from an FTMS treadmill",
    )
    parser.add_argument(
        "--clear-cache", action="store_true", help="Clear cached treadmill address"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.clear_cache:
        AddressCache().clear()
        DisplayManager().print_info("Cleared cached treadmill address")
        return

    app = WatchFaceApp(
        weather_key=args.weather_key,
        use_weather=not args.no_weather,
        use_treadmill=args.treadmill,
    )

    try:
        asyncio.run(app.run_once() if args.once else app.run())
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
