"""
Ambient temperature from the weatherapi.com current-conditions endpoint.
"""

import logging
from typing import Any, Optional

import httpx

from .core import WEATHER_API_KEY, WEATHER_API_URL, WEATHER_LOCATION

logger = logging.getLogger(__name__)


class WeatherClient:
    """Fetches the current temperature for the caller's IP location."""

    def __init__(
        self,
        api_key: str = WEATHER_API_KEY,
        url: str = WEATHER_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize weather client.

        Args:
            api_key: weatherapi.com key
            url: Current-conditions endpoint
            client: Optional shared HTTP client (one is created per request if None)
        """
        self.api_key = api_key
        self.url = url
        self._client = client

    @property
    def params(self) -> dict[str, str]:
        """Query parameters: API key and location auto-detected by IP."""
        return {"key": self.api_key, "q": WEATHER_LOCATION}

    async def fetch_temperature(self) -> str | None:
        """Request current conditions and extract the temperature.

        Returns:
            Formatted temperature like "21.3°C", or None on any failure
        """
        try:
            payload = await self._get_json()
        except httpx.HTTPError as e:
            logger.error(f"Error fetching weather data: {e}")
            return None
        except ValueError as e:
            logger.error(f"Error parsing JSON: {e}")
            return None

        temp_c = self.extract_temp_c(payload)
        if temp_c is None:
            logger.error("Weather response has no current.temp_c")
            return None
        return self.format_temperature(temp_c)

    async def _get_json(self) -> Any:
        if self._client is not None:
            response = await self._client.get(self.url, params=self.params)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.url, params=self.params)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def extract_temp_c(payload: Any) -> float | None:
        """Descend into current.temp_c.

        Args:
            payload: Decoded JSON body

        Returns:
            Temperature in Celsius, or None if absent or not a number
        """
        if not isinstance(payload, dict):
            return None
        current = payload.get("current")
        if not isinstance(current, dict):
            return None
        temp_c = current.get("temp_c")
        if isinstance(temp_c, bool) or not isinstance(temp_c, (int, float)):
            return None
        return float(temp_c)

    @staticmethod
    def format_temperature(celsius: float) -> str:
        return f"{celsius:.1f}°C"
