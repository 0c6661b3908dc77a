"""
Emberline - Weather Client
Fetches current conditions from the Open-Meteo API (free, no authentication
required) and falls back to default conditions when the provider is slow or
unavailable.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from emberline.core.config import settings
from emberline.core.constants import DEFAULT_WEATHER
from emberline.core.exceptions import ProviderError
from emberline.core.simulation import DATA_SOURCE_REAL, DATA_SOURCE_SIMULATED

logger = logging.getLogger(__name__)

# Accepted spellings for each snapshot field
_FIELD_ALIASES: Dict[str, List[str]] = {
    "temperature_celsius": ["temperature_celsius", "temperature", "temperature_2m"],
    "humidity_percent": ["humidity_percent", "humidity", "relative_humidity_2m"],
    "wind_speed_kmh": ["wind_speed_kmh", "windSpeed", "wind_speed", "wind_speed_10m"],
    "wind_direction_degrees": [
        "wind_direction_degrees", "windDirection", "wind_direction", "wind_direction_10m",
    ],
    "wind_gusts_kmh": ["wind_gusts_kmh", "windGusts", "wind_gusts", "wind_gusts_10m"],
}


def coerce_float(value: Any) -> Optional[float]:
    """Return a finite float, or None for anything that is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class WeatherSnapshot:
    """
    A single weather reading.

    Numeric fields are None when the provider did not supply a usable value;
    the risk scorer substitutes defaults for them.
    """
    temperature_celsius: Optional[float] = None
    humidity_percent: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    wind_direction_degrees: Optional[float] = None
    timestamp: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wind_gusts_kmh: Optional[float] = None
    data_source: str = DATA_SOURCE_REAL

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherSnapshot":
        """Build a snapshot from camelCase or snake_case keys."""
        values: Dict[str, Optional[float]] = {}
        for name, aliases in _FIELD_ALIASES.items():
            values[name] = None
            for alias in aliases:
                if alias in data:
                    values[name] = coerce_float(data[alias])
                    break

        return cls(
            timestamp=_parse_timestamp(data.get("timestamp", data.get("time"))),
            latitude=coerce_float(data.get("latitude", data.get("lat"))),
            longitude=coerce_float(data.get("longitude", data.get("lon"))),
            data_source=data.get("data_source", data.get("dataSource", DATA_SOURCE_REAL)),
            **values,
        )

    @property
    def missing_fields(self) -> List[str]:
        """Core fields that will have to be defaulted."""
        return [name for name in DEFAULT_WEATHER if getattr(self, name) is None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature_celsius": self.temperature_celsius,
            "humidity_percent": self.humidity_percent,
            "wind_speed_kmh": self.wind_speed_kmh,
            "wind_direction_degrees": self.wind_direction_degrees,
            "wind_gusts_kmh": self.wind_gusts_kmh,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "data_source": self.data_source,
        }


def default_weather_snapshot(
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    timestamp: Optional[datetime] = None,
) -> WeatherSnapshot:
    """Fallback reading used when the weather provider cannot answer."""
    return WeatherSnapshot(
        latitude=latitude,
        longitude=longitude,
        timestamp=timestamp or datetime.now(timezone.utc),
        data_source=DATA_SOURCE_SIMULATED,
        **DEFAULT_WEATHER,
    )


class WeatherClient:
    """
    Async client for the Open-Meteo forecast API.
    Documentation: https://open-meteo.com/en/docs
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the weather client.

        Args:
            base_url: Forecast endpoint, defaults to settings.weather_api_url
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url or settings.weather_api_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_current_weather(self, latitude: float, longitude: float) -> WeatherSnapshot:
        """
        Get current weather conditions for a location.

        Raises:
            ProviderError: on HTTP failure or an unusable payload
        """
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": ",".join([
                "temperature_2m",
                "relative_humidity_2m",
                "wind_speed_10m",
                "wind_direction_10m",
                "wind_gusts_10m",
            ]),
            "wind_speed_unit": "kmh",
            "timezone": "auto",
        }

        try:
            response = await self._get_client().get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ProviderError("open-meteo", str(e)) from e
        except ValueError as e:
            raise ProviderError("open-meteo", f"invalid JSON: {e}") from e

        current = data.get("current") if isinstance(data, dict) else None
        if not isinstance(current, dict) or not current:
            raise ProviderError("open-meteo", "response has no current conditions")

        snapshot = WeatherSnapshot.from_dict({
            **current,
            "latitude": data.get("latitude", latitude),
            "longitude": data.get("longitude", longitude),
        })
        if snapshot.timestamp is None:
            snapshot = replace(snapshot, timestamp=datetime.now(timezone.utc))
        elif snapshot.timestamp.tzinfo is None:
            # timezone=auto reports local wall time plus the offset
            offset = coerce_float(data.get("utc_offset_seconds"))
            zone = timezone(timedelta(seconds=offset)) if offset is not None else timezone.utc
            snapshot = replace(snapshot, timestamp=snapshot.timestamp.replace(tzinfo=zone))
        return snapshot


async def fetch_weather_with_fallback(
    client: WeatherClient,
    latitude: float,
    longitude: float,
    timeout: Optional[float] = None,
) -> WeatherSnapshot:
    """
    Fetch current weather, waiting at most `timeout` seconds.

    Any provider failure or timeout resolves to default_weather_snapshot().
    """
    wait = timeout if timeout is not None else settings.provider_timeout_seconds
    try:
        return await asyncio.wait_for(client.get_current_weather(latitude, longitude), wait)
    except asyncio.TimeoutError:
        logger.warning(f"Weather provider timed out after {wait}s, using defaults")
    except ProviderError as e:
        logger.warning(f"Weather provider failed ({e}), using defaults")
    return default_weather_snapshot(latitude, longitude)
