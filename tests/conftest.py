"""
Pytest configuration and fixtures
"""
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from emberline.core.simulation import SimulationSource
from emberline.ingestion.weather_client import WeatherSnapshot
from emberline.prediction.spread_calculator import WindConditions, predict_spread


MADRID = (40.4168, -3.7038)
OSLO = (59.9139, 10.7522)


@pytest.fixture
def madrid():
    return MADRID


@pytest.fixture
def oslo():
    return OSLO


@pytest.fixture
def simulation():
    """Seeded simulation source."""
    return SimulationSource(42)


@pytest.fixture
def fixed_now():
    return datetime(2026, 7, 15, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_weather():
    """Hot, dry and windy afternoon."""
    return {
        "temperature": 38,
        "humidity": 15,
        "windSpeed": 30,
        "windDirection": 225,
    }


@pytest.fixture
def extreme_snapshot(sample_weather, fixed_now):
    return WeatherSnapshot.from_dict({
        **sample_weather,
        "latitude": MADRID[0],
        "longitude": MADRID[1],
        "timestamp": fixed_now.isoformat(),
    })


@pytest.fixture
def mild_snapshot(fixed_now):
    return WeatherSnapshot(
        temperature_celsius=18,
        humidity_percent=65,
        wind_speed_kmh=5,
        wind_direction_degrees=90,
        latitude=MADRID[0],
        longitude=MADRID[1],
        timestamp=fixed_now,
    )


@pytest.fixture
def fast_spread():
    """Extreme-band spread out of Madrid (24h area above 10,000 ha)."""
    return predict_spread(100, WindConditions(speed_kmh=20, direction_degrees=90), MADRID)


@pytest.fixture
def slow_spread():
    """Small-band spread out of Madrid."""
    return predict_spread(0, WindConditions(speed_kmh=0, direction_degrees=90), MADRID)
