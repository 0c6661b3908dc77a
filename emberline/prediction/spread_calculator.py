"""
Emberline - Fire Spread Calculator
Directional spread estimate from the risk score and the wind.

The model is a Rothermel-style proxy, not fire physics: rate of spread
grows linearly with risk and wind, and the burned area grows as a circle
whose radius is the distance covered at that rate. The perimeter is
elongated along the wind.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from emberline.core.constants import (
    DEFAULT_LOCATION,
    DEFAULT_WEATHER,
    MIN_CONTAINMENT_PROBABILITY,
    PERIMETER_POINT_COUNT,
    SPREAD_HORIZONS_HOURS,
)
from emberline.core.geo_utils import (
    angular_difference,
    degrees_to_cardinal,
    destination_point,
    normalize_direction,
)
from emberline.ingestion.weather_client import coerce_float
from emberline.core.constants import intensity_level

# Metres per minute to kilometres per hour
M_PER_MIN_TO_KMH = 0.06

# Spread-rate multiplier swings from 0.5 (backing) to 1.5 (head)
HEAD_FIRE_FACTOR = 1.5


@dataclass(frozen=True)
class WindConditions:
    """Wind input for the spread model."""
    speed_kmh: float
    direction_degrees: float

    @classmethod
    def from_values(
        cls,
        speed: Any = None,
        direction: Any = None,
    ) -> "WindConditions":
        """Coerce raw values, defaulting anything missing or malformed."""
        speed_value = coerce_float(speed)
        direction_value = coerce_float(direction)
        return cls(
            speed_kmh=max(0.0, speed_value) if speed_value is not None
            else DEFAULT_WEATHER["wind_speed_kmh"],
            direction_degrees=direction_value if direction_value is not None
            else DEFAULT_WEATHER["wind_direction_degrees"],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WindConditions":
        return cls.from_values(
            data.get("speed_kmh", data.get("speed", data.get("windSpeed"))),
            data.get("direction_degrees", data.get("direction", data.get("windDirection"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speed_kmh": self.speed_kmh,
            "direction_degrees": self.direction_degrees,
        }


@dataclass(frozen=True)
class PerimeterPoint:
    """
    Position of the 24h fire front on one bearing.

    time_to_reach_hours is how long the front on this bearing takes to cover
    the mean 24h radius; downwind bearings get there first.
    """
    latitude: float
    longitude: float
    bearing_degrees: float
    time_to_reach_hours: float
    intensity: str  # low, moderate, high, extreme

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": round(self.latitude, 6),
            "longitude": round(self.longitude, 6),
            "bearing_degrees": self.bearing_degrees,
            "time_to_reach_hours": round(self.time_to_reach_hours, 2),
            "intensity": self.intensity,
        }


@dataclass(frozen=True)
class FireSpreadPrediction:
    """Spread projection at the 24h and 72h horizons."""
    speed_kmh: float
    direction_degrees: float  # [0, 360)
    area_24h_hectares: float
    area_72h_hectares: float
    containment_probability: float
    rate_of_spread_m_per_min: float
    risk_score: float
    wind_speed_kmh: float
    origin_latitude: float
    origin_longitude: float
    perimeter_points: List[PerimeterPoint] = field(default_factory=list)

    @property
    def direction_cardinal(self) -> str:
        return degrees_to_cardinal(self.direction_degrees)

    def area_at(self, hours: float) -> float:
        """Projected area (ha) after a number of hours."""
        return circular_area_hectares(self.speed_kmh, hours)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speed_kmh": round(self.speed_kmh, 4),
            "direction_degrees": round(self.direction_degrees, 2),
            "direction_cardinal": self.direction_cardinal,
            "rate_of_spread_m_per_min": round(self.rate_of_spread_m_per_min, 3),
            "area_24h_hectares": round(self.area_24h_hectares, 2),
            "area_72h_hectares": round(self.area_72h_hectares, 2),
            "containment_probability": round(self.containment_probability, 3),
            "origin": {
                "latitude": self.origin_latitude,
                "longitude": self.origin_longitude,
            },
            "perimeter_points": [p.to_dict() for p in self.perimeter_points],
        }


def rate_of_spread(risk_score: float, wind_speed_kmh: float) -> float:
    """
    Head-fire rate of spread in m/min.

    0.5 m/min base, up to 2 m/min more from risk, 0.1 m/min per km/h of wind.
    """
    risk = max(0.0, min(100.0, risk_score))
    wind = max(0.0, wind_speed_kmh)
    return 0.5 + 2.0 * risk / 100.0 + 0.1 * wind


def circular_area_hectares(speed_kmh: float, hours: float) -> float:
    """Area of a circle of radius speed * hours, in hectares."""
    radius_km = max(0.0, speed_kmh) * max(0.0, hours)
    return math.pi * radius_km ** 2 * 100.0


def containment_probability(risk_score: float, speed_kmh: float) -> float:
    """Falls with risk and with speed; floored at MIN_CONTAINMENT_PROBABILITY."""
    risk = max(0.0, min(100.0, risk_score))
    speed_term = min(1.0, max(0.0, speed_kmh) / 0.5)
    return max(
        MIN_CONTAINMENT_PROBABILITY,
        0.95 - 0.6 * risk / 100.0 - 0.3 * speed_term,
    )


def directional_factor(bearing: float, spread_direction: float) -> float:
    """1.5 along the spread direction, 1.0 on the flanks, 0.5 behind."""
    delta = math.radians(angular_difference(bearing, spread_direction))
    return 1.0 + 0.5 * math.cos(delta)


def predict_spread(
    risk_score: float,
    wind: WindConditions,
    origin: Optional[Tuple[float, float]] = None,
) -> FireSpreadPrediction:
    """
    Project fire spread for a risk score and wind.

    Args:
        risk_score: 0-100 risk score (clamped)
        wind: Wind speed and direction; direction is wrapped modulo 360
        origin: (latitude, longitude) of the fire, defaults to DEFAULT_LOCATION

    Returns:
        FireSpreadPrediction with areas, perimeter and containment
    """
    origin_lat, origin_lon = origin or DEFAULT_LOCATION
    risk = max(0.0, min(100.0, risk_score))
    direction = normalize_direction(wind.direction_degrees)

    ros = rate_of_spread(risk, wind.speed_kmh)
    speed_kmh = ros * M_PER_MIN_TO_KMH
    short_horizon, long_horizon = SPREAD_HORIZONS_HOURS

    perimeter = _generate_perimeter(
        origin_lat, origin_lon, speed_kmh, direction, risk, short_horizon
    )

    return FireSpreadPrediction(
        speed_kmh=speed_kmh,
        direction_degrees=direction,
        area_24h_hectares=circular_area_hectares(speed_kmh, short_horizon),
        area_72h_hectares=circular_area_hectares(speed_kmh, long_horizon),
        containment_probability=containment_probability(risk, speed_kmh),
        rate_of_spread_m_per_min=ros,
        risk_score=risk,
        wind_speed_kmh=max(0.0, wind.speed_kmh),
        origin_latitude=origin_lat,
        origin_longitude=origin_lon,
        perimeter_points=perimeter,
    )


def _generate_perimeter(
    origin_lat: float,
    origin_lon: float,
    speed_kmh: float,
    direction: float,
    risk: float,
    horizon_hours: int,
) -> List[PerimeterPoint]:
    """
    24h fire front sampled at fixed bearings.

    Each bearing spreads at speed_kmh * directional_factor, so the front is
    stretched downwind (1.5x the mean radius) and pulled in behind (0.5x).
    Bearings closer to the spread direction are reached sooner and burn hotter.
    """
    radius_km = speed_kmh * horizon_hours
    step = 360.0 / PERIMETER_POINT_COUNT
    points = []

    for i in range(PERIMETER_POINT_COUNT):
        bearing = i * step
        factor = directional_factor(bearing, direction)
        lat, lon = destination_point(origin_lat, origin_lon, radius_km * factor, bearing)
        points.append(PerimeterPoint(
            latitude=lat,
            longitude=lon,
            bearing_degrees=bearing,
            time_to_reach_hours=horizon_hours / factor,
            intensity=intensity_level(risk * factor / HEAD_FIRE_FACTOR),
        ))

    return points
