"""
Emberline - Wind Analysis
Wind characterization for tactical planning: stability, a 24h forecast,
spread vectors, critical wind changes and attack angles.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from emberline.core.constants import DEFAULT_WEATHER
from emberline.core.geo_utils import angular_difference, normalize_direction
from emberline.core.simulation import DATA_SOURCE_SIMULATED, SimulationSource
from emberline.ingestion.weather_client import WeatherSnapshot

FORECAST_HOURS = 24

# (spread type, bearing offset from wind, probability, minutes to reach, fuel consumption kg/m2)
_SPREAD_VECTOR_TEMPLATES = [
    ("head", 0, 0.9, 30, 2.5),
    ("right_flank", 90, 0.7, 120, 1.8),
    ("left_flank", -90, 0.7, 120, 1.8),
    ("backing", 180, 0.5, 300, 1.2),
]


def local_hour(moment: datetime, longitude: Optional[float] = None) -> int:
    """
    Hour of day at the fire.

    Naive timestamps and timestamps carrying a non-zero offset are already
    local. For UTC timestamps the hour is shifted to the nautical time zone
    of the longitude (15 degrees per hour).
    """
    offset = moment.utcoffset()
    if offset is None or offset != timedelta(0) or longitude is None:
        return moment.hour
    return (moment + timedelta(hours=round(longitude / 15.0))).hour


def atmospheric_stability(temperature_c: float, hour: int) -> str:
    """Hot afternoons are unstable, nights stable, everything else neutral."""
    if 10 <= hour <= 16 and temperature_c > 25:
        return "unstable"
    if hour >= 22 or hour <= 6:
        return "stable"
    return "neutral"


def wind_intensity(speed_kmh: float) -> str:
    if speed_kmh > 30:
        return "extreme"
    if speed_kmh > 20:
        return "high"
    if speed_kmh > 10:
        return "moderate"
    return "low"


def vector_spread_rate(wind_speed_kmh: float, spread_type: str) -> float:
    """Spread rate (m/min) of one side of the fire."""
    if spread_type == "head":
        rate = 2 + wind_speed_kmh * 0.3
    elif spread_type == "backing":
        rate = 0.5 + wind_speed_kmh * 0.02
    else:
        rate = 1 + wind_speed_kmh * 0.1
    return max(0.1, rate)


@dataclass(frozen=True)
class WindState:
    speed_kmh: float
    direction_degrees: float
    gusts_kmh: float
    stability: str  # stable, neutral, unstable
    turbulence: float  # 0-1
    shear: float

    @property
    def stability_factor(self) -> float:
        """How predictable the wind is for crews, 0-1."""
        base = {"stable": 1.0, "neutral": 0.9, "unstable": 0.75}[self.stability]
        return base * (1 - 0.3 * self.turbulence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "speed_kmh": round(self.speed_kmh, 2),
            "direction_degrees": round(self.direction_degrees, 1),
            "gusts_kmh": round(self.gusts_kmh, 2),
            "stability": self.stability,
            "turbulence": round(self.turbulence, 3),
            "shear": round(self.shear, 2),
        }


@dataclass(frozen=True)
class WindForecastPoint:
    timestamp: datetime
    wind: WindState
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "wind": self.wind.to_dict(),
            "confidence": round(self.confidence, 2),
        }


@dataclass(frozen=True)
class SpreadVector:
    spread_type: str  # head, right_flank, left_flank, backing
    direction_degrees: float
    rate_m_per_min: float
    intensity: str
    probability: float
    time_to_reach_minutes: int
    fuel_consumption: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.spread_type,
            "direction_degrees": round(self.direction_degrees, 1),
            "rate_m_per_min": round(self.rate_m_per_min, 2),
            "intensity": self.intensity,
            "probability": self.probability,
            "time_to_reach_minutes": self.time_to_reach_minutes,
            "fuel_consumption": self.fuel_consumption,
        }


@dataclass(frozen=True)
class WindChange:
    timestamp: datetime
    change: str
    impact: str  # high, critical
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "change": self.change,
            "impact": self.impact,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class AttackAngle:
    angle_degrees: float
    strategy: str
    effectiveness: float
    risk: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "angle_degrees": round(self.angle_degrees, 1),
            "strategy": self.strategy,
            "effectiveness": self.effectiveness,
            "risk": self.risk,
            "description": self.description,
        }


@dataclass(frozen=True)
class WindAnalysis:
    """Everything the tactical planner needs to know about the wind."""
    current: WindState
    forecast: List[WindForecastPoint] = field(default_factory=list)
    spread_vectors: List[SpreadVector] = field(default_factory=list)
    critical_changes: List[WindChange] = field(default_factory=list)
    attack_angles: List[AttackAngle] = field(default_factory=list)
    data_source: str = DATA_SOURCE_SIMULATED

    @property
    def has_critical_changes(self) -> bool:
        return any(c.impact == "critical" for c in self.critical_changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "forecast": [f.to_dict() for f in self.forecast],
            "spread_vectors": [v.to_dict() for v in self.spread_vectors],
            "critical_changes": [c.to_dict() for c in self.critical_changes],
            "attack_angles": [a.to_dict() for a in self.attack_angles],
            "data_source": self.data_source,
        }


def current_wind_state(weather: WeatherSnapshot, now: Optional[datetime] = None) -> WindState:
    """Current wind from a snapshot, defaulting missing readings."""
    speed = weather.wind_speed_kmh
    if speed is None:
        speed = DEFAULT_WEATHER["wind_speed_kmh"]
    speed = max(0.0, speed)
    direction = weather.wind_direction_degrees
    if direction is None:
        direction = DEFAULT_WEATHER["wind_direction_degrees"]
    temperature = weather.temperature_celsius
    if temperature is None:
        temperature = DEFAULT_WEATHER["temperature_celsius"]
    moment = weather.timestamp or now or datetime.now(timezone.utc)

    return WindState(
        speed_kmh=speed,
        direction_degrees=normalize_direction(direction),
        gusts_kmh=weather.wind_gusts_kmh if weather.wind_gusts_kmh is not None else speed * 1.3,
        stability=atmospheric_stability(temperature, local_hour(moment, weather.longitude)),
        turbulence=min(1.0, speed / 30.0),
        shear=speed * 0.1,
    )


def forecast_wind(
    current: WindState,
    temperature_c: float,
    start: datetime,
    simulation: SimulationSource,
    hours: int = FORECAST_HOURS,
    longitude: Optional[float] = None,
) -> List[WindForecastPoint]:
    """
    Simulated hourly forecast around the current wind.

    Direction swings up to 45 degrees and speed up to 10 km/h over a
    diurnal cycle, with seeded noise on top.
    """
    points = []
    for i in range(hours):
        moment = start + timedelta(hours=i)
        cycle = math.sin(i / 24 * 2 * math.pi)
        base_direction = current.direction_degrees + cycle * 45
        base_speed = current.speed_kmh + math.sin(i / 12 * 2 * math.pi) * 10
        speed = max(0.0, base_speed + simulation.uniform(-2.5, 2.5))
        # Afternoon heating, night cooling
        hour = local_hour(moment, longitude)
        hour_temperature = temperature_c + 6 * math.sin((hour - 9) / 24 * 2 * math.pi)

        points.append(WindForecastPoint(
            timestamp=moment,
            wind=WindState(
                speed_kmh=speed,
                direction_degrees=normalize_direction(base_direction + simulation.uniform(-15, 15)),
                gusts_kmh=max(0.0, base_speed) * 1.3,
                stability=atmospheric_stability(hour_temperature, hour),
                turbulence=simulation.uniform(0.0, 0.5),
                shear=max(0.0, base_speed) * 0.1,
            ),
            confidence=simulation.uniform(0.8, 1.0) * (1 - i / (hours * 4)),
        ))
    return points


def calculate_spread_vectors(wind: WindState) -> List[SpreadVector]:
    """Head, flank and backing spread relative to the wind."""
    vectors = []
    for spread_type, offset, probability, minutes, fuel in _SPREAD_VECTOR_TEMPLATES:
        if spread_type == "head":
            intensity = wind_intensity(wind.speed_kmh)
        elif spread_type == "backing":
            intensity = "low"
        else:
            intensity = "moderate"
        vectors.append(SpreadVector(
            spread_type=spread_type,
            direction_degrees=normalize_direction(wind.direction_degrees + offset),
            rate_m_per_min=vector_spread_rate(wind.speed_kmh, spread_type),
            intensity=intensity,
            probability=probability,
            time_to_reach_minutes=minutes,
            fuel_consumption=fuel,
        ))
    return vectors


def identify_critical_changes(forecast: List[WindForecastPoint]) -> List[WindChange]:
    """Direction shifts over 45 degrees, speed jumps over 10 km/h, and onset of instability."""
    changes = []
    for prev, curr in zip(forecast, forecast[1:]):
        shift = angular_difference(curr.wind.direction_degrees, prev.wind.direction_degrees)
        if shift > 45:
            changes.append(WindChange(
                timestamp=curr.timestamp,
                change=f"Wind direction shifts {shift:.0f} degrees",
                impact="critical" if shift > 90 else "high",
                recommendation="Reposition crews and re-check escape routes before the shift",
            ))

        increase = curr.wind.speed_kmh - prev.wind.speed_kmh
        if increase > 10:
            changes.append(WindChange(
                timestamp=curr.timestamp,
                change=f"Wind speed increases by {increase:.0f} km/h",
                impact="critical" if increase > 20 else "high",
                recommendation="Pull crews back from the head and suspend aerial drops",
            ))

        if prev.wind.stability == "stable" and curr.wind.stability == "unstable":
            changes.append(WindChange(
                timestamp=curr.timestamp,
                change="Atmosphere turns unstable",
                impact="high",
                recommendation="Expect erratic fire behavior and column development",
            ))
    return changes


def calculate_attack_angles(wind: WindState) -> List[AttackAngle]:
    """Head-on attack is least effective and most dangerous; the rear is safest."""
    direction = wind.direction_degrees
    return [
        AttackAngle(
            angle_degrees=direction,
            strategy="Direct head attack",
            effectiveness=0.3,
            risk="extreme",
            description="Attack against the advancing head; only with light winds",
        ),
        AttackAngle(
            angle_degrees=normalize_direction(direction + 90),
            strategy="Right flank attack",
            effectiveness=0.8,
            risk="moderate",
            description="Work along the right flank towards the head",
        ),
        AttackAngle(
            angle_degrees=normalize_direction(direction - 90),
            strategy="Left flank attack",
            effectiveness=0.8,
            risk="moderate",
            description="Work along the left flank towards the head",
        ),
        AttackAngle(
            angle_degrees=normalize_direction(direction + 180),
            strategy="Rear attack",
            effectiveness=0.9,
            risk="low",
            description="Anchor at the heel and pinch the flanks",
        ),
    ]


def analyze_wind(
    weather: WeatherSnapshot,
    simulation: SimulationSource,
    now: Optional[datetime] = None,
) -> WindAnalysis:
    """
    Analyze current and forecast wind for a fire.

    Args:
        weather: Current weather snapshot
        simulation: Source for the simulated forecast
        now: Forecast start, defaults to the snapshot timestamp

    Returns:
        WindAnalysis
    """
    current = current_wind_state(weather, now)
    start = weather.timestamp or now or datetime.now(timezone.utc)
    temperature = weather.temperature_celsius
    if temperature is None:
        temperature = DEFAULT_WEATHER["temperature_celsius"]

    forecast = forecast_wind(current, temperature, start, simulation, longitude=weather.longitude)

    return WindAnalysis(
        current=current,
        forecast=forecast,
        spread_vectors=calculate_spread_vectors(current),
        critical_changes=identify_critical_changes(forecast),
        attack_angles=calculate_attack_angles(current),
        data_source=DATA_SOURCE_SIMULATED,
    )
