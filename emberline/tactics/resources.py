"""
Emberline - Tactical Resources
Water supply points and firebreak lines supporting tactical plans.
"""

import logging
from dataclasses import dataclass
from typing import List, Dict, Any, Optional, Tuple

from emberline.core.geo_utils import destination_point, normalize_direction
from emberline.core.simulation import SimulationSource
from emberline.prediction.spread_calculator import FireSpreadPrediction

logger = logging.getLogger(__name__)


# (id, type, capacity L, flow L/min, accessibility, nominal km, bearing offset, setup min, reliability)
_WATER_SOURCE_TEMPLATES: List[Tuple] = [
    ("river_001", "natural", 1_000_000, 5000, "good", 2.3, 60, 15, 0.95),
    ("reservoir_001", "artificial", 500_000, 3000, "excellent", 3.1, 160, 10, 0.98),
    ("pond_001", "natural", 50_000, 800, "difficult", 1.8, 280, 25, 0.85),
    ("mobile_tank_001", "mobile", 20_000, 1200, "excellent", 0.5, 0, 5, 0.90),
]

# (type, offset ahead of fire km, width m, length m, build h, effectiveness, impact, personnel risk)
_FIREBREAK_TEMPLATES: List[Tuple] = [
    ("natural", 3.0, 20, 2000, 0, 0.85, "minimal", "low"),
    ("constructed", 2.0, 30, 2500, 4, 0.90, "moderate", "moderate"),
    ("burnout", 1.5, 50, 1500, 6, 0.95, "moderate", "high"),
    ("backfire", 1.0, 100, 2000, 8, 0.98, "significant", "extreme"),
]


@dataclass(frozen=True)
class WaterSource:
    source_id: str
    source_type: str  # natural, artificial, mobile
    latitude: float
    longitude: float
    capacity_liters: float
    flow_rate_lpm: float
    accessibility: str  # excellent, good, difficult, extreme
    distance_km: float
    setup_time_minutes: int
    reliability: float  # 0-1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.source_id,
            "type": self.source_type,
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "capacity_liters": self.capacity_liters,
            "flow_rate_lpm": self.flow_rate_lpm,
            "accessibility": self.accessibility,
            "distance_km": round(self.distance_km, 2),
            "setup_time_minutes": self.setup_time_minutes,
            "reliability": self.reliability,
        }


@dataclass(frozen=True)
class FirebreakStrategy:
    firebreak_id: str
    firebreak_type: str  # natural, constructed, burnout, backfire
    line: List[Tuple[float, float]]  # (lat, lon) endpoints
    orientation_degrees: float
    width_m: float
    length_m: float
    construction_hours: float
    effectiveness: float  # 0-1
    environmental_impact: str  # minimal, moderate, significant
    risk_to_personnel: str  # low, moderate, high, extreme

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.firebreak_id,
            "type": self.firebreak_type,
            "location": [{"latitude": lat, "longitude": lon} for lat, lon in self.line],
            "orientation_degrees": round(self.orientation_degrees, 1),
            "width_m": self.width_m,
            "length_m": self.length_m,
            "construction_hours": self.construction_hours,
            "effectiveness": self.effectiveness,
            "environmental_impact": self.environmental_impact,
            "risk_to_personnel": self.risk_to_personnel,
        }


def identify_water_sources(
    latitude: float,
    longitude: float,
    radius_km: float,
    simulation: SimulationSource,
) -> List[WaterSource]:
    """
    Water supply points near a fire, nearest first.

    Positions are simulated around the fire; sources beyond the radius
    are dropped, except the mobile tank which travels with the crews.
    """
    sim = simulation.for_key("water", round(latitude, 3), round(longitude, 3))
    sources = []

    for (source_id, kind, capacity, flow, access, km, bearing, setup,
         reliability) in _WATER_SOURCE_TEMPLATES:
        distance = km * sim.uniform(0.8, 1.2)
        if kind != "mobile" and distance > radius_km:
            continue
        lat, lon = destination_point(latitude, longitude, distance, bearing)
        sources.append(WaterSource(
            source_id=source_id,
            source_type=kind,
            latitude=lat,
            longitude=lon,
            capacity_liters=capacity,
            flow_rate_lpm=flow,
            accessibility=access,
            distance_km=distance,
            setup_time_minutes=setup,
            reliability=reliability,
        ))

    sources.sort(key=lambda s: s.distance_km)
    logger.debug(f"Identified {len(sources)} water sources within {radius_km} km")
    return sources


def design_firebreaks(
    latitude: float,
    longitude: float,
    wind_direction_degrees: float,
    spread: Optional[FireSpreadPrediction] = None,
) -> List[FirebreakStrategy]:
    """
    Firebreak lines across the fire's path.

    Each line is centred ahead of the fire along the spread direction and
    runs perpendicular to it. Lines are placed further out for fast fires.
    """
    heading = spread.direction_degrees if spread is not None else wind_direction_degrees
    heading = normalize_direction(heading)
    orientation = normalize_direction(heading + 90)
    reach = max(1.0, spread.speed_kmh * 6) if spread is not None else 1.0

    firebreaks = []
    for index, (kind, offset, width, length, hours, effectiveness, impact,
                risk) in enumerate(_FIREBREAK_TEMPLATES, start=1):
        centre = destination_point(latitude, longitude, offset * reach, heading)
        half = length / 2000
        a = destination_point(centre[0], centre[1], half, orientation)
        b = destination_point(centre[0], centre[1], half, orientation + 180)
        firebreaks.append(FirebreakStrategy(
            firebreak_id=f"{kind}_{index:03d}",
            firebreak_type=kind,
            line=[a, b],
            orientation_degrees=orientation,
            width_m=width,
            length_m=length,
            construction_hours=hours,
            effectiveness=effectiveness,
            environmental_impact=impact,
            risk_to_personnel=risk,
        ))

    return firebreaks
