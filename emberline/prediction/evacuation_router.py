"""
Emberline - Evacuation Zones
Concentric evacuation zones around a fire with routes away from the
spread direction and shelters on the safe side.
"""

import math
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from emberline.core.constants import (
    EVACUATION_RINGS,
    EVACUATION_TRAVEL_SPEED_KMH,
    PEOPLE_PER_VEHICLE,
    VEHICLES_PER_ROUTE_PER_HOUR,
)
from emberline.core.geo_utils import angular_difference, degrees_to_cardinal, destination_point
from emberline.core.simulation import SimulationSource
from emberline.prediction.spread_calculator import FireSpreadPrediction

# Simulated residents per km2 for each ring, (min, max)
_RING_DENSITY: Dict[str, Tuple[int, int]] = {
    "immediate": (40, 120),
    "high": (30, 90),
    "medium": (15, 60),
    "low": (5, 30),
}


@dataclass(frozen=True)
class EvacuationRoute:
    """A single evacuation route out of a zone."""
    route_id: str
    bearing_degrees: float
    road_name: str
    distance_km: float
    capacity_vehicles_per_hour: int
    estimated_time_minutes: int
    status: str  # clear, congested, blocked
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "route_id": self.route_id,
            "bearing_degrees": round(self.bearing_degrees, 1),
            "road": self.road_name,
            "distance_km": round(self.distance_km, 2),
            "capacity": self.capacity_vehicles_per_hour,
            "estimated_time_minutes": self.estimated_time_minutes,
            "status": self.status,
            "warning": self.warning,
        }


@dataclass(frozen=True)
class Shelter:
    """Emergency shelter location."""
    name: str
    latitude: float
    longitude: float
    capacity: int
    facilities: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "location": {
                "latitude": self.latitude,
                "longitude": self.longitude,
            },
            "capacity": self.capacity,
            "facilities": self.facilities,
        }


@dataclass(frozen=True)
class EvacuationZone:
    """Ring around the fire evacuated at one priority."""
    zone_id: str
    priority: str  # immediate, high, medium, low
    inner_radius_km: float
    outer_radius_km: float
    population: int
    vulnerable_population: int
    time_to_evacuate_minutes: int
    routes: List[EvacuationRoute] = field(default_factory=list)
    shelters: List[Shelter] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone_id": self.zone_id,
            "priority": self.priority,
            "inner_radius_km": self.inner_radius_km,
            "outer_radius_km": self.outer_radius_km,
            "population": self.population,
            "vulnerable_population": self.vulnerable_population,
            "time_to_evacuate_minutes": self.time_to_evacuate_minutes,
            "routes": [r.to_dict() for r in self.routes],
            "shelters": [s.to_dict() for s in self.shelters],
        }


def estimate_evacuation_time(
    population: int,
    num_routes: int = 2,
    vehicles_per_route_per_hour: int = VEHICLES_PER_ROUTE_PER_HOUR
) -> Dict[str, Any]:
    """
    Estimate time needed to evacuate a population.

    Args:
        population: Number of people to evacuate
        num_routes: Number of usable evacuation routes
        vehicles_per_route_per_hour: Vehicle capacity per route

    Returns:
        Dictionary with evacuation time estimates
    """
    vehicles_needed = math.ceil(population / PEOPLE_PER_VEHICLE)

    # With every route blocked people leave on foot or by escort, at a tenth of the rate
    effective_routes = num_routes if num_routes > 0 else 0.1
    total_capacity_per_hour = (
        effective_routes * vehicles_per_route_per_hour * PEOPLE_PER_VEHICLE
    )
    hours_needed = population / total_capacity_per_hour

    return {
        "population": population,
        "vehicles_needed": vehicles_needed,
        "routes_available": num_routes,
        "evacuation_time_hours": round(hours_needed, 1),
        "evacuation_time_minutes": int(math.ceil(hours_needed * 60)),
        "recommended_start": "immediate" if hours_needed > 2 else "within 1 hour",
    }


def identify_evacuation_zones(
    spread: FireSpreadPrediction,
    simulation: SimulationSource,
) -> List[EvacuationZone]:
    """
    Build the evacuation rings around a projected fire.

    Population, vulnerable share and the local road bearing are simulated;
    routes that head within 30 degrees of the spread direction are blocked.

    Args:
        spread: Spread projection (origin and direction are used)
        simulation: Source for simulated demographics

    Returns:
        Zones ordered from immediate to low priority
    """
    zones = []
    inner = 0.0
    safe_direction = (spread.direction_degrees + 180) % 360

    for index, (outer, priority) in enumerate(EVACUATION_RINGS, start=1):
        ring_area = math.pi * (outer ** 2 - inner ** 2)
        low, high = _RING_DENSITY[priority]
        population = int(ring_area * simulation.randint(low, high))
        vulnerable = min(population, int(population * simulation.uniform(0.12, 0.25)))

        routes = _build_routes(index, outer, spread.direction_degrees, safe_direction, simulation)
        usable = [r for r in routes if r.status != "blocked"]
        estimate = estimate_evacuation_time(
            population,
            num_routes=len(usable),
            vehicles_per_route_per_hour=VEHICLES_PER_ROUTE_PER_HOUR,
        )

        zones.append(EvacuationZone(
            zone_id=f"EVAC-{index}",
            priority=priority,
            inner_radius_km=inner,
            outer_radius_km=outer,
            population=population,
            vulnerable_population=vulnerable,
            time_to_evacuate_minutes=estimate["evacuation_time_minutes"],
            routes=routes,
            shelters=_place_shelters(index, spread, outer, safe_direction, simulation),
        ))
        inner = outer

    return zones


def _build_routes(
    zone_index: int,
    radius_km: float,
    fire_direction: float,
    safe_direction: float,
    simulation: SimulationSource,
) -> List[EvacuationRoute]:
    """Three routes fanning out on the safe side plus the local main road."""
    bearings = [
        safe_direction,
        (safe_direction - 60) % 360,
        (safe_direction + 60) % 360,
        simulation.uniform(0, 360),
    ]
    routes = []

    for i, bearing in enumerate(bearings, start=1):
        distance = radius_km + 10.0
        angle_to_fire = angular_difference(bearing, fire_direction)
        warning = None

        if angle_to_fire < 30:
            status = "blocked"
            warning = "Route heads into the fire's path"
        elif angle_to_fire < 90:
            status = "congested"
            warning = "Route crosses the fire flank"
        else:
            status = "clear"

        travel = distance / EVACUATION_TRAVEL_SPEED_KMH * 60
        if status == "congested":
            travel *= 1.8

        routes.append(EvacuationRoute(
            route_id=f"EVAC-{zone_index}-R{i}",
            bearing_degrees=bearing,
            road_name=f"Road {degrees_to_cardinal(bearing)}",
            distance_km=distance,
            capacity_vehicles_per_hour=VEHICLES_PER_ROUTE_PER_HOUR,
            estimated_time_minutes=int(travel),
            status=status,
            warning=warning,
        ))

    return routes


def _place_shelters(
    zone_index: int,
    spread: FireSpreadPrediction,
    radius_km: float,
    safe_direction: float,
    simulation: SimulationSource,
) -> List[Shelter]:
    """Shelters a few km beyond the ring on the safe side."""
    shelters = []
    for i, offset in enumerate((-20, 20), start=1):
        lat, lon = destination_point(
            spread.origin_latitude, spread.origin_longitude,
            radius_km + 5.0, (safe_direction + offset) % 360,
        )
        shelters.append(Shelter(
            name=f"Shelter {zone_index}.{i}",
            latitude=lat,
            longitude=lon,
            capacity=simulation.randint(2, 12) * 100,
            facilities=["water", "sanitation", "food", "first aid"],
        ))
    return shelters
