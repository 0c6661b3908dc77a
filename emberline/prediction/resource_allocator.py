"""
Emberline - Resource Allocator
Recommends a deployment for a projected fire and ranks the catalog's
stations, aircraft and water sources by how fast they can help.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from emberline.core.constants import (
    AIRCRAFT_CRUISE_SPEED_KMH,
    AIRCRAFT_SPINUP_MINUTES,
    AREA_BANDS,
    DEPLOYMENT_TABLE,
    DISPATCH_DELAY_MINUTES,
    GROUND_RESPONSE_SPEED_KMH,
)
from emberline.core.geo_utils import haversine_distance
from emberline.ingestion.resource_catalog import (
    Aircraft,
    FireStation,
    ResourceCatalog,
)
from emberline.prediction.spread_calculator import FireSpreadPrediction

logger = logging.getLogger(__name__)

UNIT_LABELS: Dict[str, str] = {
    "ground_crews": "ground crews",
    "aircraft": "aircraft",
    "water_tenders": "water tenders",
    "command_units": "command units",
}


@dataclass(frozen=True)
class DeploymentRecommendation:
    """Units recommended for the incident."""
    ground_crews: int
    aircraft: int
    water_tenders: int
    command_units: int

    def as_counts(self) -> Dict[str, int]:
        return {
            "ground_crews": self.ground_crews,
            "aircraft": self.aircraft,
            "water_tenders": self.water_tenders,
            "command_units": self.command_units,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self.as_counts()


@dataclass(frozen=True)
class StationAssignment:
    station_id: str
    name: str
    distance_km: float
    response_time_minutes: float
    personnel: int
    availability: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "name": self.name,
            "distance_km": round(self.distance_km, 2),
            "response_time_minutes": round(self.response_time_minutes, 1),
            "personnel": self.personnel,
            "availability": self.availability,
        }


@dataclass(frozen=True)
class AircraftAssignment:
    aircraft_id: str
    aircraft_type: str
    capacity_liters: int
    range_km: float
    distance_km: float
    eta_minutes: float
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aircraft_id": self.aircraft_id,
            "type": self.aircraft_type,
            "capacity_liters": self.capacity_liters,
            "range_km": self.range_km,
            "distance_km": round(self.distance_km, 2),
            "eta_minutes": round(self.eta_minutes, 1),
            "status": self.status,
        }


@dataclass(frozen=True)
class WaterSupplyOption:
    source_id: str
    source_type: str
    capacity_liters: int
    distance_km: float
    accessibility: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "type": self.source_type,
            "capacity_liters": self.capacity_liters,
            "distance_km": round(self.distance_km, 2),
            "accessibility": self.accessibility,
        }


@dataclass(frozen=True)
class ResourceAllocation:
    """Deployment recommendation plus ranked resources and any shortfall."""
    area_band: str
    recommended_deployment: DeploymentRecommendation
    fire_stations: List[StationAssignment] = field(default_factory=list)
    aircraft: List[AircraftAssignment] = field(default_factory=list)
    water_sources: List[WaterSupplyOption] = field(default_factory=list)
    available: Dict[str, int] = field(default_factory=dict)
    shortfall: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_shortfall(self) -> bool:
        return any(count > 0 for count in self.shortfall.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area_band": self.area_band,
            "recommended_deployment": self.recommended_deployment.to_dict(),
            "fire_stations": [s.to_dict() for s in self.fire_stations],
            "aircraft": [a.to_dict() for a in self.aircraft],
            "water_sources": [w.to_dict() for w in self.water_sources],
            "available": self.available,
            "shortfall": self.shortfall,
            "has_shortfall": self.has_shortfall,
            "warnings": self.warnings,
        }


def area_band(area_hectares: float) -> str:
    """small / medium / large / extreme by projected 24h area."""
    for upper, band in AREA_BANDS:
        if area_hectares < upper:
            return band
    return "extreme"


def station_response_time(distance_km: float) -> float:
    """Dispatch delay plus road travel, in minutes."""
    return DISPATCH_DELAY_MINUTES + distance_km / GROUND_RESPONSE_SPEED_KMH * 60.0


def aircraft_eta(aircraft_type: str, distance_km: float) -> float:
    """Spin-up plus flight time, in minutes."""
    cruise = AIRCRAFT_CRUISE_SPEED_KMH.get(aircraft_type, AIRCRAFT_CRUISE_SPEED_KMH["helicopter"])
    return AIRCRAFT_SPINUP_MINUTES + distance_km / cruise * 60.0


def allocate_resources(
    spread: FireSpreadPrediction,
    catalog: ResourceCatalog,
    max_stations: int = 5,
    max_aircraft: int = 3,
    max_water_sources: int = 5,
) -> ResourceAllocation:
    """
    Recommend a deployment and rank resources for a projected fire.

    The deployment comes from the area band of the 24h projection. Stations
    are ranked by response time and aircraft by ETA; aircraft whose range
    does not reach the fire are left out. Only the top N of each are
    returned, but shortfall is measured against the whole catalog.

    Args:
        spread: Spread projection (origin and 24h area are used)
        catalog: Available resources
        max_stations: Stations to surface
        max_aircraft: Aircraft to surface
        max_water_sources: Water sources to surface

    Returns:
        ResourceAllocation
    """
    band = area_band(spread.area_24h_hectares)
    recommended = DeploymentRecommendation(**DEPLOYMENT_TABLE[band])
    fire_lat, fire_lon = spread.origin_latitude, spread.origin_longitude

    stations = [
        _assign_station(s, fire_lat, fire_lon) for s in catalog.fire_stations
    ]
    stations.sort(key=lambda s: s.response_time_minutes)

    aircraft: List[AircraftAssignment] = []
    out_of_range = 0
    for a in catalog.aircraft:
        assignment = _assign_aircraft(a, fire_lat, fire_lon)
        if assignment is None:
            out_of_range += 1
            continue
        aircraft.append(assignment)
    aircraft.sort(key=lambda a: a.eta_minutes)

    water = [
        WaterSupplyOption(
            source_id=w.source_id,
            source_type=w.source_type,
            capacity_liters=w.capacity_liters,
            distance_km=haversine_distance(fire_lat, fire_lon, w.latitude, w.longitude),
            accessibility=w.accessibility,
        )
        for w in catalog.water_sources
    ]
    water.sort(key=lambda w: w.distance_km)

    available = _count_available(catalog.fire_stations, aircraft)
    shortfall = {
        unit: max(0, needed - available[unit])
        for unit, needed in recommended.as_counts().items()
    }

    warnings = [
        f"Shortfall of {missing} {UNIT_LABELS[unit]}: request mutual aid"
        for unit, missing in shortfall.items() if missing > 0
    ]
    if out_of_range:
        warnings.append(f"{out_of_range} aircraft out of range of the incident")
    if not water:
        warnings.append("No water sources in catalog: plan for tender shuttles")

    if any(shortfall.values()):
        logger.warning(f"Resource shortfall for {band} incident: {shortfall}")

    return ResourceAllocation(
        area_band=band,
        recommended_deployment=recommended,
        fire_stations=stations[:max_stations],
        aircraft=aircraft[:max_aircraft],
        water_sources=water[:max_water_sources],
        available=available,
        shortfall=shortfall,
        warnings=warnings,
    )


def _assign_station(station: FireStation, lat: float, lon: float) -> StationAssignment:
    distance = haversine_distance(lat, lon, station.latitude, station.longitude)
    return StationAssignment(
        station_id=station.station_id,
        name=station.name,
        distance_km=distance,
        response_time_minutes=station_response_time(distance),
        personnel=station.personnel,
        availability=station.availability,
    )


def _assign_aircraft(aircraft: Aircraft, lat: float, lon: float) -> Optional[AircraftAssignment]:
    distance = haversine_distance(lat, lon, aircraft.latitude, aircraft.longitude)
    if distance > aircraft.range_km:
        return None
    return AircraftAssignment(
        aircraft_id=aircraft.aircraft_id,
        aircraft_type=aircraft.aircraft_type,
        capacity_liters=aircraft.capacity_liters,
        range_km=aircraft.range_km,
        distance_km=distance,
        eta_minutes=aircraft_eta(aircraft.aircraft_type, distance),
        status=aircraft.status,
    )


def _count_available(
    stations: List[FireStation],
    in_range_aircraft: List[AircraftAssignment],
) -> Dict[str, int]:
    ready = [s for s in stations if s.availability == "available"]
    return {
        "ground_crews": sum(s.engines for s in ready),
        "aircraft": sum(1 for a in in_range_aircraft if a.status == "available"),
        "water_tenders": sum(s.water_tenders for s in ready),
        "command_units": sum(s.command_units for s in ready),
    }
