"""
Emberline - Resource Catalog
Fire stations, aircraft and water sources available to an incident.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from emberline.core.geo_utils import destination_point

logger = logging.getLogger(__name__)

AVAILABILITY_STATES = ("available", "deployed", "maintenance", "refueling")


@dataclass(frozen=True)
class FireStation:
    """Ground station with crews and apparatus."""
    station_id: str
    name: str
    latitude: float
    longitude: float
    personnel: int
    engines: int
    water_tenders: int = 0
    command_units: int = 0
    availability: str = "available"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "personnel": self.personnel,
            "engines": self.engines,
            "water_tenders": self.water_tenders,
            "command_units": self.command_units,
            "availability": self.availability,
        }


@dataclass(frozen=True)
class Aircraft:
    """Firefighting aircraft at its base."""
    aircraft_id: str
    aircraft_type: str  # helicopter, plane, drone
    capacity_liters: int
    range_km: float
    latitude: float
    longitude: float
    status: str = "available"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aircraft_id": self.aircraft_id,
            "aircraft_type": self.aircraft_type,
            "capacity_liters": self.capacity_liters,
            "range_km": self.range_km,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status,
        }


@dataclass(frozen=True)
class CatalogWaterSource:
    """Refill point for engines, tenders and aircraft."""
    source_id: str
    source_type: str  # hydrant, pond, river, tank
    capacity_liters: int
    latitude: float
    longitude: float
    accessibility: str = "good"  # good, moderate, difficult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source_type": self.source_type,
            "capacity_liters": self.capacity_liters,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accessibility": self.accessibility,
        }


@dataclass
class ResourceCatalog:
    """Everything the allocator may draw from."""
    fire_stations: List[FireStation] = field(default_factory=list)
    aircraft: List[Aircraft] = field(default_factory=list)
    water_sources: List[CatalogWaterSource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceCatalog":
        return cls(
            fire_stations=[FireStation(**s) for s in data.get("fire_stations", [])],
            aircraft=[Aircraft(**a) for a in data.get("aircraft", [])],
            water_sources=[CatalogWaterSource(**w) for w in data.get("water_sources", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fire_stations": [s.to_dict() for s in self.fire_stations],
            "aircraft": [a.to_dict() for a in self.aircraft],
            "water_sources": [w.to_dict() for w in self.water_sources],
        }


def load_resource_catalog(path: Union[str, Path]) -> ResourceCatalog:
    """
    Load a catalog from a JSON file with fire_stations, aircraft and
    water_sources lists whose keys match the dataclass fields.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    catalog = ResourceCatalog.from_dict(data)
    logger.info(
        f"Loaded resource catalog from {path}: "
        f"{len(catalog.fire_stations)} stations, {len(catalog.aircraft)} aircraft, "
        f"{len(catalog.water_sources)} water sources"
    )
    return catalog


# (name, distance km, bearing, personnel, engines, tenders, command units, availability)
_DEFAULT_STATIONS = [
    ("Central Station", 6.0, 20, 24, 3, 2, 1, "available"),
    ("North Station", 11.0, 350, 18, 2, 1, 1, "available"),
    ("East Station", 14.0, 95, 16, 2, 1, 0, "available"),
    ("Valley Station", 19.0, 200, 12, 1, 1, 0, "available"),
    ("Ridge Station", 23.0, 140, 14, 2, 1, 1, "deployed"),
    ("Airport Station", 31.0, 280, 20, 2, 1, 0, "maintenance"),
]

# (type, capacity L, range km, distance km, bearing, status)
_DEFAULT_AIRCRAFT = [
    ("helicopter", 2000, 200.0, 18.0, 60, "available"),
    ("helicopter", 2000, 200.0, 42.0, 250, "refueling"),
    ("plane", 8000, 500.0, 85.0, 310, "available"),
    ("plane", 8000, 500.0, 140.0, 170, "deployed"),
    ("drone", 100, 50.0, 9.0, 0, "available"),
]

# (type, capacity L, distance km, bearing, accessibility)
_DEFAULT_WATER_SOURCES = [
    ("hydrant", 50000, 2.5, 30, "good"),
    ("pond", 400000, 4.0, 130, "moderate"),
    ("river", 5000000, 7.5, 220, "moderate"),
    ("tank", 120000, 3.2, 300, "good"),
    ("pond", 250000, 9.0, 80, "difficult"),
]


def default_resource_catalog(latitude: float, longitude: float) -> ResourceCatalog:
    """
    Deterministic demo catalog positioned around an incident.

    Used when no catalog file is configured.
    """
    stations = []
    for i, (name, dist, bearing, personnel, engines, tenders, command, status) in enumerate(
        _DEFAULT_STATIONS, start=1
    ):
        lat, lon = destination_point(latitude, longitude, dist, bearing)
        stations.append(FireStation(
            station_id=f"STN-{i:02d}",
            name=name,
            latitude=lat,
            longitude=lon,
            personnel=personnel,
            engines=engines,
            water_tenders=tenders,
            command_units=command,
            availability=status,
        ))

    aircraft = []
    for i, (kind, capacity, range_km, dist, bearing, status) in enumerate(_DEFAULT_AIRCRAFT, start=1):
        lat, lon = destination_point(latitude, longitude, dist, bearing)
        aircraft.append(Aircraft(
            aircraft_id=f"AIR-{i:02d}",
            aircraft_type=kind,
            capacity_liters=capacity,
            range_km=range_km,
            latitude=lat,
            longitude=lon,
            status=status,
        ))

    water_sources = []
    for i, (kind, capacity, dist, bearing, access) in enumerate(_DEFAULT_WATER_SOURCES, start=1):
        lat, lon = destination_point(latitude, longitude, dist, bearing)
        water_sources.append(CatalogWaterSource(
            source_id=f"WTR-{i:02d}",
            source_type=kind,
            capacity_liters=capacity,
            latitude=lat,
            longitude=lon,
            accessibility=access,
        ))

    return ResourceCatalog(fire_stations=stations, aircraft=aircraft, water_sources=water_sources)
