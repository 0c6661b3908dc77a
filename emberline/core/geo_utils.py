"""
Emberline - Geospatial Utilities
Great-circle helpers, bearings and zone geometry on (latitude, longitude)
pairs.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from shapely.geometry import Polygon

from emberline.core.constants import KM_PER_DEGREE

# Mean Earth radius (km)
EARTH_RADIUS_KM = 6371.0

CARDINAL_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class Point:
    """A WGS84 position."""
    latitude: float
    longitude: float

    def to_tuple(self) -> Tuple[float, float]:
        return self.latitude, self.longitude

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude envelope, stored west, south, east, north."""
    west: float
    south: float
    east: float
    north: float

    @classmethod
    def from_tuple(cls, bbox: Tuple[float, float, float, float]) -> "BoundingBox":
        return cls(*bbox)

    @classmethod
    def around(cls, latitude: float, longitude: float, radius_km: float) -> "BoundingBox":
        """Envelope of a circle of radius_km around a point."""
        north = destination_point(latitude, longitude, radius_km, 0)[0]
        south = destination_point(latitude, longitude, radius_km, 180)[0]
        east = destination_point(latitude, longitude, radius_km, 90)[1]
        west = destination_point(latitude, longitude, radius_km, 270)[1]
        return cls(west, south, east, north)

    def contains(self, point: Point) -> bool:
        return (
            self.south <= point.latitude <= self.north
            and self.west <= point.longitude <= self.east
        )

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return self.west, self.south, self.east, self.north

    @property
    def center(self) -> Point:
        return Point((self.south + self.north) / 2, (self.west + self.east) / 2)


def normalize_direction(degrees: float) -> float:
    """Wrap any bearing, including negative ones, into [0, 360)."""
    normalized = math.fmod(degrees, 360.0)
    if normalized < 0:
        normalized += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    return 0.0 if normalized >= 360.0 else normalized


def angular_difference(a: float, b: float) -> float:
    """Smallest absolute angle between two bearings (0-180)."""
    return abs((a - b + 180) % 360 - 180)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lon2 - lon1) / 2

    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial bearing from the first point to the second, 0 = north, clockwise."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)

    east = math.sin(dlambda) * math.cos(phi2)
    north = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    return normalize_direction(math.degrees(math.atan2(east, north)))


def destination_point(
    lat: float,
    lon: float,
    distance_km: float,
    bearing_degrees: float,
) -> Tuple[float, float]:
    """
    Point reached after travelling distance_km along a bearing.

    Returns:
        (latitude, longitude) in decimal degrees
    """
    phi = math.radians(lat)
    theta = math.radians(bearing_degrees)
    delta = distance_km / EARTH_RADIUS_KM

    sin_phi2 = math.sin(phi) * math.cos(delta) + math.cos(phi) * math.sin(delta) * math.cos(theta)
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lambda2 = math.radians(lon) + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi),
        math.cos(delta) - math.sin(phi) * sin_phi2,
    )
    return math.degrees(phi2), math.degrees(lambda2)


def calculate_zone_area_km2(polygon: Sequence[Tuple[float, float]]) -> float:
    """
    Approximate area of a monitoring zone.

    Shoelace area in raw degrees scaled by a flat 111 x 111 km per degree
    squared. Not geodesically correct; zone priorities are tuned to this
    scale, so it is kept as is.

    Args:
        polygon: (latitude, longitude) vertices, either winding

    Returns:
        Area in km2, 0 for fewer than 3 vertices
    """
    if len(polygon) < 3:
        return 0.0
    shape = Polygon([(lon, lat) for lat, lon in polygon])
    return abs(shape.area) * KM_PER_DEGREE * KM_PER_DEGREE


def calculate_centroid(points: Sequence[Tuple[float, float]]) -> Tuple[float, float]:
    """Vertex mean of (latitude, longitude) points; (0, 0) when empty."""
    if not points:
        return 0.0, 0.0
    count = len(points)
    return (
        sum(lat for lat, _ in points) / count,
        sum(lon for _, lon in points) / count,
    )


def bounding_box(points: Sequence[Tuple[float, float]]) -> BoundingBox:
    """Smallest box enclosing a list of (latitude, longitude) points."""
    lats: List[float] = [lat for lat, _ in points]
    lons: List[float] = [lon for _, lon in points]
    return BoundingBox(min(lons), min(lats), max(lons), max(lats))


def degrees_to_cardinal(degrees: float) -> str:
    """Eight-point compass label for a bearing."""
    return CARDINAL_POINTS[round(normalize_direction(degrees) / 45) % 8]
