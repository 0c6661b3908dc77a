"""
Emberline - Monitoring Zones
Operator-configured zones, the responding organization, and the explicit
context passed into each analysis.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Tuple

from emberline.core.constants import ORGANIZATION_TYPES, ZONE_PRIORITIES
from emberline.core.geo_utils import (
    BoundingBox,
    bounding_box,
    calculate_centroid,
    calculate_zone_area_km2,
)
from emberline.ingestion.resource_catalog import ResourceCatalog


@dataclass(frozen=True)
class OrganizationConfig:
    name: str
    organization_type: str = "firefighters"
    phone: Optional[str] = None
    radio: Optional[str] = None
    email: Optional[str] = None
    capabilities: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.organization_type not in ORGANIZATION_TYPES:
            raise ValueError(f"Unknown organization type: {self.organization_type!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.organization_type,
            "contact_info": {
                "phone": self.phone,
                "radio": self.radio,
                "email": self.email,
            },
            "capabilities": self.capabilities,
        }


@dataclass(frozen=True)
class MonitoringZone:
    """
    A polygon watched for fires.

    Vertices are (latitude, longitude) pairs. Area uses the flat
    111 km-per-degree approximation.
    """
    zone_id: str
    name: str
    polygon: List[Tuple[float, float]]
    priority: str = "medium"  # low, medium, high, critical
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.priority not in ZONE_PRIORITIES:
            raise ValueError(f"Unknown zone priority: {self.priority!r}")
        if len(self.polygon) < 3:
            raise ValueError("A monitoring zone needs at least 3 vertices")

    @classmethod
    def create(
        cls,
        name: str,
        polygon: List[Tuple[float, float]],
        priority: str = "medium",
    ) -> "MonitoringZone":
        return cls(
            zone_id=f"zone_{uuid.uuid4().hex[:8]}",
            name=name,
            polygon=[(float(lat), float(lon)) for lat, lon in polygon],
            priority=priority,
        )

    @property
    def center(self) -> Tuple[float, float]:
        return calculate_centroid(self.polygon)

    @property
    def area_km2(self) -> float:
        return calculate_zone_area_km2(self.polygon)

    @property
    def bbox(self) -> BoundingBox:
        return bounding_box(self.polygon)

    def to_dict(self) -> Dict[str, Any]:
        lat, lon = self.center
        return {
            "id": self.zone_id,
            "name": self.name,
            "polygon": [{"latitude": p[0], "longitude": p[1]} for p in self.polygon],
            "center": {"latitude": lat, "longitude": lon},
            "area_km2": round(self.area_km2, 4),
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class AnalysisContext:
    """Everything an analysis run needs besides the location."""
    organization: Optional[OrganizationConfig] = None
    zone: Optional[MonitoringZone] = None
    catalog: Optional[ResourceCatalog] = None
    now: Optional[datetime] = None
    # Key for the run's simulation stream; defaults to the location
    simulation_key: Optional[str] = None
