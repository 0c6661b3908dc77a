"""
Emberline - Core Utilities
Central configuration, logging, simulation and geospatial helpers.
"""

from emberline.core.config import Settings, get_settings, settings
from emberline.core.exceptions import (
    EmberlineError,
    ProviderError,
    InvalidTransitionError,
    AlertNotFoundError,
)
from emberline.core.geo_utils import (
    BoundingBox,
    Point,
    haversine_distance,
    calculate_bearing,
    destination_point,
    normalize_direction,
    calculate_zone_area_km2,
)
from emberline.core.simulation import (
    DATA_SOURCE_REAL,
    DATA_SOURCE_SIMULATED,
    SimulationSource,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "EmberlineError",
    "ProviderError",
    "InvalidTransitionError",
    "AlertNotFoundError",
    "BoundingBox",
    "Point",
    "haversine_distance",
    "calculate_bearing",
    "destination_point",
    "normalize_direction",
    "calculate_zone_area_km2",
    "DATA_SOURCE_REAL",
    "DATA_SOURCE_SIMULATED",
    "SimulationSource",
]
