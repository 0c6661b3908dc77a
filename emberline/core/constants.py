"""
Emberline - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# GEOGRAPHIC REFERENCE
# =============================================================================

# Default incident location (Madrid) as (latitude, longitude)
DEFAULT_LOCATION: Tuple[float, float] = (40.4168, -3.7038)

# Iberian Peninsula reference region (west, south, east, north)
IBERIAN_REFERENCE_BBOX: Tuple[float, float, float, float] = (-9.0, 36.0, 4.0, 44.0)

# Flat degrees-to-kilometres factor used for zone areas
KM_PER_DEGREE: float = 111.0

# =============================================================================
# WEATHER DEFAULTS
# =============================================================================

# Substituted for missing or malformed weather readings
DEFAULT_WEATHER: Dict[str, float] = {
    "temperature_celsius": 25.0,
    "humidity_percent": 50.0,
    "wind_speed_kmh": 10.0,
    "wind_direction_degrees": 180.0,
}

# Confidence lost when a field has to be defaulted
MISSING_FIELD_CONFIDENCE_PENALTY: Dict[str, float] = {
    "temperature_celsius": 0.2,
    "humidity_percent": 0.2,
    "wind_speed_kmh": 0.15,
    "wind_direction_degrees": 0.05,
}

BASE_RISK_CONFIDENCE: float = 0.9
SIMULATED_WEATHER_CONFIDENCE_PENALTY: float = 0.15
MIN_RISK_CONFIDENCE: float = 0.1

# =============================================================================
# RISK BANDING
# =============================================================================

# Lower bound of each band, highest first
RISK_BANDS: List[Tuple[float, str]] = [
    (80.0, "extreme"),
    (60.0, "high"),
    (40.0, "medium"),
    (0.0, "low"),
]

# Risk band -> perimeter / tactical intensity label
INTENSITY_BY_BAND: Dict[str, str] = {
    "low": "low",
    "medium": "moderate",
    "high": "high",
    "extreme": "extreme",
}


def risk_band(score: float) -> str:
    """Map a 0-100 score to low, medium, high or extreme."""
    for threshold, band in RISK_BANDS:
        if score >= threshold:
            return band
    return "low"


def intensity_level(score: float) -> str:
    """Same banding as risk_band(), labelled low/moderate/high/extreme."""
    return INTENSITY_BY_BAND[risk_band(score)]


# Sub-score caps (points)
RISK_FACTOR_CAPS: Dict[str, float] = {
    "temperature": 40.0,
    "humidity": 30.0,
    "wind_speed": 30.0,
}

# =============================================================================
# SPREAD MODEL
# =============================================================================

PERIMETER_POINT_COUNT: int = 16
SPREAD_HORIZONS_HOURS: Tuple[int, int] = (24, 72)

# Containment probability never drops below this floor
MIN_CONTAINMENT_PROBABILITY: float = 0.05

# =============================================================================
# RESOURCE ALLOCATION
# =============================================================================

# Upper bound of each affected-area band (hectares, 24h)
AREA_BANDS: List[Tuple[float, str]] = [
    (500.0, "small"),
    (2500.0, "medium"),
    (10000.0, "large"),
]

DEPLOYMENT_TABLE: Dict[str, Dict[str, int]] = {
    "small": {"ground_crews": 2, "aircraft": 0, "water_tenders": 1, "command_units": 1},
    "medium": {"ground_crews": 5, "aircraft": 1, "water_tenders": 3, "command_units": 1},
    "large": {"ground_crews": 10, "aircraft": 3, "water_tenders": 6, "command_units": 2},
    "extreme": {"ground_crews": 16, "aircraft": 5, "water_tenders": 8, "command_units": 3},
}

GROUND_RESPONSE_SPEED_KMH: float = 60.0
DISPATCH_DELAY_MINUTES: float = 3.0
AIRCRAFT_SPINUP_MINUTES: float = 10.0

AIRCRAFT_CRUISE_SPEED_KMH: Dict[str, float] = {
    "helicopter": 220.0,
    "plane": 350.0,
    "drone": 80.0,
}

# =============================================================================
# EVACUATION
# =============================================================================

# (ring radius km, priority)
EVACUATION_RINGS: List[Tuple[float, str]] = [
    (2.0, "immediate"),
    (5.0, "high"),
    (10.0, "medium"),
    (20.0, "low"),
]

EVACUATION_TRAVEL_SPEED_KMH: float = 40.0
VEHICLES_PER_ROUTE_PER_HOUR: int = 600
PEOPLE_PER_VEHICLE: float = 2.5

# =============================================================================
# BIODIVERSITY AND INFRASTRUCTURE
# =============================================================================

CONSERVATION_STATUSES: List[str] = ["LC", "NT", "VU", "EN", "CR"]

CONSERVATION_STATUS_NAMES: Dict[str, str] = {
    "LC": "Least Concern",
    "NT": "Near Threatened",
    "VU": "Vulnerable",
    "EN": "Endangered",
    "CR": "Critically Endangered",
}

# Environmental risk weight added per species
CONSERVATION_STATUS_WEIGHTS: Dict[str, float] = {
    "LC": 0.0,
    "NT": 10.0,
    "VU": 20.0,
    "EN": 30.0,
    "CR": 40.0,
}

# Fauna evacuation priority (1-10) by status
EVACUATION_PRIORITY_BY_STATUS: Dict[str, int] = {
    "LC": 3,
    "NT": 5,
    "VU": 7,
    "EN": 9,
    "CR": 10,
}

SPECIES_BASE_RISK: float = 20.0
CRITICAL_HABITAT_WEIGHT: float = 20.0
LOW_FIRE_RESISTANCE_WEIGHT: float = 15.0
LOW_MOBILITY_WEIGHT: float = 25.0
BREEDING_SEASON_WEIGHT: float = 15.0
ENVIRONMENTAL_RISK_DIVISOR: float = 10.0

# Monetary totals are divided by this before capping at 100
ECONOMIC_RISK_DIVISOR: float = 1_000_000.0

UNESCO_HERITAGE_BONUS: float = 20.0
HERITAGE_STATUS_BONUS: Dict[str, float] = {
    "international": 15.0,
    "national": 10.0,
    "regional": 5.0,
    "local": 0.0,
}

OVERALL_RISK_WEIGHTS: Dict[str, float] = {
    "human_life": 0.4,
    "environmental": 0.25,
    "economic": 0.25,
    "cultural": 0.1,
}

# =============================================================================
# ZONE MONITORING
# =============================================================================

ZONE_PRIORITIES: List[str] = ["critical", "high", "medium", "low"]

# Chance of a simulated detection per poll
DETECTION_PROBABILITY_BY_PRIORITY: Dict[str, float] = {
    "critical": 0.8,
    "high": 0.6,
    "medium": 0.3,
    "low": 0.1,
}

ORGANIZATION_TYPES: List[str] = [
    "firefighters",
    "medical",
    "police",
    "civil_protection",
    "other",
]
