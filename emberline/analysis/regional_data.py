"""
Emberline - Regional Reference Data
Deterministic datasets used when live species or infrastructure data is
unavailable. The Iberian dataset covers the reference bounding box; every
other location gets the generic temperate dataset.
"""

from typing import List, Tuple

from emberline.core.constants import IBERIAN_REFERENCE_BBOX
from emberline.core.geo_utils import BoundingBox, Point, destination_point, haversine_distance
from emberline.core.simulation import DATA_SOURCE_SIMULATED
from emberline.analysis.inventory import (
    BiodiversityData,
    CivilBuilding,
    CriticalFacility,
    EcosystemService,
    FaunaSpecies,
    FloraSpecies,
    GovernmentBuilding,
    HeritageSite,
    InfrastructureAssessment,
    ProtectedArea,
)

IBERIAN_REGION = "iberian_peninsula"
GENERIC_REGION = "generic_temperate"


def is_in_iberian_region(latitude: float, longitude: float) -> bool:
    """Bounding-box test against the Iberian reference envelope."""
    return BoundingBox.from_tuple(IBERIAN_REFERENCE_BBOX).contains(Point(latitude, longitude))


def iberian_biodiversity() -> BiodiversityData:
    return BiodiversityData(
        flora_species=[
            FloraSpecies("Holm oak", "Quercus ilex", "LC", 15000, True, "moderate", 15, 2_500_000),
            FloraSpecies("Cork oak", "Quercus suber", "NT", 3500, True, "high", 30, 4_200_000),
            FloraSpecies("Aleppo pine", "Pinus halepensis", "LC", 8000, False, "low", 25, 1_800_000),
        ],
        fauna_species=[
            FaunaSpecies("Iberian lynx", "Lynx pardinus", "EN", 12, "high", True, "behavioral", 10),
            FaunaSpecies("Spanish imperial eagle", "Aquila adalberti", "VU", 8, "high", False, "behavioral", 9),
            FaunaSpecies("Wild boar", "Sus scrofa", "LC", 450, "moderate", False, "behavioral", 5),
        ],
        ecosystem_services=[
            EcosystemService("Carbon sequestration", 850_000, "critical", 12_000_000),
            EcosystemService("Water regulation", 650_000, "high", 8_500_000),
            EcosystemService("Pollination", 320_000, "high", 2_800_000),
        ],
        protected_areas=[
            ProtectedArea("Doñana National Park", "national_park", 54252, 10, True),
        ],
        region=IBERIAN_REGION,
        data_source=DATA_SOURCE_SIMULATED,
    )


def generic_biodiversity() -> BiodiversityData:
    return BiodiversityData(
        flora_species=[
            FloraSpecies("Pedunculate oak", "Quercus robur", "LC", 9000, True, "moderate", 40, 1_600_000),
            FloraSpecies("Scots pine", "Pinus sylvestris", "LC", 12000, False, "low", 30, 1_200_000),
            FloraSpecies("European beech", "Fagus sylvatica", "LC", 6000, False, "low", 50, 900_000),
        ],
        fauna_species=[
            FaunaSpecies("Red deer", "Cervus elaphus", "LC", 300, "moderate", False, "behavioral", 3),
            FaunaSpecies("Tawny owl", "Strix aluco", "LC", 60, "high", True, "behavioral", 3),
            FaunaSpecies("Stag beetle", "Lucanus cervus", "NT", 2000, "low", True, "none", 5),
        ],
        ecosystem_services=[
            EcosystemService("Carbon sequestration", 500_000, "high", 7_000_000),
            EcosystemService("Soil protection", 250_000, "moderate", 3_000_000),
        ],
        protected_areas=[
            ProtectedArea("Regional nature reserve", "nature_reserve", 12000, 6, False),
        ],
        region=GENERIC_REGION,
        data_source=DATA_SOURCE_SIMULATED,
    )


def regional_biodiversity(latitude: float, longitude: float) -> BiodiversityData:
    """Fallback dataset for a location; never empty."""
    if is_in_iberian_region(latitude, longitude):
        return iberian_biodiversity()
    return generic_biodiversity()


# (id, name, type, occupancy, fire rating h, complexity, value USD, services, vulnerability, km, bearing)
_CIVIL_BUILDINGS: List[Tuple] = [
    ("hospital_001", "District hospital", "healthcare", 450, 2, "extreme", 85_000_000,
     ["Intensive care", "Emergency room", "Operating theatres"], 95, 4.0, 60),
    ("school_001", "Primary school", "educational", 800, 1, "complex", 12_000_000,
     ["Primary education"], 85, 2.5, 150),
    ("residential_complex_001", "Residential complex", "residential", 1200, 1, "moderate", 45_000_000,
     ["Housing"], 70, 3.0, 270),
]


def simulated_infrastructure(latitude: float, longitude: float) -> InfrastructureAssessment:
    """Demo inventory of built assets placed around the location."""
    civil = []
    for (building_id, name, kind, occupancy, rating, complexity, value,
         services, vulnerability, dist, bearing) in _CIVIL_BUILDINGS:
        lat, lon = destination_point(latitude, longitude, dist, bearing)
        civil.append(CivilBuilding(
            building_id=building_id,
            name=name,
            building_type=kind,
            occupancy=occupancy,
            structural_fire_rating_hours=rating,
            evacuation_complexity=complexity,
            economic_value=value,
            critical_services=services,
            vulnerability_score=vulnerability,
            distance_km=haversine_distance(latitude, longitude, lat, lon),
        ))

    return InfrastructureAssessment(
        civil_buildings=civil,
        government_buildings=[
            GovernmentBuilding(
                "emergency_center_001", "Emergency coordination centre", "emergency_services",
                "restricted", ["Emergency coordination", "Communications"], True,
                ["Secondary coordination centre"], 10,
            ),
            GovernmentBuilding(
                "municipal_building_001", "Town hall", "municipal", "public",
                ["Municipal services", "Civil registry"], False, [], 6,
            ),
        ],
        critical_infrastructure=[
            CriticalFacility(
                "power_substation_001", "Power substation", "power_plant", 150000, 85000,
                True, "Emergency grid isolation protocol", "high",
            ),
            CriticalFacility(
                "water_treatment_001", "Water treatment plant", "water_treatment", 50000, 45000,
                False, "Controlled valve shutdown", "moderate",
            ),
        ],
        cultural_heritage=[
            HeritageSite(
                "monastery_001", "Historic monastery", "religious", True, "international", 90,
                ["Sprinkler system", "Specialized brigade"],
            ),
        ],
        data_source=DATA_SOURCE_SIMULATED,
    )
