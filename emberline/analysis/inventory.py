"""
Emberline - Exposure Inventory
Species, ecosystem, building and heritage records exposed to a fire.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from emberline.core.constants import CONSERVATION_STATUSES
from emberline.core.simulation import DATA_SOURCE_SIMULATED


def _check_status(status: str) -> None:
    if status not in CONSERVATION_STATUSES:
        raise ValueError(f"Unknown IUCN conservation status: {status!r}")


@dataclass(frozen=True)
class FloraSpecies:
    name: str
    scientific_name: str
    conservation_status: str  # LC, NT, VU, EN, CR
    population: int
    critical_habitat: bool
    fire_resistance: str  # low, moderate, high
    recovery_years: int
    economic_value: float  # USD

    def __post_init__(self):
        _check_status(self.conservation_status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "scientific_name": self.scientific_name,
            "conservation_status": self.conservation_status,
            "population": self.population,
            "critical_habitat": self.critical_habitat,
            "fire_resistance": self.fire_resistance,
            "recovery_years": self.recovery_years,
            "economic_value": self.economic_value,
        }


@dataclass(frozen=True)
class FaunaSpecies:
    name: str
    scientific_name: str
    conservation_status: str  # LC, NT, VU, EN, CR
    population: int
    mobility: str  # low, moderate, high
    critical_breeding_season: bool
    fire_adaptation: str  # none, behavioral, physiological
    evacuation_priority: int  # 1-10

    def __post_init__(self):
        _check_status(self.conservation_status)
        if not 1 <= self.evacuation_priority <= 10:
            raise ValueError(f"evacuation_priority must be 1-10, got {self.evacuation_priority}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "scientific_name": self.scientific_name,
            "conservation_status": self.conservation_status,
            "population": self.population,
            "mobility": self.mobility,
            "critical_breeding_season": self.critical_breeding_season,
            "fire_adaptation": self.fire_adaptation,
            "evacuation_priority": self.evacuation_priority,
        }


@dataclass(frozen=True)
class EcosystemService:
    service: str
    annual_value: float  # USD/year
    criticality: str  # low, moderate, high, critical
    replacement_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service,
            "annual_value": self.annual_value,
            "criticality": self.criticality,
            "replacement_cost": self.replacement_cost,
        }


@dataclass(frozen=True)
class ProtectedArea:
    name: str
    area_type: str  # national_park, nature_reserve, unesco_site, ramsar_wetland
    area_hectares: float
    legal_protection_level: int  # 1-10
    international_significance: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.area_type,
            "area_hectares": self.area_hectares,
            "legal_protection_level": self.legal_protection_level,
            "international_significance": self.international_significance,
        }


@dataclass(frozen=True)
class BiodiversityData:
    """Species and ecosystems around a fire."""
    flora_species: List[FloraSpecies] = field(default_factory=list)
    fauna_species: List[FaunaSpecies] = field(default_factory=list)
    ecosystem_services: List[EcosystemService] = field(default_factory=list)
    protected_areas: List[ProtectedArea] = field(default_factory=list)
    region: str = "generic"
    data_source: str = DATA_SOURCE_SIMULATED

    @property
    def species_count(self) -> int:
        return len(self.flora_species) + len(self.fauna_species)

    @property
    def is_empty(self) -> bool:
        return self.species_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flora_species": [s.to_dict() for s in self.flora_species],
            "fauna_species": [s.to_dict() for s in self.fauna_species],
            "ecosystem_services": [s.to_dict() for s in self.ecosystem_services],
            "protected_areas": [a.to_dict() for a in self.protected_areas],
            "region": self.region,
            "data_source": self.data_source,
        }


@dataclass(frozen=True)
class CivilBuilding:
    building_id: str
    name: str
    building_type: str  # residential, commercial, industrial, educational, healthcare
    occupancy: int
    structural_fire_rating_hours: float
    evacuation_complexity: str  # simple, moderate, complex, extreme
    economic_value: float
    critical_services: List[str]
    vulnerability_score: float  # 0-100
    distance_km: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "building_id": self.building_id,
            "name": self.name,
            "type": self.building_type,
            "occupancy": self.occupancy,
            "structural_fire_rating_hours": self.structural_fire_rating_hours,
            "evacuation_complexity": self.evacuation_complexity,
            "economic_value": self.economic_value,
            "critical_services": self.critical_services,
            "vulnerability_score": self.vulnerability_score,
            "distance_km": round(self.distance_km, 2),
        }


@dataclass(frozen=True)
class GovernmentBuilding:
    building_id: str
    name: str
    building_type: str  # municipal, regional, national, military, emergency_services
    security_level: str  # public, restricted, classified, top_secret
    critical_operations: List[str]
    continuity_plan: bool
    backup_facilities: List[str]
    strategic_importance: int  # 1-10

    def to_dict(self) -> Dict[str, Any]:
        return {
            "building_id": self.building_id,
            "name": self.name,
            "type": self.building_type,
            "security_level": self.security_level,
            "critical_operations": self.critical_operations,
            "continuity_plan": self.continuity_plan,
            "backup_facilities": self.backup_facilities,
            "strategic_importance": self.strategic_importance,
        }


@dataclass(frozen=True)
class CriticalFacility:
    facility_id: str
    name: str
    facility_type: str  # power_plant, water_treatment, telecommunications, transportation, fuel_storage
    capacity: float
    population_served: int
    redundancy: bool
    shutdown_procedure: str
    environmental_risk: str  # low, moderate, high, extreme

    def to_dict(self) -> Dict[str, Any]:
        return {
            "facility_id": self.facility_id,
            "name": self.name,
            "type": self.facility_type,
            "capacity": self.capacity,
            "population_served": self.population_served,
            "redundancy": self.redundancy,
            "shutdown_procedure": self.shutdown_procedure,
            "environmental_risk": self.environmental_risk,
        }


@dataclass(frozen=True)
class HeritageSite:
    site_id: str
    name: str
    site_type: str  # archaeological, historical, religious, artistic
    unesco_status: bool
    cultural_value: str  # local, regional, national, international
    fire_vulnerability: float  # 0-100
    protection_measures: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site_id": self.site_id,
            "name": self.name,
            "type": self.site_type,
            "unesco_status": self.unesco_status,
            "cultural_value": self.cultural_value,
            "fire_vulnerability": self.fire_vulnerability,
            "protection_measures": self.protection_measures,
        }


@dataclass(frozen=True)
class InfrastructureAssessment:
    """Built assets around a fire."""
    civil_buildings: List[CivilBuilding] = field(default_factory=list)
    government_buildings: List[GovernmentBuilding] = field(default_factory=list)
    critical_infrastructure: List[CriticalFacility] = field(default_factory=list)
    cultural_heritage: List[HeritageSite] = field(default_factory=list)
    data_source: str = DATA_SOURCE_SIMULATED

    @property
    def total_occupancy(self) -> int:
        return sum(b.occupancy for b in self.civil_buildings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "civil_buildings": [b.to_dict() for b in self.civil_buildings],
            "government_buildings": [b.to_dict() for b in self.government_buildings],
            "critical_infrastructure": [f.to_dict() for f in self.critical_infrastructure],
            "cultural_heritage": [s.to_dict() for s in self.cultural_heritage],
            "total_occupancy": self.total_occupancy,
            "data_source": self.data_source,
        }
