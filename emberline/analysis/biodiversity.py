"""
Emberline - Biodiversity and Infrastructure Risk
Assesses species and built assets around a fire and combines them into
human-life, environmental, economic and cultural risk scores.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from emberline.core.config import settings
from emberline.core.constants import (
    BREEDING_SEASON_WEIGHT,
    CONSERVATION_STATUS_WEIGHTS,
    CRITICAL_HABITAT_WEIGHT,
    ECONOMIC_RISK_DIVISOR,
    ENVIRONMENTAL_RISK_DIVISOR,
    EVACUATION_PRIORITY_BY_STATUS,
    HERITAGE_STATUS_BONUS,
    LOW_FIRE_RESISTANCE_WEIGHT,
    LOW_MOBILITY_WEIGHT,
    OVERALL_RISK_WEIGHTS,
    SPECIES_BASE_RISK,
    UNESCO_HERITAGE_BONUS,
)
from emberline.core.exceptions import ProviderError
from emberline.core.geo_utils import BoundingBox
from emberline.core.simulation import DATA_SOURCE_REAL, SimulationSource
from emberline.analysis.inventory import (
    BiodiversityData,
    FaunaSpecies,
    FloraSpecies,
    InfrastructureAssessment,
)
from emberline.analysis.regional_data import (
    IBERIAN_REGION,
    GENERIC_REGION,
    is_in_iberian_region,
    regional_biodiversity,
    simulated_infrastructure,
)
from emberline.ingestion.species_client import SpeciesClient, SpeciesOccurrence
from emberline.core.constants import risk_band
from emberline.prediction.spread_calculator import FireSpreadPrediction

logger = logging.getLogger(__name__)

# Share of a building's occupants who need assisted evacuation
VULNERABLE_SHARE_BY_TYPE: Dict[str, float] = {
    "healthcare": 0.85,
    "educational": 1.0,
    "residential": 0.17,
    "commercial": 0.05,
    "industrial": 0.05,
}

TRANSPORT_NEEDS_BY_TYPE: Dict[str, List[str]] = {
    "healthcare": ["Ambulances", "Medical helicopters", "Specialized vehicles"],
    "educational": ["School buses", "Emergency vehicles"],
    "residential": ["Buses", "Private vehicles"],
    "commercial": ["Private vehicles"],
    "industrial": ["Company transport", "Private vehicles"],
}

EVACUATION_BASE_MINUTES: Dict[str, float] = {
    "simple": 10.0,
    "moderate": 20.0,
    "complex": 30.0,
    "extreme": 45.0,
}

# Spread speed (km/h) at which decision points keep their nominal offsets
REFERENCE_SPREAD_SPEED_KMH = 0.15


@dataclass(frozen=True)
class PriorityEvacuationZone:
    zone: str
    priority: int  # 1-10, 10 evacuates first
    population: int
    vulnerable_population: int
    evacuation_time_minutes: int
    transportation_needs: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone,
            "priority": self.priority,
            "population": self.population,
            "vulnerable_population": self.vulnerable_population,
            "evacuation_time_minutes": self.evacuation_time_minutes,
            "transportation_needs": self.transportation_needs,
        }


@dataclass(frozen=True)
class DecisionPoint:
    time: datetime
    decision: str
    consequences: str
    alternatives: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "decision": self.decision,
            "consequences": self.consequences,
            "alternatives": self.alternatives,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Combined exposure risk of a fire."""
    overall_risk: float
    human_life_risk: float
    environmental_risk: float
    economic_risk: float
    cultural_risk: float
    priority_evacuation_zones: List[PriorityEvacuationZone] = field(default_factory=list)
    critical_decision_points: List[DecisionPoint] = field(default_factory=list)

    @property
    def risk_level(self) -> str:
        return risk_band(self.overall_risk)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_risk": round(self.overall_risk, 2),
            "risk_level": self.risk_level,
            "human_life_risk": round(self.human_life_risk, 2),
            "environmental_risk": round(self.environmental_risk, 2),
            "economic_risk": round(self.economic_risk, 2),
            "cultural_risk": round(self.cultural_risk, 2),
            "priority_evacuation_zones": [z.to_dict() for z in self.priority_evacuation_zones],
            "critical_decision_points": [d.to_dict() for d in self.critical_decision_points],
        }


# =============================================================================
# Risk scoring
# =============================================================================

def combine_risk(
    human_life: float,
    environmental: float,
    economic: float,
    cultural: float,
) -> float:
    """0.4 human life + 0.25 environmental + 0.25 economic + 0.1 cultural."""
    return (
        OVERALL_RISK_WEIGHTS["human_life"] * human_life +
        OVERALL_RISK_WEIGHTS["environmental"] * environmental +
        OVERALL_RISK_WEIGHTS["economic"] * economic +
        OVERALL_RISK_WEIGHTS["cultural"] * cultural
    )


def calculate_human_life_risk(infrastructure: InfrastructureAssessment) -> float:
    """Occupancy-weighted mean of building vulnerability."""
    total_occupancy = infrastructure.total_occupancy
    if total_occupancy <= 0:
        return 0.0
    weighted = sum(
        b.vulnerability_score * b.occupancy for b in infrastructure.civil_buildings
    )
    return min(100.0, weighted / total_occupancy)


def _flora_risk(species: FloraSpecies) -> float:
    risk = SPECIES_BASE_RISK + CONSERVATION_STATUS_WEIGHTS[species.conservation_status]
    if species.critical_habitat:
        risk += CRITICAL_HABITAT_WEIGHT
    if species.fire_resistance == "low":
        risk += LOW_FIRE_RESISTANCE_WEIGHT
    return risk


def _fauna_risk(species: FaunaSpecies) -> float:
    risk = SPECIES_BASE_RISK + CONSERVATION_STATUS_WEIGHTS[species.conservation_status]
    if species.mobility == "low":
        risk += LOW_MOBILITY_WEIGHT
    if species.critical_breeding_season:
        risk += BREEDING_SEASON_WEIGHT
    return risk


def calculate_environmental_risk(biodiversity: BiodiversityData) -> float:
    """Sum of per-species risk, divided by 10 and capped at 100."""
    total = sum(_flora_risk(s) for s in biodiversity.flora_species)
    total += sum(_fauna_risk(s) for s in biodiversity.fauna_species)
    return min(100.0, total / ENVIRONMENTAL_RISK_DIVISOR)


def calculate_economic_risk(
    biodiversity: BiodiversityData,
    infrastructure: InfrastructureAssessment,
) -> float:
    """Flora, ecosystem service and building value in millions, capped at 100."""
    total = sum(s.economic_value for s in biodiversity.flora_species)
    total += sum(s.annual_value for s in biodiversity.ecosystem_services)
    total += sum(b.economic_value for b in infrastructure.civil_buildings)
    return min(100.0, total / ECONOMIC_RISK_DIVISOR)


def calculate_cultural_risk(infrastructure: InfrastructureAssessment) -> float:
    """Mean heritage vulnerability with UNESCO and status bonuses, capped at 100."""
    sites = infrastructure.cultural_heritage
    if not sites:
        return 0.0
    total = 0.0
    for site in sites:
        risk = site.fire_vulnerability
        if site.unesco_status:
            risk += UNESCO_HERITAGE_BONUS
        risk += HERITAGE_STATUS_BONUS.get(site.cultural_value, 0.0)
        total += risk
    return min(100.0, total / len(sites))


def generate_evacuation_priorities(
    infrastructure: InfrastructureAssessment,
) -> List[PriorityEvacuationZone]:
    """One zone per civil building, highest priority first."""
    zones = []
    for building in infrastructure.civil_buildings:
        priority = round(building.vulnerability_score / 10)
        if building.evacuation_complexity == "extreme":
            priority += 1
        priority = max(1, min(10, priority))

        share = VULNERABLE_SHARE_BY_TYPE.get(building.building_type, 0.1)
        base_minutes = EVACUATION_BASE_MINUTES.get(building.evacuation_complexity, 20.0)

        zones.append(PriorityEvacuationZone(
            zone=building.name,
            priority=priority,
            population=building.occupancy,
            vulnerable_population=min(building.occupancy, int(round(building.occupancy * share))),
            evacuation_time_minutes=int(base_minutes + building.occupancy / 100 * 2),
            transportation_needs=TRANSPORT_NEEDS_BY_TYPE.get(
                building.building_type, ["Private vehicles"]
            ),
        ))

    zones.sort(key=lambda z: (-z.priority, -z.population))
    return zones


def identify_critical_decision_points(
    infrastructure: InfrastructureAssessment,
    zones: List[PriorityEvacuationZone],
    spread: Optional[FireSpreadPrediction],
    now: datetime,
) -> List[DecisionPoint]:
    """
    Decisions due at nominal +30/+60/+90 minutes.

    Offsets shrink for fast fires and stretch for slow ones.
    """
    scale = 1.0
    if spread is not None and spread.speed_kmh > 0:
        scale = max(0.25, min(2.0, REFERENCE_SPREAD_SPEED_KMH / spread.speed_kmh))

    points = []
    first = zones[0] if zones else None
    if first is not None:
        points.append(DecisionPoint(
            time=now + timedelta(minutes=30 * scale),
            decision=f"Preventive evacuation of {first.zone}",
            consequences=(
                f"Without evacuation {first.population} lives stay exposed; "
                f"evacuating interrupts the services it provides"
            ),
            alternatives=["Partial evacuation", "Reinforced protection", "Full evacuation"],
        ))

    power = next(
        (f for f in infrastructure.critical_infrastructure if f.facility_type == "power_plant"),
        None,
    )
    points.append(DecisionPoint(
        time=now + timedelta(minutes=60 * scale),
        decision=f"Cut power supply at {power.name}" if power else "Cut power supply in the fire area",
        consequences="Lower ignition risk from power lines against loss of essential services",
        alternatives=["Selective cut", "Keep supply with protection", "Full cut"],
    ))

    residential = [z for z in zones if z is not first]
    largest = max(residential, key=lambda z: z.population) if residential else None
    population = largest.population if largest else 0
    points.append(DecisionPoint(
        time=now + timedelta(minutes=90 * scale),
        decision=f"Mass evacuation of {largest.zone}" if largest else "Mass evacuation of residential areas",
        consequences=f"Protect {population} people against congestion of escape routes",
        alternatives=["Staged evacuation", "Shelter in place", "Immediate evacuation"],
    ))

    points.sort(key=lambda p: p.time)
    return points


def generate_risk_assessment(
    biodiversity: BiodiversityData,
    infrastructure: InfrastructureAssessment,
    spread: Optional[FireSpreadPrediction] = None,
    now: Optional[datetime] = None,
) -> RiskAssessment:
    """
    Combine biodiversity and infrastructure exposure into one assessment.

    Args:
        biodiversity: Species and ecosystems at risk
        infrastructure: Built assets at risk
        spread: Spread projection, scales decision-point timing
        now: Reference time for decision points

    Returns:
        RiskAssessment
    """
    human = calculate_human_life_risk(infrastructure)
    environmental = calculate_environmental_risk(biodiversity)
    economic = calculate_economic_risk(biodiversity, infrastructure)
    cultural = calculate_cultural_risk(infrastructure)
    zones = generate_evacuation_priorities(infrastructure)

    return RiskAssessment(
        overall_risk=combine_risk(human, environmental, economic, cultural),
        human_life_risk=human,
        environmental_risk=environmental,
        economic_risk=economic,
        cultural_risk=cultural,
        priority_evacuation_zones=zones,
        critical_decision_points=identify_critical_decision_points(
            infrastructure, zones, spread, now or datetime.now(timezone.utc)
        ),
    )


# =============================================================================
# Assessor service
# =============================================================================

def _fire_resistance(scientific_name: str) -> str:
    if scientific_name.startswith("Eucalyptus"):
        return "low"
    if scientific_name.startswith("Quercus suber"):
        return "high"
    return "moderate"


def _recovery_years(scientific_name: str) -> int:
    if scientific_name.startswith("Quercus"):
        return 25
    if scientific_name.startswith("Pinus"):
        return 20
    return 15


def _mobility(class_name: Optional[str]) -> str:
    if class_name == "Aves":
        return "high"
    if class_name == "Mammalia":
        return "moderate"
    return "low"


class BiodiversityAssessor:
    """
    Sources biodiversity and infrastructure data for a location.

    Live species data comes from the species client; provider errors,
    timeouts and empty results fall back to the regional dataset.
    """

    def __init__(
        self,
        species_client: SpeciesClient,
        simulation: SimulationSource,
        timeout: Optional[float] = None,
        search_radius_km: Optional[float] = None,
    ):
        self.species_client = species_client
        self.simulation = simulation
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.search_radius_km = search_radius_km or settings.species_search_radius_km

    async def assess_biodiversity(self, latitude: float, longitude: float) -> BiodiversityData:
        """Biodiversity around a point; never raises, never empty."""
        bbox = BoundingBox.around(latitude, longitude, self.search_radius_km)
        try:
            occurrences = await asyncio.wait_for(
                self.species_client.search_occurrences(bbox), self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Species provider timed out after {self.timeout}s, using regional data")
            return regional_biodiversity(latitude, longitude)
        except ProviderError as e:
            logger.warning(f"Species provider failed ({e}), using regional data")
            return regional_biodiversity(latitude, longitude)

        data = self._from_occurrences(occurrences, latitude, longitude)
        if data.is_empty:
            logger.info("Species provider returned no usable records, using regional data")
            return regional_biodiversity(latitude, longitude)
        return data

    async def assess_infrastructure(self, latitude: float, longitude: float) -> InfrastructureAssessment:
        """Built assets around a point (simulated inventory)."""
        return simulated_infrastructure(latitude, longitude)

    def _from_occurrences(
        self,
        occurrences: List[SpeciesOccurrence],
        latitude: float,
        longitude: float,
    ) -> BiodiversityData:
        """Group occurrences by species; population and value are estimated."""
        grouped: "OrderedDict[str, List[SpeciesOccurrence]]" = OrderedDict()
        for occurrence in occurrences:
            grouped.setdefault(occurrence.scientific_name, []).append(occurrence)

        sim = self.simulation.for_key("species", round(latitude, 3), round(longitude, 3))
        flora: List[FloraSpecies] = []
        fauna: List[FaunaSpecies] = []

        for name, records in grouped.items():
            first = records[0]
            status = first.conservation_status
            label = first.vernacular_name or name
            if first.is_plant:
                flora.append(FloraSpecies(
                    name=label,
                    scientific_name=name,
                    conservation_status=status,
                    population=len(records) * sim.randint(50, 500),
                    critical_habitat=status in ("VU", "EN", "CR"),
                    fire_resistance=_fire_resistance(name),
                    recovery_years=_recovery_years(name),
                    economic_value=float(sim.randint(100_000, 1_100_000)),
                ))
            elif first.is_animal:
                fauna.append(FaunaSpecies(
                    name=label,
                    scientific_name=name,
                    conservation_status=status,
                    population=len(records) * sim.randint(5, 100),
                    mobility=_mobility(first.class_name),
                    critical_breeding_season=sim.chance(0.3),
                    fire_adaptation="behavioral" if first.class_name in ("Aves", "Mammalia") else "none",
                    evacuation_priority=EVACUATION_PRIORITY_BY_STATUS[status],
                ))

        # GBIF carries no ecosystem or protected-area records
        regional = regional_biodiversity(latitude, longitude)
        return BiodiversityData(
            flora_species=flora,
            fauna_species=fauna,
            ecosystem_services=regional.ecosystem_services,
            protected_areas=regional.protected_areas,
            region=IBERIAN_REGION if is_in_iberian_region(latitude, longitude) else GENERIC_REGION,
            data_source=DATA_SOURCE_REAL,
        )
