"""
Emberline - Core Operations
One function per scoring operation, accepting plain values or dictionaries
as well as the typed records. Provider-backed operations are async.
"""

from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple, Union

from emberline.core.config import settings
from emberline.core.simulation import SimulationSource
from emberline.analysis.biodiversity import BiodiversityAssessor, RiskAssessment
from emberline.analysis.biodiversity import generate_risk_assessment as _generate_risk_assessment
from emberline.analysis.inventory import BiodiversityData, InfrastructureAssessment
from emberline.ingestion.resource_catalog import ResourceCatalog, default_resource_catalog
from emberline.ingestion.species_client import SpeciesClient
from emberline.ingestion.weather_client import WeatherSnapshot
from emberline.prediction.resource_allocator import ResourceAllocation
from emberline.prediction.resource_allocator import allocate_resources as _allocate_resources
from emberline.prediction.risk_index import FireRiskPrediction
from emberline.prediction.risk_index import compute_fire_risk as _compute_fire_risk
from emberline.prediction.spread_calculator import FireSpreadPrediction, WindConditions
from emberline.prediction.spread_calculator import predict_spread as _predict_spread
from emberline.prediction.wind_analysis import WindAnalysis, WindState
from emberline.tactics.planner import TacticalPlan
from emberline.tactics.planner import generate_tactical_plans as _generate_tactical_plans

Location = Tuple[float, float]


def _default_simulation() -> SimulationSource:
    return SimulationSource(settings.simulation_seed)


def compute_fire_risk(weather: Union[WeatherSnapshot, Dict[str, Any]]) -> FireRiskPrediction:
    if isinstance(weather, dict):
        weather = WeatherSnapshot.from_dict(weather)
    return _compute_fire_risk(weather)


def predict_spread(
    risk: Union[FireRiskPrediction, float],
    wind: Union[WindConditions, Dict[str, Any]],
    origin: Optional[Location] = None,
) -> FireSpreadPrediction:
    score = risk.risk_score if isinstance(risk, FireRiskPrediction) else risk
    if isinstance(wind, dict):
        wind = WindConditions.from_dict(wind)
    return _predict_spread(score, wind, origin)


def allocate_resources(
    spread: FireSpreadPrediction,
    catalog: Optional[ResourceCatalog] = None,
) -> ResourceAllocation:
    """Without a catalog, the demo catalog around the fire origin is used."""
    if catalog is None:
        catalog = default_resource_catalog(spread.origin_latitude, spread.origin_longitude)
    return _allocate_resources(
        spread,
        catalog,
        max_stations=settings.max_surfaced_stations,
        max_aircraft=settings.max_surfaced_aircraft,
        max_water_sources=settings.max_surfaced_water_sources,
    )


async def assess_biodiversity_risk(
    location: Location,
    assessor: Optional[BiodiversityAssessor] = None,
) -> BiodiversityData:
    if assessor is not None:
        return await assessor.assess_biodiversity(*location)
    async with SpeciesClient() as client:
        return await BiodiversityAssessor(client, _default_simulation()).assess_biodiversity(*location)


async def assess_infrastructure_risk(
    location: Location,
    assessor: Optional[BiodiversityAssessor] = None,
) -> InfrastructureAssessment:
    if assessor is not None:
        return await assessor.assess_infrastructure(*location)
    async with SpeciesClient() as client:
        return await BiodiversityAssessor(client, _default_simulation()).assess_infrastructure(*location)


def generate_risk_assessment(
    biodiversity: BiodiversityData,
    infrastructure: InfrastructureAssessment,
    spread: Optional[FireSpreadPrediction] = None,
    now: Optional[datetime] = None,
) -> RiskAssessment:
    return _generate_risk_assessment(biodiversity, infrastructure, spread, now)


def generate_tactical_plans(
    location: Location,
    wind: Union[WindAnalysis, WindState],
    spread: FireSpreadPrediction,
    risk_assessment: Optional[RiskAssessment],
    simulation: Optional[SimulationSource] = None,
) -> List[TacticalPlan]:
    latitude, longitude = location
    return _generate_tactical_plans(
        latitude, longitude, wind, spread, risk_assessment,
        simulation or _default_simulation(),
    )
