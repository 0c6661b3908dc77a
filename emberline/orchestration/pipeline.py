"""
Emberline - Emergency Analysis Pipeline
Runs the full analysis for a fire location: weather, risk, spread,
resources and evacuation, then a concurrent fan-out over wind,
biodiversity, infrastructure, water and firebreaks, then exposure risk
and tactical plans.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from emberline.core.config import Settings, get_settings
from emberline.core.simulation import DATA_SOURCE_SIMULATED, SimulationSource
from emberline.analysis.biodiversity import BiodiversityAssessor, RiskAssessment, generate_risk_assessment
from emberline.analysis.inventory import BiodiversityData, InfrastructureAssessment
from emberline.analysis.regional_data import regional_biodiversity, simulated_infrastructure
from emberline.ingestion.resource_catalog import (
    ResourceCatalog,
    default_resource_catalog,
    load_resource_catalog,
)
from emberline.ingestion.weather_client import (
    WeatherClient,
    WeatherSnapshot,
    fetch_weather_with_fallback,
)
from emberline.orchestration.zones import AnalysisContext, MonitoringZone, OrganizationConfig
from emberline.prediction.evacuation_router import EvacuationZone, identify_evacuation_zones
from emberline.prediction.resource_allocator import ResourceAllocation, allocate_resources
from emberline.prediction.risk_index import FireRiskPrediction, compute_fire_risk
from emberline.prediction.spread_calculator import (
    FireSpreadPrediction,
    WindConditions,
    predict_spread,
)
from emberline.prediction.wind_analysis import WindAnalysis, analyze_wind, current_wind_state
from emberline.tactics.planner import TacticalPlan, generate_tactical_plans
from emberline.tactics.resources import (
    FirebreakStrategy,
    WaterSource,
    design_firebreaks,
    identify_water_sources,
)

logger = logging.getLogger(__name__)

# Search radius for tactical water sources
WATER_SEARCH_RADIUS_KM = 10.0


@dataclass(frozen=True)
class StageError:
    stage: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage, "message": self.message}


@dataclass
class AnalysisResult:
    """Everything one analysis run produced, including stage errors."""
    latitude: float
    longitude: float
    weather: WeatherSnapshot
    risk: FireRiskPrediction
    spread: FireSpreadPrediction
    allocation: ResourceAllocation
    evacuation_zones: List[EvacuationZone]
    wind: WindAnalysis
    biodiversity: BiodiversityData
    infrastructure: InfrastructureAssessment
    water_sources: List[WaterSource]
    firebreaks: List[FirebreakStrategy]
    risk_assessment: RiskAssessment
    tactical_plans: List[TacticalPlan]
    errors: List[StageError] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    zone: Optional[MonitoringZone] = None
    organization: Optional[OrganizationConfig] = None

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def data_source(self) -> str:
        return self.weather.data_source

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "generated_at": self.generated_at.isoformat(),
            "data_source": self.data_source,
            "zone": self.zone.to_dict() if self.zone else None,
            "organization": self.organization.to_dict() if self.organization else None,
            "weather": self.weather.to_dict(),
            "risk": self.risk.to_dict(),
            "spread": self.spread.to_dict(),
            "resources": self.allocation.to_dict(),
            "evacuation_zones": [z.to_dict() for z in self.evacuation_zones],
            "wind": self.wind.to_dict(),
            "biodiversity": self.biodiversity.to_dict(),
            "infrastructure": self.infrastructure.to_dict(),
            "water_sources": [s.to_dict() for s in self.water_sources],
            "firebreaks": [f.to_dict() for f in self.firebreaks],
            "risk_assessment": self.risk_assessment.to_dict(),
            "tactical_plans": [p.to_dict() for p in self.tactical_plans],
            "errors": [e.to_dict() for e in self.errors],
        }


class EmergencyAnalysisPipeline:
    """
    Composes the providers and scoring functions into one analysis run.

    Every provider-backed branch is bounded by the provider timeout and
    isolated: a failing branch records a StageError and falls back to
    deterministic data while the others carry on.
    """

    def __init__(
        self,
        weather_client: WeatherClient,
        biodiversity_assessor: BiodiversityAssessor,
        simulation: SimulationSource,
        catalog: Optional[ResourceCatalog] = None,
        settings: Optional[Settings] = None,
    ):
        self.weather_client = weather_client
        self.biodiversity_assessor = biodiversity_assessor
        self.simulation = simulation
        self.settings = settings or get_settings()
        self.timeout = self.settings.provider_timeout_seconds

        if catalog is None and self.settings.resource_catalog_path:
            catalog = load_resource_catalog(self.settings.resource_catalog_path)
        self.catalog = catalog

    def _catalog_for(self, context: AnalysisContext, latitude: float, longitude: float) -> ResourceCatalog:
        if context.catalog is not None:
            return context.catalog
        if self.catalog is not None:
            return self.catalog
        return default_resource_catalog(latitude, longitude)

    async def _bounded(
        self,
        stage: str,
        factory: Callable[[], Awaitable[Any]],
        fallback: Callable[[], Any],
        errors: List[StageError],
    ) -> Any:
        """Await one branch within the timeout; fall back on any failure."""
        try:
            return await asyncio.wait_for(factory(), self.timeout)
        except asyncio.TimeoutError:
            message = f"timed out after {self.timeout}s"
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
        logger.warning(f"Stage '{stage}' failed ({message}), using fallback")
        errors.append(StageError(stage, message))
        return fallback()

    async def analyze(
        self,
        latitude: float,
        longitude: float,
        context: Optional[AnalysisContext] = None,
    ) -> AnalysisResult:
        """
        Run the full analysis for a fire location.

        Args:
            latitude, longitude: Fire location
            context: Organization, zone, catalog and clock for this run

        Returns:
            AnalysisResult; stage failures are listed in `errors`
        """
        context = context or AnalysisContext()
        now = context.now or datetime.now(timezone.utc)
        key = context.simulation_key or f"{latitude:.4f},{longitude:.4f}"
        sim = self.simulation.for_key("analysis", key)
        errors: List[StageError] = []

        if context.zone is not None:
            logger.info(
                f"Analyzing fire at ({latitude:.4f}, {longitude:.4f}) in zone "
                f"{context.zone.zone_id} ({context.zone.priority} priority)"
            )
        else:
            logger.info(f"Analyzing fire at ({latitude:.4f}, {longitude:.4f})")

        # Sequential core
        weather = await fetch_weather_with_fallback(
            self.weather_client, latitude, longitude, self.timeout
        )
        if weather.data_source == DATA_SOURCE_SIMULATED:
            errors.append(StageError("weather", "provider unavailable, default weather used"))

        risk = compute_fire_risk(weather)
        wind_conditions = WindConditions.from_values(
            risk.wind_speed_kmh, risk.wind_direction_degrees
        )
        spread = predict_spread(risk.risk_score, wind_conditions, (latitude, longitude))
        allocation = allocate_resources(
            spread,
            self._catalog_for(context, latitude, longitude),
            max_stations=self.settings.max_surfaced_stations,
            max_aircraft=self.settings.max_surfaced_aircraft,
            max_water_sources=self.settings.max_surfaced_water_sources,
        )
        evacuation_zones = identify_evacuation_zones(spread, sim.for_key("evacuation"))
        risk = risk.with_downstream(spread, evacuation_zones, allocation)

        # Concurrent fan-out
        async def wind_branch() -> WindAnalysis:
            return analyze_wind(weather, sim.for_key("wind"), now)

        async def water_branch() -> List[WaterSource]:
            return identify_water_sources(latitude, longitude, WATER_SEARCH_RADIUS_KM, sim)

        async def firebreak_branch() -> List[FirebreakStrategy]:
            return design_firebreaks(latitude, longitude, spread.direction_degrees, spread)

        wind, biodiversity, infrastructure, water_sources, firebreaks = await asyncio.gather(
            self._bounded(
                "wind", wind_branch,
                lambda: WindAnalysis(current=current_wind_state(weather, now)),
                errors,
            ),
            self._bounded(
                "biodiversity",
                lambda: self.biodiversity_assessor.assess_biodiversity(latitude, longitude),
                lambda: regional_biodiversity(latitude, longitude),
                errors,
            ),
            self._bounded(
                "infrastructure",
                lambda: self.biodiversity_assessor.assess_infrastructure(latitude, longitude),
                lambda: simulated_infrastructure(latitude, longitude),
                errors,
            ),
            self._bounded("water_sources", water_branch, list, errors),
            self._bounded("firebreaks", firebreak_branch, list, errors),
        )

        # Join
        risk_assessment = generate_risk_assessment(biodiversity, infrastructure, spread, now)
        plans = generate_tactical_plans(
            latitude, longitude, wind, spread, risk_assessment, sim.for_key("tactics")
        )

        result = AnalysisResult(
            latitude=latitude,
            longitude=longitude,
            weather=weather,
            risk=risk,
            spread=spread,
            allocation=allocation,
            evacuation_zones=evacuation_zones,
            wind=wind,
            biodiversity=biodiversity,
            infrastructure=infrastructure,
            water_sources=water_sources,
            firebreaks=firebreaks,
            risk_assessment=risk_assessment,
            tactical_plans=plans,
            errors=errors,
            generated_at=now,
            zone=context.zone,
            organization=context.organization,
        )
        logger.info(
            f"Analysis complete: risk {risk.risk_score:.1f} ({risk.risk_level}), "
            f"{len(plans)} plans, {len(errors)} stage errors, data source {result.data_source}"
        )
        return result
