"""
Emberline - REST API

FastAPI application exposing fire risk scoring, spread prediction,
resource allocation, biodiversity and infrastructure risk, tactical plans,
full emergency analyses, monitoring zones and fire alerts.

Run with: uvicorn emberline.api.main:app --reload
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, List, Tuple

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from emberline import __version__
from emberline.core.config import Settings, get_settings
from emberline.core.exceptions import AlertNotFoundError, InvalidTransitionError
from emberline.core.logging import get_logger, setup_logging
from emberline.core.simulation import SimulationSource
from emberline.alerts.alert_manager import AlertManager, AlertStatus
from emberline.analysis.biodiversity import BiodiversityAssessor, generate_risk_assessment
from emberline.ingestion.resource_catalog import default_resource_catalog
from emberline.ingestion.species_client import SpeciesClient
from emberline.ingestion.weather_client import WeatherClient, WeatherSnapshot
from emberline.orchestration.monitor import SimulatedDetectionSource, ZoneMonitor
from emberline.orchestration.pipeline import EmergencyAnalysisPipeline
from emberline.orchestration.zones import AnalysisContext, MonitoringZone
from emberline.prediction.resource_allocator import allocate_resources
from emberline.prediction.risk_index import compute_fire_risk
from emberline.prediction.spread_calculator import WindConditions, predict_spread
from emberline.prediction.wind_analysis import analyze_wind
from emberline.tactics.planner import generate_tactical_plans

logger = get_logger(__name__)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: str
    environment: str
    modules: dict


class WeatherRequest(BaseModel):
    """Weather reading; missing fields are defaulted and lower confidence."""
    temperature_celsius: Optional[float] = None
    humidity_percent: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    wind_direction_degrees: Optional[float] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class SpreadRequest(BaseModel):
    """Risk score and wind for a spread projection."""
    risk_score: float = Field(..., ge=0, le=100)
    wind_speed_kmh: Optional[float] = Field(default=None, ge=0)
    wind_direction_degrees: Optional[float] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class LocationRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ScenarioRequest(BaseModel):
    """Location plus the fire conditions to assess."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    risk_score: float = Field(default=50.0, ge=0, le=100)
    temperature_celsius: Optional[float] = None
    wind_speed_kmh: Optional[float] = Field(default=None, ge=0)
    wind_direction_degrees: Optional[float] = None


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ZoneCreateRequest(BaseModel):
    """Request to create a monitoring zone."""
    name: str = Field(..., min_length=1)
    polygon: List[Coordinate] = Field(..., min_length=3)
    priority: str = Field(default="medium", pattern="^(low|medium|high|critical)$")


# ============================================================================
# Services
# ============================================================================

@dataclass
class Services:
    """Long-lived collaborators shared by the routes."""
    settings: Settings
    simulation: SimulationSource
    weather_client: WeatherClient
    species_client: SpeciesClient
    assessor: BiodiversityAssessor
    pipeline: EmergencyAnalysisPipeline
    alert_manager: AlertManager
    monitor: ZoneMonitor

    async def aclose(self) -> None:
        await self.weather_client.aclose()
        await self.species_client.aclose()


def build_services(settings: Settings) -> Services:
    simulation = SimulationSource(settings.simulation_seed)
    weather_client = WeatherClient(settings.weather_api_url, settings.http_timeout_seconds)
    species_client = SpeciesClient(
        settings.gbif_api_url, settings.http_timeout_seconds, settings.species_page_size
    )
    assessor = BiodiversityAssessor(
        species_client,
        simulation.for_key("biodiversity"),
        timeout=settings.provider_timeout_seconds,
        search_radius_km=settings.species_search_radius_km,
    )
    pipeline = EmergencyAnalysisPipeline(weather_client, assessor, simulation, settings=settings)
    alert_manager = AlertManager()
    monitor = ZoneMonitor(
        SimulatedDetectionSource(simulation.for_key("detections")),
        pipeline,
        alert_manager,
    )
    logger.info(f"Services ready (env={settings.app_env}, seed={settings.simulation_seed})")
    return Services(
        settings=settings,
        simulation=simulation,
        weather_client=weather_client,
        species_client=species_client,
        assessor=assessor,
        pipeline=pipeline,
        alert_manager=alert_manager,
        monitor=monitor,
    )


def _services(request: Request) -> Services:
    return request.app.state.services


def _origin(body: SpreadRequest, settings: Settings) -> Tuple[float, float]:
    if body.latitude is not None and body.longitude is not None:
        return body.latitude, body.longitude
    return settings.default_latitude, settings.default_longitude


def _snapshot(
    request: ScenarioRequest,
    wind_speed_kmh: Optional[float],
    wind_direction_degrees: Optional[float],
) -> WeatherSnapshot:
    return WeatherSnapshot(
        temperature_celsius=request.temperature_celsius,
        wind_speed_kmh=wind_speed_kmh,
        wind_direction_degrees=wind_direction_degrees,
        latitude=request.latitude,
        longitude=request.longitude,
        timestamp=datetime.now(timezone.utc),
    )


# ============================================================================
# Application
# ============================================================================

def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the API with its services.

    Args:
        settings: Settings to use, defaults to the environment
        services: Pre-built services, mostly for tests

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state: Services = app.state.services
        monitor_task = None
        if state.settings.monitor_autostart:
            monitor_task = asyncio.create_task(state.monitor.run())
        yield
        if monitor_task is not None:
            state.monitor.stop()
            await monitor_task
        await state.aclose()

    app = FastAPI(
        title="Emberline",
        description="Wildfire emergency analysis API: risk, spread, resources, exposure and tactics",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.services = services or build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # System Routes
    # ========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request):
        """Check API health status and module availability."""
        state = _services(request)
        return HealthResponse(
            status="healthy",
            version=__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            environment=state.settings.app_env,
            modules={
                "weather_client": True,
                "species_client": True,
                "prediction": True,
                "analysis": True,
                "tactics": True,
                "monitor": not state.monitor.paused,
            },
        )

    # ========================================================================
    # Scoring Routes
    # ========================================================================

    @app.post("/api/v1/risk", tags=["Risk"])
    async def get_fire_risk(body: WeatherRequest):
        """Score fire risk for a weather reading."""
        try:
            weather = WeatherSnapshot(**body.model_dump())
            return compute_fire_risk(weather).to_dict()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/v1/spread", tags=["Prediction"])
    async def get_spread(body: SpreadRequest, request: Request):
        """Project fire spread at 24 and 72 hours."""
        try:
            origin = _origin(body, _services(request).settings)
            wind = WindConditions.from_values(body.wind_speed_kmh, body.wind_direction_degrees)
            return predict_spread(body.risk_score, wind, origin).to_dict()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/v1/resources", tags=["Prediction"])
    async def get_resources(body: SpreadRequest, request: Request):
        """Recommend a deployment and rank nearby resources."""
        state = _services(request)
        try:
            origin = _origin(body, state.settings)
            wind = WindConditions.from_values(body.wind_speed_kmh, body.wind_direction_degrees)
            spread = predict_spread(body.risk_score, wind, origin)
            catalog = state.pipeline.catalog or default_resource_catalog(
                spread.origin_latitude, spread.origin_longitude
            )
            return allocate_resources(
                spread,
                catalog,
                max_stations=state.settings.max_surfaced_stations,
                max_aircraft=state.settings.max_surfaced_aircraft,
                max_water_sources=state.settings.max_surfaced_water_sources,
            ).to_dict()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ========================================================================
    # Exposure Routes
    # ========================================================================

    @app.get("/api/v1/biodiversity", tags=["Analysis"])
    async def get_biodiversity(
        request: Request,
        latitude: float = Query(..., ge=-90, le=90),
        longitude: float = Query(..., ge=-180, le=180),
    ):
        """Species and ecosystems around a location."""
        data = await _services(request).assessor.assess_biodiversity(latitude, longitude)
        return data.to_dict()

    @app.get("/api/v1/infrastructure", tags=["Analysis"])
    async def get_infrastructure(
        request: Request,
        latitude: float = Query(..., ge=-90, le=90),
        longitude: float = Query(..., ge=-180, le=180),
    ):
        """Built assets around a location."""
        data = await _services(request).assessor.assess_infrastructure(latitude, longitude)
        return data.to_dict()

    @app.post("/api/v1/risk-assessment", tags=["Analysis"])
    async def get_risk_assessment(body: ScenarioRequest, request: Request):
        """Combined human-life, environmental, economic and cultural risk."""
        assessor = _services(request).assessor
        try:
            biodiversity, infrastructure = await asyncio.gather(
                assessor.assess_biodiversity(body.latitude, body.longitude),
                assessor.assess_infrastructure(body.latitude, body.longitude),
            )
            wind = WindConditions.from_values(body.wind_speed_kmh, body.wind_direction_degrees)
            spread = predict_spread(body.risk_score, wind, (body.latitude, body.longitude))
            return generate_risk_assessment(biodiversity, infrastructure, spread).to_dict()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/v1/tactical-plans", tags=["Tactics"])
    async def get_tactical_plans(body: ScenarioRequest, request: Request):
        """Ranked tactical plans for a fire scenario."""
        state = _services(request)
        try:
            wind_conditions = WindConditions.from_values(
                body.wind_speed_kmh, body.wind_direction_degrees
            )
            spread = predict_spread(body.risk_score, wind_conditions, (body.latitude, body.longitude))
            sim = state.simulation.for_key("tactical-plans", body.latitude, body.longitude)
            wind = analyze_wind(
                _snapshot(body, wind_conditions.speed_kmh, wind_conditions.direction_degrees),
                sim.for_key("wind"),
            )
            biodiversity, infrastructure = await asyncio.gather(
                state.assessor.assess_biodiversity(body.latitude, body.longitude),
                state.assessor.assess_infrastructure(body.latitude, body.longitude),
            )
            assessment = generate_risk_assessment(biodiversity, infrastructure, spread)
            plans = generate_tactical_plans(
                body.latitude, body.longitude, wind, spread, assessment, sim
            )
            return {"count": len(plans), "plans": [p.to_dict() for p in plans]}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/v1/analysis", tags=["Analysis"])
    async def run_analysis(body: LocationRequest, request: Request):
        """Full emergency analysis; stage failures are reported in `errors`."""
        pipeline = _services(request).pipeline
        try:
            result = await pipeline.analyze(body.latitude, body.longitude, AnalysisContext())
            return result.to_dict()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ========================================================================
    # Zone and Alert Routes
    # ========================================================================

    @app.post("/api/v1/zones", tags=["Zones"])
    async def create_zone(body: ZoneCreateRequest, request: Request):
        """Start monitoring a zone."""
        try:
            zone = MonitoringZone.create(
                body.name,
                [(p.latitude, p.longitude) for p in body.polygon],
                body.priority,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        _services(request).monitor.add_zone(zone)
        return zone.to_dict()

    @app.get("/api/v1/zones", tags=["Zones"])
    async def list_zones(request: Request):
        zones = list(_services(request).monitor.zones.values())
        return {"count": len(zones), "zones": [z.to_dict() for z in zones]}

    # ========================================================================
    # Monitor Routes
    # ========================================================================

    def _monitor_status(monitor: ZoneMonitor) -> dict:
        return {
            "running": monitor.running,
            "paused": monitor.paused,
            "zones": len(monitor.zones),
            "in_flight": monitor.in_flight,
            "interval_seconds": monitor.interval_seconds,
        }

    @app.get("/api/v1/monitor", tags=["Monitor"])
    async def monitor_status(request: Request):
        return _monitor_status(_services(request).monitor)

    @app.post("/api/v1/monitor/pause", tags=["Monitor"])
    async def pause_monitor(request: Request):
        """Stop starting new analyses; running ones finish."""
        monitor = _services(request).monitor
        monitor.pause()
        return _monitor_status(monitor)

    @app.post("/api/v1/monitor/resume", tags=["Monitor"])
    async def resume_monitor(request: Request):
        monitor = _services(request).monitor
        monitor.resume()
        return _monitor_status(monitor)

    @app.get("/api/v1/alerts", tags=["Alerts"])
    async def list_alerts(
        request: Request,
        status: Optional[str] = Query(default=None, pattern="^(new|analyzing|ready|responding)$"),
    ):
        """List fire alerts, optionally by lifecycle status."""
        manager = _services(request).alert_manager
        alerts = manager.list_alerts(AlertStatus(status) if status else None)
        return {"count": len(alerts), "alerts": [a.to_dict() for a in alerts]}

    @app.get("/api/v1/alerts/{alert_id}", tags=["Alerts"])
    async def get_alert(alert_id: str, request: Request):
        try:
            return _services(request).alert_manager.get_alert(alert_id).to_dict()
        except AlertNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/api/v1/alerts/{alert_id}/respond", tags=["Alerts"])
    async def respond_to_alert(alert_id: str, request: Request):
        """Operator starts the response; only READY alerts can respond."""
        manager = _services(request).alert_manager
        try:
            return manager.start_response(alert_id).to_dict()
        except AlertNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except InvalidTransitionError as e:
            raise HTTPException(status_code=409, detail=str(e))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
