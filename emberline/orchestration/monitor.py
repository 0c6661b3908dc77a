"""
Emberline - Zone Monitor
Polls a detection source for the configured zones and runs one analysis
task per new fire alert.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Set, Tuple

from emberline.core.constants import DETECTION_PROBABILITY_BY_PRIORITY
from emberline.core.simulation import DATA_SOURCE_SIMULATED, SimulationSource
from emberline.alerts.alert_manager import AlertManager, FireAlert
from emberline.orchestration.pipeline import EmergencyAnalysisPipeline
from emberline.orchestration.zones import AnalysisContext, MonitoringZone, OrganizationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FireDetection:
    zone_id: str
    latitude: float
    longitude: float
    detected_at: datetime
    confidence: float
    data_source: str = DATA_SOURCE_SIMULATED

    @property
    def key(self) -> Tuple[str, float, float]:
        """Detections within ~100 m in the same zone are the same fire."""
        return (self.zone_id, round(self.latitude, 3), round(self.longitude, 3))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone_id": self.zone_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "detected_at": self.detected_at.isoformat(),
            "confidence": round(self.confidence, 3),
            "data_source": self.data_source,
        }


class DetectionSource:
    """Something that reports active fires inside monitoring zones."""

    async def detect(self, zones: List[MonitoringZone]) -> List[FireDetection]:
        raise NotImplementedError


class SimulatedDetectionSource(DetectionSource):
    """
    Seeded stand-in for satellite hotspots.

    Each poll a zone reports 1-3 fires with a probability set by its
    priority; positions fall inside the zone's bounding box.
    """

    def __init__(self, simulation: SimulationSource):
        self.simulation = simulation
        self.polls = 0

    async def detect(self, zones: List[MonitoringZone]) -> List[FireDetection]:
        self.polls += 1
        now = datetime.now(timezone.utc)
        detections = []

        for zone in zones:
            sim = self.simulation.for_key("detection", zone.zone_id, self.polls)
            if not sim.chance(DETECTION_PROBABILITY_BY_PRIORITY[zone.priority]):
                continue
            bbox = zone.bbox
            for _ in range(sim.randint(1, 3)):
                detections.append(FireDetection(
                    zone_id=zone.zone_id,
                    latitude=sim.uniform(bbox.south, bbox.north),
                    longitude=sim.uniform(bbox.west, bbox.east),
                    detected_at=now,
                    confidence=sim.uniform(0.6, 0.99),
                ))

        return detections


class ZoneMonitor:
    """
    Turns detections into alerts and analyses.

    One independent task runs per alert, so a slow or failing analysis
    never delays the others. A failed analysis leaves its alert in
    ANALYZING with the error flag set.
    """

    def __init__(
        self,
        detection_source: DetectionSource,
        pipeline: EmergencyAnalysisPipeline,
        alert_manager: AlertManager,
        zones: Optional[List[MonitoringZone]] = None,
        organization: Optional[OrganizationConfig] = None,
        interval_seconds: Optional[float] = None,
    ):
        self.detection_source = detection_source
        self.pipeline = pipeline
        self.alert_manager = alert_manager
        self.zones: Dict[str, MonitoringZone] = {z.zone_id: z for z in zones or []}
        self.organization = organization
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None
            else pipeline.settings.poll_interval_seconds
        )
        self.paused = False
        self._stop_requested = False
        self._seen: Set[Tuple[str, float, float]] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._stop_event: Optional[asyncio.Event] = None

    # =========================================================================
    # Zones
    # =========================================================================

    def add_zone(self, zone: MonitoringZone) -> None:
        self.zones[zone.zone_id] = zone
        logger.info(f"Monitoring zone {zone.zone_id} ({zone.name}, {zone.priority})")

    def remove_zone(self, zone_id: str) -> None:
        self.zones.pop(zone_id, None)

    # =========================================================================
    # Control
    # =========================================================================

    def pause(self) -> None:
        """Stop starting new analyses; in-flight ones run to completion."""
        self.paused = True
        logger.info("Zone monitor paused")

    def resume(self) -> None:
        self.paused = False
        logger.info("Zone monitor resumed")

    def stop(self) -> None:
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()

    @property
    def running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight analysis to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # =========================================================================
    # Polling
    # =========================================================================

    async def run_once(self) -> List[FireAlert]:
        """
        Poll once and start an analysis for each new detection.

        Returns:
            Alerts created by this poll (empty while paused)
        """
        if self.paused or not self.zones:
            return []

        detections = await self.detection_source.detect(list(self.zones.values()))
        created = []

        for detection in detections:
            if detection.key in self._seen:
                continue
            self._seen.add(detection.key)

            alert = self.alert_manager.create_alert(
                detection.zone_id,
                detection.latitude,
                detection.longitude,
                detected_at=detection.detected_at,
                confidence=detection.confidence,
            )
            self.alert_manager.begin_analysis(alert.alert_id)

            task = asyncio.create_task(self._analyze(alert))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            created.append(alert)

        if created:
            logger.info(f"Poll created {len(created)} alerts, {self.in_flight} analyses in flight")
        return created

    async def run(self) -> None:
        """Poll every interval until stop() is called."""
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()
        logger.info(f"Zone monitor started, {len(self.zones)} zones, every {self.interval_seconds}s")

        while not self._stop_event.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Detection poll failed, retrying next interval")
            try:
                await asyncio.wait_for(self._stop_event.wait(), self.interval_seconds)
            except asyncio.TimeoutError:
                continue

        await self.drain()
        self._stop_event = None
        self._stop_requested = False
        logger.info("Zone monitor stopped")

    async def _analyze(self, alert: FireAlert) -> None:
        context = AnalysisContext(
            organization=self.organization,
            zone=self.zones.get(alert.zone_id),
            simulation_key=alert.alert_id,
        )
        try:
            result = await self.pipeline.analyze(alert.latitude, alert.longitude, context)
        except Exception as e:
            logger.exception(f"Analysis for alert {alert.alert_id} raised")
            self.alert_manager.fail_analysis(alert.alert_id, f"{type(e).__name__}: {e}")
            return
        self.alert_manager.complete_analysis(alert.alert_id, result, result.risk.risk_score)
