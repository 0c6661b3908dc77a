"""
Tests for zone monitoring and alert orchestration
"""
import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

import sys
sys.path.insert(0, '.')

from emberline.alerts import AlertManager, AlertStatus
from emberline.core.simulation import SimulationSource
from emberline.orchestration import (
    DetectionSource,
    FireDetection,
    MonitoringZone,
    OrganizationConfig,
    SimulatedDetectionSource,
    ZoneMonitor,
)

ZONE_POLYGON = [(40.40, -3.72), (40.40, -3.68), (40.44, -3.68), (40.44, -3.72)]
DETECTED_AT = datetime(2026, 7, 15, 14, 0, tzinfo=timezone.utc)


class FixedDetectionSource(DetectionSource):
    """Reports the same detections every poll."""

    def __init__(self, detections):
        self.detections = detections
        self.calls = 0

    async def detect(self, zones):
        self.calls += 1
        zone_ids = {z.zone_id for z in zones}
        return [d for d in self.detections if d.zone_id in zone_ids]


class FlakyDetectionSource(FixedDetectionSource):
    """Fails on the first poll, then reports normally."""

    async def detect(self, zones):
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("satellite feed down")
        zone_ids = {z.zone_id for z in zones}
        return [d for d in self.detections if d.zone_id in zone_ids]


class FakePipeline:
    """Stands in for EmergencyAnalysisPipeline."""

    def __init__(self, fail_at=None, risk_score=72.0):
        self.settings = MagicMock(poll_interval_seconds=0.01)
        self.fail_at = fail_at or set()
        self.risk_score = risk_score
        self.calls = []

    async def analyze(self, latitude, longitude, context=None):
        self.calls.append((latitude, longitude, context))
        await asyncio.sleep(0)
        if (latitude, longitude) in self.fail_at:
            raise RuntimeError("analysis crashed")
        result = MagicMock()
        result.risk.risk_score = self.risk_score
        return result


def detection(zone_id, lat, lon):
    return FireDetection(zone_id, lat, lon, DETECTED_AT, confidence=0.9)


class TestMonitoringZone:

    def test_create(self):
        zone = MonitoringZone.create("Casa de Campo", ZONE_POLYGON, priority="high")

        assert zone.zone_id.startswith("zone_")
        assert zone.center == pytest.approx((40.42, -3.70))
        assert zone.area_km2 == pytest.approx(0.04 * 0.04 * 111 * 111)
        assert zone.to_dict()["priority"] == "high"

    def test_validation(self):
        with pytest.raises(ValueError):
            MonitoringZone.create("Line", ZONE_POLYGON[:2])
        with pytest.raises(ValueError):
            MonitoringZone.create("Zone", ZONE_POLYGON, priority="urgent")
        with pytest.raises(ValueError):
            OrganizationConfig("Brigade", organization_type="navy")

    def test_organization(self):
        org = OrganizationConfig("Madrid Fire Brigade", phone="112", capabilities=["aerial"])

        assert org.to_dict()["type"] == "firefighters"
        assert org.to_dict()["contact_info"]["phone"] == "112"


class TestZoneMonitor:
    """Test suite for ZoneMonitor."""

    def setup_method(self):
        self.zone = MonitoringZone.create("Casa de Campo", ZONE_POLYGON, priority="critical")
        self.alerts = AlertManager()

    def _monitor(self, detections, pipeline=None):
        source = FixedDetectionSource(detections)
        monitor = ZoneMonitor(
            source, pipeline or FakePipeline(), self.alerts,
            zones=[self.zone], organization=OrganizationConfig("Brigade"),
        )
        return monitor, source

    def test_detections_become_ready_alerts(self):
        monitor, _ = self._monitor([
            detection(self.zone.zone_id, 40.41, -3.71),
            detection(self.zone.zone_id, 40.43, -3.69),
        ])

        async def run():
            created = await monitor.run_once()
            assert all(a.status == AlertStatus.ANALYZING for a in created)
            await monitor.drain()
            return created

        created = asyncio.run(run())

        assert len(created) == 2
        assert all(a.status == AlertStatus.READY for a in created)
        assert all(a.risk_score == 72.0 for a in created)
        assert monitor.in_flight == 0

    def test_context_carries_alert_key(self):
        pipeline = FakePipeline()
        monitor, _ = self._monitor([detection(self.zone.zone_id, 40.41, -3.71)], pipeline)

        async def run():
            created = await monitor.run_once()
            await monitor.drain()
            return created

        created = asyncio.run(run())
        context = pipeline.calls[0][2]

        assert context.simulation_key == created[0].alert_id
        assert context.zone == self.zone
        assert context.organization.name == "Brigade"

    def test_duplicate_detections_are_ignored(self):
        monitor, source = self._monitor([
            detection(self.zone.zone_id, 40.41, -3.71),
            detection(self.zone.zone_id, 40.41004, -3.71002),
        ])

        async def run():
            first = await monitor.run_once()
            second = await monitor.run_once()
            await monitor.drain()
            return first, second

        first, second = asyncio.run(run())

        assert len(first) == 1
        assert second == []
        assert source.calls == 2
        assert len(self.alerts.list_alerts()) == 1

    def test_failure_is_isolated(self):
        pipeline = FakePipeline(fail_at={(40.41, -3.71)})
        monitor, _ = self._monitor([
            detection(self.zone.zone_id, 40.41, -3.71),
            detection(self.zone.zone_id, 40.43, -3.69),
        ], pipeline)

        async def run():
            created = await monitor.run_once()
            await monitor.drain()
            return created

        failed, succeeded = asyncio.run(run())

        assert failed.status == AlertStatus.ANALYZING
        assert failed.error is True
        assert "analysis crashed" in failed.error_message
        assert succeeded.status == AlertStatus.READY

    def test_pause_and_resume(self):
        monitor, source = self._monitor([detection(self.zone.zone_id, 40.41, -3.71)])

        async def run():
            monitor.pause()
            paused = await monitor.run_once()
            monitor.resume()
            resumed = await monitor.run_once()
            await monitor.drain()
            return paused, resumed

        paused, resumed = asyncio.run(run())

        assert paused == []
        assert len(resumed) == 1
        assert source.calls == 1

    def test_no_zones_no_poll(self):
        monitor, source = self._monitor([])
        monitor.remove_zone(self.zone.zone_id)

        assert asyncio.run(monitor.run_once()) == []
        assert source.calls == 0

    def test_poll_error_does_not_stop_polling(self):
        source = FlakyDetectionSource([detection(self.zone.zone_id, 40.41, -3.71)])
        monitor = ZoneMonitor(source, FakePipeline(), self.alerts, zones=[self.zone])

        async def run():
            task = asyncio.create_task(monitor.run())
            await asyncio.sleep(0.05)
            alive = not task.done()
            monitor.stop()
            await asyncio.wait_for(task, 1.0)
            return alive

        assert asyncio.run(run()) is True
        assert source.calls >= 2
        assert len(self.alerts.list_alerts(AlertStatus.READY)) == 1
        assert not monitor.running

    def test_stop_before_run_returns_at_once(self):
        monitor, source = self._monitor([detection(self.zone.zone_id, 40.41, -3.71)])
        monitor.stop()

        asyncio.run(asyncio.wait_for(monitor.run(), 1.0))

        assert source.calls == 0
        assert not monitor.running

    def test_run_until_stopped(self):
        monitor, source = self._monitor([detection(self.zone.zone_id, 40.41, -3.71)])

        async def run():
            task = asyncio.create_task(monitor.run())
            await asyncio.sleep(0.05)
            monitor.stop()
            await asyncio.wait_for(task, 1.0)

        asyncio.run(run())

        assert source.calls >= 2
        assert len(self.alerts.list_alerts(AlertStatus.READY)) == 1


class TestSimulatedDetectionSource:

    def _zones(self):
        return [
            MonitoringZone("zone_critical", "Critical", ZONE_POLYGON, priority="critical"),
            MonitoringZone("zone_low", "Low", ZONE_POLYGON, priority="low"),
        ]

    def test_deterministic(self):
        zones = self._zones()
        first = SimulatedDetectionSource(SimulationSource(1))
        second = SimulatedDetectionSource(SimulationSource(1))

        for _ in range(5):
            a = asyncio.run(first.detect(zones))
            b = asyncio.run(second.detect(zones))
            assert [d.key for d in a] == [d.key for d in b]

    def test_detections_inside_zone(self):
        zones = self._zones()
        source = SimulatedDetectionSource(SimulationSource(3))
        bbox = zones[0].bbox

        for _ in range(20):
            for d in asyncio.run(source.detect(zones)):
                assert bbox.south <= d.latitude <= bbox.north
                assert bbox.west <= d.longitude <= bbox.east
                assert 0.6 <= d.confidence <= 0.99
                assert d.data_source == "enhanced_simulation"

    def test_priority_drives_frequency(self):
        zones = self._zones()
        source = SimulatedDetectionSource(SimulationSource(5))
        polls_with_fire = {"zone_critical": 0, "zone_low": 0}

        for _ in range(200):
            for zone_id in {d.zone_id for d in asyncio.run(source.detect(zones))}:
                polls_with_fire[zone_id] += 1

        assert polls_with_fire["zone_critical"] > polls_with_fire["zone_low"]
