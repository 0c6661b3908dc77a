"""
Tests for resource allocation
"""
import pytest

import sys
sys.path.insert(0, '.')

from emberline.ingestion.resource_catalog import (
    Aircraft,
    FireStation,
    ResourceCatalog,
    default_resource_catalog,
    load_resource_catalog,
)
from emberline.prediction.resource_allocator import (
    aircraft_eta,
    allocate_resources,
    area_band,
    station_response_time,
)


class TestAreaBands:

    @pytest.mark.parametrize("area,expected", [
        (0, "small"),
        (499.9, "small"),
        (500, "medium"),
        (2499, "medium"),
        (2500, "large"),
        (9999, "large"),
        (10000, "extreme"),
        (1e7, "extreme"),
    ])
    def test_thresholds(self, area, expected):
        assert area_band(area) == expected

    def test_response_times(self):
        assert station_response_time(0) == pytest.approx(3.0)
        assert station_response_time(60) == pytest.approx(63.0)
        assert aircraft_eta("helicopter", 0) < aircraft_eta("helicopter", 50)


class TestAllocateResources:
    """Test suite for allocate_resources against the demo catalog."""

    def setup_method(self):
        self.catalog = default_resource_catalog(40.4168, -3.7038)

    def test_small_fire_has_no_shortfall(self, slow_spread):
        allocation = allocate_resources(slow_spread, self.catalog)

        assert allocation.area_band == "small"
        assert allocation.recommended_deployment.as_counts() == {
            "ground_crews": 2, "aircraft": 0, "water_tenders": 1, "command_units": 1,
        }
        assert not allocation.has_shortfall
        assert all(v == 0 for v in allocation.shortfall.values())

    def test_extreme_fire_reports_shortfall(self, fast_spread):
        allocation = allocate_resources(fast_spread, self.catalog)

        assert allocation.area_band == "extreme"
        assert allocation.available == {
            "ground_crews": 8, "aircraft": 3, "water_tenders": 5, "command_units": 2,
        }
        assert allocation.shortfall == {
            "ground_crews": 8, "aircraft": 2, "water_tenders": 3, "command_units": 1,
        }
        assert allocation.has_shortfall
        assert any("mutual aid" in w for w in allocation.warnings)

    def test_shortfall_matches_recommendation(self, fast_spread, slow_spread):
        for spread in (fast_spread, slow_spread):
            allocation = allocate_resources(spread, self.catalog)
            needed = allocation.recommended_deployment.as_counts()
            for unit, missing in allocation.shortfall.items():
                assert missing == max(0, needed[unit] - allocation.available[unit])

    def test_sorted_by_response(self, fast_spread):
        allocation = allocate_resources(fast_spread, self.catalog, max_stations=10)
        times = [s.response_time_minutes for s in allocation.fire_stations]
        etas = [a.eta_minutes for a in allocation.aircraft]
        distances = [w.distance_km for w in allocation.water_sources]

        assert times == sorted(times)
        assert etas == sorted(etas)
        assert distances == sorted(distances)
        assert len(allocation.fire_stations) == 6

    def test_top_n_limits(self, fast_spread):
        allocation = allocate_resources(
            fast_spread, self.catalog, max_stations=2, max_aircraft=1, max_water_sources=1,
        )

        assert len(allocation.fire_stations) == 2
        assert len(allocation.aircraft) == 1
        assert len(allocation.water_sources) == 1
        # Shortfall still counts the whole catalog
        assert allocation.available["ground_crews"] == 8

    def test_out_of_range_aircraft_excluded(self, slow_spread):
        catalog = ResourceCatalog(
            fire_stations=[FireStation("S1", "Only", 40.42, -3.70, 10, 2, 1, 1)],
            aircraft=[
                Aircraft("A1", "drone", 100, 5.0, 41.5, -3.7),
                Aircraft("A2", "helicopter", 2000, 200.0, 40.5, -3.7),
            ],
        )
        allocation = allocate_resources(slow_spread, catalog)

        assert [a.aircraft_id for a in allocation.aircraft] == ["A2"]
        assert allocation.available["aircraft"] == 1
        assert any("out of range" in w for w in allocation.warnings)
        assert any("tender shuttles" in w for w in allocation.warnings)

    def test_to_dict(self, fast_spread):
        data = allocate_resources(fast_spread, self.catalog).to_dict()

        assert data["has_shortfall"] is True
        assert data["recommended_deployment"]["ground_crews"] == 16


class TestResourceCatalog:

    def test_default_catalog_is_deterministic(self):
        first = default_resource_catalog(40.0, -3.0)
        second = default_resource_catalog(40.0, -3.0)

        assert first.to_dict() == second.to_dict()
        assert len(first.fire_stations) == 6
        assert len(first.aircraft) == 5

    def test_load_round_trip(self, tmp_path):
        import json

        catalog = default_resource_catalog(40.0, -3.0)
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(catalog.to_dict()))

        loaded = load_resource_catalog(path)

        assert loaded == catalog
