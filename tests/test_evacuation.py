"""
Tests for evacuation zones and routing
"""
import pytest

import sys
sys.path.insert(0, '.')

from emberline.core.geo_utils import angular_difference
from emberline.core.simulation import SimulationSource
from emberline.prediction.evacuation_router import (
    estimate_evacuation_time,
    identify_evacuation_zones,
)


class TestEvacuationTime:
    """Test suite for evacuation time estimates."""

    def test_basic_estimate(self):
        """Test estimate with two open routes."""
        result = estimate_evacuation_time(population=3000, num_routes=2)

        assert result["vehicles_needed"] == 1200
        assert result["routes_available"] == 2
        assert result["evacuation_time_hours"] == pytest.approx(1.0)
        assert result["recommended_start"] == "within 1 hour"

    def test_more_routes_is_faster(self):
        one = estimate_evacuation_time(population=10000, num_routes=1)
        four = estimate_evacuation_time(population=10000, num_routes=4)

        assert four["evacuation_time_minutes"] < one["evacuation_time_minutes"]

    def test_no_routes_still_estimates(self):
        """Test that a fully blocked zone gets a finite, urgent estimate."""
        result = estimate_evacuation_time(population=1000, num_routes=0)

        assert result["routes_available"] == 0
        assert result["evacuation_time_minutes"] > 120
        assert result["recommended_start"] == "immediate"


class TestEvacuationZones:
    """Test suite for identify_evacuation_zones."""

    def test_four_rings_in_order(self, fast_spread, simulation):
        zones = identify_evacuation_zones(fast_spread, simulation.for_key("evacuation"))

        assert [z.priority for z in zones] == ["immediate", "high", "medium", "low"]
        assert [z.outer_radius_km for z in zones] == [2.0, 5.0, 10.0, 20.0]
        assert zones[0].inner_radius_km == 0.0
        for inner, outer in zip(zones, zones[1:]):
            assert outer.inner_radius_km == inner.outer_radius_km

    def test_population_and_vulnerable(self, fast_spread, simulation):
        zones = identify_evacuation_zones(fast_spread, simulation)

        for zone in zones:
            assert zone.population > 0
            assert 0 <= zone.vulnerable_population <= zone.population
            assert len(zone.shelters) == 2

    def test_routes_into_fire_are_blocked(self, fast_spread, simulation):
        zones = identify_evacuation_zones(fast_spread, simulation)

        for zone in zones:
            assert len(zone.routes) == 4
            for route in zone.routes:
                angle = angular_difference(route.bearing_degrees, fast_spread.direction_degrees)
                if angle < 30:
                    assert route.status == "blocked"
                    assert route.warning
                elif angle >= 90:
                    assert route.status == "clear"

    def test_primary_route_leads_away(self, fast_spread, simulation):
        zones = identify_evacuation_zones(fast_spread, simulation)
        safe = (fast_spread.direction_degrees + 180) % 360

        assert zones[0].routes[0].bearing_degrees == pytest.approx(safe)
        assert zones[0].routes[0].status == "clear"

    def test_same_seed_same_zones(self, fast_spread):
        first = identify_evacuation_zones(fast_spread, SimulationSource(7))
        second = identify_evacuation_zones(fast_spread, SimulationSource(7))

        assert [z.to_dict() for z in first] == [z.to_dict() for z in second]
