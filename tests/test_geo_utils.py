"""
Tests for geospatial utilities and the simulation source
"""
import pytest

import sys
sys.path.insert(0, '.')

from emberline.core.geo_utils import (
    BoundingBox,
    Point,
    angular_difference,
    bounding_box,
    calculate_bearing,
    calculate_centroid,
    calculate_zone_area_km2,
    degrees_to_cardinal,
    destination_point,
    haversine_distance,
    normalize_direction,
)
from emberline.core.simulation import SimulationSource


class TestGeoUtils:
    """Test suite for geo_utils."""

    def test_haversine_same_point(self):
        assert haversine_distance(40.0, -3.0, 40.0, -3.0) == 0

    def test_haversine_one_degree_latitude(self):
        assert haversine_distance(0, 0, 1, 0) == pytest.approx(111.19, rel=0.01)

    def test_destination_round_trip(self, madrid):
        lat, lon = destination_point(madrid[0], madrid[1], 25.0, 135)

        assert haversine_distance(madrid[0], madrid[1], lat, lon) == pytest.approx(25.0, rel=1e-4)
        assert calculate_bearing(madrid[0], madrid[1], lat, lon) == pytest.approx(135, abs=0.5)

    @pytest.mark.parametrize("degrees,expected", [
        (0, 0), (360, 0), (-90, 270), (725, 5), (-360, 0),
    ])
    def test_normalize_direction(self, degrees, expected):
        result = normalize_direction(degrees)

        assert 0 <= result < 360
        assert result == pytest.approx(expected, abs=1e-9)

    def test_angular_difference(self):
        assert angular_difference(350, 10) == pytest.approx(20)
        assert angular_difference(0, 180) == pytest.approx(180)
        assert angular_difference(90, 90) == 0

    def test_cardinal(self):
        assert degrees_to_cardinal(0) == "N"
        assert degrees_to_cardinal(225) == "SW"
        assert degrees_to_cardinal(359) == "N"
        assert degrees_to_cardinal(-90) == "W"

    def test_zone_area(self):
        """0.1 x 0.1 degree square at 111 km per degree."""
        square = [(40.0, -3.0), (40.0, -2.9), (40.1, -2.9), (40.1, -3.0)]

        assert calculate_zone_area_km2(square) == pytest.approx(123.21)
        assert calculate_zone_area_km2(square[:2]) == 0.0

    def test_zone_area_ignores_winding(self):
        square = [(40.0, -3.0), (40.0, -2.9), (40.1, -2.9), (40.1, -3.0)]

        assert calculate_zone_area_km2(list(reversed(square))) == pytest.approx(123.21)

    def test_centroid_and_bbox(self):
        points = [(40.0, -3.0), (40.2, -2.8)]

        assert calculate_centroid(points) == pytest.approx((40.1, -2.9))
        assert calculate_centroid([]) == (0.0, 0.0)
        box = bounding_box(points)
        assert box.contains(Point(40.1, -2.9))
        assert not box.contains(Point(41.0, -2.9))

    def test_bbox_around(self, madrid):
        box = BoundingBox.around(madrid[0], madrid[1], 10)

        assert box.south < madrid[0] < box.north
        assert box.west < madrid[1] < box.east
        assert box.center.latitude == pytest.approx(madrid[0], abs=1e-3)


class TestSimulationSource:
    """Test suite for the seeded simulation source."""

    def test_same_seed_same_sequence(self):
        first = SimulationSource(11)
        second = SimulationSource(11)

        assert [first.uniform() for _ in range(5)] == [second.uniform() for _ in range(5)]

    def test_different_seeds_differ(self):
        assert SimulationSource(1).uniform() != SimulationSource(2).uniform()

    def test_child_streams_depend_only_on_key(self):
        parent = SimulationSource(5)
        before = parent.for_key("zone", 1).uniform()
        parent.uniform()
        after = parent.for_key("zone", 1).uniform()

        assert before == after
        assert parent.for_key("zone", 1).uniform() != parent.for_key("zone", 2).uniform()

    def test_ranges(self, simulation):
        for _ in range(50):
            assert 3 <= simulation.randint(3, 5) <= 5
            assert 0.5 <= simulation.uniform(0.5, 0.6) <= 0.6
            assert simulation.choice(["a", "b"]) in ("a", "b")

    def test_chance_extremes(self, simulation):
        assert simulation.chance(1.0)
        assert not simulation.chance(0.0)
