"""
Tests for tactical planning
"""
import pytest

import sys
sys.path.insert(0, '.')

from emberline.analysis import generate_risk_assessment, regional_biodiversity, simulated_infrastructure
from emberline.core.geo_utils import angular_difference, calculate_bearing, haversine_distance
from emberline.core.simulation import SimulationSource
from emberline.prediction.wind_analysis import WindState, analyze_wind
from emberline.tactics import (
    composite_priority,
    design_firebreaks,
    generate_tactical_plans,
    identify_water_sources,
)
from emberline.tactics.planner import (
    STRATEGY_TEMPLATES,
    duration_scale,
    personnel_risk_level,
    spread_factor,
)


def calm_wind(speed=10.0, stability="neutral"):
    return WindState(
        speed_kmh=speed,
        direction_degrees=90,
        gusts_kmh=speed * 1.3,
        stability=stability,
        turbulence=0.1,
        shear=speed * 0.1,
    )


class TestScoringHelpers:

    def test_spread_factor(self):
        assert spread_factor(0, 1.0) == pytest.approx(1.0)
        assert spread_factor(0.5, 1.0) == pytest.approx(0.5)
        assert spread_factor(5.0, 1.0) == pytest.approx(0.5)
        assert spread_factor(0.5, 0.2) == pytest.approx(0.9)

    def test_duration_scale(self):
        assert duration_scale(0.3) == pytest.approx(1.0)
        assert duration_scale(0.0) == pytest.approx(0.5)
        assert duration_scale(3.0) == pytest.approx(2.0)

    def test_composite_priority(self):
        assert composite_priority(0.8, 0, 0) == pytest.approx(0.8)
        assert composite_priority(0.8, 100, 1.0) == pytest.approx(0.4)
        assert composite_priority(0.8, 50, 0.2) > composite_priority(0.8, 80, 0.2)

    def test_personnel_risk_level(self):
        assert personnel_risk_level(0.10, 0) == "low"
        assert personnel_risk_level(0.35, 100) == "extreme"


class TestGenerateTacticalPlans:
    """Test suite for generate_tactical_plans."""

    def setup_method(self):
        self.simulation = SimulationSource(42)

    def test_plans_ranked_by_composite(self, madrid, fast_spread):
        plans = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(), fast_spread, None, self.simulation,
        )
        scores = [p.composite_score for p in plans]

        assert len(plans) == len(STRATEGY_TEMPLATES)
        assert scores == sorted(scores, reverse=True)
        assert [p.priority for p in plans] == list(range(1, len(plans) + 1))
        assert {p.strategy for p in plans} == set(STRATEGY_TEMPLATES)

    def test_probabilities_bounded(self, madrid, fast_spread, slow_spread):
        for spread in (fast_spread, slow_spread):
            for wind in (calm_wind(), calm_wind(60, "unstable")):
                plans = generate_tactical_plans(
                    madrid[0], madrid[1], wind, spread, None, self.simulation,
                )
                for plan in plans:
                    assert 0.05 <= plan.success_probability <= 0.95
                    assert 0 <= plan.casualties.civilian_risk <= 1
                    assert 0 <= plan.casualties.firefighter_risk <= 1
                    assert plan.phases
                    assert plan.critical_factors

    def test_high_wind_grounds_aircraft(self, madrid, slow_spread):
        calm = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(20), slow_spread, None, self.simulation,
        )
        gale = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(45), slow_spread, None, self.simulation,
        )
        calm_direct = next(p for p in calm if p.strategy == "direct_attack")
        gale_direct = next(p for p in gale if p.strategy == "direct_attack")

        assert "Air tankers" in calm_direct.equipment_required
        assert "Air tankers" not in gale_direct.equipment_required
        assert any("aerial" in f for f in gale_direct.critical_factors)

    def test_fast_fire_penalizes_direct_attack(self, madrid, fast_spread, slow_spread):
        def direct(spread):
            plans = generate_tactical_plans(
                madrid[0], madrid[1], calm_wind(), spread, None, self.simulation,
            )
            return next(p for p in plans if p.strategy == "direct_attack")

        assert direct(fast_spread).success_probability < direct(slow_spread).success_probability
        assert direct(slow_spread).phases[0].duration_minutes == 22

    def test_risk_assessment_raises_civilian_risk(self, madrid, fixed_now, slow_spread):
        assessment = generate_risk_assessment(
            regional_biodiversity(*madrid), simulated_infrastructure(*madrid), now=fixed_now,
        )
        without = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(), slow_spread, None, self.simulation,
        )
        with_risk = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(), slow_spread, assessment, self.simulation,
        )
        by_strategy = {p.strategy: p for p in without}

        for plan in with_risk:
            assert plan.casualties.civilian_risk > by_strategy[plan.strategy].casualties.civilian_risk
        assert any("occupied buildings" in f for f in with_risk[0].critical_factors)

    def test_accepts_full_wind_analysis(self, madrid, extreme_snapshot, fast_spread):
        analysis = analyze_wind(extreme_snapshot, self.simulation)
        plans = generate_tactical_plans(
            madrid[0], madrid[1], analysis, fast_spread, None, self.simulation,
        )

        assert plans[0].priority == 1

    def test_deterministic(self, madrid, fast_spread):
        first = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(), fast_spread, None, SimulationSource(9),
        )
        second = generate_tactical_plans(
            madrid[0], madrid[1], calm_wind(), fast_spread, None, SimulationSource(9),
        )

        assert [p.to_dict() for p in first] == [p.to_dict() for p in second]


class TestWaterSources:

    def test_sorted_and_within_radius(self, madrid, simulation):
        sources = identify_water_sources(madrid[0], madrid[1], 10, simulation)
        distances = [s.distance_km for s in sources]

        assert len(sources) == 4
        assert distances == sorted(distances)
        for source in sources:
            assert 0 <= source.reliability <= 1
            measured = haversine_distance(madrid[0], madrid[1], source.latitude, source.longitude)
            assert measured == pytest.approx(source.distance_km, rel=1e-3)

    def test_small_radius_keeps_mobile_tank(self, madrid, simulation):
        sources = identify_water_sources(madrid[0], madrid[1], 1, simulation)

        assert [s.source_type for s in sources] == ["mobile"]


class TestFirebreaks:

    def test_perpendicular_to_spread(self, madrid, slow_spread):
        firebreaks = design_firebreaks(madrid[0], madrid[1], 0, slow_spread)

        assert [f.firebreak_type for f in firebreaks] == [
            "natural", "constructed", "burnout", "backfire",
        ]
        for firebreak in firebreaks:
            assert firebreak.orientation_degrees == pytest.approx(180)
            assert 0 <= firebreak.effectiveness <= 1
            (a_lat, a_lon), (b_lat, b_lon) = firebreak.line
            bearing = calculate_bearing(b_lat, b_lon, a_lat, a_lon)
            assert angular_difference(bearing, 180) < 1
            assert haversine_distance(a_lat, a_lon, b_lat, b_lon) == pytest.approx(
                firebreak.length_m / 1000, rel=1e-3
            )

    def test_wind_used_without_spread(self, madrid):
        firebreaks = design_firebreaks(madrid[0], madrid[1], 350)

        assert firebreaks[0].orientation_degrees == pytest.approx(80)
        assert firebreaks[0].firebreak_id == "natural_001"

    def test_fast_fire_pushes_lines_out(self, madrid, fast_spread, slow_spread):
        def natural_centre_distance(spread):
            line = design_firebreaks(madrid[0], madrid[1], 0, spread)[0].line
            lat = (line[0][0] + line[1][0]) / 2
            lon = (line[0][1] + line[1][1]) / 2
            return haversine_distance(madrid[0], madrid[1], lat, lon)

        assert natural_centre_distance(fast_spread) > natural_centre_distance(slow_spread)
