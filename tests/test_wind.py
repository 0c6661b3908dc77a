"""
Tests for wind analysis
"""
from datetime import datetime, timedelta, timezone

import pytest

import sys
sys.path.insert(0, '.')

from emberline.core.geo_utils import angular_difference
from emberline.core.simulation import SimulationSource
from emberline.ingestion.weather_client import WeatherSnapshot
from emberline.prediction.wind_analysis import (
    WindForecastPoint,
    WindState,
    analyze_wind,
    atmospheric_stability,
    calculate_attack_angles,
    calculate_spread_vectors,
    current_wind_state,
    identify_critical_changes,
    local_hour,
    vector_spread_rate,
)


def make_state(speed=10.0, direction=90.0, stability="neutral"):
    return WindState(
        speed_kmh=speed,
        direction_degrees=direction,
        gusts_kmh=speed * 1.3,
        stability=stability,
        turbulence=0.2,
        shear=speed * 0.1,
    )


class TestWindHelpers:

    def test_stability(self):
        assert atmospheric_stability(30, 14) == "unstable"
        assert atmospheric_stability(20, 14) == "neutral"
        assert atmospheric_stability(30, 23) == "stable"
        assert atmospheric_stability(10, 3) == "stable"

    def test_stability_factor_order(self):
        stable = make_state(stability="stable").stability_factor
        unstable = make_state(stability="unstable").stability_factor

        assert 0 < unstable < stable <= 1

    def test_vector_rates(self):
        assert vector_spread_rate(20, "head") == pytest.approx(8.0)
        assert vector_spread_rate(20, "backing") == pytest.approx(0.9)
        assert vector_spread_rate(20, "left_flank") == pytest.approx(3.0)
        assert vector_spread_rate(0, "head") > vector_spread_rate(0, "backing")

    def test_spread_vectors(self):
        vectors = calculate_spread_vectors(make_state(speed=25, direction=350))
        by_type = {v.spread_type: v for v in vectors}

        assert by_type["head"].direction_degrees == pytest.approx(350)
        assert by_type["right_flank"].direction_degrees == pytest.approx(80)
        assert by_type["backing"].direction_degrees == pytest.approx(170)
        assert by_type["head"].intensity == "high"

    def test_attack_angles(self):
        angles = calculate_attack_angles(make_state(direction=270))
        best = max(angles, key=lambda a: a.effectiveness)

        assert len(angles) == 4
        assert best.strategy == "Rear attack"
        assert best.angle_degrees == pytest.approx(90)
        assert min(angles, key=lambda a: a.effectiveness).risk == "extreme"


class TestCurrentWind:

    def test_defaults_for_missing_readings(self, fixed_now):
        state = current_wind_state(WeatherSnapshot(), now=fixed_now)

        assert state.speed_kmh == 10
        assert state.direction_degrees == 180
        assert state.gusts_kmh == pytest.approx(13)

    def test_reported_gusts_are_kept(self, fixed_now):
        weather = WeatherSnapshot(wind_speed_kmh=20, wind_direction_degrees=-45, wind_gusts_kmh=41)
        state = current_wind_state(weather, now=fixed_now)

        assert state.gusts_kmh == 41
        assert state.direction_degrees == pytest.approx(315)

    def test_local_hour(self):
        utc = datetime(2026, 7, 15, 4, 0, tzinfo=timezone.utc)
        local = datetime(2026, 7, 15, 12, 0, tzinfo=timezone(timedelta(hours=8)))

        assert local_hour(utc, 115.86) == 12
        assert local_hour(utc, -3.70) == 4
        assert local_hour(utc) == 4
        assert local_hour(local, 115.86) == 12
        assert local_hour(datetime(2026, 7, 15, 12, 0), -120.0) == 12

    def test_stability_follows_local_afternoon(self):
        """04:00 UTC is midday in Perth."""
        moment = datetime(2026, 1, 15, 4, 0, tzinfo=timezone.utc)
        perth = WeatherSnapshot(
            temperature_celsius=32, wind_speed_kmh=20, wind_direction_degrees=90,
            latitude=-31.95, longitude=115.86, timestamp=moment,
        )
        unknown = WeatherSnapshot(
            temperature_celsius=32, wind_speed_kmh=20, wind_direction_degrees=90,
            timestamp=moment,
        )

        assert current_wind_state(perth).stability == "unstable"
        assert current_wind_state(unknown).stability == "stable"


class TestCriticalChanges:

    def _point(self, start, hour, speed, direction, stability="neutral"):
        return WindForecastPoint(
            timestamp=start + timedelta(hours=hour),
            wind=make_state(speed, direction, stability),
            confidence=0.9,
        )

    def test_steady_wind_has_no_changes(self, fixed_now):
        forecast = [self._point(fixed_now, i, 10, 90) for i in range(5)]

        assert identify_critical_changes(forecast) == []

    def test_direction_shift_and_speed_jump(self, fixed_now):
        forecast = [
            self._point(fixed_now, 0, 10, 90),
            self._point(fixed_now, 1, 10, 200),
            self._point(fixed_now, 2, 35, 200),
        ]
        changes = identify_critical_changes(forecast)

        assert len(changes) == 2
        assert all(c.impact == "critical" for c in changes)

    def test_instability_onset(self, fixed_now):
        forecast = [
            self._point(fixed_now, 0, 10, 90, "stable"),
            self._point(fixed_now, 1, 10, 90, "unstable"),
        ]
        changes = identify_critical_changes(forecast)

        assert len(changes) == 1
        assert changes[0].impact == "high"


class TestAnalyzeWind:
    """Test suite for analyze_wind."""

    def test_full_analysis(self, extreme_snapshot, simulation):
        analysis = analyze_wind(extreme_snapshot, simulation)

        assert len(analysis.forecast) == 24
        assert len(analysis.spread_vectors) == 4
        assert len(analysis.attack_angles) == 4
        assert analysis.data_source == "enhanced_simulation"
        assert analysis.forecast[0].timestamp == extreme_snapshot.timestamp

    def test_forecast_stays_near_current(self, extreme_snapshot, simulation):
        analysis = analyze_wind(extreme_snapshot, simulation)

        for point in analysis.forecast:
            assert point.wind.speed_kmh >= 0
            assert 0 <= point.wind.direction_degrees < 360
            assert angular_difference(point.wind.direction_degrees, 225) <= 60
            assert 0 < point.confidence <= 1

    def test_same_seed_same_forecast(self, extreme_snapshot):
        first = analyze_wind(extreme_snapshot, SimulationSource(3))
        second = analyze_wind(extreme_snapshot, SimulationSource(3))

        assert first.to_dict() == second.to_dict()

    def test_now_used_without_timestamp(self, fixed_now, simulation):
        weather = WeatherSnapshot(temperature_celsius=30, wind_speed_kmh=15, wind_direction_degrees=0)
        analysis = analyze_wind(weather, simulation, now=fixed_now)

        assert analysis.forecast[0].timestamp == fixed_now
        assert analysis.forecast[-1].timestamp == datetime(2026, 7, 16, 13, 0, tzinfo=timezone.utc)
