"""
Tests for the fire risk index
"""
import pytest

import sys
sys.path.insert(0, '.')

from emberline.ingestion.weather_client import WeatherSnapshot, default_weather_snapshot
from emberline.core.constants import intensity_level, risk_band
from emberline.prediction.risk_index import compute_fire_risk


class TestRiskBands:
    """Band thresholds shared by risk, perimeter and tactics."""

    def test_band_boundaries(self):
        assert risk_band(80) == "extreme"
        assert risk_band(79.99) == "high"
        assert risk_band(60) == "high"
        assert risk_band(59.99) == "medium"
        assert risk_band(40) == "medium"
        assert risk_band(39.99) == "low"
        assert risk_band(0) == "low"

    def test_intensity_labels(self):
        assert intensity_level(10) == "low"
        assert intensity_level(50) == "moderate"
        assert intensity_level(70) == "high"
        assert intensity_level(95) == "extreme"


class TestComputeFireRisk:
    """Test suite for compute_fire_risk."""

    def test_hot_dry_windy_is_extreme(self, extreme_snapshot):
        """38 C, 15% RH, 30 km/h from 225 degrees."""
        result = compute_fire_risk(extreme_snapshot)

        assert result.risk_score >= 80
        assert result.risk_level == "extreme"
        assert any("wind" in r.lower() for r in result.recommendations)

    def test_factor_caps(self, extreme_snapshot):
        result = compute_fire_risk(extreme_snapshot)

        assert result.factors.temperature == 40
        assert result.factors.humidity == 30
        assert result.factors.wind_speed == 30
        assert result.risk_score == 100

    def test_factor_formulas(self):
        weather = WeatherSnapshot(
            temperature_celsius=25, humidity_percent=40,
            wind_speed_kmh=10, wind_direction_degrees=0,
        )
        result = compute_fire_risk(weather)

        assert result.factors.temperature == pytest.approx(20)
        assert result.factors.humidity == pytest.approx(15)
        assert result.factors.wind_speed == pytest.approx(15)
        assert result.risk_score == pytest.approx(50)
        assert result.risk_level == "medium"

    def test_cool_humid_calm_is_low(self):
        """15 C, 70% RH, 5 km/h from the north."""
        weather = WeatherSnapshot.from_dict({
            "temperature": 15, "humidity": 70, "windSpeed": 5, "windDirection": 0,
        })
        result = compute_fire_risk(weather)

        assert result.factors.temperature == 0
        assert result.factors.humidity == 0
        assert result.factors.wind_speed == pytest.approx(7.5)
        assert result.risk_score < 40
        assert result.risk_level == "low"
        assert result.confidence == pytest.approx(0.9)

    def test_idempotent(self, extreme_snapshot, mild_snapshot):
        for snapshot in (extreme_snapshot, mild_snapshot):
            first = compute_fire_risk(snapshot)
            second = compute_fire_risk(snapshot)
            assert first.risk_score == second.risk_score
            assert first.recommendations == second.recommendations

    @pytest.mark.parametrize("temperature,humidity,wind", [
        (-40, 100, 0),
        (60, 0, 200),
        (15, 60, 0),
        (100, -20, -10),
        (-273, 500, 1000),
    ])
    def test_score_bounded(self, temperature, humidity, wind):
        weather = WeatherSnapshot(
            temperature_celsius=temperature, humidity_percent=humidity,
            wind_speed_kmh=wind, wind_direction_degrees=0,
        )
        result = compute_fire_risk(weather)

        assert 0 <= result.risk_score <= 100
        assert 0.1 <= result.confidence <= 1.0

    def test_humidity_out_of_range_is_clamped(self):
        weather = WeatherSnapshot(
            temperature_celsius=20, humidity_percent=150,
            wind_speed_kmh=0, wind_direction_degrees=0,
        )
        result = compute_fire_risk(weather)

        assert result.humidity_percent == 100
        assert result.factors.humidity == 0

    def test_missing_fields_are_defaulted(self):
        """Defaults are 25 C, 50% RH, 10 km/h from 180 degrees."""
        result = compute_fire_risk(WeatherSnapshot())

        assert set(result.defaulted_fields) == {
            "temperature_celsius", "humidity_percent",
            "wind_speed_kmh", "wind_direction_degrees",
        }
        assert result.risk_score == pytest.approx(42.5)
        assert result.wind_direction_degrees == 180
        assert result.confidence == pytest.approx(0.3)

    def test_missing_field_lowers_confidence(self, mild_snapshot):
        complete = compute_fire_risk(mild_snapshot)
        partial = compute_fire_risk(WeatherSnapshot(
            temperature_celsius=18, wind_speed_kmh=5, wind_direction_degrees=90,
        ))

        assert complete.confidence == pytest.approx(0.9)
        assert partial.confidence == pytest.approx(0.7)
        assert partial.defaulted_fields == ["humidity_percent"]

    def test_malformed_values_are_treated_as_missing(self):
        weather = WeatherSnapshot.from_dict({
            "temperature": "hot",
            "humidity": None,
            "windSpeed": float("nan"),
            "windDirection": 90,
        })
        result = compute_fire_risk(weather)

        assert "temperature_celsius" in result.defaulted_fields
        assert "humidity_percent" in result.defaulted_fields
        assert "wind_speed_kmh" in result.defaulted_fields
        assert "wind_direction_degrees" not in result.defaulted_fields

    def test_simulated_weather_is_tagged_and_penalized(self):
        result = compute_fire_risk(default_weather_snapshot(40.0, -3.0))

        assert result.data_source == "enhanced_simulation"
        assert result.defaulted_fields == []
        assert result.confidence == pytest.approx(0.75)

    def test_dominant_factor_advisory(self):
        weather = WeatherSnapshot(
            temperature_celsius=20, humidity_percent=10,
            wind_speed_kmh=2, wind_direction_degrees=0,
        )
        result = compute_fire_risk(weather)

        assert result.factors.dominant == "humidity"
        assert any("Dry air" in r for r in result.recommendations)
        assert any("spot fires" in r for r in result.recommendations)

    def test_recommendations_follow_band(self, mild_snapshot):
        result = compute_fire_risk(mild_snapshot)

        assert result.risk_level == "low"
        assert result.recommendations[0] == "Maintain routine monitoring"

    def test_to_dict(self, extreme_snapshot):
        data = compute_fire_risk(extreme_snapshot).to_dict()

        assert data["risk_level"] == "extreme"
        assert data["data_source"] == "real"
        assert data["spread_prediction"] is None
        assert set(data["factors"]) == {"temperature", "humidity", "wind_speed"}
