"""
Emberline - Fire Risk Index
Scores fire danger (0-100) from a weather snapshot.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from emberline.core.constants import (
    BASE_RISK_CONFIDENCE,
    DEFAULT_WEATHER,
    MIN_RISK_CONFIDENCE,
    MISSING_FIELD_CONFIDENCE_PENALTY,
    RISK_FACTOR_CAPS,
    SIMULATED_WEATHER_CONFIDENCE_PENALTY,
    risk_band,
)
from emberline.core.simulation import DATA_SOURCE_SIMULATED
from emberline.ingestion.weather_client import WeatherSnapshot

if TYPE_CHECKING:
    from emberline.prediction.evacuation_router import EvacuationZone
    from emberline.prediction.resource_allocator import ResourceAllocation
    from emberline.prediction.spread_calculator import FireSpreadPrediction


RISK_RECOMMENDATIONS: Dict[str, List[str]] = {
    "low": [
        "Maintain routine monitoring",
        "Continue fire prevention outreach",
    ],
    "medium": [
        "Increase lookout and patrol coverage",
        "Check readiness of engines and water supplies",
        "Discourage outdoor burning",
    ],
    "high": [
        "Place initial attack crews on standby",
        "Prohibit outdoor burning and spark-producing work",
        "Alert communities in the wildland-urban interface",
    ],
    "extreme": [
        "Activate the full emergency response protocol",
        "Pre-position crews and aircraft near high-value assets",
        "Prepare evacuation of at-risk communities",
        "Prohibit all outdoor burning and machinery use in vegetation",
    ],
}

DOMINANT_FACTOR_ADVISORIES: Dict[str, str] = {
    "temperature": "Heat is the main driver: rotate crews to limit heat stress",
    "humidity": "Dry air is the main driver: expect fine fuels to ignite readily",
    "wind_speed": "Wind is the main driver: anticipate rapid wind-driven spread",
}


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _calculate_temperature_score(temp_c: float) -> float:
    """Rises 2 points per degree above 15 C."""
    return _clamp((temp_c - 15.0) * 2.0, 0.0, RISK_FACTOR_CAPS["temperature"])


def _calculate_humidity_score(humidity: float) -> float:
    """Rises 0.75 points per percent below 60%."""
    return _clamp((60.0 - humidity) * 0.75, 0.0, RISK_FACTOR_CAPS["humidity"])


def _calculate_wind_score(wind_kmh: float) -> float:
    """Rises 1.5 points per km/h."""
    return _clamp(wind_kmh * 1.5, 0.0, RISK_FACTOR_CAPS["wind_speed"])


@dataclass(frozen=True)
class RiskFactors:
    """Bounded sub-scores that make up the risk score."""
    temperature: float
    humidity: float
    wind_speed: float

    @property
    def total(self) -> float:
        return self.temperature + self.humidity + self.wind_speed

    @property
    def dominant(self) -> str:
        """Factor closest to its cap; ties resolve in declaration order."""
        ratios = {
            "temperature": self.temperature / RISK_FACTOR_CAPS["temperature"],
            "humidity": self.humidity / RISK_FACTOR_CAPS["humidity"],
            "wind_speed": self.wind_speed / RISK_FACTOR_CAPS["wind_speed"],
        }
        return max(ratios, key=lambda name: ratios[name])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperature": round(self.temperature, 2),
            "humidity": round(self.humidity, 2),
            "wind_speed": round(self.wind_speed, 2),
        }


@dataclass(frozen=True)
class FireRiskPrediction:
    """Result of scoring one weather snapshot."""
    risk_score: float  # 0-100
    risk_level: str    # low, medium, high, extreme
    factors: RiskFactors
    confidence: float  # 0-1
    recommendations: List[str]
    temperature_celsius: float
    humidity_percent: float
    wind_speed_kmh: float
    wind_direction_degrees: float
    timestamp: Optional[datetime] = None
    data_source: str = "real"
    defaulted_fields: List[str] = field(default_factory=list)

    # Filled in by the pipeline once downstream stages have run
    spread_prediction: Optional["FireSpreadPrediction"] = None
    evacuation_zones: List["EvacuationZone"] = field(default_factory=list)
    resource_allocation: Optional["ResourceAllocation"] = None

    def with_downstream(
        self,
        spread_prediction: Optional["FireSpreadPrediction"] = None,
        evacuation_zones: Optional[List["EvacuationZone"]] = None,
        resource_allocation: Optional["ResourceAllocation"] = None,
    ) -> "FireRiskPrediction":
        """Copy of this prediction with downstream results attached."""
        return replace(
            self,
            spread_prediction=spread_prediction,
            evacuation_zones=list(evacuation_zones or []),
            resource_allocation=resource_allocation,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": round(self.risk_score, 2),
            "risk_level": self.risk_level,
            "factors": self.factors.to_dict(),
            "dominant_factor": self.factors.dominant,
            "confidence": round(self.confidence, 2),
            "recommendations": self.recommendations,
            "conditions": {
                "temperature_celsius": self.temperature_celsius,
                "humidity_percent": self.humidity_percent,
                "wind_speed_kmh": self.wind_speed_kmh,
                "wind_direction_degrees": self.wind_direction_degrees,
            },
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "data_source": self.data_source,
            "defaulted_fields": self.defaulted_fields,
            "spread_prediction": (
                self.spread_prediction.to_dict() if self.spread_prediction else None
            ),
            "evacuation_zones": [z.to_dict() for z in self.evacuation_zones],
            "resource_allocation": (
                self.resource_allocation.to_dict() if self.resource_allocation else None
            ),
        }


def compute_fire_risk(weather: WeatherSnapshot) -> FireRiskPrediction:
    """
    Score fire danger from current weather.

    Missing or malformed readings are replaced by DEFAULT_WEATHER and each
    substitution lowers the confidence. No randomness, no side effects.

    Args:
        weather: Weather snapshot (fields may be None)

    Returns:
        FireRiskPrediction with score, factors and recommendations
    """
    missing = weather.missing_fields
    values = {
        name: DEFAULT_WEATHER[name] if name in missing else getattr(weather, name)
        for name in DEFAULT_WEATHER
    }

    # Relative humidity outside 0-100 is physically meaningless
    humidity = _clamp(values["humidity_percent"], 0.0, 100.0)
    wind_speed = max(0.0, values["wind_speed_kmh"])

    factors = RiskFactors(
        temperature=_calculate_temperature_score(values["temperature_celsius"]),
        humidity=_calculate_humidity_score(humidity),
        wind_speed=_calculate_wind_score(wind_speed),
    )
    score = _clamp(factors.total, 0.0, 100.0)
    level = risk_band(score)

    confidence = BASE_RISK_CONFIDENCE - sum(
        MISSING_FIELD_CONFIDENCE_PENALTY[name] for name in missing
    )
    if weather.data_source == DATA_SOURCE_SIMULATED:
        confidence -= SIMULATED_WEATHER_CONFIDENCE_PENALTY
    confidence = _clamp(confidence, MIN_RISK_CONFIDENCE, 1.0)

    return FireRiskPrediction(
        risk_score=score,
        risk_level=level,
        factors=factors,
        confidence=confidence,
        recommendations=_get_recommendations(
            level, factors,
            values["temperature_celsius"], humidity, wind_speed,
        ),
        temperature_celsius=values["temperature_celsius"],
        humidity_percent=humidity,
        wind_speed_kmh=wind_speed,
        wind_direction_degrees=values["wind_direction_degrees"],
        timestamp=weather.timestamp,
        data_source=weather.data_source,
        defaulted_fields=missing,
    )


def _get_recommendations(
    level: str,
    factors: RiskFactors,
    temp_c: float,
    humidity: float,
    wind_kmh: float,
) -> List[str]:
    """Band advice first, then the dominant-factor advisory, then thresholds."""
    recommendations = list(RISK_RECOMMENDATIONS[level])

    if factors.total > 0:
        recommendations.append(DOMINANT_FACTOR_ADVISORIES[factors.dominant])

    if temp_c > 35:
        recommendations.append("Extreme heat: enforce hydration and shade breaks for crews")
    if humidity < 20:
        recommendations.append("Very low humidity: spot fires likely ahead of the main front")
    if wind_kmh > 25:
        recommendations.append("Strong winds: expect erratic spread and long-range spotting")
        recommendations.append("Strong winds: consider suspending aerial operations")

    return recommendations
