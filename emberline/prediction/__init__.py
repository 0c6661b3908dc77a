"""
Emberline - Prediction Module
Fire risk scoring, spread prediction, resource allocation, evacuation
zones and wind analysis.
"""

from emberline.core.constants import intensity_level, risk_band
from emberline.prediction.risk_index import (
    FireRiskPrediction,
    RiskFactors,
    compute_fire_risk,
)
from emberline.prediction.spread_calculator import (
    FireSpreadPrediction,
    PerimeterPoint,
    WindConditions,
    predict_spread,
)
from emberline.prediction.resource_allocator import (
    DeploymentRecommendation,
    ResourceAllocation,
    allocate_resources,
    area_band,
)
from emberline.prediction.evacuation_router import (
    EvacuationRoute,
    EvacuationZone,
    Shelter,
    estimate_evacuation_time,
    identify_evacuation_zones,
)
from emberline.prediction.wind_analysis import (
    WindAnalysis,
    WindState,
    analyze_wind,
    calculate_attack_angles,
)

__all__ = [
    # Risk Index
    "FireRiskPrediction",
    "RiskFactors",
    "compute_fire_risk",
    "intensity_level",
    "risk_band",
    # Spread
    "FireSpreadPrediction",
    "PerimeterPoint",
    "WindConditions",
    "predict_spread",
    # Resources
    "DeploymentRecommendation",
    "ResourceAllocation",
    "allocate_resources",
    "area_band",
    # Evacuation
    "EvacuationRoute",
    "EvacuationZone",
    "Shelter",
    "estimate_evacuation_time",
    "identify_evacuation_zones",
    # Wind
    "WindAnalysis",
    "WindState",
    "analyze_wind",
    "calculate_attack_angles",
]
