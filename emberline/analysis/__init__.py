"""
Emberline - Analysis Module
Biodiversity, infrastructure and combined exposure risk.
"""

from emberline.analysis.inventory import (
    BiodiversityData,
    InfrastructureAssessment,
)
from emberline.analysis.regional_data import (
    regional_biodiversity,
    simulated_infrastructure,
)
from emberline.analysis.biodiversity import (
    BiodiversityAssessor,
    RiskAssessment,
    combine_risk,
    generate_risk_assessment,
)

__all__ = [
    "BiodiversityData",
    "InfrastructureAssessment",
    "regional_biodiversity",
    "simulated_infrastructure",
    "BiodiversityAssessor",
    "RiskAssessment",
    "combine_risk",
    "generate_risk_assessment",
]
