"""
Emberline - Tactics Module
Tactical plan generation and its supporting water and firebreak resources.
"""

from emberline.tactics.resources import (
    FirebreakStrategy,
    WaterSource,
    design_firebreaks,
    identify_water_sources,
)
from emberline.tactics.planner import (
    CasualtyEstimate,
    TacticalPhase,
    TacticalPlan,
    composite_priority,
    generate_tactical_plans,
)

__all__ = [
    # Resources
    "FirebreakStrategy",
    "WaterSource",
    "design_firebreaks",
    "identify_water_sources",
    # Planner
    "CasualtyEstimate",
    "TacticalPhase",
    "TacticalPlan",
    "composite_priority",
    "generate_tactical_plans",
]
