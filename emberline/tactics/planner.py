"""
Emberline - Tactical Plan Generator
Ranks firefighting strategies for a fire from wind, spread and exposure risk.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Union

from emberline.core.simulation import SimulationSource
from emberline.analysis.biodiversity import RiskAssessment
from emberline.core.constants import intensity_level
from emberline.prediction.spread_calculator import FireSpreadPrediction
from emberline.prediction.wind_analysis import WindAnalysis, WindState

logger = logging.getLogger(__name__)


# =============================================================================
# Scoring constants
# =============================================================================

MIN_SUCCESS_PROBABILITY = 0.05
MAX_SUCCESS_PROBABILITY = 0.95

# Spread speed (km/h) at which the speed penalty saturates
SATURATION_SPEED_KMH = 0.5

# Spread speed (km/h) at which phase durations keep their nominal length
NOMINAL_SPREAD_SPEED_KMH = 0.3

TERRAIN_ACCESSIBILITY_RANGE = (0.7, 1.0)

# Weight of fire risk in the personnel exposure score
PERSONNEL_EXPOSURE_FIRE_WEIGHT = 0.45

# Wind speed above which aerial resources are grounded
AERIAL_WIND_LIMIT_KMH = 40.0


# =============================================================================
# Strategy templates
# =============================================================================

# Phases are (name, minutes, objectives, safety measures, success criteria, fallbacks)
STRATEGY_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "direct_attack": {
        "name": "Direct attack on the fire edge",
        "base_success": 0.65,
        "firefighter_risk": 0.35,
        "civilian_risk": 0.10,
        "environmental_impact": 0.40,
        "personnel": 65,
        "hours": 8.0,
        "speed_sensitivity": 1.0,
        "equipment": ["Type 1 engines", "Hand crews", "Water tenders"],
        "aerial_equipment": ["Air tankers", "Helicopters with buckets"],
        "phases": [
            ("Coordinated initial attack", 45,
             ["Knock down the flanks", "Anchor at the heel"],
             ["LCES in place", "Escape routes briefed"],
             ["Flanks cooled", "Head spread slowed"],
             ["Fall back to indirect line"]),
            ("Flank suppression", 180,
             ["Pinch the flanks towards the head", "Hold line with hose lays"],
             ["Lookouts on high ground", "Hourly weather checks"],
             ["Flanks connected", "Spread rate below 5 m/min"],
             ["Switch to perimeter containment"]),
            ("Mop-up", 240,
             ["Extinguish hot spots within 30 m of the line"],
             ["Snag patrol", "Crew rotation"],
             ["No heat along the control line"],
             ["Extend patrol shifts"]),
        ],
        "contingency": [
            "If flame lengths exceed 2.5 m, withdraw to safety zones",
            "If spotting crosses the line, switch to indirect attack",
        ],
    },
    "indirect_attack": {
        "name": "Indirect attack with backfire",
        "base_success": 0.75,
        "firefighter_risk": 0.25,
        "civilian_risk": 0.10,
        "environmental_impact": 0.60,
        "personnel": 55,
        "hours": 16.0,
        "speed_sensitivity": 0.6,
        "equipment": ["Bulldozers", "Drip torches", "Hand crews", "Engines"],
        "aerial_equipment": ["Observation helicopter"],
        "phases": [
            ("Control line construction", 120,
             ["Cut line along natural barriers", "Widen roads as firebreaks"],
             ["Dozer spotters assigned", "Safety zones marked"],
             ["Continuous line ahead of the head"],
             ["Move line further out"]),
            ("Controlled burnout", 240,
             ["Burn out fuel between line and fire", "Hold line against slop-overs"],
             ["Wind within burn prescription", "Holding crews staged"],
             ["Black line connected to the fire"],
             ["Stop ignition and hold with water"]),
            ("Line holding", 300,
             ["Patrol the line", "Catch spot fires"],
             ["Crew rotation", "Continuous radio contact"],
             ["No crossings for 12 hours"],
             ["Call additional holding crews"]),
        ],
        "contingency": [
            "If the wind shifts during ignition, stop firing and hold",
            "If the line is breached, fall back to the secondary line",
        ],
    },
    "structure_protection": {
        "name": "Defensive structure protection",
        "base_success": 0.85,
        "firefighter_risk": 0.15,
        "civilian_risk": 0.05,
        "environmental_impact": 0.70,
        "personnel": 45,
        "hours": 12.0,
        "speed_sensitivity": 0.3,
        "equipment": ["Structure engines", "Sprinkler kits", "Foam units"],
        "aerial_equipment": [],
        "phases": [
            ("Defensive perimeter", 60,
             ["Triage structures", "Clear defensible space"],
             ["Engines parked for quick exit", "Structure refuges identified"],
             ["Every exposed structure assigned"],
             ["Abandon non-defensible structures"]),
            ("Structure defence", 180,
             ["Wet down exposures", "Extinguish ember ignitions"],
             ["Crews stay with engines", "Lookout on the approaching front"],
             ["No structure losses"],
             ["Shelter in designated refuges"]),
            ("Post-front patrol", 120,
             ["Check roofs and vents for embers"],
             ["Hazard tree assessment"],
             ["No rekindles"],
             ["Hand back to local units"]),
        ],
        "contingency": [
            "If the front arrives before preparation ends, withdraw to refuges",
            "If water supply fails, switch to foam and hand tools",
        ],
    },
    "evacuation_priority": {
        "name": "Evacuation priority",
        "base_success": 0.80,
        "firefighter_risk": 0.10,
        "civilian_risk": 0.05,
        "environmental_impact": 0.85,
        "personnel": 30,
        "hours": 6.0,
        "speed_sensitivity": 0.2,
        "equipment": ["Buses", "Ambulances", "Traffic control units"],
        "aerial_equipment": ["Medical helicopters"],
        "phases": [
            ("Warning and mobilisation", 30,
             ["Issue evacuation orders", "Stage transport"],
             ["Confirm routes are clear"],
             ["All zones notified"],
             ["Door-to-door notification"]),
            ("Assisted evacuation", 120,
             ["Move vulnerable population first", "Run traffic control points"],
             ["Escort convoys", "Monitor route exposure"],
             ["Priority zones cleared"],
             ["Shelter in place where routes are cut"]),
            ("Sweep and shelter", 90,
             ["Sweep evacuated areas", "Register evacuees at shelters"],
             ["Accountability checks"],
             ["Everyone accounted for"],
             ["Search teams for missing persons"]),
        ],
        "contingency": [
            "If a route is blocked, redirect to the alternate route",
            "If shelters fill up, open secondary shelters",
        ],
    },
    "perimeter_containment": {
        "name": "Perimeter containment",
        "base_success": 0.80,
        "firefighter_risk": 0.20,
        "civilian_risk": 0.08,
        "environmental_impact": 0.80,
        "personnel": 40,
        "hours": 20.0,
        "speed_sensitivity": 0.8,
        "equipment": ["Engines", "Hand crews", "Water tenders", "Bulldozers"],
        "aerial_equipment": ["Helicopters with buckets"],
        "phases": [
            ("Containment perimeter", 180,
             ["Tie the line into barriers", "Stage engines at access points"],
             ["Escape routes maintained", "Lookouts posted"],
             ["Perimeter closed"],
             ["Widen the perimeter"]),
            ("Perimeter holding", 360,
             ["Hold the perimeter", "Extinguish spot fires outside the line"],
             ["Crew rotation", "Night operations briefing"],
             ["No perimeter breaches for 24 hours"],
             ["Request additional crews"]),
            ("Mop-up and monitoring", 480,
             ["Cool the interior edge", "Infrared patrol"],
             ["Snag patrol"],
             ["Fire declared contained"],
             ["Extend monitoring"]),
        ],
        "contingency": [
            "If the perimeter is breached, deploy reserve crews to the breach",
            "If the wind strengthens, pull back to the secondary perimeter",
        ],
    },
}


# =============================================================================
# Data classes
# =============================================================================

@dataclass(frozen=True)
class TacticalPhase:
    phase: int
    name: str
    duration_minutes: int
    objectives: List[str]
    safety_measures: List[str]
    success_criteria: List[str]
    fallback_options: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "name": self.name,
            "duration_minutes": self.duration_minutes,
            "objectives": self.objectives,
            "safety_measures": self.safety_measures,
            "success_criteria": self.success_criteria,
            "fallback_options": self.fallback_options,
        }


@dataclass(frozen=True)
class CasualtyEstimate:
    civilian_risk: float  # 0-1
    firefighter_risk: float  # 0-1
    environmental_impact: float  # 0-1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "civilian_risk": round(self.civilian_risk, 3),
            "firefighter_risk": round(self.firefighter_risk, 3),
            "environmental_impact": round(self.environmental_impact, 3),
        }


@dataclass(frozen=True)
class TacticalPlan:
    """A ranked, phased strategy."""
    plan_id: str
    strategy: str
    name: str
    priority: int  # rank, 1 is best
    risk_level: str  # low, moderate, high, extreme
    personnel_required: int
    estimated_duration_hours: float
    success_probability: float
    casualties: CasualtyEstimate
    composite_score: float
    equipment_required: List[str] = field(default_factory=list)
    phases: List[TacticalPhase] = field(default_factory=list)
    critical_factors: List[str] = field(default_factory=list)
    contingency_plans: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.plan_id,
            "strategy": self.strategy,
            "name": self.name,
            "priority": self.priority,
            "risk_level": self.risk_level,
            "personnel_required": self.personnel_required,
            "estimated_duration_hours": round(self.estimated_duration_hours, 1),
            "success_probability": round(self.success_probability, 3),
            "casualties": self.casualties.to_dict(),
            "composite_score": round(self.composite_score, 4),
            "equipment_required": self.equipment_required,
            "phases": [p.to_dict() for p in self.phases],
            "critical_factors": self.critical_factors,
            "contingency_plans": self.contingency_plans,
        }


# =============================================================================
# Scoring helpers
# =============================================================================

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def spread_factor(speed_kmh: float, sensitivity: float) -> float:
    """Success multiplier; fast fires hurt sensitive strategies most."""
    saturation = min(1.0, max(0.0, speed_kmh) / SATURATION_SPEED_KMH)
    return 1.0 - 0.5 * sensitivity * saturation


def duration_scale(speed_kmh: float) -> float:
    return _clamp(speed_kmh / NOMINAL_SPREAD_SPEED_KMH, 0.5, 2.0)


def composite_priority(
    success_probability: float,
    overall_risk: float,
    firefighter_risk: float,
) -> float:
    """Higher success and lower combined risk rank first."""
    combined = 0.5 * overall_risk / 100.0 + 0.5 * firefighter_risk
    return success_probability * (1.0 - 0.5 * combined)


def personnel_risk_level(base_firefighter_risk: float, fire_risk_score: float) -> str:
    """Band the personnel exposure score with the fire risk band table."""
    exposure = base_firefighter_risk * 100.0 + PERSONNEL_EXPOSURE_FIRE_WEIGHT * fire_risk_score
    return intensity_level(_clamp(exposure, 0.0, 100.0))


def _critical_factors(
    wind: WindState,
    analysis: Optional[WindAnalysis],
    spread: FireSpreadPrediction,
    risk_assessment: Optional[RiskAssessment],
) -> List[str]:
    factors = []
    if wind.stability == "unstable":
        factors.append("Unstable atmosphere: expect erratic fire behavior")
    if wind.gusts_kmh > AERIAL_WIND_LIMIT_KMH:
        factors.append(f"Gusts up to {wind.gusts_kmh:.0f} km/h limit aerial operations")
    if analysis is not None and analysis.has_critical_changes:
        factors.append(f"{len(analysis.critical_changes)} critical wind changes forecast")
    if spread.speed_kmh >= SATURATION_SPEED_KMH:
        factors.append(f"Fast spread at {spread.speed_kmh:.2f} km/h towards {spread.direction_cardinal}")
    if risk_assessment is not None and risk_assessment.human_life_risk >= 60:
        factors.append("High exposure of occupied buildings")
    if not factors:
        factors.append("No aggravating factors identified")
    return factors


# =============================================================================
# Main Plan Function
# =============================================================================

def generate_tactical_plans(
    latitude: float,
    longitude: float,
    wind: Union[WindAnalysis, WindState],
    spread: FireSpreadPrediction,
    risk_assessment: Optional[RiskAssessment],
    simulation: SimulationSource,
) -> List[TacticalPlan]:
    """
    Generate ranked tactical plans for a fire.

    Args:
        latitude, longitude: Fire location
        wind: Wind analysis, or just the current wind state
        spread: Spread prediction
        risk_assessment: Exposure assessment; None counts as zero overall risk
        simulation: Source for simulated terrain accessibility

    Returns:
        Plans sorted by descending composite priority, ranked from 1.
        Never empty.
    """
    analysis = wind if isinstance(wind, WindAnalysis) else None
    state = wind.current if isinstance(wind, WindAnalysis) else wind
    overall_risk = risk_assessment.overall_risk if risk_assessment is not None else 0.0
    scale = duration_scale(spread.speed_kmh)
    aerial_allowed = state.speed_kmh <= AERIAL_WIND_LIMIT_KMH
    factors = _critical_factors(state, analysis, spread, risk_assessment)

    scored = []
    for strategy, template in STRATEGY_TEMPLATES.items():
        terrain = simulation.for_key(
            "terrain", round(latitude, 3), round(longitude, 3), strategy
        ).uniform(*TERRAIN_ACCESSIBILITY_RANGE)

        success = _clamp(
            template["base_success"] * state.stability_factor *
            spread_factor(spread.speed_kmh, template["speed_sensitivity"]) * terrain,
            MIN_SUCCESS_PROBABILITY,
            MAX_SUCCESS_PROBABILITY,
        )

        severity = 0.5 + spread.risk_score / 100.0
        casualties = CasualtyEstimate(
            civilian_risk=_clamp(template["civilian_risk"] * (0.5 + overall_risk / 100.0), 0.0, 1.0),
            firefighter_risk=_clamp(template["firefighter_risk"] * severity, 0.0, 1.0),
            environmental_impact=template["environmental_impact"],
        )

        equipment = list(template["equipment"])
        if aerial_allowed:
            equipment.extend(template["aerial_equipment"])

        phases = [
            TacticalPhase(
                phase=index,
                name=name,
                duration_minutes=int(round(minutes * scale)),
                objectives=list(objectives),
                safety_measures=list(safety),
                success_criteria=list(criteria),
                fallback_options=list(fallbacks),
            )
            for index, (name, minutes, objectives, safety, criteria, fallbacks)
            in enumerate(template["phases"], start=1)
        ]

        scored.append((
            composite_priority(success, overall_risk, casualties.firefighter_risk),
            strategy, template, success, casualties, equipment, phases,
        ))

    scored.sort(key=lambda item: (-item[0], item[1]))

    plans = []
    for rank, (score, strategy, template, success, casualties, equipment, phases) in enumerate(scored, start=1):
        plans.append(TacticalPlan(
            plan_id=f"plan_{strategy}",
            strategy=strategy,
            name=template["name"],
            priority=rank,
            risk_level=personnel_risk_level(template["firefighter_risk"], spread.risk_score),
            personnel_required=int(round(template["personnel"] * max(1.0, scale))),
            estimated_duration_hours=template["hours"] * scale,
            success_probability=success,
            casualties=casualties,
            composite_score=score,
            equipment_required=equipment,
            phases=phases,
            critical_factors=list(factors),
            contingency_plans=list(template["contingency"]),
        ))

    logger.info(
        f"Generated {len(plans)} tactical plans, best: {plans[0].strategy} "
        f"(success {plans[0].success_probability:.2f})"
    )
    return plans
