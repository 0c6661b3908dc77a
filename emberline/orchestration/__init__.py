"""
Emberline - Orchestration Module
Monitoring zones, the analysis pipeline and the zone monitor.
"""

from emberline.orchestration.zones import (
    AnalysisContext,
    MonitoringZone,
    OrganizationConfig,
)
from emberline.orchestration.pipeline import (
    AnalysisResult,
    EmergencyAnalysisPipeline,
    StageError,
)
from emberline.orchestration.monitor import (
    DetectionSource,
    FireDetection,
    SimulatedDetectionSource,
    ZoneMonitor,
)

__all__ = [
    # Zones
    "AnalysisContext",
    "MonitoringZone",
    "OrganizationConfig",
    # Pipeline
    "AnalysisResult",
    "EmergencyAnalysisPipeline",
    "StageError",
    # Monitor
    "DetectionSource",
    "FireDetection",
    "SimulatedDetectionSource",
    "ZoneMonitor",
]
