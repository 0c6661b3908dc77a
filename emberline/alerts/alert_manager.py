"""
Emberline - Alert Manager
Fire-alert registry and lifecycle: new -> analyzing -> ready -> responding.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Dict, Any, Optional

from emberline.core.exceptions import AlertNotFoundError, InvalidTransitionError
from emberline.core.constants import risk_band

logger = logging.getLogger(__name__)


class AlertStatus(str, Enum):
    """Fire-alert lifecycle states."""
    NEW = "new"                # Detection observed
    ANALYZING = "analyzing"    # Pipeline running, or failed with error flag
    READY = "ready"            # Analysis available
    RESPONDING = "responding"  # Operator has started the response


class AlertLevel(str, Enum):
    """Alert severity, from the fire risk band."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    EMERGENCY = "emergency"


SEVERITY_BY_BAND: Dict[str, AlertLevel] = {
    "low": AlertLevel.INFO,
    "medium": AlertLevel.WARNING,
    "high": AlertLevel.CRITICAL,
    "extreme": AlertLevel.EMERGENCY,
}

ALLOWED_TRANSITIONS: Dict[AlertStatus, List[AlertStatus]] = {
    AlertStatus.NEW: [AlertStatus.ANALYZING],
    AlertStatus.ANALYZING: [AlertStatus.READY],
    AlertStatus.READY: [AlertStatus.RESPONDING],
    AlertStatus.RESPONDING: [],
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FireAlert:
    """A detected fire and the state of its analysis."""
    alert_id: str
    zone_id: str
    latitude: float
    longitude: float
    detected_at: datetime
    detection_confidence: float = 1.0
    status: AlertStatus = AlertStatus.NEW
    level: Optional[AlertLevel] = None
    risk_score: Optional[float] = None
    error: bool = False
    error_message: Optional[str] = None
    result: Optional[Any] = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        result = self.result.to_dict() if self.result is not None else None
        return {
            "alert_id": self.alert_id,
            "zone_id": self.zone_id,
            "status": self.status.value,
            "level": self.level.value if self.level else None,
            "risk_score": round(self.risk_score, 2) if self.risk_score is not None else None,
            "fire_info": {
                "latitude": self.latitude,
                "longitude": self.longitude,
                "detected_at": self.detected_at.isoformat(),
                "confidence": self.detection_confidence,
            },
            "error": self.error,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "result": result,
        }


class AlertManager:
    """Holds fire alerts and enforces their lifecycle."""

    def __init__(self):
        self.alerts: Dict[str, FireAlert] = {}

    def create_alert(
        self,
        zone_id: str,
        latitude: float,
        longitude: float,
        detected_at: Optional[datetime] = None,
        confidence: float = 1.0,
    ) -> FireAlert:
        """
        Register a newly observed detection.

        Args:
            zone_id: Monitoring zone the detection belongs to
            latitude, longitude: Detection location
            detected_at: Detection time, defaults to now
            confidence: Detection confidence, 0-1

        Returns:
            FireAlert in the NEW state
        """
        alert_id = f"ALERT-{uuid.uuid4().hex[:8].upper()}"
        alert = FireAlert(
            alert_id=alert_id,
            zone_id=zone_id,
            latitude=latitude,
            longitude=longitude,
            detected_at=detected_at or _now(),
            detection_confidence=confidence,
        )
        self.alerts[alert_id] = alert
        logger.info(f"Alert {alert_id} created in zone {zone_id} at ({latitude:.4f}, {longitude:.4f})")
        return alert

    def get_alert(self, alert_id: str) -> FireAlert:
        alert = self.alerts.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        return alert

    def list_alerts(self, status: Optional[AlertStatus] = None) -> List[FireAlert]:
        """Alerts in creation order, optionally filtered by status."""
        alerts = list(self.alerts.values())
        if status is not None:
            alerts = [a for a in alerts if a.status == status]
        return alerts

    def begin_analysis(self, alert_id: str) -> FireAlert:
        return self._transition(alert_id, AlertStatus.ANALYZING)

    def complete_analysis(self, alert_id: str, result: Any, risk_score: float) -> FireAlert:
        """Attach the analysis result and move the alert to READY."""
        alert = self._transition(alert_id, AlertStatus.READY)
        alert.result = result
        alert.risk_score = risk_score
        alert.level = SEVERITY_BY_BAND[risk_band(risk_score)]
        alert.error = False
        alert.error_message = None
        return alert

    def fail_analysis(self, alert_id: str, message: str) -> FireAlert:
        """Flag a failed analysis; the alert stays ANALYZING."""
        alert = self.get_alert(alert_id)
        if alert.status != AlertStatus.ANALYZING:
            raise InvalidTransitionError(alert_id, alert.status.value, AlertStatus.ANALYZING.value)
        alert.error = True
        alert.error_message = message
        alert.updated_at = _now()
        logger.error(f"Alert {alert_id} analysis failed: {message}")
        return alert

    def start_response(self, alert_id: str) -> FireAlert:
        """Manual operator transition, only from READY."""
        return self._transition(alert_id, AlertStatus.RESPONDING)

    def _transition(self, alert_id: str, target: AlertStatus) -> FireAlert:
        alert = self.get_alert(alert_id)
        if target not in ALLOWED_TRANSITIONS[alert.status]:
            raise InvalidTransitionError(alert_id, alert.status.value, target.value)
        previous = alert.status
        alert.status = target
        alert.updated_at = _now()
        logger.info(f"Alert {alert_id}: {previous.value} -> {target.value}")
        return alert
