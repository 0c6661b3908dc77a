"""
Emberline - Alerts Module
Fire-alert registry and lifecycle.
"""

from emberline.alerts.alert_manager import (
    AlertLevel,
    AlertManager,
    AlertStatus,
    FireAlert,
)

__all__ = [
    "AlertLevel",
    "AlertManager",
    "AlertStatus",
    "FireAlert",
]
