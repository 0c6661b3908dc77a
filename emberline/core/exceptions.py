"""
Emberline - Exceptions
"""


class EmberlineError(Exception):
    """Base class for all Emberline errors."""


class ProviderError(EmberlineError):
    """An external data provider failed or returned unusable data."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class InvalidTransitionError(EmberlineError):
    """A fire alert was asked to move to a state it cannot reach."""

    def __init__(self, alert_id: str, current: str, target: str):
        self.alert_id = alert_id
        self.current = current
        self.target = target
        super().__init__(
            f"Alert {alert_id} cannot move from '{current}' to '{target}'"
        )


class AlertNotFoundError(EmberlineError):
    """No alert exists with the requested id."""
