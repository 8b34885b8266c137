from __future__ import annotations


class DecisionCompanionError(Exception):
    pass


class ValidationError(DecisionCompanionError, ValueError):
    """A stage precondition is not met; the stage does not advance."""


class GatewayError(DecisionCompanionError, RuntimeError):
    """The agent call raised, timed out, or could not be routed."""

    def __init__(self, message: str, agent_id: str | None = None) -> None:
        super().__init__(message)
        self.agent_id = agent_id


class InvalidTransition(DecisionCompanionError, ValueError):
    """An artifact status change that the draft lifecycle does not allow."""
