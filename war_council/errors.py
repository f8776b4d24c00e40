"""Error taxonomy for the war council."""

from __future__ import annotations
from typing import Optional


class WarCouncilError(Exception):
    """Base class for all council errors."""


class ConfigError(WarCouncilError):
    """Configuration could not be loaded or is incomplete."""


# ===== Resolution errors (become tool error objects) =====

class ResolutionError(WarCouncilError):
    """A world-knowledge lookup could not be answered."""

    def __init__(self, message: str, suggestions: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []

    def to_tool_result(self) -> dict:
        result: dict = {"error": self.message}
        if self.suggestions:
            result["did_you_mean"] = self.suggestions
        return result


class LocationNotFound(ResolutionError):
    """A location name did not resolve to a base city."""


class RouteUnreachable(ResolutionError):
    """Both endpoints resolved but no route connects their base cities."""


class ThreatNotFound(ResolutionError):
    """Unknown threat identifier."""


# ===== External service =====

class ExternalServiceError(WarCouncilError):
    """The reasoning or speech service failed, timed out, or misbehaved."""


class LLMError(ExternalServiceError):
    """Raised by the LLM client for connection and protocol failures."""


class ToolLoopExhausted(ExternalServiceError):
    """The model kept requesting tools after the round cap."""


# ===== Output and input =====

class MalformedOutputError(WarCouncilError):
    """The model's final answer was not the expected JSON shape."""


class ValidationError(WarCouncilError):
    """A mutating request was missing a required field."""


class UnknownAdvisorError(ValidationError):
    """No advisor with the requested id sits on the council."""

    def __init__(self, advisor_id: str, suggestions: Optional[list[str]] = None):
        super().__init__(f"Unknown advisor: {advisor_id}")
        self.advisor_id = advisor_id
        self.suggestions = suggestions or []


class NoDraftError(WarCouncilError):
    """Commit or speak was requested for an advisor without a draft."""

    def __init__(self, advisor_id: str):
        super().__init__(f"No draft to commit for advisor '{advisor_id}'")
        self.advisor_id = advisor_id


class PersistenceError(WarCouncilError):
    """Session state could not be written to durable storage."""
