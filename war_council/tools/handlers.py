"""Tool handler implementations - the deterministic answers behind each tool."""

from __future__ import annotations
import logging
from typing import Any, Callable, TYPE_CHECKING
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from war_council.models.advisors import Council
    from war_council.models.threats import ArmyRoster, ThreatRoster
    from war_council.models.world import WorldMap

from war_council.errors import ResolutionError
from war_council.systems.threat_oracle import future_stage
from war_council.systems.travel import travel_time

logger = logging.getLogger(__name__)


class TravelTimeArgs(BaseModel):
    origin: str
    destination: str


class ThreatFutureArgs(BaseModel):
    threatId: str
    months: float = Field(allow_inf_nan=False)


class NoArgs(BaseModel):
    model_config = {"extra": "ignore"}


class ToolHandlers:
    """Handlers for all council tools."""

    def __init__(
        self,
        world: "WorldMap",
        threats: "ThreatRoster",
        armies: "ArmyRoster",
        council: "Council",
    ):
        self.world = world
        self.threats = threats
        self.armies = armies
        self.council = council
        self._routes: dict[str, tuple[type[BaseModel], Callable[..., Any]]] = {
            "get_travel_time": (TravelTimeArgs, self.get_travel_time),
            "get_threat_future": (ThreatFutureArgs, self.get_threat_future),
            "get_armies": (NoArgs, self.get_armies),
            "get_council_public": (NoArgs, self.get_council_public),
        }

    def get_travel_time(self, origin: str, destination: str) -> dict[str, Any]:
        """Days to travel between two named places."""
        try:
            return travel_time(self.world, origin, destination).model_dump()
        except ResolutionError as e:
            return e.to_tool_result()

    def get_threat_future(self, threatId: str, months: float) -> dict[str, Any]:
        """Escalation stage of a threat after `months` without intervention."""
        try:
            forecast = future_stage(self.threats, threatId, months)
        except ResolutionError as e:
            return e.to_tool_result()
        return {
            "threatId": forecast.threatId,
            "months": forecast.months,
            "summary": forecast.summary,
        }

    def get_armies(self) -> list[dict[str, Any]]:
        return [a.model_dump() for a in self.armies.armies]

    def get_council_public(self) -> list[dict[str, Any]]:
        return [a.model_dump() for a in self.council.public_roster()]

    def dispatch(self, tool_name: str, arguments: Any) -> Any:
        """Run a tool by name. Never raises; failures come back as {"error": ...}."""
        route = self._routes.get(tool_name)
        if route is None:
            logger.warning("Model requested unknown tool %r", tool_name)
            return {"error": "Unknown tool."}

        args_model, handler = route
        try:
            args = args_model.model_validate(arguments if arguments is not None else {})
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.debug("Bad arguments for %s: %s", tool_name, e)
            return {"error": f"Invalid arguments for {tool_name}: {', '.join(fields)}"}

        result = handler(**args.model_dump())
        logger.debug("tool %s(%s) -> %s", tool_name, arguments, result)
        return result
