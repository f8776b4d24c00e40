"""Pydantic data models for the council roster, world map, threats, and session."""

from .advisors import AdvisorProfile, PublicAdvisor, Council
from .world import WorldMap, City, Route, Town, Hamlet, NotableLocation
from .threats import Threat, ThreatRoster, Army, ArmyRoster
from .session import (
    ResponsePayload,
    Draft,
    HistoryEntry,
    HistoryKind,
    ChatEntry,
    SessionState,
    AdvisorStatus,
    CouncilSnapshot,
)

__all__ = [
    "AdvisorProfile",
    "PublicAdvisor",
    "Council",
    "WorldMap",
    "City",
    "Route",
    "Town",
    "Hamlet",
    "NotableLocation",
    "Threat",
    "ThreatRoster",
    "Army",
    "ArmyRoster",
    "ResponsePayload",
    "Draft",
    "HistoryEntry",
    "HistoryKind",
    "ChatEntry",
    "SessionState",
    "AdvisorStatus",
    "CouncilSnapshot",
]
