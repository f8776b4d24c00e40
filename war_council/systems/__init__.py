"""Core council systems: travel, threats, speech shaping, and session state."""

from .travel import resolve_offset, shortest_path_days, travel_time, LocationOffset, TravelEstimate
from .threat_oracle import future_stage, ThreatForecast
from .speech import normalize_speech
from .session_store import SessionStore

__all__ = [
    "resolve_offset",
    "shortest_path_days",
    "travel_time",
    "LocationOffset",
    "TravelEstimate",
    "future_stage",
    "ThreatForecast",
    "normalize_speech",
    "SessionStore",
]
