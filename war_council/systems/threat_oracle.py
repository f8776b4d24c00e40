"""Threat oracle - where a threat will stand after some months of neglect."""

from __future__ import annotations
import math
from pydantic import BaseModel

from war_council.errors import ThreatNotFound
from war_council.models.threats import ThreatRoster

# A threat advances one stage roughly every two months.
MONTHS_PER_STAGE = 2


class ThreatForecast(BaseModel):
    threatId: str
    months: float
    stage: int
    summary: str


def stage_index(chain_length: int, months: float) -> int:
    """Stage reached after `months`, capped at the last known stage."""
    if not math.isfinite(months):
        return chain_length - 1 if months > 0 else 0
    months = max(0.0, months)
    return min(chain_length - 1, math.floor(months / MONTHS_PER_STAGE))


def future_stage(roster: ThreatRoster, threat_id: str, months: float) -> ThreatForecast:
    """Forecast a threat's stage. Raises ThreatNotFound for unknown ids."""
    threat = roster.get(threat_id)
    if threat is None:
        raise ThreatNotFound("Unknown threat.", suggestions=[t.id for t in roster.threats])

    months = max(0.0, float(months))
    index = stage_index(len(threat.event_chain), months)
    return ThreatForecast(
        threatId=threat.id,
        months=months,
        stage=index,
        summary=threat.event_chain[index],
    )
