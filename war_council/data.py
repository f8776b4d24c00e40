"""Static campaign data - loaded once at startup, read-only afterwards."""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from war_council.errors import ConfigError
from war_council.models.advisors import AdvisorProfile, Council
from war_council.models.threats import ArmyRoster, ThreatRoster
from war_council.models.world import WorldMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouncilData:
    council: Council
    world: WorldMap
    threats: ThreatRoster
    armies: ArmyRoster


def _read_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e


def load_council_data(data_dir: Path) -> CouncilData:
    """Load the roster, world map, threats, and armies from `data_dir`.

    Layout:
        council/*.json   one advisor per file, sorted by file name
        world.json
        threats.json
        armies.json
    """
    council_dir = data_dir / "council"
    if not council_dir.is_dir():
        raise ConfigError(f"Council directory not found: {council_dir}")

    try:
        advisors = [
            AdvisorProfile(**_read_json(path))
            for path in sorted(council_dir.glob("*.json"))
        ]
        data = CouncilData(
            council=Council(advisors=advisors),
            world=WorldMap(**_read_json(data_dir / "world.json")),
            threats=ThreatRoster(**_read_json(data_dir / "threats.json")),
            armies=ArmyRoster(**_read_json(data_dir / "armies.json")),
        )
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid campaign data in {data_dir}: {e}") from e
    logger.info(
        "Loaded %d advisors, %d cities, %d threats, %d armies from %s",
        len(advisors), len(data.world.cities), len(data.threats.threats), len(data.armies.armies), data_dir,
    )
    return data
