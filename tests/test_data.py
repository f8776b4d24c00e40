"""Tests for campaign data loading, including the shipped data/ directory."""

import json
from pathlib import Path

import pytest

from war_council.data import load_council_data
from war_council.errors import ConfigError
from war_council.systems.travel import travel_time
from war_council.tools import ToolHandlers

SHIPPED_DATA = Path(__file__).parent.parent / "data"


def _write_campaign(root: Path, advisors: list[dict]) -> Path:
    (root / "council").mkdir(parents=True)
    for i, advisor in enumerate(advisors):
        (root / "council" / f"{i:02d}.json").write_text(json.dumps(advisor))
    (root / "world.json").write_text(json.dumps({"cities": [{"name": "A"}], "routes": []}))
    (root / "threats.json").write_text(json.dumps({"threats": []}))
    (root / "armies.json").write_text(json.dumps({"armies": []}))
    return root


def test_loads_council_in_file_order(tmp_path: Path) -> None:
    root = _write_campaign(tmp_path, [
        {"id": "b", "name": "B", "title": "T", "region": "R"},
        {"id": "a", "name": "A", "title": "T", "region": "R"},
    ])
    data = load_council_data(root)
    assert data.council.ids() == ["b", "a"]
    assert data.world.get_city("A") is not None


def test_missing_council_dir(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Council directory not found"):
        load_council_data(tmp_path)


def test_invalid_advisor_file(tmp_path: Path) -> None:
    root = _write_campaign(tmp_path, [{"id": "x"}])
    with pytest.raises(ConfigError, match="Invalid campaign data"):
        load_council_data(root)


def test_missing_world_file(tmp_path: Path) -> None:
    root = _write_campaign(tmp_path, [])
    (root / "world.json").unlink()
    with pytest.raises(ConfigError, match="Cannot read"):
        load_council_data(root)


class TestShippedData:
    @pytest.fixture
    def data(self):
        return load_council_data(SHIPPED_DATA)

    def test_every_advisor_has_both_agendas(self, data) -> None:
        assert len(data.council.advisors) >= 3
        for advisor in data.council.advisors:
            assert advisor.public_agenda
            assert advisor.private_agenda

    def test_hamlet_to_capital(self, data) -> None:
        # Reedholm -> Ashford (1) -> Fenwick (2) -> Stonegate (5) -> Aldermere (4)
        assert travel_time(data.world, "Reedholm", "Aldermere").days == 12

    def test_isolated_harbour_is_unreachable(self, data) -> None:
        handlers = ToolHandlers(world=data.world, threats=data.threats, armies=data.armies, council=data.council)
        result = handlers.dispatch("get_travel_time", {"origin": "Aldermere", "destination": "Saltreach"})
        assert result == {"error": "No known route between locations."}

    def test_threat_ids_are_unique(self, data) -> None:
        ids = [t.id for t in data.threats.threats]
        assert len(ids) == len(set(ids))
