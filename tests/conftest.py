import json
from pathlib import Path
from typing import Any, Optional

import pytest

from war_council.config import Settings
from war_council.data import CouncilData
from war_council.llm.openrouter import LLMResponse, ModelTier, ToolCall
from war_council.models import (
    AdvisorProfile,
    Army,
    ArmyRoster,
    City,
    Council,
    Hamlet,
    NotableLocation,
    Route,
    Threat,
    ThreatRoster,
    Town,
    WorldMap,
)
from war_council.systems.session_store import SessionStore


class StubLLM:
    """Replays scripted responses and records every request."""

    def __init__(self, responses: Optional[list[Any]] = None):
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.speech_calls: list[dict[str, Any]] = []

    async def chat_async(
        self,
        messages: list[dict[str, Any]],
        tier: ModelTier = ModelTier.COUNCILOR,
        tools: Optional[list[dict[str, Any]]] = None,
        tool_choice: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "tools": tools,
            "tool_choice": tool_choice,
        })
        if not self.responses:
            raise AssertionError("StubLLM ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def synthesize_speech(self, text: str, voice: str = "alloy", speed: float = 1.2) -> bytes:
        self.speech_calls.append({"text": text, "voice": voice})
        return b"ID3fake-mp3"


def answer(support: Any = 7, speech: str = "We march at dawn. The pass will hold.") -> LLMResponse:
    """A final model turn with a JSON answer."""
    return LLMResponse(content=json.dumps({"support": support, "speech": speech}), tool_calls=[])


def tool_turn(*calls: tuple[str, str, Any]) -> LLMResponse:
    """A model turn requesting tools: (call_id, name, arguments)."""
    return LLMResponse(
        content=None,
        tool_calls=[
            ToolCall(id=call_id, name=name, arguments=args, raw_arguments=json.dumps(args))
            for call_id, name, args in calls
        ],
        finish_reason="tool_calls",
    )


@pytest.fixture
def world() -> WorldMap:
    """A - B (2 days) - C (3 days), town T one day from A, island city D."""
    return WorldMap(
        cities=[City(name="A"), City(name="B"), City(name="C"), City(name="D")],
        routes=[
            Route(**{"from": "A", "to": "B", "days": 2}),
            Route(**{"from": "B", "to": "C", "days": 3}),
            Route(**{"from": "C", "to": "Nowhere", "days": 1}),
        ],
        towns=[
            Town(name="T", nearest_city="A", days_to_city=1),
            Town(name="Lost Town", nearest_city="Atlantis", days_to_city=1),
        ],
        hamlets=[Hamlet(name="H", nearest_town="T", days_to_town=0.5)],
        notable_locations=[
            NotableLocation(name="Tower", nearest_city="C", days_to_city=1),
            NotableLocation(name="Shrine", nearest_town="T", days_to_town=2),
        ],
    )


@pytest.fixture
def threats() -> ThreatRoster:
    return ThreatRoster(threats=[
        Threat(
            id="t1",
            name="Ashen Host",
            description="Northern clans on the move.",
            known_facts=["Eight thousand spears."],
            event_chain=["s0", "s1", "s2"],
        ),
    ])


@pytest.fixture
def armies() -> ArmyRoster:
    return ArmyRoster(armies=[
        Army(name="Iron Legion", location="A", infantry=6000, cavalry=1200, missile=800, abilities=["shield wall"]),
    ])


@pytest.fixture
def council() -> Council:
    return Council(advisors=[
        AdvisorProfile(
            id="marshal",
            name="Corvin Hale",
            title="Lord Marshal",
            region="Aldermere",
            public_agenda="Strike before winter.",
            private_agenda="Wants the regency seat.",
            tts_voice="onyx",
        ),
        AdvisorProfile(
            id="treasurer",
            name="Isolde Varn",
            title="Mistress of Coin",
            region="Brightwater",
            public_agenda="Protect the treasury.",
            private_agenda="Protect the river fleets.",
        ),
    ])


@pytest.fixture
def council_data(council, world, threats, armies) -> CouncilData:
    return CouncilData(council=council, world=world, threats=threats, armies=armies)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_key="test-key",
        max_tool_rounds=3,
        loop_timeout=5,
        data_dir=tmp_path / "data",
        persistence_path=tmp_path / "state.json",
        runtime_audio_dir=tmp_path / "audio",
    )


@pytest.fixture
def store(settings: Settings) -> SessionStore:
    return SessionStore(settings.persistence_path)
