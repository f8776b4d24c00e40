"""Tests for war_council.council.WarCouncil."""

import pytest

from conftest import StubLLM, answer
from war_council.council import WarCouncil
from war_council.errors import LLMError, NoDraftError, UnknownAdvisorError, ValidationError
from war_council.models import HistoryKind


@pytest.fixture
def make_council(council_data, settings, store):
    def _make(responses=None) -> WarCouncil:
        return WarCouncil(data=council_data, settings=settings, llm=StubLLM(responses), store=store)
    return _make


class TestAdvisors:
    def test_unknown_advisor_suggests_close_ids(self, make_council) -> None:
        council = make_council()
        with pytest.raises(UnknownAdvisorError) as exc:
            council.get_advisor("marshall")
        assert exc.value.suggestions[0] == "marshal"

    def test_public_council_is_in_load_order(self, make_council) -> None:
        assert [a.id for a in make_council().public_council()] == ["marshal", "treasurer"]


class TestResponses:
    async def test_generate_records_draft(self, make_council) -> None:
        council = make_council([answer(7, "Go north. The pass is open.")])
        council.set_plan("gm", "Go north")
        draft = await council.generate_response("marshal")
        assert draft.support == 7
        assert council.store.state.drafts["marshal"].speech == "Go north. The pass is open."
        assert council.history("marshal")[0].kind == HistoryKind.DRAFT

    async def test_failed_generation_writes_nothing(self, make_council) -> None:
        council = make_council([LLMError("down")])
        before = council.updated_index()
        with pytest.raises(LLMError):
            await council.generate_response("marshal")
        assert council.updated_index() == before
        assert "marshal" not in council.store.state.drafts

    async def test_generate_all_reports_failures_per_advisor(self, make_council) -> None:
        council = make_council([answer(5, "Fine. Proceed."), LLMError("down")])
        results = await council.generate_all()
        assert set(results) == {"marshal", "treasurer"}
        assert sum(isinstance(r, Exception) for r in results.values()) == 1
        assert council.updated_index() == 1

    async def test_speak_commits_and_returns_text(self, make_council) -> None:
        council = make_council([answer(6, "We hold. We wait.")])
        council.set_plan("gm", "Hold")
        await council.generate_response("marshal")
        assert council.speak("marshal") == "We hold. We wait."
        state = council.store.state
        assert state.last_spoken["marshal"].speech == "We hold. We wait."
        assert state.support["marshal"] == 6

    def test_commit_without_draft(self, make_council) -> None:
        with pytest.raises(NoDraftError):
            make_council().commit("marshal")

    def test_commit_unknown_advisor(self, make_council) -> None:
        with pytest.raises(UnknownAdvisorError):
            make_council().commit("nobody")


class TestSpeech:
    async def test_uses_profile_voice(self, make_council) -> None:
        council = make_council()
        audio = await council.synthesize_speech("marshal", "Hold the line.")
        assert audio.startswith(b"ID3")
        assert council.llm.speech_calls == [{"text": "Hold the line.", "voice": "onyx"}]

    async def test_falls_back_to_configured_voice(self, make_council, settings) -> None:
        settings.tts_voices = {"treasurer": "shimmer"}
        council = make_council()
        await council.synthesize_speech("treasurer", "Count the coin.")
        assert council.llm.speech_calls[0]["voice"] == "shimmer"

    async def test_empty_text_rejected(self, make_council) -> None:
        with pytest.raises(ValidationError, match="text required"):
            await make_council().synthesize_speech("marshal", "  ")


class TestReads:
    def test_snapshot_hides_private_agenda(self, make_council) -> None:
        snapshot = make_council().snapshot()
        dumped = snapshot.model_dump_json()
        assert "Wants the regency seat" not in dumped
        assert "private_agenda" not in dumped

    async def test_snapshot_joins_session_data(self, make_council) -> None:
        council = make_council([answer(8, "Agreed. March.")])
        council.set_plan("gm", "March")
        council.post_input("player", "Well?", target_name="marshal")
        await council.generate_response("marshal")

        snapshot = council.snapshot()
        marshal = snapshot.council[0]
        assert snapshot.updated_index == council.updated_index()
        assert snapshot.plan_text == "March"
        assert snapshot.chat_count == 1
        assert marshal.support == 8
        assert marshal.draft.speech == "Agreed. March."
        assert marshal.last_spoken is None
        assert snapshot.council[1].support is None

    def test_history_requires_id(self, make_council) -> None:
        with pytest.raises(ValidationError, match="councilorId required"):
            make_council().history("")

    def test_reset_returns_new_version(self, make_council) -> None:
        council = make_council()
        council.post_input("gm", "hello")
        assert council.reset() == 2
        assert council.chat() == []

    def test_world_updates_reach_prompt(self, make_council) -> None:
        council = make_council()
        council.add_world_update("Stonegate burns.")
        context = council.advisors["marshal"].build_context(council.store.state)
        assert "World updates: Stonegate burns." in context

    def test_static_data_accessors(self, make_council, world, threats, armies) -> None:
        council = make_council()
        assert council.world() is world
        assert council.threats() is threats
        assert council.armies() is armies
