"""War council service - the operations every front-end calls."""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

from thefuzz import process

from war_council.advisors.councilor import CouncilAdvisor
from war_council.config import Settings
from war_council.data import CouncilData
from war_council.errors import UnknownAdvisorError, ValidationError
from war_council.llm.openrouter import OpenRouterClient
from war_council.models.advisors import PublicAdvisor
from war_council.models.session import (
    AdvisorStatus,
    ChatEntry,
    CouncilSnapshot,
    Draft,
    HistoryEntry,
)
from war_council.models.threats import ArmyRoster, ThreatRoster
from war_council.models.world import WorldMap
from war_council.systems.session_store import SessionStore
from war_council.tools.handlers import ToolHandlers
from war_council.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class WarCouncil:
    """Owns the session store and the static data for one running council."""

    def __init__(
        self,
        data: CouncilData,
        settings: Settings,
        llm: OpenRouterClient,
        store: Optional[SessionStore] = None,
    ):
        self.data = data
        self.settings = settings
        self.llm = llm
        self.store = store or SessionStore(settings.persistence_path)

        self.tools = ToolRegistry()
        self.handlers = ToolHandlers(
            world=data.world,
            threats=data.threats,
            armies=data.armies,
            council=data.council,
        )
        self.advisors: dict[str, CouncilAdvisor] = {
            profile.id: CouncilAdvisor(
                profile=profile,
                llm_client=llm,
                tool_registry=self.tools,
                tool_handlers=self.handlers,
                threats=data.threats,
                armies=data.armies,
                settings=settings,
            )
            for profile in data.council.advisors
        }

    def get_advisor(self, advisor_id: str) -> CouncilAdvisor:
        """Look up an advisor, suggesting near misses when the id is unknown."""
        advisor = self.advisors.get(advisor_id)
        if advisor is None:
            matches = process.extract(advisor_id or "", list(self.advisors), limit=2) if advisor_id else []
            raise UnknownAdvisorError(advisor_id, [m for m, score in matches if score >= 60])
        return advisor

    # ===== Advisor responses =====

    async def generate_response(self, advisor_id: str) -> Draft:
        """Ask one advisor for a reaction and record it as their draft.

        Nothing is written if the model call fails.
        """
        advisor = self.get_advisor(advisor_id)
        try:
            payload = await advisor.respond(self.store.state)
        except Exception:
            logger.exception("Councilor response error for %s", advisor_id)
            raise
        return self.store.record_draft(advisor_id, payload)

    async def generate_all(self) -> dict[str, Draft | Exception]:
        """Ask every advisor at once; failures are returned, not raised."""
        ids = list(self.advisors)
        results = await asyncio.gather(
            *(self.generate_response(advisor_id) for advisor_id in ids),
            return_exceptions=True,
        )
        return dict(zip(ids, results))

    def commit(self, advisor_id: str) -> Draft:
        """Make the advisor's draft their spoken position."""
        self.get_advisor(advisor_id)
        return self.store.commit_draft(advisor_id)

    def speak(self, advisor_id: str) -> str:
        """Commit the draft and return the words to be voiced."""
        return self.commit(advisor_id).speech

    async def synthesize_speech(self, advisor_id: str, text: str) -> bytes:
        """Voice `text` with the advisor's configured voice."""
        if not text or not text.strip():
            raise ValidationError("text required")
        advisor = self.get_advisor(advisor_id)
        voice = advisor.profile.tts_voice or self.settings.voice_for(advisor_id)
        return await self.llm.synthesize_speech(text, voice=voice)

    # ===== Session mutations =====

    def post_input(self, speaker: str, text: str, target_name: Optional[str] = None) -> ChatEntry:
        return self.store.record_input(speaker, text, target_name)

    def set_plan(self, speaker: str, text: Optional[str]) -> str:
        return self.store.set_plan(speaker, text)

    def add_world_update(self, notice: str) -> None:
        self.store.add_world_update(notice)

    def reset(self) -> int:
        """Start a fresh session; returns the new version."""
        return self.store.reset().updated_index

    # ===== Reads =====

    def public_council(self) -> list[PublicAdvisor]:
        return self.data.council.public_roster()

    def snapshot(self) -> CouncilSnapshot:
        """Everything a view needs to redraw."""
        state = self.store.state
        council = [
            AdvisorStatus(
                **public.model_dump(),
                support=state.support_indicator(public.id),
                draft=state.drafts.get(public.id),
                last_spoken=state.last_spoken.get(public.id),
            )
            for public in self.public_council()
        ]
        return CouncilSnapshot(
            updated_index=state.updated_index,
            council=council,
            plan_text=state.plan_text,
            last_input=state.last_input,
            chat_count=len(state.chat),
        )

    def updated_index(self) -> int:
        return self.store.updated_index

    def history(self, advisor_id: str) -> list[HistoryEntry]:
        if not advisor_id:
            raise ValidationError("councilorId required")
        return self.store.history(advisor_id)

    def chat(self) -> list[ChatEntry]:
        return self.store.chat()

    def world(self) -> WorldMap:
        return self.data.world

    def threats(self) -> ThreatRoster:
        return self.data.threats

    def armies(self) -> ArmyRoster:
        return self.data.armies
