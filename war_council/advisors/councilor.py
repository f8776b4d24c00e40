"""Council advisor - drives the model through a bounded tool-calling loop."""

from __future__ import annotations
import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from war_council.config import Settings
    from war_council.llm.openrouter import OpenRouterClient
    from war_council.models.advisors import AdvisorProfile
    from war_council.models.threats import ArmyRoster, ThreatRoster
    from war_council.tools.handlers import ToolHandlers
    from war_council.tools.registry import ToolRegistry

from war_council.errors import ExternalServiceError, MalformedOutputError, ToolLoopExhausted
from war_council.llm.openrouter import ModelTier
from war_council.models.session import ResponsePayload, SessionState
from war_council.systems.speech import PLAN_FALLBACK, normalize_speech

logger = logging.getLogger(__name__)

JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
TRANSCRIPT_WINDOW = 10


class LoopState(str, Enum):
    """Where a tool-calling conversation stands."""
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ToolLoop:
    """One advisor request's conversation, grown one turn at a time."""
    messages: list[dict[str, Any]]
    state: LoopState = LoopState.AWAITING_MODEL
    rounds: int = 0
    answer: Optional[str] = None
    error: Optional[str] = None
    tool_log: list[dict[str, Any]] = field(default_factory=list)

    def append(self, turn: dict[str, Any]) -> None:
        self.messages.append(turn)

    def finish(self, answer: str) -> None:
        self.answer = answer
        self.state = LoopState.DONE

    def fail(self, reason: str) -> None:
        self.error = reason
        self.state = LoopState.FAILED


def parse_answer(text: str) -> dict[str, Any]:
    """Decode the model's final answer into a JSON object.

    Accepts a bare object, or an object wrapped in prose or code fences.
    """
    stripped = (text or "").strip()
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError:
        match = JSON_OBJECT.search(stripped)
        if not match:
            raise MalformedOutputError(f"No JSON object in model output: {stripped[:80]!r}")
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise MalformedOutputError(f"Invalid JSON in model output: {e}") from e
    if not isinstance(data, dict):
        raise MalformedOutputError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def coerce_support(value: Any) -> Optional[int]:
    """An integer 0-10, or None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and 0 <= value <= 10:
        return value
    return None


class CouncilAdvisor:
    """An advisor whose replies come from the model plus the council tools."""

    def __init__(
        self,
        profile: "AdvisorProfile",
        llm_client: "OpenRouterClient",
        tool_registry: "ToolRegistry",
        tool_handlers: "ToolHandlers",
        threats: "ThreatRoster",
        armies: "ArmyRoster",
        settings: "Settings",
    ):
        self.profile = profile
        self.llm = llm_client
        self.tools = tool_registry
        self.handlers = tool_handlers
        self.threats = threats
        self.armies = armies
        self.settings = settings

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def system_prompt(self) -> str:
        """Persona plus the house rules every advisor follows."""
        return (
            f"{self.profile.persona_prompt()}\n"
            'Rules: Do not invent facts. If you lack data, say "I do not know" and ask one specific question.\n'
            "Do not use bullet lists or semicolons. Speak in 2-5 sentences and never exceed the max sentences.\n"
            "Only output valid JSON."
        )

    def build_context(self, state: SessionState) -> str:
        """The user message: the situation as of this request."""
        last_input = state.last_input.prompt_line() if state.last_input else "No recent input."
        plan = state.plan_text or "No plan submitted."
        updates = "\n".join(state.world_updates) if state.world_updates else "No recent world updates."
        recent = state.recent_chat(TRANSCRIPT_WINDOW)
        transcript = "\n".join(e.transcript_line() for e in recent) if recent else "No recent transcript."

        return (
            "Return STRICT JSON with keys: support and speech.\n"
            "Support is integer 0-10 only if a plan exists, else null.\n"
            "Speech must be 2-5 sentences, no bullet lists, no semicolons.\n"
            f"Max sentences: {self.settings.max_sentences}. Max words: {self.settings.max_words}.\n"
            "\n"
            "Context:\n"
            f"Last input: {last_input}\n"
            f"Current plan: {plan}\n"
            f"World updates: {updates}\n"
            f"Threats:\n{self.threats.summary()}\n"
            f"Armies:\n{self.armies.summary()}\n"
            f"Recent transcript:\n{transcript}"
        )

    def _get_messages(self, state: SessionState) -> list[dict[str, Any]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.build_context(state)},
        ]

    # ===== Tool loop =====

    async def run_tool_loop(self, loop: ToolLoop) -> ToolLoop:
        """Alternate model calls and tool execution until a plain answer arrives.

        After `max_tool_rounds` rounds of tools the model is asked once more
        with tools disabled; if it still calls tools the loop fails.
        """
        tools = self.tools.get_openai_tools()
        max_rounds = self.settings.max_tool_rounds

        while loop.state == LoopState.AWAITING_MODEL:
            force_answer = loop.rounds >= max_rounds
            try:
                response = await self.llm.chat_async(
                    messages=loop.messages,
                    tier=ModelTier.COUNCILOR,
                    tools=tools,
                    tool_choice="none" if force_answer else None,
                )
            except ExternalServiceError as e:
                loop.fail(str(e))
                raise

            if not response.has_tool_calls:
                loop.finish(response.content or "")
                break

            if force_answer:
                loop.fail(f"Model still requesting tools after {max_rounds} rounds")
                raise ToolLoopExhausted(loop.error)

            loop.state = LoopState.EXECUTING_TOOLS
            loop.append(response.assistant_turn())
            for call in response.tool_calls:
                result = self.handlers.dispatch(call.name, call.arguments)
                loop.tool_log.append({"tool": call.name, "arguments": call.arguments, "result": result})
                loop.append({
                    "role": "tool",
                    "tool_call_id": call.id,
                    "content": json.dumps(result, default=str),
                })
            loop.rounds += 1
            loop.state = LoopState.AWAITING_MODEL

        return loop

    # ===== Response =====

    def to_payload(self, answer: str, has_plan: bool) -> ResponsePayload:
        """Turn the final answer into a normalized payload."""
        try:
            data = parse_answer(answer)
            support = coerce_support(data.get("support"))
            speech = data.get("speech")
            if not isinstance(speech, str) or not speech.strip():
                speech = PLAN_FALLBACK
        except MalformedOutputError as e:
            logger.warning("%s returned malformed output: %s", self.id, e)
            support, speech = None, PLAN_FALLBACK

        if not has_plan:
            support = None

        return ResponsePayload(
            support=support,
            speech=normalize_speech(speech, self.settings.max_sentences, self.settings.max_words),
        )

    async def respond(self, state: SessionState) -> ResponsePayload:
        """Produce this advisor's reaction to the current session state.

        Raises ExternalServiceError when the model is unreachable, errors,
        or the whole exchange overruns `loop_timeout`.
        """
        loop = ToolLoop(messages=self._get_messages(state))
        try:
            await asyncio.wait_for(self.run_tool_loop(loop), timeout=self.settings.loop_timeout)
        except asyncio.TimeoutError as e:
            loop.fail("timeout")
            raise ExternalServiceError(
                f"{self.id} did not answer within {self.settings.loop_timeout}s"
            ) from e

        logger.debug(
            "%s answered after %d tool round(s), tools used: %s",
            self.id, loop.rounds, [entry["tool"] for entry in loop.tool_log],
        )
        return self.to_payload(loop.answer or "", state.has_plan)
