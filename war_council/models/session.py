"""Session schemas - the shared, versioned state polled by every view."""

from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
import uuid

from war_council.models.advisors import PublicAdvisor


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponsePayload(BaseModel):
    """One advisor's reaction: a 0-10 rating of the plan and what they say."""
    support: Optional[int] = Field(default=None, ge=0, le=10)
    speech: str


class Draft(ResponsePayload):
    """A payload stamped with when it was produced or committed."""
    ts: datetime = Field(default_factory=utcnow)


class HistoryKind(str, Enum):
    DRAFT = "draft"
    COMMIT = "commit"


class HistoryEntry(BaseModel):
    """Immutable record of a draft or commit, newest first per advisor."""
    model_config = ConfigDict(frozen=True)

    kind: HistoryKind
    support: Optional[int] = None
    speech: str
    ts: datetime = Field(default_factory=utcnow)


class ChatEntry(BaseModel):
    """A line of the council transcript."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    speaker: str
    target_name: Optional[str] = None
    text: str
    ts: datetime = Field(default_factory=utcnow)

    def transcript_line(self) -> str:
        target = f"@{self.target_name} " if self.target_name else ""
        return f"{self.speaker.upper()}: {target}{self.text}"

    def prompt_line(self) -> str:
        target = f" @{self.target_name}" if self.target_name else ""
        return f"{self.speaker.upper()}{target}: {self.text}"


class SessionState(BaseModel):
    """Everything that changes during a session.

    `updated_index` only ever grows; clients compare it against the value
    they last saw and re-fetch the whole snapshot when it moves.
    """
    updated_index: int = 0
    plan_text: str = ""
    last_input: Optional[ChatEntry] = None
    drafts: dict[str, Draft] = Field(default_factory=dict)
    last_spoken: dict[str, Draft] = Field(default_factory=dict)
    support: dict[str, Optional[int]] = Field(default_factory=dict)
    chat: list[ChatEntry] = Field(default_factory=list)
    history: dict[str, list[HistoryEntry]] = Field(default_factory=dict)
    world_updates: list[str] = Field(default_factory=list)

    @property
    def has_plan(self) -> bool:
        return bool(self.plan_text.strip())

    def recent_chat(self, count: int = 10) -> list[ChatEntry]:
        return self.chat[-count:] if self.chat else []

    def support_indicator(self, advisor_id: str) -> Optional[int]:
        """Draft support if rated, else the last spoken support, else None."""
        draft = self.drafts.get(advisor_id)
        if draft is not None and draft.support is not None:
            return draft.support
        spoken = self.last_spoken.get(advisor_id)
        if spoken is not None and spoken.support is not None:
            return spoken.support
        return None


class AdvisorStatus(PublicAdvisor):
    """Public roster entry joined with the advisor's live session data."""
    support: Optional[int] = None
    draft: Optional[Draft] = None
    last_spoken: Optional[Draft] = None


class CouncilSnapshot(BaseModel):
    """Full read used by front-ends after the version counter moves."""
    updated_index: int
    council: list[AdvisorStatus]
    plan_text: str
    last_input: Optional[ChatEntry] = None
    chat_count: int = 0
