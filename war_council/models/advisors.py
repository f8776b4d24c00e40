"""Advisor profile schemas - the council roster."""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PublicAdvisor(BaseModel):
    """What front-ends and the public roster tool may see of an advisor.

    This type has no agenda beyond the public one; it is the only shape
    handed out to consumers.
    """
    id: str
    name: str
    title: str
    region: str
    description: str = ""
    public_agenda: str = ""


class AdvisorProfile(BaseModel):
    """A council member as loaded from data/council/*.json."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    title: str
    region: str
    description: str = ""
    voice_style: str = "Plain and direct"
    public_agenda: str = ""
    private_agenda: str = ""
    tts_voice: Optional[str] = None

    def public_view(self) -> PublicAdvisor:
        """Project onto the public fields."""
        return PublicAdvisor(
            id=self.id,
            name=self.name,
            title=self.title,
            region=self.region,
            description=self.description,
            public_agenda=self.public_agenda,
        )

    def persona_prompt(self) -> str:
        """The identity portion of the system prompt."""
        return (
            f"You are {self.name}, {self.title} of {self.region}.\n"
            f"Council purpose: advise the Imperial War Council.\n"
            f"Voice style: {self.voice_style}.\n"
            f"Public agenda: {self.public_agenda}.\n"
            f"Private agenda (hidden from UI): {self.private_agenda}."
        )

    def summary(self) -> str:
        return f"{self.name}, {self.title} of {self.region}"


class Council(BaseModel):
    """The full roster, in load order."""
    advisors: list[AdvisorProfile] = Field(default_factory=list)

    def get(self, advisor_id: str) -> Optional[AdvisorProfile]:
        """Find an advisor by id."""
        for advisor in self.advisors:
            if advisor.id == advisor_id:
                return advisor
        return None

    def ids(self) -> list[str]:
        return [a.id for a in self.advisors]

    def public_roster(self) -> list[PublicAdvisor]:
        """Roster with private agendas stripped."""
        return [a.public_view() for a in self.advisors]
