"""Threat and army rosters - static campaign knowledge."""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class Threat(BaseModel):
    """A danger to the empire and how it escalates if left alone."""
    id: str
    name: str
    description: str = ""
    known_facts: list[str] = Field(default_factory=list)
    event_chain: list[str] = Field(min_length=1)  # one stage per ~2 months

    model_config = {"extra": "allow"}

    def prompt_line(self) -> str:
        return f"- {self.name}: {self.description} Facts: {' '.join(self.known_facts)}"


class ThreatRoster(BaseModel):
    threats: list[Threat] = Field(default_factory=list)

    def get(self, threat_id: str) -> Optional[Threat]:
        for t in self.threats:
            if t.id == threat_id:
                return t
        return None

    def summary(self) -> str:
        return "\n".join(t.prompt_line() for t in self.threats)


class Army(BaseModel):
    """A field army available to the council."""
    name: str
    location: str
    infantry: int = Field(default=0, ge=0)
    cavalry: int = Field(default=0, ge=0)
    missile: int = Field(default=0, ge=0)
    abilities: list[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    def prompt_line(self) -> str:
        return (
            f"{self.name} at {self.location} "
            f"(inf {self.infantry}, cav {self.cavalry}, missile {self.missile}) "
            f"abilities: {', '.join(self.abilities)}"
        )


class ArmyRoster(BaseModel):
    armies: list[Army] = Field(default_factory=list)

    def summary(self) -> str:
        return "\n".join(a.prompt_line() for a in self.armies)
