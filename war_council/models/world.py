"""World map schemas - cities, routes, and the places that hang off them."""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class City(BaseModel):
    """A node of the travel graph."""
    name: str
    region: Optional[str] = None
    description: Optional[str] = None

    model_config = {"extra": "allow"}


class Route(BaseModel):
    """An undirected road between two cities."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    from_city: str = Field(alias="from")
    to_city: str = Field(alias="to")
    days: float = Field(ge=0)


class Town(BaseModel):
    """A town attached to its nearest city."""
    name: str
    nearest_city: str
    days_to_city: float = Field(ge=0)

    model_config = {"extra": "allow"}


class Hamlet(BaseModel):
    """A hamlet attached to its nearest town."""
    name: str
    nearest_town: str
    days_to_town: float = Field(ge=0)

    model_config = {"extra": "allow"}


class NotableLocation(BaseModel):
    """A landmark reached via a city, or failing that via a town."""
    name: str
    nearest_city: Optional[str] = None
    days_to_city: float = Field(default=0, ge=0)
    nearest_town: Optional[str] = None
    days_to_town: float = Field(default=0, ge=0)

    model_config = {"extra": "allow"}


class WorldMap(BaseModel):
    """The static geography of the campaign."""
    cities: list[City] = Field(default_factory=list)
    routes: list[Route] = Field(default_factory=list)
    towns: list[Town] = Field(default_factory=list)
    hamlets: list[Hamlet] = Field(default_factory=list)
    notable_locations: list[NotableLocation] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    def get_city(self, name: str) -> Optional[City]:
        for c in self.cities:
            if c.name == name:
                return c
        return None

    def get_town(self, name: str) -> Optional[Town]:
        for t in self.towns:
            if t.name == name:
                return t
        return None

    def get_hamlet(self, name: str) -> Optional[Hamlet]:
        for h in self.hamlets:
            if h.name == name:
                return h
        return None

    def get_notable(self, name: str) -> Optional[NotableLocation]:
        for n in self.notable_locations:
            if n.name == name:
                return n
        return None

    def all_location_names(self) -> list[str]:
        """Every name a traveller could ask about."""
        names = [c.name for c in self.cities]
        names.extend(t.name for t in self.towns)
        names.extend(h.name for h in self.hamlets)
        names.extend(n.name for n in self.notable_locations)
        return names
