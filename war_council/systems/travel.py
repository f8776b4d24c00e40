"""Travel resolver - location lookup plus shortest-path travel days."""

from __future__ import annotations
import heapq
import logging
from itertools import count
from typing import Optional
from pydantic import BaseModel
from thefuzz import process

from war_council.errors import LocationNotFound, RouteUnreachable
from war_council.models.world import WorldMap

logger = logging.getLogger(__name__)


class LocationOffset(BaseModel):
    """A location expressed as a base city plus extra days to reach it."""
    base: str
    offset: float = 0


class TravelEstimate(BaseModel):
    origin: str
    destination: str
    days: float


def resolve_offset(world: WorldMap, location_name: str) -> Optional[LocationOffset]:
    """Resolve a name to its base city and additive offset.

    Tried in order: city, town, hamlet (via its town), notable location (via
    its city, else via its town). Returns None when nothing matches or when
    a link in the chain points at an unknown place.
    """
    if world.get_city(location_name):
        return LocationOffset(base=location_name, offset=0)

    town = world.get_town(location_name)
    if town:
        return _via_town(world, town.name, 0)

    hamlet = world.get_hamlet(location_name)
    if hamlet:
        return _via_town(world, hamlet.nearest_town, hamlet.days_to_town)

    notable = world.get_notable(location_name)
    if notable:
        if notable.nearest_city:
            if not world.get_city(notable.nearest_city):
                return None
            return LocationOffset(base=notable.nearest_city, offset=notable.days_to_city)
        if notable.nearest_town:
            return _via_town(world, notable.nearest_town, notable.days_to_town)

    return None


def _via_town(world: WorldMap, town_name: str, extra_days: float) -> Optional[LocationOffset]:
    town = world.get_town(town_name)
    if not town or not world.get_city(town.nearest_city):
        return None
    return LocationOffset(base=town.nearest_city, offset=extra_days + town.days_to_city)


def build_graph(world: WorldMap) -> dict[str, dict[str, float]]:
    """Adjacency map of cities; routes touching unknown cities are skipped."""
    graph: dict[str, dict[str, float]] = {c.name: {} for c in world.cities}
    for route in world.routes:
        if route.from_city not in graph or route.to_city not in graph:
            logger.debug("Skipping route %s -> %s: unknown city", route.from_city, route.to_city)
            continue
        graph[route.from_city][route.to_city] = route.days
        graph[route.to_city][route.from_city] = route.days
    return graph


def shortest_path_days(world: WorldMap, origin: str, destination: str) -> Optional[float]:
    """Dijkstra over the city graph. None means no route exists."""
    graph = build_graph(world)
    if origin not in graph or destination not in graph:
        return None

    distances: dict[str, float] = {origin: 0}
    visited: set[str] = set()
    tie_breaker = count()
    frontier: list[tuple[float, int, str]] = [(0, next(tie_breaker), origin)]

    while frontier:
        distance, _, current = heapq.heappop(frontier)
        if current in visited:
            continue
        if current == destination:
            return distance
        visited.add(current)
        for neighbour, weight in graph[current].items():
            if neighbour in visited:
                continue
            candidate = distance + weight
            if candidate < distances.get(neighbour, float("inf")):
                distances[neighbour] = candidate
                heapq.heappush(frontier, (candidate, next(tie_breaker), neighbour))

    return None


def suggest_locations(world: WorldMap, name: str, limit: int = 3, threshold: int = 70) -> list[str]:
    """Known names that look like `name`, best first."""
    choices = world.all_location_names()
    if not choices or not name:
        return []
    matches = process.extract(name, choices, limit=limit)
    return [match for match, score in matches if score >= threshold]


def travel_time(world: WorldMap, origin: str, destination: str) -> TravelEstimate:
    """Total days from origin to destination.

    Raises LocationNotFound if either end cannot be resolved, and
    RouteUnreachable if the base cities are not connected.
    """
    origin_info = resolve_offset(world, origin)
    dest_info = resolve_offset(world, destination)
    if origin_info is None or dest_info is None:
        missing = origin if origin_info is None else destination
        raise LocationNotFound(
            "Unknown origin or destination.",
            suggestions=suggest_locations(world, missing),
        )

    route_days = shortest_path_days(world, origin_info.base, dest_info.base)
    if route_days is None:
        raise RouteUnreachable("No known route between locations.")

    return TravelEstimate(
        origin=origin,
        destination=destination,
        days=origin_info.offset + route_days + dest_info.offset,
    )
