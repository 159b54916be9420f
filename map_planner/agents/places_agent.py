# map_planner/agents/places_agent.py

from typing import Iterable, List, Optional

from map_planner.core.logging_config import logger
from map_planner.models.schemas import ScoredCandidate
from map_planner.scoring.scoring import score_attractions, score_restaurants
from map_planner.services.google_places_client import SearchClient
from map_planner.services.place_types import ATTRACTION_TYPES, RESTAURANT_TYPES

DEFAULT_RADIUS_M = 2000
DEFAULT_LIMIT = 10


class PlacesAgent:
    """
    Agent that returns ranked places around a point.

    Strategy:
    1) Ask the search provider for nearby attractions (or restaurants).
    2) Rank them with the deterministic scoring engine.
    3) Keep the top `limit`.

    Search errors (no results, provider failure) propagate to the caller.
    """

    def __init__(self, search_client: SearchClient) -> None:
        self.search_client = search_client

    async def get_top_attractions(
        self,
        lat: float,
        lng: float,
        radius: int = DEFAULT_RADIUS_M,
        limit: int = DEFAULT_LIMIT,
        personas: Optional[Iterable[str]] = None,
    ) -> List[ScoredCandidate]:
        candidates = await self.search_client.nearby_search(
            lat, lng, radius, ATTRACTION_TYPES
        )
        scored = score_attractions(candidates, personas)[:limit]

        logger.info(
            f"PlacesAgent: {len(candidates)} attractions near ({lat}, {lng}), "
            f"returning top {len(scored)}"
        )
        return scored

    async def get_top_restaurants(
        self,
        lat: float,
        lng: float,
        radius: int = DEFAULT_RADIUS_M,
        limit: int = DEFAULT_LIMIT,
    ) -> List[ScoredCandidate]:
        candidates = await self.search_client.nearby_search(
            lat, lng, radius, RESTAURANT_TYPES
        )
        scored = score_restaurants(candidates)[:limit]

        logger.info(
            f"PlacesAgent: {len(candidates)} restaurants near ({lat}, {lng}), "
            f"returning top {len(scored)}"
        )
        return scored
