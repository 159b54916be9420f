# map_planner/api/dependencies.py

from functools import lru_cache

from map_planner.agents.places_agent import PlacesAgent
from map_planner.agents.suggestion_agent import SuggestionAgent
from map_planner.core.config import settings
from map_planner.services.google_places_client import GooglePlacesClient
from map_planner.services.openrouter_client import OpenRouterClient
from map_planner.services.text_search_cache import TextSearchCache


@lru_cache
def get_places_client() -> GooglePlacesClient:
    return GooglePlacesClient(
        api_key=settings.GOOGLE_MAPS_API_KEY,
        timeout=settings.PLACES_TIMEOUT_SECONDS,
    )


@lru_cache
def get_text_search_cache() -> TextSearchCache:
    return TextSearchCache(
        get_places_client(),
        capacity=settings.TEXT_SEARCH_CACHE_CAPACITY,
        ttl_seconds=settings.TEXT_SEARCH_CACHE_TTL_SECONDS,
    )


@lru_cache
def get_places_agent() -> PlacesAgent:
    return PlacesAgent(get_places_client())


@lru_cache
def get_suggestion_agent() -> SuggestionAgent:
    chat_client = OpenRouterClient(
        api_key=settings.OPENROUTER_API_KEY,
        model=settings.OPENROUTER_MODEL,
        base_url=settings.OPENROUTER_BASE_URL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
    )
    return SuggestionAgent(
        chat_client,
        get_places_agent(),
        text_search=get_text_search_cache(),
        max_tool_iterations=settings.AGENT_MAX_TOOL_ITERATIONS,
        tool_concurrency=settings.AGENT_TOOL_CONCURRENCY,
        temperature=settings.AGENT_TEMPERATURE,
        max_tokens=settings.AGENT_MAX_TOKENS,
    )
