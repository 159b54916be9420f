# map_planner/api/places.py

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from map_planner.agents.places_agent import PlacesAgent
from map_planner.agents.suggestion_agent import SuggestionAgent
from map_planner.api.dependencies import get_places_agent, get_suggestion_agent
from map_planner.models.schemas import (
    NearbySearchRequest,
    ScoredCandidate,
    SuggestAttractionsRequest,
)
from map_planner.scoring.scoring import describe_weights

router = APIRouter()


def _scored_to_dict(item: ScoredCandidate) -> Dict[str, Any]:
    return {
        "attraction": item.candidate.model_dump(mode="json", by_alias=True),
        "score": item.score,
        "breakdown": item.breakdown.model_dump(mode="json", exclude_none=True),
    }


@router.post("/attractions")
async def top_attractions(
    payload: NearbySearchRequest,
    places_agent: PlacesAgent = Depends(get_places_agent),
):
    """
    Nearby attractions ranked by the scoring engine.
    """
    results: List[ScoredCandidate] = await places_agent.get_top_attractions(
        payload.lat,
        payload.lng,
        radius=payload.radius,
        limit=payload.limit,
        personas=payload.personas,
    )
    return {
        "attractions": [_scored_to_dict(item) for item in results],
        "explanations": describe_weights("attractions", payload.personas),
    }


@router.post("/restaurants")
async def top_restaurants(
    payload: NearbySearchRequest,
    places_agent: PlacesAgent = Depends(get_places_agent),
):
    """
    Nearby restaurants ranked by the scoring engine.
    """
    results = await places_agent.get_top_restaurants(
        payload.lat,
        payload.lng,
        radius=payload.radius,
        limit=payload.limit,
    )
    return {
        "restaurants": [_scored_to_dict(item) for item in results],
        "explanations": describe_weights("restaurants"),
    }


@router.post("/attractions/suggest")
async def suggest_attractions(
    payload: SuggestAttractionsRequest,
    agent: SuggestionAgent = Depends(get_suggestion_agent),
):
    """
    Main agent endpoint: the model researches the area with search tools and
    returns vetted, scored suggestions.
    """
    response = await agent.suggest(payload)
    return {
        "suggestions": response.model_dump(mode="json", by_alias=True, exclude_none=True)
    }
