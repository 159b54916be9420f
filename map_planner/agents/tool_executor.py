# map_planner/agents/tool_executor.py

import asyncio
import json
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from map_planner.agents.places_agent import PlacesAgent
from map_planner.core.errors import InvalidToolCallError, PlannerError
from map_planner.core.logging_config import logger
from map_planner.models.schemas import Coordinates, ScoredCandidate, ToolCall
from map_planner.services.place_types import MAX_SEARCH_RADIUS, MIN_SEARCH_RADIUS
from map_planner.services.text_search_cache import TextSearchCache

SEARCH_ATTRACTIONS = "searchAttractions"
SEARCH_RESTAURANTS = "searchRestaurants"
GET_PLACE_DETAILS = "getPlaceDetails"

DEFAULT_TOOL_RADIUS = 2000
DEFAULT_ATTRACTIONS_LIMIT = 15
DEFAULT_RESTAURANTS_LIMIT = 10
DEFAULT_TOOL_CONCURRENCY = 3


def _search_tool(name: str, description: str, default_limit: int) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": {
                    "lat": {
                        "type": "number",
                        "description": "Latitude of the search center point",
                    },
                    "lng": {
                        "type": "number",
                        "description": "Longitude of the search center point",
                    },
                    "radius": {
                        "type": "number",
                        "description": "Search radius in meters (default: 2000, min: 100, max: 50000)",
                        "default": DEFAULT_TOOL_RADIUS,
                    },
                    "limit": {
                        "type": "number",
                        "description": f"Maximum number of results to return (default: {default_limit}, min: 1, max: 50)",
                        "default": default_limit,
                    },
                },
                "required": ["lat", "lng"],
                "additionalProperties": False,
            },
        },
    }


AGENT_TOOLS: List[Dict[str, Any]] = [
    _search_tool(
        SEARCH_ATTRACTIONS,
        "Search for tourist attractions near a specific location. Returns top-rated "
        "attractions with scores based on ratings, reviews, and popularity.",
        DEFAULT_ATTRACTIONS_LIMIT,
    ),
    _search_tool(
        SEARCH_RESTAURANTS,
        "Search for restaurants near a specific location. Returns top-rated "
        "restaurants with scores based on ratings, reviews, price level, and availability.",
        DEFAULT_RESTAURANTS_LIMIT,
    ),
    {
        "type": "function",
        "function": {
            "name": GET_PLACE_DETAILS,
            "description": "Look up a single place by its exact name and return its details.",
            "parameters": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Exact place name, as returned by a search tool",
                    },
                },
                "required": ["name"],
                "additionalProperties": False,
            },
        },
    },
]


class SearchToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Accepted for schema compatibility; the search centre is always the map's.
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: float = Field(default=DEFAULT_TOOL_RADIUS, ge=MIN_SEARCH_RADIUS, le=MAX_SEARCH_RADIUS)
    limit: Optional[int] = Field(default=None, ge=1, le=50)


class PlaceDetailsArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)


class ToolExecutor:
    """
    Runs the tools the model asks for during one agent invocation.

    The model decides *what* to search; the map coordinates supplied by the
    caller decide *where*. Every scored search result is remembered by name in
    `scored` so suggestions can be enriched afterwards.
    """

    def __init__(
        self,
        places_agent: PlacesAgent,
        map_coordinates: Coordinates,
        personas: Optional[Iterable[str]] = None,
        text_search: Optional[TextSearchCache] = None,
        concurrency: int = DEFAULT_TOOL_CONCURRENCY,
    ) -> None:
        self.places_agent = places_agent
        self.map_coordinates = map_coordinates
        self.personas = list(personas or [])
        self.text_search = text_search
        self.concurrency = concurrency
        self.scored: Dict[str, ScoredCandidate] = {}

    # ---------------- Batch ----------------

    async def execute_batch(self, tool_calls: Sequence[ToolCall]) -> List[str]:
        """
        Execute a batch concurrently (at most `concurrency` in flight).

        A failing call never aborts its siblings: the error is serialized into
        that call's result so the model can react on the next turn. Results
        come back in call order, so calls sharing an id keep their own result.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(tool_call: ToolCall) -> str:
            async with semaphore:
                try:
                    return await self.execute(tool_call)
                except PlannerError as exc:
                    logger.warning(
                        f"Tool call {tool_call.name} ({tool_call.id}) failed: {exc.message}"
                    )
                    return json.dumps(exc.to_payload())

        return list(await asyncio.gather(*(run(call) for call in tool_calls)))

    # ---------------- Single call ----------------

    async def execute(self, tool_call: ToolCall) -> str:
        args = self._parse_arguments(tool_call)

        if tool_call.name == SEARCH_ATTRACTIONS:
            search = self._validate(tool_call, SearchToolArgs, args)
            results = await self.places_agent.get_top_attractions(
                self.map_coordinates.lat,
                self.map_coordinates.lng,
                radius=int(search.radius),
                limit=search.limit or DEFAULT_ATTRACTIONS_LIMIT,
                personas=self.personas,
            )
            self._remember(results)
            return self._dump("attractions", results)

        if tool_call.name == SEARCH_RESTAURANTS:
            search = self._validate(tool_call, SearchToolArgs, args)
            results = await self.places_agent.get_top_restaurants(
                self.map_coordinates.lat,
                self.map_coordinates.lng,
                radius=int(search.radius),
                limit=search.limit or DEFAULT_RESTAURANTS_LIMIT,
            )
            self._remember(results)
            return self._dump("restaurants", results)

        if tool_call.name == GET_PLACE_DETAILS:
            details = self._validate(tool_call, PlaceDetailsArgs, args)
            if self.text_search is not None:
                candidate = await self.text_search.get(details.name)
            else:
                candidate = await self.places_agent.search_client.text_search(details.name)
            return json.dumps({"place": candidate.model_dump(mode="json", by_alias=True)})

        raise InvalidToolCallError(
            f"Unknown tool: {tool_call.name}", tool_call.name, tool_call.id
        )

    def _parse_arguments(self, tool_call: ToolCall) -> Dict[str, Any]:
        try:
            args = json.loads(tool_call.arguments or "{}")
        except json.JSONDecodeError as exc:
            raise InvalidToolCallError(
                f"Failed to parse arguments for tool: {tool_call.name}",
                tool_call.name,
                tool_call.id,
                exc,
            ) from exc

        if not isinstance(args, dict):
            raise InvalidToolCallError(
                f"Arguments for tool {tool_call.name} must be a JSON object",
                tool_call.name,
                tool_call.id,
            )
        return args

    @staticmethod
    def _validate(tool_call: ToolCall, model, args: Dict[str, Any]):
        try:
            return model.model_validate(args)
        except ValidationError as exc:
            details = ", ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidToolCallError(
                f"Invalid arguments for tool {tool_call.name}: {details}",
                tool_call.name,
                tool_call.id,
                exc,
            ) from exc

    def _remember(self, results: List[ScoredCandidate]) -> None:
        for item in results:
            self.scored[item.candidate.name] = item

    @staticmethod
    def _dump(key: str, results: List[ScoredCandidate]) -> str:
        return json.dumps(
            {
                key: [
                    {
                        "attraction": item.candidate.model_dump(mode="json", by_alias=True),
                        "score": item.score,
                        "breakdown": item.breakdown.model_dump(mode="json", exclude_none=True),
                    }
                    for item in results
                ]
            }
        )
