"""
Shared builders and in-memory collaborators for the test suite.
"""

import asyncio
import json
from typing import Dict, List, Optional, Sequence

from map_planner.core.errors import NotFoundError
from map_planner.models.schemas import Candidate, ChatMessage, Coordinates, ToolCall
from map_planner.services.openrouter_client import ChatCompletionResponse
from map_planner.services.place_types import RESTAURANT_TYPES


def make_candidate(
    id: str = "test-place-id",
    name: Optional[str] = None,
    rating: Optional[float] = 4.5,
    count: Optional[int] = 100,
    types: Sequence[str] = ("museum",),
    **overrides,
) -> Candidate:
    return Candidate(
        id=id,
        name=name or f"Place {id}",
        rating=rating,
        user_ratings_total=count,
        types=list(types),
        vicinity="Test Location",
        location=Coordinates(lat=0, lng=0),
        **overrides,
    )


class FakeSearchClient:
    """Search collaborator returning canned candidates and recording calls."""

    def __init__(
        self,
        attractions: Optional[List[Candidate]] = None,
        restaurants: Optional[List[Candidate]] = None,
        by_name: Optional[Dict[str, Candidate]] = None,
        nearby_error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.attractions = attractions or []
        self.restaurants = restaurants or []
        self.by_name = by_name or {}
        self.nearby_error = nearby_error
        self.delay = delay
        self.nearby_calls: List[tuple] = []
        self.text_calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        if self.delay:
            await asyncio.sleep(self.delay)

    async def nearby_search(self, lat, lng, radius, types):
        self.nearby_calls.append((lat, lng, radius, tuple(types)))
        try:
            await self._enter()
            if self.nearby_error is not None:
                raise self.nearby_error
            if tuple(types) == RESTAURANT_TYPES:
                return list(self.restaurants)
            return list(self.attractions)
        finally:
            self.in_flight -= 1

    async def text_search(self, query):
        self.text_calls.append(query)
        try:
            await self._enter()
            if query not in self.by_name:
                raise NotFoundError(query)
            return self.by_name[query]
        finally:
            self.in_flight -= 1


class ScriptedChatClient:
    """
    Chat collaborator that replays scripted responses. Once the script is
    exhausted the last response is repeated.
    """

    def __init__(self, responses: List[ChatCompletionResponse]) -> None:
        self.responses = responses
        self.calls: List[List[ChatMessage]] = []
        self.tools_seen: List[Optional[list]] = []

    async def chat_completion(self, messages, temperature=None, max_tokens=None, tools=None):
        self.calls.append(list(messages))
        self.tools_seen.append(tools)
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        return self.responses[index]


def tool_call_response(*calls: ToolCall, content: Optional[str] = None) -> ChatCompletionResponse:
    return ChatCompletionResponse(
        content=content, tool_calls=list(calls), finish_reason="tool_calls"
    )


def final_response(payload) -> ChatCompletionResponse:
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return ChatCompletionResponse(content=content, finish_reason="stop")


def search_call(call_id: str, name: str = "searchAttractions", **args) -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=json.dumps(args or {"lat": 1.0, "lng": 2.0}))
