# map_planner/agents/suggestion_agent.py

import json
from typing import List, Optional

from map_planner.agents.enricher import SuggestionEnricher
from map_planner.agents.places_agent import PlacesAgent
from map_planner.agents.response_validator import validate_agent_response
from map_planner.agents.tool_executor import AGENT_TOOLS, ToolExecutor
from map_planner.core.errors import ModelResponseError
from map_planner.core.logging_config import logger
from map_planner.models.schemas import (
    AgentResponse,
    ChatMessage,
    SuggestAttractionsRequest,
)
from map_planner.services.openrouter_client import ChatClient, ChatCompletionResponse
from map_planner.services.text_search_cache import TextSearchCache

MAX_TOOL_CALL_ITERATIONS = 5
DEFAULT_USER_MESSAGE = "Suggest new attractions and restaurants for this place"

SYSTEM_PROMPT = """You are an expert local attractions assistant. Your role is to suggest attractions and restaurants near specific locations based on user preferences.

## Your Task

You must use the searchAttractions and searchRestaurants tools to discover real places near the given location, then provide structured recommendations that help different types of travelers make informed decisions.

## Instructions

1. **Research Phase**: Use the searchAttractions and searchRestaurants tools to find real, highly-rated places near the location.

2. **Analysis Phase**: Before providing recommendations, plan inside the "_thinking" array:
   - **Tool Results Summary**: the key attractions and restaurants you found, with names, ratings and key features
   - **Tiered Recommendation Strategy**: sort options into three priority levels:
     * **must-see**: iconic, highly-rated, or central to the destination's identity
     * **highly recommended**: excellent options worth visiting if there is time
     * **hidden gem**: lesser-known but exceptional places for authentic local experiences

3. **Recommendation Phase**: Select 5 of the best attractions with at least 1 hidden gem and 2 of the best restaurants from your tool results.

## Critical Requirements

- You MUST use the searchAttractions and searchRestaurants tools before making any suggestions
- You MUST only suggest places that appear in your tool results
- Do NOT suggest places that are already in the travel plan
- For attraction and restaurant suggestions, you MUST put the exact name from the tool results in "attractionName"
- For attraction and restaurant suggestions, you MUST include "priority": one of "must-see", "highly recommended", "hidden gem"
- You MUST include at least 1 hidden gem and at most 2 restaurants
- You MUST respond with ONLY valid JSON after your analysis - no additional text before or after

## Output Format

{
  "_thinking": ["step 1 of your reasoning", "step 2 of your reasoning", "etc."],
  "suggestions": [
    {
      "type": "add_attraction",
      "reasoning": "why this attraction fits specific traveler types",
      "attractionName": "Exact Place Name from tool results",
      "priority": "must-see"
    },
    {
      "type": "add_restaurant",
      "reasoning": "why this restaurant is recommended and for which travelers",
      "attractionName": "Exact Restaurant Name from tool results",
      "priority": "highly recommended"
    },
    {
      "type": "general_tip",
      "reasoning": "practical travel advice or timing tips (no attractionName needed)"
    }
  ],
  "summary": "brief overview of recommendations and key insights"
}
"""


class SuggestionAgent:
    """
    Orchestrates one suggestion request:
      - seeds a transcript (system prompt, history, plan context)
      - loops model call -> tool batch until the model stops calling tools
        or the iteration cap is hit
      - validates the final JSON and enriches it with scored place data

    The transcript and the scored-places map live only for one call.
    """

    def __init__(
        self,
        chat_client: ChatClient,
        places_agent: PlacesAgent,
        text_search: Optional[TextSearchCache] = None,
        max_tool_iterations: int = MAX_TOOL_CALL_ITERATIONS,
        tool_concurrency: int = 3,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ) -> None:
        self.chat_client = chat_client
        self.places_agent = places_agent
        self.text_search = text_search
        self.max_tool_iterations = max_tool_iterations
        self.tool_concurrency = tool_concurrency
        self.temperature = temperature
        self.max_tokens = max_tokens

    # ---------------- Entry point ----------------

    async def suggest(self, request: SuggestAttractionsRequest) -> AgentResponse:
        messages = self._build_initial_messages(request)
        executor = ToolExecutor(
            self.places_agent,
            request.map_coordinates,
            personas=request.personas,
            text_search=self.text_search,
            concurrency=self.tool_concurrency,
        )

        logger.info(
            f"SuggestionAgent: start for place={request.place.name!r} "
            f"@ ({request.map_coordinates.lat}, {request.map_coordinates.lng}), "
            f"history={len(request.conversation_history)}"
        )

        response = await self._call_model(messages)

        iterations = 0
        while response.tool_calls and iterations < self.max_tool_iterations:
            iterations += 1
            response = await self._run_tool_iteration(messages, response, executor, iterations)

        if response.tool_calls:
            logger.warning(
                f"SuggestionAgent: tool-call cap ({self.max_tool_iterations}) reached, "
                "forcing final answer"
            )

        if not response.content or not response.content.strip():
            raise ModelResponseError("No content in final response")

        validated = validate_agent_response(response.content)

        enricher = SuggestionEnricher(
            executor.scored, self.text_search, concurrency=self.tool_concurrency
        )
        suggestions = await enricher.enrich(validated)

        logger.info(
            f"SuggestionAgent: done after {iterations} tool iteration(s), "
            f"{len(suggestions)}/{len(validated.suggestions)} suggestions kept"
        )
        return validated.model_copy(update={"suggestions": suggestions})

    # ---------------- Loop steps ----------------

    async def _call_model(self, messages: List[ChatMessage]) -> ChatCompletionResponse:
        return await self.chat_client.chat_completion(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            tools=AGENT_TOOLS,
        )

    async def _run_tool_iteration(
        self,
        messages: List[ChatMessage],
        response: ChatCompletionResponse,
        executor: ToolExecutor,
        iteration: int,
    ) -> ChatCompletionResponse:
        tool_calls = response.tool_calls
        logger.info(
            f"SuggestionAgent: iteration {iteration}, running tools "
            f"{[call.name for call in tool_calls]}"
        )

        results = await executor.execute_batch(tool_calls)

        # The assistant turn must precede its tool results, and every result of
        # the batch is appended before the next model call.
        messages.append(
            ChatMessage(role="assistant", content=response.content, tool_calls=tool_calls)
        )
        for call, result in zip(tool_calls, results):
            messages.append(ChatMessage(role="tool", tool_call_id=call.id, content=result))

        return await self._call_model(messages)

    # ---------------- Transcript seeding ----------------

    def _build_initial_messages(self, request: SuggestAttractionsRequest) -> List[ChatMessage]:
        plan_context = self._build_plan_context(request)
        user_message = (request.user_message or "").strip().rstrip(".") or DEFAULT_USER_MESSAGE

        messages = [ChatMessage(role="system", content=SYSTEM_PROMPT)]
        messages.extend(
            ChatMessage(role=msg.role, content=msg.content)
            for msg in request.conversation_history
        )
        messages.append(
            ChatMessage(
                role="user",
                content=f"Here is my current travel plan:\n\n{plan_context}\n\n{user_message}.",
            )
        )
        return messages

    @staticmethod
    def _build_plan_context(request: SuggestAttractionsRequest) -> str:
        place = request.place
        context = {
            "place": {
                "id": place.id,
                "name": place.name,
                "plannedAttractions": [
                    {
                        "name": a.name,
                        "rating": a.rating,
                        "userRatingsTotal": a.user_ratings_total,
                        "types": a.types,
                    }
                    for a in place.planned_attractions
                ],
                "plannedRestaurants": [
                    {
                        "name": r.name,
                        "rating": r.rating,
                        "userRatingsTotal": r.user_ratings_total,
                        "types": r.types,
                        "priceLevel": r.price_level,
                    }
                    for r in place.planned_restaurants
                ],
            }
        }
        if request.personas:
            context["personas"] = request.personas
        return json.dumps(context, indent=2)
