# map_planner/agents/enricher.py

import asyncio
from typing import Dict, List, Optional

from map_planner.core.errors import PlannerError
from map_planner.core.logging_config import logger
from map_planner.models.schemas import AgentResponse, Candidate, ScoredCandidate, Suggestion
from map_planner.services.text_search_cache import TextSearchCache

DEFAULT_ENRICH_CONCURRENCY = 3


class SuggestionEnricher:
    """
    Attaches verified place data and deterministic scores to the model's
    suggestions.

    Place names are matched exactly (case-sensitive): first against the
    places scored during this turn, then through the text-search cache when
    one is configured. Suggestions that cannot be resolved are dropped.
    """

    def __init__(
        self,
        scored: Dict[str, ScoredCandidate],
        text_search: Optional[TextSearchCache] = None,
        concurrency: int = DEFAULT_ENRICH_CONCURRENCY,
    ) -> None:
        self.scored = scored
        self.text_search = text_search
        self.concurrency = concurrency

    async def enrich(self, response: AgentResponse) -> List[Suggestion]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(suggestion: Suggestion) -> Optional[Suggestion]:
            async with semaphore:
                return await self._enrich_one(suggestion)

        results = await asyncio.gather(*(run(s) for s in response.suggestions))
        enriched = [s for s in results if s is not None]

        dropped = len(response.suggestions) - len(enriched)
        if dropped:
            logger.warning(f"Enricher: dropped {dropped} unresolvable suggestion(s)")
        return enriched

    async def _enrich_one(self, suggestion: Suggestion) -> Optional[Suggestion]:
        if suggestion.type == "general_tip":
            return suggestion

        name = suggestion.attraction_name
        if not name:
            return None

        candidate = await self._resolve(name)
        if candidate is None:
            logger.debug(f"Enricher: no place found for {name!r}, dropping suggestion")
            return None

        scored = self.scored.get(candidate.name)
        return suggestion.model_copy(
            update={
                "place": candidate,
                "score": scored.score if scored else None,
                "breakdown": scored.breakdown if scored else None,
            }
        )

    async def _resolve(self, name: str) -> Optional[Candidate]:
        scored = self.scored.get(name)
        if scored is not None:
            return scored.candidate

        if self.text_search is None:
            return None

        try:
            return await self.text_search.get(name)
        except PlannerError as exc:
            logger.debug(f"Enricher: text search for {name!r} failed: {exc.message}")
            return None
