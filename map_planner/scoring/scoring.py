# map_planner/scoring/scoring.py
"""
Deterministic ranking of search results.

Every function here is pure: the same candidates and personas always give the
same breakdowns in the same order. Missing data never raises, it degrades to
the documented defaults (quality 0, confidence 40, diversity 100).
"""

import math
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from map_planner.models.schemas import Candidate, ScoreBreakdown, ScoredCandidate
from map_planner.scoring.personas import (
    normalize_personas,
    persona_scoring_enabled,
    preferred_types,
)

ATTRACTION_WEIGHTS_WITH_PERSONA = {
    "quality": 0.5,
    "persona": 0.1,
    "diversity": 0.2,
    "confidence": 0.2,
}

ATTRACTION_WEIGHTS = {
    "quality": 0.6,
    "diversity": 0.25,
    "confidence": 0.15,
}

RESTAURANT_WEIGHTS = {
    "quality": 0.7,
    "confidence": 0.3,
}

PERSONA_MATCH_SCORE = 100.0
PERSONA_BASELINE_SCORE = 10.0

SCORING_EXPLANATIONS = {
    "quality": {
        "title": "Quality Score",
        "description": [
            "Based on rating and review count",
            "Higher ratings with more reviews score better",
            "Formula: rating (60%) + log10(reviews) (40%)",
        ],
    },
    "persona": {
        "title": "Persona Score",
        "description": [
            "Matches your travel style preferences",
            "100 points if the place matches one of your personas",
            "10 points otherwise",
        ],
    },
    "diversity": {
        "title": "Diversity Score",
        "description": [
            "Rewards places with unique or rare types",
            "Based on the rarest type the place has",
        ],
    },
    "confidence": {
        "title": "Confidence Score",
        "description": [
            "Based on review volume reliability",
            "High confidence: >100 reviews",
            "Medium confidence: 21-100 reviews",
            "Low confidence: 20 reviews or fewer",
        ],
    },
}


def round_score(value: float) -> float:
    """Round half-up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(min(value, high), low)


def calculate_quality_score(candidate: Candidate) -> float:
    rating = candidate.rating
    count = candidate.user_ratings_total
    if not rating or not count or rating <= 0 or count <= 0:
        return 0.0

    rating_component = (rating / 5) * 60
    review_component = (math.log10(count + 1) / 5) * 40
    return min(rating_component + review_component, 100.0)


def calculate_confidence_score(candidate: Candidate) -> float:
    count = candidate.user_ratings_total
    if not count:
        return 40.0
    if count > 100:
        return 100.0
    if count > 20:
        return 70.0
    return 40.0


def build_type_frequency(candidates: Iterable[Candidate]) -> Counter:
    frequency: Counter = Counter()
    for candidate in candidates:
        frequency.update(candidate.types)
    return frequency


def calculate_diversity_score(candidate: Candidate, type_frequency: Dict[str, int]) -> float:
    max_frequency = max(type_frequency.values(), default=0)
    if max_frequency == 0 or not candidate.types:
        return 100.0

    # The rarest type decides, so one common tag does not sink a unique place.
    min_frequency = min(type_frequency.get(t, 0) for t in candidate.types)
    return _clamp(100 - (min_frequency / max_frequency) * 100)


def calculate_persona_score(candidate: Candidate, personas: Sequence[str]) -> float:
    types = set(candidate.types)
    for persona in personas:
        if types & preferred_types(persona):
            return PERSONA_MATCH_SCORE
    return PERSONA_BASELINE_SCORE


def _sort_by_score(scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
    # sorted() is stable: equal totals keep their input order.
    return sorted(scored, key=lambda item: item.breakdown.total, reverse=True)


def score_attractions(
    candidates: Sequence[Candidate],
    personas: Optional[Iterable[str]] = None,
) -> List[ScoredCandidate]:
    normalized = normalize_personas(personas)
    use_persona = persona_scoring_enabled(normalized)
    type_frequency = build_type_frequency(candidates)

    scored: List[ScoredCandidate] = []
    for candidate in candidates:
        quality = calculate_quality_score(candidate)
        diversity = calculate_diversity_score(candidate, type_frequency)
        confidence = calculate_confidence_score(candidate)
        persona: Optional[float] = None

        if use_persona:
            persona = calculate_persona_score(candidate, normalized)
            weights = ATTRACTION_WEIGHTS_WITH_PERSONA
            total = (
                quality * weights["quality"]
                + persona * weights["persona"]
                + diversity * weights["diversity"]
                + confidence * weights["confidence"]
            )
        else:
            weights = ATTRACTION_WEIGHTS
            total = (
                quality * weights["quality"]
                + diversity * weights["diversity"]
                + confidence * weights["confidence"]
            )

        breakdown = ScoreBreakdown(
            quality=round_score(quality),
            diversity=round_score(diversity),
            persona=round_score(persona) if persona is not None else None,
            confidence=round_score(confidence),
            total=round_score(_clamp(total)),
        )
        scored.append(ScoredCandidate(candidate=candidate, breakdown=breakdown))

    return _sort_by_score(scored)


def score_restaurants(candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
    scored: List[ScoredCandidate] = []
    for candidate in candidates:
        quality = calculate_quality_score(candidate)
        confidence = calculate_confidence_score(candidate)
        total = (
            quality * RESTAURANT_WEIGHTS["quality"]
            + confidence * RESTAURANT_WEIGHTS["confidence"]
        )

        breakdown = ScoreBreakdown(
            quality=round_score(quality),
            confidence=round_score(confidence),
            total=round_score(_clamp(total)),
        )
        scored.append(ScoredCandidate(candidate=candidate, breakdown=breakdown))

    return _sort_by_score(scored)


def describe_weights(kind: str, personas: Optional[Iterable[str]] = None) -> Dict[str, dict]:
    """Explanation entries (title, weight label, description) for one regime."""
    if kind == "restaurants":
        weights = RESTAURANT_WEIGHTS
    elif persona_scoring_enabled(personas):
        weights = ATTRACTION_WEIGHTS_WITH_PERSONA
    else:
        weights = ATTRACTION_WEIGHTS

    return {
        component: {
            **SCORING_EXPLANATIONS[component],
            "weight": f"{round(weight * 100)}% weight",
        }
        for component, weight in weights.items()
    }
