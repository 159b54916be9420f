# map_planner/scoring/personas.py

from typing import FrozenSet, Iterable

GENERAL_TOURIST = "general_tourist"
FOODIE_TRAVELER = "foodie_traveler"

# Place types each persona prefers (Google Places "Table A" types).
PERSONA_FILTER_TYPES = {
    GENERAL_TOURIST: frozenset(
        ["tourist_attraction", "museum", "park", "historical_landmark", "plaza", "visitor_center"]
    ),
    "nature_lover": frozenset(
        ["national_park", "state_park", "hiking_area", "botanical_garden", "wildlife_park", "wildlife_refuge"]
    ),
    "art_enthusiast": frozenset(
        [
            "art_gallery",
            "museum",
            "sculpture",
            "performing_arts_theater",
            "opera_house",
            "philharmonic_hall",
            "cultural_landmark",
            "historical_place",
        ]
    ),
    FOODIE_TRAVELER: frozenset(
        [
            "restaurant",
            "cafe",
            "coffee_shop",
            "fine_dining_restaurant",
            "food_court",
            "pub",
            "wine_bar",
            "bakery",
        ]
    ),
    "adventure_seeker": frozenset(
        [
            "adventure_sports_center",
            "amusement_park",
            "hiking_area",
            "off_roading_area",
            "roller_coaster",
            "water_park",
            "ski_resort",
            "national_park",
        ]
    ),
    "digital_nomad": frozenset(
        ["cafe", "coffee_shop", "internet_cafe", "library", "hotel", "hostel", "guest_house"]
    ),
    "history_buff": frozenset(
        ["historical_place", "historical_landmark", "monument", "museum", "cultural_landmark"]
    ),
    "photography_enthusiast": frozenset(
        [
            "observation_deck",
            "garden",
            "plaza",
            "beach",
            "art_gallery",
            "sculpture",
            "historical_landmark",
            "wildlife_park",
            "wildlife_refuge",
            "botanical_garden",
        ]
    ),
}


def normalize_personas(personas: Iterable[str] | None) -> list[str]:
    if not personas:
        return []
    return [p.strip().lower() for p in personas if p and p.strip()]


def persona_scoring_enabled(personas: Iterable[str] | None) -> bool:
    """
    Persona weighting applies when at least one persona is chosen and none of
    them is the general tourist (who has no specific preference to reward).
    """
    normalized = normalize_personas(personas)
    return bool(normalized) and GENERAL_TOURIST not in normalized


def preferred_types(persona: str) -> FrozenSet[str]:
    # Restaurants are scored separately, so the foodie has nothing to boost here.
    if persona == FOODIE_TRAVELER:
        return frozenset()
    return PERSONA_FILTER_TYPES.get(persona, frozenset())
