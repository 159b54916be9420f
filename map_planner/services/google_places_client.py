# map_planner/services/google_places_client.py

from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from map_planner.core.errors import (
    ConfigurationError,
    InvalidRequestError,
    NoResultsError,
    NotFoundError,
    ProviderError,
)
from map_planner.core.logging_config import logger
from map_planner.models.schemas import Candidate, Coordinates
from map_planner.services.place_types import (
    BLOCKED_PLACE_TYPES,
    MAX_SEARCH_RADIUS,
    MIN_RATING_COUNT,
    MIN_SEARCH_RADIUS,
    is_restaurant_search,
)

NEARBY_SEARCH_URL = "https://places.googleapis.com/v1/places:searchNearby"
TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"

NEARBY_FIELD_MASK = (
    "places.id,places.displayName,places.types,places.location,places.rating,"
    "places.userRatingCount,places.priceLevel,places.currentOpeningHours,"
    "places.shortFormattedAddress"
)

PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": 0,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}


class SearchClient(Protocol):
    async def nearby_search(
        self, lat: float, lng: float, radius: int, types: Sequence[str]
    ) -> List[Candidate]:
        ...

    async def text_search(self, query: str) -> Candidate:
        ...


def validate_search_area(lat: float, lng: float, radius: float) -> None:
    if not (MIN_SEARCH_RADIUS <= radius <= MAX_SEARCH_RADIUS):
        raise InvalidRequestError(
            f"Radius must be between {MIN_SEARCH_RADIUS} and {MAX_SEARCH_RADIUS} meters"
        )
    if not (-90 <= lat <= 90):
        raise InvalidRequestError("Latitude must be between -90 and 90")
    if not (-180 <= lng <= 180):
        raise InvalidRequestError("Longitude must be between -180 and 180")


class GooglePlacesClient:
    """
    Thin async client over the Google Places API.

    nearby_search -> Places API (New) `places:searchNearby`
    text_search   -> legacy Text Search JSON endpoint
    """

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 10.0,
        require_ratings: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.require_ratings = require_ratings
        self._transport = transport

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("Google Maps API key is missing")
        return self.api_key

    # ---------------- Nearby Search ----------------

    async def nearby_search(
        self, lat: float, lng: float, radius: int, types: Sequence[str]
    ) -> List[Candidate]:
        api_key = self._require_api_key()
        validate_search_area(lat, lng, radius)

        body = {
            "includedTypes": list(types),
            "maxResultCount": 20,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": radius,
                }
            },
        }
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": api_key,
            "X-Goog-FieldMask": NEARBY_FIELD_MASK,
        }

        data = await self._request("POST", NEARBY_SEARCH_URL, json=body, headers=headers)

        places = data.get("places") or []
        if not isinstance(places, list):
            raise ProviderError("Invalid API response: 'places' is not a list")

        restaurants = is_restaurant_search(types)
        search_type = "restaurants" if restaurants else "attractions"

        candidates: List[Candidate] = []
        seen = set()
        for place in places:
            candidate = self._candidate_from_nearby(place, restaurants)
            if candidate is None or candidate.id in seen:
                continue
            seen.add(candidate.id)
            candidates.append(candidate)

        logger.info(
            f"Places nearby search ({search_type}) @ ({lat}, {lng}) r={radius}: "
            f"{len(places)} raw, {len(candidates)} kept"
        )

        if not candidates:
            raise NoResultsError(lat, lng, search_type)

        return candidates

    def _candidate_from_nearby(
        self, place: Dict[str, Any], restaurants: bool
    ) -> Optional[Candidate]:
        types = place.get("types") or []
        if not restaurants and any(t in BLOCKED_PLACE_TYPES for t in types):
            return None

        rating = place.get("rating")
        count = place.get("userRatingCount")
        if not rating or not count or count < MIN_RATING_COUNT:
            return None

        location = place.get("location") or {}
        if "latitude" not in location or "longitude" not in location:
            return None

        try:
            return Candidate(
                id=place["id"],
                name=(place.get("displayName") or {}).get("text") or "Unknown",
                rating=rating,
                user_ratings_total=count,
                types=types,
                vicinity=place.get("shortFormattedAddress") or "",
                price_level=PRICE_LEVELS.get(place.get("priceLevel")),
                open_now=(place.get("currentOpeningHours") or {}).get("openNow"),
                location=Coordinates(lat=location["latitude"], lng=location["longitude"]),
            )
        except (KeyError, ValueError) as exc:
            logger.warning(f"Skipping malformed place in nearby search: {exc}")
            return None

    # ---------------- Text Search ----------------

    async def text_search(self, query: str) -> Candidate:
        api_key = self._require_api_key()
        query = (query or "").strip()
        if not query:
            raise InvalidRequestError("Text search query must not be empty")

        data = await self._request(
            "GET", TEXT_SEARCH_URL, params={"query": query, "key": api_key}
        )

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            message = data.get("error_message") or f"Text Search API error: {status}"
            logger.error(f"Places text search failed for {query!r}: {message}")
            raise ProviderError(message)

        results = data.get("results") or []
        if not results:
            logger.info(f"Places text search found nothing for {query!r}")
            raise NotFoundError(query)

        first = results[0]
        location = (first.get("geometry") or {}).get("location") or {}
        if "lat" not in location or "lng" not in location:
            raise NotFoundError(query)

        if self.require_ratings and (
            not first.get("rating") or not first.get("user_ratings_total")
        ):
            raise NotFoundError(query)

        try:
            candidate = Candidate(
                id=first["place_id"],
                name=first["name"],
                rating=first.get("rating"),
                user_ratings_total=first.get("user_ratings_total"),
                types=first.get("types") or [],
                vicinity=first.get("vicinity") or first.get("formatted_address") or "",
                price_level=first.get("price_level"),
                open_now=(first.get("opening_hours") or {}).get("open_now"),
                location=Coordinates(lat=location["lat"], lng=location["lng"]),
            )
        except (KeyError, ValueError) as exc:
            raise ProviderError(f"Invalid API response: {exc}", exc) from exc

        logger.info(f"Places text search {query!r} -> {candidate.name!r} ({candidate.id})")
        return candidate

    # ---------------- HTTP ----------------

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"Places API returned {exc.response.status_code}: {exc.response.text[:500]}"
            )
            raise ProviderError(
                f"Places API error: {exc.response.status_code}", exc
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Places API request failed: {exc}")
            raise ProviderError(f"Network error: {exc}", exc) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("Failed to parse API response", exc) from exc

        if not isinstance(data, dict):
            raise ProviderError("Invalid API response: expected a JSON object")
        return data
