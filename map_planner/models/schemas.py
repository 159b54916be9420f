# map_planner/models/schemas.py

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


# ---------------- Places & Scores ----------------


class Candidate(BaseModel):
    """A place returned by the search provider, before scoring."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    user_ratings_total: Optional[int] = Field(
        default=None, ge=0, alias="userRatingsTotal"
    )
    types: List[str] = Field(default_factory=list)
    vicinity: str = ""
    price_level: Optional[int] = Field(default=None, ge=0, le=4, alias="priceLevel")
    open_now: Optional[bool] = Field(default=None, alias="openNow")
    location: Coordinates


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    quality: float
    diversity: Optional[float] = None
    persona: Optional[float] = None
    confidence: float
    total: float


class ScoredCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.total


# ---------------- Chat transcript ----------------


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: str = "{}"


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        """OpenAI-compatible message dict."""
        message: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        if self.tool_call_id is not None:
            message["tool_call_id"] = self.tool_call_id
        return message


# ---------------- Agent output ----------------

SuggestionType = Literal["add_attraction", "add_restaurant", "general_tip"]
Priority = Literal["must-see", "highly recommended", "hidden gem"]


class Suggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: SuggestionType
    reasoning: str
    attraction_name: Optional[str] = Field(default=None, alias="attractionName")
    priority: Optional[Priority] = None

    # Filled in by the enricher
    place: Optional[Candidate] = None
    score: Optional[float] = None
    breakdown: Optional[ScoreBreakdown] = None

    @model_validator(mode="after")
    def _require_name_for_places(self) -> "Suggestion":
        if self.type != "general_tip" and not self.attraction_name:
            raise ValueError(f"attractionName is required for {self.type}")
        return self


class AgentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    thinking: List[str] = Field(default_factory=list, alias="_thinking")
    suggestions: List[Suggestion]
    summary: str


# ---------------- Requests ----------------


class PlannedPlace(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = Field(default=None, alias="userRatingsTotal")
    types: List[str] = Field(default_factory=list)
    vicinity: str = ""
    price_level: Optional[int] = Field(default=None, alias="priceLevel")


class PlaceContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    planned_attractions: List[PlannedPlace] = Field(
        default_factory=list, alias="plannedAttractions"
    )
    planned_restaurants: List[PlannedPlace] = Field(
        default_factory=list, alias="plannedRestaurants"
    )


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class SuggestAttractionsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place: PlaceContext
    map_coordinates: Coordinates = Field(..., alias="mapCoordinates")
    conversation_history: List[ConversationMessage] = Field(
        default_factory=list, alias="conversationHistory"
    )
    user_message: Optional[str] = Field(default=None, alias="userMessage")
    personas: List[str] = Field(default_factory=list)


class NearbySearchRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius: int = Field(default=2000, ge=100, le=50000)
    limit: int = Field(default=10, ge=1, le=50)
    personas: List[str] = Field(default_factory=list)
