# map_planner/core/errors.py

from typing import Any, Optional


class PlannerError(Exception):
    """
    Base class for every failure the planner reports on purpose.

    `code` is a short stable tag; `public_message` is what the HTTP layer may
    show to end users (raw provider bodies never go there).
    """

    code = "planner_error"
    public_message = "Request failed"

    def __init__(self, message: str, cause: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidRequestError(PlannerError):
    code = "invalid_request"
    public_message = "Invalid request"


class ConfigurationError(PlannerError):
    code = "configuration_error"
    public_message = "Server configuration error"


class ProviderError(PlannerError):
    """Network / HTTP level failure talking to the model or the maps provider."""

    code = "provider_error"
    public_message = "Upstream provider error"


class ModelResponseError(PlannerError):
    """The model gave no usable terminal content, or it failed validation."""

    code = "model_response_error"
    public_message = "The AI model returned an unusable response"


class InvalidToolCallError(PlannerError):
    code = "invalid_tool_call"
    public_message = "The AI model issued an invalid tool call"

    def __init__(
        self,
        message: str,
        tool_name: str,
        tool_call_id: Optional[str] = None,
        cause: Optional[Any] = None,
    ) -> None:
        super().__init__(message, cause)
        self.tool_name = tool_name
        self.tool_call_id = tool_call_id

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["tool"] = self.tool_name
        return payload


class NotFoundError(PlannerError):
    """A text search for a named place had no match."""

    code = "not_found"
    public_message = "Place not found"

    def __init__(self, query: str) -> None:
        super().__init__(f"No place found for {query!r}")
        self.query = query

    @property
    def public_detail(self) -> str:
        return f'No results found for "{self.query}"'


class NoResultsError(PlannerError):
    """A nearby search came back empty."""

    code = "no_results"
    public_message = "No places found"

    def __init__(self, lat: float, lng: float, search_type: str = "attractions") -> None:
        super().__init__(f"No {search_type} found near ({lat}, {lng})")
        self.lat = lat
        self.lng = lng
        self.search_type = search_type

    @property
    def public_detail(self) -> str:
        return self.message
