# map_planner/agents/response_validator.py

import json
from typing import Any, Dict

from pydantic import ValidationError

from map_planner.core.errors import ModelResponseError
from map_planner.models.schemas import AgentResponse


def extract_json(raw: str) -> Dict[str, Any]:
    """
    Parse the model's final content as a JSON object.

    Models sometimes wrap the object in prose or a ```json fence; if the
    trimmed text does not parse, retry on the span from the first "{" to the
    last "}".
    """
    text = (raw or "").strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ModelResponseError("Invalid response format: no JSON object found")

    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ModelResponseError("Invalid response format", exc) from exc


def format_validation_errors(exc: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def validate_agent_response(raw: str) -> AgentResponse:
    payload = extract_json(raw)

    try:
        return AgentResponse.model_validate(payload)
    except ValidationError as exc:
        raise ModelResponseError(
            f"Schema validation failed: {format_validation_errors(exc)}", exc
        ) from exc
