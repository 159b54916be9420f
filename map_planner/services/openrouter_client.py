# map_planner/services/openrouter_client.py

from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx
from pydantic import BaseModel, Field

from map_planner.core.errors import ConfigurationError, ModelResponseError, ProviderError
from map_planner.core.logging_config import logger
from map_planner.models.schemas import ChatMessage, ToolCall

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


class ChatCompletionResponse(BaseModel):
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class ChatClient(Protocol):
    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatCompletionResponse:
        ...


class OpenRouterClient:
    """
    Single request/response call to an OpenAI-compatible chat completions API
    (OpenRouter by default). No retries, no streaming.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str],
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = base_url.rstrip("/") + "/chat/completions"
        self.timeout = timeout
        self._transport = transport

    async def chat_completion(
        self,
        messages: Sequence[ChatMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatCompletionResponse:
        if not self.api_key:
            raise ConfigurationError("OpenRouter API key is missing")
        if not self.model:
            raise ConfigurationError("OpenRouter model is not configured")

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_wire() for m in messages],
            "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
            "max_tokens": DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(
            f"Calling chat completions: model={self.model}, messages={len(messages)}"
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(self.url, json=payload, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"Chat completions API error ({exc.response.status_code}) "
                f"model={self.model}: {exc.response.text[:500]}"
            )
            raise ProviderError(
                f"Chat completions API error ({exc.response.status_code})", exc
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(f"Chat completions request failed: {exc}")
            raise ProviderError("Failed to communicate with AI model", exc) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError("Failed to parse AI model response", exc) from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise ModelResponseError("No response choice returned from model")

        choice = choices[0]
        message = choice.get("message") or {}

        # Tool results are matched to calls by id, so a missing id gets a
        # synthetic one that is unique within the response.
        tool_calls = [
            ToolCall(
                id=call.get("id") or f"call_{index}",
                name=(call.get("function") or {}).get("name", ""),
                arguments=(call.get("function") or {}).get("arguments") or "{}",
            )
            for index, call in enumerate(message.get("tool_calls") or [])
            if call.get("type", "function") == "function"
        ]

        response = ChatCompletionResponse(
            content=message.get("content"),
            tool_calls=tool_calls,
            finish_reason=choice.get("finish_reason"),
            usage=data.get("usage"),
        )

        logger.debug(
            f"Chat completion received: has_content={bool(response.content)}, "
            f"tool_calls={len(response.tool_calls)}, finish_reason={response.finish_reason}"
        )
        return response
