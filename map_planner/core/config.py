# map_planner/core/config.py

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # LLM provider (OpenAI-compatible chat completions, OpenRouter by default)
    OPENROUTER_API_KEY: str | None = None
    OPENROUTER_MODEL: str | None = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Google Places
    GOOGLE_MAPS_API_KEY: str | None = None
    PLACES_TIMEOUT_SECONDS: float = 10.0

    # Suggestion agent
    AGENT_MAX_TOOL_ITERATIONS: int = 5
    AGENT_TOOL_CONCURRENCY: int = 3
    AGENT_TEMPERATURE: float = 0.7
    AGENT_MAX_TOKENS: int = 8192

    # Text-search cache used when enriching suggestions
    TEXT_SEARCH_CACHE_CAPACITY: int = 200
    TEXT_SEARCH_CACHE_TTL_SECONDS: float = 3600.0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
