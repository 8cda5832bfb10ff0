from __future__ import annotations

from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from core.exceptions import ConfigurationError

DEFAULT_QUERY = "bitcoin min_faves:1000"
DEFAULT_AMOUNT = 10000
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Settings(BaseSettings):
    # Gopher data API
    GOPHER_CLIENT_TOKEN: str = ""
    GOPHER_CLIENT_URL: str = "https://data.gopher-ai.com/api/v1"
    GOPHER_CLIENT_TIMEOUT: float = 60.0
    JOB_POLL_INTERVAL: float = 1.0
    JOB_MAX_WAIT: float = 300.0

    # Collection
    QUERY: str = DEFAULT_QUERY
    AMOUNT: int = DEFAULT_AMOUNT
    API_MAX_RESULTS: int = 100
    REQUEST_DELAY: float = 1.0
    TREND_QUERY_FILTER: str = "min_faves:100"

    # Output
    DATA_DIR: str = "data"
    RUN_LOG_URL: str = "sqlite:///./collection_runs.db"

    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }

    @field_validator("QUERY")
    @classmethod
    def _blank_query_uses_default(cls, v: str) -> str:
        return v if v.strip() else DEFAULT_QUERY

    @field_validator("AMOUNT", "API_MAX_RESULTS")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"must be greater than 0, got: {v}")
        return v

    @field_validator("GOPHER_CLIENT_TIMEOUT", "JOB_MAX_WAIT")
    @classmethod
    def _positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be greater than 0, got: {v}")
        return v

    @field_validator("REQUEST_DELAY", "JOB_POLL_INTERVAL")
    @classmethod
    def _non_negative_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"must not be negative, got: {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper() or "INFO"
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}, got: {v}")
        return level


def load_settings(**overrides: Any) -> Settings:
    """Build the run configuration once, at startup.

    Keyword overrides (e.g. from command-line options) take precedence over
    the environment and ``.env``. Any invalid value, or a missing token,
    raises ``ConfigurationError`` so the caller can abort before the first
    request.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc

    if not settings.GOPHER_CLIENT_TOKEN.strip():
        raise ConfigurationError(
            "GOPHER_CLIENT_TOKEN is not set. Please set it in your .env file"
        )
    return settings
