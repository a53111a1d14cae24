"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "event-match"
    debug: bool = False
    log_level: str = "INFO"

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8888
    max_request_bytes: int = 1024

    # Matcher (all times in milliseconds, distances in metres)
    max_request_skew_ms: int = 3000
    max_clock_skew_ms: int = 100
    max_queue_size: int = 1000
    max_distance_m: float = 100.0
    interval_ms: int = 400

    model_config = {"env_prefix": "EVENT_MATCH_"}


settings = Settings()
