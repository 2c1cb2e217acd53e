from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # External profile API
    profile_api_base_url: str
    http_timeout_seconds: int

    # Callout execution
    callout_concurrency: int
    pull_max_external_id: int

    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # Logging/tracing
    callout_trace: bool = False
    callout_log_path: str = "logs/callouts.jsonl"

    @property
    def users_url(self) -> str:
        return f"{self.profile_api_base_url.rstrip('/')}/users"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    base_url = os.getenv("PROFILE_API_BASE_URL", "https://dummyjson.com").strip()
    if not base_url:
        raise RuntimeError("PROFILE_API_BASE_URL must not be empty")

    concurrency = int(os.getenv("CALLOUT_CONCURRENCY", "4"))
    if concurrency < 1:
        raise RuntimeError("CALLOUT_CONCURRENCY must be >= 1")

    return Settings(
        profile_api_base_url=base_url,
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "20")),
        callout_concurrency=concurrency,
        pull_max_external_id=int(os.getenv("PULL_MAX_EXTERNAL_ID", "100")),
        db_path=os.getenv("DB_PATH", "people.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        callout_trace=_as_bool(os.getenv("CALLOUT_TRACE")),
        callout_log_path=os.getenv("CALLOUT_LOG_PATH", "logs/callouts.jsonl"),
    )
