"""Relay settings and environment loading utilities."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

DEFAULT_RATE_LIMIT_MESSAGE = (
    "You've reached the limit of journal reflections for now. "
    "Please try again in a few hours."
)


def _load_dotenv() -> None:
    env_path = Path(".env")
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip().strip("\"'"))


_load_dotenv()


def _validate_non_empty(value: Optional[str], name: str) -> str:
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration derived from environment variables."""

    gemini_api_key: str
    port: int = 3000
    primary_model: str = "gemini-1.5-flash-latest"
    fallback_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    request_timeout_seconds: int = 30
    quota_limit: int = 20
    quota_window_seconds: int = 6 * 60 * 60
    quota_max_clients: int = 10_000
    trust_proxy: bool = False
    rate_limit_message: str = DEFAULT_RATE_LIMIT_MESSAGE

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = _validate_non_empty(os.getenv("GEMINI_API_KEY"), "GEMINI_API_KEY")

        return cls(
            gemini_api_key=api_key,
            port=_int_env("PORT", 3000),
            primary_model=os.getenv("GEMINI_MODEL") or cls.primary_model,
            fallback_model=os.getenv("GEMINI_FALLBACK_MODEL") or cls.fallback_model,
            gemini_base_url=(os.getenv("GEMINI_BASE_URL") or cls.gemini_base_url).rstrip("/"),
            request_timeout_seconds=_int_env("GEMINI_TIMEOUT_SECONDS", 30),
            quota_limit=_int_env("QUOTA_LIMIT", 20),
            quota_window_seconds=_int_env("QUOTA_WINDOW_SECONDS", 6 * 60 * 60),
            quota_max_clients=_int_env("QUOTA_MAX_CLIENTS", 10_000),
            trust_proxy=_bool_env("TRUST_PROXY"),
            rate_limit_message=os.getenv("RATE_LIMIT_MESSAGE") or DEFAULT_RATE_LIMIT_MESSAGE,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return cached relay settings."""

    return Settings.from_env()
