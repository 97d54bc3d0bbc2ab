from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    scoring_debounce_ms: int
    scoring_request_timeout_seconds: float
    scoring_cache_size: int
    scoring_pending_limit: int
    scoring_min_text_length: int
    scoring_max_text_length: int
    scoring_config_path: str | None


settings = Settings(
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    scoring_debounce_ms=_get_env_int("SCORING_DEBOUNCE_MS", 500),
    scoring_request_timeout_seconds=_get_env_float("SCORING_REQUEST_TIMEOUT_SECONDS", 30.0),
    scoring_cache_size=_get_env_int("SCORING_CACHE_SIZE", 10),
    scoring_pending_limit=_get_env_int("SCORING_PENDING_LIMIT", 32),
    scoring_min_text_length=_get_env_int("SCORING_MIN_TEXT_LENGTH", 50),
    scoring_max_text_length=_get_env_int("SCORING_MAX_TEXT_LENGTH", 100_000),
    scoring_config_path=_get_env("SCORING_CONFIG_PATH"),
)

if settings.scoring_cache_size <= 0:
    raise RuntimeError("SCORING_CACHE_SIZE must be greater than 0.")

if settings.scoring_min_text_length > settings.scoring_max_text_length:
    raise RuntimeError("SCORING_MIN_TEXT_LENGTH cannot exceed SCORING_MAX_TEXT_LENGTH.")
