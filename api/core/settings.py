"""
Environment-backed settings.

Values are read on every call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def pool_min_size() -> int:
    return max(env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(env_int("DB_POOL_MAX_SIZE", 5), 1, pool_min_size())


def command_timeout_s() -> float:
    return env_float("DB_COMMAND_TIMEOUT", 30.0)


def strict_missing() -> bool:
    """
    When true, operations on ids that match no row raise NotFound
    instead of succeeding as no-ops.
    """
    return env_bool("DASHBOARD_STRICT_MISSING", False)


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
