"""
Environment-driven configuration.

Every setting is read through a small function so tests can flip env vars
with monkeypatch and see the change without reloading modules.
"""

from __future__ import annotations

import os

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_STATIC_DIR = "public"


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str) -> bool | None:
    raw = os.environ.get(name, "").strip().lower()
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return None


def app_env() -> str:
    return _env_str("APP_ENV", "development").lower()


def is_production() -> bool:
    return app_env() == "production"


def port() -> int:
    return env_int("PORT", DEFAULT_PORT)


def host() -> str:
    return _env_str("HOST", DEFAULT_HOST)


def database_ssl_override() -> bool | None:
    return env_bool("DATABASE_SSL")


def pool_min_size() -> int:
    return max(env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(env_int("DB_POOL_MAX_SIZE", 10), pool_min_size(), 1)


def command_timeout() -> int:
    return env_int("DB_COMMAND_TIMEOUT", 30)


def static_dir() -> str:
    return _env_str("STATIC_DIR", DEFAULT_STATIC_DIR)


def cors_origins() -> list[str]:
    raw = _env_str("CORS_ORIGINS", "*")
    origins = [item.strip() for item in raw.split(",") if item.strip()]
    return origins or ["*"]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
