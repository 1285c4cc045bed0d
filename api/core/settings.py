"""
Environment-driven settings.

Every value is read on call so tests can override it with monkeypatch.setenv.
"""

from __future__ import annotations

import os

STORE_POSTGRES = "postgres"
STORE_MEMORY = "memory"

DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def database_url() -> str:
    return _env_str("DATABASE_URL")


def user_store_backend() -> str:
    """
    Which row store backs the user repository: "postgres" (default) or "memory".
    """
    backend = _env_str("USER_STORE", STORE_POSTGRES).lower()
    if backend not in {STORE_POSTGRES, STORE_MEMORY}:
        raise ValueError(f"Unsupported USER_STORE: {backend!r}")
    return backend


def db_pool_min_size() -> int:
    return _env_int("DB_POOL_MIN_SIZE", 1)


def db_pool_max_size() -> int:
    return _env_int("DB_POOL_MAX_SIZE", 5)


def db_command_timeout() -> int:
    return _env_int("DB_COMMAND_TIMEOUT", 30)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def static_dir() -> str:
    return _env_str("STATIC_DIR")


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
