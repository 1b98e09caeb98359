from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/tasks.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - HOST / PORT: bind address for the server (default 0.0.0.0:5000)
    - GEMINI_MODEL: generative model used by the AI proxy (default 'gemini-1.5-flash')
    - AI_TEMPERATURE: sampling temperature for the AI proxy (default 0.7)
    - AI_DEFAULT_MAX_TOKENS: token budget when a request omits maxTokens (default 2000)
    - LOG_LEVEL: logging level name (default 'INFO')
    """

    persistence_backend: str
    sqlite_db_path: str
    cors_allow_origins: List[str]
    host: str
    port: int
    gemini_model: str
    ai_temperature: float
    ai_default_max_tokens: int
    log_level: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_float(value: str, default: float) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    max_tokens = _parse_int(_get_env("AI_DEFAULT_MAX_TOKENS", "2000"), 2000)
    if max_tokens <= 0:
        max_tokens = 2000

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/tasks.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "5000"), 5000),
        gemini_model=_get_env("GEMINI_MODEL", "gemini-1.5-flash").strip(),
        ai_temperature=_parse_float(_get_env("AI_TEMPERATURE", "0.7"), 0.7),
        ai_default_max_tokens=max_tokens,
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
