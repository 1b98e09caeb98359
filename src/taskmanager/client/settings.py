from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientSettings:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TASK_MANAGER_API_URL: base URL of the backend API (default 'http://localhost:5000/api')
    - TASK_MANAGER_TIMEOUT: per-request timeout in seconds (default 60; AI calls are slow)
    - TASK_MANAGER_CONFIG: path of the local config file (default '~/.config/taskmanager/client.json')
    """

    api_base_url: str
    request_timeout: float
    config_path: str


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


# PUBLIC_INTERFACE
def get_client_settings() -> ClientSettings:
    """Return client settings loaded from environment variables."""
    try:
        timeout = float(_get_env("TASK_MANAGER_TIMEOUT", "60").strip())
    except ValueError:
        timeout = 60.0

    return ClientSettings(
        api_base_url=_get_env("TASK_MANAGER_API_URL", "http://localhost:5000/api").strip().rstrip("/"),
        request_timeout=timeout,
        config_path=os.path.expanduser(
            _get_env("TASK_MANAGER_CONFIG", os.path.join("~", ".config", "taskmanager", "client.json"))
        ),
    )
