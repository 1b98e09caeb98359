"""
Locally persisted client configuration: the AI API key and user settings.

Stored as one JSON object in a file on the user's machine, keyed by the fixed
StorageKey names. Nothing here is ever sent to the task backend except the
API key, which the AI proxy forwards to the vendor.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..constants import StorageKey
from .errors import MissingApiKeyError

logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
_PLACEHOLDER_KEYS = {"your_api_key_here", "your_gemini_api_key_here"}


def mask_key(key: str) -> str:
    """Short, log-safe form of an API key."""
    return f"{key[:6]}..." if key else "NOT FOUND"


# PUBLIC_INTERFACE
class ConfigStore:
    """
    Explicit load/save key-value store backed by a JSON file.

    Args:
        path: Location of the JSON file. Parent directories are created on save.
        env: Environment used for the API key override; defaults to os.environ.
    """

    def __init__(self, path: Union[str, Path], env: Optional[Mapping[str, str]] = None) -> None:
        self._path = Path(path)
        self._env = os.environ if env is None else env

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Readers only ever see the old file or the complete new one.
        fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: StorageKey) -> Any:
        return self._read().get(key.value)

    def set(self, key: StorageKey, value: Any) -> None:
        data = self._read()
        data[key.value] = value
        self._write(data)

    def remove(self, key: StorageKey) -> None:
        data = self._read()
        if data.pop(key.value, None) is not None:
            self._write(data)

    # PUBLIC_INTERFACE
    def load_settings(self) -> Dict[str, Any]:
        """Return saved user settings, or an empty dict."""
        value = self.get(StorageKey.SETTINGS)
        return dict(value) if isinstance(value, dict) else {}

    # PUBLIC_INTERFACE
    def save_settings(self, settings: Mapping[str, Any]) -> None:
        self.set(StorageKey.SETTINGS, dict(settings))

    # PUBLIC_INTERFACE
    def load_api_key(self) -> str:
        """
        Return the AI API key, or '' when none is configured.

        GEMINI_API_KEY in the environment wins unless it still holds a
        placeholder value; otherwise the locally saved key is used.
        """
        env_key = (self._env.get(API_KEY_ENV) or "").strip()
        if env_key and env_key not in _PLACEHOLDER_KEYS:
            return env_key
        stored = self.get(StorageKey.API_KEY)
        return stored.strip() if isinstance(stored, str) else ""

    # PUBLIC_INTERFACE
    def save_api_key(self, api_key: str) -> None:
        self.set(StorageKey.API_KEY, api_key.strip())

    # PUBLIC_INTERFACE
    def ensure_api_key(self) -> str:
        """Return the configured API key or raise MissingApiKeyError."""
        api_key = self.load_api_key()
        logger.debug("API key loaded: %s", mask_key(api_key))
        if not api_key:
            raise MissingApiKeyError(
                f"API key required. Set {API_KEY_ENV} or save a Gemini API key "
                "(get one at https://aistudio.google.com/app/apikey)."
            )
        return api_key

    # PUBLIC_INTERFACE
    def clear_all(self) -> None:
        """Remove every known key from the store."""
        data = self._read()
        for key in StorageKey:
            data.pop(key.value, None)
        self._write(data)
