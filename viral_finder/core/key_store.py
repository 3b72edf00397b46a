"""Persistence of the YouTube API key

The API key is the only durable piece of state. Callers never touch the
storage medium directly; they go through a ``KeyStore`` so tests can
swap in an in-memory store.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from .settings import get_settings

logger = logging.getLogger(__name__)

# Fixed storage key of the API key
API_KEY_STORAGE_KEY = "yt_api_key"

DEFAULT_STATE_PATH = Path.home() / ".viral_finder" / "state.json"


class KeyStore(Protocol):
    """Key-value persistence collaborator for the API key"""

    def load(self) -> str:
        """Return the saved key, or an empty string if none is stored"""
        ...

    def save(self, value: str) -> None:
        """Persist the key"""
        ...


class InMemoryKeyStore:
    """Non-durable key store, mainly for tests"""

    def __init__(self, value: str = ""):
        self.value = value

    def load(self) -> str:
        return self.value

    def save(self, value: str) -> None:
        self.value = value


class JsonFileKeyStore:
    """
    Key store backed by a small JSON document.

    The document maps ``yt_api_key`` to the key. Other entries in the
    file are preserved on save.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            configured = get_settings().key_store_path
            path = configured if configured else DEFAULT_STATE_PATH
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable key store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> str:
        value = self._read().get(API_KEY_STORAGE_KEY, "")
        return value if isinstance(value, str) else ""

    def save(self, value: str) -> None:
        data = self._read()
        data[API_KEY_STORAGE_KEY] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        logger.info(f"API key saved to {self.path}")
