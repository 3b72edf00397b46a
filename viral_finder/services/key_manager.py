"""Loading, verifying and saving the YouTube API key"""

import logging
from typing import Callable, Optional

from ..clients.youtube_client import YouTubeClient
from ..core.exceptions import ConfigurationError
from ..core.key_store import KeyStore, JsonFileKeyStore
from ..core.settings import get_settings
from ..models.search_models import KeyCheckResult

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], YouTubeClient]


class KeyManager:
    """
    Owns the API key lifecycle.

    A key is only persisted after the verification request accepts it.
    When nothing is saved, the ``YOUTUBE_API_KEY`` setting is used.
    """

    def __init__(
        self,
        store: Optional[KeyStore] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        self.store = store if store is not None else JsonFileKeyStore()
        self.client_factory = client_factory or (lambda key: YouTubeClient(api_key=key))
        self.verified = False

    def current_key(self) -> str:
        """Saved key, else the configured one, else empty"""
        return self.store.load() or get_settings().youtube_api_key or ""

    def require_key(self) -> str:
        """
        Raises:
            ConfigurationError: When no key is saved or configured
        """
        key = self.current_key().strip()
        if not key:
            raise ConfigurationError(
                "No YouTube API key. Save one with 'key set' or set YOUTUBE_API_KEY."
            )
        return key

    async def verify(self, key: str) -> KeyCheckResult:
        """Run the verification request for ``key`` without saving it"""
        key = (key or "").strip()
        if not key:
            return KeyCheckResult(ok=False, reason="API key is empty")

        client = self.client_factory(key)
        try:
            return await client.verify_api_key()
        finally:
            await client.close()

    async def save_verified(self, key: str) -> KeyCheckResult:
        """Verify ``key`` and persist it if the check succeeds"""
        result = await self.verify(key)
        self.verified = result.ok
        if result.ok:
            self.store.save(key.strip())
            logger.info("API key verified and saved")
        else:
            logger.warning(f"API key not saved: {result.reason}")
        return result
