"""YouTube Data API client for video discovery and comment retrieval"""

import httpx
import logging
from typing import List, Dict, Any, Optional, Tuple

from pydantic import ValidationError

from ..core.settings import get_settings
from ..core.exceptions import ConfigurationError, YouTubeAPIError
from ..models.video_models import YouTubeVideoRaw, YouTubeChannelRaw
from ..models.comment_models import CommentThreadRaw
from ..models.search_models import KeyCheckResult

# Setup logging
logger = logging.getLogger(__name__)

# The API accepts at most 50 IDs per videos.list / channels.list call
MAX_IDS_PER_REQUEST = 50
MAX_COMMENTS_PER_PAGE = 100

# Quota units charged per call
QUOTA_COSTS = {
    "search": 100,
    "videos": 1,
    "channels": 1,
    "commentThreads": 1,
    "i18nLanguages": 1,
}


def error_message_from_response(response: httpx.Response, fallback: str) -> str:
    """Message of the structured error body, else ``fallback``"""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]

    return fallback


class YouTubeClient:
    """
    YouTube Data API client.

    Every call is a single request: nothing is retried and any non-success
    response raises ``YouTubeAPIError``.
    """

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize YouTube API client.

        Args:
            api_key: YouTube Data API key (if None, loads from settings)

        Raises:
            ConfigurationError: When no API key is available
        """
        self.settings = get_settings()
        self.api_key = (api_key or self.settings.youtube_api_key or "").strip()

        if not self.api_key:
            raise ConfigurationError("YouTube API key is required")

        self.client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=5,
                max_keepalive_connections=2
            ),
            timeout=self.settings.request_timeout
        )

        self.base_url = self.settings.youtube_api_base_url
        self.quota_used = 0

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue one GET against an API endpoint.

        Raises:
            YouTubeAPIError: On transport failure or a non-success status
        """
        request_params = {"key": self.api_key, **params}

        try:
            response = await self.client.get(f"{self.base_url}/{endpoint}", params=request_params)
        except httpx.RequestError as e:
            message = str(e) or "Network error"
            logger.warning(f"{endpoint} request failed: {message}")
            raise YouTubeAPIError(message, endpoint=endpoint)

        self.quota_used += QUOTA_COSTS.get(endpoint, 1)

        if not 200 <= response.status_code < 300:
            message = error_message_from_response(
                response, f"{endpoint}.list HTTP {response.status_code}"
            )
            logger.warning(f"{endpoint} returned HTTP {response.status_code}: {message}")
            raise YouTubeAPIError(message, status_code=response.status_code, endpoint=endpoint)

        try:
            data = response.json()
        except ValueError:
            raise YouTubeAPIError(f"{endpoint}.list returned an unreadable body", endpoint=endpoint)

        return data if isinstance(data, dict) else {}

    async def search_videos(
        self,
        query: str,
        published_after: str,
        max_results: int = 50,
        region_code: Optional[str] = None,
        page_token: Optional[str] = None
    ) -> Tuple[List[str], Optional[str]]:
        """
        Fetch one page of keyword search results.

        Args:
            query: Search keyword
            published_after: Earliest publish timestamp (ISO 8601)
            max_results: Results per page (1-50)
            region_code: Optional ISO 3166-1 alpha-2 region
            page_token: Continuation token of the previous page

        Returns:
            Video IDs on this page and the next page token, if any
        """
        params = {
            "part": "snippet",
            "type": "video",
            "maxResults": min(max_results, MAX_IDS_PER_REQUEST),
            "q": query,
            "publishedAfter": published_after,
            "order": "relevance",
        }
        if region_code:
            params["regionCode"] = region_code.upper()
        if page_token:
            params["pageToken"] = page_token

        data = await self._get("search", params)

        video_ids = []
        for item in data.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                video_ids.append(video_id)

        return video_ids, data.get("nextPageToken") or None

    async def get_video_details(self, video_ids: List[str]) -> List[YouTubeVideoRaw]:
        """
        Get snippet, statistics and content details for up to 50 videos.

        Raises:
            ValueError: When more than 50 IDs are passed
        """
        if not video_ids:
            return []
        if len(video_ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(f"At most {MAX_IDS_PER_REQUEST} video IDs per request")

        logger.debug(f"Getting details for {len(video_ids)} videos")

        data = await self._get("videos", {
            "part": "snippet,statistics,contentDetails",
            "id": ",".join(video_ids),
            "maxResults": len(video_ids),
        })

        return self._parse_items(data, YouTubeVideoRaw)

    async def get_channel_details(self, channel_ids: List[str]) -> List[YouTubeChannelRaw]:
        """
        Get snippet and statistics for up to 50 channels.

        Raises:
            ValueError: When more than 50 IDs are passed
        """
        if not channel_ids:
            return []
        if len(channel_ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(f"At most {MAX_IDS_PER_REQUEST} channel IDs per request")

        logger.debug(f"Getting details for {len(channel_ids)} channels")

        data = await self._get("channels", {
            "part": "snippet,statistics",
            "id": ",".join(channel_ids),
            "maxResults": len(channel_ids),
        })

        return self._parse_items(data, YouTubeChannelRaw)

    async def get_comment_threads(
        self,
        video_id: str,
        page_token: Optional[str] = None
    ) -> Tuple[List[CommentThreadRaw], Optional[str]]:
        """
        Fetch one page of comment threads with their inlined replies.

        Returns:
            Threads on this page and the next page token, if any
        """
        params = {
            "part": "snippet,replies",
            "videoId": video_id,
            "maxResults": MAX_COMMENTS_PER_PAGE,
            "textFormat": "plainText",
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._get("commentThreads", params)

        return self._parse_items(data, CommentThreadRaw), data.get("nextPageToken") or None

    async def verify_api_key(self) -> KeyCheckResult:
        """
        Call a cheap read-only endpoint to confirm the key authenticates.

        Never raises; failures are reported in the result.
        """
        params = {"key": self.api_key, "part": "snippet", "maxResults": 1}

        try:
            response = await self.client.get(f"{self.base_url}/i18nLanguages", params=params)
        except httpx.RequestError as e:
            return KeyCheckResult(ok=False, reason=str(e) or "Network error")

        self.quota_used += QUOTA_COSTS["i18nLanguages"]

        if not 200 <= response.status_code < 300:
            reason = error_message_from_response(response, f"HTTP {response.status_code}")
            logger.info(f"API key rejected: {reason}")
            return KeyCheckResult(ok=False, reason=reason)

        return KeyCheckResult(ok=True)

    def _parse_items(self, data: Dict[str, Any], model):
        """Validate API items into models, skipping malformed ones"""
        parsed = []
        for item in data.get("items") or []:
            try:
                parsed.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Failed to parse {model.__name__} {item.get('id', 'unknown')}: {e}")
        return parsed

    def get_quota_usage(self) -> int:
        """Get current quota usage for this session"""
        return self.quota_used

    def reset_quota_tracking(self) -> None:
        """Reset quota tracking (call at start of new day)"""
        self.quota_used = 0
        logger.info("Quota tracking reset")
