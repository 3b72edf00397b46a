"""Search agent: paginated discovery, batched lookups and ranking"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from ..clients.youtube_client import YouTubeClient, MAX_IDS_PER_REQUEST
from ..core.exceptions import ViralFinderError
from ..core.logging import log_performance
from ..core.settings import get_settings
from ..models.search_models import (
    FilterConfig, SearchProgress, SearchResult, MAX_SEARCH_PAGES
)
from ..models.video_models import YouTubeChannelRaw, YouTubeVideoRaw
from ..services.filter_pipeline import apply_filters
from ..services.qualification import build_video_rows

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SearchProgress], None]


def batched(items: List[str], size: int = MAX_IDS_PER_REQUEST) -> List[List[str]]:
    """Split ``items`` into consecutive chunks of at most ``size``"""
    return [items[i:i + size] for i in range(0, len(items), size)]


class SearchAgent:
    """
    Runs a keyword search end to end.

    Requests are strictly sequential. Each run is tagged with a generation
    number; only the most recently started run may publish its result to
    ``current_result``, so a slow earlier run can never overwrite a newer
    one.
    """

    def __init__(
        self,
        youtube_client: Optional[YouTubeClient] = None,
        api_key: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        """
        Initialize search agent.

        Args:
            youtube_client: YouTube API client (created lazily from api_key if None)
            api_key: Key used when the client has to be created here
            on_progress: Called with a snapshot after every search page
        """
        self.agent_name = "SearchAgent"
        self.settings = get_settings()

        self.youtube_client = youtube_client
        self.api_key = api_key
        self.on_progress = on_progress
        self._owns_client = False

        self.progress = SearchProgress()
        self.loading = False
        self.error: Optional[str] = None
        self.current_result: Optional[SearchResult] = None
        self._latest_generation = 0

        logger.info(f"[{self.agent_name}] Agent initialized")

    def _get_client(self) -> YouTubeClient:
        if self.youtube_client is None:
            # Raises ConfigurationError before any request when the key is missing
            self.youtube_client = YouTubeClient(api_key=self.api_key)
            self._owns_client = True
        return self.youtube_client

    def _report(self, progress: SearchProgress, generation: int) -> None:
        # Superseded runs stay silent
        if generation != self._latest_generation:
            return
        if self.on_progress is not None:
            self.on_progress(progress.model_copy())

    @property
    def latest_generation(self) -> int:
        return self._latest_generation

    @log_performance("search")
    async def run_search(self, config: FilterConfig) -> SearchResult:
        """
        Search, resolve details, build rows and rank them.

        Any failure aborts the whole run; nothing fetched so far is kept.

        Args:
            config: Filter configuration of this run

        Returns:
            Search result; ``applied`` is False if a newer run started meanwhile

        Raises:
            ConfigurationError: When no API key is available
            YouTubeAPIError: On any upstream or network failure
        """
        self._latest_generation += 1
        generation = self._latest_generation

        progress = SearchProgress(total_pages=min(config.max_pages, MAX_SEARCH_PAGES))
        self.progress = progress
        self.loading = True
        self.error = None

        logger.info(f"[{self.agent_name}] Search #{generation} for '{config.keyword}'")

        try:
            client = self._get_client()

            video_ids = await self.collect_video_ids(client, config, progress, generation)
            if video_ids:
                videos, channel_ids = await self.fetch_video_details(client, video_ids)
                channels = await self.fetch_channel_details(client, channel_ids)
            else:
                videos, channels = [], {}

            rows = build_video_rows(
                videos, channels, config, self.settings.shorts_max_duration_seconds
            )
            outcome = apply_filters(rows, config)

            progress.total_before_filter = outcome.total_before
            progress.total_filtered = outcome.total_after

            result = SearchResult(
                generation=generation,
                config=config,
                rows=outcome.rows,
                total_before_filter=outcome.total_before,
                total_after_filter=outcome.total_after,
            )
        except ViralFinderError as e:
            if generation == self._latest_generation:
                self.error = str(e)
            raise
        finally:
            if generation == self._latest_generation:
                self.loading = False

        if generation != self._latest_generation:
            logger.info(f"[{self.agent_name}] Discarding stale search #{generation}")
            return result.model_copy(update={"applied": False})

        self.current_result = result
        logger.info(
            f"[{self.agent_name}] Search #{generation} kept "
            f"{result.total_after_filter} of {result.total_before_filter} videos"
        )
        return result

    async def collect_video_ids(
        self,
        client: YouTubeClient,
        config: FilterConfig,
        progress: SearchProgress,
        generation: int
    ) -> List[str]:
        """
        Follow search continuation tokens up to the page budget.

        Returns:
            Unique video IDs in the order they were first seen
        """
        max_pages = min(config.max_pages, MAX_SEARCH_PAGES)
        published_after = config.period.published_after()

        collected: List[str] = []
        page_token: Optional[str] = None
        pages = 0

        while True:
            ids, page_token = await client.search_videos(
                query=config.keyword,
                published_after=published_after,
                max_results=config.page_size,
                region_code=config.country,
                page_token=page_token,
            )
            collected.extend(ids)
            pages += 1

            progress.current_page = pages
            progress.total_fetched = len(collected)
            self._report(progress, generation)

            if not page_token or pages >= max_pages:
                break

        unique_ids = list(dict.fromkeys(collected))
        logger.debug(
            f"[{self.agent_name}] {pages} search pages, "
            f"{len(collected)} IDs ({len(unique_ids)} unique)"
        )
        return unique_ids

    async def fetch_video_details(
        self,
        client: YouTubeClient,
        video_ids: List[str]
    ) -> Tuple[List[YouTubeVideoRaw], List[str]]:
        """
        Resolve video details in batches of 50.

        Returns:
            Videos in request order and their distinct channel IDs
        """
        videos: List[YouTubeVideoRaw] = []
        channel_ids: Dict[str, None] = {}

        for batch in batched(video_ids):
            batch_videos = await client.get_video_details(batch)
            videos.extend(batch_videos)
            for video in batch_videos:
                if video.snippet.channel_id:
                    channel_ids[video.snippet.channel_id] = None

        return videos, list(channel_ids)

    async def fetch_channel_details(
        self,
        client: YouTubeClient,
        channel_ids: List[str]
    ) -> Dict[str, YouTubeChannelRaw]:
        """Resolve channel details in batches of 50, keyed by channel ID"""
        channels: Dict[str, YouTubeChannelRaw] = {}
        for batch in batched(channel_ids):
            for channel in await client.get_channel_details(batch):
                channels[channel.channel_id] = channel
        return channels

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self._owns_client and self.youtube_client is not None:
            await self.youtube_client.close()


def create_search_agent(
    youtube_client: Optional[YouTubeClient] = None,
    api_key: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None
) -> SearchAgent:
    """Factory function to create a search agent"""
    return SearchAgent(youtube_client=youtube_client, api_key=api_key, on_progress=on_progress)
