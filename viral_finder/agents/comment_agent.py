"""Comment agent: per-video comment thread aggregation"""

import logging
from typing import Callable, Dict, List, Optional, Set

from ..clients.youtube_client import YouTubeClient
from ..core.exceptions import FetchInProgressError, YouTubeAPIError
from ..core.logging import log_performance
from ..models.comment_models import CommentRaw, CommentRow, CommentThreadRaw

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def _log_notification(message: str) -> None:
    logger.warning(f"Comment fetch failed: {message}")


def _comment_row(video_id: str, comment: CommentRaw, parent_id: Optional[str]) -> CommentRow:
    snippet = comment.snippet
    return CommentRow(
        video_id=video_id,
        comment_id=comment.comment_id,
        parent_id=parent_id,
        author_display_name=snippet.author_display_name,
        text_original=snippet.text,
        like_count=snippet.like_count,
        published_at=snippet.published_at,
        updated_at=snippet.updated_at or None,
    )


def flatten_thread(video_id: str, thread: CommentThreadRaw) -> List[CommentRow]:
    """
    Flatten a thread into its top-level comment followed by its replies.

    A reply without its own parent ID is linked to the thread's
    top-level comment.
    """
    rows = []
    top_level = thread.snippet.top_level_comment
    top_level_id = top_level.comment_id if top_level else None

    if top_level is not None:
        rows.append(_comment_row(video_id, top_level, None))

    if thread.replies is not None:
        for reply in thread.replies.comments:
            parent_id = reply.snippet.parent_id or top_level_id
            rows.append(_comment_row(video_id, reply, parent_id))

    return rows


class CommentAgent:
    """
    Fetches every comment thread of a video and keeps the results per video.

    A failed fetch leaves earlier results untouched and is reported once
    through ``notify``. Only one fetch per video may run at a time.
    """

    def __init__(
        self,
        youtube_client: Optional[YouTubeClient] = None,
        api_key: Optional[str] = None,
        notify: Optional[Notifier] = None
    ):
        self.agent_name = "CommentAgent"
        self.youtube_client = youtube_client
        self.api_key = api_key
        self.notify = notify or _log_notification
        self._owns_client = False

        self.comments_by_video: Dict[str, List[CommentRow]] = {}
        self.loading_video_id: Optional[str] = None
        self._in_flight: Set[str] = set()

    def _get_client(self) -> YouTubeClient:
        if self.youtube_client is None:
            self.youtube_client = YouTubeClient(api_key=self.api_key)
            self._owns_client = True
        return self.youtube_client

    def is_loading(self, video_id: str) -> bool:
        return video_id in self._in_flight

    @log_performance("fetch_comments")
    async def fetch_comments(self, video_id: str) -> Optional[List[CommentRow]]:
        """
        Fetch all comment threads of a video, following continuation tokens.

        Args:
            video_id: YouTube video ID

        Returns:
            The comments stored for the video, or None if the fetch failed

        Raises:
            FetchInProgressError: When a fetch for this video is already running
            ConfigurationError: When no API key is available
        """
        if video_id in self._in_flight:
            raise FetchInProgressError(f"Comments for {video_id} are already being fetched")

        client = self._get_client()

        self._in_flight.add(video_id)
        self.loading_video_id = video_id
        try:
            rows: List[CommentRow] = []
            page_token: Optional[str] = None
            pages = 0

            while True:
                threads, page_token = await client.get_comment_threads(video_id, page_token)
                for thread in threads:
                    rows.extend(flatten_thread(video_id, thread))
                pages += 1
                if not page_token:
                    break
        except YouTubeAPIError as e:
            self.notify(e.message or "Failed to fetch comments")
            return None
        finally:
            self._in_flight.discard(video_id)
            if self.loading_video_id == video_id:
                self.loading_video_id = None

        self.comments_by_video[video_id] = rows
        logger.info(f"[{self.agent_name}] {len(rows)} comments for {video_id} ({pages} pages)")
        return rows

    def comments_for(self, video_ids: List[str]) -> List[CommentRow]:
        """Already-fetched comments of several videos, in the given order"""
        return [row for video_id in video_ids for row in self.comments_by_video.get(video_id, [])]

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self._owns_client and self.youtube_client is not None:
            await self.youtube_client.close()


def create_comment_agent(
    youtube_client: Optional[YouTubeClient] = None,
    api_key: Optional[str] = None,
    notify: Optional[Notifier] = None
) -> CommentAgent:
    """Factory function to create a comment agent"""
    return CommentAgent(youtube_client=youtube_client, api_key=api_key, notify=notify)
