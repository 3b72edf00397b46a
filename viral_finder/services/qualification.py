"""Ratio qualification and construction of ranked result rows"""

import logging
from typing import Dict, List, Optional

from .shorts_classifier import is_short_video, SHORTS_MAX_DURATION_SECONDS
from ..models.video_models import (
    MatchedRule, VideoRow, YouTubeChannelRaw, YouTubeVideoRaw
)
from ..models.search_models import FilterConfig

logger = logging.getLogger(__name__)

VIDEO_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"
CHANNEL_URL_TEMPLATE = "https://www.youtube.com/channel/{channel_id}"


def qualifies_by_ratio(
    view_count: int,
    subscriber_count: Optional[int],
    hidden: bool,
    multiple: int
) -> bool:
    """
    Check whether views reach ``multiple`` times the subscriber count.

    Hidden or unknown subscriber counts never qualify.
    """
    if hidden:
        return False
    if subscriber_count is None:
        return False
    return view_count >= int(multiple) * subscriber_count


def spread_rate(
    view_count: int,
    subscriber_count: Optional[int],
    hidden: bool
) -> Optional[float]:
    """Views per subscriber, or None when the audience size is unusable"""
    if hidden or not subscriber_count or subscriber_count <= 0:
        return None
    return view_count / subscriber_count


def build_video_row(
    video: YouTubeVideoRaw,
    channel: Optional[YouTubeChannelRaw],
    config: FilterConfig,
    shorts_cutoff: int = SHORTS_MAX_DURATION_SECONDS
) -> VideoRow:
    """
    Join a video with its channel into a result row.

    A missing channel leaves the channel-derived fields unknown rather
    than zero.
    """
    stats = video.statistics
    view_count = stats.view_count if stats and stats.view_count else 0
    like_count = stats.like_count if stats else None

    channel_stats = channel.statistics if channel else None
    subscriber_count = channel_stats.subscriber_count if channel_stats else None
    hidden = channel_stats.hidden_subscriber_count if channel_stats else False
    country = channel.snippet.country if channel else None

    ratio = int(config.ratio_threshold)
    if qualifies_by_ratio(view_count, subscriber_count, hidden, ratio):
        matched_rule = MatchedRule.for_ratio(ratio)
    elif view_count >= config.min_views:
        matched_rule = MatchedRule.MIN_VIEWS
    else:
        matched_rule = MatchedRule.NONE

    channel_id = video.snippet.channel_id

    return VideoRow(
        video_id=video.video_id,
        title=video.snippet.title,
        channel_id=channel_id,
        channel_title=video.snippet.channel_title,
        published_at=video.snippet.published_at,
        view_count=view_count,
        like_count=like_count,
        thumbnail_url=video.thumbnail_url(),
        video_url=VIDEO_URL_TEMPLATE.format(video_id=video.video_id),
        channel_url=CHANNEL_URL_TEMPLATE.format(channel_id=channel_id),
        subscriber_count=subscriber_count,
        hidden_subscriber_count=hidden,
        country=country,
        matched_rule=matched_rule,
        is_short=is_short_video(video, shorts_cutoff),
        spread_rate=spread_rate(view_count, subscriber_count, hidden),
    )


def build_video_rows(
    videos: List[YouTubeVideoRaw],
    channels_by_id: Dict[str, YouTubeChannelRaw],
    config: FilterConfig,
    shorts_cutoff: int = SHORTS_MAX_DURATION_SECONDS
) -> List[VideoRow]:
    """Build one row per video, in input order"""
    rows = []
    for video in videos:
        channel = channels_by_id.get(video.snippet.channel_id)
        if channel is None:
            logger.debug(f"No channel details for video {video.video_id}")
        rows.append(build_video_row(video, channel, config, shorts_cutoff))
    return rows
