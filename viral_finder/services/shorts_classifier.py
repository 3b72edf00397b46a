"""Duration parsing and short-form video classification"""

import re
from typing import Optional

from ..models.video_models import YouTubeVideoRaw

# Videos at or below this many seconds count as shorts
SHORTS_MAX_DURATION_SECONDS = 120

_DURATION_PATTERN = re.compile(r'^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$')

# Hashtags and words uploaders use to mark short-form content
SHORTS_PATTERNS = (
    re.compile(r'#shorts', re.IGNORECASE),
    re.compile(r'#short', re.IGNORECASE),
    re.compile(r'ショート'),
    re.compile(r'ショーツ'),
    re.compile(r'shorts', re.IGNORECASE),
    re.compile(r'short動画', re.IGNORECASE),
)


def parse_duration_to_seconds(duration: Optional[str]) -> Optional[int]:
    """
    Parse an ISO 8601 ``PT#H#M#S`` duration into whole seconds.

    Every component is optional, so ``"PT"`` is zero seconds.

    Args:
        duration: Duration string from contentDetails.duration

    Returns:
        Total seconds, or None when the value is absent or malformed
    """
    if not duration:
        return None

    match = _DURATION_PATTERN.match(duration)
    if not match:
        return None

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    return hours * 3600 + minutes * 60 + seconds


def has_shorts_marker(text: str) -> bool:
    """Check a title, description or tag for a shorts marker"""
    return any(pattern.search(text) for pattern in SHORTS_PATTERNS)


def is_short_video(
    video: YouTubeVideoRaw,
    cutoff_seconds: int = SHORTS_MAX_DURATION_SECONDS
) -> bool:
    """
    Decide whether a video is short-form content.

    A video is short when its duration is known and within the cutoff,
    or when its title, description or any tag carries a shorts marker.
    """
    duration_seconds = parse_duration_to_seconds(video.duration)
    if duration_seconds is not None and duration_seconds <= cutoff_seconds:
        return True

    snippet = video.snippet
    texts = [snippet.title, snippet.description, *snippet.tags]
    return any(has_shorts_marker(text) for text in texts if text)
