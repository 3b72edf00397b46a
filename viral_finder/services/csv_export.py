"""CSV rendering of result rows and comments"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..core.exceptions import ExportError
from ..models.comment_models import CommentRow
from ..models.search_models import to_iso_timestamp
from ..models.video_models import VideoRow

logger = logging.getLogger(__name__)

Selector = Callable[[Any, str], Any]

VIDEO_CSV_HEADERS = [
    "videoId",
    "title",
    "channelId",
    "channelTitle",
    "publishedAt",
    "viewCount",
    "subscriberCount",
    "spreadRate",
    "likeCount",
    "country",
    "videoUrl",
    "thumbnailUrl",
    "matchedRule",
    "keywords",
    "searchedAt",
]

COMMENT_CSV_HEADERS = [
    "videoId",
    "commentId",
    "parentId",
    "authorDisplayName",
    "textOriginal",
    "likeCount",
    "publishedAt",
    "updatedAt",
]

_COMMENT_FIELDS = {
    "videoId": "video_id",
    "commentId": "comment_id",
    "parentId": "parent_id",
    "authorDisplayName": "author_display_name",
    "textOriginal": "text_original",
    "likeCount": "like_count",
    "publishedAt": "published_at",
    "updatedAt": "updated_at",
}


def _escape(value: Any) -> str:
    if value is None:
        return ""
    return '"' + str(value).replace('"', '""') + '"'


def build_csv(headers: Sequence[str], rows: Iterable[Any], selector: Selector) -> str:
    """
    Render rows as CSV text.

    Every value is wrapped in double quotes with embedded quotes doubled;
    None becomes an empty field. Lines are joined with ``\\n``.

    Args:
        headers: Column names, in output order
        rows: Row objects of any shape
        selector: Returns the value of one column for one row

    Returns:
        CSV document without a trailing newline
    """
    lines = [",".join(f'"{header}"' for header in headers)]
    for row in rows:
        lines.append(",".join(_escape(selector(row, header)) for header in headers))
    return "\n".join(lines)


def save_csv(path: Union[str, Path], headers: Sequence[str], rows: Iterable[Any], selector: Selector) -> Path:
    """Write a CSV document to ``path``"""
    path = Path(path)
    csv_text = build_csv(headers, rows, selector)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(csv_text)
    logger.info(f"CSV written to {path}")
    return path


def video_csv_selector(keyword: str, searched_at: str, ratio_label: str) -> Selector:
    """
    Build the column selector for the video list export.

    Args:
        keyword: Keyword the search ran with
        searched_at: Export timestamp written into every row
        ratio_label: Rule label used when a row carries none
    """
    def select(row: VideoRow, key: str) -> Any:
        if key == "videoId":
            return row.video_id
        if key == "title":
            return row.title
        if key == "channelId":
            return row.channel_id
        if key == "channelTitle":
            return row.channel_title
        if key == "publishedAt":
            return row.published_at
        if key == "viewCount":
            return row.view_count
        if key == "subscriberCount":
            return "" if row.subscriber_count is None else row.subscriber_count
        if key == "spreadRate":
            return "" if row.spread_rate is None else f"{row.spread_rate:.2f}"
        if key == "likeCount":
            return "" if row.like_count is None else row.like_count
        if key == "country":
            return row.country or ""
        if key == "videoUrl":
            return row.video_url
        if key == "thumbnailUrl":
            return row.thumbnail_url
        if key == "matchedRule":
            return row.matched_rule.value if row.matched_rule else ratio_label
        if key == "keywords":
            return keyword
        if key == "searchedAt":
            return searched_at
        return ""

    return select


def comment_csv_selector(row: CommentRow, key: str) -> Any:
    """Column selector for comment exports"""
    field = _COMMENT_FIELDS.get(key)
    return getattr(row, field) if field else None


def _file_stamp(timestamp: str) -> str:
    """Timestamp usable in a file name on every platform"""
    return timestamp.replace(":", "-")


def export_videos_csv(
    rows: List[VideoRow],
    keyword: str,
    ratio_label: str,
    directory: Union[str, Path] = ".",
    now: Optional[datetime] = None
) -> Path:
    """Write the ranked video list to ``videos_<timestamp>.csv``"""
    timestamp = to_iso_timestamp(now or datetime.now(timezone.utc))
    path = Path(directory) / f"videos_{_file_stamp(timestamp)}.csv"
    return save_csv(path, VIDEO_CSV_HEADERS, rows, video_csv_selector(keyword, timestamp, ratio_label))


def export_comments_csv(
    comments_by_video: Dict[str, List[CommentRow]],
    video_ids: List[str],
    directory: Union[str, Path] = ".",
    now: Optional[datetime] = None
) -> Path:
    """
    Write already-fetched comments of one or more videos.

    A single video goes to ``comments_<videoId>_<timestamp>.csv``, a
    selection to ``comments_selected_<timestamp>.csv``.

    Raises:
        ExportError: When none of the videos has fetched comments
    """
    rows = [row for video_id in video_ids for row in comments_by_video.get(video_id, [])]
    if not rows:
        raise ExportError("No fetched comments for the selected videos. Fetch comments first.")

    timestamp = _file_stamp(to_iso_timestamp(now or datetime.now(timezone.utc)))
    if len(video_ids) == 1:
        name = f"comments_{video_ids[0]}_{timestamp}.csv"
    else:
        name = f"comments_selected_{timestamp}.csv"
    return save_csv(Path(directory) / name, COMMENT_CSV_HEADERS, rows, comment_csv_selector)
