"""Filtering and ordering of built result rows"""

import math
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from .qualification import qualifies_by_ratio
from ..models.video_models import VideoRow
from ..models.search_models import FilterConfig, FilterOutcome, ShortsMode

logger = logging.getLogger(__name__)

DEFAULT_SORT_KEY = "view_count"

SORTABLE_KEYS = {
    "view_count", "like_count", "subscriber_count", "spread_rate",
    "published_at", "title", "channel_title", "country",
}


def _country_ok(row: VideoRow, config: FilterConfig) -> bool:
    if not config.country:
        return True
    return (row.country or "").upper() == config.country.upper()


def _shorts_ok(row: VideoRow, config: FilterConfig) -> bool:
    if config.shorts_mode == ShortsMode.INCLUDE:
        return True
    if config.shorts_mode == ShortsMode.ONLY:
        return row.is_short
    return not row.is_short


def passes_filters(row: VideoRow, config: FilterConfig) -> bool:
    """
    Apply every filter stage to a single row.

    With ``include_hidden`` the ratio requirement is dropped. Otherwise a
    row needs the minimum views AND the subscriber ratio.
    """
    if not _country_ok(row, config):
        return False
    if row.view_count < config.min_views:
        return False
    if not _shorts_ok(row, config):
        return False
    if config.include_hidden:
        return True
    return qualifies_by_ratio(
        row.view_count,
        row.subscriber_count,
        row.hidden_subscriber_count,
        int(config.ratio_threshold)
    )


def apply_filters(rows: List[VideoRow], config: FilterConfig) -> FilterOutcome:
    """
    Filter rows and rank the survivors by view count, highest first.

    The sort is stable, so equal view counts keep their input order.
    """
    kept = [row for row in rows if passes_filters(row, config)]
    kept.sort(key=lambda row: row.view_count, reverse=True)

    logger.debug(f"Filter kept {len(kept)} of {len(rows)} rows")
    return FilterOutcome(rows=kept, total_before=len(rows), total_after=len(kept))


def _sort_value(row: VideoRow, key: str):
    value = getattr(row, key)
    if value is None or value == "":
        return -math.inf
    if key == "published_at":
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
        except ValueError:
            return -math.inf
    return value


def sort_rows(rows: List[VideoRow], key: str = DEFAULT_SORT_KEY, direction: str = "desc") -> List[VideoRow]:
    """
    Re-order rows by a column.

    Missing values rank lowest: last when descending, first when
    ascending. Published timestamps compare chronologically.
    """
    if key not in SORTABLE_KEYS:
        raise ValueError(f"Cannot sort by '{key}'. Choose one of {sorted(SORTABLE_KEYS)}")
    if direction not in ("asc", "desc"):
        raise ValueError("direction must be 'asc' or 'desc'")

    reverse = direction == "desc"
    present = [row for row in rows if _sort_value(row, key) != -math.inf]
    missing = [row for row in rows if _sort_value(row, key) == -math.inf]

    present = sorted(present, key=lambda row: _sort_value(row, key), reverse=reverse)
    return missing + present if not reverse else present + missing


@dataclass
class SortState:
    """
    Column sort selection of the result table.

    Choosing a new column sorts it descending, choosing it again flips to
    ascending, and a third time restores the default view-count order.
    """
    key: str = DEFAULT_SORT_KEY
    direction: str = "desc"

    def toggle(self, key: str) -> "SortState":
        if key == self.key:
            if self.direction == "desc":
                return SortState(key, "asc")
            return SortState(DEFAULT_SORT_KEY, "desc")
        return SortState(key, "desc")

    def apply(self, rows: List[VideoRow]) -> List[VideoRow]:
        return sort_rows(rows, self.key, self.direction)
