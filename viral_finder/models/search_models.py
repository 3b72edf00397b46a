"""Search configuration, progress and result models"""

import calendar
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum

from .video_models import VideoRow

# Keyword searched when the operator leaves the keyword blank
DEFAULT_KEYWORD = "薄毛 対策 シャンプー"

# search.list returns at most 50 results per page
MAX_PAGE_SIZE = 50
PAGE_SIZE_CHOICES = (10, 20, 50)
MAX_SEARCH_PAGES = 10


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by whole months, clamping the day to the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def to_iso_timestamp(moment: datetime) -> str:
    """UTC ISO 8601 with millisecond precision and a ``Z`` suffix"""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ShortsMode(str, Enum):
    """How short-form videos are treated by the filter"""
    EXCLUDE = "exclude"
    INCLUDE = "include"
    ONLY = "only"


class LookbackPeriod(str, Enum):
    """Publication window searched, counted back from now"""
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    TWO_YEARS = "2y"
    THREE_YEARS = "3y"

    @property
    def months(self) -> int:
        return {"6m": 6, "1y": 12, "2y": 24, "3y": 36}[self.value]

    def published_after(self, now: Optional[datetime] = None) -> str:
        """Earliest publish timestamp for this window, as ISO 8601"""
        now = now or datetime.now(timezone.utc)
        return to_iso_timestamp(_shift_months(now, -self.months))


class RatioThreshold(int, Enum):
    """Multiple of the subscriber count a video's views must reach"""
    ONE = 1
    TWO = 2
    THREE = 3

    @property
    def label(self) -> str:
        return f"{self.value}x"


class FilterConfig(BaseModel):
    """
    Parameters of one search execution.

    Frozen: a running search never sees its configuration change.
    """
    model_config = ConfigDict(frozen=True)

    keyword: str = Field(DEFAULT_KEYWORD, description="Search keyword")
    min_views: int = Field(10000, ge=0, description="Minimum view count")
    country: Optional[str] = Field(None, description="Two-letter country code filter")
    page_size: int = Field(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Results per search page")
    max_pages: int = Field(MAX_SEARCH_PAGES, ge=1, le=MAX_SEARCH_PAGES, description="Search page budget")
    include_hidden: bool = Field(False, description="Skip the subscriber ratio requirement")
    period: LookbackPeriod = LookbackPeriod.THREE_YEARS
    shorts_mode: ShortsMode = ShortsMode.EXCLUDE
    ratio_threshold: RatioThreshold = RatioThreshold.THREE

    @field_validator('keyword', mode='before')
    @classmethod
    def default_blank_keyword(cls, v):
        v = (v or "").strip()
        return v or DEFAULT_KEYWORD

    @field_validator('page_size')
    @classmethod
    def page_size_choice(cls, v):
        if v not in PAGE_SIZE_CHOICES:
            raise ValueError(f"page_size must be one of {PAGE_SIZE_CHOICES}")
        return v

    @field_validator('country', mode='before')
    @classmethod
    def normalize_country(cls, v):
        v = (v or "").strip()
        return v.upper() or None


class SearchProgress(BaseModel):
    """Interim status of a running search"""
    current_page: int = 0
    total_pages: int = 0
    total_fetched: int = 0
    total_before_filter: int = 0
    total_filtered: int = 0


class FilterOutcome(BaseModel):
    """Rows surviving the filter stages plus before/after counts"""
    rows: List[VideoRow] = Field(default_factory=list)
    total_before: int = 0
    total_after: int = 0


class SearchResult(BaseModel):
    """Ranked rows produced by one search run"""
    generation: int
    config: FilterConfig
    rows: List[VideoRow] = Field(default_factory=list)
    total_before_filter: int = 0
    total_after_filter: int = 0
    searched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    applied: bool = Field(True, description="False when a newer search superseded this run")


class KeyCheckResult(BaseModel):
    """Outcome of the API key verification request"""
    ok: bool
    reason: str = ""
