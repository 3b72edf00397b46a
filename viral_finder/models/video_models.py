"""Video and channel models for YouTube API responses and ranked result rows"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict
from enum import Enum


def _to_optional_int(value):
    """The API reports counts as strings; absent or blank means unknown."""
    if value is None or value == "":
        return None
    return int(value)


class MatchedRule(str, Enum):
    """Qualification criterion a row satisfied"""
    RATIO_1X = "1x"
    RATIO_2X = "2x"
    RATIO_3X = "3x"
    MIN_VIEWS = "minViews"
    NONE = "none"

    @classmethod
    def for_ratio(cls, multiple: int) -> "MatchedRule":
        """Rule label for a ratio multiple (1, 2 or 3)"""
        return cls(f"{int(multiple)}x")


class Thumbnail(BaseModel):
    """A single thumbnail resolution"""
    url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class VideoSnippet(BaseModel):
    """Video basic information as returned by videos.list"""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field("", description="Video title")
    description: str = Field("", description="Video description")
    channel_id: str = Field("", alias="channelId", description="Owning channel ID")
    channel_title: str = Field("", alias="channelTitle", description="Channel name")
    published_at: str = Field("", alias="publishedAt", description="Publication timestamp (ISO 8601)")
    thumbnails: Dict[str, Thumbnail] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)

    @field_validator('title', 'description', 'channel_id', 'channel_title', 'published_at', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('tags', mode='before')
    @classmethod
    def tags_to_list(cls, v):
        return v if isinstance(v, list) else []


class VideoStatistics(BaseModel):
    """Video statistics; every counter may be withheld by the uploader"""
    model_config = ConfigDict(populate_by_name=True)

    view_count: Optional[int] = Field(None, alias="viewCount")
    like_count: Optional[int] = Field(None, alias="likeCount")
    comment_count: Optional[int] = Field(None, alias="commentCount")

    @field_validator('view_count', 'like_count', 'comment_count', mode='before')
    @classmethod
    def coerce_counts(cls, v):
        return _to_optional_int(v)


class VideoContentDetails(BaseModel):
    """Content details of a video"""
    duration: Optional[str] = Field(None, description="Duration in ISO 8601 format, e.g. PT1M5S")


class YouTubeVideoRaw(BaseModel):
    """
    Raw YouTube API video resource.

    Mirrors a videos.list item. Every nested part is optional because the
    API omits parts that were not requested or are unavailable.
    """
    model_config = ConfigDict(populate_by_name=True)

    video_id: str = Field(..., alias="id", description="YouTube video ID")
    snippet: VideoSnippet = Field(default_factory=VideoSnippet)
    statistics: Optional[VideoStatistics] = None
    content_details: Optional[VideoContentDetails] = Field(None, alias="contentDetails")

    @property
    def duration(self) -> Optional[str]:
        return self.content_details.duration if self.content_details else None

    def thumbnail_url(self) -> str:
        """Medium thumbnail, then default, else empty"""
        for name in ("medium", "default"):
            thumb = self.snippet.thumbnails.get(name)
            if thumb and thumb.url:
                return thumb.url
        return ""


class ChannelSnippet(BaseModel):
    title: str = ""
    country: Optional[str] = None

    @field_validator('country', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return v or None


class ChannelStatistics(BaseModel):
    """Channel statistics; subscriber count may be hidden"""
    model_config = ConfigDict(populate_by_name=True)

    subscriber_count: Optional[int] = Field(None, alias="subscriberCount")
    hidden_subscriber_count: bool = Field(False, alias="hiddenSubscriberCount")
    view_count: Optional[int] = Field(None, alias="viewCount")
    video_count: Optional[int] = Field(None, alias="videoCount")

    @field_validator('subscriber_count', 'view_count', 'video_count', mode='before')
    @classmethod
    def coerce_counts(cls, v):
        return _to_optional_int(v)

    @field_validator('hidden_subscriber_count', mode='before')
    @classmethod
    def none_to_false(cls, v):
        return bool(v)


class YouTubeChannelRaw(BaseModel):
    """Raw YouTube API channel resource (channels.list item)"""
    model_config = ConfigDict(populate_by_name=True)

    channel_id: str = Field(..., alias="id", description="YouTube channel ID")
    snippet: ChannelSnippet = Field(default_factory=ChannelSnippet)
    statistics: Optional[ChannelStatistics] = None


class VideoRow(BaseModel):
    """
    One ranked result: a video joined with its channel.

    ``spread_rate`` is set exactly when the subscriber count is known,
    not hidden and greater than zero.
    """
    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str = ""
    channel_id: str = ""
    channel_title: str = ""
    published_at: str = ""
    view_count: int = Field(0, ge=0)
    like_count: Optional[int] = None
    thumbnail_url: str = ""
    video_url: str
    channel_url: str
    subscriber_count: Optional[int] = None
    hidden_subscriber_count: bool = False
    country: Optional[str] = None
    matched_rule: MatchedRule = MatchedRule.NONE
    is_short: bool = False
    spread_rate: Optional[float] = None
