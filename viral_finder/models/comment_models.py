"""Comment thread models for commentThreads.list responses and export rows"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List


class CommentSnippet(BaseModel):
    """Snippet of a single comment or reply"""
    model_config = ConfigDict(populate_by_name=True)

    author_display_name: str = Field("", alias="authorDisplayName")
    text_display: str = Field("", alias="textDisplay")
    text_original: str = Field("", alias="textOriginal")
    parent_id: Optional[str] = Field(None, alias="parentId")
    like_count: int = Field(0, alias="likeCount")
    published_at: str = Field("", alias="publishedAt")
    updated_at: str = Field("", alias="updatedAt")

    @field_validator('author_display_name', 'text_display', 'text_original',
                     'published_at', 'updated_at', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator('like_count', mode='before')
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v

    @property
    def text(self) -> str:
        """Display text, falling back to the original text"""
        return self.text_display or self.text_original


class CommentRaw(BaseModel):
    """A comment resource"""
    comment_id: str = Field(..., alias="id")
    snippet: CommentSnippet = Field(default_factory=CommentSnippet)


class ThreadSnippet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    top_level_comment: Optional[CommentRaw] = Field(None, alias="topLevelComment")
    total_reply_count: int = Field(0, alias="totalReplyCount")


class ThreadReplies(BaseModel):
    comments: List[CommentRaw] = Field(default_factory=list)


class CommentThreadRaw(BaseModel):
    """
    Raw commentThreads.list item.

    ``replies`` only holds the replies the API chose to inline; the
    thread may have more than are listed here.
    """
    thread_id: str = Field("", alias="id")
    snippet: ThreadSnippet = Field(default_factory=ThreadSnippet)
    replies: Optional[ThreadReplies] = None


class CommentRow(BaseModel):
    """One comment or reply, flattened for display and export"""
    model_config = ConfigDict(frozen=True)

    video_id: str
    comment_id: str
    parent_id: Optional[str] = Field(None, description="None for top-level comments")
    author_display_name: str = ""
    text_original: str = ""
    like_count: int = 0
    published_at: str = ""
    updated_at: Optional[str] = None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None
