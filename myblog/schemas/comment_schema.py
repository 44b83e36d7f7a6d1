# myblog/schemas/comment_schema.py

from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime

from myblog.config import settings


def clean_comment_content(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Comment cannot be empty")
    if len(value) > settings.COMMENT_MAX_LENGTH:
        raise ValueError(
            f"Comment must be {settings.COMMENT_MAX_LENGTH} characters or fewer"
        )
    return value


class CommentCreate(BaseModel):
    content: str
    parent_id: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_length(cls, value: str) -> str:
        return clean_comment_content(value)


class CommentUpdate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_length(cls, value: str) -> str:
        return clean_comment_content(value)


class AuthorProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    nickname: str
    avatar_url: Optional[str] = None


class CommentRecord(BaseModel):
    """A comment row as fetched, before any display fields are derived."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    parent_id: Optional[str] = None
    likes_count: int = 0
    deleted_at: Optional[datetime] = None


class CommentOut(CommentRecord):
    author: AuthorProfile

    liked: bool = False
    is_deleted: bool = False

    # UI permissions
    can_edit: bool = False
    can_delete: bool = False
    can_reply: bool = False

    # id a reply to this comment should be submitted against
    reply_target_id: Optional[str] = None


class ReplyItem(CommentOut):
    # set only for second-tier replies: the direct reply being answered
    reply_to_id: Optional[str] = None
    reply_to_author: Optional[AuthorProfile] = None


class CommentGroup(CommentOut):
    replies: list[ReplyItem] = []


class CommentPage(BaseModel):
    post_id: str
    page: int
    has_more: bool
    comments: list[CommentGroup]
