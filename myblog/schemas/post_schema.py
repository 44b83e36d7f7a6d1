from pydantic import BaseModel, field_validator
from typing import Optional, Literal
from datetime import datetime

from myblog.config import settings
from myblog.schemas.comment_schema import AuthorProfile


def clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None

    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if not tag:
            continue
        if tag in cleaned:
            raise ValueError("Tag already added")
        cleaned.append(tag)

    if len(cleaned) > settings.MAX_TAGS:
        raise ValueError(f"At most {settings.MAX_TAGS} tags are allowed")

    return cleaned or None


class PostCreate(BaseModel):
    title: str
    content: str
    image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    is_public: bool = True
    slug: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title and content are required")
        return value

    @field_validator("image_url", "slug")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("tags")
    @classmethod
    def tags_limit(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return clean_tags(value)


class PostUpdate(PostCreate):
    pass


class PostOut(BaseModel):
    id: str
    user_id: str
    author: Optional[AuthorProfile] = None

    title: str
    content: str
    image_url: Optional[str] = None
    tags: Optional[list[str]] = None
    is_public: bool
    slug: Optional[str] = None

    views: int
    likes_count: int
    comments_count: int

    created_at: datetime
    updated_at: Optional[datetime] = None

    # viewer state / UI permissions
    liked: bool = False
    can_edit: bool = False
    can_delete: bool = False

    class Config:
        from_attributes = True


class PostFeed(BaseModel):
    page: int
    sort: Literal["latest", "popular"]
    has_more: bool
    posts: list[PostOut]


class LikeState(BaseModel):
    liked: bool
    likes_count: int


class ImageUploadOut(BaseModel):
    url: str
