from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from myblog.schemas.comment_schema import AuthorProfile
from myblog.schemas.profile_schema import ProfileSearchResult


class PostSearchResult(BaseModel):
    id: str
    title: str
    snippet: str
    image_url: Optional[str] = None
    created_at: datetime
    likes_count: int
    comments_count: int
    views: int
    user_id: str
    author: Optional[AuthorProfile] = None

    # (text, matched) pairs for highlighting the query
    title_highlight: list[tuple[str, bool]]
    snippet_highlight: list[tuple[str, bool]]


class SearchResults(BaseModel):
    query: str
    posts: list[PostSearchResult]
    profiles: list[ProfileSearchResult]


class RecentSearches(BaseModel):
    terms: list[str]
