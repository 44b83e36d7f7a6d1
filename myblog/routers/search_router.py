from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from myblog.auth import get_current_user, get_optional_user
from myblog.config import settings
from myblog.core.profile_access import author_profiles
from myblog.core.recent_searches import RecentSearchStore, get_recent_search_store
from myblog.core.search_utils import escape_for_like, highlight_segments, snippet
from myblog.database import get_db
from myblog.models.post import Post
from myblog.models.profile import Profile
from myblog.models.user import User
from myblog.schemas.profile_schema import ProfileSearchResult
from myblog.schemas.search_schema import PostSearchResult, RecentSearches, SearchResults

router = APIRouter(prefix="/search", tags=["Search"])


# --------------------------------------------------
# SEARCH POSTS + AUTHORS
# --------------------------------------------------

@router.get("", response_model=SearchResults)
def search(
    q: str = "",
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
    recent: RecentSearchStore = Depends(get_recent_search_store),
):
    query = q.strip()
    if not query:
        raise HTTPException(400, "Enter a search term")

    pattern = f"%{escape_for_like(query)}%"

    posts = (
        db.query(Post)
        .filter(
            Post.is_public.is_(True),
            or_(
                Post.title.ilike(pattern, escape="\\"),
                Post.content.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(Post.created_at.desc())
        .limit(settings.SEARCH_POST_LIMIT)
        .all()
    )

    profiles = (
        db.query(Profile)
        .filter(Profile.nickname.ilike(pattern, escape="\\"))
        .limit(settings.SEARCH_PROFILE_LIMIT)
        .all()
    )

    authors = author_profiles(db, {p.user_id for p in posts})

    post_results = []
    for post in posts:
        excerpt = snippet(post.content, query)
        post_results.append(PostSearchResult(
            id=post.id,
            title=post.title,
            snippet=excerpt,
            image_url=post.image_url,
            created_at=post.created_at,
            likes_count=post.likes_count,
            comments_count=post.comments_count,
            views=post.views,
            user_id=post.user_id,
            author=authors.get(post.user_id),
            title_highlight=highlight_segments(post.title, query),
            snippet_highlight=highlight_segments(excerpt, query),
        ))

    if current_user:
        recent.add(current_user.id, query)

    return SearchResults(
        query=query,
        posts=post_results,
        profiles=[ProfileSearchResult.model_validate(p) for p in profiles],
    )


# --------------------------------------------------
# RECENT SEARCHES
# --------------------------------------------------

@router.get("/recent", response_model=RecentSearches)
def list_recent_searches(
    current_user: User = Depends(get_current_user),
    recent: RecentSearchStore = Depends(get_recent_search_store),
):
    return RecentSearches(terms=recent.get(current_user.id))


@router.delete("/recent/{term}", response_model=RecentSearches)
def remove_recent_search(
    term: str,
    current_user: User = Depends(get_current_user),
    recent: RecentSearchStore = Depends(get_recent_search_store),
):
    return RecentSearches(terms=recent.remove(current_user.id, term))


@router.delete("/recent", response_model=RecentSearches)
def clear_recent_searches(
    current_user: User = Depends(get_current_user),
    recent: RecentSearchStore = Depends(get_recent_search_store),
):
    recent.clear(current_user.id)
    return RecentSearches(terms=[])
