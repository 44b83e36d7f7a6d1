import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from myblog.config import settings
from myblog.core.comment_tree import assemble_comment_groups
from myblog.core.likes import liked_comment_ids
from myblog.core.profile_access import author_profiles
from myblog.models.comment import Comment
from myblog.schemas.comment_schema import CommentPage, CommentRecord

logger = logging.getLogger("uvicorn.error")


def _records(rows) -> list[CommentRecord]:
    return [CommentRecord.model_validate(row) for row in rows]


def fetch_top_level(db: Session, post_id: str, page: int, page_size: int):
    return (
        db.query(Comment)
        .filter(
            Comment.post_id == post_id,
            Comment.parent_id.is_(None),
        )
        .order_by(Comment.created_at.desc(), Comment.id.asc())
        .offset(page * page_size)
        .limit(page_size)
        .all()
    )


def fetch_replies(db: Session, parent_ids: list[str]):
    if not parent_ids:
        return []

    return (
        db.query(Comment)
        .filter(Comment.parent_id.in_(parent_ids))
        .order_by(Comment.created_at.desc())
        .all()
    )


def load_comment_page(
    db: Session,
    post_id: str,
    page: int = 0,
    viewer_id: str | None = None,
    page_size: int | None = None,
) -> CommentPage:
    """
    Fetches one window of top-level comments plus both reply tiers, the
    authors and the viewer's likes, then assembles them.

    Nothing is assembled until every fetch has come back; a failed query
    becomes a 503 instead of a page with missing replies.
    """
    page_size = page_size or settings.COMMENTS_PAGE_SIZE

    try:
        top_level = _records(fetch_top_level(db, post_id, page, page_size))
        direct = _records(fetch_replies(db, [c.id for c in top_level]))
        nested = _records(fetch_replies(db, [r.id for r in direct]))

        every = top_level + direct + nested
        profiles = author_profiles(db, {c.user_id for c in every})
        liked = liked_comment_ids(db, viewer_id, {c.id for c in every})

    except SQLAlchemyError as e:
        logger.error(f"Could not load comments for post {post_id}: {e}")
        raise HTTPException(status_code=503, detail="Could not load comments")

    groups = assemble_comment_groups(
        top_level,
        direct,
        nested,
        profiles,
        liked_ids=liked,
        viewer_id=viewer_id,
    )

    return CommentPage(
        post_id=post_id,
        page=page,
        has_more=len(top_level) == page_size,
        comments=groups,
    )
