# myblog/routers/comment_router.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from myblog.auth import get_current_user, get_optional_user
from myblog.core.comment_loader import load_comment_page
from myblog.core.likes import toggle_comment_like
from myblog.database import get_db
from myblog.models.comment import Comment
from myblog.models.post import Post
from myblog.models.user import User
from myblog.routers.post_router import get_visible_post
from myblog.schemas.comment_schema import (
    CommentCreate,
    CommentPage,
    CommentUpdate,
)

router = APIRouter(tags=["Comments"])


# --------------------------------------------------
# HELPERS
# --------------------------------------------------

def get_comment(db: Session, comment_id: str) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise HTTPException(404, "Comment not found")
    return comment


def get_own_comment(db: Session, comment_id: str, user_id: str) -> Comment:
    comment = get_comment(db, comment_id)

    if comment.user_id != user_id:
        raise HTTPException(403, "Cannot modify this comment")

    if comment.is_deleted:
        raise HTTPException(400, "Comment has been deleted")

    return comment


def resolve_parent(db: Session, post: Post, parent_id: str | None) -> Comment | None:
    """
    A reply may answer a top-level comment or a direct reply, never anything
    deeper, and only within the same post.
    """
    if parent_id is None:
        return None

    parent = get_comment(db, parent_id)

    if parent.post_id != post.id:
        raise HTTPException(400, "Parent comment belongs to another post")

    if parent.is_deleted:
        raise HTTPException(400, "Cannot reply to a deleted comment")

    if parent.parent_id is not None:
        grandparent = get_comment(db, parent.parent_id)
        if grandparent.parent_id is not None:
            raise HTTPException(400, "Replies can only be nested two levels deep")

    return parent


# --------------------------------------------------
# LIST COMMENTS (ONE PAGE, ASSEMBLED)
# --------------------------------------------------

@router.get("/posts/{post_id}/comments", response_model=CommentPage)
def list_comments(
    post_id: str,
    page: int = 0,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    if page < 0:
        raise HTTPException(400, "page must be 0 or greater")

    viewer_id = current_user.id if current_user else None
    get_visible_post(db, post_id, viewer_id)

    return load_comment_page(db, post_id, page, viewer_id)


# --------------------------------------------------
# CREATE COMMENT / REPLY
# --------------------------------------------------

@router.post("/posts/{post_id}/comments", response_model=CommentPage, status_code=201)
def create_comment(
    post_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = get_visible_post(db, post_id, current_user.id)
    parent = resolve_parent(db, post, payload.parent_id)

    comment = Comment(
        post_id=post.id,
        user_id=current_user.id,
        content=payload.content,
        parent_id=parent.id if parent else None,
    )
    db.add(comment)

    post.comments_count = (post.comments_count or 0) + 1
    db.commit()

    # re-assemble rather than patch the previous page
    return load_comment_page(db, post.id, 0, current_user.id)


# --------------------------------------------------
# EDIT OWN COMMENT
# --------------------------------------------------

@router.put("/comments/{comment_id}", response_model=CommentPage)
def edit_comment(
    comment_id: str,
    payload: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = get_own_comment(db, comment_id, current_user.id)
    get_visible_post(db, comment.post_id, current_user.id)

    comment.content = payload.content
    db.commit()

    return load_comment_page(db, comment.post_id, 0, current_user.id)


# --------------------------------------------------
# DELETE OWN COMMENT (SOFT)
# --------------------------------------------------

@router.delete("/comments/{comment_id}", response_model=CommentPage)
def delete_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = get_own_comment(db, comment_id, current_user.id)
    get_visible_post(db, comment.post_id, current_user.id)

    # row stays so replies keep their parent
    comment.deleted_at = datetime.utcnow()
    db.commit()

    return load_comment_page(db, comment.post_id, 0, current_user.id)


# --------------------------------------------------
# LIKE TOGGLE
# --------------------------------------------------

@router.post("/comments/{comment_id}/like", response_model=CommentPage)
def like_comment(
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = get_comment(db, comment_id)
    get_visible_post(db, comment.post_id, current_user.id)

    if comment.is_deleted:
        raise HTTPException(400, "Cannot like a deleted comment")

    toggle_comment_like(db, comment, current_user.id)

    return load_comment_page(db, comment.post_id, 0, current_user.id)
