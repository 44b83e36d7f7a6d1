from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from myblog.models.comment import Comment
from myblog.models.comment_like import CommentLike
from myblog.models.post import Post
from myblog.models.post_like import PostLike


def _adjust_likes_count(db: Session, model, row_id: str, delta: int):
    """Counter change done in SQL so concurrent toggles don't overwrite each other."""
    column = model.likes_count

    if delta > 0:
        value = func.coalesce(column, 0) + delta
    else:
        # never below zero
        value = case((column > 0, column - 1), else_=0)

    db.query(model).filter(model.id == row_id).update(
        {column: value},
        synchronize_session=False,
    )


def _toggle_like(db: Session, like_model, target_model, target_id: str, **keys) -> bool:
    removed = db.query(like_model).filter_by(**keys).delete(synchronize_session=False)

    if removed:
        _adjust_likes_count(db, target_model, target_id, -1)
        db.commit()
        return False

    try:
        db.add(like_model(**keys))
        db.flush()
    except IntegrityError:
        # another request inserted the same like first; its count is already in
        db.rollback()
        return True

    _adjust_likes_count(db, target_model, target_id, 1)
    db.commit()
    return True


def toggle_comment_like(db: Session, comment: Comment, user_id: str) -> bool:
    """
    Likes or unlikes a comment for user_id and keeps likes_count in step.
    Returns the new liked state.
    """
    return _toggle_like(
        db, CommentLike, Comment, comment.id,
        comment_id=comment.id, user_id=user_id,
    )


def toggle_post_like(db: Session, post: Post, user_id: str) -> bool:
    return _toggle_like(
        db, PostLike, Post, post.id,
        post_id=post.id, user_id=user_id,
    )


def liked_comment_ids(db: Session, user_id: str | None, comment_ids) -> set[str]:
    if not user_id or not comment_ids:
        return set()

    rows = db.query(CommentLike.comment_id).filter(
        CommentLike.user_id == user_id,
        CommentLike.comment_id.in_(list(comment_ids)),
    ).all()
    return {row[0] for row in rows}


def has_liked_post(db: Session, user_id: str | None, post_id: str) -> bool:
    if not user_id:
        return False

    return db.query(PostLike).filter(
        PostLike.post_id == post_id,
        PostLike.user_id == user_id,
    ).first() is not None
