from fastapi import HTTPException
from sqlalchemy.orm import Session

from myblog.models.profile import Profile
from myblog.schemas.comment_schema import AuthorProfile


def get_current_user_profile(db: Session, user_id: str) -> Profile:
    """
    One profile per account, keyed by the user id.
    """
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        raise HTTPException(status_code=400, detail="User has no profile")
    return profile


def author_profiles(db: Session, user_ids) -> dict[str, AuthorProfile]:
    """
    Looks up display profiles for a set of user ids.
    Ids with no profile row are simply absent from the result.
    """
    user_ids = {uid for uid in user_ids if uid}
    if not user_ids:
        return {}

    rows = db.query(Profile).filter(Profile.id.in_(user_ids)).all()

    return {
        p.id: AuthorProfile(nickname=p.nickname or "", avatar_url=p.avatar_url)
        for p in rows
    }
