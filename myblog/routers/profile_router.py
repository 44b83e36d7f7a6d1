from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy import select
from sqlalchemy.orm import Session

from myblog.auth import get_current_user, get_optional_user
from myblog.config import settings
from myblog.core.profile_access import get_current_user_profile
from myblog.database import get_db
from myblog.models.post import Post
from myblog.models.post_like import PostLike
from myblog.models.profile import Profile
from myblog.models.user import User
from myblog.routers.auth_router import MIN_NICKNAME_LENGTH
from myblog.routers.post_router import serialize_posts
from myblog.schemas.post_schema import PostOut
from myblog.schemas.profile_schema import ProfileOut, ProfileUpdate
from myblog.storage import delete_file, save_image, validate_image

router = APIRouter(prefix="/profiles", tags=["Profiles"])


def serialize_profile(profile: Profile, viewer_id) -> ProfileOut:
    out = ProfileOut.model_validate(profile)

    # email stays private unless the owner made it public
    if profile.user_id != viewer_id and not profile.email_public:
        out = out.model_copy(update={"email": None})

    return out


# --------------------------------------------------
# MY PROFILE
# --------------------------------------------------

@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = get_current_user_profile(db, current_user.id)
    return serialize_profile(profile, current_user.id)


@router.put("/me", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = get_current_user_profile(db, current_user.id)

    data = payload.model_dump(exclude_unset=True)

    if "nickname" in data:
        nickname = (data["nickname"] or "").strip()
        if len(nickname) < MIN_NICKNAME_LENGTH:
            raise HTTPException(
                400,
                f"Nickname must be at least {MIN_NICKNAME_LENGTH} characters long",
            )

        taken = db.query(Profile).filter(
            Profile.nickname == nickname,
            Profile.id != profile.id,
        ).first()
        if taken:
            raise HTTPException(400, "Nickname already in use")

        profile.nickname = nickname

    # blank strings clear the field
    for field in ("bio", "avatar_url"):
        if field in data:
            setattr(profile, field, (data[field] or "").strip() or None)

    if data.get("email_public") is not None:
        profile.email_public = data["email_public"]

    db.commit()
    db.refresh(profile)

    return serialize_profile(profile, current_user.id)


@router.post("/me/avatar", response_model=ProfileOut)
def upload_avatar(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = get_current_user_profile(db, current_user.id)

    ok, status_code, err = validate_image(file)
    if not ok:
        raise HTTPException(status_code=status_code, detail=err)

    try:
        url = save_image(current_user.id, file, bucket=settings.SUPABASE_AVATAR_BUCKET)
    except ValueError as e:
        raise HTTPException(400, str(e))

    old_url = profile.avatar_url
    profile.avatar_url = url
    db.commit()
    db.refresh(profile)

    if old_url and old_url != url:
        delete_file(old_url, bucket=settings.SUPABASE_AVATAR_BUCKET)

    return serialize_profile(profile, current_user.id)


# --------------------------------------------------
# MY POSTS / LIKED POSTS
# --------------------------------------------------

@router.get("/me/posts", response_model=list[PostOut])
def list_my_posts(
    filter: Literal["all", "public", "private"] = "all",
    sort: Literal["latest", "popular", "views"] = "latest",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Post).filter(Post.user_id == current_user.id)

    if filter == "public":
        query = query.filter(Post.is_public.is_(True))
    elif filter == "private":
        query = query.filter(Post.is_public.is_(False))

    if sort == "popular":
        query = query.order_by(
            (Post.likes_count + Post.comments_count).desc(),
            Post.created_at.desc(),
        )
    elif sort == "views":
        query = query.order_by(Post.views.desc(), Post.created_at.desc())
    else:
        query = query.order_by(Post.created_at.desc())

    return serialize_posts(db, query.all(), current_user.id)


@router.get("/me/liked-posts", response_model=list[PostOut])
def list_liked_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    liked_post_ids = select(PostLike.post_id).where(
        PostLike.user_id == current_user.id
    )

    posts = (
        db.query(Post)
        .filter(
            Post.id.in_(liked_post_ids),
            # someone else's post that went private drops out
            (Post.is_public.is_(True)) | (Post.user_id == current_user.id),
        )
        .order_by(Post.created_at.desc())
        .all()
    )

    return serialize_posts(db, posts, current_user.id)


# --------------------------------------------------
# PUBLIC PROFILE
# --------------------------------------------------

@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(
    profile_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(404, "Profile not found")

    viewer_id = current_user.id if current_user else None
    return serialize_profile(profile, viewer_id)
