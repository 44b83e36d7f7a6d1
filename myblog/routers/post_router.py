from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from myblog.auth import get_current_user, get_optional_user
from myblog.config import settings
from myblog.core.likes import has_liked_post, toggle_post_like
from myblog.core.profile_access import author_profiles
from myblog.core.slug import generate_slug
from myblog.database import get_db
from myblog.models.post import Post
from myblog.models.post_like import PostLike
from myblog.models.user import User
from myblog.schemas.post_schema import (
    ImageUploadOut,
    LikeState,
    PostCreate,
    PostFeed,
    PostOut,
    PostUpdate,
)
from myblog.storage import delete_file, save_image, validate_image

router = APIRouter(prefix="/posts", tags=["Posts"])


# --------------------------------------------------
# HELPERS
# --------------------------------------------------

def serialize_post(post: Post, viewer_id, profiles, liked: bool = False) -> PostOut:
    is_own = viewer_id is not None and post.user_id == viewer_id

    out = PostOut.model_validate(post)
    return out.model_copy(update={
        "author": profiles.get(post.user_id),
        "liked": liked,
        "can_edit": is_own,
        "can_delete": is_own,
    })


def serialize_posts(db: Session, posts, viewer_id=None) -> list[PostOut]:
    profiles = author_profiles(db, {p.user_id for p in posts})

    liked_ids = set()
    if viewer_id and posts:
        rows = db.query(PostLike.post_id).filter(
            PostLike.user_id == viewer_id,
            PostLike.post_id.in_([p.id for p in posts]),
        ).all()
        liked_ids = {row[0] for row in rows}

    return [serialize_post(p, viewer_id, profiles, p.id in liked_ids) for p in posts]


def get_visible_post(db: Session, post_id: str, viewer_id) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()

    # private posts exist only for their author
    if not post or (not post.is_public and post.user_id != viewer_id):
        raise HTTPException(404, "Post not found")

    return post


def get_own_post(db: Session, post_id: str, user_id: str) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise HTTPException(404, "Post not found")

    if post.user_id != user_id:
        raise HTTPException(403, "Cannot modify this post")

    return post


def ensure_slug_free(db: Session, slug: str, post_id: str | None = None):
    query = db.query(Post).filter(Post.slug == slug)
    if post_id:
        query = query.filter(Post.id != post_id)

    if query.first():
        raise HTTPException(409, "Slug already in use, please change the title")


def commit_post(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Slug already in use, please change the title")


# --------------------------------------------------
# FEED
# --------------------------------------------------

@router.get("", response_model=PostFeed)
def list_posts(
    sort: Literal["latest", "popular"] = "latest",
    page: int = 0,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    if page < 0:
        raise HTTPException(400, "page must be 0 or greater")

    query = db.query(Post).filter(Post.is_public.is_(True))

    if sort == "latest":
        query = query.order_by(Post.created_at.desc(), Post.id.asc())
    else:
        query = query.order_by(Post.likes_count.desc(), Post.created_at.desc())

    posts = (
        query
        .offset(page * settings.POSTS_PER_PAGE)
        .limit(settings.POSTS_PER_PAGE)
        .all()
    )

    viewer_id = current_user.id if current_user else None

    return PostFeed(
        page=page,
        sort=sort,
        has_more=len(posts) == settings.POSTS_PER_PAGE,
        posts=serialize_posts(db, posts, viewer_id),
    )


# --------------------------------------------------
# IMAGE UPLOAD
# --------------------------------------------------

@router.post("/images", response_model=ImageUploadOut)
def upload_post_image(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
):
    ok, status_code, err = validate_image(file)
    if not ok:
        raise HTTPException(status_code=status_code, detail=err)

    try:
        url = save_image(current_user.id, file, bucket=settings.SUPABASE_BUCKET)
    except ValueError as e:
        raise HTTPException(400, str(e))

    return ImageUploadOut(url=url)


# --------------------------------------------------
# CREATE POST
# --------------------------------------------------

@router.post("", response_model=PostOut, status_code=201)
def create_post(
    payload: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    slug = payload.slug or generate_slug(payload.title) or None
    if slug:
        ensure_slug_free(db, slug)

    post = Post(
        user_id=current_user.id,
        title=payload.title,
        content=payload.content,
        image_url=payload.image_url,
        tags=payload.tags,
        is_public=payload.is_public,
        slug=slug,
    )

    db.add(post)
    commit_post(db)
    db.refresh(post)

    return serialize_post(post, current_user.id, author_profiles(db, {post.user_id}))


# --------------------------------------------------
# POST DETAIL
# --------------------------------------------------

@router.get("/{post_id}", response_model=PostOut)
def get_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    viewer_id = current_user.id if current_user else None
    post = get_visible_post(db, post_id, viewer_id)

    post.views = (post.views or 0) + 1
    db.commit()
    db.refresh(post)

    return serialize_post(
        post,
        viewer_id,
        author_profiles(db, {post.user_id}),
        liked=has_liked_post(db, viewer_id, post.id),
    )


# --------------------------------------------------
# EDIT OWN POST
# --------------------------------------------------

@router.put("/{post_id}", response_model=PostOut)
def edit_post(
    post_id: str,
    payload: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = get_own_post(db, post_id, current_user.id)

    slug = payload.slug or generate_slug(payload.title) or None
    if slug:
        ensure_slug_free(db, slug, post.id)

    post.title = payload.title
    post.content = payload.content
    post.image_url = payload.image_url
    post.tags = payload.tags
    post.is_public = payload.is_public
    post.slug = slug

    commit_post(db)
    db.refresh(post)

    return serialize_post(
        post,
        current_user.id,
        author_profiles(db, {post.user_id}),
        liked=has_liked_post(db, current_user.id, post.id),
    )


# --------------------------------------------------
# DELETE OWN POST
# --------------------------------------------------

@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = get_own_post(db, post_id, current_user.id)
    image_url = post.image_url

    # comments and likes go with it
    db.delete(post)
    db.commit()

    delete_file(image_url, bucket=settings.SUPABASE_BUCKET)

    return {"status": "deleted"}


# --------------------------------------------------
# LIKE TOGGLE
# --------------------------------------------------

@router.post("/{post_id}/like", response_model=LikeState)
def like_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = get_visible_post(db, post_id, current_user.id)

    liked = toggle_post_like(db, post, current_user.id)
    db.refresh(post)

    return LikeState(liked=liked, likes_count=post.likes_count)
