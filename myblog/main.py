import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from myblog.database import Base, engine
from myblog.config import settings
from myblog.core.recent_searches import create_recent_search_store

# Import models so SQLAlchemy registers tables
from myblog.models import (
    user,
    profile,
    post,
    comment,
    post_like,
    comment_like,
)

# Routers
from myblog.routers import (
    auth_router,
    profile_router,
    post_router,
    comment_router,
    search_router,
)

logger = logging.getLogger("uvicorn.error")


# -----------------------
# AUTO-CREATE MEDIA FOLDERS
# -----------------------
def ensure_media_folders():
    """
    Create the local media folders for both buckets on startup.
    """
    for bucket in (settings.SUPABASE_BUCKET, settings.SUPABASE_AVATAR_BUCKET):
        os.makedirs(os.path.join(settings.LOCAL_MEDIA_PATH, bucket), exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")

    # -----------------------
    # DATABASE TABLES
    # -----------------------
    Base.metadata.create_all(bind=engine)

    if settings.STORAGE_BACKEND == "local":
        ensure_media_folders()

    app.state.recent_searches = create_recent_search_store()
    logger.info("Recent search store loaded.")

    yield

    logger.info("Application shutdown.")


# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend API for the myblog personal blogging application.",
    version="1.0.0",
    lifespan=lifespan,
)

# -----------------------
# CORS
# -----------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # allow all during development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# STATIC MEDIA FILES
# -----------------------
app.mount(
    "/media",
    StaticFiles(directory=settings.LOCAL_MEDIA_PATH, check_dir=False),
    name="media",
)

# -----------------------
# ROUTES
# -----------------------
app.include_router(auth_router.router)
app.include_router(profile_router.router)
app.include_router(post_router.router)
app.include_router(comment_router.router)
app.include_router(search_router.router)


# -----------------------
# HEALTH CHECK
# -----------------------
@app.get("/")
def root():
    return {"message": "myblog API is running!"}
