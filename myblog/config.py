import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Settings:
    # -------------------------------------------------------
    # Project
    # -------------------------------------------------------
    PROJECT_NAME: str = "myblog API"
    ENV: str = os.getenv("ENV", "dev")

    # -------------------------------------------------------
    # Database
    # -------------------------------------------------------
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./myblog.db"
    )

    # Supabase hands out postgres:// but SQLAlchemy needs postgresql://
    if DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    # -------------------------------------------------------
    # Authentication / JWT
    # -------------------------------------------------------
    SECRET_KEY: str = os.getenv(
        "SECRET_KEY",
        "supersecretlocalkey123"   # Only used for local dev
    )
    ALGORITHM: str = "HS256"

    # 1 day token expiry by default
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
    )

    # -------------------------------------------------------
    # Supabase
    # -------------------------------------------------------
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
    SUPABASE_BUCKET: str = os.getenv("SUPABASE_BUCKET", "post-images")
    SUPABASE_AVATAR_BUCKET: str = os.getenv("SUPABASE_AVATAR_BUCKET", "avatars")

    # -------------------------------------------------------
    # Public base URL (used to build absolute media URLs)
    # -------------------------------------------------------
    BASE_URL: str = os.getenv(
        "BASE_URL",
        "http://127.0.0.1:8000"
    )

    # -------------------------------------------------------
    # Storage Configuration
    # -------------------------------------------------------
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")

    # Local media folder
    LOCAL_MEDIA_PATH: str = os.getenv(
        "LOCAL_MEDIA_PATH",
        "./media"   # Default for dev
    )

    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024
    MAX_IMAGE_DIMENSION: int = 1920

    # -------------------------------------------------------
    # Recent searches
    # -------------------------------------------------------
    RECENT_SEARCH_PATH: str = os.getenv(
        "RECENT_SEARCH_PATH",
        "./recent_searches.json"
    )
    MAX_RECENT_SEARCHES: int = 10

    # -------------------------------------------------------
    # Feed / comments
    # -------------------------------------------------------
    POSTS_PER_PAGE: int = 12
    COMMENTS_PAGE_SIZE: int = 20
    COMMENT_MAX_LENGTH: int = 1000
    MAX_TAGS: int = 5
    SEARCH_POST_LIMIT: int = 50
    SEARCH_PROFILE_LIMIT: int = 20


# Single instance that is imported everywhere
settings = Settings()
