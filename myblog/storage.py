import io
import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile
from PIL import Image

from myblog.config import settings

logger = logging.getLogger("uvicorn.error")


# ==========================================================
# LIMITS
# ==========================================================
ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]
ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]

# Pillow format name -> (stored extension, content type)
IMAGE_FORMATS = {
    "JPEG": (".jpg", "image/jpeg"),
    "PNG": (".png", "image/png"),
    "GIF": (".gif", "image/gif"),
    "WEBP": (".webp", "image/webp"),
}


def is_allowed_image_type(content_type: str | None) -> bool:
    return (content_type or "").lower() in ALLOWED_IMAGE_TYPES


def is_within_size_limit(size: int) -> bool:
    return size <= settings.MAX_IMAGE_SIZE


# ==========================================================
# VALIDATE IMAGE UPLOAD
# ==========================================================
def validate_image(file: UploadFile):
    """
    Returns (ok, status_code, error) for an uploaded image.
    """
    if not is_allowed_image_type(file.content_type):
        ext = os.path.splitext(file.filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS or file.content_type:
            return False, 415, "Only jpg, png, gif and webp images can be uploaded."

    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)

    if not is_within_size_limit(size):
        return False, 413, "Image too large (max 5MB)."

    return True, None, None


# ==========================================================
# DETECT FORMAT
# ==========================================================
def detect_image_format(contents: bytes):
    """
    Returns (extension, content_type) for the format Pillow reads from
    the bytes. The client's filename and content type are not trusted.
    """
    try:
        with Image.open(io.BytesIO(contents)) as img:
            fmt = img.format
    except (OSError, Image.DecompressionBombError):
        raise ValueError("File is not a readable image.")

    if fmt not in IMAGE_FORMATS:
        raise ValueError("Only jpg, png, gif and webp images can be uploaded.")

    return IMAGE_FORMATS[fmt]


# ==========================================================
# RESIZE
# ==========================================================
def resize_image(contents: bytes, max_dimension: int | None = None):
    """
    Shrinks an image so neither side exceeds max_dimension.

    Returns (bytes, content_type). Images already inside the limit, and
    anything Pillow cannot draw, are returned untouched.
    """
    max_dimension = max_dimension or settings.MAX_IMAGE_DIMENSION

    try:
        with Image.open(io.BytesIO(contents)) as img:
            width, height = img.size
            if width <= max_dimension and height <= max_dimension:
                return contents, None

            if width > height:
                height = round(height * max_dimension / width)
                width = max_dimension
            else:
                width = round(width * max_dimension / height)
                height = max_dimension

            resized = img.convert("RGB").resize((width, height), Image.Resampling.LANCZOS)

            out = io.BytesIO()
            resized.save(out, format="JPEG", quality=90)
            return out.getvalue(), "image/jpeg"

    except (OSError, Image.DecompressionBombError) as e:
        logger.warning(f"Could not resize image, storing original: {e}")
        return contents, None


# ==========================================================
# EXTRACT SUPABASE STORAGE KEY
# ==========================================================
def extract_storage_key(url_or_path: str, bucket: str | None = None) -> str:
    """
    Converts Supabase public URL → storage key.
    """
    bucket = bucket or settings.SUPABASE_BUCKET

    if not url_or_path:
        return ""

    if url_or_path.startswith("http"):
        marker = f"/storage/v1/object/public/{bucket}/"
        if marker in url_or_path:
            return url_or_path.split(marker)[1]
        # not one of ours
        return ""

    return url_or_path.strip("/")


def absolute_media_url(path: str | None) -> str | None:
    if not path:
        return None

    # already absolute → leave it
    if path.startswith("http://") or path.startswith("https://"):
        return path

    return f"{settings.BASE_URL}{path}"


# ==========================================================
# SAVE (LOCAL or SUPABASE)
# ==========================================================
def save_bytes(
    folder: str,
    filename: str,
    contents: bytes,
    content_type: str,
    bucket: str | None = None,
) -> str:
    folder = folder.strip("/")
    bucket = bucket or settings.SUPABASE_BUCKET

    if not contents:
        raise ValueError("File is empty – nothing to upload")

    # -----------------------------
    # LOCAL STORAGE
    # -----------------------------
    if settings.STORAGE_BACKEND == "local":
        folder_path = Path(settings.LOCAL_MEDIA_PATH) / bucket / folder
        folder_path.mkdir(parents=True, exist_ok=True)

        file_path = folder_path / filename
        file_path.write_bytes(contents)

        rel = file_path.relative_to(settings.LOCAL_MEDIA_PATH)
        return f"/media/{rel}".replace("\\", "/")

    # -----------------------------
    # SUPABASE STORAGE
    # -----------------------------
    elif settings.STORAGE_BACKEND == "supabase":
        from myblog.supabase_client import get_supabase

        storage_key = f"{folder}/{filename}"
        supabase = get_supabase()

        res = supabase.storage.from_(bucket).upload(
            storage_key,
            contents,
            {
                "content-type": content_type or "application/octet-stream",
                "upsert": "true",
            },
        )

        if not res:
            raise RuntimeError("Supabase upload failed (no response)")

        logger.info(f"Supabase upload OK: {storage_key}")

        return supabase.storage.from_(bucket).get_public_url(storage_key)

    else:
        raise ValueError("Invalid STORAGE_BACKEND")


def save_image(user_id: str, upload: UploadFile, bucket: str | None = None) -> str:
    """
    Resizes an uploaded image and stores it under the user's folder.
    Returns the public URL (absolute for local storage).

    Raises ValueError when the bytes are not a supported image.
    """
    upload.file.seek(0)
    contents = upload.file.read()

    ext, content_type = detect_image_format(contents)

    data, resized_type = resize_image(contents)
    if resized_type:
        ext, content_type = ".jpg", resized_type

    path = save_bytes(
        folder=user_id,
        filename=f"{uuid.uuid4()}{ext}",
        contents=data,
        content_type=content_type,
        bucket=bucket,
    )
    return absolute_media_url(path)


# ==========================================================
# DELETE FILE (LOCAL or SUPABASE)
# ==========================================================
def delete_file(path: str, bucket: str | None = None):
    if not path:
        return

    # -----------------------------
    # LOCAL DELETE
    # -----------------------------
    if settings.STORAGE_BACKEND == "local":
        if path.startswith(settings.BASE_URL):
            path = path[len(settings.BASE_URL):]
        if not path.startswith("/media/"):
            return

        fs_path = Path(settings.LOCAL_MEDIA_PATH) / path[len("/media/"):]
        try:
            fs_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Local delete failed: {fs_path} ({e})")

    # -----------------------------
    # SUPABASE DELETE
    # -----------------------------
    elif settings.STORAGE_BACKEND == "supabase":
        from myblog.supabase_client import get_supabase

        bucket = bucket or settings.SUPABASE_BUCKET
        key = extract_storage_key(path, bucket)
        if not key:
            return
        try:
            get_supabase().storage.from_(bucket).remove([key])
            logger.info(f"Supabase delete OK: {key}")
        except Exception as e:
            logger.warning(f"Supabase delete failed: {e}")
