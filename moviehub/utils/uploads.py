"""
Local storage for movie poster uploads

Files land in UPLOAD_DIR under a random name and are served by the
StaticFiles mount at /uploads.
"""
import logging
import os
import uuid
from typing import Optional

from dotenv import load_dotenv
from fastapi import HTTPException, UploadFile, status

load_dotenv()
logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 5 * 1024 * 1024))
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def get_upload_dir() -> str:
    return os.getenv("UPLOAD_DIR", "uploads")


def save_image(upload: UploadFile) -> str:
    """Persist an uploaded image and return its public path"""
    extension = ALLOWED_IMAGE_TYPES.get(upload.content_type or "")
    if extension is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files (jpeg, png, gif, webp) are allowed"
        )

    content = upload.file.read(MAX_UPLOAD_SIZE + 1)
    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image cannot exceed {MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
        )

    upload_dir = get_upload_dir()
    os.makedirs(upload_dir, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{extension}"
    with open(os.path.join(upload_dir, filename), "wb") as fh:
        fh.write(content)

    logger.debug(f"Stored upload {filename} ({len(content)} bytes)")
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def delete_image(public_path: Optional[str]) -> None:
    """Remove a previously stored image; unknown paths are ignored"""
    if not public_path or not public_path.startswith(UPLOAD_URL_PREFIX + "/"):
        return
    filename = os.path.basename(public_path)
    try:
        os.remove(os.path.join(get_upload_dir(), filename))
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove image {filename}: {e}")
