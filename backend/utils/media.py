# backend/utils/media.py
import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import BinaryIO

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}
UPLOAD_TYPES = {"category", "brand", "product", "logo"}
DEFAULT_UPLOAD_TYPE = "outros"


class MediaUploadError(Exception):
    pass


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def upload_folder(upload_type: str) -> str:
    kind = upload_type if upload_type in UPLOAD_TYPES else DEFAULT_UPLOAD_TYPE
    return f"{settings.UPLOAD_FOLDER_PREFIX}/{kind}"


def _upload_cloudinary(fileobj: BinaryIO, filename: str, folder: str) -> str:
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    # Millisecond prefix keeps public ids unique per upload
    public_id = f"{int(time.time() * 1000)}-{filename.rsplit('.', 1)[0]}"
    try:
        result = cloudinary.uploader.upload(
            fileobj,
            folder=folder,
            public_id=public_id,
            allowed_formats=sorted(ALLOWED_EXTENSIONS),
        )
    except cloudinary.exceptions.Error as e:
        logger.error(f"Cloudinary upload error: {e}")
        raise MediaUploadError(str(e)) from e
    return result["secure_url"]


def _upload_local(fileobj: BinaryIO, filename: str, folder: str) -> str:
    kind = folder.rsplit("/", 1)[-1]
    target_dir = Path(settings.UPLOAD_DIR) / kind
    target_dir.mkdir(parents=True, exist_ok=True)
    unique_filename = f"{uuid.uuid4()}.{file_extension(filename)}"
    try:
        with open(target_dir / unique_filename, "wb") as buffer:
            shutil.copyfileobj(fileobj, buffer)
    except OSError as e:
        raise MediaUploadError(f"File save error: {e}") from e
    return f"/uploads/{kind}/{unique_filename}"


def store_image(fileobj: BinaryIO, filename: str, upload_type: str) -> str:
    """Store an image on the media host (or locally) and return its public URL."""
    folder = upload_folder(upload_type)
    if settings.cloudinary_enabled:
        return _upload_cloudinary(fileobj, filename, folder)
    return _upload_local(fileobj, filename, folder)
