# backend/routes/upload.py
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from utils.media import ALLOWED_EXTENSIONS, DEFAULT_UPLOAD_TYPE, MediaUploadError, file_extension, store_image

router = APIRouter(prefix="/api", tags=["Upload"])
logger = logging.getLogger(__name__)


# Image upload for categories, brands, products and the store logo
@router.post("/upload")
def upload_image(image: Optional[UploadFile] = File(None), type: str = Form(DEFAULT_UPLOAD_TYPE)):
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if file_extension(image.filename) not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Invalid file type")

    try:
        url = store_image(image.file, image.filename, type)
    except MediaUploadError as e:
        logger.exception("Upload of %s failed", image.filename)
        raise HTTPException(status_code=500, detail=f"Upload failed: {e}")
    finally:
        image.file.close()

    return {"imageUrl": url}
