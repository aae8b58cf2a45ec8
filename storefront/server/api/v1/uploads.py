"""
Image Upload Endpoint.

Admins upload product images here. Files are stored under the configured
upload directory with a generated name and served back from ``/uploads``.
"""

import os
import uuid
from pathlib import Path
from typing import BinaryIO

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from storefront.core.logging_config import get_logger
from storefront.server.core.config import settings
from storefront.server.services.deps import AdminUserDep

logger = get_logger(__name__)

router = APIRouter()

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
UPLOAD_URL_PREFIX = "/uploads"
CHUNK_SIZE = 64 * 1024


def is_image(filename: str, content_type: str | None) -> bool:
    """Accept only jpg/jpeg/png/webp by extension and, when sent, MIME type."""
    extension = os.path.splitext(filename)[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        return False
    return content_type is None or content_type in ALLOWED_CONTENT_TYPES


def save_upload(source: BinaryIO, target: Path, max_bytes: int) -> bool:
    """Copy ``source`` to ``target`` in chunks, giving up past ``max_bytes``.

    Returns:
        False if the file was too large; nothing is left on disk then.
    """
    written = 0
    with target.open("wb") as out:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                break
            out.write(chunk)
    if written > max_bytes:
        target.unlink(missing_ok=True)
        return False
    return True


@router.post(
    "",
    status_code=status.HTTP_200_OK,
    summary="Upload Image (admin)",
    responses={
        400: {"description": "Not an image or no file sent"},
        413: {"description": "Image too large"},
    },
)
async def upload_image(_: AdminUserDep, image: UploadFile | None = File(default=None)):
    """
    Store an uploaded product image.

    Returns the public path of the stored file.
    """
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="No image file provided")
    if not is_image(image.filename, image.content_type):
        raise HTTPException(status_code=400, detail="Images only")

    max_bytes = settings.upload_max_bytes
    if image.size is not None and image.size > max_bytes:
        raise HTTPException(status_code=413, detail="Image too large")

    extension = os.path.splitext(image.filename)[1].lower()
    filename = f"image-{uuid.uuid4().hex}{extension}"
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    if not await run_in_threadpool(save_upload, image.file, upload_dir / filename, max_bytes):
        raise HTTPException(status_code=413, detail="Image too large")

    logger.info(f"Stored upload {image.filename} as {filename}")
    return {"message": "Image uploaded successfully", "image": f"{UPLOAD_URL_PREFIX}/{filename}"}
