"""Validation and encoding helpers for uploaded images."""

import base64
import binascii
from typing import Optional, Tuple

from fastapi import HTTPException, UploadFile

from models.session_models import ImageUpload

IMAGE_TYPE_PREFIX = "image/"


def normalize_mime_type(content_type: Optional[str]) -> str:
    """Strip parameters such as ``; charset=utf-8`` and lower-case the MIME type."""
    return (content_type or "").lower().split(";", 1)[0].strip()


def is_image_content_type(content_type: Optional[str]) -> bool:
    """Return True for any ``image/*`` MIME type, ignoring parameters and case."""
    return normalize_mime_type(content_type).startswith(IMAGE_TYPE_PREFIX)


def to_image_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a self-describing data URL."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split a base64 data URL into its MIME type and raw bytes."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL.")
    mime_type = header[len("data:") : -len(";base64")]
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Data URL payload is not valid base64.") from exc


async def read_image_upload(file: UploadFile) -> ImageUpload:
    """Read an uploaded file into an ``ImageUpload`` without judging its type."""
    try:
        data = await file.read()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=400, detail="Unable to read uploaded file.") from exc
    return ImageUpload(
        filename=file.filename or "upload",
        content_type=(file.content_type or "").strip(),
        data=data,
    )


def require_image(upload: ImageUpload) -> ImageUpload:
    """Reject non-image or empty uploads for endpoints that cannot ignore them."""
    if not is_image_content_type(upload.content_type):
        raise HTTPException(status_code=415, detail=f"Unsupported content type: {upload.content_type or 'unknown'}")
    if not upload.data:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    return upload
