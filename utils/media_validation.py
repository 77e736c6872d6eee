"""Validation helpers for uploaded images."""

import base64
from typing import Optional

from fastapi import HTTPException, UploadFile

ALLOWED_IMAGE_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/svg+xml",
}


def to_data_url(raw: bytes, mime_type: str) -> str:
    """Return a data URL for the upload, passing through bodies that already are one."""
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        text = ""
    if text.startswith("data:image/"):
        return text
    encoded = base64.b64encode(raw).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def validate_image_file(image_file: UploadFile) -> str:
    """Validate the upload's content type and return the normalized MIME type."""
    content_type = (image_file.content_type or "").lower().split(";", 1)[0].strip()
    if content_type in ALLOWED_IMAGE_TYPES:
        return "image/jpeg" if content_type == "image/jpg" else content_type
    # If content_type is missing, at least check extension for a known type
    filename = (image_file.filename or "").lower()
    for ext, mime in ((".png", "image/png"), (".jpg", "image/jpeg"), (".jpeg", "image/jpeg"), (".webp", "image/webp")):
        if filename.endswith(ext):
            return mime
    raise HTTPException(status_code=415, detail=f"Unsupported image content type: {image_file.content_type}")


async def read_image_reference(image_file: Optional[UploadFile], url: Optional[str]) -> str:
    """Return an image reference from an uploaded file or a remote URL field."""
    if image_file is not None:
        mime_type = validate_image_file(image_file)
        raw = await image_file.read()
        if not raw:
            raise HTTPException(status_code=400, detail="Uploaded image is empty.")
        return to_data_url(raw, mime_type)
    cleaned = (url or "").strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail="Provide an image file or an image URL.")
    if not cleaned.startswith(("http://", "https://", "data:image/")):
        raise HTTPException(status_code=400, detail="Image URL must be http(s) or an image data URL.")
    return cleaned
