"""Image utilities for photo uploads.

Validates uploads, encodes them as base64 data URLs for the vision
provider, and generates small WebP thumbnails (Pillow) for history replay.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from workplace_inspector.core.config import MAX_UPLOAD_BYTES_DEFAULT
from workplace_inspector.core.errors import InspectionInputError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------

THUMBNAIL_MAX_SIZE = (400, 300)
THUMBNAIL_QUALITY = 80

MSG_NO_IMAGE = "No image provided"
MSG_TOO_LARGE = "File size must be less than 10MB"
MSG_INVALID_TYPE = "Invalid file type. Please upload an image."


def media_type(content_type: Optional[str]) -> str:
    """Bare ``type/subtype`` of *content_type*, lower-cased, without parameters."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_image_type(content_type: Optional[str]) -> bool:
    return media_type(content_type).startswith("image/")


def validate_image_upload(
    content: Optional[bytes],
    content_type: Optional[str],
    *,
    max_bytes: int = MAX_UPLOAD_BYTES_DEFAULT,
) -> None:
    """Raise ``InspectionInputError`` for the first failing check.

    Order: missing image, size over *max_bytes*, non-``image/*`` media type.
    """
    if content is None:
        raise InspectionInputError(MSG_NO_IMAGE)
    if len(content) > max_bytes:
        raise InspectionInputError(MSG_TOO_LARGE, status_code=413)
    if not is_image_type(content_type):
        raise InspectionInputError(MSG_INVALID_TYPE, status_code=415)


def to_data_url(content: bytes, content_type: str) -> str:
    """Encode *content* as ``data:<type>;base64,<payload>``."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{media_type(content_type)};base64,{encoded}"


def _to_webp(img: Image.Image, max_size: tuple[int, int], quality: int) -> bytes:
    """Resize *img* to fit within *max_size* and encode as WebP."""
    resized = img.copy()
    resized.thumbnail(max_size, Image.LANCZOS)
    buf = io.BytesIO()
    resized.save(buf, format="WEBP", quality=quality, method=4)
    return buf.getvalue()


def make_thumbnail_data_url(
    content: bytes,
    *,
    max_size: tuple[int, int] = THUMBNAIL_MAX_SIZE,
    quality: int = THUMBNAIL_QUALITY,
) -> Optional[str]:
    """Return a WebP thumbnail as a data URL, or ``None`` if *content* is not decodable."""
    try:
        img = Image.open(io.BytesIO(content))
        img = ImageOps.exif_transpose(img)  # auto-orient
        if img.mode in ("P", "PA", "LA", "CMYK", "I;16"):
            img = img.convert("RGBA")
        thumbnail = _to_webp(img, max_size, quality)
    except (UnidentifiedImageError, OSError, ValueError):
        logger.warning("Failed to build thumbnail, storing history item without image", exc_info=True)
        return None
    return to_data_url(thumbnail, "image/webp")
