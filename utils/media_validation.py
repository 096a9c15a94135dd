"""Helpers for turning uploaded images into data URLs and back."""

import base64
import io
from typing import Optional, Tuple

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

GENERIC_CONTENT_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


class ImageReadError(ValueError):
    """Raised when an uploaded file cannot be turned into an image data URL."""


def to_data_url(payload: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URL."""
    encoded = base64.b64encode(payload).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def split_data_url(data_url: str) -> Tuple[str, Optional[str]]:
    """Return `(base64_payload, mime_type)` for a data URL.

    A bare base64 string (no `data:` prefix) is returned unchanged with a
    `None` MIME type.
    """
    if not data_url.startswith("data:"):
        return data_url, None
    header, sep, payload = data_url.partition(",")
    if not sep:
        raise ValueError("Data URL is missing its payload.")
    mime_type = header[len("data:"):].split(";", 1)[0] or None
    return payload, mime_type


def detect_image_mime(raw: bytes) -> str:
    """Identify the MIME type of image bytes with Pillow."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageReadError("Decoded bytes are not a supported image format") from exc
    mime_type = Image.MIME.get(image_format or "")
    if not mime_type:
        raise ImageReadError(f"No MIME type known for image format {image_format!r}")
    return mime_type


def resolve_mime_type(raw: bytes, content_type: Optional[str]) -> str:
    """Prefer the declared content type; sniff the bytes when it is generic."""
    declared = (content_type or "").lower().split(";", 1)[0].strip()
    if declared not in GENERIC_CONTENT_TYPES:
        return declared
    return detect_image_mime(raw)


async def read_image_upload(upload: UploadFile) -> Tuple[str, str]:
    """Read an uploaded file into `(data_url, mime_type)`.

    Raises:
        ImageReadError: If the upload cannot be read, is empty, or its image
            type cannot be determined.
    """
    try:
        raw = await upload.read()
    except Exception as exc:
        raise ImageReadError("Unable to read uploaded image.") from exc
    if not raw:
        raise ImageReadError("Uploaded image is empty.")
    mime_type = resolve_mime_type(raw, upload.content_type)
    return to_data_url(raw, mime_type), mime_type
