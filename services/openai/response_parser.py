"""Helpers to parse Responses API outputs."""

from typing import Any, Optional, Tuple

IMAGE_FORMAT_MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from either an SDK model or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def extract_first_text(response: Any) -> Optional[str]:
    """Return the first `output_text` entry of the response, untouched."""
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != "message":
            continue
        for content in _field(item, "content", None) or []:
            if _field(content, "type") == "output_text":
                text = _field(content, "text")
                if text:
                    return text
    return None


def image_mime_type(output_format: Optional[str], default: str = "image/png") -> str:
    """Map an image_generation output format such as `png` to a MIME type."""
    if not output_format:
        return default
    return IMAGE_FORMAT_MIME_TYPES.get(output_format.lower(), f"image/{output_format.lower()}")


def extract_first_image(response: Any, default_format: str = "png") -> Optional[Tuple[str, str]]:
    """Return `(base64_payload, mime_type)` of the first generated image.

    Output items are scanned in order; text items interleaved with image
    items are skipped and only the first image counts.
    """
    for item in _field(response, "output", None) or []:
        if _field(item, "type") != "image_generation_call":
            continue
        payload = _field(item, "result")
        if not payload:
            continue
        output_format = _field(item, "output_format") or default_format
        return payload, image_mime_type(output_format)
    return None
