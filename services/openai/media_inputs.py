"""Utilities to build multimodal input payloads for the Responses API."""

from typing import Any, Dict, List

from utils.media_validation import split_data_url


def build_image_part(image: str, mime_type: str) -> Dict[str, Any]:
    """Re-declare an uploaded image with its MIME type as an `input_image` part.

    The data URL prefix of `image` is stripped so the payload is always sent
    under the MIME type the upload declared.
    """
    payload, _ = split_data_url(image)
    if not payload:
        raise ValueError("Image payload is empty.")
    return {"type": "input_image", "image_url": f"data:{mime_type};base64,{payload}"}


def build_inputs(image: str, mime_type: str, prompt: str) -> List[Dict[str, Any]]:
    """Build a single user message holding the image part followed by the prompt."""
    return [
        {
            "type": "message",
            "role": "user",
            "content": [
                build_image_part(image, mime_type),
                {"type": "input_text", "text": prompt},
            ],
        }
    ]
