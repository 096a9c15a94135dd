"""Image analysis and editing via the OpenAI Responses API.

Both operations take the uploaded image as a data URL together with its MIME
type and a free-form prompt. Failures are logged with full detail and
re-raised as `GenerationError` carrying a short message that is safe to show
to the user.
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.openai.media_inputs import build_inputs
from services.openai.response_parser import extract_first_image, extract_first_text

LOGGER = logging.getLogger(__name__)

DEFAULT_ANALYZE_MODEL = "gpt-5"
DEFAULT_EDIT_MODEL = "gpt-5"
DEFAULT_IMAGE_FORMAT = "png"

ANALYZE_FAILED = "Failed to analyze image."
EDIT_FAILED = "Failed to edit image."


class GenerationError(RuntimeError):
    """A generation request failed; `str(exc)` is the user-facing message."""


class EmptyResponseError(GenerationError):
    """The remote call succeeded but returned no usable output."""


class GenerationClient:
    """Send image + prompt requests to OpenAI and extract the results."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        analyze_model: Optional[str] = None,
        edit_model: Optional[str] = None,
        image_format: Optional[str] = None,
    ) -> None:
        if client is None:
            raise ValueError("OpenAI AsyncOpenAI client is required.")
        self.client = client
        self.analyze_model = analyze_model or os.getenv("OPENAI_ANALYZE_MODEL", DEFAULT_ANALYZE_MODEL)
        self.edit_model = edit_model or os.getenv("OPENAI_EDIT_MODEL", DEFAULT_EDIT_MODEL)
        self.image_format = image_format or os.getenv("OPENAI_IMAGE_FORMAT", DEFAULT_IMAGE_FORMAT)

    async def analyze(self, image: str, mime_type: str, prompt: str) -> str:
        """Describe or answer questions about an image.

        Args:
            image: Data URL (or bare base64 payload) of the source image.
            mime_type: MIME type of the source image.
            prompt: User question or instruction.

        Returns:
            The first text output of the model, unchanged.

        Raises:
            GenerationError: If the call fails or no text comes back.
        """
        start = time.time()
        try:
            response = await self.client.responses.create(
                model=self.analyze_model,
                input=build_inputs(image, mime_type, prompt),
            )
            text = extract_first_text(response)
            if text is None:
                raise EmptyResponseError(ANALYZE_FAILED)
        except EmptyResponseError:
            LOGGER.error("Analysis response contained no text output.")
            raise
        except Exception as exc:
            LOGGER.error("Error analyzing image: %s", exc, exc_info=True)
            raise GenerationError(ANALYZE_FAILED) from exc

        LOGGER.info("Image analysis latency: %.3fs", time.time() - start)
        return text

    async def edit_image(self, image: str, mime_type: str, prompt: str) -> str:
        """Produce an edited copy of an image.

        Args:
            image: Data URL (or bare base64 payload) of the source image.
            mime_type: MIME type of the source image.
            prompt: Edit instruction.

        Returns:
            The first generated image as `data:<mime>;base64,<payload>`.

        Raises:
            GenerationError: If the call fails or no image comes back.
        """
        start = time.time()
        try:
            response = await self.client.responses.create(
                model=self.edit_model,
                input=build_inputs(image, mime_type, prompt),
                tools=self._image_tools(),
                tool_choice={"type": "image_generation"},
            )
            found = extract_first_image(response, default_format=self.image_format)
            if found is None:
                raise EmptyResponseError(EDIT_FAILED)
        except EmptyResponseError:
            LOGGER.error("No image was generated in the response.")
            raise
        except Exception as exc:
            LOGGER.error("Error editing image: %s", exc, exc_info=True)
            raise GenerationError(EDIT_FAILED) from exc

        payload, result_mime = found
        LOGGER.info("Image edit latency: %.3fs", time.time() - start)
        return f"data:{result_mime};base64,{payload}"

    def _image_tools(self) -> List[Dict[str, Any]]:
        return [{"type": "image_generation", "output_format": self.image_format}]


def create_openai_client(api_key: Optional[str] = None, timeout: Optional[float] = None) -> AsyncOpenAI:
    """Build the shared AsyncOpenAI client with retries disabled.

    Raises:
        RuntimeError: If no API key is configured.
    """
    api_key = api_key or os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")
    if timeout is None:
        timeout = float(os.getenv("OPENAI_TIMEOUT", "120"))
    return AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
