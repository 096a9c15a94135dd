import io
from unittest.mock import AsyncMock

import pytest
from fastapi import UploadFile
from PIL import Image
from starlette.datastructures import Headers

from controllers.session_controller import SessionController
from services.session_store import SessionStore


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_upload():
    def _make(raw: bytes, filename: str = "photo.png", content_type: str | None = "image/png") -> UploadFile:
        headers = Headers({"content-type": content_type}) if content_type else Headers({})
        return UploadFile(file=io.BytesIO(raw), filename=filename, headers=headers)

    return _make


@pytest.fixture
def generation_client():
    client = AsyncMock()
    client.edit_image = AsyncMock(return_value="data:image/png;base64,QUJD")
    client.analyze = AsyncMock(return_value="A mountain landscape.")
    return client


@pytest.fixture
def controller(generation_client) -> SessionController:
    return SessionController(SessionStore(), generation_client)
