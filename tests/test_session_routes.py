"""HTTP surface: app startup, session routes and error translation"""
import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture
def api(monkeypatch, generation_client):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    app = create_app()
    with TestClient(app) as client:
        app.state.session_controller.generation_client = generation_client
        yield client


def _open(api):
    response = api.post("/sessions")
    assert response.status_code == 200
    return response.json()["session_id"]


def _upload(api, session_id, png_bytes):
    return api.post(
        f"/sessions/{session_id}/image",
        files={"image": ("photo.png", png_bytes, "image/png")},
    )


def test_startup_without_api_key_is_fatal(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(RuntimeError):
        with TestClient(create_app()):
            pass


def test_health_reports_client_and_sessions(api):
    _open(api)

    body = api.get("/health").json()

    assert body == {"ok": True, "openai_available": True, "sessions": 1}


def test_index_page_is_served(api):
    response = api.get("/")

    assert response.status_code == 200
    assert "Image Studio" in response.text


def test_editor_flow_over_http(api, png_bytes):
    session_id = _open(api)

    assert _upload(api, session_id, png_bytes).json()["status"] == "ready"
    assert api.put(f"/sessions/{session_id}/prompt", json={"prompt": "add snow"}).json()["can_submit"] is True

    view = api.post(f"/sessions/{session_id}/submit").json()

    assert view["status"] == "done"
    assert view["result"]["data_url"] == "data:image/png;base64,QUJD"


def test_analyzer_flow_over_http(api, png_bytes):
    session_id = _open(api)
    _upload(api, session_id, png_bytes)
    assert api.put(f"/sessions/{session_id}/mode", json={"mode": "analyzer"}).json()["mode"] == "analyzer"
    api.put(f"/sessions/{session_id}/prompt", json={"prompt": "describe this"})

    view = api.post(f"/sessions/{session_id}/submit").json()

    assert view["result"] == {"kind": "text", "text": "A mountain landscape."}


def test_submit_without_image_is_bad_request(api, generation_client):
    session_id = _open(api)

    response = api.post(f"/sessions/{session_id}/submit")

    assert response.status_code == 400
    generation_client.edit_image.assert_not_awaited()


def test_invalid_mode_is_rejected(api):
    session_id = _open(api)

    response = api.put(f"/sessions/{session_id}/mode", json={"mode": "painter"})

    assert response.status_code == 422


def test_unknown_session_is_not_found(api):
    assert api.get("/sessions/nope").status_code == 404
    assert api.delete("/sessions/nope").status_code == 404


def test_reset_and_close(api, png_bytes):
    session_id = _open(api)
    _upload(api, session_id, png_bytes)

    assert api.delete(f"/sessions/{session_id}/image").json()["status"] == "idle"
    assert api.delete(f"/sessions/{session_id}").json() == {"session_id": session_id, "closed": True}
    assert api.get(f"/sessions/{session_id}").status_code == 404


def test_startup_uses_model_settings_loaded_after_import(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_ANALYZE_MODEL", "from-dotenv")
    monkeypatch.setenv("OPENAI_EDIT_MODEL", "edit-dotenv")
    app = create_app()

    with TestClient(app):
        client = app.state.session_controller.generation_client

    assert client.analyze_model == "from-dotenv"
    assert client.edit_model == "edit-dotenv"


def test_shutdown_closes_openai_client(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    app = create_app()

    with TestClient(app):
        openai_client = app.state.openai_client
        assert not openai_client.is_closed()

    assert openai_client.is_closed()


def test_submit_for_session_closed_mid_flight_is_not_found(api, generation_client, png_bytes):
    session_id = _open(api)
    _upload(api, session_id, png_bytes)
    api.put(f"/sessions/{session_id}/prompt", json={"prompt": "add snow"})

    async def close_then_answer(*_args):
        api.app.state.session_store.discard(session_id)
        return "data:image/png;base64,QUJD"

    generation_client.edit_image.side_effect = close_then_answer

    response = api.post(f"/sessions/{session_id}/submit")

    assert response.status_code == 404
