"""FastAPI routes for image studio sessions."""

import logging

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.session_controller import InputError, SessionController, SubmissionInProgressError
from models.session_models import Mode

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class ModePayload(BaseModel):
	mode: Mode


class PromptPayload(BaseModel):
	prompt: str = ""


def _get_controller(request: Request) -> SessionController:
	"""Retrieve the shared session controller from the app state."""
	controller = getattr(request.app.state, "session_controller", None)
	if controller is None:
		raise HTTPException(status_code=500, detail="Session controller not initialized.")
	return controller


def _translate(exc: Exception) -> HTTPException:
	if isinstance(exc, KeyError):
		return HTTPException(status_code=404, detail="Session not found")
	if isinstance(exc, SubmissionInProgressError):
		return HTTPException(status_code=409, detail=str(exc))
	if isinstance(exc, InputError):
		return HTTPException(status_code=400, detail=str(exc))
	LOGGER.error("Unhandled session route error: %s", exc, exc_info=exc)
	return HTTPException(status_code=500, detail="Failed to process the request.")


@router.post("")
async def open_session_route(request: Request):
	try:
		return _get_controller(request).open_session()
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return _get_controller(request).get_view(session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.delete("/{session_id}")
async def close_session_route(request: Request, session_id: str):
	try:
		return _get_controller(request).close_session(session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/image")
async def upload_image_route(request: Request, session_id: str, image: UploadFile = File(...)):
	"""Load a new source image into the session."""
	try:
		return await _get_controller(request).upload_image(session_id, image)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.delete("/{session_id}/image")
async def reset_image_route(request: Request, session_id: str):
	try:
		return _get_controller(request).reset_image(session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.put("/{session_id}/mode")
async def change_mode_route(request: Request, session_id: str, payload: ModePayload):
	try:
		return _get_controller(request).change_mode(session_id, payload.mode)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.put("/{session_id}/prompt")
async def set_prompt_route(request: Request, session_id: str, payload: PromptPayload):
	try:
		return _get_controller(request).set_prompt(session_id, payload.prompt)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc


@router.post("/{session_id}/submit")
async def submit_route(request: Request, session_id: str):
	"""Run the submission and return the session once it has settled."""
	try:
		return await _get_controller(request).submit(session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise _translate(exc) from exc
