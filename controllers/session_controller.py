"""Session state machine driving the image studio page."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import UploadFile

from models.session_models import AnalysisText, GeneratedImage, Mode, SessionState, SourceImage
from services.openai.generation_client import GenerationClient, GenerationError
from services.session_store import SessionStore
from utils.media_validation import ImageReadError, read_image_upload

LOGGER = logging.getLogger(__name__)

READ_FAILED = "Failed to read image file."
UNKNOWN_FAILURE = "An unknown error occurred."


class InputError(ValueError):
	"""A page action was attempted without the input it needs."""


class SubmissionInProgressError(InputError):
	"""A submission is already in flight for the session."""


class SessionController:
	"""Apply page actions to sessions and run submissions."""

	def __init__(self, store: SessionStore, generation_client: GenerationClient) -> None:
		if store is None:
			raise ValueError("Session store is required.")
		self.store = store
		self.generation_client = generation_client

	def open_session(self) -> Dict[str, Any]:
		return self.store.create().to_view()

	def get_view(self, session_id: str) -> Dict[str, Any]:
		return self.store.get(session_id).to_view()

	def close_session(self, session_id: str) -> Dict[str, Any]:
		"""Discard a session; a submission still in flight for it is dropped on completion."""
		self.store.discard(session_id)
		return {"session_id": session_id, "closed": True}

	async def upload_image(self, session_id: str, upload: UploadFile) -> Dict[str, Any]:
		"""Replace the session image with an uploaded file.

		Prompt, result and error are cleared first. A file that cannot be read
		leaves the session without an image and holding an error message.
		"""
		state = self.store.get(session_id)
		state.source_image = None
		state.clear_outcome()
		filename = upload.filename or "uploaded_image"
		try:
			data_url, mime_type = await read_image_upload(upload)
		except ImageReadError as exc:
			LOGGER.error("Failed to read upload %r: %s", filename, exc)
			state.set_error(READ_FAILED)
			return state.to_view()

		state.source_image = SourceImage(data_url=data_url, mime_type=mime_type, filename=filename)
		return state.to_view()

	def change_mode(self, session_id: str, mode: Mode) -> Dict[str, Any]:
		"""Switch between editor and analyzer, keeping the loaded image."""
		state = self.store.get(session_id)
		state.mode = Mode(mode)
		state.clear_outcome()
		return state.to_view()

	def set_prompt(self, session_id: str, prompt: str) -> Dict[str, Any]:
		state = self.store.get(session_id)
		if state.loading:
			raise SubmissionInProgressError("Prompt cannot change while a submission is in progress.")
		if state.source_image is None:
			raise InputError("Upload an image first.")
		state.prompt = prompt
		return state.to_view()

	def reset_image(self, session_id: str) -> Dict[str, Any]:
		state = self.store.get(session_id)
		state.source_image = None
		state.clear_outcome()
		return state.to_view()

	async def submit(self, session_id: str) -> Dict[str, Any]:
		"""Run the current mode's operation on the session image and prompt.

		Raises:
			SubmissionInProgressError: If a submission is already in flight.
			InputError: If the image or a non-blank prompt is missing.
			KeyError: If the session is unknown or was closed before the submission settled.
		"""
		state = self.store.get(session_id)
		if state.loading:
			raise SubmissionInProgressError("A submission is already in progress.")
		if state.source_image is None or not state.prompt.strip():
			raise InputError("Please upload an image and enter a prompt.")

		image = state.source_image
		mode = state.mode
		prompt = state.prompt
		state.loading = True
		state.result = None
		state.error_message = None

		result = None
		error_message = None
		try:
			if mode is Mode.EDITOR:
				result = GeneratedImage(await self.generation_client.edit_image(image.data_url, image.mime_type, prompt))
			else:
				result = AnalysisText(await self.generation_client.analyze(image.data_url, image.mime_type, prompt))
		except GenerationError as exc:
			error_message = str(exc) or UNKNOWN_FAILURE
		except Exception:
			LOGGER.exception("Unexpected failure during %s submission", mode.value)
			error_message = UNKNOWN_FAILURE
		finally:
			state.loading = False

		if not self._accepts_outcome(state):
			LOGGER.info("Dropping %s outcome for session %s", mode.value, session_id)
			if not self.store.is_current(state):
				raise KeyError(f"Session {session_id} not found")
			return state.to_view()

		if error_message is not None:
			state.set_error(error_message)
		else:
			state.set_result(result)
		return state.to_view()

	def _accepts_outcome(self, state: SessionState) -> bool:
		"""Outcomes land only on a live session that still shows an image."""
		return self.store.is_current(state) and state.source_image is not None
