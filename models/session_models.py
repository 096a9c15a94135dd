"""Session domain models for the image studio page."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class Mode(str, Enum):
	"""Which generation operation a submission runs."""

	EDITOR = "editor"
	ANALYZER = "analyzer"


class Status(str, Enum):
	"""View state of a session."""

	IDLE = "idle"
	READY = "ready"
	LOADING = "loading"
	ERROR = "error"
	DONE = "done"


@dataclass(frozen=True)
class SourceImage:
	"""Uploaded image held as a base64 data URI."""

	data_url: str
	mime_type: str
	filename: str


@dataclass(frozen=True)
class GeneratedImage:
	"""Image returned by an edit submission."""

	data_url: str

	@property
	def mime_type(self) -> str:
		return self.data_url[len("data:"):].split(";", 1)[0]

	def to_dict(self) -> Dict[str, Any]:
		return {"kind": "image", "data_url": self.data_url, "mime_type": self.mime_type}


@dataclass(frozen=True)
class AnalysisText:
	"""Text returned by an analyze submission."""

	text: str

	def to_dict(self) -> Dict[str, Any]:
		return {"kind": "text", "text": self.text}


Result = Union[GeneratedImage, AnalysisText]


@dataclass
class SessionState:
	"""In-memory state of one open page.

	Attributes:
		session_id: Opaque identifier handed to the page.
		mode: Selected operation.
		source_image: Uploaded image, if any.
		prompt: Current prompt text.
		loading: True while a submission is in flight.
		result: Outcome of the last successful submission.
		error_message: User-facing message of the last failure.
	"""

	session_id: str
	mode: Mode = Mode.EDITOR
	source_image: Optional[SourceImage] = None
	prompt: str = ""
	loading: bool = False
	result: Optional[Result] = None
	error_message: Optional[str] = None

	@property
	def status(self) -> Status:
		if self.loading:
			return Status.LOADING
		if self.error_message is not None:
			return Status.ERROR
		if self.source_image is None:
			return Status.IDLE
		if self.result is not None:
			return Status.DONE
		return Status.READY

	@property
	def can_submit(self) -> bool:
		return self.source_image is not None and bool(self.prompt.strip()) and not self.loading

	def clear_outcome(self) -> None:
		"""Drop prompt, result and error while keeping mode and image."""
		self.prompt = ""
		self.result = None
		self.error_message = None

	def set_result(self, result: Result) -> None:
		self.result = result
		self.error_message = None

	def set_error(self, message: str) -> None:
		self.error_message = message
		self.result = None

	def to_view(self) -> Dict[str, Any]:
		"""Return the JSON projection rendered by the page."""
		image = None
		if self.source_image is not None:
			image = {
				"data_url": self.source_image.data_url,
				"mime_type": self.source_image.mime_type,
				"filename": self.source_image.filename,
			}
		return {
			"session_id": self.session_id,
			"mode": self.mode.value,
			"status": self.status.value,
			"prompt": self.prompt,
			"image": image,
			"result": self.result.to_dict() if self.result is not None else None,
			"error": self.error_message,
			"can_submit": self.can_submit,
		}
