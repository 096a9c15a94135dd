"""Simple in-memory store for open page sessions."""

from __future__ import annotations

from typing import Dict
from uuid import uuid4

from models.session_models import SessionState


class SessionStore:
	"""Manage the sessions of currently open pages."""

	def __init__(self) -> None:
		self._sessions: Dict[str, SessionState] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	def __contains__(self, session_id: str) -> bool:
		return session_id in self._sessions

	def create(self) -> SessionState:
		"""Create a new idle session in editor mode."""
		session_id = uuid4().hex
		state = SessionState(session_id=session_id)
		self._sessions[session_id] = state
		return state

	def get(self, session_id: str) -> SessionState:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def is_current(self, state: SessionState) -> bool:
		"""Return True while `state` is still the registered session for its id."""
		return self._sessions.get(state.session_id) is state

	def discard(self, session_id: str) -> None:
		"""Forget a session; unknown ids raise KeyError."""
		if self._sessions.pop(session_id, None) is None:
			raise KeyError(f"Session {session_id} not found")
