"""Simple in-memory store for alt text sessions."""

from __future__ import annotations

from typing import Dict
from uuid import uuid4

from models.session_models import SessionState
from services.clipboard import InMemoryClipboard
from services.workflow.generation_workflow import COPY_FEEDBACK_SECONDS, DescriptionSource, GenerationWorkflow


class SessionStore:
	"""Create, look up and drop per-session workflows."""

	def __init__(
		self,
		client: DescriptionSource,
		*,
		copy_feedback_seconds: float = COPY_FEEDBACK_SECONDS,
		discard_stale: bool = False,
	) -> None:
		self.client = client
		self.copy_feedback_seconds = copy_feedback_seconds
		self.discard_stale = discard_stale
		self._sessions: Dict[str, GenerationWorkflow] = {}

	def create(self) -> GenerationWorkflow:
		"""Create a new session with empty defaults."""
		session_id = uuid4().hex
		workflow = GenerationWorkflow(
			SessionState(session_id=session_id),
			self.client,
			InMemoryClipboard(),
			copy_feedback_seconds=self.copy_feedback_seconds,
			discard_stale=self.discard_stale,
		)
		self._sessions[session_id] = workflow
		return workflow

	def get(self, session_id: str) -> GenerationWorkflow:
		"""Return a session or raise KeyError if missing."""
		workflow = self._sessions.get(session_id)
		if workflow is None:
			raise KeyError(f"Session {session_id} not found")
		return workflow

	def delete(self, session_id: str) -> None:
		"""Drop a session, cancelling its pending feedback timers."""
		workflow = self.get(session_id)
		workflow.reset()
		del self._sessions[session_id]

	async def aclose(self) -> None:
		"""Cancel background work in every session."""
		for workflow in list(self._sessions.values()):
			await workflow.aclose()

	def __len__(self) -> int:
		return len(self._sessions)
