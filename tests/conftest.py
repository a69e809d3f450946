from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from models.session_models import ImageUpload, SessionState
from services.clipboard import InMemoryClipboard
from services.workflow.generation_workflow import GenerationWorkflow


class FakeGenerationClient:
	"""Scriptable stand-in for the chat completion client.

	Set ``description_gate`` / ``tags_gate`` to an ``asyncio.Event`` to hold a
	call open until the test releases it.
	The ``hold_*`` flags do the same for tests that drive the app through
	``TestClient``, whose event loop runs in another thread.
	"""

	def __init__(
		self,
		description: str = "A cat on a mat",
		tags: Optional[List[str]] = None,
		describe_error: Optional[Exception] = None,
		tags_error: Optional[Exception] = None,
	) -> None:
		self.description = description
		self.tags = ["cat", "mat", "pet"] if tags is None else tags
		self.describe_error = describe_error
		self.tags_error = tags_error
		self.description_gate: Optional[asyncio.Event] = None
		self.tags_gate: Optional[asyncio.Event] = None
		self.hold_description = False
		self.hold_tags = False
		self.describe_calls: List[str] = []
		self.tags_calls: List[str] = []

	async def describe_image(self, image_data_url: str) -> str:
		self.describe_calls.append(image_data_url)
		if self.description_gate is not None:
			await self.description_gate.wait()
		while self.hold_description:
			await asyncio.sleep(0.01)
		if self.describe_error is not None:
			raise self.describe_error
		return self.description

	async def tags_from_description(self, description: str) -> List[str]:
		self.tags_calls.append(description)
		if self.tags_gate is not None:
			await self.tags_gate.wait()
		while self.hold_tags:
			await asyncio.sleep(0.01)
		if self.tags_error is not None:
			raise self.tags_error
		return list(self.tags)


class FailingClipboard:
	async def write_text(self, text: str) -> None:
		raise PermissionError("clipboard denied")


def make_upload(content_type: str = "image/png", data: bytes = b"\x89PNG fake", filename: str = "x.png") -> ImageUpload:
	return ImageUpload(filename=filename, content_type=content_type, data=data)


@pytest.fixture
def fake_client() -> FakeGenerationClient:
	return FakeGenerationClient()


@pytest.fixture
def make_workflow(fake_client):
	def _make(client=None, clipboard=None, **kwargs) -> GenerationWorkflow:
		return GenerationWorkflow(
			SessionState(session_id="s1"),
			client or fake_client,
			clipboard or InMemoryClipboard(),
			**kwargs,
		)

	return _make
