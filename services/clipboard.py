"""Clipboard boundary used by copy actions."""

from __future__ import annotations

from typing import Optional, Protocol


class Clipboard(Protocol):
	async def write_text(self, text: str) -> None:
		...


class InMemoryClipboard:
	"""Per-session clipboard buffer that HTTP clients read back."""

	def __init__(self) -> None:
		self.text: Optional[str] = None

	async def write_text(self, text: str) -> None:
		self.text = text

	def clear(self) -> None:
		self.text = None
