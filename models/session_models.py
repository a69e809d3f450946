"""Session domain models for the alt text workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ImageUpload:
	"""File received at the upload boundary, before validation."""

	filename: str
	content_type: str
	data: bytes


@dataclass
class TagEditState:
	"""Inline edit and draft state for the tag collection currently shown."""

	editing_index: Optional[int] = None
	editing_value: str = ""
	editing_original: Optional[str] = None
	draft_tag: str = ""

	@property
	def is_editing(self) -> bool:
		return self.editing_index is not None


@dataclass
class SessionState:
	"""In-memory state for one image/description/tags session."""

	session_id: str
	image: Optional[str] = None
	image_content_type: Optional[str] = None
	image_filename: Optional[str] = None
	description: str = ""
	tags: List[str] = field(default_factory=list)
	busy_description: bool = False
	busy_tags: bool = False
	description_copied: bool = False
	tags_copied: bool = False

	def clear(self) -> None:
		"""Return every field except the id to its initial default."""
		self.image = None
		self.image_content_type = None
		self.image_filename = None
		self.description = ""
		self.tags = []
		self.busy_description = False
		self.busy_tags = False
		self.description_copied = False
		self.tags_copied = False
