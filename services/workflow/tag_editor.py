"""Inline add/edit/remove operations over a session's tag collection."""

from __future__ import annotations

import logging
from typing import Callable, List

from models.session_models import TagEditState

LOGGER = logging.getLogger(__name__)


class TagEditor:
	"""Own the edit/draft sub-state and emit new tag lists to the owner.

	The editor never mutates the owner's list in place. Every accepted change
	builds a new list and hands it to ``set_tags``.
	"""

	def __init__(self, get_tags: Callable[[], List[str]], set_tags: Callable[[List[str]], None]) -> None:
		self._get_tags = get_tags
		self._set_tags = set_tags
		self.state = TagEditState()

	def reset(self) -> None:
		"""Start over with a fresh edit state for a newly rendered collection."""
		self.state = TagEditState()

	def begin_edit(self, index: int) -> None:
		tags = self._get_tags()
		if not 0 <= index < len(tags):
			raise IndexError(f"Tag index {index} out of range")
		self.state.editing_index = index
		self.state.editing_value = tags[index]
		self.state.editing_original = tags[index]

	def update_editing_value(self, text: str) -> None:
		if not self.state.is_editing:
			raise RuntimeError("No tag edit in progress.")
		self.state.editing_value = text

	def commit_edit(self) -> bool:
		"""Apply the trimmed edit value if it is non-empty and unique.

		Returns True when the collection accepted the value. The edit state is
		cleared in every case.
		"""
		index = self.state.editing_index
		if index is None:
			return False
		value = self.state.editing_value.strip()
		tags = list(self._get_tags())
		committed = False
		if not 0 <= index < len(tags) or tags[index] != self.state.editing_original:
			LOGGER.debug("Abandoning stale tag edit at index %s", index)
		elif value and value not in (tag for i, tag in enumerate(tags) if i != index):
			if tags[index] != value:
				tags[index] = value
				self._set_tags(tags)
			committed = True
		self._clear_edit()
		return committed

	def cancel_edit(self) -> None:
		self._clear_edit()

	def remove_tag(self, index: int) -> None:
		tags = list(self._get_tags())
		if not 0 <= index < len(tags):
			raise IndexError(f"Tag index {index} out of range")
		del tags[index]
		editing_index = self.state.editing_index
		if editing_index is not None and editing_index >= index:
			# Positions at or after the removed tag shifted; drop the edit.
			self._clear_edit()
		self._set_tags(tags)

	def update_draft(self, text: str) -> None:
		self.state.draft_tag = text

	def add_draft(self) -> bool:
		"""Append the trimmed draft when it is non-empty and not already a tag."""
		value = self.state.draft_tag.strip()
		tags = self._get_tags()
		if not value or value in tags:
			return False
		self._set_tags([*tags, value])
		self.state.draft_tag = ""
		return True

	def _clear_edit(self) -> None:
		self.state.editing_index = None
		self.state.editing_value = ""
		self.state.editing_original = None
