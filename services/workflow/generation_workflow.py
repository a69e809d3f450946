"""Image → description → tags workflow over a single session state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from models.session_models import ImageUpload, SessionState
from services.clipboard import Clipboard
from services.openai.response_parser import EMPTY_TAGS_FALLBACK, MAX_TAGS
from services.workflow.tag_editor import TagEditor
from services.workflow.transient_timer import TransientTimer
from utils.media_validation import is_image_content_type, normalize_mime_type, to_image_data_url

LOGGER = logging.getLogger(__name__)

COPY_FEEDBACK_SECONDS = 2.0
DESCRIPTION_FAILED_TEXT = "An error occurred while generating the description."
DESCRIPTION_SENTINELS = frozenset(
	{
		"Unable to generate description",
		"Error generating description. Please try again.",
	}
)


class DescriptionSource(Protocol):
	async def describe_image(self, image_data_url: str) -> str:
		...

	async def tags_from_description(self, description: str) -> List[str]:
		...


def normalize_tags(raw: Iterable[str]) -> List[str]:
	"""Trim, drop empties and duplicates, cap the count; never return an empty list."""
	tags: List[str] = []
	for item in raw:
		tag = str(item).strip()
		if tag and tag not in tags:
			tags.append(tag)
		if len(tags) >= MAX_TAGS:
			break
	return tags or list(EMPTY_TAGS_FALLBACK)


class GenerationWorkflow:
	"""Drive one session through loading, generation, editing and copying.

	Only ``busy_description`` guards against re-entrant generation. Loading a
	new image or resetting does not cancel a call in flight; when it resolves it
	writes into whatever the state is at that moment. With ``discard_stale``
	set, completions that belong to a superseded generation are dropped.
	"""

	def __init__(
		self,
		state: SessionState,
		client: DescriptionSource,
		clipboard: Clipboard,
		*,
		copy_feedback_seconds: float = COPY_FEEDBACK_SECONDS,
		discard_stale: bool = False,
	) -> None:
		self.state = state
		self.client = client
		self.clipboard = clipboard
		self.copy_feedback_seconds = copy_feedback_seconds
		self.discard_stale = discard_stale
		self.tag_editor = TagEditor(lambda: self.state.tags, self._accept_edited_tags)
		self.description_timer = TransientTimer()
		self.tags_timer = TransientTimer()
		self._epoch = 0
		self._tasks: Set[asyncio.Task] = set()

	# Loading and reset

	def load_image(self, upload: ImageUpload) -> bool:
		"""Load an image and clear previous results; non-images are ignored."""
		if not is_image_content_type(upload.content_type):
			LOGGER.debug("Ignoring non-image upload %s (%s)", upload.filename, upload.content_type)
			return False
		self._epoch += 1
		if self.discard_stale:
			# The superseded generation will never clear its own flags.
			self.state.busy_description = False
			self.state.busy_tags = False
		mime_type = normalize_mime_type(upload.content_type)
		self.state.image = to_image_data_url(upload.data, mime_type)
		self.state.image_content_type = mime_type
		self.state.image_filename = upload.filename
		self.state.description = ""
		self._replace_tags([])
		return True

	def reset(self) -> None:
		self._epoch += 1
		self.description_timer.cancel()
		self.tags_timer.cancel()
		self.state.clear()
		self.tag_editor.reset()

	# Generation

	async def generate(self) -> None:
		"""Describe the current image, then derive tags from the description.

		Never raises; failures are written into the session state.
		"""
		epoch = self._begin_generation()
		if epoch is not None:
			await self._complete_generation(self.state.image, epoch)

	def schedule_generate(self) -> Optional[asyncio.Task]:
		"""Start generation and run the remote calls in a background task.

		The busy flag is already set when this returns.
		"""
		epoch = self._begin_generation()
		if epoch is None:
			return None
		task = asyncio.get_running_loop().create_task(self._complete_generation(self.state.image, epoch))
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		return task

	async def aclose(self) -> None:
		"""Cancel background generations and wait for them to unwind."""
		tasks = list(self._tasks)
		for task in tasks:
			task.cancel()
		if tasks:
			await asyncio.gather(*tasks, return_exceptions=True)
			# A task cancelled before its first step never reaches its finally block.
			self.state.busy_description = False
			self.state.busy_tags = False

	def _begin_generation(self) -> Optional[int]:
		state = self.state
		if not state.image or state.busy_description:
			return None
		self._epoch += 1
		state.busy_description = True
		state.description_copied = False
		self.description_timer.cancel()
		return self._epoch

	async def _complete_generation(self, image: str, epoch: int) -> None:
		try:
			await self._run_generation(image, epoch)
		finally:
			if self._is_current(epoch):
				self.state.busy_description = False

	async def _run_generation(self, image: str, epoch: int) -> None:
		state = self.state
		try:
			description = await self.client.describe_image(image)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.error("Failed to generate description: %s", exc)
			if self._is_current(epoch):
				state.description = DESCRIPTION_FAILED_TEXT
				self._replace_tags([])
			return

		if not self._is_current(epoch):
			LOGGER.debug("Dropping stale description for epoch %s", epoch)
			return
		state.description = description
		if not description or description in DESCRIPTION_SENTINELS:
			return

		state.busy_tags = True
		self.tag_editor.reset()
		try:
			tags = normalize_tags(await self.client.tags_from_description(description))
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.error("Failed to generate tags: %s", exc)
			tags = []
		if self._is_current(epoch):
			self._replace_tags(tags)
			state.busy_tags = False

	def _is_current(self, epoch: int) -> bool:
		return not self.discard_stale or epoch == self._epoch

	# Editing

	def edit_description(self, text: str) -> None:
		self.state.description = text

	def _replace_tags(self, tags: List[str]) -> None:
		self.state.tags = list(tags)
		self.tag_editor.reset()

	def _accept_edited_tags(self, tags: List[str]) -> None:
		self.state.tags = tags

	# Copying

	async def copy_description(self) -> bool:
		if not self.state.description:
			return False
		return await self._copy(self.state.description, "description_copied", self.description_timer)

	async def copy_tags(self) -> bool:
		if not self.state.tags:
			return False
		return await self._copy(", ".join(self.state.tags), "tags_copied", self.tags_timer)

	async def _copy(self, text: str, flag: str, timer: TransientTimer) -> bool:
		setattr(self.state, flag, True)
		try:
			await self.clipboard.write_text(text)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			setattr(self.state, flag, False)
			LOGGER.error("Failed to copy %s: %s", flag.replace("_copied", ""), exc)
			return False
		timer.arm(lambda: setattr(self.state, flag, False), self.copy_feedback_seconds)
		return True

	def snapshot(self) -> Dict[str, Any]:
		"""Return a JSON-ready view of the session and tag edit state."""
		state = self.state
		edit = self.tag_editor.state
		return {
			"session_id": state.session_id,
			"has_image": state.image is not None,
			"image_content_type": state.image_content_type,
			"image_filename": state.image_filename,
			"description": state.description,
			"tags": list(state.tags),
			"busy_description": state.busy_description,
			"busy_tags": state.busy_tags,
			"description_copied": state.description_copied,
			"tags_copied": state.tags_copied,
			"tag_edit": {
				"editing_index": edit.editing_index,
				"editing_value": edit.editing_value,
				"draft_tag": edit.draft_tag,
			},
		}
