"""Single-slot timer used to revert transient UI feedback flags."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional


class TransientTimer:
	"""Hold at most one pending callback; arming again reschedules."""

	def __init__(self) -> None:
		self._handle: Optional[asyncio.TimerHandle] = None

	@property
	def pending(self) -> bool:
		return self._handle is not None

	def arm(self, callback: Callable[[], None], duration: float) -> None:
		"""Cancel any pending callback and run ``callback`` once after ``duration`` seconds."""
		self.cancel()
		self._handle = asyncio.get_running_loop().call_later(duration, self._fire, callback)

	def cancel(self) -> None:
		"""Drop the pending callback without running it."""
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None

	def _fire(self, callback: Callable[[], None]) -> None:
		# Slot is cleared first so the callback may re-arm this timer.
		self._handle = None
		callback()
