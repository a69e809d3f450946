"""Tag editor operations exposed over HTTP."""

from __future__ import annotations

from typing import Any, Callable, Dict

from fastapi import HTTPException, Request

from controllers.session_controller import get_workflow
from services.workflow.tag_editor import TagEditor


def _apply(request: Request, session_id: str, action: Callable[[TagEditor], Any]) -> Dict[str, Any]:
	"""Run one editor action and map editor errors to HTTP status codes."""
	workflow = get_workflow(request, session_id)
	if workflow.state.busy_tags:
		raise HTTPException(status_code=409, detail="Tags are being generated.")
	try:
		result = action(workflow.tag_editor)
	except IndexError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except RuntimeError as exc:
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	snapshot = workflow.snapshot()
	if isinstance(result, bool):
		snapshot["applied"] = result
	return snapshot


async def begin_edit(request: Request, session_id: str, index: int) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.begin_edit(index))


async def update_editing_value(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.update_editing_value(text))


async def commit_edit(request: Request, session_id: str) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.commit_edit())


async def cancel_edit(request: Request, session_id: str) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.cancel_edit())


async def remove_tag(request: Request, session_id: str, index: int) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.remove_tag(index))


async def update_draft(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.update_draft(text))


async def add_draft(request: Request, session_id: str) -> Dict[str, Any]:
	return _apply(request, session_id, lambda editor: editor.add_draft())
