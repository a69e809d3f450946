"""Session lifecycle and workflow helpers for the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.clipboard import InMemoryClipboard
from services.workflow.generation_workflow import GenerationWorkflow
from services.workflow.session_store import SessionStore
from utils.media_validation import decode_data_url, read_image_upload


def _store(request: Request) -> SessionStore:
	store = getattr(request.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


def get_workflow(request: Request, session_id: str) -> GenerationWorkflow:
	"""Return the session workflow, translating a missing session to 404."""
	try:
		return _store(request).get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new session and return its initial snapshot."""
	return _store(request).create().snapshot()


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	return get_workflow(request, session_id).snapshot()


async def delete_session(request: Request, session_id: str) -> Dict[str, Any]:
	try:
		_store(request).delete(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "deleted": True}


async def load_image(request: Request, session_id: str, file: UploadFile) -> Dict[str, Any]:
	"""Load an uploaded file; anything that is not an image is ignored."""
	workflow = get_workflow(request, session_id)
	upload = await read_image_upload(file)
	accepted = workflow.load_image(upload)
	return {"accepted": accepted, **workflow.snapshot()}


async def get_image(request: Request, session_id: str) -> Response:
	"""Return the loaded image bytes for previewing."""
	workflow = get_workflow(request, session_id)
	if not workflow.state.image:
		raise HTTPException(status_code=404, detail="No image loaded")
	mime_type, data = decode_data_url(workflow.state.image)
	return Response(content=data, media_type=mime_type)


async def reset_session(request: Request, session_id: str) -> Dict[str, Any]:
	workflow = get_workflow(request, session_id)
	workflow.reset()
	clipboard = workflow.clipboard
	if isinstance(clipboard, InMemoryClipboard):
		clipboard.clear()
	return workflow.snapshot()


async def generate(request: Request, session_id: str, wait: bool) -> Dict[str, Any]:
	"""Start generation, or run it to completion when ``wait`` is set."""
	workflow = get_workflow(request, session_id)
	if not workflow.state.image:
		raise HTTPException(status_code=409, detail="Load an image before generating.")
	if workflow.state.busy_description:
		raise HTTPException(status_code=409, detail="Generation already in progress.")
	if wait:
		await workflow.generate()
	else:
		workflow.schedule_generate()
	return workflow.snapshot()


async def edit_description(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	"""Overwrite the description unless it is being generated or was just copied."""
	workflow = get_workflow(request, session_id)
	if workflow.state.busy_description or workflow.state.description_copied:
		raise HTTPException(status_code=409, detail="Description is read-only right now.")
	workflow.edit_description(text)
	return workflow.snapshot()


async def copy_description(request: Request, session_id: str) -> Dict[str, Any]:
	workflow = get_workflow(request, session_id)
	copied = await workflow.copy_description()
	return {"copied": copied, "text": workflow.state.description if copied else None, **workflow.snapshot()}


async def copy_tags(request: Request, session_id: str) -> Dict[str, Any]:
	workflow = get_workflow(request, session_id)
	copied = await workflow.copy_tags()
	text = ", ".join(workflow.state.tags) if copied else None
	return {"copied": copied, "text": text, **workflow.snapshot()}


async def read_clipboard(request: Request, session_id: str) -> Dict[str, Any]:
	workflow = get_workflow(request, session_id)
	return {"session_id": session_id, "text": getattr(workflow.clipboard, "text", None)}
