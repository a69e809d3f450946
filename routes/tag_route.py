"""FastAPI routes for inline tag editing within a session."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.tag_controller import (
	add_draft,
	begin_edit,
	cancel_edit,
	commit_edit,
	remove_tag,
	update_draft,
	update_editing_value,
)

router = APIRouter(prefix="/sessions/{session_id}/tags")


class TextPayload(BaseModel):
	text: str


# Static paths are registered before "/{index}/..." so "edit" is never read as an index.


@router.put("/edit")
async def update_editing_value_route(request: Request, session_id: str, payload: TextPayload):
	try:
		return await update_editing_value(request, session_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/edit/commit")
async def commit_edit_route(request: Request, session_id: str):
	try:
		return await commit_edit(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/edit/cancel")
async def cancel_edit_route(request: Request, session_id: str):
	try:
		return await cancel_edit(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.put("/draft")
async def update_draft_route(request: Request, session_id: str, payload: TextPayload):
	try:
		return await update_draft(request, session_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/draft/add")
async def add_draft_route(request: Request, session_id: str):
	try:
		return await add_draft(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{index}/edit")
async def begin_edit_route(request: Request, session_id: str, index: int):
	try:
		return await begin_edit(request, session_id, index)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{index}")
async def remove_tag_route(request: Request, session_id: str, index: int):
	try:
		return await remove_tag(request, session_id, index)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
