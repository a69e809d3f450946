"""FastAPI routes for alt text sessions."""

from fastapi import APIRouter, File, HTTPException, Request, Response, UploadFile
from pydantic import BaseModel

from controllers.session_controller import (
	copy_description,
	copy_tags,
	delete_session,
	edit_description,
	generate,
	get_image,
	get_session,
	load_image,
	read_clipboard,
	reset_session,
	start_session,
)

router = APIRouter(prefix="/sessions")


class DescriptionPayload(BaseModel):
	description: str


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return await get_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def delete_session_route(request: Request, session_id: str):
	try:
		return await delete_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/image")
async def load_image_route(request: Request, session_id: str, file: UploadFile = File(...)):
	"""Load an image into the session, clearing any previous description and tags."""
	try:
		return await load_image(request, session_id, file)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/image")
async def get_image_route(request: Request, session_id: str):
	"""Return the loaded image for previewing."""
	try:
		return await get_image(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/reset")
async def reset_session_route(request: Request, session_id: str):
	try:
		return await reset_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/generate")
async def generate_route(request: Request, response: Response, session_id: str, wait: bool = False):
	"""Generate a description and tags; runs in the background unless ``wait`` is set."""
	try:
		result = await generate(request, session_id, wait)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
	if not wait:
		response.status_code = 202
	return result


@router.put("/{session_id}/description")
async def edit_description_route(request: Request, session_id: str, payload: DescriptionPayload):
	try:
		return await edit_description(request, session_id, payload.description)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/copy/description")
async def copy_description_route(request: Request, session_id: str):
	try:
		return await copy_description(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/copy/tags")
async def copy_tags_route(request: Request, session_id: str):
	try:
		return await copy_tags(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/clipboard")
async def read_clipboard_route(request: Request, session_id: str):
	try:
		return await read_clipboard(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
