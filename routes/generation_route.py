"""FastAPI routes for one-off description and tag generation."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.generation_controller import GenerationController
from utils.media_validation import read_image_upload, require_image

router = APIRouter(prefix="/api", tags=["generation"])


class TagsPayload(BaseModel):
    description: str


def _get_controller(request: Request) -> GenerationController:
    """Build a controller around the shared generation client from app state."""
    client = getattr(request.app.state, "generation_client", None)
    if client is None:
        raise HTTPException(status_code=500, detail="Generation client not initialized.")
    return GenerationController(client)


@router.post("/describe", summary="Describe an uploaded image")
async def describe_route(request: Request, image: UploadFile = File(...)):
    """Return a one-sentence description for the uploaded image.

    Args:
        request: The FastAPI request containing application state.
        image: Uploaded image; non-image content types are rejected with 415.

    Returns:
        ``{"description": ...}`` with a fallback sentence when generation failed.
    """
    upload = require_image(await read_image_upload(image))
    try:
        return await _get_controller(request).describe(upload)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail="Failed to describe the image.") from exc


@router.post("/tags", summary="Derive tags from a description")
async def tags_route(request: Request, payload: TagsPayload):
    """Return up to eight tags for the description, or ``["error"]`` when generation failed."""
    if not payload.description.strip():
        raise HTTPException(status_code=400, detail="Description is required.")
    try:
        return await _get_controller(request).tags(payload.description)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail="Failed to generate tags.") from exc
