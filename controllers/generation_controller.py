"""Controller for one-off description and tag requests outside a session."""

import logging
from typing import Any, Dict, List

from models.session_models import ImageUpload
from services.openai.generation_client import (
    DESCRIPTION_ERROR,
    TAGS_ON_ERROR,
    GenerationClient,
)
from utils.media_validation import normalize_mime_type, to_image_data_url

LOGGER = logging.getLogger(__name__)


class GenerationController:
    """Call the generation client and substitute fallbacks instead of raising."""

    def __init__(self, client: GenerationClient) -> None:
        """Initialize the controller with a generation client.

        Args:
            client: Shared client created at application start.
        """
        self.client = client

    async def describe(self, upload: ImageUpload) -> Dict[str, Any]:
        """Describe an already validated image upload.

        Returns:
            ``{"description": ...}``, holding ``DESCRIPTION_ERROR`` when the call failed.
        """
        data_url = to_image_data_url(upload.data, normalize_mime_type(upload.content_type))
        try:
            description = await self.client.describe_image(data_url)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Error generating image description: %s", exc)
            description = DESCRIPTION_ERROR
        return {"description": description}

    async def tags(self, description: str) -> Dict[str, List[str]]:
        """Derive tags from a description, returning ``TAGS_ON_ERROR`` on failure."""
        try:
            tags = await self.client.tags_from_description(description)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.error("Error generating tags: %s", exc)
            tags = list(TAGS_ON_ERROR)
        return {"tags": tags}
