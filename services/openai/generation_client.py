"""Description and tag generation via an OpenAI-compatible chat completions API."""

import logging
import os
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.openai.image_prompts import build_description_prompt, build_tags_prompt
from services.openai.response_parser import extract_message_text, extract_usage, parse_tags

LOGGER = logging.getLogger(__name__)
DEFAULT_BASE_URL = os.getenv("OPENAI_BASE_URL", "http://localhost:1234/v1")
DEFAULT_API_KEY = os.getenv("OPENAI_API_KEY", "gemma")  # local servers ignore the key
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gemma-3-4b-it-qat")

UNABLE_TO_DESCRIBE = "Unable to generate description"
DESCRIPTION_ERROR = "Error generating description. Please try again."
TAGS_ON_ERROR = ["error"]


class GenerationError(RuntimeError):
    """Raised when a description or tag request fails."""


def build_openai_client(base_url: Optional[str] = None, api_key: Optional[str] = None) -> AsyncOpenAI:
    """Create the async client pointed at the configured endpoint."""
    return AsyncOpenAI(base_url=base_url or DEFAULT_BASE_URL, api_key=api_key or DEFAULT_API_KEY)


class GenerationClient:
    """Ask a vision-capable chat model for an image description and tags."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        """Initialize the service with a shared OpenAI client.

        Args:
            client: Async OpenAI client, typically created once per application.
            model: Chat completion model name served by the endpoint.
        """
        if client is None:
            raise ValueError("OpenAI client is required for generation.")
        self.client = client
        self.model = model

    async def describe_image(self, image_data_url: str) -> str:
        """Return a one-sentence description of the image.

        Args:
            image_data_url: Image as ``data:<mime>;base64,<bytes>``.

        Returns:
            The model text, or ``UNABLE_TO_DESCRIBE`` when the model returned nothing.

        Raises:
            GenerationError: If the request itself fails.
        """
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_description_prompt()},
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            }
        ]
        response = await self._create_completion(messages)
        text = extract_message_text(response).strip()
        return text or UNABLE_TO_DESCRIBE

    async def tags_from_description(self, description: str) -> List[str]:
        """Return up to eight trimmed tags derived from a description.

        Raises:
            GenerationError: If the request itself fails.
        """
        messages = [{"role": "user", "content": build_tags_prompt(description)}]
        response = await self._create_completion(messages)
        return parse_tags(extract_message_text(response))

    async def _create_completion(self, messages: List[Dict[str, Any]]) -> Any:
        try:
            response = await self.client.chat.completions.create(model=self.model, messages=messages)
        except Exception as exc:
            LOGGER.error("Error during chat completion call: %s", exc)
            raise GenerationError(f"Chat completion failed: {exc}") from exc
        LOGGER.debug("Chat completion usage: %s", extract_usage(response))
        return response
