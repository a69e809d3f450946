"""Helpers to parse chat completion outputs."""

from typing import Any, List

MAX_TAGS = 8
EMPTY_TAGS_FALLBACK = ["general"]


def extract_message_text(response: Any) -> str:
    """Return the content of the first choice, or an empty string."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message else None
    return content or ""


def parse_tags(text: str) -> List[str]:
    """Split a comma-joined tag string, trimming, dropping empties and capping the count.

    An empty result is replaced with ``EMPTY_TAGS_FALLBACK``. Duplicates are kept.
    """
    tags = [part.strip() for part in text.split(",")]
    tags = [tag for tag in tags if tag][:MAX_TAGS]
    return tags or list(EMPTY_TAGS_FALLBACK)


def extract_usage(response: Any) -> dict:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "completion_tokens", None) if usage else None,
    }
