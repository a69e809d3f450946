"""Prompt builders for image description and tag derivation."""


def build_description_prompt() -> str:
    """Return the instruction sent alongside the image."""
    return "Output a single sentence that describes this image."


def build_tags_prompt(description: str) -> str:
    """Return the instruction that turns a description into comma-separated tags."""
    return (
        "Generate up to 8 short, relevant tags for an image with the following description. "
        "Respond with the tags only, separated by commas, without numbering or extra text.\n\n"
        f"Description: {description}"
    )
