from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from services.openai.generation_client import (
    UNABLE_TO_DESCRIBE,
    GenerationClient,
    GenerationError,
)
from services.openai.response_parser import parse_tags


class _FakeCompletions:
    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[dict] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


def _client(content: Optional[str] = None, error: Optional[Exception] = None):
    completions = _FakeCompletions(content, error)
    openai_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return GenerationClient(openai_client, model="mock-model"), completions


def test_describe_image_sends_data_url_and_returns_text() -> None:
    client, completions = _client("  A dog in the snow.  ")
    result = asyncio.run(client.describe_image("data:image/png;base64,AAAA"))

    assert result == "A dog in the snow."
    call = completions.calls[0]
    assert call["model"] == "mock-model"
    parts = call["messages"][0]["content"]
    assert parts[0]["type"] == "text"
    assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}


def test_describe_image_without_content_returns_sentinel() -> None:
    client, _ = _client(None)
    assert asyncio.run(client.describe_image("data:image/png;base64,AAAA")) == UNABLE_TO_DESCRIBE


def test_describe_image_wraps_transport_errors() -> None:
    client, _ = _client(error=ConnectionError("refused"))
    with pytest.raises(GenerationError):
        asyncio.run(client.describe_image("data:image/png;base64,AAAA"))


def test_tags_from_description_parses_comma_list() -> None:
    client, completions = _client(" cat , mat,, pet ,")
    tags = asyncio.run(client.tags_from_description("A cat on a mat"))

    assert tags == ["cat", "mat", "pet"]
    assert "A cat on a mat" in completions.calls[0]["messages"][0]["content"]


def test_tags_from_description_wraps_errors() -> None:
    client, _ = _client(error=TimeoutError("slow"))
    with pytest.raises(GenerationError):
        asyncio.run(client.tags_from_description("x"))


def test_parse_tags_caps_and_falls_back() -> None:
    assert parse_tags("a,b,c,d,e,f,g,h,i,j") == ["a", "b", "c", "d", "e", "f", "g", "h"]
    assert parse_tags(" , ,") == ["general"]
    assert parse_tags("") == ["general"]
    assert parse_tags("dog, dog") == ["dog", "dog"]


def test_client_requires_openai_client() -> None:
    with pytest.raises(ValueError):
        GenerationClient(None)
