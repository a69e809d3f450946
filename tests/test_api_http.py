from __future__ import annotations

import time

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerationClient
from services.openai.generation_client import GenerationError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def api(monkeypatch):
	monkeypatch.setenv("COPY_FEEDBACK_SECONDS", "30")
	monkeypatch.delenv("DISCARD_STALE_GENERATIONS", raising=False)
	import main

	app = main.create_app()
	fake = FakeGenerationClient()
	app.state.generation_client = fake
	with TestClient(app) as client:
		yield client, fake


def _session(client: TestClient) -> str:
	resp = client.post("/sessions")
	assert resp.status_code == 200
	return resp.json()["session_id"]


def _upload(client: TestClient, session_id: str, content_type: str = "image/png", data: bytes = PNG_BYTES):
	return client.post(f"/sessions/{session_id}/image", files={"file": ("pic", data, content_type)})


def _wait_for(client: TestClient, session_id: str, predicate, timeout: float = 5.0) -> dict:
	deadline = time.monotonic() + timeout
	while time.monotonic() < deadline:
		body = client.get(f"/sessions/{session_id}").json()
		if predicate(body):
			return body
		time.sleep(0.01)
	raise AssertionError(f"session {session_id} did not reach the expected state")


def test_health(api) -> None:
	client, _ = api
	resp = client.get("/health")
	assert resp.status_code == 200
	assert resp.json() == {"ok": True, "generation_available": True, "sessions": 0}


def test_new_session_has_empty_defaults(api) -> None:
	client, _ = api
	session_id = _session(client)
	body = client.get(f"/sessions/{session_id}").json()
	assert body["has_image"] is False
	assert body["description"] == ""
	assert body["tags"] == []
	assert body["busy_description"] is False
	assert body["tag_edit"] == {"editing_index": None, "editing_value": "", "draft_tag": ""}


def test_unknown_session_is_404(api) -> None:
	client, _ = api
	assert client.get("/sessions/missing").status_code == 404
	assert client.post("/sessions/missing/generate").status_code == 404
	assert client.post("/sessions/missing/tags/draft/add").status_code == 404


def test_upload_non_image_is_ignored(api) -> None:
	client, _ = api
	session_id = _session(client)
	resp = _upload(client, session_id, content_type="text/plain", data=b"hello")
	assert resp.status_code == 200
	assert resp.json()["accepted"] is False
	assert resp.json()["has_image"] is False


def test_full_flow_generate_edit_copy(api) -> None:
	client, fake = api
	session_id = _session(client)

	resp = _upload(client, session_id)
	assert resp.json()["accepted"] is True
	preview = client.get(f"/sessions/{session_id}/image")
	assert preview.status_code == 200
	assert preview.headers["content-type"] == "image/png"
	assert preview.content == PNG_BYTES

	resp = client.post(f"/sessions/{session_id}/generate", params={"wait": "true"})
	assert resp.status_code == 200
	body = resp.json()
	assert body["description"] == "A cat on a mat"
	assert body["tags"] == ["cat", "mat", "pet"]
	assert fake.describe_calls[0].startswith("data:image/png;base64,")

	client.post(f"/sessions/{session_id}/tags/1/edit")
	client.put(f"/sessions/{session_id}/tags/edit", json={"text": "  rug "})
	resp = client.post(f"/sessions/{session_id}/tags/edit/commit")
	assert resp.json()["applied"] is True
	assert resp.json()["tags"] == ["cat", "rug", "pet"]

	client.put(f"/sessions/{session_id}/tags/draft", json={"text": "cat"})
	resp = client.post(f"/sessions/{session_id}/tags/draft/add")
	assert resp.json()["applied"] is False
	assert resp.json()["tag_edit"]["draft_tag"] == "cat"

	resp = client.delete(f"/sessions/{session_id}/tags/0")
	assert resp.json()["tags"] == ["rug", "pet"]

	resp = client.post(f"/sessions/{session_id}/copy/tags")
	assert resp.json()["copied"] is True
	assert resp.json()["tags_copied"] is True
	assert client.get(f"/sessions/{session_id}/clipboard").json()["text"] == "rug, pet"


def test_generate_requires_image(api) -> None:
	client, fake = api
	session_id = _session(client)
	resp = client.post(f"/sessions/{session_id}/generate")
	assert resp.status_code == 409
	assert fake.describe_calls == []


def test_description_edit_locked_while_copied(api) -> None:
	client, _ = api
	session_id = _session(client)
	resp = client.put(f"/sessions/{session_id}/description", json={"description": "hand written"})
	assert resp.json()["description"] == "hand written"

	client.post(f"/sessions/{session_id}/copy/description")
	resp = client.put(f"/sessions/{session_id}/description", json={"description": "again"})
	assert resp.status_code == 409


def test_tag_edit_errors_map_to_status_codes(api) -> None:
	client, _ = api
	session_id = _session(client)
	assert client.post(f"/sessions/{session_id}/tags/0/edit").status_code == 404
	assert client.delete(f"/sessions/{session_id}/tags/3").status_code == 404
	assert client.put(f"/sessions/{session_id}/tags/edit", json={"text": "x"}).status_code == 409


def test_reset_clears_session(api) -> None:
	client, _ = api
	session_id = _session(client)
	_upload(client, session_id)
	client.post(f"/sessions/{session_id}/generate", params={"wait": "true"})
	body = client.post(f"/sessions/{session_id}/reset").json()
	assert body["has_image"] is False
	assert body["tags"] == []
	assert client.get(f"/sessions/{session_id}/image").status_code == 404


def test_delete_session(api) -> None:
	client, _ = api
	session_id = _session(client)
	assert client.delete(f"/sessions/{session_id}").json()["deleted"] is True
	assert client.get(f"/sessions/{session_id}").status_code == 404


def test_stateless_describe_and_tags(api) -> None:
	client, fake = api
	resp = client.post("/api/describe", files={"image": ("pic", PNG_BYTES, "image/png")})
	assert resp.json() == {"description": "A cat on a mat"}
	resp = client.post("/api/tags", json={"description": "A cat on a mat"})
	assert resp.json() == {"tags": ["cat", "mat", "pet"]}

	assert client.post("/api/describe", files={"image": ("notes", b"hi", "text/plain")}).status_code == 415


def test_stateless_endpoints_substitute_fallbacks(api) -> None:
	client, fake = api
	fake.describe_error = GenerationError("down")
	fake.tags_error = GenerationError("down")
	resp = client.post("/api/describe", files={"image": ("pic", PNG_BYTES, "image/png")})
	assert resp.json() == {"description": "Error generating description. Please try again."}
	resp = client.post("/api/tags", json={"description": "anything"})
	assert resp.json() == {"tags": ["error"]}


def test_background_generate_reports_busy_immediately(api) -> None:
	client, fake = api
	session_id = _session(client)
	_upload(client, session_id)
	fake.hold_description = True

	resp = client.post(f"/sessions/{session_id}/generate")
	assert resp.status_code == 202
	assert resp.json()["busy_description"] is True
	assert client.post(f"/sessions/{session_id}/generate").status_code == 409

	fake.hold_description = False
	body = _wait_for(client, session_id, lambda b: not b["busy_description"])
	assert body["description"] == "A cat on a mat"
	assert body["tags"] == ["cat", "mat", "pet"]
	assert len(fake.describe_calls) == 1


def test_tag_editing_rejected_while_tags_generate(api) -> None:
	client, fake = api
	session_id = _session(client)
	_upload(client, session_id)
	fake.hold_tags = True

	assert client.post(f"/sessions/{session_id}/generate").status_code == 202
	_wait_for(client, session_id, lambda b: b["busy_tags"])
	resp = client.put(f"/sessions/{session_id}/tags/draft", json={"text": "rug"})
	assert resp.status_code == 409
	assert client.post(f"/sessions/{session_id}/tags/draft/add").status_code == 409

	fake.hold_tags = False
	_wait_for(client, session_id, lambda b: not b["busy_description"])
	resp = client.put(f"/sessions/{session_id}/tags/draft", json={"text": "rug"})
	assert resp.status_code == 200
	assert resp.json()["tag_edit"]["draft_tag"] == "rug"


def test_content_type_parameters_dropped_from_data_url(api) -> None:
	client, fake = api
	session_id = _session(client)
	resp = _upload(client, session_id, content_type="image/svg+xml; charset=utf-8", data=b"<svg/>")
	assert resp.json()["image_content_type"] == "image/svg+xml"
	client.post(f"/sessions/{session_id}/generate", params={"wait": "true"})
	assert fake.describe_calls[0].startswith("data:image/svg+xml;base64,")
	assert client.get(f"/sessions/{session_id}/image").content == b"<svg/>"

	client.post("/api/describe", files={"image": ("pic", b"<svg/>", "image/svg+xml; charset=utf-8")})
	assert fake.describe_calls[1].startswith("data:image/svg+xml;base64,")


def test_shutdown_cancels_background_generation(monkeypatch) -> None:
	monkeypatch.delenv("DISCARD_STALE_GENERATIONS", raising=False)
	import main

	app = main.create_app()
	fake = FakeGenerationClient()
	fake.hold_description = True
	app.state.generation_client = fake
	with TestClient(app) as client:
		session_id = _session(client)
		_upload(client, session_id)
		assert client.post(f"/sessions/{session_id}/generate").status_code == 202

	workflow = app.state.session_store.get(session_id)
	assert workflow.state.busy_description is False
	assert workflow.state.description == ""
	assert fake.tags_calls == []
