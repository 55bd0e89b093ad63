"""Tests for the HTTP surface (Layer 4)."""

import json
import os
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from archive_audio.models import GenerationProgress, GenerationResult
from archive_audio.server import create_app, format_sse


def _events(body: str) -> list[tuple[str, dict]]:
    """Parse an SSE body into (event, data) pairs."""
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


@pytest.fixture
def client(audio_dir):
    return TestClient(create_app(audio_dir=audio_dir))


def _document_body(**extra):
    body = {"documents": [{"documentId": "doc-1", "summary": "Memo", "names": ["Lee Oswald"]}]}
    body.update(extra)
    return body


def test_format_sse():
    assert format_sse("ping", {"message": "Connection alive"}) == (
        'event: ping\ndata: {"message": "Connection alive"}\n\n'
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0"}


def test_report_stream(client, fake_services):
    response = client.post("/api/generate/investigative-report", json=_document_body(targetLengthSeconds=30))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")

    events = _events(response.text)
    names = [name for name, _ in events]
    assert names[0] == "generatingReport"
    assert names[-1] == "reportComplete"
    assert set(names[1:-1]) == {"investigationUpdate"}

    update = events[1][1]
    assert update["status"] == "preparing"
    assert set(update) == {"status", "message", "currentStep", "totalSteps"}

    done = events[-1][1]
    assert done["message"] == "Investigative report generation complete!"
    assert done["audioUrl"] == f"/api/generate/media?id={done['reportFile']}"
    assert done["title"]
    assert done["tags"]


def test_report_stream_empty_documents(client, fake_services):
    fake_llm, _ = fake_services
    for body in ({"documents": []}, {}):
        response = client.post("/api/generate/investigative-report", json=body)
        assert _events(response.text) == [("error", {"message": "Documents are required"})]
    assert fake_llm.call_count == 0


def test_report_stream_failure(client, fake_tts, no_ffmpeg, monkeypatch):
    monkeypatch.delenv("XAI_API_KEY", raising=False)
    response = client.post("/api/generate/investigative-report", json=_document_body())
    events = _events(response.text)
    assert events[0][0] == "generatingReport"
    assert events[-1] == ("error", {"message": "XAI_API_KEY is not configured"})


def test_report_request_fields(client):
    seen = {}

    def fake_generate(request, on_progress=None, audio_dir=None):
        seen["request"] = request
        on_progress(GenerationProgress("preparing", "go"))
        return GenerationResult(success=True, audio_file="x.mp3", audio_url="/api/generate/media?id=x.mp3")

    with patch("archive_audio.server.generate_investigative_report", side_effect=fake_generate):
        client.post("/api/generate/investigative-report", json=_document_body(
            investigation="JFK Files", selectedInvestigators=["privateEye", "reporter"], targetLengthSeconds=120,
        ))

    request = seen["request"]
    assert request.documents[0].document_id == "doc-1"
    assert request.investigation == "JFK Files"
    assert request.selected_investigators == ["privateEye", "reporter"]
    assert request.target_length_seconds == 120


def test_stream_sends_ping_while_idle(client):
    def slow_generate(request, on_progress=None, audio_dir=None):
        time.sleep(0.3)
        return GenerationResult(success=False, error="gave up")

    with patch("archive_audio.server.KEEPALIVE_SECONDS", 0.05), \
            patch("archive_audio.server.generate_investigative_report", side_effect=slow_generate):
        response = client.post("/api/generate/investigative-report", json=_document_body())

    events = _events(response.text)
    assert ("ping", {"message": "Connection alive"}) in events
    assert events[-1] == ("error", {"message": "gave up"})


def test_podcast_stream(client, fake_services):
    body = {"articles": [{"id": "a1", "title": "Dam opens", "content": "The dam opened."}], "targetLengthSeconds": 30}
    events = _events(client.post("/api/generate/podcast", json=body).text)
    names = [name for name, _ in events]
    assert names[0] == "generatingPodcast"
    assert set(names[1:-1]) == {"progress"}
    assert names[-1] == "podcastComplete"
    done = events[-1][1]
    assert done["message"] == "Podcast generation complete!"
    assert done["podcastFile"].endswith(".mp3")


def test_podcast_stream_empty_articles(client, fake_services):
    events = _events(client.post("/api/generate/podcast", json={"articles": []}).text)
    assert events == [("error", {"message": "Articles are required"})]


# --- Media ---

def test_media_missing_id(client):
    assert client.get("/api/generate/media").status_code == 400


def test_media_serves_file(client, audio_dir):
    os.makedirs(audio_dir, exist_ok=True)
    with open(os.path.join(audio_dir, "abc.mp3"), "wb") as f:
        f.write(b"ID3audio")

    response = client.get("/api/generate/media", params={"id": "abc.mp3"})
    assert response.status_code == 200
    assert response.content == b"ID3audio"
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
    assert response.headers["accept-ranges"] == "bytes"


def test_media_unknown_extension(client, audio_dir):
    os.makedirs(audio_dir, exist_ok=True)
    with open(os.path.join(audio_dir, "notes.bin"), "wb") as f:
        f.write(b"x")
    response = client.get("/api/generate/media", params={"id": "notes.bin"})
    assert response.headers["content-type"] == "application/octet-stream"


def test_media_not_found(client):
    assert client.get("/api/generate/media", params={"id": "nope.mp3"}).status_code == 404


def test_media_traversal_is_contained(client, tmp_path):
    """Directory components are stripped; nothing outside the audio dir is served."""
    (tmp_path / "secret.mp3").write_bytes(b"secret")
    response = client.get("/api/generate/media", params={"id": "../secret.mp3"})
    assert response.status_code == 404
    response = client.get("/api/generate/media", params={"id": "../../etc/passwd"})
    assert response.status_code == 404


def test_media_rejects_directory_names(client):
    assert client.get("/api/generate/media", params={"id": ".."}).status_code == 403


def test_media_rejects_symlink_escape(client, audio_dir, tmp_path):
    os.makedirs(audio_dir, exist_ok=True)
    (tmp_path / "outside.mp3").write_bytes(b"secret")
    os.symlink(tmp_path / "outside.mp3", os.path.join(audio_dir, "link.mp3"))
    assert client.get("/api/generate/media", params={"id": "link.mp3"}).status_code == 403


def test_media_subdirectory_is_not_a_file(client, audio_dir):
    os.makedirs(os.path.join(audio_dir, "0123456789abcdef"), exist_ok=True)
    assert client.get("/api/generate/media", params={"id": "0123456789abcdef"}).status_code == 404
