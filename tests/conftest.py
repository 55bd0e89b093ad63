"""Shared fixtures for archive audio tests."""

import os
from unittest.mock import patch

import pytest
from pydub import AudioSegment

from archive_audio.models import Article, DocumentInput, FalseRedactions

SPOKEN_TEXT = "We found something interesting in these records today."  # 8 words, ~4s
TITLE = "The Case of the Missing Pages"
TAGS_REPLY = "archives, investigation, history, redactions, 1963"


@pytest.fixture
def tiny_mp3(tmp_path):
    """Generate a 100ms silent MP3 for testing."""
    path = tmp_path / "test.mp3"
    silence = AudioSegment.silent(duration=100)
    silence.export(str(path), format="mp3")
    return path


@pytest.fixture
def sample_documents():
    """Two related documents (shared name) and one unrelated."""
    return [
        DocumentInput(
            document_id="doc-1",
            summary="Memo about a trip to Mexico City.",
            names=["Lee Oswald", "Win Scott"],
            places=["Mexico City"],
            dates=["1963-09-27"],
        ),
        DocumentInput(
            document_id="doc-2",
            summary="Cable from the Mexico City station.",
            names=["Lee Oswald"],
            places=["Washington"],
            dates=["1963-10-10"],
            false_redactions=FalseRedactions(found=True, total_hidden_words=2, hidden_words=["LIENVOY"]),
        ),
        DocumentInput(
            document_id="doc-3",
            summary="Budget request for a field office.",
            names=["J. Smith"],
            places=["Miami"],
            dates=["1962-01-01"],
        ),
    ]


@pytest.fixture
def sample_articles():
    return [
        Article(id="a1", title="Dam opens", content="The new dam opened on Monday.", url="https://example.com/dam"),
        Article(id="a2", title="Library reopens", content="The library reopened after repairs."),
    ]


def _fake_generate_text(user_prompt, system_prompt=None, temperature=None, max_tokens=None):
    system_prompt = system_prompt or ""
    if system_prompt.startswith("You are creating a title"):
        return f'"{TITLE}"'
    if system_prompt.startswith("Generate 5-8 relevant tags"):
        return TAGS_REPLY
    return SPOKEN_TEXT


def fake_synthesize_speech(text, voice, output_path):
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, "wb") as f:
        f.write(b"ID3" + text.encode("utf-8"))
    return output_path


@pytest.fixture
def fake_llm():
    """Replace the chat-completion call with canned replies."""
    with patch("archive_audio.text_generator.generate_text", side_effect=_fake_generate_text) as mock:
        yield mock


@pytest.fixture
def fake_tts():
    """Write a few bytes instead of calling the speech service."""
    with patch("archive_audio.tts.synthesize_speech", side_effect=fake_synthesize_speech) as mock:
        yield mock


@pytest.fixture
def no_ffmpeg():
    """Force the byte-concatenation path so fake MP3s can be merged."""
    with patch("archive_audio.assembly.ffmpeg_available", return_value=False):
        yield


@pytest.fixture
def fake_services(fake_llm, fake_tts, no_ffmpeg):
    return fake_llm, fake_tts


@pytest.fixture
def audio_dir(tmp_path):
    return str(tmp_path / "generated-audio")
