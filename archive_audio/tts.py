"""Speech synthesis via ElevenLabs (or edge-tts) plus the spoken-duration estimate."""

import asyncio
import logging
import math
import os

import edge_tts
import httpx

from archive_audio.config import http_timeout, tts_provider
from archive_audio.constants import (
    ELEVENLABS_API_URL,
    ELEVENLABS_MODEL_ID,
    ELEVENLABS_OUTPUT_FORMAT,
    ENV_ELEVENLABS_API_KEY,
    TTS_MAX_CHARS,
    WORDS_PER_SECOND,
)
from archive_audio.errors import EmptyAudioError, MissingCredentialError, UpstreamError
from archive_audio.models import Persona, Voice

logger = logging.getLogger(__name__)


def synthesize_speech(text: str, voice: Voice, output_path: str) -> str:
    """Synthesize text with voice and write the MP3 to output_path.

    Parent directories are created as needed. Raises MissingCredentialError
    when ELEVENLABS_API_KEY is unset, UpstreamError on a failed request and
    EmptyAudioError when no audio bytes come back. Returns output_path.
    """
    provider = tts_provider()
    api_key = os.environ.get(ENV_ELEVENLABS_API_KEY)
    if provider == "elevenlabs" and not api_key:
        raise MissingCredentialError(ENV_ELEVENLABS_API_KEY)

    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    logger.info("Synthesizing %d chars with voice %s (%s)", len(text), voice.name, provider)

    if provider == "edge":
        _synthesize_edge(text, voice, output_path)
    else:
        audio = _request_elevenlabs(text, voice, api_key)
        with open(output_path, "wb") as f:
            f.write(audio)

    logger.debug("Audio saved to %s", output_path)
    return output_path


def _request_elevenlabs(text: str, voice: Voice, api_key: str) -> bytes:
    url = f"{ELEVENLABS_API_URL}/text-to-speech/{voice.voice_id}"
    headers = {
        "xi-api-key": api_key,
        "Content-Type": "application/json",
        "Accept": "audio/mpeg",
    }
    payload = {
        "text": text,
        "model_id": ELEVENLABS_MODEL_ID,
        "voice_settings": {
            "stability": voice.stability,
            "similarity_boost": voice.similarity_boost,
        },
        "output_format": ELEVENLABS_OUTPUT_FORMAT,
    }

    try:
        response = httpx.post(url, json=payload, headers=headers, timeout=http_timeout())
    except httpx.HTTPError as e:
        raise UpstreamError(f"ElevenLabs request failed: {e}") from e

    if not response.is_success:
        raise UpstreamError(
            f"ElevenLabs API error: {response.status_code} - {response.text}",
            status_code=response.status_code,
        )
    if not response.content:
        raise EmptyAudioError("ElevenLabs returned empty audio buffer")
    return response.content


def _synthesize_edge(text: str, voice: Voice, output_path: str) -> None:
    """Sync wrapper around edge_tts.Communicate()."""
    communicate = edge_tts.Communicate(text, voice.edge_voice)
    try:
        asyncio.run(communicate.save(output_path))
    except Exception as e:
        raise UpstreamError(f"edge-tts synthesis failed: {e}") from e

    if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
        raise EmptyAudioError(f"edge-tts produced 0-byte file for: {text[:50]}...")


def turn_filename(turn_index: int, speaker: str) -> str:
    """Filename for one dialogue turn, e.g. turn-003-reporter.mp3."""
    return f"turn-{turn_index:03d}-{speaker}.mp3"


def synthesize_turn(text: str, persona: Persona, output_dir: str, turn_index: int) -> str:
    """Synthesize one dialogue turn into output_dir and return its path.

    Text over TTS_MAX_CHARS is truncated rather than split.
    """
    output_path = os.path.join(output_dir, turn_filename(turn_index, persona.key))
    if len(text) > TTS_MAX_CHARS:
        logger.warning("Text too long (%d chars), truncating to %d", len(text), TTS_MAX_CHARS)
        text = text[:TTS_MAX_CHARS]
    return synthesize_speech(text, persona.voice, output_path)


def estimate_duration(text: str) -> int:
    """Estimated spoken seconds for text at WORDS_PER_SECOND."""
    words = len(text.split())
    return math.ceil(words / WORDS_PER_SECOND)
