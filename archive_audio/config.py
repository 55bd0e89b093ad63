"""Runtime settings read from the environment (.env is loaded by the entry points)."""

import logging
import os

from archive_audio.constants import (
    AUDIO_DIR,
    DEFAULT_TTS_PROVIDER,
    ENV_AUDIO_DIR,
    ENV_HTTP_TIMEOUT,
    ENV_TTS_PROVIDER,
    HTTP_TIMEOUT_SECONDS,
    TTS_PROVIDERS,
)

logger = logging.getLogger(__name__)


def audio_directory() -> str:
    """Absolute path of the generated-audio directory (not created here)."""
    return os.path.abspath(os.environ.get(ENV_AUDIO_DIR) or AUDIO_DIR)


def http_timeout() -> float:
    raw = os.environ.get(ENV_HTTP_TIMEOUT)
    if not raw:
        return HTTP_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %.0fs", ENV_HTTP_TIMEOUT, raw, HTTP_TIMEOUT_SECONDS)
        return HTTP_TIMEOUT_SECONDS


def tts_provider() -> str:
    provider = (os.environ.get(ENV_TTS_PROVIDER) or DEFAULT_TTS_PROVIDER).lower()
    if provider not in TTS_PROVIDERS:
        logger.warning("Unknown TTS provider '%s', using '%s'", provider, DEFAULT_TTS_PROVIDER)
        return DEFAULT_TTS_PROVIDER
    return provider
