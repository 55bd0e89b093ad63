"""All magic numbers and configuration constants."""

AUDIO_DIR = "generated-audio"                # generated reports/podcasts, relative to cwd
MEDIA_URL_PATH = "/api/generate/media"       # route that serves AUDIO_DIR

XAI_API_URL = "https://api.x.ai/v1/chat/completions"
XAI_MODEL = "grok-4-1-fast-reasoning"
XAI_MAX_TOKENS = 4096
XAI_TEMPERATURE = 0.7

ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1"
ELEVENLABS_MODEL_ID = "eleven_turbo_v2"
ELEVENLABS_OUTPUT_FORMAT = "mp3_44100_128"
DEFAULT_STABILITY = 0.5
DEFAULT_SIMILARITY_BOOST = 0.75

TTS_PROVIDERS = ("elevenlabs", "edge")
DEFAULT_TTS_PROVIDER = "elevenlabs"
TTS_MAX_CHARS = 5000                # chars; longer turns are truncated, not chunked
HTTP_TIMEOUT_SECONDS = 120.0

WORDS_PER_SECOND = 2.5              # 150 words per minute speaking rate
MAX_DIALOGUE_TURNS = 20             # content loop never grows the dialogue past this
REPORT_TARGET_RATIO = 0.8           # leave room for the closing turn
PODCAST_TARGET_RATIO = 0.75
TURNS_PER_GROUP = 2                 # report turns spent on each document focus
DEFAULT_TARGET_SECONDS = 300
DEFAULT_INVESTIGATION = "Document Investigation"
DEFAULT_INVESTIGATORS = ("reporter", "privateEye")
DEFAULT_HOSTS = ("host1", "host2")

ARTICLE_CONTENT_MAX_CHARS = 1500    # per-article content included in prompts
TRANSCRIPT_MAX_CHARS = 2000         # transcript budget for title/tag prompts
CONTENT_ID_LENGTH = 16              # hex chars of the sha256 run id
CONTENT_ID_SEPARATOR = "\x1f"       # unit separator between id parts

KEEPALIVE_SECONDS = 15.0            # SSE ping interval
MEDIA_CACHE_CONTROL = "public, max-age=31536000, immutable"
MEDIA_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
}

ENV_AUDIO_DIR = "ARCHIVE_AUDIO_DIR"
ENV_TTS_PROVIDER = "ARCHIVE_AUDIO_TTS_PROVIDER"
ENV_PERSONAS_FILE = "ARCHIVE_AUDIO_PERSONAS_FILE"
ENV_HTTP_TIMEOUT = "ARCHIVE_AUDIO_HTTP_TIMEOUT"
ENV_XAI_API_KEY = "XAI_API_KEY"
ENV_ELEVENLABS_API_KEY = "ELEVENLABS_API_KEY"

VERSION = "0.1.0"
