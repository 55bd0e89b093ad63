"""Audio directory layout, content-addressed run ids and per-run temp dirs."""

import hashlib
import json
import logging
import os
import shutil
import tempfile

from archive_audio.config import audio_directory
from archive_audio.constants import CONTENT_ID_LENGTH, CONTENT_ID_SEPARATOR, MEDIA_URL_PATH

logger = logging.getLogger(__name__)


def content_id(parts: list[str]) -> str:
    """Short sha256 of the inputs; identical inputs map to the same run.

    parts is the ordered list of input identifiers followed by the
    participant keys, e.g. ["doc-1,doc-2", "investigation", "reporter,privateEye"].
    Parts are joined with a unit separator so ["ab", "c"] and ["a", "bc"] differ.
    """
    digest = hashlib.sha256(CONTENT_ID_SEPARATOR.join(parts).encode("utf-8")).hexdigest()
    return digest[:CONTENT_ID_LENGTH]


def resolve_audio_dir(audio_dir: str | None = None) -> str:
    """Create (if needed) and return the generated-audio directory."""
    path = os.path.abspath(audio_dir) if audio_dir else audio_directory()
    os.makedirs(path, exist_ok=True)
    return path


def audio_filename(run_id: str) -> str:
    return f"{run_id}.mp3"


def audio_url(run_id: str) -> str:
    return f"{MEDIA_URL_PATH}?id={audio_filename(run_id)}"


def final_audio_path(run_id: str, audio_dir: str) -> str:
    return os.path.join(audio_dir, audio_filename(run_id))


def manifest_path(run_id: str, audio_dir: str) -> str:
    return os.path.join(audio_dir, f"{run_id}.json")


def init_temp_dir(run_id: str, audio_dir: str) -> str:
    """Create a fresh directory for one run's turn files and staged output.

    Named <run_id>-<random> so overlapping runs of the same input never
    share it.
    """
    return tempfile.mkdtemp(prefix=f"{run_id}-", dir=audio_dir)


def cleanup_temp_dir(path: str) -> None:
    """Remove the per-run directory. Failures are logged, never raised."""
    if not os.path.exists(path):
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.warning("Could not clean up temp directory %s: %s", path, e)


def write_artifact(path: str, data: dict) -> str:
    """Write JSON artifact to path. Returns path."""
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_artifact(path: str) -> dict | None:
    """Read JSON artifact. Returns None if missing or unreadable."""
    if not os.path.exists(path):
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed artifact: %s", path)
        return None


def list_generated(audio_dir: str | None = None) -> list[dict]:
    """Finished audio files in the audio directory with their manifest titles.

    Returns a list of {"file", "size", "title"} dicts sorted by filename.
    """
    audio_dir = resolve_audio_dir(audio_dir)
    entries = []
    for name in sorted(os.listdir(audio_dir)):
        path = os.path.join(audio_dir, name)
        if not name.endswith(".mp3") or not os.path.isfile(path):
            continue
        run_id = os.path.splitext(name)[0]
        manifest = load_artifact(manifest_path(run_id, audio_dir)) or {}
        entries.append({
            "file": name,
            "size": os.path.getsize(path),
            "title": manifest.get("title"),
        })
    return entries
