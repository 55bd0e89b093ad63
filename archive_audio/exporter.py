"""Write the provenance manifest that sits beside each generated MP3."""

import logging
import os
from datetime import datetime, timezone

from pydub.exceptions import CouldntDecodeError

from archive_audio.artifacts import load_artifact, manifest_path, write_artifact
from archive_audio.assembly import measure_duration
from archive_audio.constants import VERSION
from archive_audio.models import DialogueTurn

logger = logging.getLogger(__name__)


def export_manifest(
    run_id: str,
    audio_dir: str,
    kind: str,
    title: str,
    tags: list[str],
    speakers: dict[str, str],
    dialogue: list[DialogueTurn],
    estimated_seconds: int,
    settings: dict,
    audio_path: str | None = None,
) -> str:
    """Write <run_id>.json next to <run_id>.mp3.

    speakers maps persona key to display name. audio_path is the file to
    measure when it is not yet at its final location. Returns the manifest
    path.
    """
    if audio_path is None:
        audio_path = os.path.join(audio_dir, f"{run_id}.mp3")
    try:
        duration = measure_duration(audio_path)
    except CouldntDecodeError as e:
        logger.warning("Could not measure duration of %s: %s", audio_path, e)
        duration = None

    manifest = {
        "id": run_id,
        "kind": kind,
        "title": title,
        "tags": tags,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "producer_version": VERSION,
        "speakers": speakers,
        "settings": settings,
        "transcript": [{"speaker": t.speaker, "text": t.text} for t in dialogue],
        "stats": {
            "turns": len(dialogue),
            "estimated_seconds": estimated_seconds,
            "duration_seconds": duration,
        },
    }
    return write_artifact(manifest_path(run_id, audio_dir), manifest)


def load_manifest(run_id: str, audio_dir: str) -> dict:
    """Manifest for run_id, or empty dict for files generated without one."""
    return load_artifact(manifest_path(run_id, audio_dir)) or {}
