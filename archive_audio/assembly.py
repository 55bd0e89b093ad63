"""Merge per-turn MP3 files into one episode file."""

import logging
import os
import shutil
import subprocess

from pydub import AudioSegment

from archive_audio.errors import ConcatenationError

logger = logging.getLogger(__name__)


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None


def _escape_list_entry(path: str) -> str:
    """Quote a path for an ffmpeg concat list file."""
    return "file '" + path.replace("'", "'\\''") + "'"


def _concatenate_with_ffmpeg(input_files: list[str], output_path: str) -> None:
    """Concat demuxer with stream copy; keeps duration metadata correct."""
    list_path = output_path + ".txt"
    with open(list_path, "w") as f:
        f.write("\n".join(_escape_list_entry(os.path.abspath(p)) for p in input_files))

    cmd = [
        "ffmpeg", "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", list_path,
        "-c", "copy",
        output_path,
    ]
    logger.debug("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    finally:
        if os.path.exists(list_path):
            os.remove(list_path)

    if result.returncode != 0:
        raise ConcatenationError(f"ffmpeg concatenation failed: {result.stderr.strip()}")
    if not os.path.exists(output_path):
        raise ConcatenationError("ffmpeg did not create output file")


def _concatenate_bytes(input_files: list[str], output_path: str) -> None:
    """Raw MP3 buffer concatenation. Reported duration may be wrong."""
    with open(output_path, "wb") as out:
        for path in input_files:
            with open(path, "rb") as f:
                out.write(f.read())


def concatenate_audio_files(input_files: list[str], output_path: str) -> str:
    """Merge input_files in order into output_path.

    Uses ffmpeg when it is on PATH, otherwise falls back to byte
    concatenation. Raises ConcatenationError before writing anything if
    the list is empty or any input is missing. Returns output_path.
    """
    if not input_files:
        raise ConcatenationError("No audio files to concatenate")

    missing = [path for path in input_files if not os.path.isfile(path)]
    if missing:
        raise ConcatenationError(f"Audio files not found: {', '.join(missing)}")

    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    logger.info("Concatenating %d audio files into %s", len(input_files), output_path)

    if ffmpeg_available():
        _concatenate_with_ffmpeg(input_files, output_path)
    else:
        logger.warning("ffmpeg not available, falling back to simple concatenation (duration may be incorrect)")
        _concatenate_bytes(input_files, output_path)

    logger.info("Final audio saved: %s (%d bytes)", output_path, os.path.getsize(output_path))
    return output_path


def measure_duration(path: str) -> float | None:
    """Actual duration in seconds, or None when ffmpeg is unavailable."""
    if not ffmpeg_available():
        return None
    audio = AudioSegment.from_file(path)
    return round(len(audio) / 1000, 1)
