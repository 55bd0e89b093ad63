"""Tests for assembly module (Layer 2)."""

import shutil
from unittest.mock import MagicMock, patch

import pytest
from pydub import AudioSegment

from archive_audio.assembly import concatenate_audio_files, measure_duration
from archive_audio.errors import ConcatenationError

needs_ffmpeg = pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")


def _write(path, data):
    path.write_bytes(data)
    return str(path)


def test_concatenate_bytes_fallback(tmp_path, no_ffmpeg):
    a = _write(tmp_path / "a.mp3", b"AAA")
    b = _write(tmp_path / "b.mp3", b"BB")
    output = tmp_path / "out" / "final.mp3"
    assert concatenate_audio_files([a, b], str(output)) == str(output)
    assert output.read_bytes() == b"AAABB"


def test_concatenate_missing_input_fails(tmp_path, no_ffmpeg):
    """A missing turn fails the merge and nothing is written."""
    a = _write(tmp_path / "a.mp3", b"AAA")
    gone = str(tmp_path / "gone.mp3")
    output = tmp_path / "final.mp3"
    with pytest.raises(ConcatenationError, match="gone.mp3"):
        concatenate_audio_files([gone, a], str(output))
    assert not output.exists()


@patch("archive_audio.assembly.subprocess.run")
@patch("archive_audio.assembly.ffmpeg_available", return_value=True)
def test_concatenate_missing_input_skips_ffmpeg(mock_available, mock_run, tmp_path):
    a = _write(tmp_path / "a.mp3", b"AAA")
    with pytest.raises(ConcatenationError):
        concatenate_audio_files([a, str(tmp_path / "gone.mp3")], str(tmp_path / "final.mp3"))
    mock_run.assert_not_called()


def test_concatenate_nothing_to_do(tmp_path, no_ffmpeg):
    with pytest.raises(ConcatenationError, match="No audio files"):
        concatenate_audio_files([], str(tmp_path / "final.mp3"))
    assert not (tmp_path / "final.mp3").exists()


@patch("archive_audio.assembly.subprocess.run")
@patch("archive_audio.assembly.ffmpeg_available", return_value=True)
def test_concatenate_ffmpeg_command(mock_available, mock_run, tmp_path):
    a = _write(tmp_path / "it's.mp3", b"A")
    output = tmp_path / "final.mp3"
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        with open(cmd[cmd.index("-i") + 1]) as f:
            seen["list"] = f.read()
        output.write_bytes(b"merged")
        return MagicMock(returncode=0, stderr="")

    mock_run.side_effect = fake_run
    concatenate_audio_files([a], str(output))

    cmd = seen["cmd"]
    assert cmd[:6] == ["ffmpeg", "-y", "-f", "concat", "-safe", "0"]
    assert cmd[-3:] == ["-c", "copy", str(output)]
    assert "it'\\''s.mp3" in seen["list"]
    # list file removed
    assert not (tmp_path / "final.mp3.txt").exists()


@patch("archive_audio.assembly.subprocess.run")
@patch("archive_audio.assembly.ffmpeg_available", return_value=True)
def test_concatenate_ffmpeg_failure(mock_available, mock_run, tmp_path):
    a = _write(tmp_path / "a.mp3", b"A")
    mock_run.return_value = MagicMock(returncode=1, stderr="Invalid data found")
    with pytest.raises(ConcatenationError, match="Invalid data found"):
        concatenate_audio_files([a], str(tmp_path / "final.mp3"))
    assert not (tmp_path / "final.mp3.txt").exists()


def test_measure_duration_without_ffmpeg(tmp_path, no_ffmpeg):
    assert measure_duration(str(tmp_path / "whatever.mp3")) is None


@needs_ffmpeg
def test_concatenate_real_mp3s(tmp_path):
    a = tmp_path / "a.mp3"
    b = tmp_path / "b.mp3"
    AudioSegment.silent(duration=1000).export(str(a), format="mp3")
    AudioSegment.silent(duration=1000).export(str(b), format="mp3")
    output = tmp_path / "final.mp3"
    concatenate_audio_files([str(a), str(b)], str(output))
    assert measure_duration(str(output)) == pytest.approx(2.0, abs=0.2)


@needs_ffmpeg
def test_measure_duration(tiny_mp3):
    assert measure_duration(str(tiny_mp3)) == pytest.approx(0.1, abs=0.1)
