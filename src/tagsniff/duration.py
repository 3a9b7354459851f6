"""Duration estimation as an ordered fallback chain.

Stages run in order and the first positive, finite value wins:

1. container-declared length (mutagen, then TinyTag);
2. frame count / frame rate from container header metadata;
3. the same computation after opening a decode stream through ffmpeg;
4. a manual FLAC STREAMINFO parse for files recognized as FLAC.

A failing stage is logged and skipped. When every stage fails the duration
is unknown (``None``), never zero.
"""

from __future__ import annotations

import logging
import math
import shutil
import subprocess
import wave
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from importlib import import_module
from pathlib import Path

from mutagen import File as MutagenFile

from .cursor import ByteCursor
from .errors import TagSniffError
from .formats.flac import read_streaminfo
from .formats.riff import read_aiff_frame_info
from .sniffer import Container, container_from_extension, detect_container

logger = logging.getLogger(__name__)

_PROBE_RATE = 8_000
_PROBE_SAMPLE_BYTES = 2
_PROBE_CHUNK_BYTES = 64 * 1024
_PROBE_TIMEOUT_SEC = 30.0


class DurationSource(Enum):
    CONTAINER_DECLARED = "container-declared"
    FRAME_COUNT = "frame-count"
    STREAM_PROBE = "stream-probe"
    MANUAL_HEADER = "manual-header"


@dataclass(frozen=True)
class DurationEstimate:
    seconds: float
    source: DurationSource


Stage = Callable[[Path, "Container | None"], "float | None"]


def estimate_duration_detailed(path: Path | str) -> DurationEstimate | None:
    """Run the fallback chain and report which stage produced the value."""
    track = Path(path)
    container = _classify(track)
    for source, stage in _stages():
        try:
            seconds = stage(track, container)
        except Exception as exc:
            logger.debug(
                "Duration stage %s failed for %s: %s", source.value, track, exc
            )
            continue
        if _is_valid_seconds(seconds):
            logger.debug("Duration of %s from %s: %s", track, source.value, seconds)
            return DurationEstimate(seconds=float(seconds), source=source)
    return None


def container_declared_duration(
    path: Path, container: Container | None
) -> float | None:
    """Length reported by tag libraries that read container headers."""
    audio = MutagenFile(path)
    if audio is not None:
        length = getattr(audio.info, "length", None)
        if _is_valid_seconds(length):
            return float(length)
    return _tinytag_duration(path)


def frame_count_duration(path: Path, container: Container | None) -> float | None:
    """Frame count divided by frame rate from header metadata only."""
    if container is Container.WAV:
        with wave.open(str(path), "rb") as handle:
            frame_rate = int(handle.getframerate())
            frame_count = int(handle.getnframes())
        return _frames_to_seconds(frame_count, frame_rate)
    if container is Container.AIFF:
        with ByteCursor.open(path) as cursor:
            info = read_aiff_frame_info(cursor)
        if info is None:
            return None
        return _frames_to_seconds(*info)
    return None


def stream_probe_duration(path: Path, container: Container | None) -> float | None:
    """Open a decode stream with ffmpeg and count the PCM frames it yields."""
    ffmpeg_bin = shutil.which("ffmpeg")
    if ffmpeg_bin is None:
        return None
    cmd = [
        ffmpeg_bin,
        "-v",
        "error",
        "-i",
        str(path),
        "-vn",
        "-sn",
        "-dn",
        "-f",
        "s16le",
        "-acodec",
        "pcm_s16le",
        "-ac",
        "1",
        "-ar",
        str(_PROBE_RATE),
        "pipe:1",
    ]
    proc: subprocess.Popen[bytes] | None = None
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
        if proc.stdout is None:
            return None
        total_bytes = 0
        while True:
            chunk = proc.stdout.read(_PROBE_CHUNK_BYTES)
            if not chunk:
                break
            total_bytes += len(chunk)
        code = proc.wait(timeout=_PROBE_TIMEOUT_SEC)
        if code != 0:
            return None
        return _frames_to_seconds(total_bytes // _PROBE_SAMPLE_BYTES, _PROBE_RATE)
    finally:
        if proc is not None and proc.poll() is None:
            proc.kill()


def flac_streaminfo_duration(path: Path, container: Container | None) -> float | None:
    """Total samples / sample rate from a manually parsed STREAMINFO block."""
    if container is not Container.FLAC:
        return None
    with ByteCursor.open(path) as cursor:
        info = read_streaminfo(cursor)
    return info.duration_seconds if info is not None else None


def _stages() -> tuple[tuple[DurationSource, Stage], ...]:
    return (
        (DurationSource.CONTAINER_DECLARED, container_declared_duration),
        (DurationSource.FRAME_COUNT, frame_count_duration),
        (DurationSource.STREAM_PROBE, stream_probe_duration),
        (DurationSource.MANUAL_HEADER, flac_streaminfo_duration),
    )


def _classify(path: Path) -> Container | None:
    try:
        with ByteCursor.open(path) as cursor:
            return detect_container(path, cursor)
    except (OSError, TagSniffError) as exc:
        logger.debug("Could not sniff %s: %s", path, exc)
        return container_from_extension(path)


def _tinytag_duration(path: Path) -> float | None:
    try:
        tinytag_module = import_module("tinytag")
    except ImportError:
        return None
    tag = tinytag_module.TinyTag.get(str(path))
    duration = getattr(tag, "duration", None)
    return float(duration) if _is_valid_seconds(duration) else None


def _frames_to_seconds(frame_count: int, frame_rate: float) -> float | None:
    if frame_count <= 0 or not math.isfinite(frame_rate) or frame_rate <= 0:
        return None
    return frame_count / frame_rate


def _is_valid_seconds(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0
