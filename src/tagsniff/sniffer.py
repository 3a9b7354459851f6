"""Container classification and reader dispatch planning."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .cursor import ByteCursor
from .formats.flac import read_flac
from .formats.id3 import read_id3v1, read_id3v2
from .formats.mp4 import read_mp4
from .formats.ogg import read_ogg
from .formats.riff import read_aiff, read_wav
from .media_formats import (
    AIFF_EXTENSIONS,
    FLAC_EXTENSIONS,
    MP4_EXTENSIONS,
    OGG_EXTENSIONS,
    WAV_EXTENSIONS,
    normalized_suffix,
)
from .runtime_config import ParseLimits
from .tags import TagSet

logger = logging.getLogger(__name__)


class Container(Enum):
    FLAC = "flac"
    OGG = "ogg"
    MP4 = "mp4"
    ADTS = "adts"
    WAV = "wav"
    AIFF = "aiff"


ReadFn = Callable[[ByteCursor, ParseLimits], "TagSet | None"]


@dataclass(frozen=True)
class FormatReader:
    """One independent tag source, invoked in priority order."""

    name: str
    read: ReadFn


def _read_id3v2_at_start(cursor: ByteCursor, limits: ParseLimits) -> TagSet | None:
    return read_id3v2(cursor, 0)


def _read_id3v1(cursor: ByteCursor, limits: ParseLimits) -> TagSet | None:
    return read_id3v1(cursor)


def _read_flac(cursor: ByteCursor, limits: ParseLimits) -> TagSet | None:
    return read_flac(cursor)


ID3V2_READER = FormatReader("id3v2", _read_id3v2_at_start)
ID3V1_READER = FormatReader("id3v1", _read_id3v1)
CONTAINER_READERS: dict[Container, FormatReader] = {
    Container.FLAC: FormatReader("flac", _read_flac),
    Container.OGG: FormatReader("ogg", read_ogg),
    Container.MP4: FormatReader("mp4", read_mp4),
    Container.WAV: FormatReader("wav", read_wav),
    Container.AIFF: FormatReader("aiff", read_aiff),
}

_EXTENSION_CONTAINERS: tuple[tuple[frozenset[str], Container], ...] = (
    (FLAC_EXTENSIONS, Container.FLAC),
    (OGG_EXTENSIONS, Container.OGG),
    (MP4_EXTENSIONS, Container.MP4),
    (WAV_EXTENSIONS, Container.WAV),
    (AIFF_EXTENSIONS, Container.AIFF),
)


def is_adts(cursor: ByteCursor) -> bool:
    """Test the first two bytes for the 12-bit ADTS sync pattern 0xFFF."""
    if cursor.size < 2:
        return False
    head = cursor.read_at(0, 2)
    return head[0] == 0xFF and (head[1] & 0xF0) == 0xF0


def container_from_extension(path: Path | str) -> Container | None:
    suffix = normalized_suffix(path)
    for extensions, container in _EXTENSION_CONTAINERS:
        if suffix in extensions:
            return container
    return None


def container_from_magic(cursor: ByteCursor) -> Container | None:
    cursor.seek(0)
    head = cursor.read_upto(12)
    if head[:4] == b"fLaC":
        return Container.FLAC
    if head[:4] == b"OggS":
        return Container.OGG
    if head[:4] == b"RIFF" and head[8:12] == b"WAVE":
        return Container.WAV
    if head[:4] == b"FORM" and head[8:12] in (b"AIFF", b"AIFC"):
        return Container.AIFF
    if head[4:8] == b"ftyp":
        return Container.MP4
    return None


def detect_container(path: Path | str, cursor: ByteCursor) -> Container | None:
    """Classify by extension, falling back to magic signatures."""
    container = container_from_extension(path)
    if container is None:
        container = container_from_magic(cursor)
    if container is Container.MP4 and is_adts(cursor):
        logger.debug("Identified %s as an ADTS AAC stream", path)
        return Container.ADTS
    return container


def plan_readers(path: Path | str, cursor: ByteCursor) -> list[FormatReader]:
    """Return readers in priority order: ID3v2, ID3v1, then the container."""
    readers = [ID3V2_READER, ID3V1_READER]
    container = detect_container(path, cursor)
    reader = CONTAINER_READERS.get(container) if container is not None else None
    if reader is not None:
        readers.append(reader)
    return readers
