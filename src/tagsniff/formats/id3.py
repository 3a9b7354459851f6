"""ID3v1 trailer and ID3v2 framed tag readers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from ..cursor import ByteCursor
from ..errors import UnsupportedEncodingError
from ..tags import TagCollector, TagSet, clean_text

logger = logging.getLogger(__name__)

ID3V1_SIZE = 128
ID3V1_MAGIC = b"TAG"
# (key, offset, width) inside the 128-byte trailer.
ID3V1_FIELDS = (("title", 3, 30), ("artist", 33, 30), ("album", 63, 30))

ID3V2_MAGIC = b"ID3"
ID3V2_HEADER_SIZE = 10
FRAME_HEADER_SIZE = 10
SUPPORTED_MAJOR_VERSIONS = (3, 4)
EXTENDED_HEADER_FLAG = 0x40
PADDING_FRAME_ID = b"\x00\x00\x00\x00"

TEXT_FRAME_KEYS = {"TIT2": "title", "TPE1": "artist", "TALB": "album"}


def decode_synchsafe(raw: bytes) -> int:
    """Decode a big-endian integer that carries 7 usable bits per byte."""
    value = 0
    for byte in raw:
        value = (value << 7) | (byte & 0x7F)
    return value


class FrameSizeEncoding(Enum):
    SYNCHSAFE = "synchsafe"
    PLAIN = "plain"

    @classmethod
    def for_version(cls, major_version: int) -> FrameSizeEncoding:
        return cls.SYNCHSAFE if major_version >= 4 else cls.PLAIN

    def decode(self, raw: bytes) -> int:
        if self is FrameSizeEncoding.SYNCHSAFE:
            return decode_synchsafe(raw)
        return int.from_bytes(raw, "big")


@dataclass(frozen=True)
class Id3v2Frame:
    frame_id: str
    size: int
    payload: bytes

    @property
    def is_text(self) -> bool:
        return self.frame_id.startswith("T")


def read_id3v1(cursor: ByteCursor) -> TagSet | None:
    """Read the fixed 128-byte trailer, or return None when absent."""
    if cursor.size < ID3V1_SIZE:
        return None
    trailer = cursor.read_at(cursor.size - ID3V1_SIZE, ID3V1_SIZE)
    if trailer[:3] != ID3V1_MAGIC:
        return None
    logger.debug("Found ID3v1 trailer")
    collector = TagCollector()
    for key, offset, width in ID3V1_FIELDS:
        raw = trailer[offset : offset + width]
        collector.offer(key, clean_text(raw.decode("latin-1")))
    return collector.freeze()


def read_id3v2(cursor: ByteCursor, offset: int = 0) -> TagSet | None:
    """Read an ID3v2.3/2.4 tag whose header starts at ``offset``."""
    if offset < 0 or cursor.size - offset < ID3V2_HEADER_SIZE:
        return None
    header = cursor.read_at(offset, ID3V2_HEADER_SIZE)
    if header[:3] != ID3V2_MAGIC:
        return None
    major_version = header[3]
    if major_version not in SUPPORTED_MAJOR_VERSIONS:
        logger.debug(
            "Skipping ID3v2.%d tag at offset %d (unsupported version)",
            major_version,
            offset,
        )
        return None
    tag_size = decode_synchsafe(header[6:10])
    body_start = offset + ID3V2_HEADER_SIZE
    tag_end = min(body_start + tag_size, cursor.size)
    logger.debug(
        "Found ID3v2.%d tag at offset %d, size %d", major_version, offset, tag_size
    )

    size_encoding = FrameSizeEncoding.for_version(major_version)
    frames_start = body_start
    if header[5] & EXTENDED_HEADER_FLAG:
        frames_start = _skip_extended_header(
            cursor, body_start, tag_end, size_encoding
        )

    collector = TagCollector()
    for frame in iter_frames(cursor, frames_start, tag_end, size_encoding):
        key = TEXT_FRAME_KEYS.get(frame.frame_id)
        if key is None or not frame.is_text:
            continue
        collector.offer(key, decode_text_frame(frame.payload))
    return collector.freeze()


def iter_frames(
    cursor: ByteCursor,
    start: int,
    end: int,
    size_encoding: FrameSizeEncoding,
) -> Iterator[Id3v2Frame]:
    """Yield frames between ``start`` and ``end`` until padding or corruption."""
    pos = start
    while end - pos >= FRAME_HEADER_SIZE:
        frame_header = cursor.read_at(pos, FRAME_HEADER_SIZE)
        raw_id = frame_header[:4]
        if raw_id == PADDING_FRAME_ID:
            break
        frame_size = size_encoding.decode(frame_header[4:8])
        pos += FRAME_HEADER_SIZE
        if frame_size <= 0 or frame_size > end - pos:
            logger.debug(
                "Stopping ID3v2 frame walk at %d: frame size %d exceeds %d remaining",
                pos,
                frame_size,
                end - pos,
            )
            break
        payload = cursor.read(frame_size)
        pos += frame_size
        yield Id3v2Frame(
            frame_id=raw_id.decode("latin-1"), size=frame_size, payload=payload
        )


def decode_text_frame(payload: bytes) -> str:
    """Decode a text frame payload (encoding byte + text)."""
    if len(payload) <= 1:
        return ""
    try:
        text = _decode_with_selector(payload[0], payload[1:])
    except UnsupportedEncodingError:
        return ""
    return clean_text(text)


def _decode_with_selector(selector: int, body: bytes) -> str:
    if selector == 0:
        return body.decode("latin-1")
    if selector == 1:
        return _decode_utf16(body)
    if selector == 3:
        return body.decode("utf-8", errors="replace")
    # Selector 2 (UTF-16BE without BOM) yields empty text.
    raise UnsupportedEncodingError(f"text encoding {selector}")


def _decode_utf16(body: bytes) -> str:
    if body[:2] == b"\xff\xfe":
        return body[2:].decode("utf-16-le", errors="replace")
    if body[:2] == b"\xfe\xff":
        return body[2:].decode("utf-16-be", errors="replace")
    return body.decode("utf-16-be", errors="replace")


def _skip_extended_header(
    cursor: ByteCursor,
    body_start: int,
    tag_end: int,
    size_encoding: FrameSizeEncoding,
) -> int:
    if tag_end - body_start < 4:
        return tag_end
    raw_size = cursor.read_at(body_start, 4)
    if size_encoding is FrameSizeEncoding.SYNCHSAFE:
        # v2.4 counts the size field itself.
        return min(body_start + decode_synchsafe(raw_size), tag_end)
    return min(body_start + 4 + int.from_bytes(raw_size, "big"), tag_end)
