"""RIFF/WAVE and IFF/AIFF chunk walker.

Both containers share the same framing: a 12-byte form header followed by
8-byte chunk headers (4-byte id, 4-byte size) whose content is padded to an
even length. Only the size byte order and the magic values differ.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..cursor import ByteCursor
from ..errors import TagSniffError
from ..runtime_config import DEFAULT_LIMITS, ParseLimits
from ..tags import TagCollector, TagSet, clean_text, merge_tag_sets
from .id3 import read_id3v2

logger = logging.getLogger(__name__)

FORM_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
LIST_CHUNK = "LIST"
INFO_LIST_TYPE = b"INFO"
INFO_KEYS = {"INAM": "title", "IART": "artist", "IPRD": "album"}
COMM_CHUNK = "COMM"
# channels (2) + sample frames (4) + sample size (2) + 80-bit sample rate (10).
COMM_MIN_SIZE = 18


class ByteOrder(Enum):
    BIG = "big"
    LITTLE = "little"


@dataclass(frozen=True)
class ChunkHeader:
    chunk_id: str
    size: int
    byte_order: ByteOrder
    offset: int

    @property
    def content_offset(self) -> int:
        return self.offset + CHUNK_HEADER_SIZE

    @property
    def next_offset(self) -> int:
        """Offset of the following sibling, including the pad byte."""
        return self.content_offset + self.size + (self.size & 1)


@dataclass(frozen=True)
class RiffDialect:
    name: str
    container_magic: bytes
    form_types: tuple[bytes, ...]
    byte_order: ByteOrder
    id3_chunk_ids: frozenset[str]
    text_chunks: dict[str, str] = field(default_factory=dict)


WAVE = RiffDialect(
    name="wav",
    container_magic=b"RIFF",
    form_types=(b"WAVE",),
    byte_order=ByteOrder.LITTLE,
    id3_chunk_ids=frozenset({"id3 ", "ID3 "}),
)

AIFF = RiffDialect(
    name="aiff",
    container_magic=b"FORM",
    form_types=(b"AIFF", b"AIFC"),
    byte_order=ByteOrder.BIG,
    id3_chunk_ids=frozenset({"ID3 "}),
    text_chunks={"NAME": "title", "AUTH": "artist"},
)


@dataclass
class _Level:
    pos: int
    end: int
    depth: int
    in_info_list: bool


def matches_dialect(header: bytes, dialect: RiffDialect) -> bool:
    return (
        len(header) >= FORM_HEADER_SIZE
        and header[:4] == dialect.container_magic
        and header[8:12] in dialect.form_types
    )


def read_chunk_header(
    cursor: ByteCursor, offset: int, byte_order: ByteOrder
) -> ChunkHeader:
    cursor.seek(offset)
    chunk_id = cursor.read(4).decode("latin-1")
    size = cursor.uint(4, big_endian=byte_order is ByteOrder.BIG)
    return ChunkHeader(
        chunk_id=chunk_id,
        size=size,
        byte_order=byte_order,
        offset=offset,
    )


def read_riff(
    cursor: ByteCursor,
    dialect: RiffDialect,
    limits: ParseLimits = DEFAULT_LIMITS,
) -> TagSet | None:
    """Walk the chunk tree and collect INFO, text-chunk, and embedded ID3 tags.

    Embedded ID3 results take priority over native chunk values.
    """
    if cursor.size < FORM_HEADER_SIZE:
        return None
    if not matches_dialect(cursor.read_at(0, FORM_HEADER_SIZE), dialect):
        return None
    logger.debug("Walking %s chunks", dialect.name)

    id3_partials: list[TagSet | None] = []
    native = TagCollector()
    stack = [_Level(FORM_HEADER_SIZE, cursor.size, 0, False)]
    visited = 0
    while stack:
        level = stack[-1]
        if level.end - level.pos < CHUNK_HEADER_SIZE:
            stack.pop()
            continue
        header = read_chunk_header(cursor, level.pos, dialect.byte_order)
        if header.size > level.end - header.content_offset:
            logger.debug(
                "Chunk %r at %d declares %d bytes past its parent; ending level",
                header.chunk_id,
                header.offset,
                header.size,
            )
            stack.pop()
            continue
        level.pos = header.next_offset
        visited += 1
        if visited > limits.max_nodes:
            logger.debug("Chunk budget exhausted after %d chunks", visited - 1)
            break
        logger.debug(
            "Found chunk %r, size %d at %d",
            header.chunk_id,
            header.size,
            header.offset,
        )

        if level.in_info_list:
            key = INFO_KEYS.get(header.chunk_id)
            if key is not None:
                value = cursor.read_at(header.content_offset, header.size)
                native.offer(key, clean_text(value.decode("utf-8", errors="replace")))
            continue

        if header.chunk_id == LIST_CHUNK:
            if header.size < 4 or level.depth + 1 > limits.max_depth:
                continue
            list_type = cursor.read_at(header.content_offset, 4)
            if list_type == INFO_LIST_TYPE:
                stack.append(
                    _Level(
                        pos=header.content_offset + 4,
                        end=header.content_offset + header.size,
                        depth=level.depth + 1,
                        in_info_list=True,
                    )
                )
        elif header.chunk_id in dialect.id3_chunk_ids:
            id3_partials.append(_read_embedded_id3(cursor, header))
        elif header.chunk_id in dialect.text_chunks:
            value = cursor.read_at(header.content_offset, header.size)
            native.offer(
                dialect.text_chunks[header.chunk_id],
                clean_text(value.decode("latin-1")),
            )

    return merge_tag_sets([*id3_partials, native.freeze()])


def read_wav(
    cursor: ByteCursor, limits: ParseLimits = DEFAULT_LIMITS
) -> TagSet | None:
    return read_riff(cursor, WAVE, limits)


def read_aiff(
    cursor: ByteCursor, limits: ParseLimits = DEFAULT_LIMITS
) -> TagSet | None:
    return read_riff(cursor, AIFF, limits)


def _read_embedded_id3(cursor: ByteCursor, header: ChunkHeader) -> TagSet | None:
    try:
        return read_id3v2(cursor, header.content_offset)
    except TagSniffError as exc:
        logger.debug("Embedded ID3 chunk at %d unreadable: %s", header.offset, exc)
        return None


def read_aiff_frame_info(cursor: ByteCursor) -> tuple[int, float] | None:
    """Return ``(sample_frames, sample_rate)`` from the AIFF ``COMM`` chunk."""
    if cursor.size < FORM_HEADER_SIZE:
        return None
    if not matches_dialect(cursor.read_at(0, FORM_HEADER_SIZE), AIFF):
        return None
    pos = FORM_HEADER_SIZE
    while cursor.size - pos >= CHUNK_HEADER_SIZE:
        header = read_chunk_header(cursor, pos, ByteOrder.BIG)
        if header.chunk_id == COMM_CHUNK:
            if header.size < COMM_MIN_SIZE:
                return None
            comm = cursor.read_at(header.content_offset, COMM_MIN_SIZE)
            frames = int.from_bytes(comm[2:6], "big")
            return frames, decode_extended_float(comm[8:18])
        pos = header.next_offset
    return None


def decode_extended_float(raw: bytes) -> float:
    """Decode an 80-bit IEEE 754 extended-precision big-endian value."""
    exponent = int.from_bytes(raw[:2], "big")
    mantissa = int.from_bytes(raw[2:10], "big")
    sign = -1.0 if exponent & 0x8000 else 1.0
    exponent &= 0x7FFF
    if exponent == 0 and mantissa == 0:
        return 0.0
    if exponent == 0x7FFF:
        return float("nan")
    return sign * mantissa * 2.0 ** (exponent - 16383 - 63)
