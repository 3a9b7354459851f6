"""FLAC metadata-block reader: VORBIS_COMMENT tags and STREAMINFO duration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from ..cursor import ByteCursor
from ..tags import TagSet
from .vorbis import comments_to_tags, read_comment_block

logger = logging.getLogger(__name__)

FLAC_MAGIC = b"fLaC"
BLOCK_HEADER_SIZE = 4
LAST_BLOCK_FLAG = 0x80
BLOCK_TYPE_MASK = 0x7F
STREAMINFO = 0
VORBIS_COMMENT = 4
# min/max block size (2+2) and min/max frame size (3+3) precede the packed fields.
STREAMINFO_PACKED_OFFSET = 10


@dataclass(frozen=True)
class FlacBlock:
    block_type: int
    offset: int
    length: int
    is_last: bool


@dataclass(frozen=True)
class StreamInfo:
    sample_rate: int
    total_samples: int

    @property
    def duration_seconds(self) -> float | None:
        if self.sample_rate <= 0 or self.total_samples <= 0:
            return None
        return self.total_samples / self.sample_rate


def is_flac(cursor: ByteCursor) -> bool:
    return cursor.size >= len(FLAC_MAGIC) and cursor.read_at(0, 4) == FLAC_MAGIC


def iter_blocks(cursor: ByteCursor) -> Iterator[FlacBlock]:
    """Yield metadata blocks after the magic until the last-block flag."""
    pos = len(FLAC_MAGIC)
    while cursor.size - pos >= BLOCK_HEADER_SIZE:
        cursor.seek(pos)
        header = cursor.u8()
        length = cursor.u24_be()
        block = FlacBlock(
            block_type=header & BLOCK_TYPE_MASK,
            offset=pos + BLOCK_HEADER_SIZE,
            length=length,
            is_last=bool(header & LAST_BLOCK_FLAG),
        )
        logger.debug(
            "FLAC block type %d, length %d at %d", block.block_type, length, pos
        )
        yield block
        if block.is_last:
            break
        pos = block.offset + length


def read_flac(cursor: ByteCursor) -> TagSet | None:
    """Return tags from the first VORBIS_COMMENT block, or None if not FLAC."""
    if not is_flac(cursor):
        return None
    for block in iter_blocks(cursor):
        if block.block_type != VORBIS_COMMENT:
            continue
        comments = read_comment_block(
            cursor, block.offset, block.offset + block.length
        )
        return comments_to_tags(comments)
    return TagSet()


def read_streaminfo(cursor: ByteCursor) -> StreamInfo | None:
    """Decode sample rate and total samples from the STREAMINFO block."""
    if not is_flac(cursor):
        return None
    for block in iter_blocks(cursor):
        if block.block_type != STREAMINFO:
            continue
        if block.length < STREAMINFO_PACKED_OFFSET + 8:
            return None
        cursor.seek(block.offset + STREAMINFO_PACKED_OFFSET)
        packed = cursor.u64_be()
        return StreamInfo(
            sample_rate=(packed >> 44) & 0xFFFFF,
            total_samples=packed & 0xFFFFFFFFF,
        )
    return None
