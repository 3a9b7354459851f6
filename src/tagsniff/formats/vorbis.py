"""Vorbis comment block decoding shared by the FLAC and OGG readers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..cursor import ByteCursor
from ..errors import StructuralCorruptionError
from ..tags import TagCollector, TagSet

logger = logging.getLogger(__name__)

COMMENT_KEYS = {"TITLE": "title", "ARTIST": "artist", "ALBUM": "album"}


@dataclass(frozen=True)
class RawComment:
    key: str
    value: str

    @classmethod
    def parse(cls, text: str) -> RawComment | None:
        """Split ``KEY=value``; entries without a key are ignored."""
        sep = text.find("=")
        if sep <= 0:
            return None
        return cls(key=text[:sep].upper(), value=text[sep + 1 :])


def read_comment_block(cursor: ByteCursor, start: int, end: int) -> list[RawComment]:
    """Decode an unframed comment block occupying ``[start, end)``.

    A truncated vendor string or count raises ``StructuralCorruptionError``;
    a truncated entry list ends early and keeps the entries already read.
    """
    end = min(end, cursor.size)
    pos = start
    if end - pos < 4:
        raise StructuralCorruptionError("missing vendor length")
    vendor_length = _u32_le_at(cursor, pos)
    pos += 4 + vendor_length
    if end - pos < 4:
        raise StructuralCorruptionError(
            f"vendor string of {vendor_length} bytes overruns block"
        )
    count = _u32_le_at(cursor, pos)
    pos += 4
    logger.debug(
        "Vorbis comment block: vendor %d bytes, %d comments", vendor_length, count
    )

    comments: list[RawComment] = []
    for _ in range(count):
        if end - pos < 4:
            break
        length = _u32_le_at(cursor, pos)
        pos += 4
        if length > end - pos:
            break
        text = cursor.read(length).decode("utf-8", errors="replace")
        pos += length
        comment = RawComment.parse(text)
        if comment is not None:
            comments.append(comment)
    return comments


def _u32_le_at(cursor: ByteCursor, offset: int) -> int:
    cursor.seek(offset)
    return cursor.u32_le()


def comments_to_tags(comments: Iterable[RawComment]) -> TagSet:
    collector = TagCollector()
    for comment in comments:
        collector.offer(COMMENT_KEYS.get(comment.key), comment.value)
    return collector.freeze()
