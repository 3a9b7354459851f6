"""Signature-scanning Vorbis comment extractor for OGG files.

OGG page framing is not parsed. The first ``ogg_scan_bytes`` of the file are
buffered and searched for the comment-header packet signature; the bytes that
follow are read as a raw comment block. Audio data that happens to contain
the signature can produce a false match, and no page checksum is verified.
"""

from __future__ import annotations

import logging

from ..cursor import ByteCursor
from ..errors import StructuralCorruptionError, TruncatedReadError
from ..runtime_config import DEFAULT_LIMITS, ParseLimits
from ..tags import TagSet
from .vorbis import comments_to_tags, read_comment_block

logger = logging.getLogger(__name__)

VORBIS_COMMENT_SIGNATURE = b"\x03vorbis"


def read_ogg(cursor: ByteCursor, limits: ParseLimits = DEFAULT_LIMITS) -> TagSet:
    cursor.seek(0)
    window = cursor.read_upto(limits.ogg_scan_bytes)
    return scan_vorbis_comments(window)


def scan_vorbis_comments(window: bytes) -> TagSet:
    """Return tags from the first signature match that yields any."""
    buffer = ByteCursor.from_bytes(window)
    start = window.find(VORBIS_COMMENT_SIGNATURE)
    while start != -1:
        logger.debug("Found Vorbis comment signature at offset %d", start)
        block_start = start + len(VORBIS_COMMENT_SIGNATURE)
        try:
            comments = read_comment_block(buffer, block_start, len(window))
        except (StructuralCorruptionError, TruncatedReadError) as exc:
            logger.debug("Comment block at %d unreadable: %s", start, exc)
        else:
            tags = comments_to_tags(comments)
            if tags:
                return tags
        start = window.find(VORBIS_COMMENT_SIGNATURE, start + 1)
    return TagSet()
