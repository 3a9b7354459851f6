"""MP4/M4A atom walker for iTunes-style ``ilst`` metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..cursor import ByteCursor
from ..runtime_config import DEFAULT_LIMITS, ParseLimits
from ..tags import TagCollector, TagSet

logger = logging.getLogger(__name__)

ATOM_HEADER_SIZE = 8
EXTENDED_SIZE_MARKER = 1
MOOV = "moov"
META = "meta"
META_VERSION_FLAGS_SIZE = 4
DATA = "data"
# data atom: header (8) + version/flags (4) + reserved/locale (4).
DATA_PREAMBLE_SIZE = 16

CONTAINER_ATOMS = frozenset({"moov", "udta", "ilst", "trak", "mdia", "minf", "stbl"})
METADATA_ATOMS = frozenset({"©nam", "©ART", "©alb", "gnre", "©day", "trkn", "disk"})
ATOM_KEYS = {"©nam": "title", "©ART": "artist", "©alb": "album"}


@dataclass(frozen=True)
class AtomHeader:
    atom_type: str
    size: int
    offset: int
    header_size: int = ATOM_HEADER_SIZE

    @property
    def content_offset(self) -> int:
        return self.offset + self.header_size

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass
class _Level:
    pos: int
    end: int
    depth: int


def read_atom_header(cursor: ByteCursor, offset: int) -> AtomHeader:
    cursor.seek(offset)
    size = cursor.u32_be()
    atom_type = cursor.read(4).decode("latin-1")
    if size == EXTENDED_SIZE_MARKER and cursor.size - offset >= 16:
        size = cursor.u64_be()
        return AtomHeader(atom_type, size, offset, header_size=16)
    return AtomHeader(atom_type, size, offset)


def find_top_level_atom(cursor: ByteCursor, atom_type: str) -> AtomHeader | None:
    """Scan sibling atoms from the start of the file for ``atom_type``."""
    pos = 0
    while cursor.size - pos >= ATOM_HEADER_SIZE:
        header = read_atom_header(cursor, pos)
        logger.debug(
            "Found atom %r, size %d at %d", header.atom_type, header.size, pos
        )
        if header.atom_type == atom_type:
            return header
        if header.size == 0:
            # Size zero marks an atom that runs to end of file.
            return None
        if header.size < header.header_size:
            logger.debug("Atom %r at %d has invalid size", header.atom_type, pos)
            return None
        pos = header.end
    return None


def read_mp4(cursor: ByteCursor, limits: ParseLimits = DEFAULT_LIMITS) -> TagSet:
    moov = find_top_level_atom(cursor, MOOV)
    if moov is None or moov.size < moov.header_size:
        # A zero top-level size ends the scan, even for moov itself.
        return TagSet()
    end = min(moov.end, cursor.size)
    return walk_atoms(cursor, moov.content_offset, end, limits)


def walk_atoms(
    cursor: ByteCursor,
    start: int,
    end: int,
    limits: ParseLimits = DEFAULT_LIMITS,
) -> TagSet:
    """Depth-first walk of ``[start, end)`` collecting metadata leaf values."""
    collector = TagCollector()
    stack = [_Level(start, end, 0)]
    visited = 0
    while stack:
        level = stack[-1]
        if level.end - level.pos < ATOM_HEADER_SIZE:
            stack.pop()
            continue
        header = read_atom_header(cursor, level.pos)
        if header.size < header.header_size or header.end > level.end:
            logger.debug(
                "Atom %r at %d has size %d outside its parent; ending level",
                header.atom_type,
                header.offset,
                header.size,
            )
            stack.pop()
            continue
        level.pos = header.end
        visited += 1
        if visited > limits.max_nodes:
            logger.debug("Atom budget exhausted after %d atoms", visited - 1)
            break

        child_depth = level.depth + 1
        if header.atom_type in CONTAINER_ATOMS or header.atom_type == META:
            if child_depth > limits.max_depth:
                continue
            child_start = header.content_offset
            if header.atom_type == META:
                child_start += META_VERSION_FLAGS_SIZE
            stack.append(_Level(child_start, header.end, child_depth))
        elif header.atom_type in METADATA_ATOMS:
            value = read_data_atom(cursor, header)
            logger.debug("Extracted %r: %r", header.atom_type, value)
            collector.offer(ATOM_KEYS.get(header.atom_type), value)
    return collector.freeze()


def read_data_atom(cursor: ByteCursor, leaf: AtomHeader) -> str | None:
    """Decode the UTF-8 payload of the ``data`` atom nested in ``leaf``."""
    if leaf.end - leaf.content_offset < ATOM_HEADER_SIZE:
        return None
    data = read_atom_header(cursor, leaf.content_offset)
    if data.atom_type != DATA:
        return None
    value_length = data.size - DATA_PREAMBLE_SIZE
    if value_length <= 0 or data.offset + data.size > leaf.end:
        return None
    raw = cursor.read_at(data.offset + DATA_PREAMBLE_SIZE, value_length)
    return raw.decode("utf-8", errors="replace")
