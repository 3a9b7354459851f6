"""Exception taxonomy shared by the format readers.

Readers raise these internally; the engine catches them per reader so a
failure in one container parser never hides results from another.
"""

from __future__ import annotations


class TagSniffError(Exception):
    """Base class for all engine errors."""


class StructuralCorruptionError(TagSniffError):
    """A declared chunk, frame, or atom size is inconsistent with its extent."""


class TruncatedReadError(TagSniffError):
    """Fewer bytes were available than a fixed-length read required."""

    def __init__(self, offset: int, wanted: int, available: int) -> None:
        super().__init__(
            f"short read at offset {offset}: wanted {wanted}, got {available}"
        )
        self.offset = offset
        self.wanted = wanted
        self.available = available


class UnsupportedEncodingError(TagSniffError):
    """A text-encoding selector has no defined decoding."""
