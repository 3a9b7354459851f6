"""Bounds-checked random-access reader over a file's bytes."""

from __future__ import annotations

import io
import os
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

from .errors import TruncatedReadError


class ByteCursor:
    """Absolute-seek reader with big/little-endian integer helpers.

    Every read is checked against the known source size, so parsers see a
    ``TruncatedReadError`` instead of silently short data.
    """

    def __init__(self, handle: BinaryIO, size: int, *, owns_handle: bool = False):
        self._handle = handle
        self._size = size
        self._pos = 0
        self._owns_handle = owns_handle

    @classmethod
    def open(cls, path: Path | str) -> ByteCursor:
        handle = open(path, "rb")
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError:
            handle.close()
            raise
        return cls(handle, size, owns_handle=True)

    @classmethod
    def from_bytes(cls, data: bytes) -> ByteCursor:
        return cls(io.BytesIO(data), len(data))

    def __enter__(self) -> ByteCursor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_handle:
            self._handle.close()

    @property
    def size(self) -> int:
        return self._size

    def tell(self) -> int:
        return self._pos

    def remaining(self) -> int:
        return max(0, self._size - self._pos)

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > self._size:
            raise TruncatedReadError(offset, 0, self._size)
        self._pos = offset

    def read(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count must be non-negative")
        if count > self.remaining():
            raise TruncatedReadError(self._pos, count, self.remaining())
        self._handle.seek(self._pos)
        data = self._handle.read(count)
        if len(data) != count:
            raise TruncatedReadError(self._pos, count, len(data))
        self._pos += count
        return data

    def read_at(self, offset: int, count: int) -> bytes:
        self.seek(offset)
        return self.read(count)

    def read_upto(self, count: int) -> bytes:
        """Read at most ``count`` bytes from the current position."""
        return self.read(min(count, self.remaining()))

    def u8(self) -> int:
        return self.read(1)[0]

    def u24_be(self) -> int:
        return int.from_bytes(self.read(3), "big")

    def u32_be(self) -> int:
        return int.from_bytes(self.read(4), "big")

    def u32_le(self) -> int:
        return int.from_bytes(self.read(4), "little")

    def u64_be(self) -> int:
        return int.from_bytes(self.read(8), "big")

    def uint(self, width: int, *, big_endian: bool) -> int:
        return int.from_bytes(self.read(width), "big" if big_endian else "little")
