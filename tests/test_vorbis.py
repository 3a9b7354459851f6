"""Tests for Vorbis comment block decoding."""

from __future__ import annotations

import pytest

from tagsniff.cursor import ByteCursor
from tagsniff.errors import StructuralCorruptionError
from tagsniff.formats.vorbis import RawComment, comments_to_tags, read_comment_block


def _block(*entries: bytes, count: int | None = None) -> bytes:
    body = (3).to_bytes(4, "little") + b"xyz"
    body += (len(entries) if count is None else count).to_bytes(4, "little")
    for entry in entries:
        body += len(entry).to_bytes(4, "little") + entry
    return body


def _read(data: bytes) -> list[RawComment]:
    return read_comment_block(ByteCursor.from_bytes(data), 0, len(data))


def test_raw_comment_parse() -> None:
    assert RawComment.parse("title=Song") == RawComment("TITLE", "Song")
    assert RawComment.parse("EMPTY=") == RawComment("EMPTY", "")
    assert RawComment.parse("=orphan") is None
    assert RawComment.parse("no separator") is None


def test_comment_keys_are_case_insensitive_and_first_value_wins() -> None:
    comments = _read(
        _block(b"Title=One", b"TITLE=Two", b"ALBUM=", b"ALBUM=Real", b"GENRE=Pop")
    )
    assert comments_to_tags(comments) == {"title": "One", "album": "Real"}


def test_values_are_not_trimmed() -> None:
    comments = _read(_block(b"ARTIST= Spaced "))
    assert comments_to_tags(comments) == {"artist": " Spaced "}


def test_truncated_entry_list_keeps_earlier_entries() -> None:
    data = _block(b"TITLE=Kept", count=3) + (500).to_bytes(4, "little") + b"short"
    assert [c.value for c in _read(data)] == ["Kept"]


def test_truncated_vendor_raises() -> None:
    data = (64).to_bytes(4, "little") + b"vendor"
    with pytest.raises(StructuralCorruptionError):
        _read(data)
    with pytest.raises(StructuralCorruptionError):
        _read(b"\x00\x00")
