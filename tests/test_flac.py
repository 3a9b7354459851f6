"""Tests for FLAC metadata blocks and the STREAMINFO duration path."""

from __future__ import annotations

import pytest

import tagsniff.duration as duration_module
from tagsniff import parse
from tagsniff.cursor import ByteCursor
from tagsniff.duration import DurationSource, estimate_duration_detailed
from tagsniff.errors import StructuralCorruptionError
from tagsniff.formats.flac import iter_blocks, read_flac, read_streaminfo


def _block(block_type: int, payload: bytes, *, last: bool = False) -> bytes:
    header = block_type | (0x80 if last else 0)
    return bytes([header]) + len(payload).to_bytes(3, "big") + payload


def _streaminfo(sample_rate: int, total_samples: int) -> bytes:
    packed = (sample_rate << 44) | (1 << 41) | (15 << 36) | total_samples
    return b"\x10\x00\x10\x00" + b"\x00" * 6 + packed.to_bytes(8, "big") + b"\x00" * 16


def _comments(*entries: str, vendor: bytes = b"reference libFLAC") -> bytes:
    body = len(vendor).to_bytes(4, "little") + vendor
    body += len(entries).to_bytes(4, "little")
    for entry in entries:
        raw = entry.encode("utf-8")
        body += len(raw).to_bytes(4, "little") + raw
    return body


def _flac(*blocks: bytes) -> bytes:
    return b"fLaC" + b"".join(blocks) + b"\xff\xf8" + b"\x00" * 32


def test_read_flac_vorbis_comments() -> None:
    data = _flac(
        _block(0, _streaminfo(44100, 441000)),
        _block(4, _comments("TITLE=Foo", "ARTIST=Bar"), last=True),
    )
    tags = read_flac(ByteCursor.from_bytes(data))
    assert tags is not None
    assert tags.as_dict() == {"title": "Foo", "artist": "Bar"}
    assert "album" not in tags


def test_read_flac_uses_first_comment_block_only() -> None:
    data = _flac(
        _block(4, _comments("TITLE=First")),
        _block(1, b"\x00" * 20),
        _block(4, _comments("TITLE=Second", "ALBUM=Later"), last=True),
    )
    assert read_flac(ByteCursor.from_bytes(data)) == {"title": "First"}


def test_read_flac_without_comment_block_is_empty() -> None:
    data = _flac(_block(0, _streaminfo(44100, 10), last=True))
    assert read_flac(ByteCursor.from_bytes(data)) == {}


def test_read_flac_magic_mismatch() -> None:
    assert read_flac(ByteCursor.from_bytes(b"OggS" + b"\x00" * 40)) is None


def test_corrupt_comment_block_raises_structural_error() -> None:
    broken = (1000).to_bytes(4, "little") + b"short vendor"
    data = _flac(_block(4, broken, last=True))
    with pytest.raises(StructuralCorruptionError):
        read_flac(ByteCursor.from_bytes(data))


def test_iter_blocks_stops_at_last_flag() -> None:
    data = _flac(
        _block(0, _streaminfo(48000, 48000)),
        _block(1, b"\x00" * 4, last=True),
        _block(4, _comments("TITLE=Hidden")),
    )
    types = [block.block_type for block in iter_blocks(ByteCursor.from_bytes(data))]
    assert types == [0, 1]


def test_read_streaminfo_packed_fields() -> None:
    data = _flac(_block(0, _streaminfo(44100, 441000), last=True))
    info = read_streaminfo(ByteCursor.from_bytes(data))
    assert info is not None
    assert info.sample_rate == 44100
    assert info.total_samples == 441000
    assert info.duration_seconds == 10.0


def test_streaminfo_without_sample_count_has_no_duration() -> None:
    data = _flac(_block(0, _streaminfo(44100, 0), last=True))
    info = read_streaminfo(ByteCursor.from_bytes(data))
    assert info is not None
    assert info.duration_seconds is None


def test_parse_flac_extension_with_id3_content(tmp_path) -> None:
    frame = b"TIT2\x00\x00\x00\x05\x00\x00\x03Id3!"
    tag = b"ID3\x04\x00\x00" + len(frame).to_bytes(4, "big") + frame
    path = tmp_path / "mislabelled.flac"
    path.write_bytes(tag + b"\xff\xfb" + b"\x00" * 64)
    assert parse(path) == {"title": "Id3!"}


def test_parse_flac_file(tmp_path) -> None:
    path = tmp_path / "track.flac"
    path.write_bytes(
        _flac(
            _block(0, _streaminfo(44100, 441000)),
            _block(4, _comments("title=Foo", "ARTIST=Bar"), last=True),
        )
    )
    assert parse(path) == {"title": "Foo", "artist": "Bar"}


def test_manual_streaminfo_is_last_duration_fallback(tmp_path, monkeypatch) -> None:
    path = tmp_path / "track.flac"
    path.write_bytes(_flac(_block(0, _streaminfo(44100, 441000), last=True)))

    def fail(_path, _container):
        raise RuntimeError("stage unavailable")

    monkeypatch.setattr(duration_module, "container_declared_duration", fail)
    monkeypatch.setattr(duration_module, "frame_count_duration", fail)
    monkeypatch.setattr(duration_module, "stream_probe_duration", lambda *_: None)

    estimate = estimate_duration_detailed(path)
    assert estimate is not None
    assert estimate.seconds == 10.0
    assert estimate.source is DurationSource.MANUAL_HEADER
