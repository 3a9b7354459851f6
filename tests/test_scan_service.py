"""Tests for the async bulk scan service."""

from __future__ import annotations

import asyncio
import wave
from pathlib import Path

from tagsniff.runtime_config import ParseLimits
from tagsniff.services.scan_service import (
    ScanResult,
    ScanService,
    collect_audio_files,
)


def _run(coro):
    return asyncio.run(coro)


def _write_wave(path: Path, title: bytes | None = None) -> None:
    with wave.open(str(path), "wb") as wave_file:
        wave_file.setnchannels(1)
        wave_file.setsampwidth(2)
        wave_file.setframerate(8000)
        wave_file.writeframes(b"\x00\x00" * 800)
    if title is None:
        return
    inam = b"INAM" + len(title).to_bytes(4, "little") + title
    info = b"LIST" + (4 + len(inam)).to_bytes(4, "little") + b"INFO" + inam
    data = bytearray(path.read_bytes() + info)
    data[4:8] = (len(data) - 8).to_bytes(4, "little")
    path.write_bytes(bytes(data))


def test_scan_preserves_input_order_and_reports_missing(tmp_path) -> None:
    first = tmp_path / "b.wav"
    second = tmp_path / "a.wav"
    _write_wave(first, b"Bee\x00")
    _write_wave(second, b"Ay")
    missing = tmp_path / "gone.wav"

    service = ScanService(concurrency=2, with_duration=False)
    results = _run(service.scan([first, missing, second, first]))

    assert [result.path for result in results] == [first, missing, second]
    assert results[0].tags == {"title": "Bee"}
    assert results[0].error is None
    assert results[0].size_bytes == first.stat().st_size
    assert results[1].error == "File missing"
    assert results[1].tags == {}
    assert results[2].tags.title == "Ay"
    assert results[2].duration_seconds is None


def test_scan_reports_duration_and_notifies_callback(tmp_path) -> None:
    path = tmp_path / "tone.wav"
    _write_wave(path)
    seen: list[ScanResult] = []

    async def on_result(result: ScanResult) -> None:
        seen.append(result)

    service = ScanService(on_result=on_result, limits=ParseLimits(max_nodes=64))
    results = _run(service.scan([path]))

    assert seen == results
    assert results[0].duration_seconds is not None
    assert abs(results[0].duration_seconds - 0.1) < 0.01


def test_scan_empty_input_returns_empty_list() -> None:
    assert _run(ScanService().scan([])) == []


def test_collect_audio_files_recurses_and_filters(tmp_path) -> None:
    (tmp_path / "sub").mkdir()
    wav = tmp_path / "a.wav"
    flac = tmp_path / "sub" / "c.FLAC"
    for path in (wav, flac, tmp_path / "notes.txt"):
        path.write_bytes(b"")
    explicit = tmp_path / "explicit.bin"

    found = collect_audio_files([tmp_path, explicit, wav])

    assert found == [wav, flac, explicit]
