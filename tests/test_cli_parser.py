"""Tests for CLI argparse configuration and scan output."""

from __future__ import annotations

import json
import wave
from pathlib import Path

import pytest

import tagsniff.cli as cli_module
from tagsniff.cli import build_parser, render_result, result_to_json
from tagsniff.services.scan_service import ScanResult
from tagsniff.tags import TagSet
from tagsniff.version import __version__


def _write_wave(path: Path) -> None:
    with wave.open(str(path), "wb") as wave_file:
        wave_file.setnchannels(1)
        wave_file.setsampwidth(2)
        wave_file.setframerate(8000)
        wave_file.writeframes(b"\x00\x00" * 8000)


def test_cli_parser_scan_options() -> None:
    parser = build_parser()
    args = parser.parse_args(
        ["scan", "a.mp3", "dir", "--json", "--ogg-scan-mib", "8", "--concurrency", "2"]
    )
    assert args.command == "scan"
    assert args.paths == ["a.mp3", "dir"]
    assert args.json is True
    assert args.no_duration is False
    assert args.ogg_scan_mib == 8
    assert args.concurrency == 2


def test_cli_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_cli_help_includes_runtime_metadata() -> None:
    help_text = build_parser().format_help()
    assert "Python: " in help_text
    assert f"Version: {__version__}" in help_text


def test_main_scan_prints_json_lines(monkeypatch, tmp_path, capsys) -> None:
    path = tmp_path / "tone.wav"
    _write_wave(path)
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")

    rc = cli_module.main(["scan", str(path), "--json", "--no-duration"])
    captured = capsys.readouterr()

    assert rc == 0
    payload = json.loads(captured.out.strip())
    assert payload["path"] == str(path)
    assert payload["tags"] == {}
    assert payload["duration_seconds"] is None
    assert payload["error"] is None


def test_main_scan_text_output_with_duration(monkeypatch, tmp_path, capsys) -> None:
    path = tmp_path / "tone.wav"
    _write_wave(path)
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")

    rc = cli_module.main(["scan", str(tmp_path)])
    captured = capsys.readouterr()

    assert rc == 0
    assert str(path) in captured.out
    assert "duration 00:01.0" in captured.out


def test_main_scan_without_audio_files_fails(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")

    rc = cli_module.main(["scan", str(tmp_path)])
    captured = capsys.readouterr()

    assert rc == 1
    assert "No supported audio files found." in captured.err


def test_main_scan_missing_file_returns_nonzero(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.setattr(cli_module, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli_module, "log_dir", lambda: tmp_path / "logs")

    rc = cli_module.main(["scan", str(tmp_path / "gone.mp3")])
    captured = capsys.readouterr()

    assert rc == 1
    assert "error    File missing" in captured.out


def test_render_result_and_json_shape() -> None:
    result = ScanResult(
        path=Path("song.mp3"),
        tags=TagSet({"title": "Song", "album": "Record"}),
        duration_seconds=65.0,
        size_bytes=1234,
    )
    assert render_result(result).splitlines() == [
        "song.mp3",
        "  title    Song",
        "  artist   -",
        "  album    Record",
        "  duration 01:05.0",
    ]
    assert "duration" not in render_result(result, with_duration=False)
    assert result_to_json(result)["tags"] == {"title": "Song", "album": "Record"}
    assert result_to_json(result)["size_bytes"] == 1234
