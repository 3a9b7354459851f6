"""Shared media format helpers used by scan and dispatch workflows."""

from __future__ import annotations

from pathlib import Path

ID3_ONLY_EXTENSIONS = frozenset({".mp3", ".mp2"})
FLAC_EXTENSIONS = frozenset({".flac"})
OGG_EXTENSIONS = frozenset({".ogg", ".oga"})
MP4_EXTENSIONS = frozenset({".m4a", ".aac", ".mp4"})
WAV_EXTENSIONS = frozenset({".wav", ".wave"})
AIFF_EXTENSIONS = frozenset({".aif", ".aiff", ".aifc"})

SUPPORTED_AUDIO_EXTENSIONS = (
    ID3_ONLY_EXTENSIONS
    | FLAC_EXTENSIONS
    | OGG_EXTENSIONS
    | MP4_EXTENSIONS
    | WAV_EXTENSIONS
    | AIFF_EXTENSIONS
)
"""Suffixes the engine has a dedicated reader path for."""


def normalized_suffix(path: Path | str) -> str:
    return Path(path).suffix.lower()


def is_supported_audio_file(path: Path) -> bool:
    """Return whether path suffix is in the engine's supported audio set."""
    return normalized_suffix(path) in SUPPORTED_AUDIO_EXTENSIONS
