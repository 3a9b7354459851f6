"""tagsniff package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .engine import TrackProbe, estimate_duration, parse, probe
from .tags import TagSet

__all__ = [
    "TagSet",
    "TrackProbe",
    "__version__",
    "estimate_duration",
    "parse",
    "probe",
]

try:
    __version__ = version("tagsniff")
except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.0.0"
