"""Public entrypoints: tag parsing and duration estimation for one file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .cursor import ByteCursor
from .duration import estimate_duration_detailed
from .errors import TagSniffError
from .runtime_config import DEFAULT_LIMITS, ParseLimits
from .sniffer import ID3V1_READER, ID3V2_READER, FormatReader, plan_readers
from .tags import TagSet, merge_tag_sets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackProbe:
    """Tags and duration recovered for one file."""

    path: Path
    tags: TagSet
    duration_seconds: float | None = None


def parse(path: Path | str, *, limits: ParseLimits = DEFAULT_LIMITS) -> TagSet:
    """Return every tag recoverable from ``path``; never raises on bad input.

    Readers run in priority order (ID3v2 at offset 0, ID3v1, then the
    container reader) and each is fault-isolated. Results merge by first
    non-empty value per key.
    """
    track = Path(path)
    try:
        cursor = ByteCursor.open(track)
    except OSError as exc:
        logger.debug("Cannot open %s: %s", track, exc)
        return TagSet()
    with cursor:
        try:
            readers = plan_readers(track, cursor)
        except (OSError, TagSniffError) as exc:
            logger.debug("Container sniff failed for %s: %s", track, exc)
            readers = [ID3V2_READER, ID3V1_READER]
        partials = [_run_reader(reader, cursor, limits, track) for reader in readers]
    return merge_tag_sets(partials)


def estimate_duration(path: Path | str) -> float | None:
    """Return the playing time in seconds, or None when it cannot be inferred."""
    estimate = estimate_duration_detailed(path)
    return estimate.seconds if estimate is not None else None


def probe(
    path: Path | str,
    *,
    limits: ParseLimits = DEFAULT_LIMITS,
    with_duration: bool = True,
) -> TrackProbe:
    track = Path(path)
    return TrackProbe(
        path=track,
        tags=parse(track, limits=limits),
        duration_seconds=estimate_duration(track) if with_duration else None,
    )


def _run_reader(
    reader: FormatReader,
    cursor: ByteCursor,
    limits: ParseLimits,
    track: Path,
) -> TagSet | None:
    try:
        result = reader.read(cursor, limits)
    except (OSError, TagSniffError, ValueError) as exc:
        logger.debug("%s reader failed for %s: %s", reader.name, track, exc)
        return None
    if result:
        logger.debug("%s reader found %s in %s", reader.name, dict(result), track)
    return result
