"""Runtime configuration normalization helpers.

These helpers keep CLI flag interpretation deterministic across entrypoints.
"""

from __future__ import annotations

from dataclasses import dataclass

MIB = 1024 * 1024
DEFAULT_OGG_SCAN_MIB = 5
MAX_OGG_SCAN_MIB = 256
DEFAULT_SCAN_CONCURRENCY = 4
MAX_SCAN_CONCURRENCY = 32


@dataclass(frozen=True)
class ParseLimits:
    """Bounds applied to every parse so corrupt sizes cannot run away."""

    ogg_scan_bytes: int = DEFAULT_OGG_SCAN_MIB * MIB
    max_depth: int = 16
    max_nodes: int = 4096


DEFAULT_LIMITS = ParseLimits()


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def normalize_scan_mib(value: int | None) -> int:
    """Clamp the OGG scan window (in MiB) to a supported range."""
    if value is None:
        return DEFAULT_OGG_SCAN_MIB
    return max(1, min(MAX_OGG_SCAN_MIB, int(value)))


def normalize_concurrency(value: int | None) -> int:
    """Clamp bulk-scan worker count to a supported range."""
    if value is None:
        return DEFAULT_SCAN_CONCURRENCY
    return max(1, min(MAX_SCAN_CONCURRENCY, int(value)))


def limits_from_cli(*, ogg_scan_mib: int | None) -> ParseLimits:
    """Build parse limits from normalized CLI values."""
    return ParseLimits(ogg_scan_bytes=normalize_scan_mib(ogg_scan_mib) * MIB)
