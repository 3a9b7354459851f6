"""Async bulk scan service with bounded per-file concurrency."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from tagsniff.engine import probe
from tagsniff.media_formats import is_supported_audio_file
from tagsniff.runtime_config import (
    DEFAULT_LIMITS,
    DEFAULT_SCAN_CONCURRENCY,
    ParseLimits,
)
from tagsniff.tags import TagSet
from tagsniff.utils.async_utils import run_blocking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    path: Path
    tags: TagSet
    duration_seconds: float | None = None
    size_bytes: int | None = None
    error: str | None = None


class ScanService:
    """Probes many files in parallel; each file is an independent parse."""

    def __init__(
        self,
        *,
        concurrency: int = DEFAULT_SCAN_CONCURRENCY,
        limits: ParseLimits = DEFAULT_LIMITS,
        with_duration: bool = True,
        on_result: Callable[[ScanResult], Awaitable[None]] | None = None,
    ) -> None:
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._limits = limits
        self._with_duration = with_duration
        self._on_result = on_result

    async def scan(self, paths: Iterable[Path]) -> list[ScanResult]:
        """Probe ``paths`` and return results in input order."""
        unique = _unique_paths(paths)
        if not unique:
            return []
        tasks = [asyncio.create_task(self._load_one(path)) for path in unique]
        return list(await asyncio.gather(*tasks))

    async def _load_one(self, path: Path) -> ScanResult:
        async with self._semaphore:
            size_bytes = await _safe_size(path)
            if size_bytes is None:
                result = ScanResult(path=path, tags=TagSet(), error="File missing")
            else:
                try:
                    track = await run_blocking(
                        probe,
                        path,
                        limits=self._limits,
                        with_duration=self._with_duration,
                    )
                except Exception as exc:  # pragma: no cover - safety net
                    logger.exception("Failed to probe %s: %s", path, exc)
                    result = ScanResult(
                        path=path, tags=TagSet(), size_bytes=size_bytes, error=str(exc)
                    )
                else:
                    result = ScanResult(
                        path=path,
                        tags=track.tags,
                        duration_seconds=track.duration_seconds,
                        size_bytes=size_bytes,
                    )
        if self._on_result is not None:
            await self._on_result(result)
        return result


def collect_audio_files(roots: Iterable[Path]) -> list[Path]:
    """Expand directories recursively; explicit file paths are kept as given."""
    found: list[Path] = []
    for root in roots:
        if root.is_dir():
            found.extend(
                candidate
                for candidate in sorted(root.rglob("*"))
                if candidate.is_file() and is_supported_audio_file(candidate)
            )
        else:
            found.append(root)
    return _unique_paths(found)


def _unique_paths(paths: Iterable[Path]) -> list[Path]:
    seen: set[Path] = set()
    ordered: list[Path] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        ordered.append(path)
    return ordered


async def _safe_size(path: Path) -> int | None:
    try:
        stat = await run_blocking(path.stat)
    except OSError:
        return None
    return stat.st_size
