"""Tag vocabulary, immutable tag sets, and first-non-empty merging."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

TAG_KEYS = ("title", "artist", "album")
"""Canonical keys, in display order."""

# Every code point up to and including U+0020 is trimmed, controls included.
_TRIM_CHARS = "".join(chr(code) for code in range(0x21))


class TagSet(Mapping[str, str]):
    """Read-only mapping of canonical tag keys to non-empty strings."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        cleaned: dict[str, str] = {}
        for key in TAG_KEYS:
            value = (values or {}).get(key)
            if isinstance(value, str) and value:
                cleaned[key] = value
        self._values = cleaned

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        return f"TagSet({self._values!r})"

    @property
    def title(self) -> str | None:
        return self._values.get("title")

    @property
    def artist(self) -> str | None:
        return self._values.get("artist")

    @property
    def album(self) -> str | None:
        return self._values.get("album")

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


EMPTY_TAGS = TagSet()


def merge_tag_sets(partials: Iterable[TagSet | None]) -> TagSet:
    """Merge partial results in priority order; first non-empty value wins."""
    merged: dict[str, str] = {}
    for partial in partials:
        if not partial:
            continue
        for key, value in partial.items():
            merged.setdefault(key, value)
    return TagSet(merged)


class TagCollector:
    """Local accumulator used inside one reader; keeps the first value per key."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def offer(self, key: str | None, value: str | None) -> None:
        if key is None or key not in TAG_KEYS or not value:
            return
        self._values.setdefault(key, value)

    def __bool__(self) -> bool:
        return bool(self._values)

    def freeze(self) -> TagSet:
        return TagSet(self._values)


def clean_text(value: str) -> str:
    """Trim whitespace and control characters from both ends."""
    return value.strip(_TRIM_CHARS)
