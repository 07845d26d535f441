"""Semantic version helpers for ordering chart versions and tags."""

from __future__ import annotations

from typing import TYPE_CHECKING

from packaging.version import InvalidVersion, Version

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


def parse_version(value: str) -> Version | None:
    """Parse a version string, returning None on failure."""
    try:
        return Version(value)
    except InvalidVersion:
        # Try stripping leading 'v'
        if value.startswith("v"):
            try:
                return Version(value[1:])
            except InvalidVersion:
                pass
    return None


def highest_version(values: Iterable[str]) -> str | None:
    """Return the highest parseable version; unparseable values rank below all others.

    Falls back to the first value when nothing parses.
    """
    first: str | None = None
    best: tuple[Version, str] | None = None
    for value in values:
        if first is None:
            first = value
        parsed = parse_version(value)
        if parsed is None:
            continue
        if best is None or parsed > best[0]:
            best = (parsed, value)
    return best[1] if best is not None else first


def sort_newest_first[T](items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Order items by version, newest first.

    Items whose version does not parse keep their relative order at the end.
    """
    parsed = [(parse_version(key(item)), item) for item in items]
    valid = [(version, item) for version, item in parsed if version is not None]
    invalid = [item for version, item in parsed if version is None]
    valid.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in valid] + invalid
