"""
Field extraction strategies.

Upstream APIs disagree on where the useful text lives. Each provider
declares an ordered tuple of pure extractors (payload value -> str | None);
the first one that yields a non-empty string wins.
"""

from collections.abc import Callable, Iterable
from typing import Any

Extractor = Callable[[Any], str | None]


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def field(name: str) -> Extractor:
    """Top-level key of a JSON object."""

    def extract(value: Any) -> str | None:
        if isinstance(value, dict):
            return _non_empty(value.get(name))
        return None

    extract.__name__ = f"field({name!r})"
    return extract


def path(*keys: str | int) -> Extractor:
    """Nested lookup through objects (str keys) and arrays (int indexes)."""

    def extract(value: Any) -> str | None:
        current = value
        for key in keys:
            if isinstance(key, int) and isinstance(current, list):
                if not -len(current) <= key < len(current):
                    return None
                current = current[key]
            elif isinstance(key, str) and isinstance(current, dict):
                current = current.get(key)
            else:
                return None
        return _non_empty(current)

    extract.__name__ = "path(" + ", ".join(repr(k) for k in keys) + ")"
    return extract


def raw_string() -> Extractor:
    """The whole payload, when it is itself a string."""

    def extract(value: Any) -> str | None:
        return _non_empty(value)

    extract.__name__ = "raw_string()"
    return extract


def extract_text(value: Any, extractors: Iterable[Extractor]) -> str | None:
    """Run extractors in order and return the first non-empty result."""
    for extractor in extractors:
        result = extractor(value)
        if result is not None:
            return result
    return None
