"""Helpers for redacting secrets before request data reaches a log sink."""

from __future__ import annotations

from typing import Any, Callable, Sequence

JsonPath = tuple[Any, ...]
MaskCallback = Callable[[Any, JsonPath], Any]

VISIBLE_SUFFIX = 4


def mask_string(value: Any) -> Any:
    """Replace all but the last few characters of a string with ``*``."""
    if not isinstance(value, str) or not value:
        return value
    if len(value) <= VISIBLE_SUFFIX * 2:
        return "*" * len(value)
    return "*" * (len(value) - VISIBLE_SUFFIX) + value[-VISIBLE_SUFFIX:]


def map_deep(value: Any, callback: MaskCallback, path: JsonPath = ()) -> Any:
    """Apply ``callback(leaf, path)`` to every leaf of a nested dict/list structure."""
    if isinstance(value, dict):
        return {key: map_deep(item, callback, (*path, key)) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [map_deep(item, callback, (*path, index)) for index, item in enumerate(value)]
    return callback(value, path)


def path_ends_with(path: Sequence[Any], suffix: str) -> bool:
    """True when the dotted form of ``path`` ends with ``.<suffix>``."""
    joined = ".".join(str(part) for part in path)
    return joined.endswith(f".{suffix}")


def suffix_masker(*suffixes: str) -> MaskCallback:
    """Build a mask callback redacting leaves whose path ends with any suffix."""

    def _mask(value: Any, path: JsonPath) -> Any:
        if any(path_ends_with(path, suffix) for suffix in suffixes):
            return mask_string(value)
        return value

    return _mask
