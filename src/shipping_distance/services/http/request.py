"""Ordered key/value collections used to build outbound requests."""

from __future__ import annotations

from typing import Any, Iterator, Mapping


class RequestParams:
    """Query-string or JSON-body parameters."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._params: dict[str, Any] = dict(initial or {})

    def add(self, value: Any, key: str, merge: bool = False) -> None:
        """Set ``key`` to ``value``.

        With ``merge`` and matching container types on both sides the containers
        are merged instead: dict entries from ``value`` overwrite existing ones,
        lists are concatenated.
        """
        existing = self._params.get(key)
        if merge and isinstance(value, dict) and isinstance(existing, dict):
            self._params[key] = {**existing, **value}
        elif merge and isinstance(value, list) and isinstance(existing, list):
            self._params[key] = [*existing, *value]
        else:
            self._params[key] = value

    def remove(self, key: str) -> None:
        self._params.pop(key, None)

    def has(self, key: str) -> bool:
        return self._params.get(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        return self._params.get(key, default)

    def all(self) -> dict[str, Any]:
        return dict(self._params)

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"RequestParams({self._params!r})"


class RequestHeaders:
    """HTTP headers; values are always strings."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._headers: dict[str, str] = {key: str(value) for key, value in (initial or {}).items()}

    def add(self, value: str, key: str, merge: bool = False) -> None:
        """Set a header; ``merge`` is accepted for parity with params and has no effect."""
        self._headers[key] = str(value)

    def remove(self, key: str) -> None:
        self._headers.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._headers

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._headers.get(key, default)

    def all(self) -> dict[str, str]:
        return dict(self._headers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"RequestHeaders({list(self._headers)!r})"
