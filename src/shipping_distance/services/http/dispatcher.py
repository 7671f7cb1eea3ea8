"""Single outbound HTTP call with parsed-response introspection."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from ...errors import NetworkError, NetworkTimeoutError
from .masking import MaskCallback, map_deep
from .request import RequestHeaders, RequestParams

logger = logging.getLogger(__name__)

_MISSING = object()


class Dispatcher:
    """Executes one GET or POST request as soon as it is built.

    Transport failures are captured rather than raised so that callers can turn
    them into a failed calculation result. Anything that leaves this object for
    a log sink must go through :meth:`to_debug_dict`, which applies the masking
    callback supplied by the provider.
    """

    def __init__(
        self,
        method: str,
        url: str,
        params: RequestParams | None = None,
        headers: RequestHeaders | None = None,
        mask: MaskCallback | None = None,
        timeout: float | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.params = params or RequestParams()
        self.headers = headers or RequestHeaders()
        self.mask = mask
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.response: httpx.Response | None = None
        self.error: NetworkError | None = None
        self._response_json: Any = None

    @classmethod
    def get(
        cls,
        url: str,
        params: RequestParams | None = None,
        headers: RequestHeaders | None = None,
        mask: MaskCallback | None = None,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> "Dispatcher":
        dispatcher = cls("GET", url, params, headers, mask, timeout)
        dispatcher.dispatch(client)
        return dispatcher

    @classmethod
    def post(
        cls,
        url: str,
        params: RequestParams | None = None,
        headers: RequestHeaders | None = None,
        mask: MaskCallback | None = None,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> "Dispatcher":
        dispatcher = cls("POST", url, params, headers, mask, timeout)
        dispatcher.dispatch(client)
        return dispatcher

    def dispatch(self, client: httpx.Client | None = None) -> None:
        if client is not None:
            self._send(client)
            return
        with httpx.Client(timeout=httpx.Timeout(self.timeout)) as own_client:
            self._send(own_client)

    def _send(self, client: httpx.Client) -> None:
        params = self.params.all()
        headers = self.headers.all()
        logger.debug(f"Dispatching {self.method} {self.url}")
        try:
            if self.method == "GET":
                response = client.get(self.url, params=params or None, headers=headers, timeout=self.timeout)
            else:
                response = client.post(
                    self.url,
                    json=params if params else None,
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.TimeoutException as exc:
            self.error = NetworkTimeoutError(f"Request to {self.url} timed out after {self.timeout:g}s.")
            self.error.__cause__ = exc
            logger.warning(f"{self.method} {self.url} timed out after {self.timeout:g}s")
            return
        except httpx.HTTPError as exc:
            self.error = NetworkError(f"Request to {self.url} failed: {exc}")
            self.error.__cause__ = exc
            logger.warning(f"{self.method} {self.url} failed: {exc}")
            return

        self.response = response
        try:
            self._response_json = response.json() if response.content else None
        except ValueError:
            # Malformed JSON is reported through the lookup fallbacks.
            self._response_json = None

    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    @property
    def is_success(self) -> bool:
        return self.response is not None and self.response.is_success

    @property
    def response_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None

    @property
    def response_headers(self) -> dict[str, str] | None:
        return dict(self.response.headers) if self.response is not None else None

    @property
    def response_body(self) -> str | None:
        return self.response.text if self.response is not None else None

    @property
    def response_json(self) -> Any:
        return self._response_json

    def get_json_path(self, path: Sequence[Any], fallback: Any = None) -> Any:
        """Look up ``path`` (dict keys / list indexes) in the parsed body."""
        node: Any = self._response_json
        for part in path:
            node = _step(node, part)
            if node is _MISSING:
                return fallback
        return fallback if node is None else node

    def to_debug_dict(self) -> dict[str, Any]:
        data = {
            "request": {
                "method": self.method,
                "url": self.url,
                "params": self.params.all(),
                "headers": self.headers.all(),
            },
            "response": {
                "code": self.response_code,
                "headers": self.response_headers,
                "body": self.response_body,
                "body_json": self._response_json,
            },
            "error": str(self.error) if self.error is not None else None,
        }
        if self.mask is not None:
            data = map_deep(data, self.mask)
        return data

    def __repr__(self) -> str:
        return f"Dispatcher({self.method} {self.url}, code={self.response_code}, error={self.error!r})"


def _step(node: Any, part: Any) -> Any:
    if isinstance(node, dict):
        if part in node:
            return node[part]
        key = str(part)
        return node[key] if key in node else _MISSING
    if isinstance(node, list):
        try:
            index = int(part)
        except (TypeError, ValueError):
            return _MISSING
        if 0 <= index < len(node):
            return node[index]
    return _MISSING
