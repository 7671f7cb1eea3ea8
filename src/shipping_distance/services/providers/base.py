"""Base class for distance provider implementations."""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Mapping, Optional, Sequence

import httpx

from ...config import settings as app_settings
from ...errors import InvalidArgumentError
from ...models.distance import Distance
from ...models.location import Location
from ..http.dispatcher import Dispatcher
from ..http.masking import JsonPath, suffix_masker
from ..http.request import RequestHeaders, RequestParams
from .fields import CONTEXT_CALCULATION, CONTEXT_SETTINGS, CONTEXTS, SettingField, ValidationIssue
from .result import CalcOutcome, CalcResult

FALLBACK_ERROR = "API request failed."

# Called before the provider dispatches anything; a non-None result is used as is.
CalculationOverride = Callable[["Provider", Location, Location, Mapping[str, Any]], Optional[CalcOutcome]]


class Provider(ABC):
    """Contract for distance provider integrations.

    Settings are read from a flat mapping whose keys carry the provider slug as
    a prefix (``google_api_key``), so several providers can share one store.
    """

    slug: ClassVar[str]
    display_name: ClassVar[str]
    secret_field: ClassVar[str] = "api_key"
    secret_suffixes: ClassVar[tuple[str, ...]] = ()

    def __init__(self, http_client: httpx.Client | None = None, logger: logging.Logger | None = None) -> None:
        self.http_client = http_client
        self.logger = logger or logging.getLogger(__name__)
        self._mask = suffix_masker(*self.secret_suffixes)

    @abstractmethod
    def fields(self) -> Sequence[SettingField]:
        raise NotImplementedError

    @abstractmethod
    def request_distance(
        self,
        destination: Location,
        origin: Location,
        params: RequestParams,
        headers: RequestHeaders,
        settings: Mapping[str, Any],
    ) -> CalcOutcome:
        raise NotImplementedError

    def initial_params(self, settings: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    def initial_headers(self, settings: Mapping[str, Any]) -> dict[str, str]:
        return {}

    def settings_fields(self, context: str) -> dict[str, SettingField]:
        if context not in CONTEXTS:
            raise InvalidArgumentError(f"Invalid context provided: {context}")
        return {self.field_key(item.key): item for item in self.fields()}

    def field_key(self, key: str) -> str:
        prefix = f"{self.slug}_"
        return key if key.startswith(prefix) else prefix + key

    def option(self, settings: Mapping[str, Any], key: str) -> Any:
        """Value of one provider setting, falling back to the field default."""
        field_key = self.field_key(key)
        if field_key in settings and settings[field_key] is not None:
            return settings[field_key]
        for item in self.fields():
            if self.field_key(item.key) == field_key:
                return item.default
        return None

    def build_request_params(
        self,
        settings: Mapping[str, Any],
        context: str = CONTEXT_CALCULATION,
    ) -> RequestParams:
        params = RequestParams(self.initial_params(settings))
        for field_key, item in self.settings_fields(context).items():
            if item.param_key is None:
                continue
            value = self.option(settings, field_key)
            if item.param_sanitizer is not None:
                value = item.param_sanitizer(value)
            if value is None:
                params.remove(item.param_key)
            else:
                params.add(value, item.param_key, merge=True)
        return params

    def build_request_headers(
        self,
        settings: Mapping[str, Any],
        context: str = CONTEXT_CALCULATION,
    ) -> RequestHeaders:
        headers = RequestHeaders(self.initial_headers(settings))
        for field_key, item in self.settings_fields(context).items():
            if item.header_key is None:
                continue
            value = self.option(settings, field_key)
            if item.header_sanitizer is not None:
                value = item.header_sanitizer(value)
            if isinstance(value, str) and value:
                headers.add(value, item.header_key)
        return headers

    def calculate_distance(
        self,
        destination: Location,
        origin: Location,
        settings: Mapping[str, Any],
        *,
        override: CalculationOverride | None = None,
    ) -> CalcOutcome:
        if override is not None:
            result = override(self, destination, origin, settings)
            if result is not None:
                return result
        params = self.build_request_params(settings, CONTEXT_CALCULATION)
        headers = self.build_request_headers(settings, CONTEXT_CALCULATION)
        return self.request_distance(destination, origin, params, headers, settings)

    def mask(self, value: Any, path: JsonPath) -> Any:
        return self._mask(value, path)

    def validate_settings(self, settings: Mapping[str, Any]) -> list[ValidationIssue]:
        """Check field values, then make one live call between reference points."""
        issues = self._field_issues(settings)
        if issues:
            return issues

        params = self.build_request_params(settings, CONTEXT_SETTINGS)
        headers = self.build_request_headers(settings, CONTEXT_SETTINGS)
        result = self.request_distance(
            Location.from_coordinates(app_settings.test_destination_lat, app_settings.test_destination_lng),
            Location.from_coordinates(app_settings.test_origin_lat, app_settings.test_origin_lng),
            params,
            headers,
            settings,
        )
        if not result.is_error():
            return []

        debug = result.dispatcher.to_debug_dict() if result.dispatcher is not None else {}
        self.logger.error(f"{self.display_name} settings validation failed: {result.error}", extra={"debug": debug})
        return [ValidationIssue(field=self.field_key(self.secret_field), message=result.error)]

    def _field_issues(self, settings: Mapping[str, Any]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for field_key, item in self.settings_fields(CONTEXT_SETTINGS).items():
            value = self.option(settings, field_key)
            if item.is_required and (value is None or str(value).strip() == ""):
                issues.append(ValidationIssue(field=field_key, message=f"{item.title} is required."))
                continue
            if not item.options or value in (None, ""):
                continue
            selected = value if isinstance(value, (list, tuple)) else [value]
            invalid = [str(choice) for choice in selected if choice not in item.options]
            if invalid:
                issues.append(
                    ValidationIssue(field=field_key, message=f"Invalid {item.title} value: {', '.join(invalid)}.")
                )
        return issues

    def dispatch(
        self,
        method: str,
        url: str,
        params: RequestParams,
        headers: RequestHeaders | None = None,
    ) -> Dispatcher:
        factory = Dispatcher.post if method.upper() == "POST" else Dispatcher.get
        return factory(url, params, headers or RequestHeaders(), self.mask, client=self.http_client)

    def distance_result(
        self,
        dispatcher: Dispatcher,
        distance_path: Sequence[Any],
        error_path: Sequence[Any],
        *,
        integer: bool = False,
    ) -> CalcOutcome:
        """Turn a finished dispatch into a result using provider JSON paths."""
        if dispatcher.is_error():
            return CalcResult.failure(str(dispatcher.error), dispatcher)

        message = dispatcher.get_json_path(error_path, FALLBACK_ERROR)
        if not dispatcher.is_success:
            return CalcResult.failure(str(message), dispatcher)

        meters = _meters(dispatcher.get_json_path(distance_path), integer)
        if meters is None:
            return CalcResult.failure(str(message), dispatcher)
        return CalcResult.success(Distance.from_m(meters), dispatcher)

    def describe(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.display_name,
            "fields": [item.describe(key) for key, item in self.settings_fields(CONTEXT_SETTINGS).items()],
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(slug={self.slug!r})"


def _meters(value: Any, integer: bool) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if integer:
        number = float(int(number))
    if not math.isfinite(number) or number <= 0:
        return None
    if integer or number.is_integer():
        return str(int(number))
    return repr(number)
