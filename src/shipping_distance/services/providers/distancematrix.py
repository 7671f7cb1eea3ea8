"""DistanceMatrix.ai provider."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ...models.location import Location
from ..http.request import RequestHeaders, RequestParams
from .base import Provider
from .fields import SettingField
from .result import CalcOutcome

ACCURATE_ENDPOINT = "https://api.distancematrix.ai/maps/api/distancematrix/json"
FAST_ENDPOINT = "https://api-v2.distancematrix.ai/maps/api/distancematrix/json"

MODES = ("driving", "walking", "bicycling", "transit")


class DistanceMatrixProvider(Provider):
    slug = "distancematrix"
    display_name = "Distance Matrix API by DistanceMatrix.ai"
    secret_field = "api_key"
    secret_suffixes = ("key",)

    def fields(self) -> Sequence[SettingField]:
        return (
            SettingField(
                key="api_key",
                title="API Key",
                description="DistanceMatrix.ai API key for distance calculation.",
                is_required=True,
                documentation="https://distancematrix.ai/guides/getting-started-with-distance-matrix-apis",
                param_key="key",
            ),
            SettingField(
                key="mode",
                title="Travel Mode",
                type="select",
                description="Specify the mode of travel.",
                default="driving",
                options={mode: mode for mode in MODES},
                documentation="https://distancematrix.ai/distance-matrix-api#travel_modes",
                param_key="mode",
            ),
            SettingField(
                key="application_type",
                title="Application Type",
                type="select",
                description="Specify which API is right for you.",
                default="accurate",
                options={"accurate": "Distance Matrix API Accurate", "fast": "Distance Matrix API Fast"},
                is_required=True,
                documentation="https://distancematrix.ai/product#how-dm-works",
            ),
        )

    def request_distance(
        self,
        destination: Location,
        origin: Location,
        params: RequestParams,
        headers: RequestHeaders,
        settings: Mapping[str, Any],
    ) -> CalcOutcome:
        params.add(self.format_location(origin), "origins")
        params.add(self.format_location(destination), "destinations")

        fast = self.option(settings, "application_type") == "fast"
        dispatcher = self.dispatch("GET", FAST_ENDPOINT if fast else ACCURATE_ENDPOINT, params, headers)
        return self.distance_result(
            dispatcher,
            ("rows", 0, "elements", 0, "distance", "value"),
            ("error_message",),
            integer=True,
        )

    @staticmethod
    def format_location(location: Location) -> str:
        if location.location_type == "coordinates":
            return f"{location.latitude},{location.longitude}"
        return location.formatted_address()
