"""Google Routes API provider."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ...models.location import Location
from ..http.request import RequestHeaders, RequestParams
from .base import Provider
from .fields import SettingField
from .result import CalcOutcome

ENDPOINT = "https://routes.googleapis.com/directions/v2:computeRoutes"
FIELD_MASK = "routes.duration,routes.distanceMeters"

TRAVEL_MODES = ("DRIVE", "BICYCLE", "WALK", "TWO_WHEELER", "TRANSIT")
ROUTE_AVOIDANCES = ("avoidTolls", "avoidHighways", "avoidFerries", "avoidIndoor")


def route_modifiers(selected: Any) -> Optional[dict[str, bool]]:
    """Turn the selected avoidances into a ``routeModifiers`` object."""
    if not selected:
        return None
    if isinstance(selected, str):
        selected = [selected]
    return {option: True for option in selected}


class GoogleRoutesProvider(Provider):
    slug = "google"
    display_name = "Routes API by Google"
    secret_field = "api_key"
    secret_suffixes = ("X-Goog-Api-Key",)

    def fields(self) -> Sequence[SettingField]:
        return (
            SettingField(
                key="api_key",
                title="API Key",
                description="API key with Routes API enabled.",
                is_required=True,
                documentation="https://developers.google.com/maps/documentation/routes/get-api-key",
                header_key="X-Goog-Api-Key",
            ),
            SettingField(
                key="travel_mode",
                title="Travel Mode",
                type="select",
                description="Specify the mode of travel.",
                default="DRIVE",
                options={mode: mode for mode in TRAVEL_MODES},
                documentation="https://developers.google.com/maps/documentation/routes/reference/rest/v2/RouteTravelMode",
                param_key="travelMode",
            ),
            SettingField(
                key="route_avoidances",
                title="Route Avoidances",
                type="multiselect",
                description="Specify route features to avoid.",
                default=[],
                options={option: option for option in ROUTE_AVOIDANCES},
                documentation="https://developers.google.com/maps/documentation/routes/reference/rest/v2/RouteModifiers",
                param_key="routeModifiers",
                param_sanitizer=route_modifiers,
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
        params.add(self.format_location(origin), "origin")
        params.add(self.format_location(destination), "destination")
        headers.add("application/json", "Content-Type")
        headers.add(FIELD_MASK, "X-Goog-FieldMask")

        dispatcher = self.dispatch("POST", ENDPOINT, params, headers)
        return self.distance_result(dispatcher, ("routes", 0, "distanceMeters"), ("error", "message"))

    @staticmethod
    def format_location(location: Location) -> dict[str, Any]:
        match location.location_type:
            case "address":
                return {"address": location.address}
            case "address_components":
                return {"address": location.formatted_address()}
            case _:
                return {"location": {"latLng": location.coordinates}}
