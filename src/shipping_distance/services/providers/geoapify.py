"""Geoapify Routing API provider."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ...models.location import LOCATION_TYPE_COORDINATES, Location
from ..http.dispatcher import Dispatcher
from ..http.request import RequestHeaders, RequestParams
from .base import Provider
from .fields import SettingField
from .result import CalcOutcome, CalcResult

ROUTING_ENDPOINT = "https://api.geoapify.com/v1/routing"
GEOCODE_ENDPOINT = "https://api.geoapify.com/v1/geocode/search"

MODES = (
    "drive",
    "light_truck",
    "medium_truck",
    "truck",
    "heavy_truck",
    "truck_dangerous_goods",
    "long_truck",
    "bus",
    "scooter",
    "motorcycle",
    "bicycle",
    "mountain_bike",
    "road_bike",
    "walk",
    "hike",
)
ROUTE_TYPES = ("short", "balanced", "less_maneuvers")
AVOIDANCES = ("tolls", "ferries", "highways")


def join_avoidances(selected: Any) -> Optional[str]:
    if not selected:
        return None
    if isinstance(selected, str):
        return selected
    return "|".join(selected)


class GeoapifyRoutingProvider(Provider):
    slug = "geoapify"
    display_name = "Routing API by Geoapify"
    secret_field = "api_key"
    secret_suffixes = ("apiKey",)

    def fields(self) -> Sequence[SettingField]:
        return (
            SettingField(
                key="api_key",
                title="API Key",
                type="password",
                description="Geoapify API key.",
                is_required=True,
                documentation="https://apidocs.geoapify.com/docs/routing/#quick-start",
                param_key="apiKey",
            ),
            SettingField(
                key="mode",
                title="Travel Mode",
                type="select",
                description="Mode of travel for route calculation.",
                default="drive",
                options={mode: mode for mode in MODES},
                documentation="https://apidocs.geoapify.com/docs/routing/#api",
                param_key="mode",
            ),
            SettingField(
                key="type",
                title="Route Optimization",
                type="select",
                description="Route optimization type.",
                default="short",
                options={route_type: route_type for route_type in ROUTE_TYPES},
                documentation="https://apidocs.geoapify.com/docs/routing/#api",
                param_key="type",
            ),
            SettingField(
                key="avoid",
                title="Route Avoidances",
                type="multiselect",
                description="List of road types or locations to be avoided by the router.",
                default=[],
                options={avoid: avoid for avoid in AVOIDANCES},
                documentation="https://apidocs.geoapify.com/docs/routing/#api",
                param_key="avoid",
                param_sanitizer=join_avoidances,
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
        api_key = str(self.option(settings, "api_key") or "")
        destination, destination_lookup = self.geocode(destination, api_key)
        origin, origin_lookup = self.geocode(origin, api_key)
        for location, lookup in ((origin, origin_lookup), (destination, destination_lookup)):
            if location.location_type != LOCATION_TYPE_COORDINATES:
                return CalcResult.failure("Unable to geocode address.", lookup)

        params.add(self.format_waypoints(origin, destination), "waypoints")
        dispatcher = self.dispatch("GET", ROUTING_ENDPOINT, params, headers)
        return self.distance_result(dispatcher, ("features", 0, "properties", "distance"), ("message",), integer=True)

    def geocode(self, location: Location, api_key: str) -> tuple[Location, Optional[Dispatcher]]:
        if location.location_type == LOCATION_TYPE_COORDINATES:
            return location, None

        params = RequestParams({"apiKey": api_key, "text": location.formatted_address(), "limit": 1})
        dispatcher = self.dispatch("GET", GEOCODE_ENDPOINT, params)

        latitude = dispatcher.get_json_path(("features", 0, "properties", "lat"))
        longitude = dispatcher.get_json_path(("features", 0, "properties", "lon"))
        if latitude and longitude:
            return Location.from_coordinates(float(latitude), float(longitude)), dispatcher

        self.logger.info(f"Geoapify geocoding found no match, keeping the {location.location_type} location")
        return location, dispatcher

    @staticmethod
    def format_waypoints(origin: Location, destination: Location) -> str:
        return f"{origin.latitude},{origin.longitude}|{destination.latitude},{destination.longitude}"
