"""Mapbox Matrix API provider, with forward geocoding for address locations."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ...models.location import LOCATION_TYPE_COORDINATES, Location
from ..http.dispatcher import Dispatcher
from ..http.request import RequestHeaders, RequestParams
from .base import Provider
from .fields import SettingField
from .result import CalcOutcome, CalcResult

MATRIX_ENDPOINT = "https://api.mapbox.com/directions-matrix/v1"
GEOCODE_ENDPOINT = "https://api.mapbox.com/search/geocode/v6/forward"

PROFILES = ("mapbox/driving", "mapbox/driving-traffic", "mapbox/cycling", "mapbox/walking")

GEOCODE_FAILED = "Unable to geocode address."


class MapboxMatrixProvider(Provider):
    slug = "mapbox"
    display_name = "Matrix API by Mapbox"
    secret_field = "access_token"
    secret_suffixes = ("access_token",)

    def fields(self) -> Sequence[SettingField]:
        return (
            SettingField(
                key="access_token",
                title="Access Token",
                description="Access token with Matrix API and Geocoding API enabled.",
                is_required=True,
                documentation="https://docs.mapbox.com/help/dive-deeper/access-tokens",
                param_key="access_token",
            ),
            SettingField(
                key="profile",
                title="Routing Profile",
                type="select",
                description=(
                    "Choose the routing profile that best matches your delivery method. Each profile optimizes "
                    "routes differently based on vehicle type and road restrictions."
                ),
                default="mapbox/driving",
                options={profile: profile for profile in PROFILES},
                is_required=True,
                documentation="https://docs.mapbox.com/api/navigation/matrix/#retrieve-a-matrix",
            ),
        )

    def initial_params(self, settings: Mapping[str, Any]) -> dict[str, Any]:
        return {"annotations": "distance"}

    def request_distance(
        self,
        destination: Location,
        origin: Location,
        params: RequestParams,
        headers: RequestHeaders,
        settings: Mapping[str, Any],
    ) -> CalcOutcome:
        access_token = str(self.option(settings, "access_token") or "")
        destination, destination_lookup = self.geocode(destination, access_token)
        origin, origin_lookup = self.geocode(origin, access_token)
        for location, lookup in ((origin, origin_lookup), (destination, destination_lookup)):
            if location.location_type != LOCATION_TYPE_COORDINATES:
                return CalcResult.failure(GEOCODE_FAILED, lookup)

        profile = self.option(settings, "profile") or "mapbox/driving"
        url = f"{MATRIX_ENDPOINT}/{profile}/{self.format_location(origin)};{self.format_location(destination)}"
        dispatcher = self.dispatch("GET", url, params, headers)
        return self.distance_result(dispatcher, ("distances", 0, 1), ("message",), integer=True)

    def geocode(self, location: Location, access_token: str) -> tuple[Location, Optional[Dispatcher]]:
        """Resolve an address location to coordinates.

        The location comes back unchanged when it already has coordinates or the
        lookup finds nothing.
        """
        if location.location_type == LOCATION_TYPE_COORDINATES:
            return location, None

        params = RequestParams()
        params.add(access_token, "access_token")
        params.add(location.formatted_address(), "q")
        params.add(1, "limit")
        params.add("false", "autocomplete")
        dispatcher = self.dispatch("GET", GEOCODE_ENDPOINT, params)

        latitude = dispatcher.get_json_path(("features", 0, "properties", "coordinates", "latitude"))
        longitude = dispatcher.get_json_path(("features", 0, "properties", "coordinates", "longitude"))
        if latitude and longitude:
            return Location.from_coordinates(float(latitude), float(longitude)), dispatcher

        geojson_lng = dispatcher.get_json_path(("features", 0, "geometry", "coordinates", 0))
        geojson_lat = dispatcher.get_json_path(("features", 0, "geometry", "coordinates", 1))
        if isinstance(geojson_lat, (int, float)) and isinstance(geojson_lng, (int, float)):
            return Location.from_coordinates(geojson_lat, geojson_lng), dispatcher

        self.logger.info(f"Mapbox geocoding found no match, keeping the {location.location_type} location")
        return location, dispatcher

    @staticmethod
    def format_location(location: Location) -> str:
        return f"{location.longitude},{location.latitude}"
