import json

import httpx
import pytest

from fakes import FAKE_KEY, RecordingTransport, json_response, unreachable
from shipping_distance.config import settings as app_settings
from shipping_distance.errors import InvalidArgumentError, ProviderError
from shipping_distance.models.distance import Distance
from shipping_distance.models.location import Location
from shipping_distance.services.providers.distancematrix import DistanceMatrixProvider
from shipping_distance.services.providers.geoapify import GeoapifyRoutingProvider
from shipping_distance.services.providers.google import GoogleRoutesProvider
from shipping_distance.services.providers.mapbox import MapboxMatrixProvider
from shipping_distance.services.providers.result import CalcResult

ORIGIN = Location.from_coordinates(-6.1754, 106.8272)
DESTINATION = Location.from_coordinates(-6.2088, 106.8456)


def _google(handler):
    transport = RecordingTransport(handler)
    return GoogleRoutesProvider(http_client=transport.client()), transport


def test_google_posts_routes_request():
    provider, transport = _google(json_response({"routes": [{"distanceMeters": 12300, "duration": "900s"}]}))

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"google_api_key": FAKE_KEY})

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://routes.googleapis.com/directions/v2:computeRoutes"
    assert request.headers["X-Goog-Api-Key"] == FAKE_KEY
    assert request.headers["X-Goog-FieldMask"] == "routes.duration,routes.distanceMeters"
    body = json.loads(request.content)
    assert body["travelMode"] == "DRIVE"
    assert "routeModifiers" not in body
    assert body["origin"] == {"location": {"latLng": {"latitude": -6.1754, "longitude": 106.8272}}}
    assert not result.is_error()
    assert result.distance.in_km() == "12.3"


def test_google_route_avoidances_and_address_locations():
    provider, transport = _google(json_response({"routes": [{"distanceMeters": 5000}]}))
    settings = {
        "google_api_key": FAKE_KEY,
        "google_travel_mode": "TWO_WHEELER",
        "google_route_avoidances": ["avoidTolls", "avoidFerries"],
    }
    destination = Location.from_address_components({"address_1": "Jl. Sudirman 1", "city": "Jakarta", "country": "ID"})

    provider.calculate_distance(destination, Location.from_address("Monas, Jakarta"), settings)

    body = json.loads(transport.requests[0].content)
    assert body["travelMode"] == "TWO_WHEELER"
    assert body["routeModifiers"] == {"avoidTolls": True, "avoidFerries": True}
    assert body["origin"] == {"address": "Monas, Jakarta"}
    assert body["destination"] == {"address": "Jl. Sudirman 1, Jakarta, ID"}


def test_google_error_message_is_surfaced():
    provider, _ = _google(json_response({"error": {"code": 403, "message": "API key not valid."}}, status_code=403))

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"google_api_key": FAKE_KEY})

    assert result.is_error()
    assert result.error == "API key not valid."
    assert result.dispatcher.response_code == 403
    with pytest.raises(AttributeError):
        result.distance
    with pytest.raises(ProviderError) as excinfo:
        result.raise_for_error()
    assert excinfo.value.dispatcher is result.dispatcher


@pytest.mark.parametrize(
    "payload",
    [{"routes": [{"distanceMeters": 0}]}, {"routes": []}, {}, {"routes": [{"distanceMeters": "far"}]}],
)
def test_missing_or_zero_distance_is_a_failure(payload):
    provider, _ = _google(json_response(payload))

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"google_api_key": FAKE_KEY})

    assert result.is_error()
    assert result.error == "API request failed."


def test_transport_failure_becomes_a_failed_result():
    def _refused(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider, _ = _google(_refused)

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"google_api_key": FAKE_KEY})

    assert result.is_error()
    assert "connection refused" in result.error
    assert result.dispatcher.is_error()


def test_override_short_circuits_the_request():
    provider, transport = _google(unreachable)

    result = provider.calculate_distance(
        DESTINATION,
        ORIGIN,
        {},
        override=lambda provider, destination, origin, settings: CalcResult.success(Distance.from_km("3")),
    )

    assert result.distance.in_m() == "3000"
    assert transport.requests == []


def test_override_returning_none_falls_through():
    provider, transport = _google(json_response({"routes": [{"distanceMeters": 700}]}))

    result = provider.calculate_distance(DESTINATION, ORIGIN, {}, override=lambda *args: None)

    assert result.distance.in_m() == "700"
    assert len(transport.requests) == 1


def _mapbox_handler(geocode_payload, matrix_payload):
    def _handler(request):
        if "geocode" in request.url.path:
            return httpx.Response(200, json=geocode_payload)
        return httpx.Response(200, json=matrix_payload)

    return _handler


def test_mapbox_uses_lng_lat_path_and_integer_meters():
    transport = RecordingTransport(json_response({"code": "Ok", "distances": [[0, 4321.7], [4300.2, 0]]}))
    provider = MapboxMatrixProvider(http_client=transport.client())

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"mapbox_access_token": FAKE_KEY})

    request = transport.requests[0]
    assert request.url.path == "/directions-matrix/v1/mapbox/driving/106.8272,-6.1754;106.8456,-6.2088"
    assert request.url.params["annotations"] == "distance"
    assert request.url.params["access_token"] == FAKE_KEY
    assert result.distance.to_dict() == {"number": "4321", "unit": "m"}


def test_mapbox_geocodes_address_locations_first():
    geocode = {"features": [{"properties": {"coordinates": {"latitude": -6.2, "longitude": 106.81}}}]}
    transport = RecordingTransport(_mapbox_handler(geocode, {"distances": [[0, 2500]]}))
    provider = MapboxMatrixProvider(http_client=transport.client())
    settings = {"mapbox_access_token": FAKE_KEY, "mapbox_profile": "mapbox/cycling"}

    result = provider.calculate_distance(Location.from_address("Blok M, Jakarta"), ORIGIN, settings)

    geocode_request, matrix_request = transport.requests
    assert geocode_request.url.params["q"] == "Blok M, Jakarta"
    assert geocode_request.url.params["limit"] == "1"
    assert geocode_request.url.params["autocomplete"] == "false"
    assert matrix_request.url.path.endswith("mapbox/cycling/106.8272,-6.1754;106.81,-6.2")
    assert result.distance.in_m() == "2500"


def test_mapbox_geocode_reads_geojson_geometry():
    geocode = {"features": [{"properties": {}, "geometry": {"coordinates": [106.9, -6.3]}}]}
    transport = RecordingTransport(_mapbox_handler(geocode, {"distances": [[0, 9000]]}))
    provider = MapboxMatrixProvider(http_client=transport.client())

    provider.calculate_distance(Location.from_address("Depok"), ORIGIN, {"mapbox_access_token": FAKE_KEY})

    assert transport.requests[1].url.path.endswith(";106.9,-6.3")


def test_mapbox_unresolved_address_fails_without_matrix_call():
    transport = RecordingTransport(_mapbox_handler({"features": []}, {"distances": [[0, 1]]}))
    provider = MapboxMatrixProvider(http_client=transport.client())

    result = provider.calculate_distance(Location.from_address("Nowhere"), ORIGIN, {"mapbox_access_token": FAKE_KEY})

    assert result.is_error()
    assert result.error == "Unable to geocode address."
    assert result.dispatcher is not None
    assert len(transport.requests) == 1


def test_distancematrix_formats_locations_and_picks_endpoint():
    payload = {"rows": [{"elements": [{"distance": {"value": 8100, "text": "8.1 km"}, "status": "OK"}]}]}
    transport = RecordingTransport(json_response(payload))
    provider = DistanceMatrixProvider(http_client=transport.client())
    settings = {"distancematrix_api_key": FAKE_KEY, "distancematrix_application_type": "fast"}
    destination = Location.from_address_components({"city": "Bekasi", "state": "Jawa Barat", "country": "ID"})

    result = provider.calculate_distance(destination, ORIGIN, settings)

    request = transport.requests[0]
    assert request.url.host == "api-v2.distancematrix.ai"
    assert request.url.params["key"] == FAKE_KEY
    assert request.url.params["mode"] == "driving"
    assert request.url.params["origins"] == "-6.1754,106.8272"
    assert request.url.params["destinations"] == "Bekasi, Jawa Barat, ID"
    assert result.distance.in_km() == "8.1"


def test_distancematrix_error_message():
    transport = RecordingTransport(json_response({"status": "REQUEST_DENIED", "error_message": "Invalid key"}))
    provider = DistanceMatrixProvider(http_client=transport.client())

    result = provider.calculate_distance(DESTINATION, ORIGIN, {"distancematrix_api_key": FAKE_KEY})

    assert transport.requests[0].url.host == "api.distancematrix.ai"
    assert result.error == "Invalid key"


def test_geoapify_waypoints_and_avoidances():
    transport = RecordingTransport(json_response({"features": [{"properties": {"distance": 15234.6, "time": 1300}}]}))
    provider = GeoapifyRoutingProvider(http_client=transport.client())
    settings = {"geoapify_api_key": FAKE_KEY, "geoapify_avoid": ["tolls", "ferries"], "geoapify_mode": "truck"}

    result = provider.calculate_distance(DESTINATION, ORIGIN, settings)

    params = transport.requests[0].url.params
    assert params["waypoints"] == "-6.1754,106.8272|-6.2088,106.8456"
    assert params["avoid"] == "tolls|ferries"
    assert params["mode"] == "truck"
    assert params["type"] == "short"
    assert params["apiKey"] == FAKE_KEY
    assert result.distance.in_m() == "15234"


def test_geoapify_geocodes_addresses():
    def _handler(request):
        if request.url.path == "/v1/geocode/search":
            return httpx.Response(200, json={"features": [{"properties": {"lat": -6.3, "lon": 106.7}}]})
        return httpx.Response(200, json={"features": [{"properties": {"distance": 4000}}]})

    transport = RecordingTransport(_handler)
    provider = GeoapifyRoutingProvider(http_client=transport.client())

    result = provider.calculate_distance(Location.from_address("Tangerang Selatan"), ORIGIN, {"geoapify_api_key": FAKE_KEY})

    assert transport.requests[0].url.params["text"] == "Tangerang Selatan"
    assert transport.requests[1].url.params["waypoints"] == "-6.1754,106.8272|-6.3,106.7"
    assert result.distance.in_km() == "4"


@pytest.mark.parametrize(
    "provider_cls, settings",
    [
        (GoogleRoutesProvider, {"google_api_key": FAKE_KEY}),
        (MapboxMatrixProvider, {"mapbox_access_token": FAKE_KEY}),
        (DistanceMatrixProvider, {"distancematrix_api_key": FAKE_KEY}),
        (GeoapifyRoutingProvider, {"geoapify_api_key": FAKE_KEY}),
    ],
)
def test_debug_dump_never_contains_the_secret(provider_cls, settings):
    transport = RecordingTransport(json_response({"message": "quota exceeded"}, status_code=429))
    provider = provider_cls(http_client=transport.client())

    result = provider.calculate_distance(DESTINATION, ORIGIN, settings)

    assert result.is_error()
    assert FAKE_KEY not in json.dumps(result.dispatcher.to_debug_dict())


def test_settings_fields_are_prefixed_and_context_checked():
    provider = GoogleRoutesProvider()

    assert list(provider.settings_fields("settings")) == [
        "google_api_key",
        "google_travel_mode",
        "google_route_avoidances",
    ]
    assert provider.field_key("api_key") == "google_api_key"
    assert provider.field_key("google_api_key") == "google_api_key"
    with pytest.raises(InvalidArgumentError):
        provider.settings_fields("checkout")


def test_validation_reports_missing_secret_without_calling_out():
    transport = RecordingTransport(unreachable)
    provider = MapboxMatrixProvider(http_client=transport.client())

    issues = provider.validate_settings({})

    assert [issue.field for issue in issues] == ["mapbox_access_token"]
    assert transport.requests == []


def test_validation_reports_invalid_options():
    provider = GeoapifyRoutingProvider(http_client=RecordingTransport(unreachable).client())

    issues = provider.validate_settings({"geoapify_api_key": FAKE_KEY, "geoapify_avoid": ["tolls", "stairs"]})

    assert len(issues) == 1
    assert issues[0].field == "geoapify_avoid"
    assert "stairs" in issues[0].message


def test_validation_makes_a_live_call_between_reference_points():
    transport = RecordingTransport(json_response({"routes": [{"distanceMeters": 950}]}))
    provider = GoogleRoutesProvider(http_client=transport.client())

    assert provider.validate_settings({"google_api_key": FAKE_KEY}) == []

    body = json.loads(transport.requests[0].content)
    assert body["origin"]["location"]["latLng"] == {
        "latitude": app_settings.test_origin_lat,
        "longitude": app_settings.test_origin_lng,
    }


def test_validation_surfaces_provider_errors(caplog):
    transport = RecordingTransport(json_response({"error": {"message": "API key not valid."}}, status_code=400))
    provider = GoogleRoutesProvider(http_client=transport.client())

    with caplog.at_level("ERROR"):
        issues = provider.validate_settings({"google_api_key": FAKE_KEY})

    assert [issue.to_dict() for issue in issues] == [{"field": "google_api_key", "message": "API key not valid."}]
    assert FAKE_KEY not in caplog.text
    assert FAKE_KEY not in json.dumps(caplog.records[-1].debug)
