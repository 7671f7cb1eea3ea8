import math

import pytest

from shipping_distance.errors import InvalidArgumentError, InvalidStateError, TypeMismatchError
from shipping_distance.models.location import Location


def test_coordinates_location_rejects_address_accessor():
    location = Location.from_coordinates(-6.1754, 106.8272)

    assert location.is_valid
    assert location.coordinates == {"latitude": -6.1754, "longitude": 106.8272}
    with pytest.raises(TypeMismatchError, match="Location type mismatch!"):
        location.address
    with pytest.raises(TypeMismatchError):
        location.address_components


def test_address_location_rejects_coordinate_accessors():
    location = Location.from_address("Jl. Medan Merdeka, Jakarta")

    assert location.address == "Jl. Medan Merdeka, Jakarta"
    with pytest.raises(TypeMismatchError):
        location.latitude


@pytest.mark.parametrize(
    "lat, lng",
    [(91, 0), (-90.5, 10), (0, 180.1), (math.nan, 1), (1, math.inf), ("north", 1), (None, None)],
)
def test_out_of_range_coordinates_are_invalid(lat, lng):
    location = Location.from_coordinates(lat, lng)
    assert not location.is_valid


def test_invalid_state_is_reported_before_type_mismatch():
    location = Location.from_coordinates(120, 0)

    with pytest.raises(InvalidStateError, match="Invalid location data!"):
        location.coordinates
    with pytest.raises(InvalidStateError):
        location.address


def test_blank_address_is_invalid():
    assert not Location.from_address("   ").is_valid


def test_address_components_keep_only_known_fields():
    location = Location.from_address_components(
        {"address_1": "Jl. Sudirman 1", "city": "Jakarta", "country": "ID", "phone": "0812", "email": "a@b.c"}
    )

    assert location.address_components == {"address_1": "Jl. Sudirman 1", "city": "Jakarta", "country": "ID"}


def test_legacy_address_key_fills_address_1():
    location = Location.from_address_components({"address": "Jl. Thamrin 9", "country": "ID"})

    assert location.is_valid
    assert location.address_components["address_1"] == "Jl. Thamrin 9"


@pytest.mark.parametrize(
    "components",
    [
        {"address_1": "Jl. Sudirman 1", "city": "Jakarta"},
        {"country": "ID"},
        {"country": "ID", "state": "DKI"},
        {"country": "  ", "city": "Jakarta"},
    ],
)
def test_incomplete_components_are_invalid(components):
    assert not Location.from_address_components(components).is_valid


def test_formatted_address_joins_non_empty_components_in_order():
    location = Location.from_address_components(
        {"country": "ID", "postcode": "10220", "city": "Jakarta", "state": "", "address_1": "Jl. Sudirman 1"}
    )

    assert location.formatted_address() == "Jl. Sudirman 1, Jakarta, 10220, ID"


@pytest.mark.parametrize(
    "location",
    [
        Location.from_address("Bandung"),
        Location.from_address_components({"city": "Bandung", "country": "ID"}),
        Location.from_coordinates(-6.9, 107.6),
    ],
)
def test_dict_round_trip(location):
    assert Location.from_dict(location.to_dict()) == location


def test_from_dict_rejects_unknown_type():
    with pytest.raises(InvalidArgumentError):
        Location.from_dict({"location_type": "plus_code"})


def test_direct_construction_is_blocked():
    with pytest.raises(TypeError):
        Location("address")
