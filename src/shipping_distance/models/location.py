"""Location value object: an address, address components, or coordinates."""

from __future__ import annotations

import math
from typing import Any, Mapping

from ..errors import InvalidArgumentError, InvalidStateError, TypeMismatchError

LOCATION_TYPE_ADDRESS = "address"
LOCATION_TYPE_ADDRESS_COMPONENTS = "address_components"
LOCATION_TYPE_COORDINATES = "coordinates"

LOCATION_TYPES = (
    LOCATION_TYPE_ADDRESS,
    LOCATION_TYPE_ADDRESS_COMPONENTS,
    LOCATION_TYPE_COORDINATES,
)

# Order matters: it is also the order used when formatting components.
ADDRESS_FIELDS = ("address_1", "city", "state", "postcode", "country")


def normalize_address_components(components: Mapping[str, Any]) -> dict[str, str]:
    """Keep only the allow-listed address fields.

    A legacy ``address`` entry is used for ``address_1`` when the latter is empty.
    """
    normalized: dict[str, str] = {}
    for field in ADDRESS_FIELDS:
        source = field
        if field == "address_1" and not components.get("address_1") and components.get("address"):
            source = "address"
        value = components.get(source)
        if value is None:
            continue
        normalized[field] = str(value)
    return normalized


def _valid_address(address: str) -> bool:
    return bool(address.strip())


def _valid_components(components: Mapping[str, str]) -> bool:
    if not components.get("country", "").strip():
        return False
    return any(components.get(key, "").strip() for key in ("address_1", "city", "postcode"))


def _valid_coordinates(lat: float, lng: float) -> bool:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


class Location:
    """A place expressed in exactly one of three forms.

    Use the ``from_*`` constructors. Invalid data does not raise at construction;
    the location is flagged instead and every accessor raises
    :class:`InvalidStateError`.
    """

    __slots__ = ("_location_type", "_address", "_components", "_coordinates", "_valid")

    def __init__(self, location_type: str, *, _token: object = None) -> None:
        if _token is not _CONSTRUCT:
            raise TypeError("Use Location.from_address/from_address_components/from_coordinates.")
        if location_type not in LOCATION_TYPES:
            raise InvalidArgumentError("Invalid location type!")
        self._location_type = location_type
        self._address: str | None = None
        self._components: dict[str, str] | None = None
        self._coordinates: tuple[float, float] | None = None
        self._valid = True

    @classmethod
    def from_address(cls, address: str) -> "Location":
        location = cls(LOCATION_TYPE_ADDRESS, _token=_CONSTRUCT)
        location._address = str(address)
        location._valid = _valid_address(location._address)
        return location

    @classmethod
    def from_address_components(cls, components: Mapping[str, Any]) -> "Location":
        location = cls(LOCATION_TYPE_ADDRESS_COMPONENTS, _token=_CONSTRUCT)
        location._components = normalize_address_components(components)
        location._valid = _valid_components(location._components)
        return location

    @classmethod
    def from_coordinates(cls, lat: float, lng: float) -> "Location":
        location = cls(LOCATION_TYPE_COORDINATES, _token=_CONSTRUCT)
        try:
            lat, lng = float(lat), float(lng)
        except (TypeError, ValueError):
            lat, lng = math.nan, math.nan
        location._coordinates = (lat, lng)
        location._valid = _valid_coordinates(lat, lng)
        return location

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Location":
        match data.get("location_type", ""):
            case "address":
                return cls.from_address(data.get("address") or "")
            case "address_components":
                return cls.from_address_components(data.get("address_components") or {})
            case "coordinates":
                coordinates = data.get("coordinates") or {}
                return cls.from_coordinates(coordinates.get("latitude"), coordinates.get("longitude"))
            case _:
                raise InvalidArgumentError("Invalid location type!")

    @property
    def location_type(self) -> str:
        return self._location_type

    @property
    def is_valid(self) -> bool:
        return self._valid

    @property
    def address(self) -> str:
        self._check(LOCATION_TYPE_ADDRESS)
        return self._address or ""

    @property
    def address_components(self) -> dict[str, str]:
        self._check(LOCATION_TYPE_ADDRESS_COMPONENTS)
        return dict(self._components or {})

    @property
    def coordinates(self) -> dict[str, float]:
        self._check(LOCATION_TYPE_COORDINATES)
        lat, lng = self._coordinates or (0.0, 0.0)
        return {"latitude": lat, "longitude": lng}

    @property
    def latitude(self) -> float:
        return self.coordinates["latitude"]

    @property
    def longitude(self) -> float:
        return self.coordinates["longitude"]

    def formatted_address(self) -> str:
        """Single-line address for address or address-component locations."""
        if self._location_type == LOCATION_TYPE_ADDRESS:
            return self.address
        components = self.address_components
        return ", ".join(components[key] for key in ADDRESS_FIELDS if components.get(key, "").strip())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"location_type": self._location_type}
        if self._location_type == LOCATION_TYPE_ADDRESS:
            data["address"] = self._address
        elif self._location_type == LOCATION_TYPE_ADDRESS_COMPONENTS:
            data["address_components"] = dict(self._components or {})
        else:
            lat, lng = self._coordinates or (None, None)
            data["coordinates"] = {"latitude": lat, "longitude": lng}
        return data

    def _check(self, location_type: str) -> None:
        if not self._valid:
            raise InvalidStateError("Invalid location data!")
        if location_type != self._location_type:
            raise TypeMismatchError("Location type mismatch!")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(repr(self.to_dict()))

    def __repr__(self) -> str:
        return f"Location({self.to_dict()!r})"


_CONSTRUCT = object()
