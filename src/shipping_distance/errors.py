"""Exception hierarchy shared by the distance, provider and rate layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .services.http.dispatcher import Dispatcher


class ShippingDistanceError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(ShippingDistanceError, ValueError):
    """Malformed input handed to a value constructor."""


class TypeMismatchError(ShippingDistanceError, TypeError):
    """Accessor called on the wrong location variant."""


class InvalidStateError(ShippingDistanceError, RuntimeError):
    """Accessor called on a location that failed validation."""


class NetworkError(ShippingDistanceError, ConnectionError):
    """Transport failure while talking to a provider or geocoder."""


class NetworkTimeoutError(NetworkError, TimeoutError):
    """The outbound request exceeded the configured timeout."""


class ProviderError(ShippingDistanceError):
    """Provider answered but signalled a business failure."""

    def __init__(self, message: str, dispatcher: "Dispatcher | None" = None) -> None:
        super().__init__(message)
        self.message = message
        self.dispatcher = dispatcher
