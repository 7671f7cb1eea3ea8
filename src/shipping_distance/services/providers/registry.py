"""Read-only lookup of the available distance providers."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Iterator

from ...errors import InvalidArgumentError
from .base import Provider
from .distancematrix import DistanceMatrixProvider
from .geoapify import GeoapifyRoutingProvider
from .google import GoogleRoutesProvider
from .mapbox import MapboxMatrixProvider


class ProviderRegistry:
    """Providers keyed by slug, fixed at construction."""

    def __init__(self, providers: Iterable[Provider]) -> None:
        entries: dict[str, Provider] = {}
        for provider in providers:
            if provider.slug in entries:
                raise InvalidArgumentError(f"Provider '{provider.slug}' is already registered.")
            entries[provider.slug] = provider
        self._providers = entries

    def get(self, slug: str) -> Provider:
        try:
            return self._providers[slug]
        except KeyError:
            raise InvalidArgumentError(f"Unknown distance provider '{slug}'.") from None

    def slugs(self) -> list[str]:
        return list(self._providers)

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers.values())

    def __contains__(self, slug: object) -> bool:
        return slug in self._providers

    def __len__(self) -> int:
        return len(self._providers)


def build_providers() -> list[Provider]:
    return [
        GoogleRoutesProvider(),
        MapboxMatrixProvider(),
        DistanceMatrixProvider(),
        GeoapifyRoutingProvider(),
    ]


@lru_cache(maxsize=1)
def default_registry() -> ProviderRegistry:
    return ProviderRegistry(build_providers())
