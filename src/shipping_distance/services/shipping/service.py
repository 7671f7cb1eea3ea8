"""Shipping quote orchestration: provider distance, rate row, cost and label."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ...errors import InvalidArgumentError
from ...models.distance import Distance
from ...models.domain import OrderContext
from ...models.location import Location
from ...schemas.settings import MethodSettings
from ..http.dispatcher import Dispatcher
from ..providers.base import CalculationOverride, Provider
from ..providers.registry import ProviderRegistry, default_registry
from ..providers.result import CalcOutcome, CalcResult
from ..rates.engine import RateEngine, RowFilter
from ..rates.fields import RateField


@dataclass(slots=True)
class ShippingQuote:
    cost: str
    label: str
    distance: Distance
    row: Mapping[str, Any]
    provider: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "cost": self.cost,
            "label": self.label,
            "distance": self.distance.to_dict(),
            "row": dict(self.row),
            "provider": self.provider,
        }


class ShippingCalculator:
    def __init__(
        self,
        settings: MethodSettings,
        registry: ProviderRegistry | None = None,
        logger: logging.Logger | None = None,
        rate_fields: Sequence[RateField] | None = None,
        row_filter: RowFilter | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or default_registry()
        self.logger = logger or logging.getLogger(__name__)
        self.engine = RateEngine(settings, rate_fields=rate_fields, row_filter=row_filter, logger=self.logger)

    @property
    def provider(self) -> Provider:
        return self.registry.get(self.settings.api_provider)

    def resolve_origin(self) -> Location:
        """Store origin as configured: a coordinate pair or a free-form address."""
        if self.settings.origin_type == "coordinate":
            if self.settings.origin_lat is None or self.settings.origin_lng is None:
                raise InvalidArgumentError("Store origin coordinates are not configured.")
            return Location.from_coordinates(self.settings.origin_lat, self.settings.origin_lng)
        return Location.from_address(self.settings.origin_address)

    def calculate_distance(
        self,
        destination: Location,
        *,
        override: CalculationOverride | None = None,
    ) -> CalcOutcome:
        provider = self.provider
        origin = self.resolve_origin()
        if not origin.is_valid:
            result: CalcOutcome = CalcResult.failure("Invalid store origin location.")
        elif not destination.is_valid:
            result = CalcResult.failure("Invalid destination location.")
        else:
            result = provider.calculate_distance(
                destination,
                origin,
                self.settings.provider_settings,
                override=override,
            )

        if result.is_error():
            self._log(logging.ERROR, f"{provider.display_name}: {result.error}", result.dispatcher)
        return result

    def calculate(
        self,
        destination: Location,
        order: OrderContext,
        *,
        override: CalculationOverride | None = None,
    ) -> Optional[ShippingQuote]:
        """Quote for ``destination``, or ``None`` when this method cannot be offered."""
        result = self.calculate_distance(destination, override=override)
        if result.is_error():
            return None

        distance = result.distance
        row = self.engine.match_row(self.settings.table_rates, distance, order)
        if row is None:
            self._log(logging.INFO, "No shipping table rates rules match.", result.dispatcher)
            return None

        return ShippingQuote(
            cost=self.engine.compute_cost(row, distance, order),
            label=self.engine.label(row, distance),
            distance=distance,
            row=row,
            provider=self.provider.slug,
        )

    def _log(self, level: int, message: str, dispatcher: Dispatcher | None) -> None:
        if not self.settings.enable_log:
            return
        debug = dispatcher.to_debug_dict() if dispatcher is not None else {}
        self.logger.log(level, message, extra={"debug": debug})
