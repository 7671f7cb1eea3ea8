"""Table-rate matching and cost computation."""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional, Sequence

from ...errors import InvalidArgumentError
from ...models.distance import Distance, format_decimal
from ...models.domain import LineItem, OrderContext
from ...schemas.settings import TOTAL_COST_ALIASES, MethodSettings
from .fields import INHERIT, RateField, default_rate_fields

RateRow = Mapping[str, Any]

# Extension point: receives the row, distance, order and the built-in verdict.
RowFilter = Callable[[RateRow, Distance, OrderContext, bool], bool]

DEFAULT_LABEL = "Shipping"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _inherits(value: Any) -> bool:
    return _blank(value) or (isinstance(value, str) and value.strip() == INHERIT)


def to_decimal(value: Any, key: str, default: str = "0") -> Decimal:
    if _blank(value):
        return Decimal(default)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidArgumentError(f"Invalid value for '{key}': {value!r}") from None
    if not number.is_finite():
        raise InvalidArgumentError(f"Invalid value for '{key}': {value!r}")
    return number


class RateEngine:
    """Pick a rate row for an order and price it.

    Rows are plain mappings as entered by the operator. Blank (or ``inherit``)
    override columns fall back to the method-level settings.
    """

    def __init__(
        self,
        settings: MethodSettings,
        rate_fields: Sequence[RateField] | None = None,
        row_filter: RowFilter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings
        self.rate_fields = tuple(rate_fields) if rate_fields is not None else default_rate_fields()
        self.row_filter = row_filter
        self.logger = logger or logging.getLogger(__name__)
        self._predicates: dict[str, Callable[[RateRow, Decimal, OrderContext], bool]] = {
            "max_distance": self._within_max_distance,
            "min_order_amount": lambda row, _, order: self._at_least(row, "min_order_amount", order.cart_subtotal),
            "max_order_amount": lambda row, _, order: self._at_most(row, "max_order_amount", order.cart_subtotal),
            "min_order_quantity": lambda row, _, order: self._at_least(row, "min_order_quantity", order.item_count),
            "max_order_quantity": lambda row, _, order: self._at_most(row, "max_order_quantity", order.item_count),
        }

    @property
    def rule_keys(self) -> list[str]:
        return [item.key for item in self.rate_fields if item.is_rule]

    def distance_value(self, distance: Distance) -> Decimal:
        """Distance in the configured unit, rounded up when the method asks for it."""
        value = distance.value_in(self.settings.unit)
        if self.settings.round_up_distance:
            value = value.to_integral_value(rounding=ROUND_CEILING)
        return value

    def match_row(self, rows: Sequence[RateRow], distance: Distance, order: OrderContext) -> Optional[RateRow]:
        rule_keys = self.rule_keys
        if not rule_keys:
            return None

        value = self.distance_value(distance)
        for index, row in enumerate(rows):
            matched = all(self._rule_holds(key, row, value, order) for key in rule_keys)
            if self.row_filter is not None:
                matched = bool(self.row_filter(row, distance, order, matched))
            if matched:
                self.logger.debug(f"Rate row {index + 1} matched distance {value} {self.settings.unit}")
                return row
        return None

    def compute_cost(self, row: RateRow, distance: Distance, order: OrderContext) -> str:
        value = self.distance_value(distance)
        item_costs = [(item, self._item_rate(row, item) * value) for item in order.shippable_items]

        cost = self._aggregate(item_costs, self._total_cost_type(row))
        cost = self._adjust(cost, row, "surcharge", 1)
        cost = self._adjust(cost, row, "discount", -1)

        min_cost = self._override(row, "min_cost", self.settings.min_cost)
        if min_cost and cost < min_cost:
            cost = min_cost
        max_cost = self._override(row, "max_cost", self.settings.max_cost)
        if max_cost and cost > max_cost:
            cost = max_cost

        return format_decimal(cost, self.settings.price_decimals, trim_zeros=False)

    def label(self, row: RateRow, distance: Distance) -> str:
        row_title = "" if _inherits(row.get("title")) else str(row["title"]).strip()
        title = row_title or self.settings.title.strip() or DEFAULT_LABEL
        if not self.settings.show_distance:
            return title
        return f"{title} ({format_decimal(self.distance_value(distance), 1)} {self.settings.unit})"

    def _rule_holds(self, key: str, row: RateRow, value: Decimal, order: OrderContext) -> bool:
        predicate = self._predicates.get(key)
        return True if predicate is None else predicate(row, value, order)

    @staticmethod
    def _within_max_distance(row: RateRow, value: Decimal, order: OrderContext) -> bool:
        if _blank(row.get("max_distance")):
            return False
        return value <= to_decimal(row["max_distance"], "max_distance")

    @staticmethod
    def _at_least(row: RateRow, key: str, actual: Decimal | int) -> bool:
        bound = to_decimal(row.get(key), key)
        return not bound or bound <= actual

    @staticmethod
    def _at_most(row: RateRow, key: str, actual: Decimal | int) -> bool:
        bound = to_decimal(row.get(key), key)
        return not bound or bound >= actual

    @staticmethod
    def _item_rate(row: RateRow, item: LineItem) -> Decimal:
        if item.shipping_class_id:
            key = f"rate_class_{item.shipping_class_id}"
            if not _blank(row.get(key)):
                return to_decimal(row[key], key)
        return to_decimal(row.get("rate_class_0"), "rate_class_0")

    def _total_cost_type(self, row: RateRow) -> str:
        value = row.get("total_cost_type")
        if _inherits(value):
            return self.settings.total_cost_type
        return TOTAL_COST_ALIASES.get(str(value), str(value))

    @staticmethod
    def _aggregate(item_costs: list[tuple[LineItem, Decimal]], total_cost_type: str) -> Decimal:
        if not item_costs:
            return Decimal("0")

        costs = [cost for _, cost in item_costs]
        if total_cost_type.startswith("flat__"):
            match total_cost_type:
                case "flat__lowest":
                    return min(costs)
                case "flat__average":
                    return sum(costs, Decimal("0")) / len(costs)
                case _:
                    return max(costs)

        # Later items sharing a key replace earlier ones rather than adding up.
        grouped: dict[Any, Decimal] = {}
        match total_cost_type:
            case "progressive__per_shipping_class":
                for item, cost in item_costs:
                    grouped[item.shipping_class_id] = cost
            case "progressive__per_product":
                for item, cost in item_costs:
                    grouped[item.product_id] = cost
            case _:
                for item, cost in item_costs:
                    grouped[item.product_id] = cost * item.quantity
        return sum(grouped.values(), Decimal("0"))

    def _adjust(self, cost: Decimal, row: RateRow, name: str, sign: int) -> Decimal:
        amount = self._override(row, name, getattr(self.settings, name))
        adjustment_type = row.get(f"{name}_type")
        if _inherits(adjustment_type):
            adjustment_type = getattr(self.settings, f"{name}_type")

        if not amount:
            return cost
        match adjustment_type:
            case "fixed":
                return cost + sign * amount
            case "percent":
                return cost + sign * cost * amount / Decimal("100")
            case _:
                return cost

    @staticmethod
    def _override(row: RateRow, key: str, fallback: Decimal) -> Decimal:
        value = row.get(key)
        if _inherits(value):
            return fallback
        return to_decimal(value, key)
