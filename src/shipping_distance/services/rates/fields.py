"""Rate table column definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

KIND_RULE = "rule"
KIND_RATE = "rate"
KIND_OVERRIDE = "override"

INHERIT = "inherit"

TOTAL_COST_TYPES = {
    "flat__highest": "Max - Set highest item cost as total",
    "flat__average": "Average - Set average item cost as total",
    "flat__lowest": "Min - Set lowest item cost as total",
    "progressive__per_shipping_class": "Per Class - Accumulate total by grouping the product shipping class",
    "progressive__per_product": "Per Product - Accumulate total by grouping the product ID",
    "progressive__per_item": "Per Piece - Accumulate total by multiplying the quantity",
}

ADJUSTMENT_TYPES = {
    "fixed": "Fixed amount",
    "percent": "Percentage",
    "none": "None",
}


@dataclass(frozen=True, slots=True)
class RateField:
    key: str
    title: str
    kind: str
    is_required: bool = False
    default: str = ""
    minimum: Optional[Decimal] = None
    options: dict[str, str] = field(default_factory=dict)
    numeric: bool = True

    @property
    def is_rule(self) -> bool:
        return self.kind == KIND_RULE

    @property
    def is_rate(self) -> bool:
        return self.kind == KIND_RATE


def _rule(key: str, title: str, *, default: str = "0", minimum: str = "0", required: bool = False) -> RateField:
    return RateField(key, title, KIND_RULE, is_required=required, default=default, minimum=Decimal(minimum))


RULE_FIELDS = (
    _rule("max_distance", "Maximum Distances", default="1", minimum="1", required=True),
    _rule("min_order_quantity", "Minimum Order Quantity"),
    _rule("max_order_quantity", "Maximum Order Quantity"),
    _rule("min_order_amount", "Minimum Order Amount"),
    _rule("max_order_amount", "Maximum Order Amount"),
)

OVERRIDE_FIELDS = (
    RateField("min_cost", "Minimum Cost", KIND_OVERRIDE, minimum=Decimal("0")),
    RateField("max_cost", "Maximum Cost", KIND_OVERRIDE, minimum=Decimal("0")),
    RateField("surcharge_type", "Surcharge Type", KIND_OVERRIDE, options={INHERIT: "Inherit", **ADJUSTMENT_TYPES}, numeric=False),
    RateField("surcharge", "Surcharge", KIND_OVERRIDE, minimum=Decimal("0")),
    RateField("discount_type", "Discount Type", KIND_OVERRIDE, options={INHERIT: "Inherit", **ADJUSTMENT_TYPES}, numeric=False),
    RateField("discount", "Discount", KIND_OVERRIDE, minimum=Decimal("0")),
    RateField(
        "total_cost_type",
        "Total Cost Type",
        KIND_OVERRIDE,
        default=INHERIT,
        options={INHERIT: "Inherit", **TOTAL_COST_TYPES, "progressive__per_piece": "Per Piece"},
        numeric=False,
    ),
    RateField("title", "Label", KIND_OVERRIDE, numeric=False),
)


def class_rate_field(class_id: int, name: str = "") -> RateField:
    title = f'"{name}" Shipping Class Rate' if name else f"Shipping Class {class_id} Rate"
    return RateField(f"rate_class_{class_id}", title, KIND_RATE, minimum=Decimal("0"))


def default_rate_fields(shipping_classes: Iterable[tuple[int, str]] = ()) -> tuple[RateField, ...]:
    """Rule, rate and override columns; one optional rate column per shipping class."""
    base_rate = RateField(
        "rate_class_0",
        "Distance Unit Rate",
        KIND_RATE,
        is_required=True,
        default="0",
        minimum=Decimal("0"),
    )
    class_rates = tuple(class_rate_field(class_id, name) for class_id, name in shipping_classes if class_id)
    return RULE_FIELDS + (base_rate,) + class_rates + OVERRIDE_FIELDS
