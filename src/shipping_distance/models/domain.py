"""Domain models for the order being shipped."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence


@dataclass(frozen=True, slots=True)
class LineItem:
    """One cart line as seen by the rate engine."""

    product_id: str
    quantity: int = 1
    shipping_class_id: int = 0
    needs_shipping: bool = True


@dataclass(frozen=True, slots=True)
class OrderContext:
    """Read-only snapshot of the order: subtotal, item count and lines."""

    cart_subtotal: Decimal = Decimal("0")
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    explicit_item_count: Optional[int] = None

    @classmethod
    def build(
        cls,
        items: Sequence[LineItem],
        cart_subtotal: Decimal | float | str = 0,
        item_count: Optional[int] = None,
    ) -> "OrderContext":
        return cls(
            cart_subtotal=Decimal(str(cart_subtotal)),
            items=tuple(items),
            explicit_item_count=item_count,
        )

    @property
    def shippable_items(self) -> tuple[LineItem, ...]:
        return tuple(item for item in self.items if item.needs_shipping)

    @property
    def item_count(self) -> int:
        if self.explicit_item_count is not None:
            return self.explicit_item_count
        return sum(item.quantity for item in self.shippable_items)
