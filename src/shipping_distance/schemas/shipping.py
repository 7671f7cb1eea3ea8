"""Pydantic request/response models for distance and quote endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from ..models.domain import LineItem, OrderContext
from ..models.location import Location
from .settings import MethodSettings


class CoordinatesModel(BaseModel):
    latitude: float
    longitude: float


class LocationModel(BaseModel):
    location_type: Literal["address", "address_components", "coordinates"]
    address: Optional[str] = None
    address_components: Optional[dict[str, str]] = None
    coordinates: Optional[CoordinatesModel] = None

    @model_validator(mode="after")
    def validate_variant(self) -> "LocationModel":
        if getattr(self, self.location_type) is None:
            raise ValueError(f"'{self.location_type}' is required for location_type '{self.location_type}'.")
        return self

    def to_location(self) -> Location:
        return Location.from_dict(self.model_dump())


class LineItemModel(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    shipping_class_id: int = Field(default=0, ge=0)
    needs_shipping: bool = True


class OrderModel(BaseModel):
    cart_subtotal: Decimal = Field(default=Decimal("0"), ge=0)
    items: Sequence[LineItemModel] = Field(default_factory=list)
    item_count: Optional[int] = Field(default=None, ge=0, description="Overrides the summed item quantity.")

    def to_context(self) -> OrderContext:
        return OrderContext.build(
            [LineItem(**item.model_dump()) for item in self.items],
            cart_subtotal=self.cart_subtotal,
            item_count=self.item_count,
        )


class DistanceRequest(BaseModel):
    provider: str
    provider_settings: dict[str, Any] = Field(default_factory=dict)
    origin: LocationModel
    destination: LocationModel


class DistanceResponse(BaseModel):
    provider: str
    distance: dict[str, str]
    km: str
    mi: str


class QuoteRequest(BaseModel):
    method: MethodSettings
    destination: LocationModel
    order: OrderModel = Field(default_factory=OrderModel)


class QuoteResponse(BaseModel):
    available: bool
    cost: Optional[str] = None
    label: Optional[str] = None
    distance: Optional[dict[str, str]] = None
    provider: Optional[str] = None


class ProviderField(BaseModel):
    key: str
    title: str
    type: str
    description: str
    default: Any = None
    options: dict[str, str]
    is_required: bool
    documentation: str


class ProviderSummary(BaseModel):
    slug: str
    name: str
    fields: list[ProviderField]


class ValidationIssueModel(BaseModel):
    field: str
    message: str
    row: Optional[int] = None


class ProviderValidationResponse(BaseModel):
    provider: str
    valid: bool
    issues: list[ValidationIssueModel]
