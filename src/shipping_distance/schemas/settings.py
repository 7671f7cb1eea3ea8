"""Pydantic model for one configured shipping method."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import settings
from ..services.rates.fields import INHERIT, TOTAL_COST_TYPES

AdjustmentType = Literal["fixed", "percent", "none"]

TOTAL_COST_ALIASES = {"progressive__per_piece": "progressive__per_item"}


class MethodSettings(BaseModel):
    api_provider: str = Field(default_factory=lambda: settings.default_provider)
    provider_settings: dict[str, Any] = Field(
        default_factory=dict,
        description="Provider options keyed with the provider slug prefix, e.g. google_api_key.",
    )
    origin_type: Literal["coordinate", "address"] = "coordinate"
    origin_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    origin_address: str = ""
    distance_unit: Literal["metric", "imperial"] = "metric"
    round_up_distance: bool = False
    show_distance: bool = False
    title: str = ""
    total_cost_type: str = "flat__highest"
    surcharge_type: AdjustmentType = "fixed"
    surcharge: Decimal = Field(default=Decimal("0"), ge=0)
    discount_type: AdjustmentType = "fixed"
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    min_cost: Decimal = Field(default=Decimal("0"), ge=0, description="Zero disables the lower clamp.")
    max_cost: Decimal = Field(default=Decimal("0"), ge=0, description="Zero disables the upper clamp.")
    price_decimals: int = Field(default=2, ge=0, le=8)
    table_rates: list[dict[str, Any]] = Field(default_factory=list)
    enable_log: bool = False

    @field_validator("total_cost_type")
    @classmethod
    def validate_total_cost_type(cls, value: str) -> str:
        value = TOTAL_COST_ALIASES.get(value, value)
        if value == INHERIT or value not in TOTAL_COST_TYPES:
            raise ValueError(f"Unsupported total_cost_type '{value}'.")
        return value

    @model_validator(mode="after")
    def validate_cost_bounds(self) -> "MethodSettings":
        if self.min_cost and self.max_cost and self.min_cost > self.max_cost:
            raise ValueError("min_cost must not exceed max_cost")
        return self

    @property
    def unit(self) -> str:
        return "mi" if self.distance_unit == "imperial" else "km"
