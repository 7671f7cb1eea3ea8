"""Distance value object with unit conversion."""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Callable, Mapping

from ..errors import InvalidArgumentError

ALLOWED_UNITS = ("m", "km", "mi")

METERS_PER_KM = Decimal("1000")
METERS_PER_MILE = Decimal("1609.34")
KM_PER_MILE = Decimal("1.60934")

# Quantum used by the default formatter; keeps division artifacts out of the output.
_DEFAULT_QUANTUM = Decimal("1e-10")

Formatter = Callable[[Decimal], str]


def format_decimal(value: Decimal, places: int | None = None, *, trim_zeros: bool = True) -> str:
    """Render a decimal without exponent or thousands separator.

    ``places`` rounds half-up to a fixed number of decimals; ``None`` only strips
    conversion noise beyond ten decimals.
    """
    quantum = _DEFAULT_QUANTUM if places is None else Decimal(1).scaleb(-places)
    with localcontext() as context:
        # Room for every integer digit plus the requested decimals.
        context.prec = max(context.prec, value.adjusted() - quantum.adjusted() + 2)
        rendered = format(value.quantize(quantum, rounding=ROUND_HALF_UP), "f")
    if trim_zeros and "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    if rendered in ("-0", ""):
        rendered = "0"
    return rendered


def _to_decimal(number: Any) -> Decimal:
    try:
        value = Decimal(str(number).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid distance number: {number!r}") from exc
    if not value.is_finite():
        raise InvalidArgumentError(f"Invalid distance number: {number!r}")
    return value


class Distance:
    """An immutable ``(number, unit)`` measurement.

    The stored pair never changes. ``ceiling`` and ``formatter`` only affect how
    converted values are rendered by :meth:`in_unit` and friends.
    """

    __slots__ = ("_number", "_unit", "_value", "ceiling", "formatter")

    def __init__(self, number: str, unit: str) -> None:
        if unit not in ALLOWED_UNITS:
            raise InvalidArgumentError("Invalid unit type!")
        self._value = _to_decimal(number)
        self._number = str(number)
        self._unit = unit
        self.ceiling = False
        self.formatter: Formatter | None = None

    @classmethod
    def from_m(cls, meters: str) -> "Distance":
        return cls(meters, "m")

    @classmethod
    def from_km(cls, kilometers: str) -> "Distance":
        return cls(kilometers, "km")

    @classmethod
    def from_mi(cls, miles: str) -> "Distance":
        return cls(miles, "mi")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Distance":
        return cls(str(data.get("number", "")), str(data.get("unit", "")))

    @property
    def number(self) -> str:
        return self._number

    @property
    def unit(self) -> str:
        return self._unit

    def to_dict(self) -> dict[str, str]:
        return {"number": self._number, "unit": self._unit}

    def set_ceiling(self, ceiling: bool) -> None:
        self.ceiling = bool(ceiling)

    def set_formatter(self, formatter: Formatter | None) -> None:
        self.formatter = formatter

    def value_in(self, unit: str) -> Decimal:
        """Numeric value converted to ``unit``, with the ceiling toggle applied."""
        value = self._convert(unit)
        if self.ceiling:
            value = value.to_integral_value(rounding=ROUND_CEILING)
        return value

    def in_unit(self, unit: str) -> str:
        value = self.value_in(unit)
        if self.formatter is not None:
            return self.formatter(value)
        return format_decimal(value)

    def in_m(self) -> str:
        return self.in_unit("m")

    def in_km(self) -> str:
        return self.in_unit("km")

    def in_mi(self) -> str:
        return self.in_unit("mi")

    def _convert(self, unit: str) -> Decimal:
        if unit not in ALLOWED_UNITS:
            raise InvalidArgumentError("Invalid unit type!")
        value, source = self._value, self._unit
        if source == unit:
            return value

        match (source, unit):
            case ("m", "km"):
                return value / METERS_PER_KM
            case ("m", "mi"):
                return value / METERS_PER_MILE
            case ("km", "m"):
                return value * METERS_PER_KM
            case ("km", "mi"):
                return value / KM_PER_MILE
            case ("mi", "m"):
                return value * METERS_PER_MILE
            case _:
                return value * KM_PER_MILE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Distance):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self._number, self._unit))

    def __repr__(self) -> str:
        return f"Distance(number={self._number!r}, unit={self._unit!r})"
