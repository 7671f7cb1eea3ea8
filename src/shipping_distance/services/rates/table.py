"""Validation and ordering of operator-entered rate tables."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from ...errors import InvalidArgumentError
from ..providers.fields import ValidationIssue
from .fields import INHERIT, KIND_OVERRIDE, RateField, default_rate_fields

RULE_SORT_ORDER = ("max_distance", "min_order_quantity", "max_order_quantity", "min_order_amount", "max_order_amount")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _validate_value(item: RateField, value: str) -> str | None:
    if item.is_required and not value:
        return f"{item.title} field is required."
    if not value or (item.kind == KIND_OVERRIDE and value == INHERIT):
        return None
    if item.options and value not in item.options:
        return f"{item.title} has an invalid value: {value}."
    if not item.numeric:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        return f"{item.title} must be a number."
    if not number.is_finite():
        return f"{item.title} must be a number."
    if item.minimum is not None and number < item.minimum:
        return f"{item.title} cannot be less than {item.minimum}."
    return None


def _sort_key(row: Mapping[str, str], rule_keys: Sequence[str]) -> tuple[Decimal, ...]:
    ordered = [key for key in RULE_SORT_ORDER if key in rule_keys]
    ordered += [key for key in rule_keys if key not in RULE_SORT_ORDER]
    return tuple(Decimal(row.get(key) or "0") for key in ordered)


def validate_table_rates(
    rows: Sequence[Mapping[str, Any]],
    rate_fields: Sequence[RateField] | None = None,
) -> tuple[list[dict[str, str]], list[ValidationIssue]]:
    """Check every row and return ``(clean_rows, issues)``.

    Clean rows hold stripped string values with defaults filled in and are
    sorted by their rule columns. When any issue is reported the clean rows
    must not be stored.
    """
    fields = tuple(rate_fields) if rate_fields is not None else default_rate_fields()
    rule_fields = [item for item in fields if item.is_rule]
    issues: list[ValidationIssue] = []
    cleaned: list[dict[str, str]] = []

    for index, row in enumerate(rows, start=1):
        clean: dict[str, str] = {}
        for item in fields:
            raw = row.get(item.key)
            value = _text(raw) if raw is not None else item.default
            message = _validate_value(item, value)
            if message:
                issues.append(ValidationIssue(field=item.key, message=f"Table rates row {index}: {message}", row=index))
            clean[item.key] = value
        cleaned.append(clean)

    if issues:
        return cleaned, issues

    seen: dict[tuple[str, ...], int] = {}
    unique: list[dict[str, str]] = []
    for index, clean in enumerate(cleaned, start=1):
        combination = tuple(clean.get(item.key, "") for item in rule_fields)
        if combination in seen:
            described = ", ".join(f"{item.title}: {clean[item.key]}" for item in rule_fields if clean.get(item.key))
            issues.append(
                ValidationIssue(
                    field="table_rates",
                    message=(
                        f"Each shipping rules combination for each row must be unique. "
                        f"Row {index} duplicates row {seen[combination]}: {described}."
                    ),
                    row=index,
                )
            )
            continue
        seen[combination] = index
        unique.append(clean)

    if not issues and not unique:
        issues.append(ValidationIssue(field="table_rates", message="Shipping rates table is empty"))
    if issues:
        return unique, issues

    rule_keys = [item.key for item in rule_fields]
    return sorted(unique, key=lambda clean: _sort_key(clean, rule_keys)), issues


def move_row(rows: Sequence[Mapping[str, Any]], index: int, offset: int) -> list[Mapping[str, Any]]:
    """Swap a row with its neighbour; only rows sharing ``max_distance`` may trade places."""
    if offset not in (-1, 1):
        raise InvalidArgumentError("Rows can only move one position at a time.")
    target = index + offset
    if not (0 <= index < len(rows)) or not (0 <= target < len(rows)):
        raise InvalidArgumentError("Row cannot be moved outside the table.")

    current, neighbour = rows[index], rows[target]
    if _text(current.get("max_distance")) != _text(neighbour.get("max_distance")):
        raise InvalidArgumentError("Only rows with identical maximum distances can be reordered.")

    moved = list(rows)
    moved[index], moved[target] = neighbour, current
    return moved
