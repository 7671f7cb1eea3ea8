"""Declarative provider settings fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

Sanitizer = Callable[[Any], Any]

CONTEXT_SETTINGS = "settings"
CONTEXT_CALCULATION = "calculation"
CONTEXTS = (CONTEXT_SETTINGS, CONTEXT_CALCULATION)


@dataclass(frozen=True, slots=True)
class SettingField:
    """One operator-facing provider setting.

    ``param_key``/``header_key`` name the outbound request slot the value is
    copied into; the matching sanitizer runs first. A sanitizer returning
    ``None`` removes the param.
    """

    key: str
    title: str
    type: str = "text"
    description: str = ""
    default: Any = ""
    options: dict[str, str] = field(default_factory=dict)
    is_required: bool = False
    documentation: str = ""
    param_key: Optional[str] = None
    param_sanitizer: Optional[Sanitizer] = None
    header_key: Optional[str] = None
    header_sanitizer: Optional[Sanitizer] = None

    def describe(self, key: Optional[str] = None) -> dict[str, Any]:
        """Serializable description, used by the settings form and the API."""
        return {
            "key": key or self.key,
            "title": self.title,
            "type": self.type,
            "description": self.description,
            "default": self.default,
            "options": dict(self.options),
            "is_required": self.is_required,
            "documentation": self.documentation,
        }


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    field: str
    message: str
    row: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.row is not None:
            data["row"] = self.row
        return data
