"""Route group exports."""

from . import health, providers, shipping

__all__ = ["health", "providers", "shipping"]
