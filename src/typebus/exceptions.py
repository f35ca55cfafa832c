"""Domain exception hierarchy for the typebus package."""

from __future__ import annotations

from typing import Any


class TypeBusError(RuntimeError):
    """Base class for all domain-level bus errors."""


class CapabilityError(TypeBusError, TypeError):
    """Raised when a value does not implement the Observer or Event contract."""

    def __init__(self, capability: str, value: Any) -> None:
        self.capability = capability
        self.value = value
        super().__init__(f"{value!r} doesn't implement {capability}")


class ConfigValidationError(TypeBusError):
    """Raised when configuration cannot be validated safely."""
