"""Top-level package for typebus."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import load_config
    from .events import (
        BusRegistry,
        Event,
        EventBus,
        Observer,
        get,
        get_bus,
        get_network_bus,
        get_registry,
        get_ui_bus,
        init_registry,
        reset_registry,
    )
    from .exceptions import CapabilityError, ConfigValidationError, TypeBusError
    from .logging_utils import configure_logging

_EXPORTS: dict[str, str] = {
    "BusRegistry": ".events",
    "Event": ".events",
    "EventBus": ".events",
    "Observer": ".events",
    "get": ".events",
    "get_bus": ".events",
    "get_network_bus": ".events",
    "get_registry": ".events",
    "get_ui_bus": ".events",
    "init_registry": ".events",
    "reset_registry": ".events",
    "CapabilityError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "TypeBusError": ".exceptions",
    "load_config": ".config",
    "configure_logging": ".logging_utils",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols so that config and logging stay optional at import time."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module_name, __name__), name)
