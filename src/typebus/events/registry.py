"""Named buses and the process-wide bus context.

A :class:`BusRegistry` owns three well-known buses (generic, UI and network)
plus any number of buses created on first lookup by name. Names are never
removed, so a name always resolves to the same bus for the registry's
lifetime.

The module keeps one current registry, built at import time. Applications
call :func:`init_registry` at startup to apply configuration; tests call
:func:`reset_registry` to start from a clean slate.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import ValidationError

from ..config import BusConfig
from ..exceptions import ConfigValidationError
from .bus import EventBus

LOGGER = logging.getLogger(__name__)

GENERIC_BUS_ID = "bus"
UI_BUS_ID = "ui"
NETWORK_BUS_ID = "network"


class BusRegistry:
    """Lazily populated mapping of names to buses plus the well-known buses."""

    def __init__(
        self,
        *,
        isolate_errors: bool = False,
        diagnostic_max_chars: int | None = None,
    ) -> None:
        self.isolate_errors = isolate_errors
        self.diagnostic_max_chars = diagnostic_max_chars
        self._buses: dict[str, EventBus] = {}
        self._lock = threading.Lock()
        self._bus = self._new_bus(GENERIC_BUS_ID)
        self._ui_bus = self._new_bus(UI_BUS_ID)
        self._network_bus = self._new_bus(NETWORK_BUS_ID)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._buses

    def _new_bus(self, identifier: str) -> EventBus:
        return EventBus(
            identifier,
            isolate_errors=self.isolate_errors,
            diagnostic_max_chars=self.diagnostic_max_chars,
        )

    def get(self, name: str) -> EventBus:
        """Return the bus called ``name``, creating it on first use."""
        if not isinstance(name, str):
            raise TypeError(f"Bus name must be a string, got {type(name).__name__}")
        with self._lock:
            bus = self._buses.get(name)
            if bus is None:
                bus = self._new_bus(name)
                self._buses[name] = bus
                LOGGER.debug("registry.created", extra={"bus": name})
            return bus

    def get_bus(self) -> EventBus:
        """Bus for generic events."""
        return self._bus

    def get_ui_bus(self) -> EventBus:
        """Bus for UI events."""
        return self._ui_bus

    def get_network_bus(self) -> EventBus:
        """Bus for network events."""
        return self._network_bus

    def names(self) -> list[str]:
        """Names of the buses created through ``get``."""
        with self._lock:
            return list(self._buses)


_registry = BusRegistry()


def get_registry() -> BusRegistry:
    """Return the registry currently serving the module-level accessors."""
    return _registry


def init_registry(config: dict[str, Any] | None = None) -> BusRegistry:
    """Build a registry from validated config and make it current.

    Args:
        config: Mapping as returned by ``load_config``; defaults when None

    Returns:
        The newly installed registry

    Raises:
        ConfigValidationError: the ``bus`` section has invalid values.
    """
    global _registry

    if config is None:
        _registry = BusRegistry()
    else:
        try:
            bus_config = BusConfig.model_validate(config.get("bus", {}))
        except ValidationError as exc:
            raise ConfigValidationError(f"Invalid [bus] configuration: {exc}") from exc
        _registry = BusRegistry(
            isolate_errors=bus_config.isolate_errors,
            diagnostic_max_chars=bus_config.diagnostic_max_chars,
        )
    LOGGER.info(
        "registry.initialized",
        extra={
            "isolate_errors": _registry.isolate_errors,
            "diagnostic_max_chars": _registry.diagnostic_max_chars,
        },
    )
    return _registry


def reset_registry() -> BusRegistry:
    """Discard every bus and install a fresh default registry."""
    global _registry

    _registry = BusRegistry()
    return _registry


def get(name: str) -> EventBus:
    return _registry.get(name)


def get_bus() -> EventBus:
    return _registry.get_bus()


def get_ui_bus() -> EventBus:
    return _registry.get_ui_bus()


def get_network_bus() -> EventBus:
    return _registry.get_network_bus()
