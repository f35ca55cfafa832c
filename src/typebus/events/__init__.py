"""Event bus components: envelope, observer contract, buses and registry."""

from .base import Event, Observer, is_event_type, is_observer
from .bus import EventBus
from .diagnostics import PARSE_ERROR_PLACEHOLDER, describe_payload
from .registry import (
    BusRegistry,
    get,
    get_bus,
    get_network_bus,
    get_registry,
    get_ui_bus,
    init_registry,
    reset_registry,
)

__all__ = [
    "BusRegistry",
    "Event",
    "EventBus",
    "Observer",
    "PARSE_ERROR_PLACEHOLDER",
    "describe_payload",
    "get",
    "get_bus",
    "get_network_bus",
    "get_registry",
    "get_ui_bus",
    "init_registry",
    "is_event_type",
    "is_observer",
    "reset_registry",
]
