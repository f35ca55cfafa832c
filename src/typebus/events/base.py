"""Event envelope and the observer contract.

An event is routed by its exact runtime class, so each concrete kind of event
is a subclass of :class:`Event`:

    class ScoreChanged(Event):
        pass

    bus.send(ScoreChanged({"score": 3}))

An observer is any object with an ``on_event(event)`` method.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

OBSERVER_CAPABILITY = "Observer"
EVENT_CAPABILITY = "Event"


@dataclass(frozen=True)
class Event:
    """Uniform envelope around an opaque payload."""

    payload: Any = None


@runtime_checkable
class Observer(Protocol):
    """Anything that can receive a dispatched event."""

    def on_event(self, event: Event) -> None: ...


def is_observer(value: Any) -> bool:
    """Return True when ``value`` is an observer instance (not a class)."""
    if isinstance(value, type):
        return False
    return isinstance(value, Observer) and callable(value.on_event)


def is_event_type(value: Any) -> bool:
    """Return True when ``value`` is ``Event`` or one of its subclasses."""
    return isinstance(value, type) and issubclass(value, Event)
