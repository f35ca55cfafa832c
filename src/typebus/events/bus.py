"""Type-indexed event bus.

Usage:
    bus = EventBus("scoreboard")

    class ScoreChanged(Event):
        pass

    class Scoreboard:
        def on_event(self, event):
            print(f"Score is now {event.payload['score']}")

    board = Scoreboard()
    bus.register(board, ScoreChanged)
    bus.send(ScoreChanged({"score": 3}))
    bus.unregister(board, ScoreChanged)
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from ..exceptions import CapabilityError
from .base import (
    EVENT_CAPABILITY,
    OBSERVER_CAPABILITY,
    Event,
    Observer,
    is_event_type,
    is_observer,
)
from .diagnostics import describe_payload

LOGGER = logging.getLogger(__name__)


class EventBus:
    """Synchronous publish/subscribe bus keyed by exact event class.

    Observers are delivered to in registration order. ``send`` iterates over a
    copy of the observer list, so handlers may register or unregister (on this
    bus or any other) while an event is being delivered.
    """

    def __init__(
        self,
        identifier: str | None = None,
        *,
        isolate_errors: bool = False,
        diagnostic_max_chars: int | None = None,
    ) -> None:
        self.identifier = identifier
        self.isolate_errors = isolate_errors
        self.diagnostic_max_chars = diagnostic_max_chars
        self._observers: dict[type[Event], list[Observer]] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"EventBus(identifier={self.identifier!r})"

    def register(self, observer: Observer, *event_types: type[Event]) -> None:
        """Register ``observer`` for each of ``event_types``.

        Args:
            observer: Object with an ``on_event(event)`` method
            event_types: Event classes the observer will receive

        Raises:
            CapabilityError: ``observer`` is not an Observer (nothing is
                registered), or one of ``event_types`` is not an Event class
                (types before it stay registered).
        """
        if not is_observer(observer):
            raise CapabilityError(OBSERVER_CAPABILITY, observer)

        with self._lock:
            for event_type in event_types:
                if not is_event_type(event_type):
                    raise CapabilityError(EVENT_CAPABILITY, event_type)
                self._observers.setdefault(event_type, []).append(observer)
                LOGGER.debug(
                    "bus.register",
                    extra={
                        "bus": self.identifier,
                        "event_type": event_type.__name__,
                        "observer": repr(observer),
                    },
                )

    def unregister(self, observer: Observer, *event_types: type[Event]) -> None:
        """Remove one registration of ``observer`` for each of ``event_types``.

        Types the observer was never registered for are ignored.

        Raises:
            CapabilityError: ``observer`` is not an Observer.
        """
        if not is_observer(observer):
            raise CapabilityError(OBSERVER_CAPABILITY, observer)

        with self._lock:
            for event_type in event_types:
                observers = self._observers.get(event_type)
                if not observers:
                    continue
                for index, candidate in enumerate(observers):
                    if candidate is observer:
                        del observers[index]
                        LOGGER.debug(
                            "bus.unregister",
                            extra={
                                "bus": self.identifier,
                                "event_type": _describe(event_type),
                                "observer": repr(observer),
                            },
                        )
                        break

    def send(self, event: Event) -> None:
        """Deliver ``event`` to every observer registered for its exact class.

        Args:
            event: Event instance; subclasses are not delivered to observers
                of their base classes.
        """
        event_type = type(event)
        payload = None
        if LOGGER.isEnabledFor(logging.DEBUG):
            payload = describe_payload(
                getattr(event, "payload", None), self.diagnostic_max_chars
            )

        with self._lock:
            observers = self._observers.get(event_type)
            snapshot = tuple(observers) if observers else ()

        if not snapshot:
            LOGGER.debug(
                "bus.send.no_observers",
                extra={
                    "bus": self.identifier,
                    "event_type": event_type.__name__,
                    "payload": payload,
                },
            )
            return

        LOGGER.debug(
            "bus.send",
            extra={
                "bus": self.identifier,
                "event_type": event_type.__name__,
                "payload": payload,
                "observers": len(snapshot),
            },
        )
        for observer in snapshot:
            if not self.isolate_errors:
                observer.on_event(event)
                continue
            try:
                observer.on_event(event)
            except Exception:
                LOGGER.error(
                    "bus.handler.failed",
                    exc_info=True,
                    extra={
                        "bus": self.identifier,
                        "event_type": event_type.__name__,
                        "observer": repr(observer),
                    },
                )

    def observers(self, event_type: type[Event]) -> tuple[Observer, ...]:
        """Return the observers currently registered for ``event_type``."""
        with self._lock:
            return tuple(self._observers.get(event_type, ()))

    def observer_count(self, event_type: type[Event]) -> int:
        """Number of registrations for ``event_type``, duplicates included."""
        with self._lock:
            return len(self._observers.get(event_type, ()))

    def event_types(self) -> list[type[Event]]:
        """Event classes that currently have a registration list."""
        with self._lock:
            return list(self._observers)

    def clear(self, event_type: type[Event] | None = None) -> None:
        """Clear registrations.

        Args:
            event_type: Specific event class to clear, or None for all
        """
        with self._lock:
            if event_type is not None:
                self._observers.pop(event_type, None)
            else:
                self._observers.clear()


def _describe(value: Any) -> str:
    """Short name for an event type in log records."""
    return getattr(value, "__name__", repr(value))
