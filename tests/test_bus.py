"""Tests for event bus registration and dispatch."""

from __future__ import annotations

import logging
import threading
import unittest
from unittest import mock

from typebus.events import Event, EventBus
from typebus.exceptions import CapabilityError


class ScoreChanged(Event):
    pass


class PlayerJoined(Event):
    pass


class BonusScoreChanged(ScoreChanged):
    pass


class NotAnEvent:
    pass


class Recorder:
    """Observer that records every event it receives."""

    def __init__(self, name: str = "recorder", log: list | None = None) -> None:
        self.name = name
        self.received: list[Event] = []
        self.log = log if log is not None else []

    def on_event(self, event: Event) -> None:
        self.received.append(event)
        self.log.append(self.name)


class RegistrationTests(unittest.TestCase):
    """Validate register/unregister bookkeeping and capability checks."""

    def setUp(self) -> None:
        self.bus = EventBus("test")

    def test_register_then_send_delivers_once(self) -> None:
        observer = Recorder()
        self.bus.register(observer, ScoreChanged)

        event = ScoreChanged({"score": 3})
        self.bus.send(event)

        self.assertEqual(len(observer.received), 1)
        self.assertIs(observer.received[0], event)

    def test_register_multiple_types_in_one_call(self) -> None:
        observer = Recorder()
        self.bus.register(observer, ScoreChanged, PlayerJoined)

        self.bus.send(ScoreChanged(1))
        self.bus.send(PlayerJoined("ada"))

        self.assertEqual(
            [type(e) for e in observer.received], [ScoreChanged, PlayerJoined]
        )

    def test_unregister_stops_delivery(self) -> None:
        observer = Recorder()
        self.bus.register(observer, ScoreChanged)
        self.bus.unregister(observer, ScoreChanged)

        self.bus.send(ScoreChanged(1))

        self.assertEqual(observer.received, [])

    def test_duplicate_registration_delivers_twice_in_order(self) -> None:
        log: list[str] = []
        first = Recorder("first", log)
        second = Recorder("second", log)
        self.bus.register(first, ScoreChanged)
        self.bus.register(second, ScoreChanged)
        self.bus.register(first, ScoreChanged)

        self.bus.send(ScoreChanged(1))

        self.assertEqual(log, ["first", "second", "first"])
        self.assertEqual(len(first.received), 2)

    def test_unregister_removes_only_first_duplicate(self) -> None:
        observer = Recorder()
        self.bus.register(observer, ScoreChanged)
        self.bus.register(observer, ScoreChanged)
        self.bus.unregister(observer, ScoreChanged)

        self.bus.send(ScoreChanged(1))

        self.assertEqual(len(observer.received), 1)
        self.assertEqual(self.bus.observer_count(ScoreChanged), 1)

    def test_unregister_uses_identity_not_equality(self) -> None:
        class AlwaysEqual(Recorder):
            def __eq__(self, other: object) -> bool:
                return True

            __hash__ = object.__hash__

        kept = AlwaysEqual("kept")
        removed = AlwaysEqual("removed")
        self.bus.register(kept, ScoreChanged)
        self.bus.register(removed, ScoreChanged)

        self.bus.unregister(removed, ScoreChanged)

        self.assertEqual(self.bus.observers(ScoreChanged), (kept,))

    def test_unregister_unknown_type_or_observer_is_noop(self) -> None:
        observer = Recorder()
        other = Recorder()
        self.bus.register(observer, ScoreChanged)

        self.bus.unregister(observer, PlayerJoined)
        self.bus.unregister(other, ScoreChanged)

        self.assertEqual(self.bus.observers(ScoreChanged), (observer,))

    def test_register_without_event_types_is_noop(self) -> None:
        self.bus.register(Recorder())
        self.assertEqual(self.bus.event_types(), [])

    def test_register_non_observer_raises_and_registers_nothing(self) -> None:
        with self.assertRaises(CapabilityError) as ctx:
            self.bus.register(object(), ScoreChanged)

        self.assertEqual(ctx.exception.capability, "Observer")
        self.assertEqual(self.bus.event_types(), [])

    def test_register_observer_class_is_rejected(self) -> None:
        with self.assertRaises(CapabilityError):
            self.bus.register(Recorder, ScoreChanged)

    def test_register_non_callable_on_event_is_rejected(self) -> None:
        class Broken:
            on_event = "not callable"

        with self.assertRaises(CapabilityError):
            self.bus.register(Broken(), ScoreChanged)

    def test_register_non_event_type_raises_for_that_type(self) -> None:
        observer = Recorder()

        with self.assertRaises(CapabilityError) as ctx:
            self.bus.register(observer, ScoreChanged, NotAnEvent, PlayerJoined)

        self.assertEqual(ctx.exception.capability, "Event")
        self.assertIs(ctx.exception.value, NotAnEvent)
        # Types before the failing one stay registered; later ones are skipped.
        self.assertEqual(self.bus.observers(ScoreChanged), (observer,))
        self.assertEqual(self.bus.observers(PlayerJoined), ())

    def test_register_event_instance_instead_of_type_is_rejected(self) -> None:
        with self.assertRaises(CapabilityError) as ctx:
            self.bus.register(Recorder(), ScoreChanged(1))
        self.assertEqual(ctx.exception.capability, "Event")

    def test_unregister_non_observer_raises(self) -> None:
        with self.assertRaises(CapabilityError) as ctx:
            self.bus.unregister("nope", ScoreChanged)
        self.assertEqual(ctx.exception.capability, "Observer")

    def test_clear_single_type_and_all(self) -> None:
        observer = Recorder()
        self.bus.register(observer, ScoreChanged, PlayerJoined)

        self.bus.clear(ScoreChanged)
        self.assertEqual(self.bus.event_types(), [PlayerJoined])

        self.bus.clear()
        self.assertEqual(self.bus.event_types(), [])

    def test_concurrent_registration_keeps_every_entry(self) -> None:
        observers = [Recorder(str(i)) for i in range(200)]

        def register_all(chunk: list[Recorder]) -> None:
            for observer in chunk:
                self.bus.register(observer, ScoreChanged)

        threads = [
            threading.Thread(target=register_all, args=(observers[i::4],))
            for i in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(self.bus.observer_count(ScoreChanged), 200)


class DispatchTests(unittest.TestCase):
    """Validate routing by exact event class and handler failure policy."""

    def test_send_without_observers_is_noop(self) -> None:
        bus = EventBus()
        bus.send(ScoreChanged(1))

    def test_send_logs_debug_record(self) -> None:
        bus = EventBus("scores")
        bus.register(Recorder(), ScoreChanged)

        with self.assertLogs("typebus.events.bus", level="DEBUG") as logs:
            bus.send(ScoreChanged({"score": 3}))

        records = [r for r in logs.records if r.getMessage() == "bus.send"]
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].bus, "scores")
        self.assertEqual(records[0].event_type, "ScoreChanged")
        self.assertEqual(records[0].payload, '{"score":3}')

    def test_payload_not_serialized_when_debug_disabled(self) -> None:
        bus = EventBus("quiet")
        observer = Recorder()
        bus.register(observer, ScoreChanged)
        bus_logger = logging.getLogger("typebus.events.bus")
        original_level = bus_logger.level
        bus_logger.setLevel(logging.INFO)
        try:
            with mock.patch("typebus.events.bus.describe_payload") as describe:
                bus.send(ScoreChanged({"score": 3}))
        finally:
            bus_logger.setLevel(original_level)

        describe.assert_not_called()
        self.assertEqual(len(observer.received), 1)

    def test_subclass_event_not_delivered_to_base_observers(self) -> None:
        bus = EventBus()
        base_observer = Recorder()
        bus.register(base_observer, ScoreChanged)

        bus.send(BonusScoreChanged(10))

        self.assertEqual(base_observer.received, [])

    def test_base_event_not_delivered_to_subclass_observers(self) -> None:
        bus = EventBus()
        sub_observer = Recorder()
        bus.register(sub_observer, BonusScoreChanged)

        bus.send(ScoreChanged(1))

        self.assertEqual(sub_observer.received, [])

    def test_handler_failure_propagates_by_default(self) -> None:
        bus = EventBus()
        log: list[str] = []

        class Exploding:
            def on_event(self, event: Event) -> None:
                log.append("exploding")
                raise ValueError("boom")

        after = Recorder("after", log)
        bus.register(Exploding(), ScoreChanged)
        bus.register(after, ScoreChanged)

        with self.assertRaises(ValueError):
            bus.send(ScoreChanged(1))

        self.assertEqual(log, ["exploding"])

    def test_isolated_handler_failure_continues_delivery(self) -> None:
        bus = EventBus("isolated", isolate_errors=True)

        class Exploding:
            def on_event(self, event: Event) -> None:
                raise ValueError("boom")

        after = Recorder("after")
        bus.register(Exploding(), ScoreChanged)
        bus.register(after, ScoreChanged)

        with self.assertLogs("typebus.events.bus", level="ERROR") as logs:
            bus.send(ScoreChanged(1))

        self.assertEqual(len(after.received), 1)
        self.assertTrue(any("bus.handler.failed" in line for line in logs.output))

    def test_unserializable_payload_still_delivered(self) -> None:
        bus = EventBus()
        first = Recorder()
        second = Recorder()
        bus.register(first, ScoreChanged)
        bus.register(second, ScoreChanged)

        bus.send(ScoreChanged(object()))

        self.assertEqual(len(first.received), 1)
        self.assertEqual(len(second.received), 1)

    def test_same_observer_on_several_buses(self) -> None:
        observer = Recorder()
        ui = EventBus("ui")
        network = EventBus("network")
        ui.register(observer, ScoreChanged)
        network.register(observer, ScoreChanged)

        ui.send(ScoreChanged("ui"))
        network.send(ScoreChanged("net"))

        self.assertEqual([e.payload for e in observer.received], ["ui", "net"])

    def test_repr_shows_identifier(self) -> None:
        self.assertEqual(repr(EventBus("ui")), "EventBus(identifier='ui')")


if __name__ == "__main__":
    unittest.main()
