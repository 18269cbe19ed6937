"""
Tests for Event Bus
====================
"""

from unittest.mock import Mock

from gesture_light.core.events import EventBus, Events


class TestEventBus:

    def test_emit_calls_listener(self):
        bus = EventBus()
        listener = Mock()
        bus.subscribe(Events.ACTION_FAILED, listener)

        bus.emit(Events.ACTION_FAILED, command="set_power", error="HTTP 500")

        listener.assert_called_once_with(command="set_power", error="HTTP 500")

    def test_priority_order(self):
        bus = EventBus()
        order = []
        bus.subscribe("e", lambda **kw: order.append("low"), priority=0)
        bus.subscribe("e", lambda **kw: order.append("high"), priority=10)

        bus.emit("e")

        assert order == ["high", "low"]

    def test_listener_error_isolated(self):
        bus = EventBus()
        after = Mock()
        bus.subscribe("e", Mock(side_effect=RuntimeError("bad listener")), priority=1)
        bus.subscribe("e", after)

        bus.emit("e", value=1)

        after.assert_called_once_with(value=1)

    def test_unsubscribe(self):
        bus = EventBus()
        listener = Mock()
        bus.subscribe("e", listener)
        bus.unsubscribe("e", listener)

        bus.emit("e")

        listener.assert_not_called()
        assert bus.listener_count == 0

    def test_disabled_bus_drops_events(self):
        bus = EventBus()
        listener = Mock()
        bus.subscribe("e", listener)
        bus.set_enabled(False)

        bus.emit("e")

        listener.assert_not_called()
        assert bus.get_history() == []

    def test_history_bounded(self):
        bus = EventBus(max_history=3)
        for n in range(5):
            bus.emit("e", n=n)

        history = bus.get_history(10)

        assert [h["data"]["n"] for h in history] == [2, 3, 4]

    def test_instances_independent(self):
        first, second = EventBus(), EventBus()
        first.subscribe("e", Mock())

        assert second.listener_count == 0
