"""
Tests for the event bus
=======================
"""

import pytest

from touchless_gestures.core.events import EventBus, Events


class TestEventBus:

    def test_singleton(self, bus):
        assert EventBus() is bus

    def test_emit_passes_kwargs(self, bus):
        received = []
        bus.subscribe(Events.GESTURE_STABLE, lambda **kw: received.append(kw))

        delivered = bus.emit(Events.GESTURE_STABLE, session="s", label="like", confidence=0.9)

        assert delivered == 1
        assert received == [{"session": "s", "label": "like", "confidence": 0.9}]

    def test_priority_order(self, bus):
        order = []
        bus.subscribe("x", lambda **_: order.append("low"), priority=0)
        bus.subscribe("x", lambda **_: order.append("high"), priority=10)

        bus.emit("x")

        assert order == ["high", "low"]

    def test_failing_handler_does_not_block_others(self, bus):
        received = []

        def broken(**_):
            raise RuntimeError("boom")

        bus.subscribe("x", broken, priority=5)
        bus.subscribe("x", lambda **_: received.append(True))

        assert bus.emit("x") == 1
        assert received == [True]

    def test_unsubscribe(self, bus):
        def handler(**_):
            pass

        bus.subscribe("x", handler)
        bus.subscribe("y", handler)
        assert bus.listener_count() == 2

        bus.unsubscribe("x", handler)
        assert bus.listener_count("x") == 0
        assert bus.emit("x") == 0

    def test_history(self, bus):
        bus.emit(Events.HAND_DETECTED, session="fg")
        bus.emit(Events.HAND_LOST, session="fg")

        history = bus.get_history()
        assert [h["event"] for h in history] == [Events.HAND_DETECTED, Events.HAND_LOST]
        assert history[0]["session"] == "fg"
        assert len(bus.get_history(last_n=1)) == 1

    def test_reset(self, bus):
        bus.subscribe("x", lambda **_: None)
        bus.emit("x")
        bus.reset()

        assert bus.listener_count() == 0
        assert bus.get_history() == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
