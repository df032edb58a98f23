"""
Tests for the cooldown dispatch policy
======================================
"""

import pytest

from touchless_gestures.core.types import GestureAction, build_action_map
from touchless_gestures.modules.control.debouncer import DispatchPolicy


class TestDispatchPolicy:
    """Cooldown 5000 ms, detection threshold 0.7."""

    @pytest.fixture
    def policy(self):
        return DispatchPolicy({"cooldown_ms": 5000, "detection_confidence": 0.7})

    def test_first_gesture_fires(self, policy):
        event = policy.decide("like", 0.9, now_ms=1000)

        assert event is not None
        assert event.action is GestureAction.INCREASE_VOLUME
        assert event.label == "like"
        assert event.confidence == pytest.approx(0.9)
        assert event.timestamp_ms == 1000
        assert policy.last_label == "like"
        assert policy.last_dispatch_ms == 1000

    def test_repeat_within_cooldown_suppressed(self, policy):
        assert policy.decide("like", 0.9, now_ms=1000) is not None
        assert policy.decide("like", 0.9, now_ms=5999) is None

    def test_repeat_after_cooldown_fires(self, policy):
        policy.decide("like", 0.9, now_ms=1000)
        assert policy.decide("like", 0.9, now_ms=6000) is not None

    def test_new_label_fires_immediately(self, policy):
        policy.decide("like", 0.9, now_ms=1000)
        event = policy.decide("dislike", 0.9, now_ms=1001)

        assert event is not None
        assert event.action is GestureAction.DECREASE_VOLUME

    def test_switch_back_also_fires(self, policy):
        policy.decide("like", 0.9, now_ms=0)
        policy.decide("fist", 0.9, now_ms=10)
        assert policy.decide("like", 0.9, now_ms=20) is not None

    def test_empty_label_never_fires(self, policy):
        assert policy.decide("", 0.9, now_ms=0) is None
        assert policy.last_label == ""

    def test_below_threshold_never_fires(self, policy):
        assert policy.decide("like", 0.69, now_ms=0) is None
        assert policy.last_dispatch_ms is None

    def test_nan_confidence_never_fires(self, policy):
        assert policy.decide("like", float("nan"), now_ms=0) is None
        assert policy.last_dispatch_ms is None

    def test_unknown_label_is_noop(self, policy):
        assert policy.decide("wave", 0.99, now_ms=0) is None
        assert policy.resolve("wave") is GestureAction.NONE

    def test_suppressed_calls_do_not_touch_state(self, policy):
        policy.decide("like", 0.9, now_ms=1000)
        policy.decide("wave", 0.99, now_ms=2000)
        policy.decide("dislike", 0.1, now_ms=2000)

        assert policy.last_label == "like"
        assert policy.last_dispatch_ms == 1000

    def test_label_normalization(self, policy):
        event = policy.decide("  Like ", 0.9, now_ms=0)
        assert event is not None
        assert event.action is GestureAction.INCREASE_VOLUME

    def test_threshold_is_clamped(self, policy):
        policy.detection_threshold = 1.7
        assert policy.detection_threshold == 1.0
        policy.detection_threshold = -3
        assert policy.detection_threshold == 0.0

    def test_threshold_change_takes_effect(self, policy):
        policy.detection_threshold = 0.95
        assert policy.decide("like", 0.9, now_ms=0) is None
        policy.detection_threshold = 0.5
        assert policy.decide("like", 0.9, now_ms=1) is not None

    def test_reset_clears_cooldown(self, policy):
        policy.decide("like", 0.9, now_ms=1000)
        policy.reset()

        assert policy.last_label == ""
        assert policy.decide("like", 0.9, now_ms=1001) is not None

    def test_custom_action_map(self):
        policy = DispatchPolicy({}, action_map=build_action_map({"wave": "PLAY", "like": "NONE"}))

        assert policy.decide("wave", 0.9, now_ms=0).action is GestureAction.PLAY
        assert policy.decide("like", 0.9, now_ms=1) is None

    def test_wall_clock_default(self, policy):
        event = policy.decide("palm", 0.9)
        assert event is not None
        assert event.timestamp_ms > 0
        assert policy.decide("palm", 0.9) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
