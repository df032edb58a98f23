"""
Tests for shared domain types and the gesture -> action map
===========================================================
"""

import pytest

from touchless_gestures.core.types import (
    EMPTY_RESULT, GESTURE_ACTION_MAP, ClassificationResult, GestureAction, HandGestureType,
    build_action_map, get_action, normalize_label,
)


class TestLabels:

    def test_normalize_label(self):
        assert normalize_label("  PeAce\t") == "peace"

    def test_gesture_type_from_label(self):
        assert HandGestureType.from_label(" Rock ") is HandGestureType.ROCK
        assert HandGestureType.from_label("wave") is HandGestureType.NONE


class TestActionMap:

    @pytest.mark.parametrize("label,action", [
        ("call", GestureAction.VOICE_ASSISTANT),
        ("like", GestureAction.INCREASE_VOLUME),
        ("dislike", GestureAction.DECREASE_VOLUME),
        ("fist", GestureAction.PAUSE),
        ("palm", GestureAction.PLAY),
        ("peace", GestureAction.OPEN_CAMERA),
        ("rock", GestureAction.TAKE_SCREENSHOT),
    ])
    def test_default_mapping(self, label, action):
        assert get_action(label) is action

    def test_unknown_and_empty_labels(self):
        assert get_action("wave") is GestureAction.NONE
        assert get_action("") is GestureAction.NONE

    def test_lookup_is_normalized(self):
        assert get_action("  LIKE ") is GestureAction.INCREASE_VOLUME

    def test_default_map_is_read_only(self):
        with pytest.raises(TypeError):
            GESTURE_ACTION_MAP["wave"] = GestureAction.PLAY

    def test_overrides(self):
        action_map = build_action_map({"Wave": "play", "fist": "NOT_AN_ACTION",
                                       "rock": GestureAction.PAUSE})

        assert get_action("wave", action_map) is GestureAction.PLAY
        assert get_action("fist", action_map) is GestureAction.NONE
        assert get_action("rock", action_map) is GestureAction.PAUSE
        assert get_action("like", action_map) is GestureAction.INCREASE_VOLUME

    def test_display_names(self):
        assert GestureAction.TAKE_SCREENSHOT.display_name == "Screenshot"
        assert GestureAction.from_name("increase_volume") is GestureAction.INCREASE_VOLUME


class TestClassificationResult:

    def test_empty_label_forces_zero_confidence(self):
        result = ClassificationResult.of("", 0.8)
        assert result == EMPTY_RESULT
        assert result.confidence == 0.0
        assert result.is_empty

    def test_of_keeps_label(self):
        result = ClassificationResult.of("palm", 0.75)
        assert result == ("palm", 0.75)
        assert not result.is_empty


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
