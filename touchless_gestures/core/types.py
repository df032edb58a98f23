"""
Shared domain types for the gesture recognition pipeline.

Centralizes enums, value objects, and the gesture -> action mapping used
across modules to eliminate circular imports and ensure type consistency.
"""

import types
from enum import Enum
from typing import Dict, Mapping, NamedTuple, Optional


# =============================================================================
# Landmarks
# =============================================================================

HAND_POINTS = 21
HAND_FEATURES = HAND_POINTS * 3


class LandmarkPoint(NamedTuple):
    """One detector keypoint in normalized image space (x, y in [0, 1])."""
    x: float
    y: float
    z: float = 0.0


def normalize_label(label: str) -> str:
    """Canonical form used for every label comparison."""
    return label.strip().lower()


# =============================================================================
# Gesture Types
# =============================================================================

class HandGestureType(Enum):
    """Hand gestures known to the bundled model."""
    CALL = "call"
    LIKE = "like"
    DISLIKE = "dislike"
    FIST = "fist"
    PALM = "palm"
    PEACE = "peace"
    ROCK = "rock"
    NONE = "none"

    @classmethod
    def from_label(cls, label: str) -> 'HandGestureType':
        """Convert a classifier label to HandGestureType, safely."""
        try:
            return cls(normalize_label(label))
        except ValueError:
            return cls.NONE


class GestureAction(Enum):
    """Actions handed to the external action executor."""
    VOICE_ASSISTANT = "Voice assistant"
    INCREASE_VOLUME = "Increase volume"
    DECREASE_VOLUME = "Decrease volume"
    PLAY = "Play"
    PAUSE = "Pause"
    OPEN_CAMERA = "Open camera"
    TAKE_SCREENSHOT = "Screenshot"
    NONE = "None"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> 'GestureAction':
        """Look up an action by enum name ("INCREASE_VOLUME"), safely."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return cls.NONE


# =============================================================================
# Gesture -> Action Mapping
# =============================================================================

DEFAULT_GESTURE_ACTIONS: Dict[str, GestureAction] = {
    "call": GestureAction.VOICE_ASSISTANT,
    "like": GestureAction.INCREASE_VOLUME,
    "dislike": GestureAction.DECREASE_VOLUME,
    "fist": GestureAction.PAUSE,
    "palm": GestureAction.PLAY,
    "peace": GestureAction.OPEN_CAMERA,
    "rock": GestureAction.TAKE_SCREENSHOT,
}


def build_action_map(overrides: Optional[Mapping[str, str]] = None) -> Mapping[str, GestureAction]:
    """Build the read-only label -> action map.

    Args:
        overrides: Optional {label: action_name} entries (e.g. the
                   ``actions`` section of gestures.yaml). Unknown action
                   names map to GestureAction.NONE.
    """
    mapping = dict(DEFAULT_GESTURE_ACTIONS)
    for label, action in (overrides or {}).items():
        if isinstance(action, GestureAction):
            mapping[normalize_label(label)] = action
        else:
            mapping[normalize_label(label)] = GestureAction.from_name(str(action))
    return types.MappingProxyType(mapping)


GESTURE_ACTION_MAP = build_action_map()


def get_action(label: str, action_map: Mapping[str, GestureAction] = GESTURE_ACTION_MAP) -> GestureAction:
    """Resolve a gesture label to its action; unknown labels are a no-op."""
    return action_map.get(normalize_label(label), GestureAction.NONE)


# =============================================================================
# Results
# =============================================================================

class ClassificationResult(NamedTuple):
    """A (label, confidence) pair, single-frame or smoothed.

    An empty label is the "no confident gesture" sentinel and always
    carries confidence 0.
    """
    label: str
    confidence: float

    @classmethod
    def of(cls, label: str, confidence: float) -> 'ClassificationResult':
        if not label:
            return EMPTY_RESULT
        return cls(label, float(confidence))

    @property
    def is_empty(self) -> bool:
        return not self.label


EMPTY_RESULT = ClassificationResult("", 0.0)


class ActionEvent(NamedTuple):
    """Emitted by the dispatch policy when a gesture should fire."""
    action: GestureAction
    label: str
    confidence: float
    timestamp_ms: float

    def __repr__(self):
        return "ActionEvent(%s, label=%s, conf=%.2f)" % (
            self.action.name, self.label, self.confidence)
