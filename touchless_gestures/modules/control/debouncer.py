"""
Cooldown + change-detection dispatch policy.

    - A stable gesture fires its action at most once per cooldown window.
    - Switching to a different gesture fires immediately, regardless of
      the cooldown, so the user can chain gestures quickly.
    - Empty labels, sub-threshold confidences and gestures mapped to the
      no-op action never fire and never touch the dispatch state.
"""

import time
import logging
from typing import Mapping, Optional

from touchless_gestures.core.types import (
    GESTURE_ACTION_MAP, ActionEvent, GestureAction, get_action, normalize_label,
)

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


class DispatchPolicy:
    """Decides when a smoothed gesture should fire an action event."""

    def __init__(self, config: dict, action_map: Mapping[str, GestureAction] = GESTURE_ACTION_MAP):
        """
        Args:
            config: ``dispatch`` section from config.yaml
            action_map: read-only label -> GestureAction map
        """
        self._cooldown_ms = float(config.get("cooldown_ms", 5000))
        self._detection_threshold = _clamp01(config.get("detection_confidence", 0.7))
        self._action_map = action_map

        self._last_label = ""
        self._last_dispatch_ms = None  # never dispatched

    @property
    def detection_threshold(self) -> float:
        return self._detection_threshold

    @detection_threshold.setter
    def detection_threshold(self, value: float):
        self._detection_threshold = _clamp01(value)

    @property
    def cooldown_ms(self) -> float:
        return self._cooldown_ms

    @property
    def last_label(self) -> str:
        return self._last_label

    @property
    def last_dispatch_ms(self) -> Optional[float]:
        return self._last_dispatch_ms

    def resolve(self, label: str) -> GestureAction:
        """Action for a label; unknown labels resolve to GestureAction.NONE."""
        return get_action(label, self._action_map)

    def decide(self, label: str, confidence: float, now_ms: float = None) -> Optional[ActionEvent]:
        """Return an ActionEvent if the gesture should fire now, else None.

        Args:
            label: Smoothed gesture label ("" for none)
            confidence: Smoothed confidence
            now_ms: Current time in milliseconds (defaults to wall clock)
        """
        if not label or not confidence >= self._detection_threshold:
            return None

        action = self.resolve(label)
        if action is GestureAction.NONE:
            return None

        if now_ms is None:
            now_ms = time.time() * 1000

        key = normalize_label(label)
        is_new_label = key != self._last_label
        cooldown_expired = (self._last_dispatch_ms is None
                            or (now_ms - self._last_dispatch_ms) >= self._cooldown_ms)
        if not is_new_label and not cooldown_expired:
            return None

        self._last_label = key
        self._last_dispatch_ms = now_ms
        logger.info("Gesture: %s (%d%%) -> %s", label, int(confidence * 100), action.name)
        return ActionEvent(action, label, float(confidence), now_ms)

    def reset(self):
        """Forget the last dispatch (full cooldown reset)."""
        self._last_label = ""
        self._last_dispatch_ms = None
        logger.debug("Dispatch state cleared")
