"""
Per-session gesture pipeline.

Architecture:
    landmarks -> feature_extractor (flatten, rotate)
    -> GestureClassifier (shared) -> TemporalSmoother (per session)
    -> DispatchPolicy (per session) -> ActionEvent on the EventBus

Each frame is processed to completion before the next one is accepted.
Several sessions (e.g. a live preview and a background service) can share
one classifier; each owns its own vote window and cooldown state.
"""

import logging
import threading
from typing import Optional

from touchless_gestures.core.events import EventBus, Events
from touchless_gestures.core.types import (
    EMPTY_RESULT, GESTURE_ACTION_MAP, HAND_POINTS, ActionEvent, ClassificationResult,
    build_action_map,
)
from touchless_gestures.models.feature_extractor import normalize_landmarks
from touchless_gestures.modules.control.debouncer import DispatchPolicy
from touchless_gestures.modules.recognition.temporal_filter import TemporalSmoother
from touchless_gestures.modules.utils.logger import log_timing

logger = logging.getLogger(__name__)


class GestureSession:
    """Drives one frame source through normalize -> classify -> smooth -> dispatch.

    Usage::

        session = GestureSession(classifier, config_sections, name="foreground")
        event = session.process_landmarks(points)   # None or ActionEvent
    """

    def __init__(self, classifier, config: dict = None, name: str = "default",
                 action_map=GESTURE_ACTION_MAP, event_bus=None):
        """
        Args:
            classifier: shared GestureClassifier
            config: dict with optional ``features``, ``smoothing``,
                    ``dispatch`` and ``session`` sections
            name: session name attached to emitted events
            action_map: label -> GestureAction map for the dispatch policy
            event_bus: bus for pipeline events (defaults to the app bus)
        """
        config = config or {}
        features_cfg = config.get("features", {})
        session_cfg = config.get("session", {})

        self._name = name
        self._classifier = classifier
        self._bus = event_bus or EventBus()

        self._expected_points = int(features_cfg.get("expected_points", HAND_POINTS))
        self._rotation_degrees = int(features_cfg.get("rotation_degrees", 0))
        self._hand_enabled = bool(session_cfg.get("hand_enabled", True))
        self._reset_cooldown_on_reset = bool(session_cfg.get("reset_cooldown_on_reset", False))

        self._smoother = TemporalSmoother(config.get("smoothing", {}), classifier=classifier)
        self._policy = DispatchPolicy(config.get("dispatch", {}), action_map=action_map)

        # Serializes frames and resets of this session only
        self._lock = threading.RLock()
        self._hand_present = False
        self._last_smoothed = EMPTY_RESULT
        self._frame_count = 0

    @classmethod
    def from_config(cls, classifier, config, name="default", event_bus=None):
        """Build a session from a loaded :class:`Config`."""
        sections = {
            "features": config.features,
            "smoothing": config.smoothing,
            "dispatch": config.dispatch,
            "session": config.session,
        }
        return cls(classifier, sections, name=name,
                   action_map=build_action_map(config.actions), event_bus=event_bus)

    @log_timing
    def process_landmarks(self, points, now_ms: float = None) -> Optional[ActionEvent]:
        """Process one frame's landmarks (or None when no hand was found).

        Returns:
            ActionEvent if this frame should fire an action, else None
        """
        with self._lock:
            self._frame_count += 1
            if not self._hand_enabled:
                return None

            if points is None or len(points) == 0:
                if self._hand_present:
                    self._hand_present = False
                    self._bus.emit(Events.HAND_LOST, session=self._name)
                self._last_smoothed = EMPTY_RESULT
                return None

            if not self._hand_present:
                self._hand_present = True
                self._bus.emit(Events.HAND_DETECTED, session=self._name)

            try:
                features = normalize_landmarks(points, self._rotation_degrees, self._expected_points)
            except (TypeError, ValueError, IndexError, KeyError) as e:
                logger.warning("Dropping malformed landmark frame: %s", e)
                return None

            smoothed = self._smoother.classify_with_smoothing(features)
            self._last_smoothed = smoothed
            if not smoothed.is_empty:
                self._bus.emit(Events.GESTURE_STABLE, session=self._name,
                               label=smoothed.label, confidence=smoothed.confidence)

            event = self._policy.decide(smoothed.label, smoothed.confidence, now_ms)
            if event is not None:
                self._bus.emit(Events.ACTION_REQUESTED, session=self._name, event=event)
            return event

    def reset(self, reset_cooldown: bool = None):
        """Session boundary (camera restart, foreground/background switch).

        Always clears the vote window. The cooldown survives unless
        ``reset_cooldown`` (or the ``session.reset_cooldown_on_reset``
        setting when not given) is true.
        """
        if reset_cooldown is None:
            reset_cooldown = self._reset_cooldown_on_reset
        with self._lock:
            self._smoother.reset_history()
            if reset_cooldown:
                self._policy.reset()
            self._hand_present = False
            self._last_smoothed = EMPTY_RESULT
        logger.info("Session '%s' reset (cooldown %s)", self._name,
                    "cleared" if reset_cooldown else "kept")
        self._bus.emit(Events.SESSION_RESET, session=self._name, cooldown_cleared=reset_cooldown)

    @property
    def name(self) -> str:
        return self._name

    @property
    def last_smoothed(self) -> ClassificationResult:
        """Latest smoothed (label, confidence), for live UI feedback."""
        return self._last_smoothed

    @property
    def hand_enabled(self) -> bool:
        return self._hand_enabled

    @hand_enabled.setter
    def hand_enabled(self, enabled: bool):
        self._hand_enabled = bool(enabled)

    @property
    def detection_threshold(self) -> float:
        return self._policy.detection_threshold

    @detection_threshold.setter
    def detection_threshold(self, value: float):
        self._policy.detection_threshold = value

    @property
    def smoother(self) -> TemporalSmoother:
        return self._smoother

    @property
    def policy(self) -> DispatchPolicy:
        return self._policy

    @property
    def frame_count(self) -> int:
        return self._frame_count
