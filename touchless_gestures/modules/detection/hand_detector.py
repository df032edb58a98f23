"""
MediaPipe Hands wrapper that yields at most one hand's landmarks per frame.

Requires the optional ``live`` extra (mediapipe, opencv-python).
"""

import logging
from typing import List, Optional

import numpy as np
import mediapipe as mp

from touchless_gestures.core.types import LandmarkPoint

logger = logging.getLogger(__name__)


class HandDetector:
    """Single-hand MediaPipe detector producing LandmarkPoint lists."""

    def __init__(self, config: dict):
        self._model_complexity = config.get("model_complexity", 0)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._mp_hands = mp.solutions.hands
        self._hands = None

    def initialize(self):
        """Initialize MediaPipe Hands solution."""
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            model_complexity=self._model_complexity,
            max_num_hands=1,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        logger.info(
            "MediaPipe Hands initialized (complexity=%d, detect_conf=%.2f, track_conf=%.2f)",
            self._model_complexity, self._min_detect_conf, self._min_track_conf,
        )

    def detect(self, rgb_frame: np.ndarray) -> Optional[List[LandmarkPoint]]:
        """Run hand detection on an RGB frame.

        Returns:
            21 LandmarkPoints for the first hand, or None if no hand
        """
        if self._hands is None:
            self.initialize()

        rgb_frame.flags.writeable = False
        results = self._hands.process(rgb_frame)
        rgb_frame.flags.writeable = True

        if not results or not results.multi_hand_landmarks:
            return None
        hand = results.multi_hand_landmarks[0]
        return [LandmarkPoint(lm.x, lm.y, lm.z) for lm in hand.landmark]

    def close(self):
        """Release MediaPipe resources."""
        if self._hands is not None:
            self._hands.close()
            self._hands = None
            logger.info("MediaPipe Hands closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
