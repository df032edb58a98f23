"""
Multi-frame majority voting for gesture stability.

Each processed frame contributes one vote to a fixed-size window.
Low-confidence frames vote for "no gesture" rather than for whatever
label they happened to carry, so a burst of weak frames dilutes the
agreement ratio instead of being silently dropped.
"""

import math
import logging
from collections import Counter, deque

from touchless_gestures.core.types import EMPTY_RESULT, ClassificationResult

logger = logging.getLogger(__name__)


class TemporalSmoother:
    """Turns noisy per-frame classifications into a stable gesture signal.

    One instance per session; the window is never shared.

    Tie-break: when two labels have the same vote count, the
    lexicographically smallest label wins.
    """

    def __init__(self, config: dict, classifier=None):
        """
        Args:
            config: ``smoothing`` section from config.yaml
            classifier: optional GestureClassifier used by
                        :meth:`classify_with_smoothing`
        """
        self._window_size = int(config.get("window_size", 10))
        self._majority_threshold = float(config.get("majority_threshold", 0.6))
        self._min_confidence = float(config.get("min_confidence", 0.5))

        if self._window_size < 1:
            raise ValueError("window_size must be >= 1, got %d" % self._window_size)
        for name, value in (("majority_threshold", self._majority_threshold),
                            ("min_confidence", self._min_confidence)):
            if not 0.0 <= value <= 1.0:
                raise ValueError("%s must be in [0, 1], got %r" % (name, value))

        self._min_history = math.ceil(self._window_size / 2)
        self._window = deque(maxlen=self._window_size)
        self._classifier = classifier

    def classify_with_smoothing(self, features) -> ClassificationResult:
        """Classify one frame with the attached classifier, then smooth."""
        if self._classifier is None:
            raise RuntimeError("TemporalSmoother has no classifier attached")
        return self.update(self._classifier.classify(features))

    def update(self, raw: ClassificationResult) -> ClassificationResult:
        """Add one frame's raw result and return the smoothed decision."""
        # NaN confidence counts as "no gesture"
        if raw.is_empty or not raw.confidence >= self._min_confidence:
            self._window.append(EMPTY_RESULT)
        else:
            self._window.append(raw)

        if len(self._window) < self._min_history:
            logger.debug("Building history: %d/%d", len(self._window), self._window_size)
            return EMPTY_RESULT

        valid = [r for r in self._window if not r.is_empty]
        if not valid:
            return EMPTY_RESULT

        counts = Counter(r.label for r in valid)
        top_label, top_count = min(counts.items(), key=lambda item: (-item[1], item[0]))

        # Denominator includes the "no gesture" votes
        agreement = top_count / len(self._window)
        if agreement >= self._majority_threshold:
            confidences = [r.confidence for r in valid if r.label == top_label]
            avg_conf = sum(confidences) / len(confidences)
            logger.debug("Smoothed prediction: %s (agreement: %d%%, conf: %d%%)",
                         top_label, int(agreement * 100), int(avg_conf * 100))
            return ClassificationResult(top_label, avg_conf)

        logger.debug("No clear majority: top=%s (%d/%d)", top_label, top_count, len(self._window))
        return EMPTY_RESULT

    def reset_history(self):
        """Clear the vote window. Call whenever the frame source restarts."""
        self._window.clear()
        logger.debug("Prediction history cleared")

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def history_length(self) -> int:
        return len(self._window)

    @property
    def window_fill(self) -> float:
        """How full the window is (0.0 - 1.0)."""
        return len(self._window) / self._window_size
