"""
Model-backed gesture classifier with lazy, non-blocking initialization.

One instance is meant to be shared by every session in the process. The
model, labels and normalization arrays are written exactly once by the
loader thread and are read-only afterwards, so steady-state classification
takes no lock.

States:
    UNINITIALIZED -> PENDING -> READY
                             -> FAILED   (sticky, no retry)
"""

import logging
import threading
from enum import Enum

import numpy as np

from touchless_gestures.core.events import EventBus, Events
from touchless_gestures.core.types import EMPTY_RESULT, ClassificationResult
from touchless_gestures.models.inference import load_engine
from touchless_gestures.models.label_config import load_label_config

logger = logging.getLogger(__name__)


class ModelState(Enum):
    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class GestureClassifier:
    """Maps a feature vector to (label, confidence) via a pre-trained model.

    Usage::

        classifier = GestureClassifier(config.classifier)
        result = classifier.classify(features)   # EMPTY_RESULT until loaded
    """

    def __init__(self, config: dict, engine_loader=None, label_loader=None, event_bus=None):
        """
        Args:
            config: ``classifier`` section from config.yaml
            engine_loader: callable(model_path, backend, num_threads) -> engine;
                           defaults to :func:`load_engine`
            label_loader: callable(labels_path) -> LabelConfig;
                          defaults to :func:`load_label_config`
            event_bus: bus notified when loading finishes
        """
        self._model_path = config.get("model_path", "assets/hand_model.npz")
        self._labels_path = config.get("labels_path", "assets/hand_labels.json")
        self._backend = config.get("backend", "auto")
        self._num_threads = config.get("num_threads", 4)

        self._engine_loader = engine_loader or load_engine
        self._label_loader = label_loader or load_label_config
        self._bus = event_bus or EventBus()

        self._state = ModelState.UNINITIALIZED
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._loader_thread = None

        # Written once by the loader thread before READY is published
        self._engine = None
        self._label_config = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self):
        """Start loading in the background. Safe to call any number of times."""
        if self._state is not ModelState.UNINITIALIZED:
            return
        with self._lock:
            if self._state is not ModelState.UNINITIALIZED:
                return
            self._state = ModelState.PENDING
            self._loader_thread = threading.Thread(target=self._load, name="classifier-init", daemon=True)
            self._loader_thread.start()
        logger.debug("Classifier initialization scheduled")

    def _load(self):
        engine = None
        try:
            engine = self._engine_loader(self._model_path, self._backend, self._num_threads)
            label_config = self._label_loader(self._labels_path)
            if not label_config.labels:
                raise ValueError("Label file has no class names: %s" % self._labels_path)
        except Exception:
            logger.exception("Classifier initialization failed (model=%s, labels=%s)",
                             self._model_path, self._labels_path)
            if engine is not None:
                engine.close()
            with self._lock:
                self._state = ModelState.FAILED
            self._bus.emit(Events.CLASSIFIER_FAILED, model_path=self._model_path)
            self._done.set()
            return

        if engine.output_width != len(label_config.labels):
            logger.warning("Model has %d outputs but %d labels were loaded",
                           engine.output_width, len(label_config.labels))

        with self._lock:
            if self._state is not ModelState.PENDING:
                # close() won the race
                engine.close()
                return
            self._engine = engine
            self._label_config = label_config
            self._state = ModelState.READY
        logger.info("GestureClassifier initialized with %d labels", len(label_config.labels))
        self._bus.emit(Events.CLASSIFIER_READY, labels=label_config.labels)
        self._done.set()

    def wait_until_ready(self, timeout=None) -> bool:
        """Trigger loading and block until it finishes (integrators/tests only).

        Returns:
            True if the classifier is READY
        """
        self.initialize()
        self._done.wait(timeout)
        return self._state is ModelState.READY

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ModelState.READY

    @property
    def labels(self) -> tuple:
        return self._label_config.labels if self._label_config is not None else ()

    @property
    def input_width(self):
        """Features expected by the model, or None before loading."""
        return self._engine.input_width if self._engine is not None else None

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify(self, features) -> ClassificationResult:
        """Classify one feature vector.

        Never blocks on loading and never raises: until the model is ready,
        and on any inference failure, the empty result is returned.
        """
        if self._state is not ModelState.READY:
            self.initialize()
            logger.debug("Classifier not ready (%s); returning empty result", self._state.value)
            return EMPTY_RESULT

        engine = self._engine
        label_config = self._label_config
        try:
            inputs = self._prepare_inputs(features, engine.input_width, label_config)
            probs = np.asarray(engine.predict_proba(inputs), dtype=np.float32).ravel()
            if probs.size == 0:
                return EMPTY_RESULT

            # np.argmax returns the first index on ties
            best = int(np.argmax(probs))
            confidence = float(probs[best])
            if not np.isfinite(confidence):
                return EMPTY_RESULT
            return ClassificationResult.of(label_config.label_at(best), confidence)
        except Exception:
            logger.exception("Error during classification")
            return EMPTY_RESULT

    @staticmethod
    def _prepare_inputs(features, width, label_config):
        """Fit features to the model width and apply mean/std where defined."""
        raw = np.asarray(features, dtype=np.float32).ravel()
        inputs = np.zeros(width, dtype=np.float32)
        n = min(width, raw.size)
        inputs[:n] = raw[:n]

        if label_config.has_normalization:
            mean = label_config.feature_mean
            std = label_config.feature_std
            m = min(width, mean.size, std.size)
            head = inputs[:m]
            nonzero = std[:m] != 0
            head[nonzero] = (head[nonzero] - mean[:m][nonzero]) / std[:m][nonzero]
        return inputs

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self):
        """Release the engine. The classifier stays unusable afterwards."""
        with self._lock:
            engine = self._engine
            self._engine = None
            self._state = ModelState.FAILED
            self._done.set()

        if engine is not None:
            try:
                engine.close()
            except Exception:
                logger.exception("Error closing inference engine")
        logger.info("GestureClassifier closed")
