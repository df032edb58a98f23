"""
Shared fixtures and fakes for the gesture pipeline tests.
"""

import json

import numpy as np
import pytest

from touchless_gestures.core.events import EventBus
from touchless_gestures.core.types import EMPTY_RESULT, ClassificationResult, LandmarkPoint
from touchless_gestures.models.gesture_classifier import GestureClassifier
from touchless_gestures.models.label_config import LabelConfig
from touchless_gestures.modules.utils.config import Config


class FakeEngine:
    """Inference engine returning fixed probabilities and recording inputs."""

    def __init__(self, probs, input_width=63):
        self.probs = np.asarray(probs, dtype=np.float32)
        self.input_width = input_width
        self.output_width = len(self.probs)
        self.inputs = []
        self.closed = False

    def predict_proba(self, features):
        self.inputs.append(np.array(features, copy=True))
        return self.probs

    def close(self):
        self.closed = True


class ScriptedClassifier:
    """Stands in for GestureClassifier, replaying a fixed result sequence."""

    def __init__(self, results):
        self._results = list(results)
        self.calls = 0
        self.features = []

    def classify(self, features):
        self.features.append(features)
        self.calls += 1
        if not self._results:
            return EMPTY_RESULT
        return self._results.pop(0)


def results(*pairs):
    """[("like", 0.9), ...] -> ClassificationResults."""
    return [ClassificationResult.of(label, conf) for label, conf in pairs]


def make_ready_classifier(probs, labels, mean=None, std=None, input_width=63):
    engine = FakeEngine(probs, input_width=input_width)
    label_config = LabelConfig(
        tuple(labels),
        None if mean is None else np.asarray(mean, dtype=np.float32),
        None if std is None else np.asarray(std, dtype=np.float32),
    )
    classifier = GestureClassifier(
        {"model_path": "fake.npz", "labels_path": "fake.json"},
        engine_loader=lambda *args: engine,
        label_loader=lambda path: label_config,
    )
    assert classifier.wait_until_ready(timeout=5)
    return classifier, engine


def hand(n=21, x=0.5, y=0.5, z=0.0):
    """A trivial hand: n identical landmark points."""
    return [LandmarkPoint(x, y, z) for _ in range(n)]


def write_mlp(path, layers, output_activation=None):
    """Save [(weight, bias), ...] as a numpy MLP archive."""
    arrays = {}
    for i, (weight, bias) in enumerate(layers):
        arrays["weight_%d" % i] = np.asarray(weight, dtype=np.float32)
        arrays["bias_%d" % i] = np.asarray(bias, dtype=np.float32)
    if output_activation is not None:
        arrays["output_activation"] = np.array(output_activation)
    np.savez(path, **arrays)
    return str(path)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def clean_singletons():
    """Event bus and config are process-wide singletons."""
    EventBus().reset()
    Config.reset()
    yield
    EventBus().reset()
    Config.reset()


@pytest.fixture
def bus():
    return EventBus()
