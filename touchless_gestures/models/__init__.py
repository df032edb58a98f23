"""
Model package for gesture classification.

Provides:
    - feature_extractor: Landmarks -> flattened, rotated feature vector
    - label_config: Label list / normalization file loading
    - inference: Numpy MLP and PyTorch inference engines
    - GestureNet: PyTorch MLP definition for checkpoints (optional)
    - GestureClassifier: Lazily loaded, shareable classifier
"""

__all__ = [
    "GestureClassifier",
    "ModelState",
    "flatten",
    "rotate_around_center",
    "normalize_landmarks",
]

from .feature_extractor import flatten, normalize_landmarks, rotate_around_center
from .gesture_classifier import GestureClassifier, ModelState
