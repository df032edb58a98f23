"""
Label / normalization resource loading.

Two JSON shapes are supported, selected by the top-level type:

    ["call", "like", ...]                        labels only
    {"class_names": [...],
     "feature_mean": [...], "feature_std": [...]} labels + normalization
"""

import json
import logging
from typing import NamedTuple, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class LabelConfig(NamedTuple):
    """Ordered label set plus optional per-feature mean/std."""
    labels: Tuple[str, ...]
    feature_mean: Optional[np.ndarray] = None
    feature_std: Optional[np.ndarray] = None

    @property
    def has_normalization(self) -> bool:
        return self.feature_mean is not None and self.feature_std is not None

    def label_at(self, index: int) -> str:
        """Label for an output index, or "" when out of range."""
        if 0 <= index < len(self.labels):
            return self.labels[index]
        return ""


def _as_array(values, name):
    if values is None:
        return None
    arr = np.asarray(values, dtype=np.float32).ravel()
    # Read-only so a shared classifier cannot be mutated by a session
    arr.flags.writeable = False
    logger.debug("Loaded %s (%d values)", name, arr.size)
    return arr


def parse_label_config(data) -> LabelConfig:
    """Build a LabelConfig from already-decoded JSON data.

    Raises:
        ValueError: if the top-level shape is neither a list nor an object
    """
    if isinstance(data, list):
        return LabelConfig(labels=tuple(str(name) for name in data))

    if isinstance(data, dict):
        names = data.get("class_names") or []
        return LabelConfig(
            labels=tuple(str(name) for name in names),
            feature_mean=_as_array(data.get("feature_mean"), "feature_mean"),
            feature_std=_as_array(data.get("feature_std"), "feature_std"),
        )

    raise ValueError("Unsupported label file shape: %s" % type(data).__name__)


def load_label_config(path) -> LabelConfig:
    """Load and parse a label file.

    Raises:
        OSError: if the file cannot be read
        ValueError: if the content is not valid JSON or has an unknown shape
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    config = parse_label_config(data)
    logger.info("Loaded %d labels from %s (normalization: %s)",
                len(config.labels), path, "yes" if config.has_normalization else "no")
    return config
