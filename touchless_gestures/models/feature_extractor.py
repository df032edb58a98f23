"""
Feature normalization: detector landmarks -> model feature vector.

Feature layout (expected_points * 3 dimensions, landmark-major):
    [3i + 0]  x of landmark i
    [3i + 1]  y of landmark i
    [3i + 2]  z of landmark i

Order of operations is fixed: flatten, then rotate.
"""

import math
from collections.abc import Mapping

import numpy as np

from touchless_gestures.core.types import HAND_POINTS

# Rotation pivot in the unit image plane
CENTER = np.float32(0.5)


def _coords(point):
    """(x, y, z) of a landmark object (.x/.y/.z), a mapping or a 3-sequence.

    Raises:
        ValueError: if the coordinates cannot be read as numbers
    """
    try:
        if hasattr(point, "x"):
            x, y, z = point.x, point.y, getattr(point, "z", 0.0)
        elif isinstance(point, Mapping):
            x, y, z = point["x"], point["y"], point.get("z", 0.0)
        else:
            x, y, z = point[0], point[1], point[2] if len(point) > 2 else 0.0
        return float(x), float(y), float(z)
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise ValueError("Unreadable landmark %r: %s" % (point, e))


def flatten(points, expected_count=HAND_POINTS):
    """Flatten landmarks into a vector of length ``expected_count * 3``.

    Missing trailing points are zero-filled; points beyond
    ``expected_count`` are ignored. Short input is not an error.

    Args:
        points: Sequence of landmarks (LandmarkPoint, MediaPipe landmarks,
                {"x", "y", "z"} mappings or (x, y, z) sequences). ``None`` is treated as empty.
        expected_count: Number of landmarks the model expects

    Returns:
        np.ndarray of shape (expected_count * 3,), dtype float32

    Raises:
        ValueError: if a landmark or coordinate cannot be read
    """
    out = np.zeros(expected_count * 3, dtype=np.float32)
    if points is None:
        return out
    for i, point in enumerate(points):
        if i >= expected_count:
            break
        out[i * 3:i * 3 + 3] = _coords(point)
    return out


def rotate_around_center(vector, degrees):
    """Rotate every landmark's (x, y) about (0.5, 0.5); z is preserved.

    Corrects a fixed mismatch between the detector's expected orientation
    and the physical camera mount (e.g. a sensor rotated 90 degrees).

    Args:
        vector: Flat feature vector (length divisible by 3)
        degrees: Rotation angle in degrees, counter-clockwise positive

    Returns:
        New rotated float32 vector, or ``vector`` itself when degrees == 0
    """
    if degrees == 0:
        return vector

    angle = math.radians(degrees)
    c = np.float32(math.cos(angle))
    s = np.float32(math.sin(angle))

    points = np.asarray(vector, dtype=np.float32).reshape(-1, 3)
    x = points[:, 0] - CENTER
    y = points[:, 1] - CENTER

    corrected = np.empty_like(points)
    corrected[:, 0] = (x * c - y * s) + CENTER
    corrected[:, 1] = (x * s + y * c) + CENTER
    corrected[:, 2] = points[:, 2]
    return corrected.ravel()


def normalize_landmarks(points, rotation_degrees=0, expected_count=HAND_POINTS):
    """Flatten then rotate: the full normalizer in its fixed order."""
    return rotate_around_center(flatten(points, expected_count), rotation_degrees)
