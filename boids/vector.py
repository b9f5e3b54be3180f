"""Small 3D vector helpers on top of numpy."""

import math
import numpy as np


def zero() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


def norm(v: np.ndarray) -> float:
    return math.sqrt(float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2]))


def normalise(v: np.ndarray) -> np.ndarray:
    """Unit vector in the direction of v, or the zero vector if v has no length."""
    length = norm(v)
    if length == 0.0:
        return zero()
    return v / length


def set_length(v: np.ndarray, length: float) -> np.ndarray:
    """Rescale v to the given length, keeping its direction."""
    return normalise(v) * length


def clamp_length(v: np.ndarray, max_length: float) -> np.ndarray:
    """Return v, rescaled to max_length if it is longer."""
    length = norm(v)
    if length > max_length:
        return v * (max_length / length)
    return v


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Angle between a and b in degrees; 0 if either has no length."""
    len_a, len_b = norm(a), norm(b)
    if len_a == 0.0 or len_b == 0.0:
        return 0.0
    cosine = float(np.dot(a, b)) / (len_a * len_b)
    return math.degrees(math.acos(max(-1.0, min(1.0, cosine))))
