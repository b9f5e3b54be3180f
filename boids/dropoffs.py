"""Distance dropoff functions used to weight neighbour influence."""

import math
from typing import Dict, Type

from .errors import ParameterOutOfBoundsError, UnknownDropoffError

# Smallest distance used by the inverse-proportional dropoff
EPSILON = 1e-6


class Dropoff:
    """
    Maps a neighbour distance to a non-negative influence weight.

    Attributes:
        key: Registry name used by the configuration surface
        name: Human readable name
        constant: Tunable constant, bounded by [min_const, max_const]
    """
    key = ""
    name = ""
    min_const = 0.0
    max_const = 1.0

    def __init__(self, constant: float):
        self.constant = constant

    @property
    def constant(self) -> float:
        return self._constant

    @constant.setter
    def constant(self, value: float):
        if not (self.min_const <= value <= self.max_const):
            raise ParameterOutOfBoundsError(
                f"{self.key}.constant", value, (self.min_const, self.max_const)
            )
        self._constant = float(value)

    def evaluate(self, distance: float) -> float:
        raise NotImplementedError

    def __call__(self, distance: float) -> float:
        return self.evaluate(distance)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.constant})"


class NoDropoff(Dropoff):
    """Uniform weighting regardless of distance."""
    key = "none"
    name = "No dropoff"
    min_const = 0.0
    max_const = 10.0

    def evaluate(self, distance: float) -> float:
        return self.constant


class ExponentialDropoff(Dropoff):
    """Weight base^-distance; strongly favours near neighbours as base grows."""
    key = "exponential"
    name = "Exponential"
    min_const = 1.0
    max_const = 10.0

    def evaluate(self, distance: float) -> float:
        return math.pow(self.constant, -distance)


class InverseProportionalDropoff(Dropoff):
    """Weight constant / distance, with distance floored at EPSILON."""
    key = "inverse"
    name = "Inverse proportional"
    min_const = 0.0
    max_const = 10.0

    def evaluate(self, distance: float) -> float:
        return self.constant / max(distance, EPSILON)


class ProportionalDropoff(Dropoff):
    """Linear falloff reaching exactly zero at the visibility radius."""
    key = "proportional"
    name = "Proportional"
    min_const = 0.0
    max_const = 10.0

    def __init__(self, visibility_radius: float, constant: float):
        super().__init__(constant)
        self.visibility_radius = float(visibility_radius)

    def evaluate(self, distance: float) -> float:
        if self.visibility_radius <= 0.0 or distance >= self.visibility_radius:
            return 0.0
        return self.constant * (1.0 - distance / self.visibility_radius)

    def __repr__(self):
        return f"ProportionalDropoff({self.visibility_radius}, {self.constant})"


DROPOFF_TYPES: Dict[str, Type[Dropoff]] = {
    cls.key: cls
    for cls in (NoDropoff, ExponentialDropoff, InverseProportionalDropoff, ProportionalDropoff)
}


def dropoff_class(key: str) -> Type[Dropoff]:
    try:
        return DROPOFF_TYPES[key]
    except KeyError:
        raise UnknownDropoffError(key, DROPOFF_TYPES) from None


def make_dropoff(key: str, constant: float, visibility_radius: float) -> Dropoff:
    """
    Build the dropoff selected by name.

    The proportional dropoff takes its radius from the current visibility
    threshold, so it is rebuilt whenever that changes.
    """
    cls = dropoff_class(key)
    if cls is ProportionalDropoff:
        return ProportionalDropoff(visibility_radius, constant)
    return cls(constant)
