"""Tunable simulation parameters, validated against their declared ranges."""

from dataclasses import dataclass, field, fields, replace
from typing import Optional

from config import boids as config
from .dropoffs import dropoff_class
from .errors import ConfigurationError, ParameterOutOfBoundsError

_DROPOFF_FIELDS = ("dropoff_name", "dropoff_constant")


def check_bounds(name: str, value, bounds=None):
    """Raise ParameterOutOfBoundsError if value is outside bounds (or PARAM_BOUNDS[name])."""
    lo, hi = bounds if bounds is not None else config.PARAM_BOUNDS[name]
    if not (lo <= value <= hi):
        raise ParameterOutOfBoundsError(name, value, (lo, hi))


@dataclass
class LeadershipSettings:
    """Tunables for the probabilistic, time-boxed leader role."""
    enabled: bool = False
    neighbour_count_threshold: int = 3
    eccentricity_threshold: float = 0.9
    become_leader_probability: float = 0.002
    max_leader_ticks: int = 200
    peak_speed_multiplier: float = 1.6
    ramp_fraction: float = 0.25
    history_length: int = 20

    def __post_init__(self):
        if self.neighbour_count_threshold < 0:
            raise ConfigurationError("neighbour_count_threshold must be >= 0")
        check_bounds("eccentricity_threshold", self.eccentricity_threshold, (0.0, 1.0))
        check_bounds("become_leader_probability", self.become_leader_probability, (0.0, 1.0))
        if self.max_leader_ticks < 1:
            raise ConfigurationError("max_leader_ticks must be >= 1")
        if self.peak_speed_multiplier < 1.0:
            raise ConfigurationError("peak_speed_multiplier must be >= 1")
        check_bounds("ramp_fraction", self.ramp_fraction, (0.0, 1.0))
        if self.history_length < 2:
            raise ConfigurationError("history_length must be >= 2")

    @classmethod
    def from_config(cls) -> "LeadershipSettings":
        return cls(**config.LEADERS)


@dataclass
class SimulationParams:
    """
    Live configuration surface of a flock.

    Bounded fields are checked on every assignment, so an invalid value
    is reported at the point it is set instead of being clamped.
    The flock reads these values afresh on every tick.
    """
    boid_count: int = config.BOIDS["count"]
    visibility_threshold: float = config.BOIDS["visibility_threshold"]
    angular_threshold: float = config.BOIDS["angular_threshold"]
    max_speed: float = config.BOIDS["max_speed"]
    randomness_per_timestep: float = config.RANDOMNESS["per_timestep"]
    randomness_limit: float = config.RANDOMNESS["limit"]
    world_name: str = config.BOIDS["world"]
    dropoff_name: str = config.DROPOFFS["active"]
    dropoff_constant: float = config.DROPOFFS["constant"]
    leadership: LeadershipSettings = field(default_factory=LeadershipSettings.from_config)
    seed: Optional[int] = config.BOIDS["seed"]

    def __setattr__(self, name, value):
        if name in config.PARAM_BOUNDS:
            check_bounds(name, value)
        if name == "boid_count" and int(value) != value:
            raise ConfigurationError(f"boid_count must be a whole number, got {value!r}")
        # The pair is checked by __post_init__ until both fields exist
        if name in _DROPOFF_FIELDS and all(f in self.__dict__ for f in _DROPOFF_FIELDS):
            pending = {"dropoff_name": self.dropoff_name, "dropoff_constant": self.dropoff_constant}
            pending[name] = value
            self._check_dropoff(pending["dropoff_name"], pending["dropoff_constant"])
        super().__setattr__(name, value)

    def __post_init__(self):
        self._check_dropoff(self.dropoff_name, self.dropoff_constant)

    @staticmethod
    def _check_dropoff(name: str, constant: float):
        cls = dropoff_class(name)
        check_bounds(f"{name}.constant", constant, (cls.min_const, cls.max_const))

    @classmethod
    def from_config(cls, **overrides) -> "SimulationParams":
        """Defaults from config.boids, with keyword overrides."""
        return cls(**overrides)

    def set_dropoff(self, name: str, constant: Optional[float] = None):
        """Select the active dropoff; keeps the current constant if none is given."""
        if constant is None:
            constant = self.dropoff_constant
        self._check_dropoff(name, constant)
        # Already checked as a pair; the old constant may not suit the new dropoff
        super().__setattr__("dropoff_name", name)
        super().__setattr__("dropoff_constant", constant)

    def update(self, **changes):
        """
        Apply several changes at once.

        All values are validated on a copy first, so a bad value leaves
        this object untouched.
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        candidate = replace(self, **changes)
        for name in changes:
            super().__setattr__(name, getattr(candidate, name))
