"""Individual boid entity with position, velocity, and per-tick update."""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import NamedTuple, Sequence

from config import boids as config
from .leadership import LeaderState
from .vector import clamp_length, norm, zero


class Orientation(NamedTuple):
    """Heading derived from velocity (radians)."""
    yaw: float
    pitch: float


class BoidSnapshot(NamedTuple):
    """Frozen view of a boid, taken before any boid moves in a tick."""
    id: int
    position: np.ndarray
    velocity: np.ndarray
    is_leader: bool


def orientation_from_velocity(velocity: np.ndarray) -> Orientation:
    """Yaw about the world y-axis and pitch away from +y, from velocity alone."""
    vx, vy, vz = float(velocity[0]), float(velocity[1]), float(velocity[2])
    yaw = math.atan2(-vz, vx)
    pitch = math.atan2(math.hypot(vx, vz), vy)
    return Orientation(yaw, pitch)


@dataclass
class Boid:
    """
    A single boid (bird-oid object) in the simulation.

    Attributes:
        id: Stable id, unique for the boid's lifetime
        position: 3D position vector
        velocity: 3D velocity vector
        random_bias: Slowly drifting random velocity offset
        leadership: Leader role state
    """
    id: int
    position: np.ndarray = field(default_factory=zero)
    velocity: np.ndarray = field(default_factory=zero)
    random_bias: np.ndarray = field(default_factory=zero)
    leadership: LeaderState = field(default_factory=LeaderState)

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)
        self.velocity = np.array(self.velocity, dtype=np.float64)
        self.random_bias = np.array(self.random_bias, dtype=np.float64)

    @property
    def orientation(self) -> Orientation:
        return orientation_from_velocity(self.velocity)

    @property
    def speed(self) -> float:
        return norm(self.velocity)

    @property
    def is_leader(self) -> bool:
        return self.leadership.is_leader

    def snapshot(self) -> BoidSnapshot:
        return BoidSnapshot(self.id, self.position.copy(), self.velocity.copy(), self.is_leader)

    def update_and_move(self, rules: Sequence, context, max_speed: float, rng: np.random.Generator):
        """
        Run one tick for this boid.

        Order: sum rule vectors into velocity, cap speed, add random bias,
        move, so displacement per tick is at most max_speed + |random_bias|.
        """
        for rule in rules:
            self.velocity += rule.calculate_vector(self, context)

        self.cap_speed(max_speed)

        params = context.params
        self.add_randomness(params.randomness_per_timestep, params.randomness_limit, rng)

        self.move()

    def cap_speed(self, max_speed: float):
        """Rescale velocity to max_speed if it is faster, keeping direction."""
        self.velocity = clamp_length(self.velocity, max_speed)

    def add_randomness(self, per_timestep: float, limit: float, rng: np.random.Generator):
        self.update_random_bias(per_timestep, limit, rng)
        self.velocity += self.random_bias

    def update_random_bias(self, per_timestep: float, limit: float, rng: np.random.Generator):
        """
        Drift the random bias by a uniform step in [-per_timestep/2, per_timestep/2].

        Once the bias is longer than `limit` it is divided by 100 rather
        than clamped, so it restarts from a tiny value.
        """
        self.random_bias += rng.uniform(-per_timestep / 2, per_timestep / 2, 3)
        if norm(self.random_bias) > limit:
            self.random_bias /= config.RANDOMNESS["reset_divisor"]

    def move(self):
        self.position += self.velocity
