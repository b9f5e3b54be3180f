"""Summary statistics of a flock's state."""

from typing import NamedTuple

import numpy as np


class FlockStats(NamedTuple):
    tick: int
    count: int
    leaders: int
    mean_speed: float
    polarisation: float
    centroid: np.ndarray
    mean_nearest_neighbour_distance: float


def mean_speed(velocities: np.ndarray) -> float:
    if len(velocities) == 0:
        return 0.0
    return float(np.linalg.norm(velocities, axis=1).mean())


def polarisation(velocities: np.ndarray) -> float:
    """
    Length of the mean unit heading: 1 when all boids fly the same way,
    near 0 when headings cancel out. Stationary boids are ignored.
    """
    speeds = np.linalg.norm(velocities, axis=1) if len(velocities) else np.zeros(0)
    moving = speeds > 0
    if not moving.any():
        return 0.0
    headings = velocities[moving] / speeds[moving, None]
    return float(np.linalg.norm(headings.mean(axis=0)))


def centroid(positions: np.ndarray) -> np.ndarray:
    if len(positions) == 0:
        return np.zeros(3)
    return positions.mean(axis=0)


def mean_nearest_neighbour_distance(positions: np.ndarray) -> float:
    """Average distance from each boid to its closest other boid (0 if < 2 boids)."""
    if len(positions) < 2:
        return 0.0
    offsets = positions[None, :, :] - positions[:, None, :]
    dist = np.linalg.norm(offsets, axis=2)
    np.fill_diagonal(dist, np.inf)
    return float(dist.min(axis=1).mean())


def summarise(flock) -> FlockStats:
    positions = flock.positions
    velocities = flock.velocities
    return FlockStats(
        tick=flock.tick_count,
        count=flock.num_boids,
        leaders=len(flock.leaders()),
        mean_speed=mean_speed(velocities),
        polarisation=polarisation(velocities),
        centroid=centroid(positions),
        mean_nearest_neighbour_distance=mean_nearest_neighbour_distance(positions),
    )
