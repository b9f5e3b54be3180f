"""Probabilistic, time-boxed leader role for individual boids."""

import logging
from collections import deque
from enum import Enum

import numpy as np

from .params import LeadershipSettings

logger = logging.getLogger(__name__)


class Role(Enum):
    FOLLOWER = "follower"
    LEADER = "leader"


def path_eccentricity(points) -> float:
    """
    Straightness of a path: net displacement divided by distance travelled.

    1.0 for a straight line, near 0 for a loop. Returns 0 when there are
    fewer than two points or the path has no length.
    """
    if len(points) < 2:
        return 0.0
    path = np.asarray(points, dtype=np.float64)
    travelled = float(np.linalg.norm(np.diff(path, axis=0), axis=1).sum())
    if travelled == 0.0:
        return 0.0
    return float(np.linalg.norm(path[-1] - path[0])) / travelled


class LeaderState:
    """
    Per-boid leadership bookkeeping.

    Attributes:
        role: Current role
        ticks_remaining: Countdown until a leader steps down
        tenure: Length of the current (or last) leadership, in ticks
        positions: Recent positions, used for eccentricity
        neighbour_counts: Recent neighbour counts
    """

    def __init__(self, history_length: int = 20):
        self.role = Role.FOLLOWER
        self.ticks_remaining = 0
        self.tenure = 0
        self.positions = deque(maxlen=history_length)
        self.neighbour_counts = deque(maxlen=history_length)

    @property
    def is_leader(self) -> bool:
        return self.role is Role.LEADER

    @property
    def eccentricity(self) -> float:
        return path_eccentricity(self.positions)

    def resize(self, history_length: int):
        if self.positions.maxlen != history_length:
            self.positions = deque(self.positions, maxlen=history_length)
            self.neighbour_counts = deque(self.neighbour_counts, maxlen=history_length)

    def record(self, position: np.ndarray, neighbour_count: int):
        self.positions.append(np.array(position, dtype=np.float64))
        self.neighbour_counts.append(int(neighbour_count))

    def promote(self, max_ticks: int):
        self.role = Role.LEADER
        self.ticks_remaining = max_ticks
        self.tenure = max_ticks

    def demote(self):
        self.role = Role.FOLLOWER
        self.ticks_remaining = 0

    def speed_multiplier(self, settings: LeadershipSettings) -> float:
        """
        Speed boost for the current tick.

        Ramps linearly from 1 to the peak over the first ramp_fraction of
        the tenure, then relaxes linearly back to 1 by its end.
        """
        if not self.is_leader or self.tenure <= 0:
            return 1.0
        peak = settings.peak_speed_multiplier
        elapsed = self.tenure - self.ticks_remaining
        ramp = settings.ramp_fraction * self.tenure
        if ramp > 0 and elapsed < ramp:
            return 1.0 + (peak - 1.0) * elapsed / ramp
        relax = self.tenure - ramp
        if relax <= 0:
            return peak
        return peak - (peak - 1.0) * min((elapsed - ramp) / relax, 1.0)


def update_leadership(boid, neighbour_count: int, settings: LeadershipSettings, rng: np.random.Generator):
    """
    Advance one boid's leader state machine by one tick.

    Followers with few neighbours and a straight recent path become
    leaders with probability become_leader_probability. Leaders step down
    when their time runs out or their neighbour count rises above the
    threshold.
    """
    state = boid.leadership
    threshold = settings.neighbour_count_threshold

    if state.is_leader:
        state.ticks_remaining -= 1
        if neighbour_count > threshold:
            logger.debug("Boid %d stops leading: %d neighbours", boid.id, neighbour_count)
            state.demote()
        elif state.ticks_remaining <= 0:
            logger.debug("Boid %d stops leading: tenure over", boid.id)
            state.demote()
        return

    if neighbour_count > threshold:
        return
    if state.eccentricity <= settings.eccentricity_threshold:
        return
    if rng.random() < settings.become_leader_probability:
        state.promote(settings.max_leader_ticks)
        logger.debug("Boid %d becomes a leader for %d ticks", boid.id, settings.max_leader_ticks)
