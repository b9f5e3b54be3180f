"""Steering rules that turn an agent's local context into a velocity change."""

from typing import Dict, List, NamedTuple, Optional, Sequence, Type

import numpy as np

from config import boids as config
from .dropoffs import Dropoff
from .errors import ParameterOutOfBoundsError, UnknownRuleError, WeightOutOfBoundsError
from .vector import normalise, set_length, zero


class RuleContext(NamedTuple):
    """
    Everything a rule may look at for one agent on one tick.

    Attributes:
        neighbours: Frozen snapshots of the visible agents
        params: The flock's SimulationParams
        world: The world active for this tick
        dropoff: Distance weighting built for this tick
        predators: (k, 3) array of predator positions, possibly empty
    """
    neighbours: Sequence
    params: object
    world: object
    dropoff: Dropoff
    predators: np.ndarray = np.zeros((0, 3))


class Rule:
    """
    Base class for all steering rules.

    The returned vector is already multiplied by the rule's own weight.
    """
    key = ""
    name = ""
    always_apply_to_leaders = False

    def __init__(self, weight: float, min_weight: float = 0.0, max_weight: Optional[float] = None):
        self.min_weight = float(min_weight)
        self.max_weight = float(max_weight if max_weight is not None else weight * 2)
        self.weight = weight

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, value: float):
        if not (self.min_weight <= value <= self.max_weight):
            raise WeightOutOfBoundsError(
                f"{self.key}.weight", value, (self.min_weight, self.max_weight)
            )
        self._weight = float(value)

    def calculate_vector(self, boid, context: RuleContext) -> np.ndarray:
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}(weight={self.weight})"


class SeparationRule(Rule):
    """Steer away from the dropoff-weighted average offset of neighbours."""
    key = "separation"
    name = "Separation"

    def calculate_vector(self, boid, context):
        if len(context.neighbours) == 0:
            return zero()

        separation = zero()
        weight_sum = 0.0
        for neighbour in context.neighbours:
            away = boid.position - neighbour.position
            weight = context.dropoff(float(np.linalg.norm(away)))
            separation += away * weight
            weight_sum += weight

        if weight_sum == 0:
            return zero()
        separation /= weight_sum
        return normalise(separation) * self.weight


class CohesionRule(Rule):
    """Steer towards the dropoff-weighted centre of neighbours."""
    key = "cohesion"
    name = "Cohesion"

    def calculate_vector(self, boid, context):
        if len(context.neighbours) == 0:
            return zero()

        centre = zero()
        weight_sum = 0.0
        for neighbour in context.neighbours:
            weight = context.dropoff(float(np.linalg.norm(neighbour.position - boid.position)))
            centre += neighbour.position * weight
            weight_sum += weight

        if weight_sum == 0:
            return zero()
        centre /= weight_sum
        return normalise(centre - boid.position) * self.weight


class AlignmentRule(Rule):
    """Steer towards the dropoff-weighted average heading of neighbours."""
    key = "alignment"
    name = "Alignment"

    def calculate_vector(self, boid, context):
        if len(context.neighbours) == 0:
            return zero()

        heading = zero()
        weight_sum = 0.0
        for neighbour in context.neighbours:
            weight = context.dropoff(float(np.linalg.norm(neighbour.position - boid.position)))
            heading += normalise(neighbour.velocity) * weight
            weight_sum += weight

        if weight_sum == 0:
            return zero()
        heading /= weight_sum
        return normalise(heading) * self.weight


class WorldBoundaryRule(Rule):
    """
    Push agents back inside the world box.

    Once an agent is within `margin` of a face the push along that axis
    is (penetration / margin), growing without limit past the face.
    Position is never clamped.
    """
    key = "world_boundary"
    name = "Avoid World Boundary"
    always_apply_to_leaders = True

    def __init__(self, weight: float, margin: float = 10.0, **kwargs):
        super().__init__(weight, **kwargs)
        if margin <= 0:
            raise ParameterOutOfBoundsError(f"{self.key}.margin", margin, (0.0, float("inf")))
        self.margin = float(margin)

    def calculate_vector(self, boid, context):
        bounds = context.world.bounds
        steer = zero()
        lower = bounds.minimum + self.margin
        upper = bounds.maximum - self.margin

        for i in range(3):
            pos = boid.position[i]
            if pos > upper[i]:
                steer[i] = -(pos - upper[i]) / self.margin
            elif pos < lower[i]:
                steer[i] = (lower[i] - pos) / self.margin

        return steer * self.weight


class ObstacleAvoidanceRule(Rule):
    """
    Exponential repulsion from every cylinder in the world.

    `sharpness` (>= 1) controls how steeply the push rises as an agent
    closes on a cylinder surface; `offset` shifts where it reaches 1.
    """
    key = "obstacle_avoidance"
    name = "Avoid Obstacles"
    always_apply_to_leaders = True

    def __init__(self, weight: float, sharpness: float = 3.0, offset: float = 10.0, **kwargs):
        super().__init__(weight, **kwargs)
        if sharpness < 1:
            raise ParameterOutOfBoundsError(f"{self.key}.sharpness", sharpness, (1.0, float("inf")))
        self.sharpness = float(sharpness)
        self.offset = float(offset)

    def magnitude(self, surface_distance: float) -> float:
        return self.sharpness ** -(max(surface_distance, 0.0) - self.offset)

    def calculate_vector(self, boid, context):
        final = zero()

        for cylinder in context.world.obstacles.cylinders:
            # Same height as the agent, so the push is horizontal
            away = boid.position - np.array((cylinder.base_x, boid.position[1], cylinder.base_z))
            final += set_length(away, self.magnitude(cylinder.surface_distance(boid.position)))

        return final * self.weight


class LeaderFollowingRule(Rule):
    """Followers steer towards the weighted centre of visible leaders."""
    key = "leader_following"
    name = "Follow Leader"

    def calculate_vector(self, boid, context):
        centre = zero()
        weight_sum = 0.0
        for neighbour in context.neighbours:
            if not neighbour.is_leader:
                continue
            weight = context.dropoff(float(np.linalg.norm(neighbour.position - boid.position)))
            centre += neighbour.position * weight
            weight_sum += weight

        if weight_sum == 0:
            return zero()
        centre /= weight_sum
        return normalise(centre - boid.position) * self.weight


class PredatorAvoidanceRule(Rule):
    """Flee from predators within `radius`, harder the closer they are."""
    key = "predator_avoidance"
    name = "Avoid Predator"

    def __init__(self, weight: float, radius: float = 30.0, **kwargs):
        super().__init__(weight, **kwargs)
        self.radius = float(radius)

    def calculate_vector(self, boid, context):
        flee = zero()
        for predator in context.predators:
            away = boid.position - predator
            distance = float(np.linalg.norm(away))
            if distance >= self.radius:
                continue
            flee += normalise(away) * (1.0 - distance / self.radius)

        return flee * self.weight


RULE_TYPES: Dict[str, Type[Rule]] = {
    cls.key: cls
    for cls in (
        SeparationRule,
        CohesionRule,
        AlignmentRule,
        WorldBoundaryRule,
        ObstacleAvoidanceRule,
        LeaderFollowingRule,
        PredatorAvoidanceRule,
    )
}


def make_rule(entry: dict) -> Rule:
    """Build a rule from a config entry such as {"key": "cohesion", "weight": 1.0}."""
    options = dict(entry)
    key = options.pop("key")
    try:
        cls = RULE_TYPES[key]
    except KeyError:
        raise UnknownRuleError(key, RULE_TYPES) from None
    return cls(**options)


def default_rules(leaders: bool = False, predators: bool = False) -> List[Rule]:
    """The configured rule list, in evaluation order."""
    entries = list(config.RULES)
    if leaders:
        entries.append(config.LEADER_RULE)
    if predators:
        entries.append(config.PREDATOR_RULE)
    return [make_rule(entry) for entry in entries]
