"""Flocking decision engine: rules, dropoffs, worlds, boids and the flock loop."""

from .boid import Boid, BoidSnapshot, Orientation
from .dropoffs import (
    Dropoff,
    ExponentialDropoff,
    InverseProportionalDropoff,
    NoDropoff,
    ProportionalDropoff,
    make_dropoff,
)
from .errors import (
    BoidsError,
    ConfigurationError,
    ParameterOutOfBoundsError,
    SimulationStateError,
    UnknownDropoffError,
    UnknownRuleError,
    UnknownWorldError,
    WeightOutOfBoundsError,
)
from .flock import Flock, FlockListener, RenderState
from .leadership import LeaderState, Role
from .neighbours import BruteForceNeighbours, GridNeighbours, NeighbourQuery
from .params import LeadershipSettings, SimulationParams
from .rules import (
    AlignmentRule,
    CohesionRule,
    LeaderFollowingRule,
    ObstacleAvoidanceRule,
    PredatorAvoidanceRule,
    Rule,
    RuleContext,
    SeparationRule,
    WorldBoundaryRule,
    default_rules,
)
from .world import Bounds3D, Cylinder, Obstacles, World, WorldRegistry, default_registry

__all__ = [
    "Boid", "BoidSnapshot", "Orientation",
    "Dropoff", "NoDropoff", "ExponentialDropoff", "InverseProportionalDropoff",
    "ProportionalDropoff", "make_dropoff",
    "BoidsError", "ConfigurationError", "ParameterOutOfBoundsError", "SimulationStateError",
    "UnknownDropoffError", "UnknownRuleError", "UnknownWorldError", "WeightOutOfBoundsError",
    "Flock", "FlockListener", "RenderState",
    "LeaderState", "Role",
    "NeighbourQuery", "BruteForceNeighbours", "GridNeighbours",
    "SimulationParams", "LeadershipSettings",
    "Rule", "RuleContext", "SeparationRule", "CohesionRule", "AlignmentRule",
    "WorldBoundaryRule", "ObstacleAvoidanceRule", "LeaderFollowingRule",
    "PredatorAvoidanceRule", "default_rules",
    "Bounds3D", "Cylinder", "Obstacles", "World", "WorldRegistry", "default_registry",
]
