"""Flock management: population, neighbour queries and the per-tick update."""

import logging
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from config import boids as config
from .boid import Boid, Orientation
from .dropoffs import make_dropoff
from .errors import SimulationStateError, UnknownRuleError
from .leadership import update_leadership
from .neighbours import BruteForceNeighbours, NeighbourQuery
from .params import SimulationParams
from .rules import LeaderFollowingRule, Rule, RuleContext, default_rules, make_rule
from .world import World, WorldRegistry, default_registry

logger = logging.getLogger(__name__)


class RenderState(NamedTuple):
    """What a view layer needs to draw one boid."""
    id: int
    position: np.ndarray
    orientation: Orientation


class FlockListener:
    """Lifecycle hooks for a view layer; override the ones you need."""

    def boid_added(self, boid: Boid):
        pass

    def boid_removed(self, boid: Boid):
        pass


# ============================================================================
# FLOCK CLASS
# ============================================================================

class Flock:
    """
    Owns the boids and runs the simulation one tick at a time.

    Every tick reads `params` afresh, so any tunable may be changed
    between ticks. Neighbours are found from a snapshot taken before
    any boid moves, so update order never changes the result.
    """

    def __init__(
        self,
        params: Optional[SimulationParams] = None,
        rules: Optional[Sequence[Rule]] = None,
        worlds: Optional[WorldRegistry] = None,
        neighbour_query: Optional[NeighbourQuery] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.params = params if params is not None else SimulationParams.from_config()
        self.worlds = worlds if worlds is not None else default_registry()
        self.world: World = self.worlds.get(self.params.world_name)
        if rules is None:
            rules = default_rules(leaders=self.params.leadership.enabled)
        self.rules: List[Rule] = list(rules)
        self.neighbour_query = neighbour_query if neighbour_query is not None else BruteForceNeighbours()
        self.rng = rng if rng is not None else np.random.default_rng(self.params.seed)

        self.boids: List[Boid] = []
        self.tick_count = 0
        self._next_id = 0
        self._listeners: List[FlockListener] = []
        self._predators = np.zeros((0, 3), dtype=np.float64)
        self._dropoff_key = None
        self._added_leader_rule: Optional[Rule] = None
        self._in_tick = False

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_world(self, name: str):
        """Switch world by name; bounds and obstacles change together."""
        if self._in_tick:
            raise SimulationStateError("Cannot switch world during a tick")
        world = self.worlds.get(name)
        self.params.world_name = name
        self._apply_world(world)

    def _apply_world(self, world: World):
        if world is not self.world:
            logger.info(
                "World switched: %s -> %s (%d obstacles)",
                self.world.name, world.name, len(world.obstacles)
            )
        self.world = world

    def _resolve_world(self) -> World:
        if self.params.world_name != self.world.name:
            self._apply_world(self.worlds.get(self.params.world_name))
        return self.world

    def _sync_leader_rule(self):
        """Add the leader-following rule while leadership is on; drop it again if we added it."""
        enabled = self.params.leadership.enabled
        if enabled and not any(r.key == LeaderFollowingRule.key for r in self.rules):
            self._added_leader_rule = make_rule(config.LEADER_RULE)
            self.rules.append(self._added_leader_rule)
            logger.info("Leadership enabled: added %r", self._added_leader_rule)
        elif not enabled and self._added_leader_rule is not None:
            if self._added_leader_rule in self.rules:
                self.rules.remove(self._added_leader_rule)
            self._added_leader_rule = None

    def rule(self, key: str) -> Rule:
        for rule in self.rules:
            if rule.key == key:
                return rule
        raise UnknownRuleError(key, [r.key for r in self.rules])

    def set_rule_weight(self, key: str, weight: float):
        self.rule(key).weight = weight

    def add_rule(self, rule: Rule):
        self.rules.append(rule)

    def remove_rule(self, key: str) -> Rule:
        rule = self.rule(key)
        self.rules.remove(rule)
        return rule

    def set_predators(self, positions):
        """Positions of predators the boids should flee from; empty to clear."""
        self._predators = np.asarray(positions, dtype=np.float64).reshape(-1, 3)

    @property
    def predators(self) -> np.ndarray:
        return self._predators

    def add_listener(self, listener: FlockListener):
        self._listeners.append(listener)

    def remove_listener(self, listener: FlockListener):
        self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def _new_boid(self, position, velocity) -> Boid:
        boid = Boid(
            id=self._next_id,
            position=position,
            velocity=velocity,
        )
        boid.leadership.resize(self.params.leadership.history_length)
        self._next_id += 1
        self.boids.append(boid)
        for listener in self._listeners:
            listener.boid_added(boid)
        return boid

    def _pop_boid(self) -> Optional[Boid]:
        if not self.boids:
            return None
        boid = self.boids.pop()
        for listener in self._listeners:
            listener.boid_removed(boid)
        return boid

    def spawn_random_boid(self, world: Optional[World] = None) -> Boid:
        """New boid with a random position inside the world and a random velocity."""
        bounds = (world or self.world).bounds
        position = self.rng.uniform(bounds.minimum, bounds.maximum)
        velocity = self.rng.uniform(config.SPAWN["velocity_min"], config.SPAWN["velocity_max"])
        return self._new_boid(position, velocity)

    def add_boid(self, position, velocity) -> Boid:
        """Place a boid explicitly; the population target follows."""
        boid = self._new_boid(position, velocity)
        self.params.boid_count = len(self.boids)
        return boid

    def remove_boid(self) -> Optional[Boid]:
        """Remove the last boid; does nothing on an empty flock."""
        boid = self._pop_boid()
        if boid is not None:
            self.params.boid_count = len(self.boids)
        return boid

    def update_boid_count(self, world: Optional[World] = None):
        """Add or drop boids (from the end) until the count matches the target."""
        target = int(self.params.boid_count)
        difference = target - len(self.boids)
        if difference == 0:
            return

        while difference > 0:
            self.spawn_random_boid(world)
            difference -= 1
        while difference < 0:
            if self._pop_boid() is None:
                break
            difference += 1

        logger.info("Boid count now %d", len(self.boids))

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def neighbour_indices(self) -> List[np.ndarray]:
        """Neighbour index arrays for the current positions."""
        if not self.boids:
            return []
        positions = np.array([b.position for b in self.boids])
        velocities = np.array([b.velocity for b in self.boids])
        return self.neighbour_query.query(
            positions, velocities,
            self.params.visibility_threshold, self.params.angular_threshold
        )

    def update(self):
        """Advance every boid by one tick."""
        params = self.params
        world = self._resolve_world()
        self.update_boid_count(world)
        self._sync_leader_rule()

        self._in_tick = True
        try:
            if self.boids:
                self._step(params, world)
        finally:
            self._in_tick = False
        self.tick_count += 1

    def _step(self, params: SimulationParams, world: World):
        dropoff = make_dropoff(params.dropoff_name, params.dropoff_constant, params.visibility_threshold)
        if dropoff.key != self._dropoff_key:
            logger.info("Dropoff: %r", dropoff)
            self._dropoff_key = dropoff.key

        snapshots = [boid.snapshot() for boid in self.boids]
        neighbour_sets = self.neighbour_query.query(
            np.array([s.position for s in snapshots]),
            np.array([s.velocity for s in snapshots]),
            params.visibility_threshold,
            params.angular_threshold,
        )

        leadership = params.leadership
        leader_rules = [rule for rule in self.rules if rule.always_apply_to_leaders]

        for boid, indices in zip(self.boids, neighbour_sets):
            neighbours = [snapshots[j] for j in indices]
            max_speed = params.max_speed

            if leadership.enabled:
                boid.leadership.resize(leadership.history_length)
                update_leadership(boid, len(neighbours), leadership, self.rng)
                max_speed *= boid.leadership.speed_multiplier(leadership)
            elif boid.is_leader:
                boid.leadership.demote()

            context = RuleContext(neighbours, params, world, dropoff, self._predators)
            rules = leader_rules if boid.is_leader else self.rules
            boid.update_and_move(rules, context, max_speed, self.rng)

            if leadership.enabled:
                boid.leadership.record(boid.position, len(neighbours))

    def run(self, ticks: int):
        for _ in range(ticks):
            self.update()

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def num_boids(self) -> int:
        return len(self.boids)

    @property
    def positions(self) -> np.ndarray:
        return np.array([b.position for b in self.boids]).reshape(-1, 3)

    @property
    def velocities(self) -> np.ndarray:
        return np.array([b.velocity for b in self.boids]).reshape(-1, 3)

    def leaders(self) -> List[Boid]:
        return [b for b in self.boids if b.is_leader]

    def render_states(self) -> List[RenderState]:
        return [RenderState(b.id, b.position.copy(), b.orientation) for b in self.boids]
