import numpy as np
import pytest

from boids import (
    BoidsError,
    Flock,
    FlockListener,
    GridNeighbours,
    SimulationParams,
    SimulationStateError,
    UnknownRuleError,
    UnknownWorldError,
    WeightOutOfBoundsError,
)


class RecordingListener(FlockListener):
    def __init__(self):
        self.added = []
        self.removed = []

    def boid_added(self, boid):
        self.added.append(boid.id)

    def boid_removed(self, boid):
        self.removed.append(boid.id)


def test_population_grows_to_target_inside_world(flock):
    flock.params.boid_count = 25
    flock.update_boid_count()
    assert flock.num_boids == 25
    assert [b.id for b in flock.boids] == list(range(25))
    for boid in flock.boids:
        assert flock.world.bounds.contains(boid.position)
        assert np.all(np.abs(boid.velocity) <= [0.2, 0.02, 0.2])


def test_shrinking_removes_from_the_end(flock):
    flock.params.boid_count = 50
    flock.update_boid_count()
    before = {b.id: (b.position.copy(), b.velocity.copy()) for b in flock.boids[:30]}

    flock.params.boid_count = 30
    flock.update_boid_count()

    assert flock.num_boids == 30
    assert [b.id for b in flock.boids] == list(range(30))
    for boid in flock.boids:
        position, velocity = before[boid.id]
        np.testing.assert_array_equal(boid.position, position)
        np.testing.assert_array_equal(boid.velocity, velocity)


def test_ids_are_never_reused(flock):
    flock.params.boid_count = 5
    flock.update_boid_count()
    flock.params.boid_count = 2
    flock.update_boid_count()
    flock.params.boid_count = 4
    flock.update_boid_count()
    assert [b.id for b in flock.boids] == [0, 1, 5, 6]


def test_removing_from_empty_flock_is_a_no_op(flock):
    assert flock.remove_boid() is None
    assert flock.num_boids == 0


def test_listeners_see_lifecycle_events(flock):
    listener = RecordingListener()
    flock.add_listener(listener)
    flock.params.boid_count = 3
    flock.update_boid_count()
    flock.params.boid_count = 1
    flock.update_boid_count()
    assert listener.added == [0, 1, 2]
    assert listener.removed == [2, 1]


def test_single_boid_only_drifts_randomly(flock):
    boid = flock.add_boid((0, 50, 0), (0.05, 0.0, 0.05))
    expected = boid.velocity.copy()
    for _ in range(3):
        flock.update()
        expected = expected + boid.random_bias
        np.testing.assert_allclose(boid.velocity, expected)
    assert flock.tick_count == 3


def test_speed_cap_holds_after_every_tick(params, registry):
    params.boid_count = 40
    flock = Flock(params=params, worlds=registry)
    for _ in range(30):
        flock.update()
        for boid in flock.boids:
            assert boid.speed <= params.max_speed + np.linalg.norm(boid.random_bias) + 1e-9


def test_update_order_does_not_matter(params, registry):
    params.randomness_per_timestep = 0.0
    starts = [((0, 50, 0), (0.2, 0, 0)), ((8, 50, 3), (0, 0, 0.2)), ((-5, 52, -4), (0.1, 0.1, 0))]

    forward = Flock(params=params, worlds=registry)
    for p, v in starts:
        forward.add_boid(p, v)
    backward = Flock(params=SimulationParams(boid_count=0, world_name="Open", randomness_per_timestep=0.0),
                     worlds=registry)
    for p, v in reversed(starts):
        backward.add_boid(p, v)

    forward.update()
    backward.update()

    np.testing.assert_allclose(forward.positions, backward.positions[::-1])


def test_same_seed_same_trajectories(registry):
    runs = []
    for _ in range(2):
        flock = Flock(params=SimulationParams(boid_count=20, world_name="Open", seed=99), worlds=registry)
        flock.run(10)
        runs.append(flock.positions)
    np.testing.assert_array_equal(runs[0], runs[1])


def test_grid_search_gives_the_same_simulation(registry):
    results = []
    for query in (None, GridNeighbours()):
        params = SimulationParams(boid_count=30, world_name="Open", seed=5, visibility_threshold=30.0)
        flock = Flock(params=params, worlds=registry, neighbour_query=query)
        flock.run(5)
        results.append(flock.positions)
    np.testing.assert_allclose(results[0], results[1])


def test_unknown_world_is_reported(flock):
    with pytest.raises(UnknownWorldError):
        flock.set_world("Atlantis")
    assert flock.world.name == "Open"
    assert flock.params.world_name == "Open"

    flock.params.world_name = "Atlantis"
    with pytest.raises(UnknownWorldError):
        flock.update()


def test_constructor_rejects_unknown_world(registry):
    with pytest.raises(UnknownWorldError):
        Flock(params=SimulationParams(world_name="Nowhere"), worlds=registry)


def test_world_switch_swaps_bounds_and_obstacles_together(flock, pillar_world):
    flock.add_boid((0, 40, 20), (0.1, 0, 0))
    flock.set_world("Pillar")
    assert flock.world is pillar_world
    assert flock.world.bounds.y_max == 50
    assert len(flock.world.obstacles) == 1

    seen = []
    rule = flock.rule("obstacle_avoidance")
    original = rule.calculate_vector

    def spy(boid, context):
        seen.append((context.world.bounds, context.world.obstacles))
        return original(boid, context)

    rule.calculate_vector = spy
    flock.update()
    assert seen == [(pillar_world.bounds, pillar_world.obstacles)]


def test_world_switch_is_refused_mid_tick(flock):
    flock.add_boid((0, 40, 20), (0.1, 0, 0))
    errors = []
    rule = flock.rule("cohesion")
    original = rule.calculate_vector

    def switch_world(boid, context):
        try:
            flock.set_world("Pillar")
        except BoidsError as e:
            errors.append(e)
        return original(boid, context)

    rule.calculate_vector = switch_world
    flock.update()
    assert len(errors) == 1 and isinstance(errors[0], SimulationStateError)
    assert flock.world.name == "Open"
    flock.set_world("Pillar")
    assert flock.world.name == "Pillar"

def test_world_name_edit_applies_on_next_tick(flock):
    flock.params.world_name = "Pillar"
    assert flock.world.name == "Open"
    flock.update()
    assert flock.world.name == "Pillar"


def test_rule_weights_are_validated(flock):
    flock.set_rule_weight("cohesion", 1.5)
    assert flock.rule("cohesion").weight == 1.5
    with pytest.raises(WeightOutOfBoundsError):
        flock.set_rule_weight("cohesion", 3.0)
    with pytest.raises(UnknownRuleError):
        flock.set_rule_weight("gravity", 1.0)


def test_boids_flee_predators(registry):
    from boids.rules import PredatorAvoidanceRule

    params = SimulationParams(boid_count=0, world_name="Open", randomness_per_timestep=0.0)
    flock = Flock(params=params, worlds=registry)
    flock.add_rule(PredatorAvoidanceRule(2.0))
    boid = flock.add_boid((0, 50, 0), (0, 0, 0))
    flock.set_predators([(5, 50, 0)])
    flock.update()
    assert boid.position[0] < 0

    flock.set_predators([])
    assert flock.predators.shape == (0, 3)


def test_render_states(flock):
    flock.add_boid((1, 2, 3), (0, 1, 0))
    (state,) = flock.render_states()
    assert state.id == 0
    np.testing.assert_array_equal(state.position, [1, 2, 3])
    assert state.orientation.pitch == pytest.approx(0.0)

    state.position[0] = 100
    assert flock.boids[0].position[0] == 1


def test_empty_flock_ticks(flock):
    flock.update()
    assert flock.tick_count == 1
    assert flock.positions.shape == (0, 3)


def test_leader_following_tracks_the_leadership_toggle(flock):
    flock.add_boid((0, 40, 0), (0.1, 0, 0))
    assert "leader_following" not in [r.key for r in flock.rules]

    flock.params.leadership.enabled = True
    flock.update()
    assert flock.rule("leader_following").weight == 1.5

    flock.params.leadership.enabled = False
    flock.update()
    assert "leader_following" not in [r.key for r in flock.rules]
    assert not flock.leaders()


def test_leadership_toggle_keeps_a_configured_leader_rule(params, registry):
    params.leadership.enabled = True
    flock = Flock(params=params, worlds=registry)
    configured = flock.rule("leader_following")

    params.leadership.enabled = False
    flock.update()
    assert flock.rule("leader_following") is configured
