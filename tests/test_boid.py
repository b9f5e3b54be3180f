import math

import numpy as np
import pytest

from boids import Boid, Rule
from boids.boid import orientation_from_velocity


class ConstantRule(Rule):
    key = "constant"
    name = "Constant"

    def __init__(self, vector):
        super().__init__(1.0)
        self.vector = np.array(vector, dtype=np.float64)

    def calculate_vector(self, boid, context):
        return self.vector * self.weight


@pytest.fixture
def rng():
    return np.random.default_rng(0)


def test_cap_speed_keeps_direction():
    boid = Boid(id=0, velocity=(3.0, 4.0, 0.0))
    boid.cap_speed(0.5)
    np.testing.assert_allclose(boid.velocity, [0.3, 0.4, 0.0])
    boid.cap_speed(1.0)
    np.testing.assert_allclose(boid.velocity, [0.3, 0.4, 0.0])


def test_rule_vectors_are_summed_then_capped(context, params, rng):
    params.randomness_per_timestep = 0.0
    boid = Boid(id=0, position=(0, 50, 0), velocity=(0.1, 0, 0))
    rules = [ConstantRule((1.0, 0, 0)), ConstantRule((0, 0, 1.0))]

    boid.update_and_move(rules, context(), params.max_speed, rng)

    assert boid.speed == pytest.approx(params.max_speed)
    expected = np.array([1.1, 0.0, 1.0])
    np.testing.assert_allclose(boid.velocity, expected / np.linalg.norm(expected) * params.max_speed)
    np.testing.assert_allclose(boid.position, np.array([0, 50, 0]) + boid.velocity)


def test_randomness_is_added_after_the_cap(context, params, rng):
    boid = Boid(id=0, position=(0, 50, 0), velocity=(5.0, 0, 0))
    boid.update_and_move([], context(), params.max_speed, rng)
    np.testing.assert_allclose(boid.velocity, np.array([params.max_speed, 0, 0]) + boid.random_bias)
    assert boid.speed <= params.max_speed + np.linalg.norm(boid.random_bias) + 1e-12


def test_random_bias_drift_is_bounded_per_step(rng):
    boid = Boid(id=0)
    boid.update_random_bias(0.01, 1.0, rng)
    assert np.all(np.abs(boid.random_bias) <= 0.005)


def test_random_bias_resets_by_dividing(rng):
    boid = Boid(id=0, random_bias=(0.3, 0.0, 0.0))
    boid.update_random_bias(0.0, 0.1, rng)
    np.testing.assert_allclose(boid.random_bias, [0.003, 0.0, 0.0])

    boid = Boid(id=0, random_bias=(0.05, 0.0, 0.0))
    boid.update_random_bias(0.0, 0.1, rng)
    np.testing.assert_allclose(boid.random_bias, [0.05, 0.0, 0.0])


@pytest.mark.parametrize("velocity, yaw, pitch", [
    ((1, 0, 0), 0.0, math.pi / 2),
    ((0, 1, 0), 0.0, 0.0),
    ((0, 0, -1), math.pi / 2, math.pi / 2),
    ((0, -1, 0), 0.0, math.pi),
])
def test_orientation_from_velocity(velocity, yaw, pitch):
    o = orientation_from_velocity(np.array(velocity, dtype=np.float64))
    assert o.yaw == pytest.approx(yaw)
    assert o.pitch == pytest.approx(pitch)


def test_orientation_has_no_memory():
    boid = Boid(id=0, velocity=(0, 0, -1))
    first = boid.orientation
    boid.velocity = np.array([1.0, 0, 0])
    boid.velocity = np.array([0.0, 0, -1])
    assert boid.orientation == first


def test_snapshot_is_a_copy():
    boid = Boid(id=4, position=(1, 2, 3), velocity=(0.1, 0, 0))
    snap = boid.snapshot()
    boid.move()
    np.testing.assert_allclose(snap.position, [1, 2, 3])
    assert snap.id == 4 and not snap.is_leader
