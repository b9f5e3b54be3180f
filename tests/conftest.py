import numpy as np
import pytest

from boids import (
    Bounds3D,
    BoidSnapshot,
    Cylinder,
    Flock,
    NoDropoff,
    Obstacles,
    RuleContext,
    SimulationParams,
    World,
    WorldRegistry,
)


@pytest.fixture
def params():
    """Empty, seeded parameters so tests place boids themselves."""
    return SimulationParams(boid_count=0, world_name="Open", seed=1234)


@pytest.fixture
def open_world():
    return World("Open", Bounds3D.centred_xz(200, 200, 100))


@pytest.fixture
def pillar_world():
    return World(
        "Pillar",
        Bounds3D.centred_xz(400, 400, 50),
        Obstacles((Cylinder(0.0, 0.0, 5.0),)),
    )


@pytest.fixture
def registry(open_world, pillar_world):
    return WorldRegistry([open_world, pillar_world])


@pytest.fixture
def flock(params, registry):
    """Returns a fresh, empty Flock in the open world."""
    return Flock(params=params, worlds=registry)


@pytest.fixture
def snapshot():
    def make(position, velocity=(0.0, 0.0, 0.0), is_leader=False, id=0):
        return BoidSnapshot(
            id,
            np.array(position, dtype=np.float64),
            np.array(velocity, dtype=np.float64),
            is_leader,
        )
    return make


@pytest.fixture
def context(params, open_world):
    """Builds a RuleContext; defaults to no neighbours in the open world."""
    def make(neighbours=(), world=None, dropoff=None, predators=None):
        return RuleContext(
            neighbours=list(neighbours),
            params=params,
            world=world if world is not None else open_world,
            dropoff=dropoff if dropoff is not None else NoDropoff(1.0),
            predators=np.zeros((0, 3)) if predators is None else np.asarray(predators, dtype=np.float64),
        )
    return make
