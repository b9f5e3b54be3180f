from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from boids import Bounds3D, ConfigurationError, Cylinder, UnknownWorldError, World, default_registry


def test_centred_xz_bounds():
    b = Bounds3D.centred_xz(200, 100, 50)
    assert (b.x_min, b.x_max) == (-100, 100)
    assert (b.z_min, b.z_max) == (-50, 50)
    assert (b.y_min, b.y_max) == (0, 50)
    assert b.y_size == 50
    assert b.contains(np.array([0.0, 10.0, 0.0]))
    assert not b.contains(np.array([0.0, -1.0, 0.0]))


def test_bounds_are_immutable():
    b = Bounds3D.centred_xz(10, 10, 10)
    with pytest.raises(FrozenInstanceError):
        b.x_min = -50


def test_inverted_bounds_rejected():
    with pytest.raises(ConfigurationError):
        Bounds3D(1, 0, 0, 1, 0, 1)


def test_cylinder_surface_distance_is_horizontal():
    c = Cylinder(10.0, 0.0, 2.0)
    assert c.surface_distance(np.array([15.0, 99.0, 0.0])) == pytest.approx(3.0)
    assert c.surface_distance(np.array([10.5, 0.0, 0.0])) == 0.0


def test_registry_lookup(registry):
    assert registry.names() == ["Open", "Pillar"]
    assert registry.get("Pillar").obstacles.cylinders[0].radius == 5.0
    assert "Open" in registry


def test_unknown_world_is_an_error(registry):
    with pytest.raises(UnknownWorldError) as info:
        registry.get("Atlantis")
    assert info.value.known == ["Open", "Pillar"]
    assert isinstance(info.value, KeyError)
    assert "Atlantis" in str(info.value)


def test_duplicate_world_rejected(registry, open_world):
    with pytest.raises(ConfigurationError):
        registry.add(open_world)


def test_default_registry_from_config():
    registry = default_registry()
    assert "Default" in registry
    default = registry.get("Default")
    assert (default.bounds.x_min, default.bounds.x_max) == (-100, 100)
    assert default.bounds.y_max == 100
    assert len(default.obstacles) == 0
    assert len(registry.get("Forest").obstacles) > 0


def test_world_from_config_entry():
    world = World.from_config({
        "name": "Test",
        "bounds": (20.0, 40.0, 10.0),
        "cylinders": [{"base": (1.0, 2.0), "radius": 3.0}],
    })
    assert world.bounds.z_max == 20.0
    assert world.obstacles.cylinders == (Cylinder(1.0, 2.0, 3.0),)
