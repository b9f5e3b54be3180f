"""World bounds, static obstacles and the named world registry."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from config import boids as config
from .errors import ConfigurationError, UnknownWorldError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds3D:
    """Axis-aligned box; immutable once built."""
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float

    def __post_init__(self):
        for axis in "xyz":
            lo = getattr(self, f"{axis}_min")
            hi = getattr(self, f"{axis}_max")
            if lo > hi:
                raise ConfigurationError(f"Bounds {axis}_min={lo} is greater than {axis}_max={hi}")

    @classmethod
    def centred_xz(cls, x_size: float, z_size: float, y_size: float) -> "Bounds3D":
        """Box centred on the origin in x and z, with the floor at y = 0."""
        return cls(
            -x_size / 2, x_size / 2,
            0.0, y_size,
            -z_size / 2, z_size / 2,
        )

    @property
    def x_size(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_size(self) -> float:
        return self.y_max - self.y_min

    @property
    def z_size(self) -> float:
        return self.z_max - self.z_min

    @property
    def minimum(self) -> np.ndarray:
        return np.array((self.x_min, self.y_min, self.z_min), dtype=np.float64)

    @property
    def maximum(self) -> np.ndarray:
        return np.array((self.x_max, self.y_max, self.z_max), dtype=np.float64)

    def contains(self, point: np.ndarray) -> bool:
        return bool(np.all(point >= self.minimum) and np.all(point <= self.maximum))


@dataclass(frozen=True)
class Cylinder:
    """Vertical cylinder standing on the floor at base point (x, z)."""
    base_x: float
    base_z: float
    radius: float

    def __post_init__(self):
        if self.radius < 0:
            raise ConfigurationError(f"Cylinder radius must be non-negative, got {self.radius}")

    def surface_distance(self, position: np.ndarray) -> float:
        """Horizontal distance from position to the cylinder surface, 0 inside."""
        dx = position[0] - self.base_x
        dz = position[2] - self.base_z
        return max(float(np.hypot(dx, dz)) - self.radius, 0.0)


@dataclass(frozen=True)
class Obstacles:
    cylinders: Tuple[Cylinder, ...] = ()

    def __len__(self):
        return len(self.cylinders)


@dataclass(frozen=True)
class World:
    """
    A named simulation volume plus the obstacles inside it.

    Worlds are swapped as a whole, so bounds and obstacles always belong
    to the same definition.
    """
    name: str
    bounds: Bounds3D
    obstacles: Obstacles = field(default_factory=Obstacles)

    @classmethod
    def from_config(cls, entry: dict) -> "World":
        x_size, z_size, y_size = entry["bounds"]
        cylinders = tuple(
            Cylinder(float(c["base"][0]), float(c["base"][1]), float(c["radius"]))
            for c in entry.get("cylinders", ())
        )
        return cls(
            name=entry["name"],
            bounds=Bounds3D.centred_xz(x_size, z_size, y_size),
            obstacles=Obstacles(cylinders),
        )


class WorldRegistry:
    """Named list of world definitions."""

    def __init__(self, worlds: Iterable[World] = ()):
        self._worlds: List[World] = []
        for world in worlds:
            self.add(world)

    @classmethod
    def from_config(cls, entries: Sequence[dict]) -> "WorldRegistry":
        return cls(World.from_config(entry) for entry in entries)

    def add(self, world: World):
        if world.name in self.names():
            raise ConfigurationError(f"Duplicate world name: {world.name!r}")
        self._worlds.append(world)

    def names(self) -> List[str]:
        return [world.name for world in self._worlds]

    def get(self, name: str) -> World:
        for world in self._worlds:
            if world.name == name:
                return world
        raise UnknownWorldError(name, self.names())

    def __contains__(self, name: str) -> bool:
        return name in self.names()

    def __iter__(self):
        return iter(self._worlds)

    def __len__(self):
        return len(self._worlds)


def default_registry() -> WorldRegistry:
    """Registry built from the WORLDS table in config.boids."""
    registry = WorldRegistry.from_config(config.WORLDS)
    logger.debug("Loaded %d worlds: %s", len(registry), ", ".join(registry.names()))
    return registry
