"""Neighbour queries: which boids each boid can see on this tick."""

import math
from typing import List

import numpy as np
from numba import njit


# ============================================================================
# NUMBA JIT-COMPILED SPATIAL GRID FUNCTIONS
# ============================================================================

@njit(cache=True)
def get_cell_index(x: float, y: float, z: float, origin: np.ndarray, cell_size: float, grid_dim: int) -> int:
    """Convert 3D position to 1D cell index."""
    cx = int((x - origin[0]) / cell_size)
    cy = int((y - origin[1]) / cell_size)
    cz = int((z - origin[2]) / cell_size)

    cx = max(0, min(cx, grid_dim - 1))
    cy = max(0, min(cy, grid_dim - 1))
    cz = max(0, min(cz, grid_dim - 1))

    return cx + cy * grid_dim + cz * grid_dim * grid_dim


@njit(cache=True)
def assign_cells(positions: np.ndarray, cell_indices: np.ndarray, origin: np.ndarray, cell_size: float, grid_dim: int):
    """Assign each boid to a cell."""
    for i in range(positions.shape[0]):
        cell_indices[i] = get_cell_index(
            positions[i, 0], positions[i, 1], positions[i, 2],
            origin, cell_size, grid_dim
        )


@njit(cache=True)
def build_cell_lists(cell_indices: np.ndarray, sorted_indices: np.ndarray, cell_starts: np.ndarray, cell_counts: np.ndarray):
    """Build cell start indices and counts after sorting."""
    cell_starts[:] = -1
    cell_counts[:] = 0

    for i in range(sorted_indices.shape[0]):
        cell = cell_indices[sorted_indices[i]]
        if cell_starts[cell] == -1:
            cell_starts[cell] = i
        cell_counts[cell] += 1


@njit(cache=True)
def is_visible(positions, velocities, i, j, radius_sq, cos_angle, check_angle):
    """Strict distance test, then (optionally) the angle between i's heading and i->j."""
    dx = positions[j, 0] - positions[i, 0]
    dy = positions[j, 1] - positions[i, 1]
    dz = positions[j, 2] - positions[i, 2]
    dist_sq = dx * dx + dy * dy + dz * dz
    if dist_sq >= radius_sq:
        return False
    if not check_angle:
        return True

    vx, vy, vz = velocities[i, 0], velocities[i, 1], velocities[i, 2]
    speed = math.sqrt(vx * vx + vy * vy + vz * vz)
    dist = math.sqrt(dist_sq)
    if speed == 0.0 or dist == 0.0:
        return True
    return (vx * dx + vy * dy + vz * dz) / (speed * dist) >= cos_angle


@njit(cache=True)
def grid_neighbours(
    positions: np.ndarray,
    velocities: np.ndarray,
    sorted_indices: np.ndarray,
    cell_starts: np.ndarray,
    cell_counts: np.ndarray,
    origin: np.ndarray,
    cell_size: float,
    grid_dim: int,
    radius: float,
    cos_angle: float,
    check_angle: bool,
    offsets: np.ndarray,
    out: np.ndarray,
    count_only: bool
):
    """
    Scan neighbouring cells for every boid.

    With count_only, writes neighbour counts to offsets[i + 1]; otherwise
    fills out[offsets[i]:offsets[i + 1]] with neighbour indices.
    """
    radius_sq = radius * radius
    cell_range = int(math.ceil(radius / cell_size))

    for i in range(positions.shape[0]):
        cx = max(0, min(int((positions[i, 0] - origin[0]) / cell_size), grid_dim - 1))
        cy = max(0, min(int((positions[i, 1] - origin[1]) / cell_size), grid_dim - 1))
        cz = max(0, min(int((positions[i, 2] - origin[2]) / cell_size), grid_dim - 1))

        found = 0
        for dcx in range(-cell_range, cell_range + 1):
            ncx = cx + dcx
            if ncx < 0 or ncx >= grid_dim:
                continue
            for dcy in range(-cell_range, cell_range + 1):
                ncy = cy + dcy
                if ncy < 0 or ncy >= grid_dim:
                    continue
                for dcz in range(-cell_range, cell_range + 1):
                    ncz = cz + dcz
                    if ncz < 0 or ncz >= grid_dim:
                        continue

                    cell_idx = ncx + ncy * grid_dim + ncz * grid_dim * grid_dim
                    start = cell_starts[cell_idx]
                    if start == -1:
                        continue

                    for k in range(cell_counts[cell_idx]):
                        j = sorted_indices[start + k]
                        if i == j:
                            continue
                        if is_visible(positions, velocities, i, j, radius_sq, cos_angle, check_angle):
                            if not count_only:
                                out[offsets[i] + found] = j
                            found += 1

        if count_only:
            offsets[i + 1] = found


# ============================================================================
# QUERY CLASSES
# ============================================================================

def angle_test(angular_threshold: float):
    """(cos_angle, check_angle) for an angular threshold in degrees."""
    if angular_threshold >= 180.0:
        return -1.0, False
    return math.cos(math.radians(angular_threshold)), True


class NeighbourQuery:
    """
    Finds every boid visible to each boid.

    Works on arrays snapshotted before any boid moves, and returns one
    ascending index array per boid. Swap implementations freely; the
    rules never see which one is in use.
    """

    def query(self, positions: np.ndarray, velocities: np.ndarray,
              radius: float, angular_threshold: float = 180.0) -> List[np.ndarray]:
        raise NotImplementedError


class BruteForceNeighbours(NeighbourQuery):
    """Vectorised all-pairs check, O(n^2) per tick."""

    def query(self, positions, velocities, radius, angular_threshold=180.0):
        n = len(positions)
        if n == 0:
            return []

        offsets = positions[None, :, :] - positions[:, None, :]  # [i, j] = j - i
        dist_sq = np.einsum("ijk,ijk->ij", offsets, offsets)
        visible = dist_sq < radius * radius
        np.fill_diagonal(visible, False)
        dist = np.sqrt(dist_sq)

        cos_angle, check_angle = angle_test(angular_threshold)
        if check_angle:
            speed = np.linalg.norm(velocities, axis=1)
            dots = np.einsum("ik,ijk->ij", velocities, offsets)
            denom = speed[:, None] * dist
            # Same test as vector.angle_between(v_i, j - i) <= threshold; no heading
            # or coincident boids are always visible
            cosines = np.where(denom > 0, dots / np.where(denom > 0, denom, 1.0), 1.0)
            visible &= cosines >= cos_angle

        return [np.flatnonzero(row) for row in visible]


class GridNeighbours(NeighbourQuery):
    """
    Uniform-grid spatial hash with Numba kernels.

    The grid covers the current positions; cells are never smaller than
    the visibility radius and the grid is at most max_dim cells a side.
    """

    def __init__(self, max_dim: int = 64):
        self.max_dim = max_dim

    def query(self, positions, velocities, radius, angular_threshold=180.0):
        n = len(positions)
        if n == 0:
            return []

        positions = np.ascontiguousarray(positions, dtype=np.float64)
        velocities = np.ascontiguousarray(velocities, dtype=np.float64)
        origin = positions.min(axis=0)
        extent = float((positions.max(axis=0) - origin).max())
        cell_size = max(float(radius), extent / self.max_dim, 1e-9)
        grid_dim = min(int(extent / cell_size) + 1, self.max_dim)
        num_cells = grid_dim ** 3

        cell_indices = np.zeros(n, dtype=np.int64)
        assign_cells(positions, cell_indices, origin, cell_size, grid_dim)
        sorted_indices = np.argsort(cell_indices, kind="stable").astype(np.int64)
        cell_starts = np.zeros(num_cells, dtype=np.int64)
        cell_counts = np.zeros(num_cells, dtype=np.int64)
        build_cell_lists(cell_indices, sorted_indices, cell_starts, cell_counts)

        cos_angle, check_angle = angle_test(angular_threshold)
        offsets = np.zeros(n + 1, dtype=np.int64)
        out = np.zeros(0, dtype=np.int64)
        grid_neighbours(
            positions, velocities, sorted_indices, cell_starts, cell_counts,
            origin, cell_size, grid_dim, float(radius), cos_angle, check_angle,
            offsets, out, True
        )
        offsets = np.cumsum(offsets)
        out = np.zeros(offsets[-1], dtype=np.int64)
        grid_neighbours(
            positions, velocities, sorted_indices, cell_starts, cell_counts,
            origin, cell_size, grid_dim, float(radius), cos_angle, check_angle,
            offsets, out, False
        )

        return [np.sort(out[offsets[i]:offsets[i + 1]]) for i in range(n)]
