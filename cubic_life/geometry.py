"""
Lattice Geometry & Neighbour Counting
=====================================

Spatial operations on the cubic lattice. Boundaries are ABSORBING:
offsets that leave [0, N)^3 contribute nothing, the grid never wraps.

Functions:
- in_bounds: Coordinate validity check
- count_neighbors: Moore count (26 neighbours) for one cell
- neighbor_counts: Moore counts for every cell at once (scipy convolution)
- cell_centers: World-space centre of each lattice index
- cells_within_radius: Cells whose centre lies near a world-space point
- shell_mask: Cells within a given distance of any lattice face

Interpretation:
- Face, edge and corner cells see 17, 11 and 7 neighbours at most
- This structurally biases boundary regions toward death
"""

import numpy as np
from typing import List, Sequence, Tuple
from scipy.ndimage import convolve

from .errors import OutOfBounds

Coordinate = Tuple[int, int, int]

# Offsets d in {-1, 0, 1}^3 without the origin
MOORE_OFFSETS: List[Coordinate] = [
    (dx, dy, dz)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    for dz in (-1, 0, 1)
    if (dx, dy, dz) != (0, 0, 0)
]

# Convolution kernel (reused every tick)
NEIGHBOR_KERNEL = np.ones((3, 3, 3), dtype=np.int16)
NEIGHBOR_KERNEL[1, 1, 1] = 0


def in_bounds(coord: Sequence[int], size: int) -> bool:
    """True iff every component of coord lies in [0, size)."""
    return all(0 <= c < size for c in coord)


def count_neighbors(grid: np.ndarray, coord: Coordinate) -> int:
    """
    Count live cells in the 26-cell Moore neighbourhood of one coordinate.

    Args:
        grid: Boolean (N, N, N) array indexed grid[x, y, z]
        coord: (x, y, z) inside the lattice

    Returns:
        Neighbour count in [0, 26]

    Raises:
        OutOfBounds: coord outside [0, N)^3

    Note:
        Out-of-range offsets are skipped, not wrapped.
    """
    size = grid.shape[0]
    if len(coord) != 3 or not in_bounds(coord, size):
        raise OutOfBounds(f"{tuple(coord)} outside [0, {size})^3")
    x, y, z = coord
    count = 0
    for dx, dy, dz in MOORE_OFFSETS:
        n = (x + dx, y + dy, z + dz)
        if in_bounds(n, size):
            count += int(grid[n])
    return count


def neighbor_counts(grid: np.ndarray) -> np.ndarray:
    """
    Moore neighbour counts for every cell.

    Convolves the grid with a 3×3×3 kernel whose centre is zero.
    mode="constant" pads with dead cells, which reproduces the
    absorbing boundary of count_neighbors exactly.

    Args:
        grid: Boolean (N, N, N) array

    Returns:
        int16 array of the same shape, values in [0, 26]
    """
    return convolve(grid.astype(np.int16), NEIGHBOR_KERNEL, mode="constant", cval=0)


def cell_centers(size: int, spacing: float) -> np.ndarray:
    """
    World-space coordinate of each lattice index along one axis.

    Cell i sits at (i - size/2) * spacing, so the lattice is centred
    on the world origin.
    """
    return (np.arange(size, dtype=float) - size / 2.0) * spacing


def cells_within_radius(
    point: Sequence[float],
    radius: float,
    size: int,
    spacing: float
) -> List[Coordinate]:
    """
    Find every cell whose centre is strictly closer than radius to point.

    Args:
        point: World-space (x, y, z) of a tracked position
        radius: Interaction radius (world units)
        size: Lattice edge length N
        spacing: Distance between neighbouring cell centres

    Returns:
        Coordinates in C order (x, then y, then z)

    Only the index box around the point is scanned, so the cost
    depends on the radius rather than on N^3.
    """
    centers = cell_centers(size, spacing)
    p = np.asarray(point, dtype=float)

    # Candidate index range per axis
    lo = np.floor((p - radius) / spacing + size / 2.0).astype(int)
    hi = np.ceil((p + radius) / spacing + size / 2.0).astype(int) + 1
    lo = np.clip(lo, 0, size)
    hi = np.clip(hi, 0, size)
    if np.any(hi <= lo):
        return []

    xs = centers[lo[0]:hi[0]]
    ys = centers[lo[1]:hi[1]]
    zs = centers[lo[2]:hi[2]]
    d2 = (
        (xs[:, None, None] - p[0]) ** 2 +
        (ys[None, :, None] - p[1]) ** 2 +
        (zs[None, None, :] - p[2]) ** 2
    )
    hits = np.argwhere(d2 < radius * radius) + lo
    return [(int(i), int(j), int(k)) for i, j, k in hits]


def shell_mask(size: int, depth: int = 1) -> np.ndarray:
    """
    Boolean mask of cells within `depth` layers of any lattice face.

    Used to compare boundary density against the interior, where the
    absorbing boundary is expected to thin the population.
    """
    idx = np.arange(size)
    near = (idx < depth) | (idx >= size - depth)
    return near[:, None, None] | near[None, :, None] | near[None, None, :]
