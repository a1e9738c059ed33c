"""Terrain grid handling: validation, elevation lookup and slope-coloured mesh.

Provides functions for:
1. Checking that an elevation grid is rectangular
2. Picking the centre elevation every output z is measured from
3. Nearest-sample elevation lookup for feature base heights
4. Triangulating the grid and classifying faces by slope
5. Laying out the sample lattice an elevation service is queried with
"""

import math
import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .constants import (
    EARTH_RADIUS, SLOPE_THRESHOLDS, SLOPE_COLORS,
    MIN_RADIUS, MAX_RADIUS, DEFAULT_GRID_SIZE,
)
from .geometry import project_many
from .models import GeoPoint, TerrainGrid, TerrainPoint

logger = logging.getLogger(__name__)

Vertex3 = Tuple[float, float, float]


class TerrainFace(NamedTuple):
    """One triangle of the terrain mesh, in local metres."""
    vertices: Tuple[Vertex3, Vertex3, Vertex3]
    slope: float
    color: int


def is_valid_grid(grid: Optional[TerrainGrid]) -> bool:
    """True for a non-empty grid whose rows all share one non-zero length."""
    if not grid:
        return False
    width = len(grid[0])
    return width > 0 and all(len(row) == width for row in grid)


def center_elevation(grid: Optional[TerrainGrid]) -> float:
    """Elevation of the grid's middle sample, or 0 without a usable grid."""
    if not is_valid_grid(grid):
        return 0.0
    return float(grid[len(grid) // 2][len(grid[0]) // 2].elevation)


def elevation_at(lat: float, lng: float, grid: Optional[TerrainGrid],
                 center_elev: float) -> float:
    """Elevation of the nearest grid sample relative to ``center_elev``.

    Brute-force nearest neighbour over every sample in degree space; grids
    are small (12×12 by default).  Ties keep the first sample in row-major
    order.  Returns 0 when there is no usable grid.
    """
    if not is_valid_grid(grid):
        return 0.0

    closest = math.inf
    elev = 0.0
    for row in grid:
        for p in row:
            d = (p.lat - lat) ** 2 + (p.lng - lng) ** 2
            if d < closest:
                closest = d
                elev = p.elevation
    return elev - center_elev


# ── Slope classification ────────────────────────────────────────────────

def calculate_slope(p1: Sequence[float], p2: Sequence[float],
                    p3: Sequence[float]) -> float:
    """Slope of the triangle (p1, p2, p3) from horizontal, in degrees.

    Degenerate (collinear or repeated) points have no normal and count as
    flat.
    """
    u = np.subtract(p2, p1, dtype=np.float64)
    v = np.subtract(p3, p1, dtype=np.float64)
    n = np.cross(u, v)
    mag = float(np.linalg.norm(n))
    if mag == 0:
        return 0.0
    cos_angle = min(1.0, abs(float(n[2])) / mag)
    return math.degrees(math.acos(cos_angle))


def slope_color(angle: float) -> int:
    """ACI colour of the slope band containing ``angle`` degrees."""
    if angle <= SLOPE_THRESHOLDS['FLAT']:
        return SLOPE_COLORS['FLAT']
    if angle <= SLOPE_THRESHOLDS['MILD']:
        return SLOPE_COLORS['MILD']
    if angle <= SLOPE_THRESHOLDS['MODERATE']:
        return SLOPE_COLORS['MODERATE']
    return SLOPE_COLORS['STEEP']


# ── Mesh generation ─────────────────────────────────────────────────────

def mesh_terrain(grid: Optional[TerrainGrid], origin: GeoPoint,
                 center_elev: float) -> List[TerrainFace]:
    """Triangulate an N×M elevation grid into 2·(N−1)·(M−1) coloured faces.

    For every cell with corners p1=(i, j), p2=(i+1, j), p3=(i+1, j+1) and
    p4=(i, j+1) two triangles are produced sharing the p2–p4 diagonal:
    (p1, p2, p4) followed by (p2, p3, p4).  Vertices are projected to local
    metres around ``origin`` with z relative to ``center_elev``.

    Returns an empty list for ragged grids or grids smaller than 2×2.
    """
    if not is_valid_grid(grid):
        return []

    n_rows, n_cols = len(grid), len(grid[0])
    if n_rows < 2 or n_cols < 2:
        return []

    # ── Vertex positions: one per grid sample ───────────────────
    flat = [p for row in grid for p in row]
    xy = project_many(flat, origin)
    z = np.fromiter((p.elevation for p in flat), dtype=np.float64,
                    count=len(flat)) - center_elev
    verts = np.column_stack([xy, z]).reshape(n_rows, n_cols, 3)

    faces = []
    for i in range(n_rows - 1):
        for j in range(n_cols - 1):
            v1 = tuple(verts[i, j].tolist())
            v2 = tuple(verts[i + 1, j].tolist())
            v3 = tuple(verts[i + 1, j + 1].tolist())
            v4 = tuple(verts[i, j + 1].tolist())

            for tri in ((v1, v2, v4), (v2, v3, v4)):
                slope = calculate_slope(*tri)
                faces.append(TerrainFace(tri, slope, slope_color(slope)))

    logger.info(f"Terrain grid mesh: {n_rows}x{n_cols} samples, {len(faces)} faces")
    return faces


# ── Sample lattice for elevation services ───────────────────────────────

def _lattice_bounds(center: GeoPoint, radius: float):
    radius = max(MIN_RADIUS, min(MAX_RADIUS, radius))
    d_lat = math.degrees(radius / EARTH_RADIUS)
    d_lng = math.degrees(radius / (EARTH_RADIUS * math.cos(math.radians(center.lat))))
    return (center.lat - d_lat, center.lat + d_lat,
            center.lng - d_lng, center.lng + d_lng)


def grid_lattice(center: GeoPoint, radius: float,
                 grid_size: int = DEFAULT_GRID_SIZE):
    """Row-major sample positions of a square grid covering ``radius`` metres.

    Returns
    -------
    lats, lngs : list[float]
        ``grid_size ** 2`` coordinates each, row by row (south to north,
        west to east within a row).
    """
    if grid_size < 2:
        raise ValueError(f"grid_size must be at least 2, got {grid_size}")

    min_lat, max_lat, min_lng, max_lng = _lattice_bounds(center, radius)
    lat_step = (max_lat - min_lat) / (grid_size - 1)
    lng_step = (max_lng - min_lng) / (grid_size - 1)

    lats, lngs = [], []
    for i in range(grid_size):
        for j in range(grid_size):
            lats.append(min_lat + i * lat_step)
            lngs.append(min_lng + j * lng_step)
    return lats, lngs


def grid_from_samples(lats, lngs, elevations,
                      grid_size: int = DEFAULT_GRID_SIZE) -> TerrainGrid:
    """Rebuild a TerrainGrid from flat lattice coordinates and elevations.

    Missing elevations (None) become 0.
    """
    expected = grid_size * grid_size
    if not (len(lats) == len(lngs) == len(elevations) == expected):
        raise ValueError(
            f"Invalid elevation data: expected {expected} samples, "
            f"got {len(elevations)}")

    grid = []
    idx = 0
    for _ in range(grid_size):
        row = []
        for _ in range(grid_size):
            elev = elevations[idx]
            row.append(TerrainPoint(lats[idx], lngs[idx],
                                    float(elev) if elev is not None else 0.0))
            idx += 1
        grid.append(row)
    return grid


def flat_grid(center: GeoPoint, radius: float,
              grid_size: int = DEFAULT_GRID_SIZE) -> TerrainGrid:
    """Zero-elevation grid used when no elevation data is available."""
    lats, lngs = grid_lattice(center, radius, grid_size)
    return grid_from_samples(lats, lngs, [0.0] * len(lats), grid_size)
