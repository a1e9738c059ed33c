"""Local tangent-plane projection and polyline simplification."""

import math

import numpy as np

from .constants import EARTH_RADIUS
from .models import GeoPoint, ProjectedPoint


# ── Coordinate transforms ───────────────────────────────────────────────

def project(lat: float, lng: float, origin: GeoPoint) -> ProjectedPoint:
    """Project a WGS84 point to metres east/north of ``origin``.

    Equirectangular approximation: x = R·Δlng·cos(lat0), y = R·Δlat.
    Good to well under a metre within a couple of kilometres of the origin.
    """
    d_lat = math.radians(lat - origin.lat)
    d_lng = math.radians(lng - origin.lng)
    lat_rad = math.radians(origin.lat)
    return ProjectedPoint(EARTH_RADIUS * d_lng * math.cos(lat_rad),
                          EARTH_RADIUS * d_lat)


def project_many(points, origin: GeoPoint) -> np.ndarray:
    """Vectorised :func:`project` for a sequence of GeoPoints.

    Returns an (N, 2) float64 array of (x, y) metres.
    """
    if len(points) == 0:
        return np.empty((0, 2), dtype=np.float64)
    lats = np.fromiter((p.lat for p in points), dtype=np.float64, count=len(points))
    lngs = np.fromiter((p.lng for p in points), dtype=np.float64, count=len(points))

    out = np.empty((len(points), 2), dtype=np.float64)
    out[:, 0] = EARTH_RADIUS * np.radians(lngs - origin.lng) * math.cos(math.radians(origin.lat))
    out[:, 1] = EARTH_RADIUS * np.radians(lats - origin.lat)
    return out


# ── Simplification ──────────────────────────────────────────────────────

def perpendicular_distance(p, a, b) -> float:
    """Distance from ``p`` to the segment ``ab``.

    A zero-length segment degrades to the distance from ``p`` to ``a``.
    """
    px, py = p
    ax, ay = a
    bx, by = b
    dx = bx - ax
    dy = by - ay
    l2 = dx * dx + dy * dy
    if l2 == 0:
        return math.hypot(px - ax, py - ay)
    t = ((px - ax) * dx + (py - ay) * dy) / l2
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def _segment_distances(inner: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Vectorised :func:`perpendicular_distance` for an (N, 2) array."""
    d = b - a
    l2 = float(d[0] * d[0] + d[1] * d[1])
    if l2 == 0:
        return np.hypot(inner[:, 0] - a[0], inner[:, 1] - a[1])
    t = np.clip(((inner[:, 0] - a[0]) * d[0] + (inner[:, 1] - a[1]) * d[1]) / l2, 0.0, 1.0)
    return np.hypot(inner[:, 0] - (a[0] + t * d[0]), inner[:, 1] - (a[1] + t * d[1]))


def simplify_points(points, tolerance: float) -> np.ndarray:
    """Ramer–Douglas–Peucker simplification with an explicit work stack.

    Parameters
    ----------
    points : array-like (N, 2)
        Projected polyline vertices in metres.
    tolerance : float
        Maximum allowed deviation of a dropped vertex from the kept chord.

    Returns
    -------
    np.ndarray (K, 2) with K <= N.  The first and last vertices are always
    kept; sequences of two points or fewer come back unchanged.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    n = len(pts)
    if n <= 2:
        return pts

    keep = np.zeros(n, dtype=bool)
    keep[0] = True
    keep[-1] = True

    stack = [(0, n - 1)]
    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue
        dists = _segment_distances(pts[start + 1:end], pts[start], pts[end])
        rel = int(np.argmax(dists))   # first maximum on ties
        if dists[rel] > tolerance:
            mid = start + 1 + rel
            keep[mid] = True
            stack.append((start, mid))
            stack.append((mid, end))

    return pts[keep]
