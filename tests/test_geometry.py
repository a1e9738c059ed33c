"""
Tests for geometry module (projection and simplification).

Run with: pytest tests/test_geometry.py -v
"""

import math

import numpy as np
import pytest

from dxfbuilder.geometry import (
    project, project_many, perpendicular_distance, simplify_points,
)
from dxfbuilder.models import GeoPoint


class TestProject:
    """Tests for the equirectangular tangent-plane projection."""

    def test_origin_maps_to_zero(self, origin):
        """The origin itself projects to (0, 0)."""
        x, y = project(origin.lat, origin.lng, origin)
        assert x == 0.0
        assert y == 0.0

    def test_north_offset_is_pure_y(self, origin):
        """A latitude-only offset moves along y only."""
        p = project(origin.lat + 0.001, origin.lng, origin)
        assert p.x == 0.0
        assert p.y == pytest.approx(6378137 * math.radians(0.001), rel=1e-6)

    def test_linear_in_small_offsets(self, origin):
        """Doubling the latitude offset doubles y."""
        one = project(origin.lat + 0.0005, origin.lng, origin)
        two = project(origin.lat + 0.0010, origin.lng, origin)
        assert two.y == pytest.approx(2 * one.y, rel=1e-6)

    def test_east_offset_scaled_by_cos_lat(self):
        """Longitude offsets shrink with the cosine of the origin latitude."""
        equator = project(0.0, 0.001, GeoPoint(0.0, 0.0))
        sixty = project(60.0, 0.001, GeoPoint(60.0, 0.0))
        assert sixty.x == pytest.approx(equator.x * 0.5, rel=1e-9)

    def test_project_many_matches_project(self, origin):
        """The vectorised projection agrees with the scalar one."""
        pts = [GeoPoint(origin.lat + 0.001 * i, origin.lng - 0.002 * i) for i in range(5)]
        arr = project_many(pts, origin)
        assert arr.shape == (5, 2)
        for p, (x, y) in zip(pts, arr):
            px, py = project(p.lat, p.lng, origin)
            assert x == pytest.approx(px, abs=1e-9)
            assert y == pytest.approx(py, abs=1e-9)

    def test_project_many_empty(self, origin):
        """An empty input gives an empty (0, 2) array."""
        assert project_many([], origin).shape == (0, 2)


class TestPerpendicularDistance:
    """Tests for point-to-segment distance."""

    def test_distance_to_segment(self):
        assert perpendicular_distance((5, 3), (0, 0), (10, 0)) == pytest.approx(3.0)

    def test_beyond_segment_end_uses_endpoint(self):
        """Points past the chord are measured to the nearest endpoint."""
        assert perpendicular_distance((13, 4), (0, 0), (10, 0)) == pytest.approx(5.0)

    def test_degenerate_chord(self):
        """A zero-length chord falls back to Euclidean distance."""
        assert perpendicular_distance((3, 4), (0, 0), (0, 0)) == pytest.approx(5.0)


class TestSimplifyPoints:
    """Tests for Ramer–Douglas–Peucker simplification."""

    def test_short_sequences_unchanged(self):
        """Two points or fewer come back as-is."""
        assert simplify_points([(0, 0), (1, 1)], 0.8).tolist() == [[0, 0], [1, 1]]
        assert simplify_points([(2, 3)], 0.8).tolist() == [[2, 3]]

    def test_collinear_interior_removed(self):
        """Exactly collinear interior points are all dropped."""
        out = simplify_points([(0, 0), (1, 1), (2, 2), (3, 3)], 0.8)
        assert out.tolist() == [[0, 0], [3, 3]]

    def test_spike_kept(self):
        """A vertex further than the tolerance from the chord survives."""
        out = simplify_points([(0, 0), (5, 3), (10, 0)], 0.8)
        assert out.tolist() == [[0, 0], [5, 3], [10, 0]]

    def test_small_wiggles_removed(self):
        """Deviations under the tolerance are flattened."""
        pts = [(0, 0), (1, 0.1), (2, -0.2), (3, 0.3), (4, 0)]
        assert simplify_points(pts, 0.8).tolist() == [[0, 0], [4, 0]]

    def test_endpoints_and_length(self):
        """First and last points are kept and the output never grows."""
        rng = np.random.default_rng(42)
        pts = np.cumsum(rng.normal(size=(200, 2)), axis=0)
        out = simplify_points(pts, 0.8)
        assert len(out) <= len(pts)
        assert np.array_equal(out[0], pts[0])
        assert np.array_equal(out[-1], pts[-1])

    def test_output_is_subsequence(self):
        """Kept points appear in their original order."""
        rng = np.random.default_rng(7)
        pts = np.cumsum(rng.normal(size=(100, 2)), axis=0)
        out = simplify_points(pts, 1.5)
        idx = [int(np.flatnonzero((pts == p).all(axis=1))[0]) for p in out]
        assert idx == sorted(idx)

    def test_idempotent(self):
        """Simplifying twice with the same tolerance changes nothing."""
        pts = [(0, 0), (1, 0.1), (2, -0.1), (3, 5), (4, 6), (5, 7.2), (6, 0)]
        once = simplify_points(pts, 0.8)
        twice = simplify_points(once, 0.8)
        assert np.array_equal(once, twice)

    def test_closed_ring(self):
        """A ring whose ends coincide keeps its shape corners."""
        square = [(0, 0), (5, 0), (10, 0), (10, 10), (0, 10), (0, 0)]
        out = simplify_points(square, 0.8)
        assert out.tolist() == [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]
