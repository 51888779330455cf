"""Спільні фікстури для тестів cghull."""

import numpy as np
import pytest

from cghull import Precision, Pt, Pt2
from cghull.hull2d import is_convex

TEST_EPS = 1e-10


@pytest.fixture
def precision():
    return Precision(TEST_EPS)


@pytest.fixture
def rng():
    return np.random.default_rng(10)


@pytest.fixture
def unit_cube():
    return [Pt(x, y, z) for x in (0.0, 1.0) for y in (0.0, 1.0) for z in (0.0, 1.0)]


@pytest.fixture
def lattice_2d():
    """Цілочисельна «решітка» з дірою всередині; площа оболонки 274."""
    # x -> відрізки y (включно)
    rows = {
        -11: [(-1, 1)], -10: [(-3, 3)], -9: [(-4, 4)], -8: [(-5, 5)], -7: [(-6, 6)],
        -6: [(-7, 7)], -5: [(-7, -2), (4, 7)], -4: [(-7, -2), (4, 7)],
        -3: [(-8, -2), (4, 8)], -2: [(-8, -2), (4, 8)], -1: [(-8, -2), (4, 8)],
        0: [(-8, -2), (4, 8)], 1: [(-8, 8)], 2: [(-8, 8)], 3: [(-8, 8)],
        4: [(-7, 7)], 5: [(-7, 7)], 6: [(-7, 7)], 7: [(-6, 6)], 8: [(-5, 5)],
        9: [(-4, 4)], 10: [(-3, 3)], 11: [(-1, 1)],
    }
    return [Pt2(float(x), float(y))
            for x, spans in rows.items()
            for lo, hi in spans
            for y in range(lo, hi + 1)]


@pytest.fixture
def check_hull2d(precision):
    """Опуклість + усі вхідні точки в області; з колінеарними: точки на межі є вершинами."""

    def check(points, hull, include_collinear=False):
        pts = [Pt2(*p) for p in points]
        assert is_convex(hull.vertices, precision)
        for v in hull.vertices:
            assert v in pts
        region = hull.region
        if region is None:
            return
        for p in pts:
            assert region.contains(p), p
            if include_collinear:
                on_boundary = any(abs(line.offset(p)) <= TEST_EPS and
                                  -TEST_EPS <= line.abscissa(p) <= line.abscissa(b) + TEST_EPS
                                  for line, (a, b) in zip(hull.lines, hull.segments))
                if on_boundary:
                    assert any(abs(v.x - p.x) <= TEST_EPS and abs(v.y - p.y) <= TEST_EPS
                               for v in hull.vertices), p

    return check


@pytest.fixture
def check_hull3d(precision):
    """Опуклість кожної грані, замкнений 2-многовид, узгоджені сусіди, усі точки всередині."""

    def check(points, hull):
        assert not hull.is_degenerate
        n = len(hull.vertices)
        edges = {}
        for fi, f in enumerate(hull.facets):
            for i in range(n):
                assert precision.lte(f.plane.offset(hull.vertices[i]), 0.0)
            a, b, c = f.vertices
            for ei, e in enumerate(((a, b), (b, c), (c, a))):
                assert e not in edges
                edges[e] = (fi, ei)
        for (u, v), (fi, ei) in edges.items():
            assert (v, u) in edges
            assert hull.facets[fi].neighbors[ei] == edges[(v, u)][0]
        region = hull.region
        assert region.contains_all(points).all()

    return check


@pytest.fixture
def square_boundary(rng):
    """Межа одиничного квадрата, per_side точок на бік, з рівномірним шумом ±noise."""

    def make(per_side, noise):
        t = np.linspace(0.0, 1.0, per_side)
        zero, one = np.zeros_like(t), np.ones_like(t)
        sides = np.vstack([np.c_[t, zero], np.c_[one, t], np.c_[t, one], np.c_[zero, t]])
        pts = np.unique(sides, axis=0)
        return pts + rng.uniform(-noise, noise, size=pts.shape)

    return make


@pytest.fixture
def cube_surface(rng):
    """Точки сітки per_axis^3 на поверхні одиничного куба з шумом ±noise."""

    def make(per_axis, noise):
        t = np.linspace(0.0, 1.0, per_axis)
        grid = np.stack(np.meshgrid(t, t, t, indexing="ij"), axis=-1).reshape(-1, 3)
        on_surface = np.any((grid == 0.0) | (grid == 1.0), axis=1)
        pts = grid[on_surface]
        return pts + rng.uniform(-noise, noise, size=pts.shape)

    return make


@pytest.fixture
def max_excess():
    """Наскільки найдальша точка виходить за межу області (<= 0: усі всередині)."""

    def excess(region, pts):
        return float(np.max(np.asarray(pts) @ region.normals.T - region.offsets))

    return excess
