"""Монотонний ланцюг і результат ConvexHull2D."""

import math

import numpy as np
import pytest
from scipy.spatial import ConvexHull as ScipyHull

from cghull import (ConvexHull2D, ConvexityValidationError, InvalidInputError,
                    MonotoneChain, Pt2, convex_hull_2d)

EPS = 1e-10


def rotations_equal(a, b):
    a, b = list(a), list(b)
    if len(a) != len(b):
        return False
    if not a:
        return True
    return any(a[i:] + a[:i] == b for i in range(len(a)))


class TestSmallInputs:

    def test_empty(self):
        hull = MonotoneChain(precision=EPS).generate([])
        assert hull.vertices == ()
        assert hull.region is None
        assert hull.is_degenerate

    def test_one_point(self):
        hull = MonotoneChain(precision=EPS).generate([(1, 2)])
        assert hull.vertices == (Pt2(1, 2),)
        assert hull.region is None
        assert hull.segments == ()

    def test_two_points(self):
        hull = MonotoneChain(precision=EPS).generate([(2, 2), (1, 1)])
        assert hull.vertices == (Pt2(1, 1), Pt2(2, 2))
        assert hull.region is None
        assert hull.segments == ((Pt2(1, 1), Pt2(2, 2)),)

    def test_all_identical(self):
        pts = [(1, 1)] * 5
        hull = MonotoneChain(precision=EPS).generate(pts)
        assert hull.vertices == (Pt2(1, 1),)

    def test_identical_within_tolerance(self):
        pts = [(1, 1), (1 + 1e-12, 1), (1, 1 - 1e-12)]
        hull = MonotoneChain(precision=EPS).generate(pts)
        assert len(hull) == 1

    def test_none_is_rejected(self):
        with pytest.raises(InvalidInputError):
            MonotoneChain().generate(None)

    def test_bad_points_are_rejected(self):
        with pytest.raises(InvalidInputError):
            MonotoneChain().generate([(0, 0), (1, 2, 3)])
        with pytest.raises(InvalidInputError):
            MonotoneChain().generate([(0, 0), (float("nan"), 1)])


class TestCollinear:

    def test_collinear_midpoint_dropped(self):
        pts = [(0, 0), (1, 0), (2, 0), (1, 1)]
        hull = MonotoneChain(False, EPS).generate(pts)
        assert hull.vertices == (Pt2(0, 0), Pt2(2, 0), Pt2(1, 1))

    def test_collinear_midpoint_included(self):
        pts = [(0, 0), (1, 0), (2, 0), (1, 1)]
        hull = MonotoneChain(True, EPS).generate(pts)
        assert hull.vertices == (Pt2(0, 0), Pt2(1, 0), Pt2(2, 0), Pt2(1, 1))

    def test_collinear_reverse_order(self):
        pts = [(1, 1), (2, 0), (1, 0), (0, 0)]
        assert MonotoneChain(False, EPS).generate(pts).vertices == (Pt2(0, 0), Pt2(2, 0), Pt2(1, 1))
        assert MonotoneChain(True, EPS).generate(pts).vertices == \
            (Pt2(0, 0), Pt2(1, 0), Pt2(2, 0), Pt2(1, 1))

    def test_all_collinear_gives_segment(self):
        pts = [(3, 3), (0, 0), (1, 1), (2, 2)]
        hull = MonotoneChain(False, EPS).generate(pts)
        assert hull.vertices == (Pt2(0, 0), Pt2(3, 3))
        assert hull.region is None

    def test_all_collinear_with_collinear_points_kept(self):
        pts = [(3, 3), (0, 0), (1, 1), (2, 2)]
        hull = MonotoneChain(True, EPS).generate(pts)
        assert hull.vertices == (Pt2(0, 0), Pt2(3, 3))

    def test_square_with_edge_midpoints(self):
        pts = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2), (1, 2), (0, 2), (0, 1), (1, 1)]
        expected = (Pt2(0, 0), Pt2(1, 0), Pt2(2, 0), Pt2(2, 1),
                    Pt2(2, 2), Pt2(1, 2), Pt2(0, 2), Pt2(0, 1))
        assert MonotoneChain(True, EPS).generate(pts).vertices == expected
        assert convex_hull_2d(pts, include_collinear=True, precision=EPS).vertices == expected
        assert len(MonotoneChain(False, EPS).generate(pts)) == 4

    def test_collinear_point_on_existing_boundary(self, check_hull2d):
        pts = [
            (7.3152, 34.7472), (6.400799999999997, 34.747199999999985),
            (5.486399999999997, 34.7472), (4.876799999999999, 34.7472),
            (4.876799999999999, 34.1376), (4.876799999999999, 30.48),
            (6.0959999999999965, 30.48), (6.0959999999999965, 34.1376),
            (7.315199999999996, 34.1376), (7.3152, 30.48),
        ]
        hull = MonotoneChain(False, EPS).generate(pts)
        check_hull2d(pts, hull)

    @pytest.mark.parametrize("include", [False, True])
    def test_collinear_points_in_any_order(self, include, check_hull2d):
        pts = [
            (0, -29.959696875), (0, -31.621809375), (0, -28.435696875),
            (0, -33.145809375), (3.048, -33.145809375), (3.048, -31.621809375),
            (3.048, -29.959696875), (4.572, -33.145809375), (4.572, -28.435696875),
        ]
        check_hull2d(pts, MonotoneChain(include, EPS).generate(pts), include)

    @pytest.mark.parametrize("include", [False, True])
    def test_three_collinear_points_in_any_order(self, include, check_hull2d):
        pts = [
            (16.078200000000184, -36.52519999989808), (19.164300000000186, -36.52519999989808),
            (19.1643, -25.28136477910407), (19.1643, -17.678400000004157),
        ]
        check_hull2d(pts, MonotoneChain(include, EPS).generate(pts), include)


class TestGeneralPosition:

    def test_identical_and_close_points(self, check_hull2d):
        pts = [(1, 1), (2, 2), (2, 4), (4, 1), (1, 1)]
        check_hull2d(pts, MonotoneChain(False, EPS).generate(pts))
        check_hull2d(pts, MonotoneChain(True, EPS).generate(pts), True)
        close = [(1, 1), (2, 2), (2, 4), (4, 1), (1.00001, 1)]
        check_hull2d(close, MonotoneChain(False, EPS).generate(close))

    def test_lattice_reference_hull(self, lattice_2d):
        reference = [
            (-11, -1), (-10, -3), (-6, -7), (-3, -8), (3, -8), (6, -7), (10, -3), (11, -1),
            (11, 1), (10, 3), (6, 7), (3, 8), (-3, 8), (-6, 7), (-10, 3), (-11, 1),
        ]
        hull = MonotoneChain(False, EPS).generate(lattice_2d)
        assert hull.vertices == tuple(Pt2(x, y) for x, y in reference)
        assert hull.region.size == pytest.approx(274.0, abs=1e-12)

        perimeter = sum(math.dist(reference[i], reference[(i + 1) % len(reference)])
                        for i in range(len(reference)))
        assert hull.region.boundary_size == pytest.approx(perimeter, rel=1e-12)

    def test_random_cloud_matches_scipy(self, rng, check_hull2d):
        pts = rng.uniform(-1.0, 1.0, size=(500, 2))
        hull = MonotoneChain(False, EPS).generate(pts.tolist())
        ref = ScipyHull(pts)

        assert {tuple(v) for v in hull.vertices} == {tuple(pts[i]) for i in ref.vertices}
        assert hull.region.size == pytest.approx(ref.volume, rel=1e-12)
        check_hull2d(pts.tolist(), hull)

    def test_hull_starts_at_leftmost_lowest_vertex(self, rng):
        pts = rng.normal(size=(200, 2)).tolist()
        hull = MonotoneChain(False, EPS).generate(pts)
        first = hull.vertices[0]
        assert all((first.x, first.y) <= (v.x, v.y) for v in hull.vertices)

    def test_idempotent(self, rng):
        pts = rng.uniform(-5.0, 5.0, size=(300, 2)).tolist()
        gen = MonotoneChain(False, EPS)
        hull = gen.generate(pts)
        again = gen.generate(list(reversed(hull.vertices)))
        assert rotations_equal(again.vertices, hull.vertices)


class TestNoisyInput:
    """Межа квадрата з «шумом» координат: понад допуск і в межах допуску."""

    @pytest.mark.parametrize("include", [False, True])
    def test_noise_above_tolerance(self, include, square_boundary, max_excess):
        for _ in range(5):
            pts = square_boundary(30, 1e-9)
            hull = MonotoneChain(include, EPS).generate(pts.tolist())
            assert hull.region.size == pytest.approx(1.0, abs=1e-8)
            assert max_excess(hull.region, pts) <= 5 * EPS

    def test_noise_within_tolerance_leaves_corners(self, square_boundary, max_excess):
        pts = square_boundary(30, 4e-11)
        hull = MonotoneChain(False, EPS).generate(pts.tolist())
        assert [(round(v.x), round(v.y)) for v in hull.vertices] == [(0, 0), (1, 0), (1, 1), (0, 1)]
        assert max_excess(hull.region, pts) <= EPS

    def test_noise_within_tolerance_keeps_boundary_points(self, square_boundary):
        pts = square_boundary(30, 4e-11)
        hull = MonotoneChain(True, EPS).generate(pts.tolist())
        assert len(hull) == len(pts) == 116
        assert hull.region.size == pytest.approx(1.0, abs=1e-9)


class TestConvexHull2D:

    def test_clockwise_vertices_fail_validation(self):
        with pytest.raises(ConvexityValidationError):
            ConvexHull2D([(0, 0), (0, 1), (1, 1), (1, 0)], EPS)

    def test_duplicate_neighbors_fail_validation(self):
        with pytest.raises(ConvexityValidationError):
            ConvexHull2D([(0, 0), (1, 0), (1, 0), (0, 1)], EPS)

    def test_equality_and_hash_over_vertices(self):
        a = ConvexHull2D([(0, 0), (1, 0), (0, 1)], EPS)
        b = ConvexHull2D([Pt2(0, 0), Pt2(1, 0), Pt2(0, 1)], 1e-6)
        c = ConvexHull2D([(1, 0), (0, 1), (0, 0)], EPS)
        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_region_is_cached(self):
        hull = ConvexHull2D([(0, 0), (1, 0), (1, 1), (0, 1)], EPS)
        assert hull.region is hull.region
        assert hull.region.size == pytest.approx(1.0)

    def test_segments_close_the_loop(self):
        hull = ConvexHull2D([(0, 0), (1, 0), (0, 1)], EPS)
        assert hull.segments[-1] == (Pt2(0, 1), Pt2(0, 0))
        assert len(hull.lines) == 3
        assert all(line.offset(Pt2(0.25, 0.25)) < 0 for line in hull.lines)

    def test_vertices_are_immutable(self):
        hull = ConvexHull2D([(0, 0), (1, 0), (0, 1)], EPS)
        with pytest.raises(TypeError):
            hull.vertices[0] = Pt2(5, 5)

    def test_numpy_input(self):
        hull = MonotoneChain(precision=EPS).generate(np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]))
        assert len(hull) == 3

    def test_reversal_fails_validation(self):
        with pytest.raises(ConvexityValidationError):
            ConvexHull2D([(0, 0), (2, 0), (1, 0)], EPS)
        with pytest.raises(ConvexityValidationError):
            ConvexHull2D([(0, 0), (1, 0), (1, 1), (1, 0.5), (0, 1)], EPS)

    def test_tiny_polygon_passes_validation(self):
        # площа повороту менша за допуск, але це не розворот
        hull = ConvexHull2D([(0, 0), (1e-6, 0), (0, 1e-6)], EPS)
        assert len(hull) == 3
