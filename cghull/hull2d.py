from __future__ import annotations
from typing import Iterator, Optional, Sequence, Tuple

from .errors import ConvexityValidationError
from .geom import EPS, Pt2, as_pt2, sub2, cross2, dot2
from .precision import Precision, PrecisionLike, as_precision
from .predicates import Line2
from .region import ConvexArea

Segment2 = Tuple[Pt2, Pt2]


def points_eq(a: Pt2, b: Pt2, precision: Precision) -> bool:
    return precision.eq(a.x, b.x) and precision.eq(a.y, b.y)


def is_convex(vertices: Sequence[Pt2], precision: Precision) -> bool:
    """
    Кожна циклічна трійка сусідніх вершин має невід'ємний поворот (CCW)
    з точністю до допуску, і жодна вершина не дублює сусідню.
    Нульовий поворот допустимий лише без розвороту назад.
    """
    n = len(vertices)
    if n < 2:
        return True
    if n == 2:
        return not points_eq(vertices[0], vertices[1], precision)
    for i in range(n):
        p1 = vertices[i - 1]
        p2 = vertices[i]
        p3 = vertices[(i + 1) % n]
        if points_eq(p1, p2, precision):
            return False
        d1 = sub2(p2, p1)
        d2 = sub2(p3, p2)
        # від'ємна площа означає обхід за годинниковою стрілкою
        turn = precision.compare(cross2(d1, d2), 0.0)
        if turn < 0:
            return False
        if turn == 0 and dot2(d1, d2) < 0.0 and \
                precision.eq_zero(Line2.from_points(p1, p2, precision).offset(p3)):
            return False  # розворот на 180°
    return True


class ConvexHull2D:
    """
    Опукла оболонка на площині: вершини у порядку CCW, без повторів.
    0 вершин: порожній вхід, 1: точка, 2: відрізок (усі колінеарні).
    Область (region) будується один раз, при першому зверненні.
    """

    def __init__(self, vertices: Sequence, precision: PrecisionLike = EPS):
        self.precision = as_precision(precision)
        self._vertices: Tuple[Pt2, ...] = tuple(as_pt2(p) for p in vertices)
        if not is_convex(self._vertices, self.precision):
            raise ConvexityValidationError(
                "vertices do not form a convex hull in CCW winding "
                f"(epsilon={self.precision.epsilon!r})"
            )
        self._segments: Optional[Tuple[Segment2, ...]] = None
        self._region: Optional[ConvexArea] = None
        self._region_built = False

    @property
    def vertices(self) -> Tuple[Pt2, ...]:
        return self._vertices

    @property
    def is_degenerate(self) -> bool:
        return len(self._vertices) < 3

    @property
    def segments(self) -> Tuple[Segment2, ...]:
        """Ребра межі по порядку; для двох вершин: один відрізок, для однієї: жодного."""
        if self._segments is None:
            v = self._vertices
            if len(v) <= 1:
                self._segments = ()
            elif len(v) == 2:
                self._segments = ((v[0], v[1]),)
            else:
                self._segments = tuple((v[i], v[(i + 1) % len(v)]) for i in range(len(v)))
        return self._segments

    @property
    def lines(self) -> Tuple[Line2, ...]:
        return tuple(Line2.from_points(a, b, self.precision) for a, b in self.segments)

    @property
    def region(self) -> Optional[ConvexArea]:
        if not self._region_built:
            self._region = None if self.is_degenerate else ConvexArea(self._vertices, self.precision)
            self._region_built = True
        return self._region

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Pt2]:
        return iter(self._vertices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConvexHull2D):
            return NotImplemented
        return self._vertices == other._vertices

    def __hash__(self) -> int:
        return hash(self._vertices)

    def __repr__(self) -> str:
        return f"ConvexHull2D(vertices={list(self._vertices)!r})"
