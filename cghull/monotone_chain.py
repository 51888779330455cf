"""
Монотонний ланцюг Ендрю: оболонка на площині за O(n log n).
Нижній ланцюг будується зліва направо, верхній справа наліво;
порівняння координат і зсувів ідуть через Precision.
"""
from __future__ import annotations
import logging
from functools import cmp_to_key
from typing import Iterable, List, Optional

from .akl_toussaint import reduce_points, streaming_reduce
from .errors import ConvexityValidationError, InvalidInputError
from .geom import EPS, Pt2, as_pt2, distance2
from .hull2d import ConvexHull2D, points_eq
from .precision import PrecisionLike, as_precision
from .predicates import Line2

logger = logging.getLogger(__name__)


class MonotoneChain:
    """
    include_collinear: чи лишати точки, що лежать на ребрах оболонки, як вершини.
    precision: допуск для всіх порівнянь (Precision або float epsilon).
    """

    def __init__(self, include_collinear: bool = False, precision: PrecisionLike = EPS):
        self.include_collinear = include_collinear
        self.precision = as_precision(precision)

    # ---------------- Публічний API ----------------
    def generate(self, points: Optional[Iterable]) -> ConvexHull2D:
        if points is None:
            raise InvalidInputError("points must not be None")
        pts = [as_pt2(p) for p in points]

        if len(pts) < 2:
            vertices = pts
        else:
            vertices = self.find_hull_vertices(pts)

        try:
            return ConvexHull2D(vertices, self.precision)
        except ConvexityValidationError:
            logger.warning("monotone chain: convexity check failed for %d vertices (epsilon=%g)",
                           len(vertices), self.precision.epsilon)
            raise

    def find_hull_vertices(self, points: Iterable[Pt2]) -> List[Pt2]:
        """Вершини оболонки CCW, починаючи з найлівішої-найнижчої."""
        prec = self.precision

        def by_x_then_y(a: Pt2, b: Pt2) -> int:
            # з допуском, інакше колінеарні точки з «шумом» у x впорядкуються хаотично
            cmp = prec.compare(a.x, b.x)
            if cmp == 0:
                cmp = prec.compare(a.y, b.y)
            if cmp == 0:
                # точні координати: порядок не залежить від порядку входу
                cmp = ((a.x, a.y) > (b.x, b.y)) - ((a.x, a.y) < (b.x, b.y))
            return cmp

        ordered = sorted(sorted(points, key=lambda p: (p.x, p.y)), key=cmp_to_key(by_x_then_y))

        lower: List[Pt2] = []
        for p in ordered:
            self._update_hull(p, lower)

        upper: List[Pt2] = []
        for p in reversed(ordered):
            self._update_hull(p, upper)

        if len(lower) > 2 and set(lower) == set(upper):
            # усі точки на одній прямій: лишаємо тільки кінці відрізка
            vertices = [lower[0], lower[-1]]
        else:
            # останні точки ланцюгів дублюють перші точки протилежних
            vertices = lower[:-1] + upper[:-1]

        # усі точки однакові: обидва ланцюги з однієї точки
        if not vertices and lower:
            vertices.append(lower[0])

        logger.debug("monotone chain: %d candidates -> %d vertices", len(ordered), len(vertices))
        return vertices

    # ---------------- Внутрішні методи ----------------
    def _update_hull(self, point: Pt2, hull: List[Pt2]) -> None:
        """
        Додає point у кінець ланцюга. Рішення приймається за положенням
        останньої вершини p2 відносно хорди p1 -> point: зовні хорди p2
        лишається, всередині знімається. Коли p2 на хорді з точністю до
        допуску, порядок трьох точок уздовж хорди визначає, яка з них зайва.
        """
        prec = self.precision

        if hull and points_eq(hull[-1], point, prec):
            return

        while len(hull) >= 2:
            p1, p2 = hull[-2], hull[-1]
            if points_eq(p1, point, prec):
                return  # дублікат p1

            chord = Line2.from_points(p1, point, prec)
            side = chord.offset(p2)

            if prec.eq_zero(side):
                along = chord.abscissa(p2)
                if along >= distance2(p1, point):
                    # point між p1 і p2
                    if self.include_collinear:
                        hull.insert(len(hull) - 1, point)
                    return
                if along > 0:
                    # p2 між p1 і point
                    if self.include_collinear:
                        break
                    hull.pop()
                    continue
                # p2 позаду p1: точки не впорядковані вздовж прямої,
                # вирішує знак без допуску

            if side > 0:
                break
            hull.pop()  # p2 всередині
        hull.append(point)


class ConvexHull2DBuilder:
    """
    Накопичує точки через append()/extend() і один раз будує оболонку.
    Під час build() потоковий фільтр Акла–Туссена відтворюється з нуля
    по всіх накопичених точках у порядку надходження.
    """

    def __init__(self, include_collinear: bool = False, precision: PrecisionLike = EPS):
        self.include_collinear = include_collinear
        self.precision = as_precision(precision)
        self._points: List[Pt2] = []
        self._built = False

    def append(self, point) -> "ConvexHull2DBuilder":
        self._check_open()
        if point is None:
            raise InvalidInputError("point must not be None")
        self._points.append(as_pt2(point))
        return self

    def extend(self, points: Optional[Iterable]) -> "ConvexHull2DBuilder":
        self._check_open()
        if points is None:
            raise InvalidInputError("points must not be None")
        for p in points:
            self.append(p)
        return self

    def build(self) -> ConvexHull2D:
        self._check_open()
        self._built = True
        candidates = streaming_reduce(self._points, self.include_collinear, self.precision)
        return MonotoneChain(self.include_collinear, self.precision).generate(candidates)

    def _check_open(self) -> None:
        if self._built:
            raise RuntimeError("builder already consumed by build()")


def convex_hull_2d(points: Optional[Iterable], include_collinear: bool = False,
                   precision: PrecisionLike = EPS, reduce: bool = True) -> ConvexHull2D:
    """Пакетний шлях: (за потреби) reduce_points, потім MonotoneChain."""
    if points is None:
        raise InvalidInputError("points must not be None")
    candidates = list(points)
    if reduce:
        candidates = reduce_points(candidates, include_collinear, precision)
    return MonotoneChain(include_collinear, precision).generate(candidates)
