"""
Евристика Акла–Туссена: O(n)-прохід, що відкидає точки всередині
чотирикутника з крайніх точок (min x, max x, min y, max y).
Результат завжди надмножина вершин оболонки.
"""
from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidInputError
from .geom import EPS, Pt2, as_pt2, distance2
from .precision import PrecisionLike, Precision, as_precision
from .predicates import orient2d

logger = logging.getLogger(__name__)


class _Extrema:
    """Поточні крайні точки; при рівності лишається перша."""

    def __init__(self):
        self.min_x: Optional[Pt2] = None
        self.max_x: Optional[Pt2] = None
        self.min_y: Optional[Pt2] = None
        self.max_y: Optional[Pt2] = None

    def update(self, p: Pt2) -> bool:
        """True, якщо p стала новим кутом."""
        if self.min_x is None:
            self.min_x = self.max_x = self.min_y = self.max_y = p
            return True
        changed = False
        if p.x < self.min_x.x:
            self.min_x = p; changed = True
        if p.x > self.max_x.x:
            self.max_x = p; changed = True
        if p.y < self.min_y.y:
            self.min_y = p; changed = True
        if p.y > self.max_y.y:
            self.max_y = p; changed = True
        return changed

    def quadrilateral(self) -> List[Pt2]:
        # обхід min y -> max x -> max y -> min x іде проти годинникової стрілки
        quad: List[Pt2] = []
        for p in (self.min_y, self.max_x, self.max_y, self.min_x):
            if p is not None and p not in quad:
                quad.append(p)
        return quad


def _well_formed(quad: Sequence[Pt2]) -> bool:
    """Щонайменше 3 різні кути і додатна площа (не всі кути на одній прямій)."""
    if len(quad) < 3:
        return False
    area2 = 0.0
    for i in range(1, len(quad) - 1):
        area2 += orient2d(quad[0], quad[i], quad[i + 1])
    return area2 > 0.0


def inside_quadrilateral(p: Pt2, quad: Sequence[Pt2], include_collinear: bool,
                         precision: Precision) -> bool:
    """
    Чи можна відкинути p як внутрішню точку CCW-чотирикутника quad.
    Без колінеарних: ліворуч або на кожному ребрі (точний знак).
    З колінеарними: строго ліворуч понад допуск від кожного ребра,
    щоб точки на межі лишились кандидатами.
    """
    if p in quad:
        return True
    n = len(quad)
    for i in range(n):
        a, b = quad[i], quad[(i + 1) % n]
        area = orient2d(a, b, p)
        if include_collinear:
            if not precision.gt(area / distance2(a, b), 0.0):
                return False
        elif area < 0.0:
            return False
    return True


def _materialize(points: Optional[Iterable]) -> List[Pt2]:
    if points is None:
        raise InvalidInputError("points must not be None")
    return [as_pt2(p) for p in points]


def reduce_points(points: Iterable, include_collinear: bool = False,
                  precision: PrecisionLike = EPS) -> List[Pt2]:
    """
    Пакетний варіант: кути чотирикутника + усі точки, що не всередині нього.
    Якщо чотирикутник вироджений (менше 4 точок, менше 3 кутів, нульова площа),
    повертає вхід без змін.
    """
    prec = as_precision(precision)
    pts = _materialize(points)
    if len(pts) < 4:
        return pts

    ext = _Extrema()
    for p in pts:
        ext.update(p)
    quad = ext.quadrilateral()
    if not _well_formed(quad):
        logger.debug("akl-toussaint: degenerate quadrilateral (%d corners), no reduction", len(quad))
        return pts

    reduced = list(quad)
    for p in pts:
        if not inside_quadrilateral(p, quad, include_collinear, prec):
            reduced.append(p)
    logger.debug("akl-toussaint: %d -> %d candidates", len(pts), len(reduced))
    return reduced


def streaming_reduce(points: Iterable, include_collinear: bool = False,
                     precision: PrecisionLike = EPS) -> List[Pt2]:
    """
    Потоковий варіант: точки обробляються в порядку надходження.
    Нова крайня точка завжди лишається; будь-яка інша перевіряється лише
    проти чотирикутника на момент її появи і більше не переглядається,
    навіть якщо кути пізніше зміняться. Тому фільтрує слабше за reduce_points,
    але вершин оболонки не губить.
    """
    prec = as_precision(precision)
    pts = _materialize(points)

    ext = _Extrema()
    retained: List[Pt2] = []
    seen = set()
    for p in pts:
        if ext.update(p):
            if p not in seen:
                seen.add(p)
                retained.append(p)
            continue
        quad = ext.quadrilateral()
        if _well_formed(quad) and inside_quadrilateral(p, quad, include_collinear, prec):
            continue
        if p not in seen:
            seen.add(p)
            retained.append(p)
    logger.debug("akl-toussaint (streaming): %d -> %d candidates", len(pts), len(retained))
    return retained
