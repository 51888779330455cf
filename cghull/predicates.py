# cghull/predicates.py
from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction

from .geom import Pt, Pt2, sub, cross, dot, norm, scale, sub2, cross2, norm2, dot2
from .precision import Precision


def orient2d(a: Pt2, b: Pt2, c: Pt2) -> float:
    """> 0 якщо c лівіше напрямку a->b (поворот CCW), < 0 якщо правіше."""
    return cross2(sub2(b, a), sub2(c, a))

def distance_to_line(a: Pt, b: Pt, p: Pt) -> float:
    """Відстань від p до прямої через a, b (a != b)."""
    d = sub(b, a)
    return norm(cross(d, sub(p, a))) / norm(d)

def exact_normal(a: Pt, b: Pt, c: Pt) -> Pt:
    """
    (b - a) x (c - a) у раціональній арифметиці; округлення до float лише
    в самому кінці. Для «голки» (c майже на прямій ab) звичайний float-добуток
    губить напрям нормалі через скорочення різниць.
    """
    ax, ay, az = (Fraction(t) for t in a)
    ux, uy, uz = Fraction(b.x) - ax, Fraction(b.y) - ay, Fraction(b.z) - az
    vx, vy, vz = Fraction(c.x) - ax, Fraction(c.y) - ay, Fraction(c.z) - az
    return Pt(float(uy * vz - uz * vy), float(uz * vx - ux * vz), float(ux * vy - uy * vx))


@dataclass(frozen=True)
class Line2:
    """
    Орієнтована пряма: точка + одиничний напрям.
    offset(p) > 0: праворуч від напрямку, тобто зовні CCW-контуру.
    """
    point: Pt2
    direction: Pt2

    @classmethod
    def from_points(cls, a: Pt2, b: Pt2, precision: Precision) -> "Line2":
        d = sub2(b, a)
        n = norm2(d)
        if precision.eq_zero(n):
            raise ValueError(f"line points are equal within tolerance: {a}, {b}")
        return cls(a, Pt2(d.x / n, d.y / n))

    @property
    def normal(self) -> Pt2:
        """Зовнішня (права) одинична нормаль."""
        return Pt2(self.direction.y, -self.direction.x)

    def offset(self, p: Pt2) -> float:
        return -cross2(self.direction, sub2(p, self.point))

    def abscissa(self, p: Pt2) -> float:
        return dot2(self.direction, sub2(p, self.point))


@dataclass(frozen=True)
class Plane:
    """Площина: точка + одинична нормаль назовні. offset(p): знакова відстань."""
    point: Pt
    normal: Pt

    @classmethod
    def from_points(cls, a: Pt, b: Pt, c: Pt) -> "Plane":
        """Нормаль за правилом правої руки для обходу a -> b -> c."""
        n = exact_normal(a, b, c)
        length = norm(n)
        if length == 0.0:
            raise ValueError(f"plane points are collinear: {a}, {b}, {c}")
        return cls(a, scale(n, 1.0 / length))

    @property
    def origin_offset(self) -> float:
        """d у рівнянні n·x = d."""
        return dot(self.normal, self.point)

    def offset(self, p: Pt) -> float:
        return dot(self.normal, sub(p, self.point))

    def reverse(self) -> "Plane":
        return Plane(self.point, scale(self.normal, -1.0))
