from __future__ import annotations
from dataclasses import dataclass
from math import floor, isfinite, sqrt
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from .errors import InvalidInputError

EPS = 1e-10  # обережний епс для перевірок


@dataclass(frozen=True)
class Pt:
    x: float
    y: float
    z: float
    def __iter__(self):
        yield self.x; yield self.y; yield self.z


@dataclass(frozen=True)
class Pt2:
    x: float
    y: float
    def __iter__(self):
        yield self.x; yield self.y


PointLike = Union[Pt, Sequence[float]]
Point2Like = Union[Pt2, Sequence[float]]


def _coords(p, dim: int) -> Tuple[float, ...]:
    try:
        cs = tuple(float(c) for c in p)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"not a {dim}D point: {p!r}") from e
    if len(cs) != dim:
        raise InvalidInputError(f"expected {dim} coordinates, got {len(cs)}: {p!r}")
    if not all(isfinite(c) for c in cs):
        raise InvalidInputError(f"non-finite coordinate in {p!r}")
    return cs


def as_pt(p: PointLike) -> Pt:
    if isinstance(p, Pt):
        return p
    return Pt(*_coords(p, 3))


def as_pt2(p: Point2Like) -> Pt2:
    if isinstance(p, Pt2):
        return p
    return Pt2(*_coords(p, 2))


# ---------- 3D ----------
def sub(a: Pt, b: Pt) -> Pt:
    return Pt(a.x - b.x, a.y - b.y, a.z - b.z)

def add(a: Pt, b: Pt) -> Pt:
    return Pt(a.x + b.x, a.y + b.y, a.z + b.z)

def scale(a: Pt, k: float) -> Pt:
    return Pt(a.x*k, a.y*k, a.z*k)

def dot(a: Pt, b: Pt) -> float:
    return a.x*b.x + a.y*b.y + a.z*b.z

def cross(a: Pt, b: Pt) -> Pt:
    return Pt(a.y*b.z - a.z*b.y,
              a.z*b.x - a.x*b.z,
              a.x*b.y - a.y*b.x)

def norm(a: Pt) -> float:
    return sqrt(dot(a, a))

def distance(a: Pt, b: Pt) -> float:
    return norm(sub(a, b))


# ---------- 2D ----------
def sub2(a: Pt2, b: Pt2) -> Pt2:
    return Pt2(a.x - b.x, a.y - b.y)

def dot2(a: Pt2, b: Pt2) -> float:
    return a.x*b.x + a.y*b.y

def cross2(a: Pt2, b: Pt2) -> float:
    """Подвійна орієнтована площа паралелограма (a, b); > 0 якщо b лівіше a."""
    return a.x*b.y - a.y*b.x

def norm2(a: Pt2) -> float:
    return sqrt(dot2(a, a))

def distance2(a: Pt2, b: Pt2) -> float:
    return norm2(sub2(a, b))


def centroid(points: Iterable[Pt]) -> Pt:
    xs = ys = zs = 0.0
    n = 0
    for p in points:
        xs += p.x; ys += p.y; zs += p.z; n += 1
    if n == 0:
        raise ValueError("empty set")
    inv = 1.0 / n
    return Pt(xs*inv, ys*inv, zs*inv)


def unique_points(points: Iterable[Pt], eps: float = EPS) -> List[Pt]:
    """
    Дедуплікація з допуском: точки, що відрізняються не більш ніж на eps
    по кожній координаті, вважаються однією (лишається перша, порядок входу зберігається).
    Сітка з кроком eps; сусідні комірки теж перевіряємо, бо «рівні» точки
    можуть потрапити по різні боки межі комірки.
    """
    if eps <= 0.0:
        seen_exact: Dict[Pt, None] = {}
        for p in points:
            seen_exact.setdefault(p, None)
        return list(seen_exact)

    inv = 1.0 / eps
    buckets: Dict[Tuple[int, int, int], List[Pt]] = {}
    out: List[Pt] = []
    for p in points:
        kx, ky, kz = floor(p.x*inv), floor(p.y*inv), floor(p.z*inv)
        dup = False
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    for q in buckets.get((kx + dx, ky + dy, kz + dz), ()):
                        if abs(q.x - p.x) <= eps and abs(q.y - p.y) <= eps and abs(q.z - p.z) <= eps:
                            dup = True
                            break
                    if dup: break
                if dup: break
            if dup: break
        if not dup:
            buckets.setdefault((kx, ky, kz), []).append(p)
            out.append(p)
    return out
