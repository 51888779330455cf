from __future__ import annotations
import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .errors import ConvexityValidationError, InvalidInputError
from .geom import EPS, Pt, as_pt, centroid, distance, unique_points
from .precision import Precision, PrecisionLike, as_precision
from .predicates import Plane, distance_to_line
from .region import ConvexVolume

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]          # орієнтоване ребро (u, v)


@dataclass
class Face:
    """
    Трикутна грань у процесі побудови.
    v: індекси вершин, обхід CCW ззовні (нормаль площини назовні).
    nbr[i]: сусідня грань через локальне ребро i (0:(a,b), 1:(b,c), 2:(c,a)), або None.
    alive: чи грань активна (у hull).
    outside: точки над гранню понад допуск -> їхня відстань до площини.
    """
    v: Tuple[int, int, int]
    plane: Plane
    nbr: List[Optional[int]] = field(default_factory=lambda: [None, None, None])
    alive: bool = True
    outside: Dict[int, float] = field(default_factory=dict)

    def edge(self, i: int) -> Edge:
        a, b, c = self.v
        if i == 0:
            return (a, b)
        if i == 1:
            return (b, c)
        return (c, a)


@dataclass(frozen=True)
class Facet:
    """Грань готової оболонки: індекси у ConvexHull3D.vertices, зовнішня площина, сусіди по ребрах."""
    vertices: Tuple[int, int, int]
    plane: Plane
    neighbors: Tuple[int, int, int]


class ConvexHull3D:
    """
    Результат: таблиця вершин + трикутні грані.
    Вироджений випадок (менше 4 точок, усі колінеарні/копланарні):
    vertices: вхідні точки як є, граней немає, region is None.
    """

    def __init__(self, vertices: Sequence[Pt], facets: Sequence[Facet],
                 precision: PrecisionLike = EPS, degenerate: bool = False):
        self.precision = as_precision(precision)
        self._vertices: Tuple[Pt, ...] = tuple(vertices)
        self._facets: Tuple[Facet, ...] = tuple(facets)
        self._degenerate = degenerate or not self._facets
        self._region: Optional[ConvexVolume] = None
        self._region_built = False

    @classmethod
    def degenerate(cls, points: Sequence[Pt], precision: PrecisionLike = EPS) -> "ConvexHull3D":
        return cls(points, (), precision, degenerate=True)

    @property
    def vertices(self) -> Tuple[Pt, ...]:
        return self._vertices

    @property
    def facets(self) -> Tuple[Facet, ...]:
        return self._facets

    @property
    def is_degenerate(self) -> bool:
        return self._degenerate

    def triangles(self) -> List[Tuple[int, int, int]]:
        return [f.vertices for f in self._facets]

    @property
    def region(self) -> Optional[ConvexVolume]:
        if not self._region_built:
            if not self._degenerate:
                self._region = ConvexVolume.from_facets(self._vertices, self._facets, self.precision)
            self._region_built = True
        return self._region

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConvexHull3D):
            return NotImplemented
        return self._vertices == other._vertices and self.triangles() == other.triangles()

    def __hash__(self) -> int:
        return hash((self._vertices, tuple(self.triangles())))

    def __repr__(self) -> str:
        if self._degenerate:
            return f"ConvexHull3D(degenerate, points={len(self._vertices)})"
        return f"ConvexHull3D(vertices={len(self._vertices)}, facets={len(self._facets)})"


class _Degenerate(Exception):
    """Внутрішній сигнал: точки не дають тетраедра ненульового об'єму."""


class _HullConstruction:
    """
    Одна побудова Quickhull над зафіксованим набором точок.
    Грані живуть в «арені» faces_list і адресуються індексами; видалені грані
    лише позначаються мертвими, щоб індекси в nbr лишались стабільними.
    edge2face: орієнтоване ребро -> (face_id, local_edge) для живих граней;
    сусід через (u, v): це власник ребра (v, u).
    """

    def __init__(self, points: List[Pt], precision: Precision):
        self.P: List[Pt] = points
        self.prec = precision
        self.faces_list: List[Face] = []
        self.edge2face: Dict[Edge, Tuple[int, int]] = {}
        self.queue: List[Tuple[float, int, int]] = []   # купа (-глибина, face_id, точка)
        self.hull_vertices: Set[int] = set()
        self.iterations = 0

    # ---------------- Арена ----------------
    def _add_face(self, v0: int, v1: int, v2: int) -> int:
        """Створити грань, зареєструвати ребра і зшити з уже відомими сусідами."""
        a, b, c = self.P[v0], self.P[v1], self.P[v2]
        try:
            plane = Plane.from_points(a, b, c)
        except ValueError as e:
            raise ConvexityValidationError(f"degenerate facet ({v0}, {v1}, {v2})") from e
        fid = len(self.faces_list)
        face = Face((v0, v1, v2), plane)
        self.faces_list.append(face)
        for ei in range(3):
            e = face.edge(ei)
            if e in self.edge2face:
                raise ConvexityValidationError(f"edge {e} already owned by face {self.edge2face[e][0]}")
            self.edge2face[e] = (fid, ei)
            twin = self.edge2face.get((e[1], e[0]))
            if twin is not None:
                ofid, oei = twin
                face.nbr[ei] = ofid
                self.faces_list[ofid].nbr[oei] = fid
        return fid

    def _kill_face(self, fid: int) -> None:
        f = self.faces_list[fid]
        f.alive = False
        for ei in range(3):
            self.edge2face.pop(f.edge(ei), None)
            nb = f.nbr[ei]
            if nb is not None:
                nf = self.faces_list[nb]
                for ej in range(3):
                    if nf.nbr[ej] == fid:
                        nf.nbr[ej] = None
        f.outside.clear()

    def _alive(self) -> List[int]:
        return [fid for fid, f in enumerate(self.faces_list) if f.alive]

    # ---------------- Стартовий симплекс ----------------
    def _select_simplex(self) -> Tuple[int, int, int, int]:
        """
        Чотири точки з якомога більшим «розмахом»:
          v1: лексикографічно найменша (x, y, z);
          v2: найдальша від v1;
          v3: найдальша від прямої v1v2;
          v4: найдальша від площини v1v2v3.
        """
        P, prec = self.P, self.prec
        idx = range(len(P))

        i1 = min(idx, key=lambda i: (P[i].x, P[i].y, P[i].z))
        i2 = max(idx, key=lambda i: distance(P[i1], P[i]))
        if prec.eq_zero(distance(P[i1], P[i2])):
            raise _Degenerate("all points coincide")

        i3 = max(idx, key=lambda i: distance_to_line(P[i1], P[i2], P[i]))
        if prec.eq_zero(distance_to_line(P[i1], P[i2], P[i3])):
            raise _Degenerate("all points collinear")

        base = Plane.from_points(P[i1], P[i2], P[i3])
        i4 = max(idx, key=lambda i: abs(base.offset(P[i])))
        if prec.eq_zero(base.offset(P[i4])):
            raise _Degenerate("all points coplanar")
        return i1, i2, i3, i4

    def _build_initial_tetra(self) -> List[int]:
        i1, i2, i3, i4 = self._select_simplex()
        # кожна грань орієнтується так, щоб протилежна вершина лежала з від'ємного боку
        fids = []
        for (a, b, c), opp in (((i1, i2, i3), i4), ((i1, i2, i4), i3),
                               ((i1, i3, i4), i2), ((i2, i3, i4), i1)):
            if Plane.from_points(self.P[a], self.P[b], self.P[c]).offset(self.P[opp]) > 0:
                b, c = c, b
            fids.append(self._add_face(a, b, c))
        self.hull_vertices.update((i1, i2, i3, i4))
        return fids

    # ---------------- Outside-множини ----------------
    def _assign(self, pi: int, fids: Iterable[int]) -> bool:
        """Віддати точку грані, над якою вона найвище; False: точка всередині."""
        p = self.P[pi]
        best_fid, best = -1, 0.0
        for fid in fids:
            d = self.faces_list[fid].plane.offset(p)
            if d > best:
                best_fid, best = fid, d
        if best_fid == -1 or not self.prec.gt(best, 0.0):
            return False
        self.faces_list[best_fid].outside[pi] = best
        heapq.heappush(self.queue, (-best, best_fid, pi))
        return True

    def _pick_conflict(self) -> Optional[Tuple[int, int]]:
        """
        Найглибша конфліктна точка серед усіх outside-множин: (face_id, point),
        або None, коли конфліктів не лишилось. Записи мертвих граней і
        переназначених точок відкидаються при виборі.
        """
        while self.queue:
            neg_d, fid, pi = heapq.heappop(self.queue)
            f = self.faces_list[fid]
            if f.alive and f.outside.get(pi) == -neg_d:
                return fid, pi
        return None

    # ---------------- Горизонт ----------------
    def _collect_visible_region(self, seed_fid: int, p_idx: int) -> Set[int]:
        """Заливка по сусідах від seed_fid явним стеком; видимість: строго понад допуск."""
        p = self.P[p_idx]
        visible: Set[int] = set()
        stack = [seed_fid]
        while stack:
            fid = stack.pop()
            if fid in visible:
                continue
            f = self.faces_list[fid]
            if not f.alive or not self.prec.gt(f.plane.offset(p), 0.0):
                continue
            visible.add(fid)
            for nb in f.nbr:
                if nb is not None and nb not in visible:
                    stack.append(nb)
        return visible

    def _absorb_coplanar(self, visible: Set[int], p_idx: int) -> None:
        """
        Додати до видимої області невидимих сусідів, з площиною яких p збігається
        з точністю до допуску. Інакше конус дав би майже копланарні грані-«голки»
        з довільною нормаллю. Грань, що торкнулась би області лише вершиною,
        не додається: горизонт має лишатись одним циклом.
        """
        p = self.P[p_idx]
        grown = True
        while grown:
            grown = False
            for fid in sorted(visible):
                for nb in self.faces_list[fid].nbr:
                    if nb is None or nb in visible:
                        continue
                    nf = self.faces_list[nb]
                    if not self.prec.gte(nf.plane.offset(p), 0.0):
                        continue
                    shared = sum(1 for m in nf.nbr if m in visible)
                    if shared == 1:
                        touched = {i for f in visible for i in self.faces_list[f].v}
                        if set(nf.v) <= touched:
                            continue
                    visible.add(nb)
                    grown = True

    def _horizon(self, visible: Set[int]) -> List[Edge]:
        """
        Ребра видимих граней, за якими сусід невидимий, у напрямку видимої грані,
        впорядковані в один замкнений цикл.
        """
        nxt: Dict[int, int] = {}
        for fid in visible:
            f = self.faces_list[fid]
            for ei in range(3):
                nb = f.nbr[ei]
                if nb is None:
                    raise ConvexityValidationError(f"face {fid} has no neighbor across edge {f.edge(ei)}")
                if nb in visible:
                    continue
                u, v = f.edge(ei)
                if u in nxt:
                    raise ConvexityValidationError(f"horizon passes vertex {u} twice")
                nxt[u] = v
        if not nxt:
            raise ConvexityValidationError("point sees every face of the hull")

        start = min(nxt)
        loop: List[Edge] = []
        u = start
        while True:
            v = nxt.get(u)
            if v is None:
                raise ConvexityValidationError(f"horizon is open at vertex {u}")
            loop.append((u, v))
            u = v
            if u == start or len(loop) > len(nxt):
                break
        if len(loop) != len(nxt) or u != start:
            raise ConvexityValidationError("horizon is not a single closed loop")
        return loop

    # ---------------- Основний цикл ----------------
    def _add_point_and_update(self, p_idx: int, seed_fid: int) -> None:
        """
        1) видимий «ковпак» разом із копланарними сусідами, горизонт,
        2) знести видимі грані,
        3) конус нових граней (u, v, p) вздовж горизонту,
        4) перекинути осиротілі outside-точки на нові грані.
        """
        visible = self._collect_visible_region(seed_fid, p_idx)
        self._absorb_coplanar(visible, p_idx)
        horizon = self._horizon(visible)

        orphans: Dict[int, None] = {}
        for fid in sorted(visible):
            orphans.update(dict.fromkeys(self.faces_list[fid].outside))
        orphans.pop(p_idx, None)

        for fid in visible:
            self._kill_face(fid)

        # (u, v) зберігає обхід видимої грані, тож (u, v, p) теж дивиться назовні
        cone = [self._add_face(u, v, p_idx) for u, v in horizon]
        self.hull_vertices.add(p_idx)

        for pi in orphans:
            self._assign(pi, cone)

    def run(self) -> None:
        base = self._build_initial_tetra()
        for pi in range(len(self.P)):
            if pi not in self.hull_vertices:
                self._assign(pi, base)

        while True:
            picked = self._pick_conflict()
            if picked is None:
                break
            fid, p_idx = picked
            self._add_point_and_update(p_idx, fid)
            self.iterations += 1

    # ---------------- Діагностика / Експорт ----------------
    def validate(self) -> dict:
        """
        Перевірка коректності:
          - кожне орієнтоване ребро живої грані має рівно одного «близнюка» (v, u);
          - сусідства симетричні (зворотні посилання);
          - жодна вершина оболонки не лежить над площиною живої грані понад допуск;
          - центроїд вершин лежить строго під кожною гранню.
        Порожні списки = все ок.
        """
        alive = self._alive()
        used = sorted({i for fid in alive for i in self.faces_list[fid].v})

        # 1) ребра: кожне (u, v) рівно раз і в парі з (v, u)
        edge_count: Dict[Edge, int] = {}
        for fid in alive:
            for ei in range(3):
                e = self.faces_list[fid].edge(ei)
                edge_count[e] = edge_count.get(e, 0) + 1
        bad_edges = [(e, k) for e, k in edge_count.items()
                     if k != 1 or edge_count.get((e[1], e[0]), 0) != 1]

        # 2) симетрія сусідств
        bad_nbr: List[Tuple[int, int, str]] = []
        for fid in alive:
            f = self.faces_list[fid]
            for ei in range(3):
                nb = f.nbr[ei]
                if nb is None or not self.faces_list[nb].alive:
                    bad_nbr.append((fid, ei, "missing_or_dead_neighbor"))
                    continue
                u, v = f.edge(ei)
                nb_f = self.faces_list[nb]
                if not any(nb_f.edge(ej) == (v, u) and nb_f.nbr[ej] == fid for ej in range(3)):
                    bad_nbr.append((fid, ei, f"no_backlink_to_{nb}"))

        # 3) опуклість
        bad_convex: List[Tuple[int, int, float]] = []
        for fid in alive:
            plane = self.faces_list[fid].plane
            for i in used:
                d = plane.offset(self.P[i])
                if not self.prec.lte(d, 0.0):
                    bad_convex.append((fid, i, d))

        # 4) орієнтація відносно внутрішньої точки
        bad_orient: List[int] = []
        if used:
            O = centroid(self.P[i] for i in used)
            bad_orient = [fid for fid in alive if self.faces_list[fid].plane.offset(O) >= 0]

        return {
            "faces": len(alive),
            "unique_vertices": len(used),
            "bad_edges": bad_edges,
            "bad_neighbors": bad_nbr,
            "bad_convexity": bad_convex,
            "bad_orient_faces": bad_orient,
        }

    def to_result(self) -> ConvexHull3D:
        alive = self._alive()
        used = sorted({i for fid in alive for i in self.faces_list[fid].v})
        vremap = {old: new for new, old in enumerate(used)}
        fremap = {old: new for new, old in enumerate(alive)}
        facets = []
        for fid in alive:
            f = self.faces_list[fid]
            facets.append(Facet(
                vertices=tuple(vremap[i] for i in f.v),
                plane=f.plane,
                neighbors=tuple(fremap[nb] for nb in f.nbr),
            ))
        return ConvexHull3D([self.P[i] for i in used], facets, self.prec)


class QuickHull3D:
    """
    Quickhull (Barber, Dobkin, Huhdanpaa) з допуском precision.
      1) симплекс з крайніх точок;
      2) розбиття решти точок на outside-множини граней;
      3) найглибша конфліктна точка;
      4) видимі грані й горизонт;
      5) конус нових граней, перерозподіл точок;
      6) повтор 3–5, поки outside-множини не порожні.
    Очікувано O(n log r), r: кількість вершин оболонки.
    Генератор без стану: кожен generate(): окрема побудова.
    """

    def __init__(self, precision: PrecisionLike = EPS):
        self.precision = as_precision(precision)

    def generate(self, points: Optional[Iterable]) -> ConvexHull3D:
        if points is None:
            raise InvalidInputError("points must not be None")
        pts = [as_pt(p) for p in points]
        if len(pts) < 4:
            logger.debug("quickhull: %d points, degenerate", len(pts))
            return ConvexHull3D.degenerate(pts, self.precision)

        candidates = unique_points(pts, self.precision.epsilon)
        build = _HullConstruction(candidates, self.precision)
        try:
            build.run()
        except _Degenerate as e:
            logger.debug("quickhull: %d points, degenerate (%s)", len(pts), e)
            return ConvexHull3D.degenerate(pts, self.precision)
        except ConvexityValidationError:
            logger.warning("quickhull: construction failed after %d iterations (epsilon=%g)",
                           build.iterations, self.precision.epsilon)
            raise

        report = build.validate()
        if any(report[k] for k in ("bad_edges", "bad_neighbors", "bad_convexity", "bad_orient_faces")):
            logger.warning("quickhull: validation failed: %s", report)
            raise ConvexityValidationError(
                f"hull failed convexity validation (epsilon={self.precision.epsilon!r})", report)

        logger.debug("quickhull: %d points (%d unique), %d iterations -> %d vertices, %d facets",
                     len(pts), len(candidates), build.iterations,
                     report["unique_vertices"], report["faces"])
        return build.to_result()


class ConvexHull3DBuilder:
    """Накопичує кандидатів і один раз запускає QuickHull3D."""

    def __init__(self, precision: PrecisionLike = EPS):
        self.precision = as_precision(precision)
        self._points: List[Pt] = []
        self._built = False

    def append(self, point) -> "ConvexHull3DBuilder":
        self._check_open()
        if point is None:
            raise InvalidInputError("point must not be None")
        self._points.append(as_pt(point))
        return self

    def extend(self, points: Optional[Iterable]) -> "ConvexHull3DBuilder":
        self._check_open()
        if points is None:
            raise InvalidInputError("points must not be None")
        for p in points:
            self.append(p)
        return self

    def build(self) -> ConvexHull3D:
        self._check_open()
        self._built = True
        return QuickHull3D(self.precision).generate(self._points)

    def _check_open(self) -> None:
        if self._built:
            raise RuntimeError("builder already consumed by build()")


def convex_hull_3d(points: Optional[Iterable], precision: PrecisionLike = EPS) -> ConvexHull3D:
    return QuickHull3D(precision).generate(points)
