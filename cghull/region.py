"""
Опуклі області, обмежені оболонкою: ConvexArea (2D) і ConvexVolume (3D).
Межі зберігаються як півпростори n·x <= d (numpy-масиви), тож contains()
векторизований і для масивів точок.
"""
from __future__ import annotations
from typing import Sequence, Tuple

import numpy as np

from .geom import Pt, Pt2
from .precision import Precision


class ConvexArea:
    """
    Опуклий многокутник. vertices: CCW, без повторів, щонайменше 3.
    normals[i], offsets[i]: зовнішня пряма ребра (vertices[i], vertices[i+1]).
    """

    def __init__(self, vertices: Sequence[Pt2], precision: Precision):
        if len(vertices) < 3:
            raise ValueError(f"area needs at least 3 vertices, got {len(vertices)}")
        self.precision = precision
        self._v = np.array([(p.x, p.y) for p in vertices], dtype=float)
        edges = np.roll(self._v, -1, axis=0) - self._v
        lengths = np.linalg.norm(edges, axis=1)
        self._lengths = lengths
        # права нормаль (dy, -dx) для CCW обходу дивиться назовні
        self.normals = np.column_stack((edges[:, 1], -edges[:, 0])) / lengths[:, None]
        self.offsets = np.einsum("ij,ij->i", self.normals, self._v)

    @property
    def vertices(self) -> Tuple[Pt2, ...]:
        return tuple(Pt2(float(x), float(y)) for x, y in self._v)

    @property
    def size(self) -> float:
        """Площа (формула шнурків)."""
        x, y = self._v[:, 0], self._v[:, 1]
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))

    @property
    def boundary_size(self) -> float:
        """Периметр."""
        return float(self._lengths.sum())

    @property
    def centroid(self) -> Pt2:
        x, y = self._v[:, 0], self._v[:, 1]
        xn, yn = np.roll(x, -1), np.roll(y, -1)
        c = x * yn - xn * y
        a6 = 3.0 * c.sum()
        return Pt2(float(((x + xn) * c).sum() / a6), float(((y + yn) * c).sum() / a6))

    def contains(self, p) -> bool:
        """Замкнена область: точка на межі (в межах допуску) теж всередині."""
        q = np.asarray(tuple(p), dtype=float)
        return bool(np.all(self.normals @ q - self.offsets <= self.precision.epsilon))

    def contains_all(self, points) -> np.ndarray:
        q = np.asarray([tuple(p) for p in points], dtype=float).reshape(-1, 2)
        return np.all(q @ self.normals.T - self.offsets <= self.precision.epsilon, axis=1)

    def __repr__(self) -> str:
        return f"ConvexArea(vertices={len(self._v)}, size={self.size:.6g})"


class ConvexVolume:
    """
    Опуклий многогранник, заданий зовнішніми площинами граней.
    triangles (масив F×3×3): координати вершин кожної грані, обхід CCW ззовні;
    за ними рахуються об'єм, площа поверхні й центроїд.
    """

    def __init__(self, normals, points_on_planes, triangles, precision: Precision):
        self.precision = precision
        self.normals = np.asarray(normals, dtype=float).reshape(-1, 3)
        self.offsets = np.einsum("ij,ij->i", self.normals,
                                 np.asarray(points_on_planes, dtype=float).reshape(-1, 3))
        self._tri = np.asarray(triangles, dtype=float).reshape(-1, 3, 3)
        if len(self.normals) < 4:
            raise ValueError(f"volume needs at least 4 bounding planes, got {len(self.normals)}")

    @classmethod
    def from_facets(cls, vertices: Sequence[Pt], facets, precision: Precision) -> "ConvexVolume":
        normals = [tuple(f.plane.normal) for f in facets]
        anchors = [tuple(f.plane.point) for f in facets]
        tris = [[tuple(vertices[i]) for i in f.vertices] for f in facets]
        return cls(normals, anchors, tris, precision)

    def _signed_tet_volumes(self) -> np.ndarray:
        a, b, c = self._tri[:, 0], self._tri[:, 1], self._tri[:, 2]
        return np.einsum("ij,ij->i", a, np.cross(b, c)) / 6.0

    @property
    def size(self) -> float:
        """Об'єм за теоремою Гаусса–Остроградського (тетраедри з початком координат)."""
        return float(self._signed_tet_volumes().sum())

    @property
    def boundary_size(self) -> float:
        a, b, c = self._tri[:, 0], self._tri[:, 1], self._tri[:, 2]
        return float(0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1).sum())

    @property
    def centroid(self) -> Pt:
        vols = self._signed_tet_volumes()
        # центроїд тетраедра (0, a, b, c) = (a + b + c) / 4
        cs = self._tri.sum(axis=1) / 4.0
        x, y, z = (vols[:, None] * cs).sum(axis=0) / vols.sum()
        return Pt(float(x), float(y), float(z))

    def contains(self, p) -> bool:
        q = np.asarray(tuple(p), dtype=float)
        return bool(np.all(self.normals @ q - self.offsets <= self.precision.epsilon))

    def contains_all(self, points) -> np.ndarray:
        q = np.asarray([tuple(p) for p in points], dtype=float).reshape(-1, 3)
        return np.all(q @ self.normals.T - self.offsets <= self.precision.epsilon, axis=1)

    def __repr__(self) -> str:
        return f"ConvexVolume(planes={len(self.normals)}, size={self.size:.6g})"
