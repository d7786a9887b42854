# geomesh/mesh.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Tuple

import numpy as np

from geomesh.types import Bounds3, Vector4


@dataclass(frozen=True, slots=True)
class Vertex:
    position: Vector4
    normal: Vector4 = field(default_factory=Vector4.zero)


@dataclass(frozen=True, slots=True)
class Triangle:
    """Three 0-based indices into Mesh.vertices."""

    i: int
    j: int
    k: int

    def __iter__(self) -> Iterator[int]:
        yield self.i
        yield self.j
        yield self.k


@dataclass(frozen=True, slots=True)
class Mesh:
    """
    Parsed, validated geometry.
    Every index of every triangle is < len(vertices).
    """

    bounds: Bounds3 = field(default_factory=Bounds3)
    vertices: Tuple[Vertex, ...] = ()
    triangles: Tuple[Triangle, ...] = ()

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    def positions(self) -> np.ndarray:
        """(N, 3) float64 array of vertex positions."""
        if not self.vertices:
            return np.zeros((0, 3), dtype=np.float64)
        return np.array(
            [(v.position.x, v.position.y, v.position.z) for v in self.vertices],
            dtype=np.float64,
        )

    def indices(self) -> np.ndarray:
        """(M, 3) int64 array of triangle indices."""
        if not self.triangles:
            return np.zeros((0, 3), dtype=np.int64)
        return np.array([tuple(t) for t in self.triangles], dtype=np.int64)
