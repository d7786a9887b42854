# geomesh/geometry.py
"""
Bounds, clip-space projection and normal helpers shared by the OBJ parser
and the LOD selector.
"""

from __future__ import annotations

import dataclasses
from typing import Sequence

import numpy as np

from geomesh.math import cross_vec3
from geomesh.mesh import Mesh, Vertex
from geomesh.types import Bounds3, Vector3, Vector4


def inflate(bounds: Bounds3, point: Vector3) -> Bounds3:
    """Return a copy of bounds grown to contain point."""
    out = Bounds3(bounds.min, bounds.max)
    out.inflate(point)
    return out


def compute_bounds(vertices: Sequence[Vertex]) -> Bounds3:
    """
    Box over all vertex positions.
    Empty input gives the degenerate box at the origin.
    """
    if not vertices:
        return Bounds3()

    bounds = Bounds3.from_point(vertices[0].position.xyz())
    for v in vertices[1:]:
        bounds.inflate(v.position.xyz())
    return bounds


def project_to_clip_space(bounds: Bounds3, transform: np.ndarray) -> Bounds3:
    """
    Project the 8 corners of bounds through transform and return the 2D
    (x, y) min/max of the result. z of the returned box is always 0.

    This is an approximation: the box around the projected corners, not the
    hull of the projected shape. It is conservative for the axis-aligned
    border test and callers rely on that; keep it this way.

    x and y are divided by w only when w != 0. For w == 0 the raw
    coordinates are used.
    """
    corners = np.array(
        [(c.x, c.y, c.z, 1.0) for c in bounds.corners()], dtype=np.float64
    )
    clip = corners @ np.asarray(transform, dtype=np.float64).T

    w = clip[:, 3]
    xy = clip[:, :2].copy()
    nonzero = w != 0.0
    xy[nonzero] /= w[nonzero, None]

    mn = xy.min(axis=0)
    mx = xy.max(axis=0)
    return Bounds3(
        Vector3(float(mn[0]), float(mn[1]), 0.0),
        Vector3(float(mx[0]), float(mx[1]), 0.0),
    )


def compute_triangle_normal(v0: Vector3, v1: Vector3, v2: Vector3) -> Vector3:
    """
    Unnormalized face normal. The sign follows the winding of the input;
    callers must use consistent winding.
    """
    return cross_vec3(v1 - v0, v2 - v0)


def compute_vertex_normals(mesh: Mesh) -> Mesh:
    """
    Return a copy of mesh whose vertex normals are the normalized,
    unweighted sum of the face normals of every triangle touching the
    vertex.

    Vertices that no triangle touches (or whose face normals cancel out)
    get the zero vector.
    """
    if not mesh.vertices:
        return mesh

    positions = mesh.positions()
    sums = np.zeros_like(positions)

    if mesh.triangles:
        tris = mesh.indices()
        v0 = positions[tris[:, 0]]
        v1 = positions[tris[:, 1]]
        v2 = positions[tris[:, 2]]
        face_normals = np.cross(v1 - v0, v2 - v0)

        # add.at accumulates repeated indices, plain fancy-index += does not
        for col in range(3):
            np.add.at(sums, tris[:, col], face_normals)

    lengths = np.linalg.norm(sums, axis=1)
    normals = np.zeros_like(sums)
    touched = lengths > 0.0
    normals[touched] = sums[touched] / lengths[touched, None]

    vertices = tuple(
        Vertex(
            position=v.position,
            normal=Vector4(float(n[0]), float(n[1]), float(n[2]), 0.0),
        )
        for v, n in zip(mesh.vertices, normals)
    )
    return dataclasses.replace(mesh, vertices=vertices)
