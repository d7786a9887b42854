import random

import numpy as np
import pytest

from geomesh.geometry import (
    compute_bounds,
    compute_triangle_normal,
    compute_vertex_normals,
    inflate,
    project_to_clip_space,
)
from geomesh.math import (
    create_perspective_projection,
    scale_matrix,
    translation_matrix,
)
from geomesh.mesh import Mesh, Triangle, Vertex
from geomesh.types import Bounds3, Vector3, Vector4


def _vertex(x, y, z):
    return Vertex(position=Vector4(x, y, z, 1.0))


def test_default_bounds_is_origin():
    b = Bounds3()

    assert b.min == Vector3.zero()
    assert b.max == Vector3.zero()


def test_inflate_grows_componentwise():
    b = Bounds3.from_point(Vector3(0.0, 0.0, 0.0))

    b.inflate(Vector3(1.0, -2.0, 0.5))
    b.inflate(Vector3(-1.0, 3.0, 0.0))

    assert b.min == Vector3(-1.0, -2.0, 0.0)
    assert b.max == Vector3(1.0, 3.0, 0.5)


def test_inflate_function_does_not_mutate():
    b = Bounds3()
    out = inflate(b, Vector3(2.0, 2.0, 2.0))

    assert b.max == Vector3.zero()
    assert out.max == Vector3(2.0, 2.0, 2.0)


def test_compute_bounds_empty():
    b = compute_bounds([])

    assert b.min == Vector3.zero() and b.max == Vector3.zero()


def test_compute_bounds_excludes_origin_when_absent():
    b = compute_bounds([_vertex(5, 5, 5), _vertex(6, 7, 8)])

    assert b.min == Vector3(5.0, 5.0, 5.0)
    assert b.max == Vector3(6.0, 7.0, 8.0)


def test_compute_bounds_contains_every_vertex():
    rng = random.Random(7)
    vertices = [
        _vertex(rng.uniform(-10, 10), rng.uniform(-10, 10), rng.uniform(-10, 10))
        for _ in range(200)
    ]

    b = compute_bounds(vertices)

    assert all(lo <= hi for lo, hi in zip(b.min, b.max))
    assert all(b.contains(v.position.xyz()) for v in vertices)


def test_project_identity_returns_xy_extent():
    b = Bounds3(Vector3(-0.5, -0.25, -1.0), Vector3(0.5, 0.25, 1.0))

    clip = project_to_clip_space(b, np.eye(4))

    assert (clip.min.x, clip.min.y) == (-0.5, -0.25)
    assert (clip.max.x, clip.max.y) == (0.5, 0.25)


def test_project_applies_translation_and_scale():
    b = Bounds3(Vector3(0.0, 0.0, 0.0), Vector3(1.0, 1.0, 1.0))
    m = translation_matrix(2.0, -1.0) @ scale_matrix(2.0, 3.0, 1.0)

    clip = project_to_clip_space(b, m)

    assert (clip.min.x, clip.max.x) == (2.0, 4.0)
    assert (clip.min.y, clip.max.y) == (-1.0, 2.0)


def test_project_divides_by_w():
    b = Bounds3(Vector3(-1.0, -1.0, -1.0), Vector3(1.0, 1.0, 1.0))
    m = np.eye(4)
    m[3, 3] = 2.0

    clip = project_to_clip_space(b, m)

    assert (clip.min.x, clip.max.x) == (-0.5, 0.5)


def test_project_skips_division_when_w_is_zero():
    b = Bounds3(Vector3(-1.0, -2.0, 0.0), Vector3(1.0, 2.0, 0.0))
    m = np.eye(4)
    m[3, 3] = 0.0

    clip = project_to_clip_space(b, m)

    assert (clip.min.x, clip.max.x) == (-1.0, 1.0)
    assert (clip.min.y, clip.max.y) == (-2.0, 2.0)


def test_project_perspective_shrinks_with_distance():
    proj = create_perspective_projection(90.0, 1.0, 0.1, 100.0)
    near_box = Bounds3(Vector3(-1.0, -1.0, -2.0), Vector3(1.0, 1.0, -2.0))
    far_box = Bounds3(Vector3(-1.0, -1.0, -20.0), Vector3(1.0, 1.0, -20.0))

    near_clip = project_to_clip_space(near_box, proj)
    far_clip = project_to_clip_space(far_box, proj)

    assert near_clip.width == pytest.approx(1.0)
    assert far_clip.width == pytest.approx(0.1)


def test_vector_difference_and_components():
    d = Vector3(4, 5, 6) - Vector3(1, 1, 1)

    assert d == Vector3(3, 4, 5)
    assert tuple(d) == (3, 4, 5)
    assert Vector4(1, 2, 3).xyz() == Vector3(1, 2, 3)
    assert tuple(Vector4(1, 2, 3)) == (1, 2, 3, 1.0)


def test_triangle_normal_follows_winding():
    a, b, c = Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0)

    assert compute_triangle_normal(a, b, c) == Vector3(0, 0, 1)
    assert compute_triangle_normal(a, c, b) == Vector3(0, 0, -1)


def test_triangle_normal_is_not_normalized():
    n = compute_triangle_normal(
        Vector3(0, 0, 0), Vector3(2, 0, 0), Vector3(0, 3, 0)
    )

    assert n == Vector3(0, 0, 6)


def test_vertex_normals_average_adjacent_faces():
    # Two faces meeting at a right angle along the x axis
    mesh = Mesh(
        vertices=(
            _vertex(0, 0, 0),
            _vertex(1, 0, 0),
            _vertex(0, 1, 0),
            _vertex(0, 0, 1),
        ),
        triangles=(Triangle(0, 1, 2), Triangle(0, 3, 1)),
    )

    out = compute_vertex_normals(mesh)

    s = 1.0 / np.sqrt(2.0)
    shared = out.vertices[0].normal
    assert (shared.x, shared.y, shared.z) == pytest.approx((0.0, s, s))
    assert out.vertices[2].normal.z == pytest.approx(1.0)
    assert out.vertices[3].normal.y == pytest.approx(1.0)
    # Normals are directions
    assert all(v.normal.w == 0.0 for v in out.vertices)
    # Input mesh is untouched
    assert mesh.vertices[0].normal == Vector4.zero()


def test_vertex_normals_sum_raw_face_normals():
    # No angle weighting: the raw cross products are summed, then normalized
    mesh = Mesh(
        vertices=(
            _vertex(0, 0, 0),
            _vertex(10, 0, 0),
            _vertex(0, 10, 0),
            _vertex(0, 0, 1),
        ),
        triangles=(Triangle(0, 1, 2), Triangle(0, 3, 1)),
    )

    n = compute_vertex_normals(mesh).vertices[0].normal

    # Face normals (0,0,100) and (0,10,0) sum before normalizing
    expected = np.array([0.0, 10.0, 100.0]) / np.linalg.norm([0.0, 10.0, 100.0])
    assert (n.x, n.y, n.z) == pytest.approx(tuple(expected))


def test_isolated_vertex_gets_zero_normal():
    mesh = Mesh(
        vertices=(_vertex(0, 0, 0), _vertex(1, 0, 0), _vertex(0, 1, 0), _vertex(5, 5, 5)),
        triangles=(Triangle(0, 1, 2),),
    )

    out = compute_vertex_normals(mesh)

    assert out.vertices[3].normal == Vector4(0.0, 0.0, 0.0, 0.0)
    assert all(np.isfinite(tuple(v.normal)).all() for v in out.vertices)
