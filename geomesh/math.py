# geomesh/math.py
import math
from typing import Sequence, Union

import numpy as np

from geomesh.types import Scalar, Vector3


# -- Vector Math --
def cross_vec3(a: Vector3, b: Vector3) -> Vector3:
    return Vector3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


# -- Matrix Math --
# Matrices are row-major numpy arrays acting on column vectors: p' = M @ p.


def identity() -> np.ndarray:
    return np.eye(4, dtype=np.float64)


def translation_matrix(x: Scalar, y: Scalar, z: Scalar = 0.0) -> np.ndarray:
    mat = identity()
    mat[0, 3] = x
    mat[1, 3] = y
    mat[2, 3] = z
    return mat


def scale_matrix(sx: Scalar, sy: Scalar, sz: Scalar) -> np.ndarray:
    return np.diag([sx, sy, sz, 1.0]).astype(np.float64)


def as_matrix4(m: Union[np.ndarray, Sequence[Sequence[float]]]) -> np.ndarray:
    """Coerce array-like input to a float64 4x4 matrix."""
    mat = np.asarray(m, dtype=np.float64)
    if mat.shape != (4, 4):
        raise ValueError(f"Expected a 4x4 matrix, got shape {mat.shape}")
    return mat


def create_perspective_projection(
    fov_deg: float, aspect: float, near: float, far: float
) -> np.ndarray:
    """
    Creates a standard OpenGL Perspective Projection Matrix.
    fov_deg: Field of View in Degrees (Vertical)
    aspect: Width / Height
    near: Distance to near plane
    far: Distance to far plane
    """
    fov_rad = math.radians(fov_deg)
    tan_half_fov = math.tan(fov_rad / 2.0)

    # Avoid division by zero
    if tan_half_fov == 0:
        tan_half_fov = 0.001
    if near == far:
        far += 0.001
    if aspect == 0:
        aspect = 1.0

    mat = np.zeros((4, 4), dtype=np.float64)

    mat[0, 0] = 1.0 / (aspect * tan_half_fov)
    mat[1, 1] = 1.0 / tan_half_fov
    mat[2, 2] = (far + near) / (near - far)
    mat[2, 3] = (2.0 * far * near) / (near - far)

    # Perspective Division (w = -z)
    mat[3, 2] = -1.0

    return mat
