"""Pure helpers for viewport math."""

from __future__ import annotations

import numpy as np

from ..core.math.quat import quat_from_rotmat, quat_to_rotmat
from ..core.math.vector import cross, unit


def compute_bounds(points: np.ndarray) -> tuple[np.ndarray, float]:
    if points.size == 0:
        return np.zeros(3, dtype=np.float32), 0.0
    pts = np.asarray(points, dtype=np.float32)
    mins = np.min(pts, axis=0)
    maxs = np.max(pts, axis=0)
    center = (mins + maxs) * 0.5
    radius = float(np.max(np.linalg.norm(pts - center, axis=1)))
    return center, radius


def billboard_matrix(pos: np.ndarray, quat: np.ndarray, size: float) -> np.ndarray:
    """Model matrix (row-vector convention) for a unit quad scaled to ``size``."""
    t = np.asarray(pos, dtype=np.float64)
    q = np.asarray(quat, dtype=np.float64)
    if t.shape != (3,):
        raise ValueError("pos must have shape (3,)")
    if q.shape != (4,):
        raise ValueError("quat must have shape (4,)")
    rot = quat_to_rotmat(q)
    scale = np.diag([size, size, 1.0])
    mat = np.eye(4, dtype=np.float32)
    mat[:3, :3] = (rot @ scale).T
    mat[3, :3] = t
    return mat


def unit_quad() -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return vertices, faces and texcoords of a unit square in the XY plane."""
    vertices = np.array(
        [
            [-0.5, -0.5, 0.0],
            [0.5, -0.5, 0.0],
            [0.5, 0.5, 0.0],
            [-0.5, 0.5, 0.0],
        ],
        dtype=np.float32,
    )
    faces = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.uint32)
    # image rows run top to bottom
    texcoords = np.array(
        [[0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]], dtype=np.float32
    )
    return vertices, faces, texcoords


def camera_rotation_from_view(forward: np.ndarray, up: np.ndarray) -> np.ndarray:
    """Camera->world quaternion for a camera looking along ``forward``.

    The camera looks down its local -Z with local +Y as close to ``up`` as
    the view direction allows.
    """
    z_axis = unit(-np.asarray(forward, dtype=np.float64))
    x_axis = unit(cross(np.asarray(up, dtype=np.float64), z_axis))
    if not np.any(x_axis):
        raise ValueError("up must not be parallel to forward")
    y_axis = cross(z_axis, x_axis)
    return quat_from_rotmat(np.stack([x_axis, y_axis, z_axis], axis=-1))


def coil_outline(
    radius: float, pole_z: float, segments: int = 64
) -> tuple[np.ndarray, np.ndarray]:
    """Return the two pole rings of the coil as (segments + 1, 3) polylines."""
    segments = max(8, int(segments))
    angle = np.linspace(0.0, 2.0 * np.pi, segments + 1)
    ring = np.stack(
        [radius * np.cos(angle), radius * np.sin(angle), np.zeros_like(angle)],
        axis=-1,
    ).astype(np.float32)
    top = ring.copy()
    top[:, 2] = pole_z
    bottom = ring.copy()
    bottom[:, 2] = -pole_z
    return top, bottom
