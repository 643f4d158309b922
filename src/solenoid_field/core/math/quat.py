"""Quaternion utilities.

Conventions:
- Storage order: [w, x, y, z]
- Quaternion represents body->world rotation.
- Vector rotation: v_world = R(q) * v_body
- Composition: applying q1 then q2 is q = quat_mul(q2, q1)
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .vector import norm, unit


ArrayF = NDArray[np.float64]


def quat_identity() -> ArrayF:
    return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def quat_normalize(q: ArrayF) -> ArrayF:
    """Normalize quaternion(s) to unit length."""
    q = np.asarray(q, dtype=np.float64)
    n = norm(q, axis=-1)[..., np.newaxis]
    with np.errstate(divide="ignore", invalid="ignore"):
        qn = np.where(n > 0.0, q / n, q)
    return qn


def quat_conj(q: ArrayF) -> ArrayF:
    """Return the quaternion conjugate."""
    q = np.asarray(q, dtype=np.float64)
    w = q[..., :1]
    xyz = -q[..., 1:]
    return np.concatenate([w, xyz], axis=-1)


def quat_mul(q1: ArrayF, q2: ArrayF) -> ArrayF:
    """Hamilton product of two quaternions (supports broadcasting)."""
    q1 = np.asarray(q1, dtype=np.float64)
    q2 = np.asarray(q2, dtype=np.float64)
    w1, x1, y1, z1 = np.split(q1, 4, axis=-1)
    w2, x2, y2, z2 = np.split(q2, 4, axis=-1)
    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
    return np.concatenate([w, x, y, z], axis=-1)


def quat_to_rotmat(q: ArrayF) -> ArrayF:
    """Convert quaternion(s) to rotation matrix/matrices."""
    q = quat_normalize(q)
    w, x, y, z = np.split(q, 4, axis=-1)

    ww = w * w
    xx = x * x
    yy = y * y
    zz = z * z

    wx = w * x
    wy = w * y
    wz = w * z
    xy = x * y
    xz = x * z
    yz = y * z

    m00 = ww + xx - yy - zz
    m01 = 2.0 * (xy - wz)
    m02 = 2.0 * (xz + wy)

    m10 = 2.0 * (xy + wz)
    m11 = ww - xx + yy - zz
    m12 = 2.0 * (yz - wx)

    m20 = 2.0 * (xz - wy)
    m21 = 2.0 * (yz + wx)
    m22 = ww - xx - yy + zz

    row0 = np.concatenate([m00, m01, m02], axis=-1)
    row1 = np.concatenate([m10, m11, m12], axis=-1)
    row2 = np.concatenate([m20, m21, m22], axis=-1)

    return np.stack([row0, row1, row2], axis=-2)


def quat_from_rotmat(rot: ArrayF) -> ArrayF:
    """Convert a single 3x3 rotation matrix to a unit quaternion.

    Uses Shepperd's method, branching on the largest diagonal term.
    """
    m = np.asarray(rot, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError("rot must have shape (3, 3)")
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0.0:
        s = 2.0 * np.sqrt(trace + 1.0)
        w = 0.25 * s
        x = (m[2, 1] - m[1, 2]) / s
        y = (m[0, 2] - m[2, 0]) / s
        z = (m[1, 0] - m[0, 1]) / s
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        w = (m[2, 1] - m[1, 2]) / s
        x = 0.25 * s
        y = (m[0, 1] + m[1, 0]) / s
        z = (m[0, 2] + m[2, 0]) / s
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        w = (m[0, 2] - m[2, 0]) / s
        x = (m[0, 1] + m[1, 0]) / s
        y = 0.25 * s
        z = (m[1, 2] + m[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        w = (m[1, 0] - m[0, 1]) / s
        x = (m[0, 2] + m[2, 0]) / s
        y = (m[1, 2] + m[2, 1]) / s
        z = 0.25 * s
    return quat_normalize(np.array([w, x, y, z], dtype=np.float64))


def quat_rotate(q: ArrayF, v: ArrayF) -> ArrayF:
    """Rotate vector(s) using quaternion(s) with body->world convention."""
    q = quat_normalize(q)
    v = np.asarray(v, dtype=np.float64)
    zeros = np.zeros(v[..., :1].shape, dtype=np.float64)
    vq = np.concatenate([zeros, v], axis=-1)
    return quat_mul(quat_mul(q, vq), quat_conj(q))[..., 1:]


def quat_from_axis_angle(axis: ArrayF, angle_rad: ArrayF) -> ArrayF:
    """Create quaternion(s) from axis-angle."""
    axis = np.asarray(axis, dtype=np.float64)
    angle_rad = np.asarray(angle_rad, dtype=np.float64)
    axis_unit = unit(axis, axis=-1)
    half = 0.5 * angle_rad
    sin_half = np.sin(half)[..., np.newaxis]
    w = np.cos(half)[..., np.newaxis]
    xyz = axis_unit * sin_half
    return np.concatenate([w, xyz], axis=-1)
