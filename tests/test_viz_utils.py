from __future__ import annotations

import numpy as np
import pytest

from solenoid_field.app.viz_utils import (
    billboard_matrix,
    camera_rotation_from_view,
    coil_outline,
    compute_bounds,
    unit_quad,
)
from solenoid_field.core.math.quat import quat_from_axis_angle, quat_identity, quat_rotate


def test_compute_bounds_empty() -> None:
    center, radius = compute_bounds(np.zeros((0, 3), dtype=np.float32))
    assert np.allclose(center, np.zeros(3))
    assert radius == 0.0


def test_compute_bounds_many() -> None:
    points = np.array(
        [
            [-1.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 2.0, 0.0],
        ],
        dtype=np.float32,
    )
    center, radius = compute_bounds(points)
    assert np.allclose(center, [0.0, 1.0, 0.0])
    assert radius > 0.0


def test_billboard_matrix_places_quad_corners() -> None:
    pos = np.array([1.0, 2.0, 3.0])
    q = quat_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 2.0)
    mat = billboard_matrix(pos, q, 0.6)
    corner = np.array([0.5, 0.5, 0.0, 1.0])
    mapped = corner @ mat
    expected = pos + quat_rotate(q, np.array([0.3, 0.3, 0.0]))
    assert np.allclose(mapped[:3], expected, atol=1e-6)


def test_billboard_matrix_validates_shapes() -> None:
    with pytest.raises(ValueError):
        billboard_matrix(np.zeros(2), quat_identity(), 1.0)
    with pytest.raises(ValueError):
        billboard_matrix(np.zeros(3), np.zeros(3), 1.0)


def test_unit_quad_layout() -> None:
    vertices, faces, texcoords = unit_quad()
    assert vertices.shape == (4, 3)
    assert faces.shape == (2, 3)
    assert texcoords.shape == (4, 2)
    assert np.allclose(vertices[:, 2], 0.0)


def test_camera_rotation_from_view() -> None:
    q = camera_rotation_from_view(np.array([0.0, 0.0, -3.0]), np.array([0.0, 2.0, 0.0]))
    assert np.allclose(q, quat_identity())

    q = camera_rotation_from_view(np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]))
    assert np.allclose(quat_rotate(q, np.array([0.0, 0.0, -1.0])), [1.0, 0.0, 0.0])
    assert np.allclose(quat_rotate(q, np.array([0.0, 1.0, 0.0])), [0.0, 0.0, 1.0])

    with pytest.raises(ValueError):
        camera_rotation_from_view(np.array([0.0, 0.0, 1.0]), np.array([0.0, 0.0, 2.0]))


def test_coil_outline_rings() -> None:
    top, bottom = coil_outline(1.5, 2.5, segments=32)
    assert top.shape == (33, 3)
    assert np.allclose(top[:, 2], 2.5)
    assert np.allclose(bottom[:, 2], -2.5)
    assert np.allclose(np.hypot(top[:, 0], top[:, 1]), 1.5)
