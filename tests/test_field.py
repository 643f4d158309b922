from __future__ import annotations

import numpy as np
import pytest

from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.fields import (
    DipoleField,
    SolenoidDipoleField,
    magnetic_dipole_field,
)


M = np.array([0.0, 0.0, 15.0])


def test_field_at_origin_is_exactly_zero() -> None:
    b = magnetic_dipole_field(np.zeros(3), M)
    assert b.shape == (3,)
    assert np.array_equal(b, np.zeros(3))

    tiny = magnetic_dipole_field(np.array([[1e-4, 0.0, 0.0]]), M)
    assert np.array_equal(tiny, np.zeros((1, 3)))


def test_equatorial_field_points_against_moment() -> None:
    bx = magnetic_dipole_field(np.array([1.0, 0.0, 0.0]), M)
    by = magnetic_dipole_field(np.array([0.0, 1.0, 0.0]), M)
    assert np.allclose(bx, [0.0, 0.0, -15.0])
    assert np.allclose(by, [0.0, 0.0, -15.0])
    assert np.linalg.norm(bx) == pytest.approx(np.linalg.norm(by))


def test_axial_field_is_twice_equatorial() -> None:
    b = magnetic_dipole_field(np.array([0.0, 0.0, 2.0]), M)
    assert np.allclose(b, [0.0, 0.0, 2.0 * 15.0 / 8.0])
    b_below = magnetic_dipole_field(np.array([0.0, 0.0, -2.0]), M)
    assert np.allclose(b_below, b)


def test_field_is_vectorized() -> None:
    field = DipoleField(M)
    pos = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 2.0], [0.0, 0.0, 0.0]])
    b = field.field(pos)
    assert b.shape == (3, 3)
    assert np.allclose(b[0], [0.0, 0.0, -15.0])
    assert np.allclose(b[2], 0.0)


def test_moment_shape_is_validated() -> None:
    with pytest.raises(ValueError):
        DipoleField(np.array([0.0, 15.0]))


def test_inside_coil_mask() -> None:
    field = SolenoidDipoleField.from_config(SimulationConfig())
    pos = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.4, 0.0, 2.4],
            [1.6, 0.0, 0.0],
            [0.0, 0.0, 2.6],
            [0.0, 0.0, -2.5],
            [1.0, 1.0, -1.0],
        ]
    )
    assert field.inside(pos).tolist() == [True, True, False, False, False, True]
    assert np.allclose(field.interior_direction, [0.0, 0.0, 1.0])
