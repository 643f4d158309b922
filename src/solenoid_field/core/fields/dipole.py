"""Magnetic dipole field with a solenoid bore approximation."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ..config import SimulationConfig


ArrayF = NDArray[np.float64]

ORIGIN_EPS_SQ = 1e-6


def magnetic_dipole_field(pos: ArrayF, moment: ArrayF) -> ArrayF:
    """Return B = 3 (m . r) r / |r|^5 - m / |r|^3 for positions shaped (..., 3).

    Positions within sqrt(1e-6) of the origin map to the zero vector.
    """
    pos = np.asarray(pos, dtype=np.float64)
    m = np.asarray(moment, dtype=np.float64)
    if m.shape != (3,):
        raise ValueError("moment must have shape (3,)")
    r2 = np.sum(pos * pos, axis=-1, keepdims=True)
    near = r2 < ORIGIN_EPS_SQ
    safe_r2 = np.where(near, 1.0, r2)
    r = np.sqrt(safe_r2)
    r3 = safe_r2 * r
    r5 = r3 * safe_r2
    m_dot_r = np.sum(pos * m, axis=-1, keepdims=True)
    b = pos * (3.0 * m_dot_r / r5) - m / r3
    return np.where(near, 0.0, b)


class DipoleField:
    def __init__(self, moment: np.ndarray) -> None:
        self.moment = np.asarray(moment, dtype=np.float64)
        if self.moment.shape != (3,):
            raise ValueError("moment must have shape (3,)")

    def field(self, pos: ArrayF) -> ArrayF:
        return magnetic_dipole_field(pos, self.moment)


class SolenoidDipoleField(DipoleField):
    """Dipole field outside the coil, uniform axial flow inside its bore."""

    def __init__(self, moment: np.ndarray, coil_radius: float, pole_z: float) -> None:
        super().__init__(moment)
        self.coil_radius = float(coil_radius)
        self.pole_z = float(pole_z)
        self.interior_direction = np.array([0.0, 0.0, 1.0], dtype=np.float64)

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "SolenoidDipoleField":
        return cls(config.dipole_moment, config.coil_radius, config.pole_z)

    def inside(self, pos: ArrayF) -> NDArray[np.bool_]:
        pos = np.asarray(pos, dtype=np.float64)
        radial_sq = pos[..., 0] * pos[..., 0] + pos[..., 1] * pos[..., 1]
        return (radial_sq < self.coil_radius * self.coil_radius) & (
            np.abs(pos[..., 2]) < self.pole_z
        )
