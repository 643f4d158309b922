"""Particle diagnostics."""

from __future__ import annotations

import numpy as np

from ..config import SimulationConfig


def radial_distance(pos: np.ndarray) -> np.ndarray:
    pos = np.asarray(pos, dtype=np.float64)
    if pos.size == 0:
        return np.zeros(0, dtype=np.float64)
    return np.linalg.norm(pos, axis=-1)


def bounds_violations(pos: np.ndarray, config: SimulationConfig, tol: float = 1e-9) -> int:
    """Count particles outside the shell [reset_near_pole_distance, reset_distance]."""
    r = radial_distance(pos)
    if r.size == 0:
        return 0
    bad = (r < config.reset_near_pole_distance - tol) | (r > config.reset_distance + tol)
    return int(np.count_nonzero(bad | ~np.isfinite(r)))


def inside_coil_count(pos: np.ndarray, config: SimulationConfig) -> int:
    pos = np.asarray(pos, dtype=np.float64)
    if pos.size == 0:
        return 0
    radial_sq = pos[:, 0] ** 2 + pos[:, 1] ** 2
    inside = (radial_sq < config.coil_radius**2) & (np.abs(pos[:, 2]) < config.pole_z)
    return int(np.count_nonzero(inside))


def mean_height(pos: np.ndarray) -> float:
    pos = np.asarray(pos, dtype=np.float64)
    if pos.size == 0:
        return 0.0
    return float(np.mean(pos[:, 2]))
