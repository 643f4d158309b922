"""Reset policy for particles leaving the simulated volume."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .config import SimulationConfig
from .math.vector import norm_sq


ArrayF = NDArray[np.float64]


class ResetPolicy:
    """Bounds check and respawn rule.

    A particle is reset when it escapes the outer sphere, gets too close to the
    origin, or holds a non-finite coordinate. Respawned particles start in a
    small disk just below the lower pole, whatever the cause of the reset.
    """

    def __init__(
        self,
        min_distance: float,
        max_distance: float,
        pole_z: float,
        respawn_radius: float = 0.5,
        respawn_depth: float = 0.5,
        rng: np.random.Generator | None = None,
    ) -> None:
        if min_distance < 0.0 or max_distance <= min_distance:
            raise ValueError("require 0 <= min_distance < max_distance")
        self.min_distance = float(min_distance)
        self.max_distance = float(max_distance)
        self.pole_z = float(pole_z)
        self.respawn_radius = float(respawn_radius)
        self.respawn_depth = float(respawn_depth)
        self.rng = rng if rng is not None else np.random.default_rng()

    @classmethod
    def from_config(
        cls, config: SimulationConfig, rng: np.random.Generator | None = None
    ) -> "ResetPolicy":
        return cls(
            min_distance=config.reset_near_pole_distance,
            max_distance=config.reset_distance,
            pole_z=config.pole_z,
            respawn_radius=config.respawn_radius,
            respawn_depth=config.respawn_depth,
            rng=rng,
        )

    def should_reset(self, pos: ArrayF) -> NDArray[np.bool_]:
        pos = np.asarray(pos, dtype=np.float64)
        finite = np.all(np.isfinite(pos), axis=-1)
        with np.errstate(invalid="ignore", over="ignore"):
            r2 = norm_sq(pos)
            out = (r2 > self.max_distance * self.max_distance) | (
                r2 < self.min_distance * self.min_distance
            )
        return out | ~finite

    def reinitialize(self, count: int | None = None) -> ArrayF:
        """Return fresh respawn positions, shaped (3,) or (count, 3)."""
        n = 1 if count is None else int(count)
        angle = self.rng.uniform(0.0, 2.0 * np.pi, size=n)
        radius = self.rng.uniform(0.0, self.respawn_radius, size=n)
        z = -self.pole_z - self.rng.uniform(0.0, self.respawn_depth, size=n)
        pos = np.stack([radius * np.cos(angle), radius * np.sin(angle), z], axis=-1)
        if count is None:
            return pos[0]
        return pos

    def apply(self, pos: ArrayF) -> NDArray[np.bool_]:
        """Respawn out-of-bounds rows of ``pos`` in place; return the reset mask."""
        mask = self.should_reset(pos)
        n_reset = int(np.count_nonzero(mask))
        if n_reset:
            pos[mask] = self.reinitialize(n_reset)
        return mask


def sample_ball(
    count: int, radius: float, rng: np.random.Generator
) -> ArrayF:
    """Sample points uniformly inside a ball centred on the origin."""
    r = np.cbrt(rng.uniform(0.0, 1.0, size=count)) * radius
    theta = rng.uniform(0.0, 2.0 * np.pi, size=count)
    phi = np.arccos(2.0 * rng.uniform(0.0, 1.0, size=count) - 1.0)
    return np.stack(
        [
            r * np.sin(phi) * np.cos(theta),
            r * np.sin(phi) * np.sin(theta),
            r * np.cos(phi),
        ],
        axis=-1,
    )
