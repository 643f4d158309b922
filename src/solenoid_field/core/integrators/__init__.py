"""Field-line integrator."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..fields.base import GuidedField
from ..reset import ResetPolicy
from ..state.particles import ParticlesState


ArrayF = NDArray[np.float64]

NEGLIGIBLE_FIELD_SQ = 1e-8


@dataclass(slots=True)
class StepReport:
    reset: NDArray[np.bool_]
    moved: NDArray[np.bool_]

    @property
    def changed(self) -> bool:
        return bool(np.any(self.reset) or np.any(self.moved))

    @property
    def reset_count(self) -> int:
        return int(np.count_nonzero(self.reset))


def clamp_dt(dt: float, max_dt: float) -> float:
    """Clamp a frame delta into [0, max_dt]; non-finite input becomes 0."""
    dt = float(dt)
    if not math.isfinite(dt) or dt <= 0.0:
        return 0.0
    return min(dt, max_dt)


class FieldLineEuler:
    """First-order explicit Euler along normalized field lines.

    The step length is ``speed * dt`` regardless of field strength; no velocity
    is carried between frames.
    """

    def __init__(
        self,
        field: GuidedField,
        reset_policy: ResetPolicy,
        speed: float,
        max_dt: float = 0.05,
    ) -> None:
        self.field = field
        self.reset_policy = reset_policy
        self.speed = float(speed)
        self.max_dt = float(max_dt)

    def displacement(
        self, pos: ArrayF, dt: float
    ) -> tuple[ArrayF, NDArray[np.bool_]]:
        """Return per-particle displacement and a mask of negligible-field rows."""
        pos = np.atleast_2d(np.asarray(pos, dtype=np.float64))
        step_len = self.speed * clamp_dt(dt, self.max_dt)
        inside = self.field.inside(pos)
        disp = np.zeros_like(pos)
        disp[inside] = self.field.interior_direction * step_len
        negligible = np.zeros(pos.shape[0], dtype=bool)

        outside = ~inside
        if np.any(outside):
            b = self.field.field(pos[outside])
            b2 = np.sum(b * b, axis=-1)
            weak = b2 < NEGLIGIBLE_FIELD_SQ
            with np.errstate(divide="ignore", invalid="ignore"):
                direction = np.where(
                    weak[:, None], 0.0, b / np.sqrt(b2)[:, None]
                )
            disp[outside] = direction * step_len
            negligible[outside] = weak
        return disp, negligible

    def advance(self, pos: ArrayF, dt: float) -> StepReport:
        """Advance an (N, 3) position buffer in place."""
        n = pos.shape[0]
        if n == 0:
            empty = np.zeros(0, dtype=bool)
            return StepReport(reset=empty, moved=empty.copy())

        reset = self.reset_policy.apply(pos)
        live = ~reset
        moved = np.zeros(n, dtype=bool)
        if np.any(live):
            disp, negligible = self.displacement(pos[live], dt)
            live_idx = np.flatnonzero(live)
            weak_idx = live_idx[negligible]
            if weak_idx.size:
                pos[weak_idx] = self.reset_policy.reinitialize(weak_idx.size)
                reset[weak_idx] = True
            move_idx = live_idx[~negligible]
            pos[move_idx] += disp[~negligible]
            moved[move_idx] = np.any(disp[~negligible] != 0.0, axis=-1)

            # a particle that just crossed a bound is respawned before anyone sees it
            crossed = self.reset_policy.should_reset(pos[move_idx])
            if np.any(crossed):
                crossed_idx = move_idx[crossed]
                pos[crossed_idx] = self.reset_policy.reinitialize(crossed_idx.size)
                reset[crossed_idx] = True
                moved[crossed_idx] = False
        return StepReport(reset=reset, moved=moved)

    def step(self, state: ParticlesState, dt: float) -> StepReport:
        return self.advance(state.pos, dt)

    def step_position(self, position: ArrayF, dt: float) -> ArrayF:
        """Return the next position of a single particle."""
        pos = np.asarray(position, dtype=np.float64).reshape(1, 3).copy()
        self.advance(pos, dt)
        return pos[0]
