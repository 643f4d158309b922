"""Trace a single particle from the bore and print its path."""

from __future__ import annotations

import numpy as np

from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.fields import SolenoidDipoleField
from solenoid_field.core.integrators import FieldLineEuler
from solenoid_field.core.reset import ResetPolicy


if __name__ == "__main__":
    config = SimulationConfig(seed=1)
    integrator = FieldLineEuler(
        SolenoidDipoleField.from_config(config),
        ResetPolicy.from_config(config, rng=np.random.default_rng(config.seed)),
        config.field_speed,
        config.max_dt,
    )

    pos = np.array([0.3, 0.0, -2.0])
    for step in range(2000):
        pos = integrator.step_position(pos, config.max_dt)
        if step % 100 == 0:
            print(f"{step:5d}  x={pos[0]:+.3f}  y={pos[1]:+.3f}  z={pos[2]:+.3f}")
