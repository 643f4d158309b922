"""Run the field simulation without a window and report where particles end up."""

from __future__ import annotations

import numpy as np

from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.diagnostics import bounds_violations, inside_coil_count, mean_height
from solenoid_field.core.run import run
from solenoid_field.core.system import ParticleSystem


if __name__ == "__main__":
    config = SimulationConfig(particle_count=200, seed=0)
    system = ParticleSystem(config)

    result = run(system, dt=1.0 / 60.0, steps=3600, sample_every=600)
    assert result.time is not None and result.positions is not None
    for t, pos in zip(result.time, result.positions):
        print(
            f"t={t:6.1f}s  inside coil: {inside_coil_count(pos, config):3d}  "
            f"mean z: {mean_height(pos):+.2f}"
        )
    print("resets:", result.resets)
    print("bounds violations:", bounds_violations(system.positions, config))
    print("max radius:", float(np.max(np.linalg.norm(system.positions, axis=1))))
