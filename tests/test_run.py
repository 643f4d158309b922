from __future__ import annotations

import numpy as np
import pytest

from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.diagnostics import (
    bounds_violations,
    inside_coil_count,
    mean_height,
    radial_distance,
)
from solenoid_field.core.run import run
from solenoid_field.core.system import ParticleSystem


def test_run_samples_positions() -> None:
    cfg = SimulationConfig(particle_count=10, seed=2)
    system = ParticleSystem(cfg)
    calls: list[int] = []
    result = run(system, 0.05, 20, sample_every=5, callback=lambda step, _: calls.append(step))
    assert calls == list(range(1, 21))
    assert result.time is not None and np.allclose(result.time, [0.0, 0.25, 0.5, 0.75, 1.0])
    assert result.positions is not None and result.positions.shape == (5, 10, 3)
    assert result.resets >= 0


def test_run_without_sampling() -> None:
    system = ParticleSystem(SimulationConfig(particle_count=4, seed=2))
    result = run(system, 0.02, 3)
    assert result.time is None
    assert result.positions is None
    with pytest.raises(ValueError):
        run(system, 0.02, 3, sample_every=0)


def test_long_run_cycles_particles_through_reset() -> None:
    cfg = SimulationConfig(particle_count=50, seed=4)
    system = ParticleSystem(cfg)
    result = run(system, 0.05, 2000)
    assert result.resets > 0
    assert bounds_violations(system.positions, cfg) == 0


def test_diagnostics_helpers() -> None:
    cfg = SimulationConfig()
    pos = np.array([[0.0, 0.0, 1.0], [3.0, 4.0, 0.0], [0.0, 0.0, 20.0], [0.0, 0.0, 0.1]])
    assert np.allclose(radial_distance(pos), [1.0, 5.0, 20.0, 0.1])
    assert bounds_violations(pos, cfg) == 2
    assert inside_coil_count(pos, cfg) == 2
    assert mean_height(pos) == pytest.approx(21.1 / 4.0)
    empty = np.zeros((0, 3))
    assert bounds_violations(empty, cfg) == 0
    assert inside_coil_count(empty, cfg) == 0
    assert mean_height(empty) == 0.0
