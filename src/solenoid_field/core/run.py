"""Headless run loop with optional sampling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .system import ParticleSystem


@dataclass(slots=True)
class RunResult:
    system: ParticleSystem
    resets: int = 0
    time: np.ndarray | None = None
    positions: np.ndarray | None = None


def run(
    system: ParticleSystem,
    dt: float,
    steps: int,
    sample_every: int | None = None,
    callback: Callable[[int, ParticleSystem], None] | None = None,
) -> RunResult:
    if sample_every is not None and sample_every <= 0:
        raise ValueError("sample_every must be > 0")
    if steps < 0:
        raise ValueError("steps must be >= 0")

    times: list[float] = []
    samples: list[np.ndarray] = []
    resets = 0

    def sample(step: int) -> None:
        times.append(step * dt)
        samples.append(system.positions.copy())

    if sample_every is not None:
        sample(0)

    for step in range(1, steps + 1):
        report = system.step_all(dt)
        resets += report.reset_count
        if callback is not None:
            callback(step, system)
        if sample_every is not None and step % sample_every == 0:
            sample(step)

    if sample_every is None:
        return RunResult(system=system, resets=resets)

    return RunResult(
        system=system,
        resets=resets,
        time=np.asarray(times, dtype=np.float64),
        positions=np.asarray(samples, dtype=np.float64),
    )
