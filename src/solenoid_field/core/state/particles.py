"""Particle state containers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


ArrayF = NDArray[np.float64]


@dataclass(slots=True)
class ParticlesState:
    pos: ArrayF

    def __post_init__(self) -> None:
        self.pos = np.ascontiguousarray(self.pos, dtype=np.float64)
        self.validate()

    @classmethod
    def empty(cls, n: int) -> "ParticlesState":
        return cls(pos=np.zeros((n, 3), dtype=np.float64))

    @property
    def count(self) -> int:
        return int(self.pos.shape[0])

    def validate(self) -> None:
        if self.pos.ndim != 2 or self.pos.shape[1] != 3:
            raise ValueError("pos must have shape (N, 3)")
