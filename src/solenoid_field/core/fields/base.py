"""Vector field interfaces."""

from __future__ import annotations

from typing import Protocol

import numpy as np
from numpy.typing import NDArray


ArrayF = NDArray[np.float64]


class VectorField(Protocol):
    def field(self, pos: ArrayF) -> ArrayF:
        """Return field vectors for positions shaped (N, 3)."""


class GuidedField(VectorField, Protocol):
    interior_direction: ArrayF

    def inside(self, pos: ArrayF) -> NDArray[np.bool_]:
        """Return a mask of positions in the uniform-flow interior region."""
