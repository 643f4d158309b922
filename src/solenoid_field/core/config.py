"""Simulation configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """Constants fixed for the lifetime of a simulation.

    ``coil_height`` is the full coil length; the pole planes sit at
    ``z = +/- pole_z`` with ``pole_z = coil_height / 2``.
    """

    coil_radius: float = 1.5
    coil_height: float = 5.0
    dipole_strength: float = 15.0
    field_speed: float = 0.5
    reset_near_pole_distance: float = 0.2
    reset_distance_factor: float = 2.5
    particle_count: int = 100
    max_dt: float = 0.05
    image_size: float = 0.6
    point_size: float = 0.4
    billboard_tilt_deg: float = 30.0
    spawn_radius_fraction: float = 0.8
    respawn_radius: float = 0.5
    respawn_depth: float = 0.5
    seed: int | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        positive = {
            "coil_radius": self.coil_radius,
            "coil_height": self.coil_height,
            "field_speed": self.field_speed,
            "reset_near_pole_distance": self.reset_near_pole_distance,
            "reset_distance_factor": self.reset_distance_factor,
            "max_dt": self.max_dt,
            "image_size": self.image_size,
            "point_size": self.point_size,
        }
        for name, value in positive.items():
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be a positive finite number")
        if not math.isfinite(self.dipole_strength):
            raise ValueError("dipole_strength must be finite")
        if self.particle_count < 0:
            raise ValueError("particle_count must be >= 0")
        if self.respawn_radius < 0.0 or self.respawn_depth < 0.0:
            raise ValueError("respawn_radius and respawn_depth must be >= 0")
        if not 0.0 < self.spawn_radius_fraction <= 1.0:
            raise ValueError("spawn_radius_fraction must be in (0, 1]")
        if self.reset_near_pole_distance >= self.reset_distance:
            raise ValueError("reset_near_pole_distance must be < reset_distance")
        if self.pole_z < self.reset_near_pole_distance:
            raise ValueError("respawn disk lies inside reset_near_pole_distance")
        if math.hypot(self.respawn_radius, self.pole_z + self.respawn_depth) > self.reset_distance:
            raise ValueError("respawn disk extends beyond reset_distance")

    @property
    def pole_z(self) -> float:
        return 0.5 * self.coil_height

    @property
    def reset_distance(self) -> float:
        return self.coil_height * self.reset_distance_factor

    @property
    def spawn_radius(self) -> float:
        return self.reset_distance * self.spawn_radius_fraction

    @property
    def dipole_moment(self) -> np.ndarray:
        return np.array([0.0, 0.0, self.dipole_strength], dtype=np.float64)
