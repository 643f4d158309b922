"""Diagnostics namespace."""

from .particles import (  # noqa: F401
    bounds_violations,
    inside_coil_count,
    mean_height,
    radial_distance,
)
