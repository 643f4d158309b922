"""State namespace."""

from .particles import ParticlesState  # noqa: F401
