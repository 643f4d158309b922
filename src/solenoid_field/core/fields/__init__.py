"""Vector fields driving particle motion."""

from .base import GuidedField, VectorField  # noqa: F401
from .dipole import DipoleField, SolenoidDipoleField, magnetic_dipole_field  # noqa: F401
