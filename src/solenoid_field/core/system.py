"""Particle systems: billboard and point-cloud variants over one stepping contract."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import SimulationConfig
from .fields.dipole import SolenoidDipoleField
from .integrators import FieldLineEuler, StepReport
from .math.quat import quat_from_axis_angle, quat_identity, quat_mul
from .reset import ResetPolicy, sample_ball
from .state.particles import ParticlesState


ArrayF = NDArray[np.float64]

logger = logging.getLogger(__name__)


class ParticleMode(str, enum.Enum):
    BILLBOARD = "billboard"
    POINT_CLOUD = "point_cloud"


@dataclass(slots=True)
class BillboardHandle:
    """Presentation handle for one image particle."""

    index: int
    tag: str
    position: ArrayF = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    orientation: ArrayF = field(default_factory=quat_identity)


@dataclass(frozen=True, slots=True)
class Renderable:
    position: ArrayF
    orientation: ArrayF
    tag: str


class ParticleVariant(Protocol):
    mode: ParticleMode
    state: ParticlesState
    handles: list[BillboardHandle]

    def step_all(self, dt: float, camera_rotation: ArrayF | None = None) -> StepReport:
        """Advance every particle by one frame."""

    def renderables(self) -> object:
        """Return what the rendering collaborator consumes this frame."""

    def teardown(self) -> None:
        """Release presentation handles."""


class PointCloudParticles:
    mode = ParticleMode.POINT_CLOUD

    def __init__(self, state: ParticlesState, integrator: FieldLineEuler) -> None:
        self.state = state
        self.integrator = integrator
        self.positions_changed = False

    @property
    def handles(self) -> list[BillboardHandle]:
        return []

    def step_all(self, dt: float, camera_rotation: ArrayF | None = None) -> StepReport:
        report = self.integrator.step(self.state, dt)
        self.positions_changed = report.changed
        return report

    def renderables(self) -> ArrayF:
        return self.state.pos

    def teardown(self) -> None:
        self.positions_changed = False


class BillboardParticles:
    mode = ParticleMode.BILLBOARD

    def __init__(
        self,
        state: ParticlesState,
        integrator: FieldLineEuler,
        images: Sequence[str],
        tilt_deg: float = 30.0,
    ) -> None:
        if not images:
            raise ValueError("billboard particles need at least one image")
        self.state = state
        self.integrator = integrator
        self._tilt = quat_from_axis_angle(
            np.array([1.0, 0.0, 0.0]), np.deg2rad(tilt_deg)
        )
        self.handles: list[BillboardHandle] = [
            BillboardHandle(
                index=i,
                tag=images[i % len(images)],
                position=state.pos[i].copy(),
                orientation=self._tilt.copy(),
            )
            for i in range(state.count)
        ]

    def step_all(self, dt: float, camera_rotation: ArrayF | None = None) -> StepReport:
        report = self.integrator.step(self.state, dt)
        self.sync_handles()
        if camera_rotation is not None:
            self.face_camera(camera_rotation)
        return report

    def sync_handles(self) -> None:
        for handle in self.handles:
            handle.position = self.state.pos[handle.index].copy()

    def face_camera(self, camera_rotation: ArrayF) -> None:
        """Copy the camera rotation onto every quad, then tilt about local X."""
        orientation = quat_mul(np.asarray(camera_rotation, dtype=np.float64), self._tilt)
        for handle in self.handles:
            handle.orientation = orientation.copy()

    def renderables(self) -> list[Renderable]:
        return [
            Renderable(position=h.position, orientation=h.orientation, tag=h.tag)
            for h in self.handles
        ]

    def teardown(self) -> None:
        self.handles.clear()


class ParticleSystem:
    """Owns the particle array and the active presentation variant.

    Switching mode discards every particle and handle and rebuilds the set.
    """

    def __init__(
        self,
        config: SimulationConfig,
        images: Sequence[str] = (),
        mode: ParticleMode | None = None,
        initial_positions: ArrayF | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config
        self.images = list(images)
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.field = SolenoidDipoleField.from_config(config)
        self.reset_policy = ResetPolicy.from_config(config, rng=self.rng)
        self.integrator = FieldLineEuler(
            self.field, self.reset_policy, config.field_speed, config.max_dt
        )
        self.variant: ParticleVariant | None = None
        if mode is None and not self.images:
            logger.warning("No images in catalog; initializing point-cloud particles.")
            mode = ParticleMode.POINT_CLOUD
        elif mode is None:
            mode = ParticleMode.BILLBOARD
        self.set_mode(mode, initial_positions=initial_positions)

    @property
    def mode(self) -> ParticleMode | None:
        return None if self.variant is None else self.variant.mode

    @property
    def state(self) -> ParticlesState:
        assert self.variant is not None
        return self.variant.state

    @property
    def positions(self) -> ArrayF:
        return self.state.pos

    @property
    def live_handles(self) -> int:
        if self.variant is None:
            return 0
        return len(self.variant.handles)

    def handles(self) -> list[BillboardHandle]:
        if self.variant is None:
            return []
        return list(self.variant.handles)

    def set_mode(
        self, mode: ParticleMode, initial_positions: ArrayF | None = None
    ) -> ParticleMode:
        mode = ParticleMode(mode)
        if mode is ParticleMode.BILLBOARD and not self.images:
            logger.warning(
                "Image catalog is empty; falling back to point-cloud particles."
            )
            mode = ParticleMode.POINT_CLOUD
        self.teardown()
        state = self._initial_state(initial_positions)
        if mode is ParticleMode.BILLBOARD:
            self.variant = BillboardParticles(
                state, self.integrator, self.images, self.config.billboard_tilt_deg
            )
        else:
            self.variant = PointCloudParticles(state, self.integrator)
        logger.info("Initialized %d %s particles", state.count, mode.value)
        return mode

    def teardown(self) -> None:
        if self.variant is not None:
            self.variant.teardown()
        self.variant = None

    def step_all(self, dt: float, camera_rotation: ArrayF | None = None) -> StepReport:
        assert self.variant is not None
        return self.variant.step_all(dt, camera_rotation)

    def renderables(self) -> object:
        assert self.variant is not None
        return self.variant.renderables()

    def _initial_state(self, initial_positions: ArrayF | None) -> ParticlesState:
        if initial_positions is not None:
            pos = np.array(initial_positions, dtype=np.float64)
        else:
            pos = sample_ball(
                self.config.particle_count, self.config.spawn_radius, self.rng
            )
        state = ParticlesState(pos=pos)
        self.reset_policy.apply(state.pos)
        return state
