"""Headless simulation controller for the desktop app."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from ..core.config import SimulationConfig
from ..core.diagnostics.particles import bounds_violations, inside_coil_count, mean_height
from ..core.integrators import StepReport, clamp_dt
from ..core.picking import PerspectiveCamera, PickingController, Ray
from ..core.system import ParticleMode, ParticleSystem, Renderable
from ..io.settings import catalog_from_settings, config_from_settings, load_settings


logger = logging.getLogger(__name__)


class SimulationController:
    def __init__(
        self,
        config: SimulationConfig | None = None,
        images: Sequence[str] = (),
    ) -> None:
        self.settings_path: Path | None = None
        self.config = config if config is not None else SimulationConfig()
        self.images = list(images)
        self.system: ParticleSystem | None = None
        self.picker: PickingController | None = None
        self.background: str | None = self.images[0] if self.images else None
        self.frame = 0
        self.time = 0.0
        self._selection_listeners: list[Callable[[str], None]] = []
        self._rebuild_listeners: list[Callable[[ParticleMode], None]] = []

    def load_settings(self, path: str | Path) -> None:
        settings_path = Path(path)
        defn = load_settings(settings_path)
        self.config = config_from_settings(defn)
        self.images = catalog_from_settings(defn, base_dir=settings_path.parent)
        self.background = self.images[0] if self.images else None
        self.settings_path = settings_path
        self.system = None
        self.picker = None

    def on_selection(self, listener: Callable[[str], None]) -> None:
        self._selection_listeners.append(listener)

    def on_rebuild(self, listener: Callable[[ParticleMode], None]) -> None:
        self._rebuild_listeners.append(listener)

    def start(self, mode: ParticleMode | None = None) -> ParticleMode:
        self.system = ParticleSystem(self.config, self.images, mode=mode)
        self.picker = PickingController(self.system)
        self.picker.add_listener(self._on_selected)
        self.frame = 0
        self.time = 0.0
        return self._rebuilt()

    def set_mode(self, mode: ParticleMode) -> ParticleMode:
        if self.system is None:
            return self.start(mode)
        self.system.set_mode(mode)
        return self._rebuilt()

    def toggle_mode(self) -> ParticleMode:
        if self.mode is ParticleMode.BILLBOARD:
            return self.set_mode(ParticleMode.POINT_CLOUD)
        return self.set_mode(ParticleMode.BILLBOARD)

    def reset(self) -> bool:
        if self.system is None or self.system.mode is None:
            return False
        self.set_mode(self.system.mode)
        self.frame = 0
        self.time = 0.0
        return True

    def shutdown(self) -> None:
        if self.system is not None:
            self.system.teardown()

    @property
    def mode(self) -> ParticleMode | None:
        return None if self.system is None else self.system.mode

    def tick(
        self, frame_dt: float, camera_rotation: np.ndarray | None = None
    ) -> StepReport | None:
        if self.system is None:
            return None
        report = self.system.step_all(frame_dt, camera_rotation)
        self.frame += 1
        self.time += clamp_dt(frame_dt, self.config.max_dt)
        return report

    def pick(
        self,
        pointer_x: float,
        pointer_y: float,
        viewport: tuple[float, float],
        camera: PerspectiveCamera,
    ) -> int | None:
        if self.picker is None:
            return None
        return self.picker.pick(pointer_x, pointer_y, viewport, camera)

    def pick_ray(self, ray: Ray) -> int | None:
        if self.picker is None:
            return None
        return self.picker.pick_ray(ray)

    def particle_positions(self) -> np.ndarray:
        if self.system is None:
            return np.zeros((0, 3), dtype=np.float32)
        return self.system.positions.astype(np.float32, copy=False)

    def billboards(self) -> list[Renderable]:
        if self.system is None or self.system.mode is not ParticleMode.BILLBOARD:
            return []
        return list(self.system.renderables())

    def diagnostics(self) -> dict[str, float | int | str]:
        info: dict[str, float | int | str] = {
            "frame": self.frame,
            "time": self.time,
        }
        if self.system is None:
            return info
        pos = self.system.positions
        info["mode"] = self.system.mode.value
        info["particles"] = int(pos.shape[0])
        info["handles"] = self.system.live_handles
        info["inside_coil"] = inside_coil_count(pos, self.config)
        info["bounds_violations"] = bounds_violations(pos, self.config)
        info["mean_z"] = mean_height(pos)
        return info

    def _on_selected(self, tag: str) -> None:
        logger.info("Selected particle image: %s", tag)
        self.background = tag
        for listener in list(self._selection_listeners):
            listener(tag)

    def _rebuilt(self) -> ParticleMode:
        assert self.system is not None and self.system.mode is not None
        mode = self.system.mode
        for listener in list(self._rebuild_listeners):
            listener(mode)
        return mode
