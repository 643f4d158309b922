from __future__ import annotations

import json
from pathlib import Path

import numpy as np

from solenoid_field.app.sim_controller import SimulationController
from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.picking import PerspectiveCamera
from solenoid_field.core.system import ParticleMode


def _config() -> SimulationConfig:
    return SimulationConfig(particle_count=20, seed=9)


def test_start_without_images_uses_point_cloud() -> None:
    controller = SimulationController(_config())
    assert controller.start() is ParticleMode.POINT_CLOUD
    assert controller.background is None
    assert controller.billboards() == []
    assert controller.particle_positions().shape == (20, 3)
    assert controller.particle_positions().dtype == np.float32


def test_tick_advances_frame_and_time() -> None:
    controller = SimulationController(_config(), images=["a.png"])
    assert controller.tick(0.02) is None
    controller.start()
    before = controller.particle_positions().copy()
    report = controller.tick(0.02)
    assert report is not None and report.changed
    assert controller.frame == 1
    assert controller.time == 0.02
    assert not np.array_equal(before, controller.particle_positions())


def test_pick_switches_background_and_notifies() -> None:
    controller = SimulationController(_config(), images=["a.png", "b.png", "c.png"])
    controller.start()
    assert controller.background == "a.png"
    selected: list[str] = []
    controller.on_selection(selected.append)

    target = controller.system.positions[4].copy()
    camera = PerspectiveCamera.look_at(
        target + np.array([0.0, 0.0, 15.0]), target, up=(0.0, 1.0, 0.0)
    )
    controller.tick(0.0, camera.rotation)

    index = controller.pick(400.0, 300.0, (800.0, 600.0), camera)
    assert index is not None
    tag = controller.system.handles()[index].tag
    assert selected == [tag]
    assert controller.background == tag


def test_toggle_mode_and_rebuild_listeners() -> None:
    controller = SimulationController(_config(), images=["a.png"])
    modes: list[ParticleMode] = []
    controller.on_rebuild(modes.append)

    controller.start()
    controller.toggle_mode()
    assert controller.mode is ParticleMode.POINT_CLOUD
    assert controller.system.live_handles == 0
    controller.toggle_mode()
    assert controller.mode is ParticleMode.BILLBOARD
    assert controller.system.live_handles == 20
    assert modes == [
        ParticleMode.BILLBOARD,
        ParticleMode.POINT_CLOUD,
        ParticleMode.BILLBOARD,
    ]


def test_pick_in_point_cloud_mode_returns_none() -> None:
    controller = SimulationController(_config(), images=["a.png"])
    controller.start(ParticleMode.POINT_CLOUD)
    camera = PerspectiveCamera.look_at((0.0, 0.0, 15.0), (0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0))
    assert controller.pick(400.0, 300.0, (800.0, 600.0), camera) is None


def test_reset_keeps_mode_and_rewinds() -> None:
    controller = SimulationController(_config(), images=["a.png"])
    assert controller.reset() is False
    controller.start(ParticleMode.POINT_CLOUD)
    controller.tick(0.02)
    assert controller.reset() is True
    assert controller.mode is ParticleMode.POINT_CLOUD
    assert controller.frame == 0
    assert controller.time == 0.0


def test_diagnostics_report_state() -> None:
    controller = SimulationController(_config(), images=["a.png"])
    assert controller.diagnostics() == {"frame": 0, "time": 0.0}
    controller.start()
    controller.tick(0.05)
    info = controller.diagnostics()
    assert info["mode"] == "billboard"
    assert info["particles"] == 20
    assert info["handles"] == 20
    assert info["bounds_violations"] == 0


def test_load_settings_configures_catalog(tmp_path: Path) -> None:
    (tmp_path / "img").mkdir()
    (tmp_path / "img" / "b.png").write_bytes(b"")
    (tmp_path / "img" / "a.png").write_bytes(b"")
    settings = {
        "schema_version": 1,
        "simulation": {"particle_count": 5, "seed": 3},
        "catalog": {"directory": "img"},
    }
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(settings), encoding="utf-8")

    controller = SimulationController()
    controller.load_settings(path)
    assert controller.config.particle_count == 5
    assert [Path(p).name for p in controller.images] == ["a.png", "b.png"]
    assert controller.background == controller.images[0]
    assert controller.start() is ParticleMode.BILLBOARD
