from __future__ import annotations

import logging

import numpy as np
import pytest

from solenoid_field.core.config import SimulationConfig
from solenoid_field.core.diagnostics.particles import bounds_violations
from solenoid_field.core.math.quat import quat_identity, quat_to_rotmat
from solenoid_field.core.system import (
    BillboardParticles,
    ParticleMode,
    ParticleSystem,
    PointCloudParticles,
)


def _config(n: int = 12) -> SimulationConfig:
    return SimulationConfig(particle_count=n, seed=42)


def test_empty_catalog_falls_back_to_point_cloud(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        system = ParticleSystem(_config(), images=[])
    assert any("No images" in r.message for r in caplog.records)
    caplog.clear()
    assert system.mode is ParticleMode.POINT_CLOUD
    assert system.live_handles == 0

    with caplog.at_level(logging.WARNING):
        mode = system.set_mode(ParticleMode.BILLBOARD)
    assert mode is ParticleMode.POINT_CLOUD
    assert any("empty" in r.message for r in caplog.records)


def test_catalog_selects_billboard_mode_and_cycles_tags() -> None:
    system = ParticleSystem(_config(7), images=["a", "b", "c"])
    assert system.mode is ParticleMode.BILLBOARD
    tags = [h.tag for h in system.handles()]
    assert tags == ["a", "b", "c", "a", "b", "c", "a"]
    assert [h.index for h in system.handles()] == list(range(7))


def test_initial_positions_respect_bounds() -> None:
    cfg = _config(500)
    system = ParticleSystem(cfg)
    pos = system.positions
    assert pos.shape == (500, 3)
    assert bounds_violations(pos, cfg) == 0
    assert np.all(np.linalg.norm(pos, axis=1) <= cfg.spawn_radius + 1e-9)


def test_small_coil_keeps_particles_inside_shell_while_stepping() -> None:
    cfg = SimulationConfig(coil_height=1.0, coil_radius=0.3, particle_count=200, seed=0)
    system = ParticleSystem(cfg)
    for _ in range(100):
        system.step_all(0.05)
        assert bounds_violations(system.positions, cfg) == 0


def test_mode_switch_rebuilds_without_leaking_handles() -> None:
    n = 9
    system = ParticleSystem(_config(n), images=["x", "y"])
    assert system.live_handles == n
    old_handles = system.variant.handles

    system.set_mode(ParticleMode.POINT_CLOUD)
    assert isinstance(system.variant, PointCloudParticles)
    assert system.positions.shape == (n, 3)
    assert system.live_handles == 0
    assert old_handles == []

    system.set_mode(ParticleMode.BILLBOARD)
    assert isinstance(system.variant, BillboardParticles)
    assert system.positions.shape == (n, 3)
    assert system.live_handles == n

    system.teardown()
    assert system.live_handles == 0
    assert system.mode is None


def test_billboard_handles_follow_positions_each_step() -> None:
    system = ParticleSystem(_config(), images=["a"])
    for _ in range(20):
        system.step_all(0.05, quat_identity())
        for handle in system.handles():
            assert np.array_equal(handle.position, system.positions[handle.index])


def test_billboards_face_camera_with_tilt() -> None:
    system = ParticleSystem(_config(3), images=["a"])
    system.step_all(0.0, quat_identity())
    tilt = np.deg2rad(30.0)
    for item in system.renderables():
        normal = quat_to_rotmat(item.orientation) @ np.array([0.0, 0.0, 1.0])
        assert np.allclose(normal, [0.0, -np.sin(tilt), np.cos(tilt)])
        assert item.tag == "a"


def test_point_cloud_change_flag() -> None:
    system = ParticleSystem(_config(), images=[])
    system.step_all(0.0)
    assert system.variant.positions_changed is False
    system.step_all(0.02)
    assert system.variant.positions_changed is True
    assert system.renderables() is system.positions


def test_explicit_initial_positions_are_sanitized() -> None:
    pos = np.array([[0.0, 0.0, 3.0], [0.0, 0.0, 0.0], [50.0, 0.0, 0.0]])
    system = ParticleSystem(_config(), images=["a"], initial_positions=pos)
    assert np.allclose(system.positions[0], [0.0, 0.0, 3.0])
    assert np.all(system.positions[1:, 2] <= -2.5)
    assert system.live_handles == 3


def test_seeded_systems_are_reproducible() -> None:
    a = ParticleSystem(_config())
    b = ParticleSystem(_config())
    for _ in range(50):
        a.step_all(0.05)
        b.step_all(0.05)
    assert np.array_equal(a.positions, b.positions)
