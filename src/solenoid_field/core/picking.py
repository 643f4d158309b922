"""Pointer picking against billboard quads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from .math.quat import quat_from_rotmat, quat_identity, quat_rotate, quat_to_rotmat
from .math.vector import cross, unit
from .system import ParticleMode, ParticleSystem


ArrayF = NDArray[np.float64]

SelectionListener = Callable[[str], None]


@dataclass(slots=True)
class Ray:
    origin: ArrayF
    direction: ArrayF

    def __post_init__(self) -> None:
        self.origin = np.asarray(self.origin, dtype=np.float64)
        self.direction = unit(np.asarray(self.direction, dtype=np.float64))
        if self.origin.shape != (3,) or self.direction.shape != (3,):
            raise ValueError("origin and direction must have shape (3,)")
        if not np.any(self.direction):
            raise ValueError("direction must be non-zero")


@dataclass(slots=True)
class PerspectiveCamera:
    """Pinhole camera looking down its local -Z axis with +Y up.

    ``rotation`` is a camera->world quaternion; ``fov_deg`` is vertical.
    """

    position: ArrayF = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    rotation: ArrayF = field(default_factory=quat_identity)
    fov_deg: float = 75.0

    @classmethod
    def look_at(
        cls,
        eye: ArrayF,
        target: ArrayF,
        up: ArrayF = (0.0, 0.0, 1.0),
        fov_deg: float = 75.0,
    ) -> "PerspectiveCamera":
        eye = np.asarray(eye, dtype=np.float64)
        z_axis = unit(eye - np.asarray(target, dtype=np.float64))
        x_axis = unit(cross(np.asarray(up, dtype=np.float64), z_axis))
        if not np.any(x_axis):
            raise ValueError("up must not be parallel to the view direction")
        y_axis = cross(z_axis, x_axis)
        rot = np.stack([x_axis, y_axis, z_axis], axis=-1)
        return cls(position=eye, rotation=quat_from_rotmat(rot), fov_deg=fov_deg)

    def ray_through(
        self, pointer_x: float, pointer_y: float, viewport: tuple[float, float]
    ) -> Ray:
        width, height = float(viewport[0]), float(viewport[1])
        if width <= 0.0 or height <= 0.0:
            raise ValueError("viewport must have positive size")
        ndc_x = (pointer_x / width) * 2.0 - 1.0
        ndc_y = -(pointer_y / height) * 2.0 + 1.0
        tan_half = np.tan(np.deg2rad(self.fov_deg) * 0.5)
        aspect = width / height
        d_cam = np.array([ndc_x * tan_half * aspect, ndc_y * tan_half, -1.0])
        return Ray(origin=self.position.copy(), direction=quat_rotate(self.rotation, d_cam))


def intersect_quads(
    ray: Ray, centers: ArrayF, orientations: ArrayF, size: float
) -> ArrayF:
    """Return the ray parameter for each double-sided square quad, inf on miss.

    Quads lie in their local XY plane with side length ``size``.
    """
    centers = np.asarray(centers, dtype=np.float64).reshape(-1, 3)
    n = centers.shape[0]
    if n == 0:
        return np.zeros(0, dtype=np.float64)
    rot = quat_to_rotmat(np.asarray(orientations, dtype=np.float64).reshape(-1, 4))
    normal = rot[:, :, 2]
    denom = normal @ ray.direction
    offset = centers - ray.origin
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.sum(offset * normal, axis=-1) / denom
    valid = (np.abs(denom) > 1e-12) & np.isfinite(t) & (t >= 0.0)
    hit = ray.origin + np.where(valid, t, 0.0)[:, None] * ray.direction
    local = np.einsum("nji,nj->ni", rot, hit - centers)
    half = 0.5 * size
    inside = (np.abs(local[:, 0]) <= half) & (np.abs(local[:, 1]) <= half)
    return np.where(valid & inside, t, np.inf)


class PickingController:
    """Resolves pointer clicks to billboard particles and emits their image tag."""

    def __init__(self, system: ParticleSystem) -> None:
        self.system = system
        self._listeners: list[SelectionListener] = []

    def add_listener(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    def pick(
        self,
        pointer_x: float,
        pointer_y: float,
        viewport: tuple[float, float],
        camera: PerspectiveCamera,
    ) -> int | None:
        if self.system.mode is not ParticleMode.BILLBOARD:
            return None
        return self.pick_ray(camera.ray_through(pointer_x, pointer_y, viewport))

    def pick_ray(self, ray: Ray) -> int | None:
        if self.system.mode is not ParticleMode.BILLBOARD:
            return None
        handles = self.system.handles()
        if not handles:
            return None
        centers = np.array([h.position for h in handles], dtype=np.float64)
        orientations = np.array([h.orientation for h in handles], dtype=np.float64)
        t = intersect_quads(ray, centers, orientations, self.system.config.image_size)
        best = int(np.argmin(t))
        if not np.isfinite(t[best]):
            return None
        handle = handles[best]
        for listener in list(self._listeners):
            listener(handle.tag)
        return handle.index
