"""3D viewport backed by VisPy."""

from __future__ import annotations

import logging

import numpy as np
from PySide6 import QtCore, QtWidgets
from vispy import app, scene

from ..core.config import SimulationConfig
from ..core.picking import Ray
from ..core.system import Renderable
from .image_assets import TextureCache, placeholder_texture
from .image_quad_visual import ImageQuad
from .viz_utils import (
    billboard_matrix,
    camera_rotation_from_view,
    coil_outline,
    compute_bounds,
)

app.use_app("pyside6")

logger = logging.getLogger(__name__)

CLICK_SLOP_PX = 4.0


class ViewportWidget(QtWidgets.QWidget):
    visual_warning = QtCore.Signal(str)
    ray_clicked = QtCore.Signal(object)

    def __init__(
        self, config: SimulationConfig, parent: QtWidgets.QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self._config = config

        self._canvas = scene.SceneCanvas(
            keys="interactive",
            bgcolor="#000000",
            size=(800, 600),
        )
        self._view = self._canvas.central_widget.add_view()
        self._view.camera = scene.TurntableCamera(
            fov=75, azimuth=50, elevation=40, distance=10.5
        )

        self._background = scene.visuals.Image(
            np.zeros((2, 2, 4), dtype=np.uint8), parent=self._canvas.scene
        )
        self._background.order = -10
        self._background.set_gl_state("translucent", depth_test=False)
        self._background.transform = scene.transforms.STTransform()
        self._background.visible = False
        self._background_shape = (2, 2)

        top, bottom = coil_outline(config.coil_radius, config.pole_z)
        self._coil_top = scene.visuals.Line(
            top, color=(0.9, 0.6, 0.2, 0.6), parent=self._view.scene
        )
        self._coil_bottom = scene.visuals.Line(
            bottom, color=(0.9, 0.6, 0.2, 0.6), parent=self._view.scene
        )

        self._points = scene.visuals.Markers(parent=self._view.scene)
        self._points.set_gl_state("additive", depth_test=False)
        self._quads: list[ImageQuad] = []
        self._textures = TextureCache()
        self._press_pos: np.ndarray | None = None

        self._canvas.events.mouse_press.connect(self._on_mouse_press)
        self._canvas.events.mouse_release.connect(self._on_mouse_release)
        self._canvas.events.resize.connect(self._on_resize)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._canvas.native)

    def set_point_cloud(self, pos: np.ndarray | None) -> None:
        if pos is None or np.asarray(pos).size == 0:
            self._points.visible = False
            return
        pos = np.asarray(pos, dtype=np.float32)
        if pos.ndim != 2 or pos.shape[1] != 3:
            raise ValueError("pos must have shape (N, 3)")
        self._points.visible = True
        self._points.set_data(
            pos,
            face_color=(0.67, 0.67, 1.0, 0.7),
            edge_color=None,
            size=self._config.point_size * 20.0,
        )

    def rebuild_billboards(self, renderables: list[Renderable]) -> None:
        """Drop every quad visual and create one per renderable."""
        for quad in self._quads:
            quad.parent = None
        self._quads = []
        for item in renderables:
            texture = self._textures.get(item.tag)
            if texture is None:
                self.visual_warning.emit(
                    self._textures.errors.get(item.tag, f"Texture load failed: {item.tag}")
                )
                texture = placeholder_texture()
            quad = ImageQuad(texture=texture, opacity=0.8, parent=self._view.scene)
            quad.transform = scene.transforms.MatrixTransform()
            self._quads.append(quad)
        self.update_billboards(renderables)

    def update_billboards(self, renderables: list[Renderable]) -> None:
        size = self._config.image_size
        for quad, item in zip(self._quads, renderables):
            quad.transform.matrix = billboard_matrix(item.position, item.orientation, size)

    @property
    def billboard_count(self) -> int:
        return len(self._quads)

    def set_background(self, path: str | None) -> None:
        if path is None:
            self._background.visible = False
            return
        texture = self._textures.get(path)
        if texture is None:
            message = self._textures.errors.get(path, f"Background load failed: {path}")
            logger.warning(message)
            self.visual_warning.emit(message)
            self._background.visible = False
            return
        self._background.set_data(texture)
        self._background_shape = texture.shape[:2]
        self._background.visible = True
        self._fit_background()
        logger.info("Background set: %s", path)

    def camera_rotation(self) -> np.ndarray:
        """Camera->world quaternion recovered from the current view transform."""
        w, h = self._canvas.size
        cx, cy = 0.5 * w, 0.5 * h
        near = self._unproject(cx, cy, 0.0)
        far = self._unproject(cx, cy, 1.0)
        above = self._unproject(cx, cy - 10.0, 0.0)
        return camera_rotation_from_view(far - near, above - near)

    def ray_at(self, x: float, y: float) -> Ray:
        near = self._unproject(x, y, 0.0)
        far = self._unproject(x, y, 1.0)
        return Ray(origin=near, direction=far - near)

    def frame_all(self, pos: np.ndarray) -> None:
        center, radius = compute_bounds(np.asarray(pos, dtype=np.float32))
        camera = self._view.camera
        if camera is None:
            return
        camera.center = center
        camera.distance = max(radius * 1.5, 2.0)

    def _unproject(self, x: float, y: float, z: float) -> np.ndarray:
        tr = self._view.scene.node_transform(self._canvas.scene)
        p = tr.imap(np.array([x, y, z, 1.0]))
        return np.asarray(p[:3] / p[3], dtype=np.float64)

    def _fit_background(self) -> None:
        w, h = self._canvas.size
        img_h, img_w = self._background_shape
        self._background.transform.scale = (w / max(img_w, 1), h / max(img_h, 1))

    def _on_resize(self, event: object) -> None:
        if self._background.visible:
            self._fit_background()

    def _on_mouse_press(self, event: object) -> None:
        self._press_pos = np.asarray(event.pos, dtype=np.float64)

    def _on_mouse_release(self, event: object) -> None:
        if self._press_pos is None:
            return
        pos = np.asarray(event.pos, dtype=np.float64)
        moved = float(np.linalg.norm(pos - self._press_pos))
        self._press_pos = None
        if moved > CLICK_SLOP_PX:
            return
        self.ray_clicked.emit(self.ray_at(float(pos[0]), float(pos[1])))
