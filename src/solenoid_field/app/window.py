"""Main window for the desktop app."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from PySide6 import QtCore, QtGui, QtWidgets

from ..core.picking import Ray
from ..core.system import ParticleMode
from .sim_controller import SimulationController
from .viewport import ViewportWidget


logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, controller: SimulationController) -> None:
        super().__init__()
        self.resize(1200, 800)
        self.setWindowTitle("Solenoid Field")

        self._controller = controller
        self._last_tick: float | None = None
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._on_tick)

        self._viewport = ViewportWidget(controller.config, self)
        self._viewport.visual_warning.connect(self.statusBar().showMessage)
        self._viewport.ray_clicked.connect(self._on_ray_clicked)
        self.setCentralWidget(self._viewport)

        self._controller.on_rebuild(self._on_rebuild)
        self._controller.on_selection(self._on_selection)

        self._build_toolbar()
        self._viewport.set_background(controller.background)
        self._controller.start()
        self.statusBar().showMessage("Ready")

    def _build_toolbar(self) -> None:
        self._toolbar = QtWidgets.QToolBar("Main", self)
        self._toolbar.setMovable(False)
        self.addToolBar(QtCore.Qt.ToolBarArea.TopToolBarArea, self._toolbar)

        self._action_run = QtGui.QAction("Pause", self)
        self._action_run.triggered.connect(self._on_toggle_run)
        self._toolbar.addAction(self._action_run)

        self._action_mode = QtGui.QAction("Point Cloud", self)
        self._action_mode.setCheckable(True)
        self._action_mode.toggled.connect(self._on_mode_toggled)
        self._toolbar.addAction(self._action_mode)

        self._action_reset = QtGui.QAction("Reset", self)
        self._action_reset.triggered.connect(lambda: self._controller.reset())
        self._toolbar.addAction(self._action_reset)

        self._action_frame = QtGui.QAction("Frame All", self)
        self._action_frame.triggered.connect(
            lambda: self._viewport.frame_all(self._controller.particle_positions())
        )
        self._toolbar.addAction(self._action_frame)

    def start(self) -> None:
        self._last_tick = None
        self._timer.start()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self._timer.stop()
        self._controller.shutdown()
        super().closeEvent(event)

    def _on_tick(self) -> None:
        now = time.perf_counter()
        dt = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now
        self._controller.tick(dt, self._viewport.camera_rotation())
        self._sync_viewport()

    def _sync_viewport(self) -> None:
        mode = self._controller.mode
        if mode is ParticleMode.BILLBOARD:
            self._viewport.update_billboards(self._controller.billboards())
        elif mode is ParticleMode.POINT_CLOUD:
            system = self._controller.system
            if system is not None and system.variant.positions_changed:
                self._viewport.set_point_cloud(self._controller.particle_positions())

    def _on_rebuild(self, mode: ParticleMode) -> None:
        if mode is ParticleMode.BILLBOARD:
            self._viewport.set_point_cloud(None)
            self._viewport.rebuild_billboards(self._controller.billboards())
        else:
            self._viewport.rebuild_billboards([])
            self._viewport.set_point_cloud(self._controller.particle_positions())
        self._action_mode.blockSignals(True)
        self._action_mode.setChecked(mode is ParticleMode.POINT_CLOUD)
        self._action_mode.blockSignals(False)
        self.statusBar().showMessage(f"Mode: {mode.value}")

    def _on_mode_toggled(self, checked: bool) -> None:
        wanted = ParticleMode.POINT_CLOUD if checked else ParticleMode.BILLBOARD
        actual = self._controller.set_mode(wanted)
        if actual is not wanted:
            self.statusBar().showMessage("No images available; staying in point-cloud mode")

    def _on_toggle_run(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
            self._action_run.setText("Run")
        else:
            self.start()
            self._action_run.setText("Pause")

    def _on_ray_clicked(self, ray: Ray) -> None:
        self._controller.pick_ray(ray)

    def _on_selection(self, tag: str) -> None:
        self._viewport.set_background(tag)
        self.statusBar().showMessage(f"Background: {Path(tag).name}")
