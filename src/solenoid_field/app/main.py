"""Desktop app entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PySide6 import QtWidgets

from ..io.settings import scan_image_directory
from .sim_controller import SimulationController
from .window import MainWindow


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="solenoid-field")
    parser.add_argument("--settings", type=Path, default=None)
    parser.add_argument("--images", type=Path, default=None, help="image directory")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    controller = SimulationController()
    if args.settings is not None:
        controller.load_settings(args.settings)
    if args.images is not None:
        controller.images = scan_image_directory(args.images)
        controller.background = controller.images[0] if controller.images else None

    qt_app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    window = MainWindow(controller)
    window.show()
    window.start()
    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
