"""CLI entrypoint: headless run summary."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import __version__
from .core.config import SimulationConfig
from .core.diagnostics.particles import bounds_violations, inside_coil_count
from .core.run import run
from .core.system import ParticleSystem
from .io.settings import catalog_from_settings, config_from_settings, load_settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="solenoid_field")
    parser.add_argument("--settings", type=Path, default=None)
    parser.add_argument("--steps", type=int, default=300)
    parser.add_argument("--dt", type=float, default=1.0 / 60.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = SimulationConfig()
    images: list[str] = []
    if args.settings is not None:
        defn = load_settings(args.settings)
        config = config_from_settings(defn)
        images = catalog_from_settings(defn, base_dir=args.settings.parent)

    system = ParticleSystem(config, images)
    result = run(system, args.dt, args.steps)
    pos = system.positions
    print(f"solenoid_field v{__version__}")
    print(f"mode: {system.mode.value}  particles: {pos.shape[0]}")
    print(f"steps: {args.steps}  resets: {result.resets}")
    print(f"inside coil: {inside_coil_count(pos, config)}")
    print(f"bounds violations: {bounds_violations(pos, config)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
