"""Settings file I/O and adapters."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

from ..core.config import SimulationConfig


SettingsDefinition = dict[str, Any]

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}

_CONFIG_FIELDS = {f.name for f in dataclasses.fields(SimulationConfig)}


def default_settings() -> SettingsDefinition:
    return {
        "schema_version": 1,
        "simulation": {},
        "catalog": {"images": []},
    }


def load_settings(path: str | Path) -> SettingsDefinition:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return _validate_settings_v1(data)


def save_settings(path: str | Path, defn: SettingsDefinition) -> None:
    Path(path).write_text(
        json.dumps(defn, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def config_from_settings(defn: SettingsDefinition) -> SimulationConfig:
    sim = defn.get("simulation", {})
    return SimulationConfig(**sim)


def catalog_from_settings(
    defn: SettingsDefinition, base_dir: str | Path | None = None
) -> list[str]:
    """Return the ordered image catalog: explicit images, then directory scan."""
    catalog = defn.get("catalog", {})
    base = Path(base_dir) if base_dir is not None else None
    images: list[str] = []
    for entry in catalog.get("images", []):
        p = Path(entry)
        if base is not None and not p.is_absolute():
            p = base / p
        images.append(str(p))
    directory = catalog.get("directory")
    if directory:
        d = Path(directory)
        if base is not None and not d.is_absolute():
            d = base / d
        images.extend(scan_image_directory(d))
    return images


def scan_image_directory(directory: str | Path) -> list[str]:
    d = Path(directory)
    if not d.is_dir():
        return []
    return [
        str(p)
        for p in sorted(d.iterdir())
        if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES
    ]


def _require(obj: dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ValueError(f"missing required field: {ctx}.{key}")
    return obj[key]


def _validate_settings_v1(data: Any) -> SettingsDefinition:
    if not isinstance(data, dict):
        raise ValueError("settings must be a JSON object")
    if data.get("schema_version") != 1:
        raise ValueError("schema_version must be 1")

    sim = _require(data, "simulation", "settings")
    if not isinstance(sim, dict):
        raise ValueError("simulation must be an object")
    unknown = sorted(set(sim) - _CONFIG_FIELDS)
    if unknown:
        raise ValueError(f"unknown simulation fields: {', '.join(unknown)}")
    for key, value in sim.items():
        if key == "seed":
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError("simulation.seed must be an integer or null")
            continue
        if key == "particle_count":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError("simulation.particle_count must be an integer")
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"simulation.{key} must be a number")
    # surfaces range errors as ValueError at load time
    config_from_settings(data)

    if "catalog" in data:
        catalog = data["catalog"]
        if not isinstance(catalog, dict):
            raise ValueError("catalog must be an object")
        images = catalog.get("images", [])
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            raise ValueError("catalog.images must be a list of strings")
        directory = catalog.get("directory")
        if directory is not None and not isinstance(directory, str):
            raise ValueError("catalog.directory must be a string")
    return data
