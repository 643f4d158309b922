"""Image catalog texture loading helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np


def load_texture_rgba(path: str | Path, max_size: int | None = 512) -> np.ndarray:
    """Load an image file as an (H, W, 4) uint8 array."""
    try:
        from PIL import Image
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("Pillow is required to load image assets") from exc

    try:
        with Image.open(Path(path)) as img:
            img = img.convert("RGBA")
            if max_size is not None and max(img.size) > max_size:
                img.thumbnail((max_size, max_size))
            data = np.asarray(img, dtype=np.uint8)
    except (OSError, ValueError) as exc:
        raise RuntimeError(f"unable to load image: {path}") from exc
    return _ensure_rgba(data)


def _ensure_rgba(image: Any) -> np.ndarray:
    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise RuntimeError("image must have shape (H, W, 3|4)")
    if arr.dtype != np.uint8:
        if np.issubdtype(arr.dtype, np.floating):
            arr = np.clip(arr, 0.0, 1.0) * 255.0
        arr = arr.astype(np.uint8)
    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=-1)
    return np.ascontiguousarray(arr)


def placeholder_texture(
    color: tuple[int, int, int, int] = (170, 170, 255, 200), size: int = 4
) -> np.ndarray:
    tex = np.empty((size, size, 4), dtype=np.uint8)
    tex[...] = color
    return tex


class TextureCache:
    """Per-path texture cache; failed loads are remembered."""

    def __init__(self, max_size: int | None = 512) -> None:
        self.max_size = max_size
        self._cache: dict[str, np.ndarray | None] = {}
        self.errors: dict[str, str] = {}

    def get(self, path: str) -> np.ndarray | None:
        if path in self._cache:
            return self._cache[path]
        try:
            tex = load_texture_rgba(path, self.max_size)
        except RuntimeError as exc:
            self.errors[path] = str(exc)
            tex = None
        self._cache[path] = tex
        return tex

    def clear(self) -> None:
        self._cache.clear()
        self.errors.clear()
