from __future__ import annotations

import numpy as np

from surfchart.errors import SurfaceInitError
from surfchart.style import RGBA


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    validate_size(width, height)
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def validate_size(width: int, height: int) -> None:
    if not isinstance(width, (int, np.integer)) or not isinstance(height, (int, np.integer)):
        raise SurfaceInitError(f"surface size must be integers, got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise SurfaceInitError(f"surface size must be > 0, got {width}x{height}")


def fill(dst: np.ndarray, color: RGBA) -> None:
    dst[:, :] = np.asarray(color, dtype=np.uint8)


def blend_region(dst: np.ndarray, x0: int, y0: int, coverage: np.ndarray, color: RGBA) -> None:
    """Composite ``color`` over ``dst`` weighted by a (H, W) coverage in [0, 1]."""
    h, w = coverage.shape
    xa = max(0, x0)
    ya = max(0, y0)
    xb = min(dst.shape[1], x0 + w)
    yb = min(dst.shape[0], y0 + h)
    if xa >= xb or ya >= yb:
        return
    cov = coverage[ya - y0 : yb - y0, xa - x0 : xb - x0]
    if not np.any(cov > 0):
        return
    a = (color[3] / 255.0) * cov.astype(np.float32)
    patch = dst[ya:yb, xa:xb]
    src_rgb = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    out = src_rgb * a[:, :, None] + patch[:, :, :3].astype(np.float32) * (1.0 - a[:, :, None])
    touched = cov > 0
    patch[:, :, :3] = np.where(touched[:, :, None], np.clip(np.rint(out), 0, 255), patch[:, :, :3]).astype(np.uint8)
    patch[:, :, 3] = np.where(touched, 255, patch[:, :, 3]).astype(np.uint8)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    blend_region(dst, x, y, np.ones((1, 1), dtype=np.float32), color)
