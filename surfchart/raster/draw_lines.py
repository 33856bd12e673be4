from __future__ import annotations

import numpy as np

from surfchart.raster.canvas import blend_region
from surfchart.style import RGBA


def line_pixels(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Integer pixels of a polyline, each shared vertex emitted once."""
    xi = np.rint(xs).astype(np.int64)
    yi = np.rint(ys).astype(np.int64)
    if xi.size == 1:
        return np.asarray([[xi[0], yi[0]]], dtype=np.int64)
    out: list[tuple[int, int]] = []
    for i in range(xi.size - 1):
        segment = _segment_pixels(int(xi[i]), int(yi[i]), int(xi[i + 1]), int(yi[i + 1]))
        if out and segment and segment[0] == out[-1]:
            segment = segment[1:]
        out.extend(segment)
    return np.asarray(out, dtype=np.int64).reshape(-1, 2)


def draw_polyline(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, width: int = 1) -> None:
    if xs.size == 0:
        return
    pixels = line_pixels(xs, ys)
    coverage = brush_coverage(pixels, width, dst.shape[1], dst.shape[0])
    if coverage is None:
        return
    x0, y0, mask = coverage
    blend_region(dst, x0, y0, mask, color)


def brush_coverage(pixels: np.ndarray, width: int, canvas_w: int, canvas_h: int) -> tuple[int, int, np.ndarray] | None:
    """Stamp a square brush at every pixel into one mask so overlaps blend once."""
    radius = max(0, width // 2)
    xmin = max(0, int(pixels[:, 0].min()) - radius)
    ymin = max(0, int(pixels[:, 1].min()) - radius)
    xmax = min(canvas_w - 1, int(pixels[:, 0].max()) + radius)
    ymax = min(canvas_h - 1, int(pixels[:, 1].max()) + radius)
    if xmin > xmax or ymin > ymax:
        return None
    mask = np.zeros((ymax - ymin + 1, xmax - xmin + 1), dtype=np.float32)
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            px = pixels[:, 0] + dx - xmin
            py = pixels[:, 1] + dy - ymin
            keep = (px >= 0) & (px < mask.shape[1]) & (py >= 0) & (py < mask.shape[0])
            mask[py[keep], px[keep]] = 1.0
    return xmin, ymin, mask


def _segment_pixels(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    out: list[tuple[int, int]] = []

    while True:
        out.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
    return out
