from __future__ import annotations

import math

import numpy as np

from surfchart.raster.canvas import blend_region
from surfchart.style import RGBA


def polygon_coverage(xs: np.ndarray, ys: np.ndarray, canvas_w: int, canvas_h: int) -> tuple[int, int, np.ndarray] | None:
    """Even-odd scanline coverage of a closed polygon.

    Pixel ``(i, j)`` is inside when its center lies inside the polygon, with
    half-open spans (``x0 <= i < x1``, ``y0 <= j < y1``) so quads that share
    an edge never cover the same pixel twice.
    """
    ymin = max(0, int(math.ceil(float(ys.min()))))
    ymax = min(canvas_h - 1, int(math.ceil(float(ys.max()))) - 1)
    xmin = max(0, int(math.ceil(float(xs.min()))))
    xmax = min(canvas_w - 1, int(math.ceil(float(xs.max()))) - 1)
    if ymin > ymax or xmin > xmax:
        return None

    ex0 = xs
    ey0 = ys
    ex1 = np.roll(xs, -1)
    ey1 = np.roll(ys, -1)
    lo = np.minimum(ey0, ey1)
    hi = np.maximum(ey0, ey1)
    sloped = ey0 != ey1
    mask = np.zeros((ymax - ymin + 1, xmax - xmin + 1), dtype=np.float32)

    for row, y in enumerate(range(ymin, ymax + 1)):
        active = sloped & (lo <= y) & (y < hi)
        if not np.any(active):
            continue
        t = (y - ey0[active]) / (ey1[active] - ey0[active])
        crossings = np.sort(ex0[active] + t * (ex1[active] - ex0[active]))
        for left, right in zip(crossings[0::2], crossings[1::2], strict=False):
            a = max(xmin, int(math.ceil(left)))
            b = min(xmax, int(math.ceil(right)) - 1)
            if a <= b:
                mask[row, a - xmin : b - xmin + 1] = 1.0
    return xmin, ymin, mask


def fill_polygon(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
    coverage = polygon_coverage(xs, ys, dst.shape[1], dst.shape[0])
    if coverage is None:
        return
    x0, y0, mask = coverage
    blend_region(dst, x0, y0, mask, color)
