from __future__ import annotations

import numpy as np

from surfchart.fonts import FontService
from surfchart.raster.base import DrawingBackend
from surfchart.raster.canvas import blend_region, draw_pixel, fill, new_canvas
from surfchart.raster.draw_lines import draw_polyline
from surfchart.raster.draw_polygon import fill_polygon
from surfchart.style import RGBA, WHITE


class SoftwareBackend(DrawingBackend):
    """Reference backend rasterizing into a numpy RGBA array."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        fonts: FontService | None = None,
        background: RGBA = WHITE,
    ) -> None:
        super().__init__(width, height, fonts=fonts, background=background)
        self._surface = new_canvas(self.width, self.height, color=background)
        self._staged: np.ndarray | None = None

    def snapshot(self) -> np.ndarray:
        return self._surface.copy()

    def _begin(self) -> None:
        self._staged = self._surface.copy()

    def _commit(self) -> None:
        if self._staged is not None:
            self._surface = self._staged
        self._staged = None

    def _abort(self) -> None:
        self._staged = None

    def _target(self) -> np.ndarray:
        assert self._staged is not None
        return self._staged

    def _fill(self, color: RGBA) -> None:
        fill(self._target(), color)

    def _draw_pixel(self, x: int, y: int, color: RGBA) -> None:
        draw_pixel(self._target(), x, y, color)

    def _draw_line(self, xs: np.ndarray, ys: np.ndarray, color: RGBA, width: int) -> None:
        draw_polyline(self._target(), xs, ys, color, width=width)

    def _fill_polygon(self, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
        fill_polygon(self._target(), xs, ys, color)

    def _blend_mask(self, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
        blend_region(self._target(), x, y, mask.astype(np.float32) / 255.0, color)
