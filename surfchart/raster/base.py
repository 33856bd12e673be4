from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
import logging

import numpy as np

from surfchart.errors import SeriesDrawError
from surfchart.fonts import FontService, FontSpec
from surfchart.primitives import Line, Pixel, Point2D, Polygon, Primitive, Text
from surfchart.raster.canvas import validate_size
from surfchart.style import RGBA, WHITE, Style


LOGGER = logging.getLogger(__name__)


class DrawingBackend(ABC):
    """Raster surface contract shared by every concrete backend.

    All drawing happens inside :meth:`session`. Primitives are applied
    synchronously in call order to a staged surface, which is committed by
    :meth:`present` when the session exits cleanly and discarded when it
    raises, so a failed pass never reaches the committed surface.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        fonts: FontService | None = None,
        background: RGBA = WHITE,
    ) -> None:
        validate_size(width, height)
        self.width = int(width)
        self.height = int(height)
        self.fonts = fonts if fonts is not None else FontService()
        self.background = background
        self.presented_count = 0
        self.on_present: Callable[["DrawingBackend"], None] | None = None
        self._session_active = False

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def in_session(self) -> bool:
        return self._session_active

    @contextmanager
    def session(self) -> Iterator["DrawingBackend"]:
        if self._session_active:
            raise RuntimeError("backend session already active")
        self._begin()
        self._session_active = True
        try:
            yield self
        except BaseException:
            self._session_active = False
            self._abort()
            LOGGER.debug("backend session aborted; staged surface discarded")
            raise
        self._session_active = False
        self.present()

    def present(self) -> None:
        if self._session_active:
            raise RuntimeError("present() runs when the session ends")
        self._commit()
        self.presented_count += 1
        LOGGER.debug("presented %dx%d surface (#%d)", self.width, self.height, self.presented_count)
        if self.on_present is not None:
            self.on_present(self)

    flush = present

    def draw(self, primitive: Primitive) -> None:
        if isinstance(primitive, Pixel):
            self.draw_pixel(primitive.pos, primitive.color)
            return
        if isinstance(primitive, Line):
            self.draw_line(primitive.points, primitive.style)
            return
        if isinstance(primitive, Polygon):
            self.draw_polygon(primitive.vertices, primitive.style)
            return
        if isinstance(primitive, Text):
            self.draw_text(primitive.pos, primitive.content, primitive.font, primitive.color)
            return
        raise TypeError(f"Unsupported primitive: {type(primitive)!r}")

    def fill(self, color: RGBA) -> None:
        self._require_session()
        self._fill(color)

    def draw_pixel(self, pos: Point2D, color: RGBA) -> None:
        self._require_session()
        xs, ys = _coerce_points([pos], min_count=1, label="pixel")
        self._draw_pixel(int(np.rint(xs[0])), int(np.rint(ys[0])), color)

    def draw_line(self, points: Sequence[Point2D], style: Style) -> None:
        self._require_session()
        xs, ys = _coerce_points(points, min_count=1, label="line")
        color = style.resolved_stroke()
        if color is None or color[3] == 0:
            return
        self._draw_line(xs, ys, color, style.stroke_width)

    def draw_polygon(self, vertices: Sequence[Point2D], style: Style) -> None:
        self._require_session()
        xs, ys = _coerce_points(vertices, min_count=3, label="polygon")
        fill = style.resolved_fill()
        if fill is not None and fill[3] > 0:
            self._fill_polygon(xs, ys, fill)
        stroke = style.resolved_stroke()
        if stroke is not None and stroke[3] > 0:
            self._draw_line(np.append(xs, xs[0]), np.append(ys, ys[0]), stroke, style.stroke_width)

    def measure_text(self, content: str, font: FontSpec) -> tuple[int, int]:
        return self.fonts.measure(content, font)

    def draw_text(self, pos: Point2D, content: str, font: FontSpec, color: RGBA) -> None:
        self._require_session()
        xs, ys = _coerce_points([pos], min_count=1, label="text")
        if not content:
            return
        mask = self.fonts.render_mask(content, font)
        self._blend_mask(int(np.rint(xs[0])), int(np.rint(ys[0])), mask, color)

    @abstractmethod
    def snapshot(self) -> np.ndarray:
        """Copy of the committed surface as (H, W, 4) uint8 RGBA."""
        raise NotImplementedError

    @abstractmethod
    def _begin(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _abort(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def _fill(self, color: RGBA) -> None:
        raise NotImplementedError

    @abstractmethod
    def _draw_pixel(self, x: int, y: int, color: RGBA) -> None:
        raise NotImplementedError

    @abstractmethod
    def _draw_line(self, xs: np.ndarray, ys: np.ndarray, color: RGBA, width: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def _fill_polygon(self, xs: np.ndarray, ys: np.ndarray, color: RGBA) -> None:
        raise NotImplementedError

    @abstractmethod
    def _blend_mask(self, x: int, y: int, mask: np.ndarray, color: RGBA) -> None:
        raise NotImplementedError

    def _require_session(self) -> None:
        if not self._session_active:
            raise RuntimeError("drawing requires an active backend session")


def _coerce_points(points: Sequence[Point2D], *, min_count: int, label: str) -> tuple[np.ndarray, np.ndarray]:
    try:
        arr = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise SeriesDrawError(f"{label} points are not numeric") from exc
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise SeriesDrawError(f"{label} points must be (x, y) pairs, got shape {arr.shape}")
    if arr.shape[0] < min_count:
        raise SeriesDrawError(f"{label} needs at least {min_count} point(s), got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise SeriesDrawError(f"{label} contains non-finite coordinates")
    return arr[:, 0], arr[:, 1]
