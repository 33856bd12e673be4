from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math

import numpy as np

from surfchart.errors import TextMeasureError
from surfchart.fonts import FontSpec
from surfchart.primitives import Point2D, Point3D
from surfchart.projection import DataBounds, ProjectionMatrix
from surfchart.raster.base import DrawingBackend
from surfchart.scales import format_ticks_for_axis, generate_nice_ticks, ticks_within_range
from surfchart.style import BLACK, RGBA, Style, blend


LOGGER = logging.getLogger(__name__)

AXIS_NAMES = ("x", "y", "z")


@dataclass(frozen=True)
class AxisStyle:
    light_grid: RGBA = blend(BLACK, 0.15)
    bold_grid: RGBA = blend(BLACK, 0.4)
    axis_line: RGBA = BLACK
    label_color: RGBA = BLACK
    label_font: FontSpec = field(default_factory=lambda: FontSpec(size_px=11.0))
    max_light_lines: int = 3
    bold_lines_target: int = 5
    min_light_spacing_px: float = 4.0
    tick_labels: bool = True
    titles: tuple[str, str, str] | None = None
    label_offset_px: float = 8.0

    def __post_init__(self) -> None:
        if self.max_light_lines < 0:
            raise ValueError("max_light_lines must be >= 0")
        if self.bold_lines_target <= 0:
            raise ValueError("bold_lines_target must be > 0")
        if self.titles is not None:
            if len(self.titles) != 3 or not all(isinstance(t, str) for t in self.titles):
                raise ValueError(f"titles must be three strings (x, y, z), got {self.titles!r}")


@dataclass(frozen=True)
class AxisReport:
    lines_drawn: int = 0
    labels_drawn: int = 0
    errors: tuple[TextMeasureError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class AxisRenderer:
    """Grid panes, tick labels and axis titles for a projected bounding box.

    Each axis pair gets the pane that lies farthest from the viewer. Bold
    lines sit at rounded tick values; between neighbouring bold lines at
    most ``max_light_lines`` light lines are drawn, fewer when they would
    be packed closer than ``min_light_spacing_px``.
    """

    def __init__(self, style: AxisStyle | None = None) -> None:
        self.style = style if style is not None else AxisStyle()

    def grid_values(self, lo: float, hi: float, pixel_span: float) -> tuple[np.ndarray, np.ndarray]:
        st = self.style
        bold = ticks_within_range(generate_nice_ticks(lo, hi, st.bold_lines_target), vmin=lo, vmax=hi)
        if bold.size < 2:
            return bold, np.asarray([], dtype=np.float64)
        step = float(bold[1] - bold[0])
        gap_px = pixel_span * step / (hi - lo)
        fit = int(math.floor(gap_px / st.min_light_spacing_px)) - 1 if st.min_light_spacing_px > 0 else st.max_light_lines
        n_light = max(0, min(st.max_light_lines, fit))
        if n_light == 0:
            return bold, np.asarray([], dtype=np.float64)
        # Extend one step past each end so ranges that do not start on a bold tick are covered.
        starts = np.concatenate([[bold[0] - step], bold])
        frac = np.arange(1, n_light + 1, dtype=np.float64) / (n_light + 1)
        light = (starts[:, None] + frac[None, :] * step).reshape(-1)
        return bold, ticks_within_range(light, vmin=lo, vmax=hi)

    def draw(self, backend: DrawingBackend, matrix: ProjectionMatrix) -> AxisReport:
        if matrix.bounds is None:
            raise ValueError("projection matrix carries no data bounds")
        bounds = matrix.bounds
        st = self.style
        back = _back_sides(bounds, matrix)
        axes = bounds.axes()

        light_lines: list[tuple[Point3D, Point3D]] = []
        bold_lines: list[tuple[Point3D, Point3D]] = []
        bold_values: list[np.ndarray] = []
        for a in range(3):
            lo, hi = axes[a]
            span = _pixel_length(matrix, _axis_edge(bounds, a, back))
            bold, light = self.grid_values(lo, hi, span)
            bold_values.append(bold)
            for b in range(3):
                if b == a:
                    continue
                c = 3 - a - b
                for value in light.tolist():
                    light_lines.append(_pane_segment(a, value, b, back[b], c, axes[c]))
                for value in bold.tolist():
                    bold_lines.append(_pane_segment(a, value, b, back[b], c, axes[c]))

        drawn = 0
        for segments, color in ((light_lines, st.light_grid), (bold_lines, st.bold_grid)):
            style = Style.stroke(color)
            for p0, p1 in segments:
                backend.draw_line([matrix.project(p0), matrix.project(p1)], style)
                drawn += 1

        frame = Style.stroke(st.axis_line)
        for b in range(3):
            outline = _pane_outline(bounds, b, back[b])
            backend.draw_line([matrix.project(p) for p in outline], frame)
            drawn += 1

        labels = 0
        errors: list[TextMeasureError] = []
        center = matrix.project(bounds.center())
        for a in range(3):
            edge = _label_edge(bounds, matrix, a)
            texts: list[tuple[Point3D, str]] = []
            if st.tick_labels:
                texts.extend(zip(_on_edge(edge, a, bold_values[a]), format_ticks_for_axis(bold_values[a]), strict=True))
            if st.titles is not None and st.titles[a]:
                texts.append((_beyond(edge, a, bounds), st.titles[a]))
            for point, text in texts:
                try:
                    self._draw_label(backend, matrix.project(point), center, text)
                except TextMeasureError as exc:
                    LOGGER.warning("axis %s label %r skipped: %s", AXIS_NAMES[a], text, exc)
                    errors.append(exc)
                    continue
                labels += 1

        LOGGER.debug("axes drawn: %d lines, %d labels, %d label errors", drawn, labels, len(errors))
        return AxisReport(lines_drawn=drawn, labels_drawn=labels, errors=tuple(errors))

    def _draw_label(self, backend: DrawingBackend, anchor: Point2D, center: Point2D, text: str) -> None:
        st = self.style
        w, h = backend.measure_text(text, st.label_font)
        dx = anchor[0] - center[0]
        dy = anchor[1] - center[1]
        norm = math.hypot(dx, dy) or 1.0
        ux, uy = dx / norm, dy / norm
        ax = anchor[0] + ux * st.label_offset_px
        ay = anchor[1] + uy * st.label_offset_px
        # Push the text box outward so it never straddles the anchor on the box side.
        tx = ax - w / 2.0 + ux * w / 2.0
        ty = ay - h / 2.0 + uy * h / 2.0
        backend.draw_text((tx, ty), text, st.label_font, st.label_color)


def _with(a: int, av: float, b: int, bv: float, c: int, cv: float) -> Point3D:
    p = [0.0, 0.0, 0.0]
    p[a] = av
    p[b] = bv
    p[c] = cv
    return (p[0], p[1], p[2])


def _back_sides(bounds: DataBounds, matrix: ProjectionMatrix) -> tuple[float, float, float]:
    center = list(bounds.center())
    out: list[float] = []
    for axis, (lo, hi) in enumerate(bounds.axes()):
        lo_face = list(center)
        hi_face = list(center)
        lo_face[axis] = lo
        hi_face[axis] = hi
        farther_lo = matrix.depth(tuple(lo_face)) >= matrix.depth(tuple(hi_face))  # type: ignore[arg-type]
        out.append(lo if farther_lo else hi)
    return (out[0], out[1], out[2])


def _pane_segment(a: int, value: float, b: int, b_value: float, c: int, c_range: tuple[float, float]) -> tuple[Point3D, Point3D]:
    return (_with(a, value, b, b_value, c, c_range[0]), _with(a, value, b, b_value, c, c_range[1]))


def _pane_outline(bounds: DataBounds, b: int, b_value: float) -> list[Point3D]:
    a, c = [i for i in range(3) if i != b]
    (alo, ahi), (clo, chi) = bounds.axes()[a], bounds.axes()[c]
    corners = [(alo, clo), (ahi, clo), (ahi, chi), (alo, chi), (alo, clo)]
    return [_with(a, av, b, b_value, c, cv) for av, cv in corners]


def _axis_edge(bounds: DataBounds, a: int, back: tuple[float, float, float]) -> tuple[Point3D, Point3D]:
    b, c = [i for i in range(3) if i != a]
    lo, hi = bounds.axes()[a]
    return (_with(a, lo, b, back[b], c, back[c]), _with(a, hi, b, back[b], c, back[c]))


def _label_edge(bounds: DataBounds, matrix: ProjectionMatrix, a: int) -> tuple[Point3D, Point3D]:
    """Edge parallel to axis ``a`` used for its labels.

    Horizontal axes label the lowest edge on screen; the vertical axis
    labels the leftmost one.
    """
    b, c = [i for i in range(3) if i != a]
    lo, hi = bounds.axes()[a]
    best: tuple[Point3D, Point3D] | None = None
    best_score = -math.inf
    for bv in bounds.axes()[b]:
        for cv in bounds.axes()[c]:
            p0 = _with(a, lo, b, bv, c, cv)
            p1 = _with(a, hi, b, bv, c, cv)
            s0, s1 = matrix.project(p0), matrix.project(p1)
            mid_x = (s0[0] + s1[0]) * 0.5
            mid_y = (s0[1] + s1[1]) * 0.5
            score = -mid_x if a == 1 else mid_y
            if score > best_score:
                best_score = score
                best = (p0, p1)
    assert best is not None
    return best


def _on_edge(edge: tuple[Point3D, Point3D], a: int, values: np.ndarray) -> list[Point3D]:
    p0 = edge[0]
    out: list[Point3D] = []
    for v in values.tolist():
        p = list(p0)
        p[a] = v
        out.append((p[0], p[1], p[2]))
    return out


def _beyond(edge: tuple[Point3D, Point3D], a: int, bounds: DataBounds) -> Point3D:
    lo, hi = bounds.axes()[a]
    p = list(edge[1])
    p[a] = hi + (hi - lo) * 0.08
    return (p[0], p[1], p[2])


def _pixel_length(matrix: ProjectionMatrix, edge: tuple[Point3D, Point3D]) -> float:
    s0 = matrix.project(edge[0])
    s1 = matrix.project(edge[1])
    return math.hypot(s1[0] - s0[0], s1[1] - s0[1])
