from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging

import numpy as np

from surfchart.axes import AxisRenderer, AxisReport
from surfchart.config import ChartConfig
from surfchart.legend import LegendEntry, LegendLayout, LegendRenderer
from surfchart.projection import DataBounds, ProjectionMatrix, Projector, Viewport
from surfchart.raster.base import DrawingBackend
from surfchart.raster.software import SoftwareBackend
from surfchart.series import LineSeries, SurfaceSeries, build_line, build_mesh, series_points, sort_quads


LOGGER = logging.getLogger(__name__)

DEFAULT_Y_LIMITS = (-1.0, 1.0)


class RenderState(Enum):
    CONFIGURING = "configuring"
    PROJECTING = "projecting"
    DRAWING_AXES = "drawing_axes"
    DRAWING_SERIES = "drawing_series"
    DRAWING_LEGEND = "drawing_legend"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderResult:
    states: tuple[RenderState, ...]
    matrix: ProjectionMatrix
    viewport: Viewport
    axis_report: AxisReport
    legend_layout: LegendLayout | None
    quads_drawn: int
    lines_drawn: int


class ChartCompositor:
    """Runs one all-or-nothing render pass of a :class:`ChartConfig`.

    The pass walks ``CONFIGURING -> PROJECTING -> DRAWING_AXES ->
    DRAWING_SERIES -> DRAWING_LEGEND -> DONE``. The first failure moves
    the compositor to ``FAILED``, the backend session discards everything
    staged so far, and the exception is re-raised unchanged.
    """

    def __init__(self, config: ChartConfig) -> None:
        self.config = config
        self.projector = Projector()
        self.axis_renderer = AxisRenderer(config.resolved_axis_style())
        self.state = RenderState.CONFIGURING
        self.state_history: list[RenderState] = []

    def render(self, backend: DrawingBackend) -> RenderResult:
        self.state_history = []
        self._transition(RenderState.CONFIGURING)
        try:
            with backend.session():
                result = self._run(backend)
        except Exception as exc:
            failed_in = self.state
            self._transition(RenderState.FAILED)
            LOGGER.error("render pass failed during %s: %s", failed_in.value, exc)
            raise
        self._transition(RenderState.DONE)
        return replace(result, states=tuple(self.state_history))

    def data_bounds(self) -> DataBounds:
        cfg = self.config
        ranges = cfg.axis_ranges
        chunks = [series_points(series) for series in cfg.series]
        chunks = [chunk for chunk in chunks if chunk.size]
        if ranges.y is not None:
            y_limits = ranges.y.as_limits()
        elif chunks:
            ys = np.concatenate([chunk[:, 1] for chunk in chunks])
            y_limits = _padded(float(ys.min()), float(ys.max()))
        else:
            y_limits = DEFAULT_Y_LIMITS
        bounds = DataBounds(x=ranges.x.as_limits(), y=y_limits, z=ranges.z.as_limits())
        if chunks:
            data = DataBounds.enclosing(np.concatenate(chunks))
            grown = bounds.union(data)
            if grown != bounds:
                LOGGER.debug("axis bounds grown from %s to %s to enclose series data", bounds, grown)
            bounds = grown
        return bounds

    def _run(self, backend: DrawingBackend) -> RenderResult:
        cfg = self.config
        backend.fill(cfg.background)
        viewport = self._draw_caption(backend)
        bounds = self.data_bounds()
        legend = LegendRenderer(cfg.legend_style)
        for series in cfg.series:
            if series.label:
                legend.register(LegendEntry(label=series.label, swatch=series.legend_swatch()))

        self._transition(RenderState.PROJECTING)
        matrix = self.projector.configure(cfg.camera, bounds, viewport)

        self._transition(RenderState.DRAWING_AXES)
        axis_report = self.axis_renderer.draw(backend, matrix)

        self._transition(RenderState.DRAWING_SERIES)
        quads = []
        for index, series in enumerate(cfg.series):
            if isinstance(series, SurfaceSeries):
                quads.extend(build_mesh(series, matrix, index).quads)
        for quad in sort_quads(quads):
            backend.draw(quad.to_primitive())
        lines_drawn = 0
        for series in cfg.series:
            if not isinstance(series, LineSeries):
                continue
            line = build_line(series, matrix)
            if line is None:
                continue
            backend.draw(line)
            lines_drawn += 1

        self._transition(RenderState.DRAWING_LEGEND)
        layout = None
        if cfg.show_legend:
            layout = legend.draw(backend, (viewport.x, viewport.y, viewport.width, viewport.height))

        LOGGER.debug("render pass drew %d quads and %d lines", len(quads), lines_drawn)
        return RenderResult(
            states=(),
            matrix=matrix,
            viewport=viewport,
            axis_report=axis_report,
            legend_layout=layout,
            quads_drawn=len(quads),
            lines_drawn=lines_drawn,
        )

    def _draw_caption(self, backend: DrawingBackend) -> Viewport:
        cfg = self.config
        top = cfg.margin
        if cfg.caption:
            w, h = backend.measure_text(cfg.caption, cfg.caption_font)
            backend.draw_text(((backend.width - w) // 2, top), cfg.caption, cfg.caption_font, cfg.caption_color)
            top += h + cfg.margin
        return Viewport(
            x=cfg.margin,
            y=top,
            width=max(1, backend.width - 2 * cfg.margin),
            height=max(1, backend.height - top - cfg.margin),
        )

    def _transition(self, state: RenderState) -> None:
        self.state = state
        self.state_history.append(state)
        LOGGER.debug("render state -> %s", state.value)


def render_chart(config: ChartConfig, backend: DrawingBackend | None = None) -> np.ndarray:
    if backend is None:
        backend = SoftwareBackend(config.width, config.height, background=config.background)
    ChartCompositor(config).render(backend)
    return backend.snapshot()


def _padded(ymin: float, ymax: float, ratio: float = 0.05) -> tuple[float, float]:
    if ymin == ymax:
        delta = max(1.0, abs(ymin) * ratio)
        return (ymin - delta, ymax + delta)
    return (ymin, ymax)
