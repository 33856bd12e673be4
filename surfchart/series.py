from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
import logging

import numpy as np

from surfchart.legend import Swatch, SwatchKind
from surfchart.primitives import Line, Point2D, Point3D, Polygon
from surfchart.projection import ProjectionMatrix
from surfchart.scales import AxisRange
from surfchart.style import BLACK, Style


LOGGER = logging.getLogger(__name__)

SurfaceFn = Callable[[float, float], float]


@dataclass(frozen=True)
class Quad:
    vertices: tuple[Point2D, Point2D, Point2D, Point2D]
    depth: float
    style: Style
    series_index: int = 0

    def to_primitive(self) -> Polygon:
        return Polygon(vertices=self.vertices, style=self.style)


@dataclass(frozen=True)
class SeriesMesh:
    quads: tuple[Quad, ...]
    style: Style


@dataclass
class SurfaceSeries:
    """Surface ``y = fn(x, z)`` sampled on the grid ``xs`` x ``zs``."""

    xs: np.ndarray
    zs: np.ndarray
    fn: SurfaceFn
    style: Style = field(default_factory=lambda: Style.fill(BLACK, alpha=0.2))
    label: str | None = None
    swatch: Swatch | None = None
    _grid: np.ndarray | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.xs = _coerce_samples(self.xs, label="xs")
        self.zs = _coerce_samples(self.zs, label="zs")

    @classmethod
    def xoz(
        cls,
        xs: Iterable[float],
        zs: Iterable[float],
        fn: SurfaceFn,
        style: Style | None = None,
        *,
        label: str | None = None,
        swatch: Swatch | None = None,
    ) -> "SurfaceSeries":
        return cls(
            xs=np.fromiter(xs, dtype=np.float64),
            zs=np.fromiter(zs, dtype=np.float64),
            fn=fn,
            style=style if style is not None else Style.fill(BLACK, alpha=0.2),
            label=label,
            swatch=swatch,
        )

    @classmethod
    def over(cls, x: AxisRange, z: AxisRange, fn: SurfaceFn, style: Style | None = None, **kwargs) -> "SurfaceSeries":
        return cls.xoz(x.samples(), z.samples(), fn, style, **kwargs)

    def sample(self) -> np.ndarray:
        """Heights as a (len(zs), len(xs)) grid; non-finite results become NaN."""
        if self._grid is None:
            grid = np.empty((self.zs.size, self.xs.size), dtype=np.float64)
            for j, z in enumerate(self.zs.tolist()):
                for i, x in enumerate(self.xs.tolist()):
                    grid[j, i] = float(self.fn(x, z))
            grid[~np.isfinite(grid)] = np.nan
            self._grid = grid
        return self._grid

    def points(self) -> np.ndarray:
        grid = self.sample()
        xg, zg = np.meshgrid(self.xs, self.zs)
        pts = np.stack([xg, grid, zg], axis=-1).reshape(-1, 3)
        return pts[np.isfinite(pts[:, 1])]

    def legend_swatch(self) -> Swatch:
        if self.swatch is not None:
            return self.swatch
        return Swatch(kind=SwatchKind.FILLED_RECT, style=Style.fill(self.style.legend_color(), alpha=0.5))


@dataclass
class LineSeries:
    """Ordered 3-D points joined into a single stroke."""

    points: np.ndarray
    style: Style = field(default_factory=lambda: Style.stroke(BLACK))
    label: str | None = None
    swatch: Swatch | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.points, np.ndarray):
            self.points = np.asarray(list(self.points), dtype=np.float64)
        arr = np.asarray(self.points, dtype=np.float64)
        if arr.size == 0:
            arr = arr.reshape(0, 3)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError(f"line points must be (x, y, z) triples, got shape {arr.shape}")
        self.points = arr

    @classmethod
    def new(
        cls,
        points: Iterable[Point3D],
        style: Style | None = None,
        *,
        label: str | None = None,
        swatch: Swatch | None = None,
    ) -> "LineSeries":
        return cls(
            points=np.asarray(list(points), dtype=np.float64),
            style=style if style is not None else Style.stroke(BLACK),
            label=label,
            swatch=swatch,
        )

    def finite_points(self) -> np.ndarray:
        return self.points[np.all(np.isfinite(self.points), axis=1)]

    def legend_swatch(self) -> Swatch:
        if self.swatch is not None:
            return self.swatch
        color = self.style.stroke_color if self.style.stroke_color is not None else self.style.legend_color()
        return Swatch(kind=SwatchKind.STROKE_PATH, style=Style.stroke(color, width=self.style.stroke_width))


Series = SurfaceSeries | LineSeries


def series_points(series: Series) -> np.ndarray:
    if isinstance(series, SurfaceSeries):
        return series.points()
    return series.finite_points()


def build_mesh(series: SurfaceSeries, matrix: ProjectionMatrix, index: int = 0) -> SeriesMesh:
    grid = series.sample()
    nz, nx = grid.shape
    if nz < 2 or nx < 2:
        return SeriesMesh(quads=(), style=series.style)
    xg, zg = np.meshgrid(series.xs, series.zs)
    pts = np.stack([xg, grid, zg], axis=-1).reshape(-1, 3)
    screen = matrix.project_many(pts).reshape(nz, nx, 2)
    depth = matrix.depth_many(pts).reshape(nz, nx)

    # Corners walk each cell boundary in order so every quad stays a simple polygon.
    corner_depth = np.stack([depth[:-1, :-1], depth[:-1, 1:], depth[1:, 1:], depth[1:, :-1]])
    cell_depth = corner_depth.mean(axis=0)
    valid = np.all(np.isfinite(corner_depth), axis=0)

    quads: list[Quad] = []
    for j in range(nz - 1):
        for i in range(nx - 1):
            if not valid[j, i]:
                continue
            quads.append(
                Quad(
                    vertices=(
                        _pt(screen[j, i]),
                        _pt(screen[j, i + 1]),
                        _pt(screen[j + 1, i + 1]),
                        _pt(screen[j + 1, i]),
                    ),
                    depth=float(cell_depth[j, i]),
                    style=series.style,
                    series_index=index,
                )
            )
    skipped = (nz - 1) * (nx - 1) - len(quads)
    if skipped:
        LOGGER.debug("surface series %d: skipped %d cells with non-finite corners", index, skipped)
    return SeriesMesh(quads=tuple(quads), style=series.style)


def sort_quads(quads: Iterable[Quad]) -> list[Quad]:
    """Farthest first; ties keep their input order."""
    return sorted(quads, key=lambda quad: -quad.depth)


def build_line(series: LineSeries, matrix: ProjectionMatrix) -> Line | None:
    pts = series.finite_points()
    if pts.shape[0] == 0:
        return None
    screen = matrix.project_many(pts)
    return Line(points=tuple(_pt(p) for p in screen), style=series.style)


def _pt(p: np.ndarray) -> Point2D:
    return (float(p[0]), float(p[1]))


def _coerce_samples(values: Sequence[float] | np.ndarray, *, label: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.size == 0:
        raise ValueError(f"{label} must contain at least one sample")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{label} must be finite")
    return arr
