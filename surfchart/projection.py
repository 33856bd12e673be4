from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging
import math

import numpy as np

from surfchart.errors import DegenerateBoundsError
from surfchart.primitives import Point2D, Point3D


LOGGER = logging.getLogger(__name__)

# Half the diagonal of the unit cube; at scale 1 the rotated cube fits the viewport.
_UNIT_CUBE_FIT = 1.0 / math.sqrt(3.0)


@dataclass(frozen=True)
class Camera:
    yaw: float = 0.5
    pitch: float = 0.15
    scale: float = 1.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.yaw) and math.isfinite(self.pitch)):
            raise ValueError("camera yaw/pitch must be finite")
        if not (math.isfinite(self.scale) and self.scale > 0):
            raise ValueError("camera scale must be > 0")


@dataclass(frozen=True)
class DataBounds:
    x: tuple[float, float]
    y: tuple[float, float]
    z: tuple[float, float]

    def axes(self) -> tuple[tuple[float, float], tuple[float, float], tuple[float, float]]:
        return (self.x, self.y, self.z)

    def center(self) -> Point3D:
        return tuple((lo + hi) * 0.5 for lo, hi in self.axes())  # type: ignore[return-value]

    def corners(self) -> list[Point3D]:
        return [(x, y, z) for x in self.x for y in self.y for z in self.z]

    def union(self, other: "DataBounds") -> "DataBounds":
        return DataBounds(
            x=(min(self.x[0], other.x[0]), max(self.x[1], other.x[1])),
            y=(min(self.y[0], other.y[0]), max(self.y[1], other.y[1])),
            z=(min(self.z[0], other.z[0]), max(self.z[1], other.z[1])),
        )

    @classmethod
    def enclosing(cls, points: Iterable[Point3D] | np.ndarray) -> "DataBounds":
        arr = np.asarray(points if isinstance(points, np.ndarray) else list(points), dtype=np.float64).reshape(-1, 3)
        finite = arr[np.all(np.isfinite(arr), axis=1)]
        if finite.size == 0:
            raise DegenerateBoundsError("no finite points to bound")
        lo = finite.min(axis=0)
        hi = finite.max(axis=0)
        return cls(x=(float(lo[0]), float(hi[0])), y=(float(lo[1]), float(hi[1])), z=(float(lo[2]), float(hi[2])))


@dataclass(frozen=True)
class Viewport:
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("viewport width/height must be > 0")

    def center(self) -> Point2D:
        return (self.x + (self.width - 1) / 2.0, self.y + (self.height - 1) / 2.0)


@dataclass(frozen=True)
class ProjectionMatrix:
    """Orthographic data-space to pixel-space transform.

    ``camera = linear @ ((p - offset) * inv_extent)``; pixels are
    ``(origin_x + camera.x, origin_y - camera.y)`` and ``camera.z`` is the
    depth (larger is farther from the viewer).
    """

    linear: np.ndarray
    offset: np.ndarray
    inv_extent: np.ndarray
    origin: Point2D
    camera: Camera = field(default_factory=Camera)
    bounds: DataBounds | None = None

    def to_camera(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        unit = (pts - self.offset) * self.inv_extent
        return unit @ self.linear.T

    def project_many(self, points: np.ndarray) -> np.ndarray:
        cam = self.to_camera(points)
        out = np.empty((cam.shape[0], 2), dtype=np.float64)
        out[:, 0] = self.origin[0] + cam[:, 0]
        out[:, 1] = self.origin[1] - cam[:, 1]
        return out

    def depth_many(self, points: np.ndarray) -> np.ndarray:
        return self.to_camera(points)[:, 2]

    def project(self, p: Point3D) -> Point2D:
        px = self.project_many(np.asarray([p], dtype=np.float64))[0]
        return (float(px[0]), float(px[1]))

    def depth(self, p: Point3D) -> float:
        return float(self.depth_many(np.asarray([p], dtype=np.float64))[0])


def configure(camera: Camera, bounds: DataBounds, viewport: Viewport) -> ProjectionMatrix:
    offset = np.empty(3, dtype=np.float64)
    inv_extent = np.empty(3, dtype=np.float64)
    for i, (name, (lo, hi)) in enumerate(zip("xyz", bounds.axes(), strict=True)):
        extent = hi - lo
        if not (math.isfinite(lo) and math.isfinite(hi)) or extent == 0:
            raise DegenerateBoundsError(f"{name} axis has zero extent: {lo}..{hi}")
        offset[i] = (lo + hi) * 0.5
        inv_extent[i] = 1.0 / extent

    cy, sy = math.cos(camera.yaw), math.sin(camera.yaw)
    cp, sp = math.cos(camera.pitch), math.sin(camera.pitch)
    yaw = np.asarray([[cy, 0.0, -sy], [0.0, 1.0, 0.0], [sy, 0.0, cy]], dtype=np.float64)
    # Positive pitch looks down on the scene: far points rise, high points come closer.
    pitch = np.asarray([[1.0, 0.0, 0.0], [0.0, cp, sp], [0.0, -sp, cp]], dtype=np.float64)
    fit = min(viewport.width, viewport.height) * _UNIT_CUBE_FIT
    linear = (camera.scale * fit) * (pitch @ yaw)
    linear.setflags(write=False)
    offset.setflags(write=False)
    inv_extent.setflags(write=False)
    LOGGER.debug("projection configured: camera=%s bounds=%s viewport=%s", camera, bounds, viewport)
    return ProjectionMatrix(
        linear=linear,
        offset=offset,
        inv_extent=inv_extent,
        origin=viewport.center(),
        camera=camera,
        bounds=bounds,
    )


class Projector:
    """Holds the current projection; every reconfigure builds a new matrix."""

    def __init__(self) -> None:
        self._matrix: ProjectionMatrix | None = None

    @property
    def matrix(self) -> ProjectionMatrix:
        if self._matrix is None:
            raise RuntimeError("projector is not configured")
        return self._matrix

    def configure(self, camera: Camera, bounds: DataBounds, viewport: Viewport) -> ProjectionMatrix:
        self._matrix = configure(camera, bounds, viewport)
        return self._matrix

    def project(self, p: Point3D) -> Point2D:
        return self.matrix.project(p)

    def depth(self, p: Point3D) -> float:
        return self.matrix.depth(p)
