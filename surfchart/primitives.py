from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from surfchart.fonts import FontSpec
from surfchart.style import RGBA, Style


Point2D: TypeAlias = tuple[float, float]
Point3D: TypeAlias = tuple[float, float, float]


@dataclass(frozen=True)
class Pixel:
    pos: Point2D
    color: RGBA


@dataclass(frozen=True)
class Line:
    points: tuple[Point2D, ...]
    style: Style


@dataclass(frozen=True)
class Polygon:
    vertices: tuple[Point2D, ...]
    style: Style


@dataclass(frozen=True)
class Text:
    pos: Point2D
    content: str
    font: FontSpec
    color: RGBA


Primitive: TypeAlias = Pixel | Line | Polygon | Text
