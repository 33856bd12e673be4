from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
import tomllib
from typing import Any

from surfchart import samplers
from surfchart.axes import AxisStyle
from surfchart.errors import ConfigError
from surfchart.fonts import DEFAULT_FONT_FAMILY, FontSpec
from surfchart.legend import LegendStyle, SeriesLabelPosition
from surfchart.projection import Camera
from surfchart.scales import AxisRange
from surfchart.series import LineSeries, Series, SurfaceSeries
from surfchart.style import BLACK, BLUE, RGBA, WHITE, Style, parse_color


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisRanges:
    x: AxisRange = field(default_factory=lambda: AxisRange(-3.0, 3.0, 0.1))
    z: AxisRange = field(default_factory=lambda: AxisRange(-3.0, 3.0, 0.1))
    y: AxisRange | None = None


@dataclass
class ChartConfig:
    width: int = 800
    height: int = 600
    caption: str = ""
    caption_font: FontSpec = field(default_factory=lambda: FontSpec(size_px=20.0))
    caption_color: RGBA = BLACK
    background: RGBA = WHITE
    axis_ranges: AxisRanges = field(default_factory=AxisRanges)
    camera: Camera = field(default_factory=Camera)
    max_light_lines: int = 3
    axis_style: AxisStyle = field(default_factory=AxisStyle)
    legend_style: LegendStyle = field(default_factory=LegendStyle)
    show_legend: bool = True
    margin: int = 10
    series: list[Series] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_light_lines < 0:
            raise ValueError("max_light_lines must be >= 0")
        if self.margin < 0:
            raise ValueError("margin must be >= 0")

    def add_series(self, series: Series) -> Series:
        self.series.append(series)
        return series

    def resolved_axis_style(self) -> AxisStyle:
        return replace(self.axis_style, max_light_lines=self.max_light_lines)


def demo_config() -> ChartConfig:
    """The 3-D surface + helix scene: ripple surface, helix line, bordered legend."""
    config = ChartConfig(
        width=800,
        height=600,
        caption="3D Plot Test",
        caption_font=FontSpec("sans", 20.0),
        axis_ranges=AxisRanges(
            x=AxisRange(-3.0, 3.0, 0.1),
            z=AxisRange(-3.0, 3.0, 0.1),
            y=AxisRange(-3.0, 3.0),
        ),
        camera=Camera(yaw=0.5, scale=0.9),
        max_light_lines=3,
        legend_style=LegendStyle(border=BLACK),
    )
    config.add_series(
        SurfaceSeries.xoz(
            (f / 10.0 for f in range(-30, 30)),
            (f / 10.0 for f in range(-30, 30)),
            samplers.ripple,
            Style.fill(BLUE, alpha=0.2),
            label="Surface",
        )
    )
    config.add_series(LineSeries(points=samplers.helix(200), style=Style.stroke(BLACK), label="Line"))
    return config


def load_chart_config(path: str | Path) -> ChartConfig:
    path = Path(path)
    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read chart config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    LOGGER.debug("loaded chart config from %s", path)
    return chart_config_from_dict(raw)


def chart_config_from_dict(raw: dict[str, Any]) -> ChartConfig:
    try:
        return _build_config(raw)
    except ConfigError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"invalid chart config: {exc}") from exc


def _build_config(raw: dict[str, Any]) -> ChartConfig:
    chart = _table(raw, "chart")
    family = str(chart.get("font_family", DEFAULT_FONT_FAMILY))
    axes = _table(raw, "axes")
    camera = _table(raw, "camera")
    legend = _table(raw, "legend")
    grid = _table(raw, "grid")

    axis_style = AxisStyle(
        light_grid=parse_color(grid.get("light_color", "#00000026")),
        bold_grid=parse_color(grid.get("bold_color", "#00000066")),
        axis_line=parse_color(grid.get("axis_color", "#000000")),
        label_font=FontSpec(family, float(grid.get("label_size", 11.0))),
        tick_labels=bool(grid.get("tick_labels", True)),
        titles=tuple(grid["titles"]) if "titles" in grid else None,  # type: ignore[arg-type]
    )
    position_px = legend.get("position_px")
    legend_style = LegendStyle(
        border=_optional_color(legend, "border", BLACK),
        background=_optional_color(legend, "background", (255, 255, 255, 204)),
        label_font=FontSpec(family, float(legend.get("label_size", 13.0))),
        position=SeriesLabelPosition(legend.get("position", SeriesLabelPosition.UPPER_RIGHT.value)),
        position_px=(int(position_px[0]), int(position_px[1])) if position_px is not None else None,
    )
    config = ChartConfig(
        width=int(chart.get("width", 800)),
        height=int(chart.get("height", 600)),
        caption=str(chart.get("caption", "")),
        caption_font=FontSpec(family, float(chart.get("caption_size", 20.0))),
        background=parse_color(chart.get("background", "#ffffff")),
        axis_ranges=AxisRanges(
            x=_axis_range(axes, "x", default=AxisRange(-3.0, 3.0, 0.1)),
            z=_axis_range(axes, "z", default=AxisRange(-3.0, 3.0, 0.1)),
            y=_axis_range(axes, "y", default=None),
        ),
        camera=Camera(
            yaw=float(camera.get("yaw", 0.5)),
            pitch=float(camera.get("pitch", 0.15)),
            scale=float(camera.get("scale", 1.0)),
        ),
        max_light_lines=int(chart.get("max_light_lines", 3)),
        axis_style=axis_style,
        legend_style=legend_style,
        show_legend=bool(legend.get("show", True)),
    )
    for item in raw.get("series", []):
        config.add_series(_series(item, config.axis_ranges))
    return config


def _series(item: dict[str, Any], ranges: AxisRanges) -> Series:
    kind = item.get("kind")
    color = parse_color(item.get("color", "#000000"))
    alpha = float(item.get("alpha", 1.0))
    label = item.get("label")
    if kind == "surface":
        if bool(item.get("filled", True)):
            style = Style(
                fill_color=color,
                stroke_color=parse_color(item["stroke"]) if "stroke" in item else None,
                alpha=alpha,
                filled=True,
            )
        else:
            style = Style.stroke(color, alpha=alpha)
        return SurfaceSeries.over(ranges.x, ranges.z, samplers.surface(str(item["function"])), style, label=label)
    if kind == "line":
        points = samplers.curve(str(item["curve"]), int(item.get("samples", 200)))
        style = Style.stroke(color, width=int(item.get("width", 1)), alpha=alpha)
        return LineSeries(points=points, style=style, label=label)
    raise ConfigError(f"series kind must be 'surface' or 'line', got {kind!r}")


def _axis_range(axes: dict[str, Any], name: str, *, default: AxisRange | None) -> AxisRange | None:
    table = axes.get(name)
    if table is None:
        return default
    step = table.get("step")
    return AxisRange(float(table["min"]), float(table["max"]), float(step) if step is not None else None)


def _optional_color(table: dict[str, Any], key: str, default: RGBA) -> RGBA | None:
    if key not in table:
        return default
    value = table[key]
    if value in ("", "none", False):
        return None
    return parse_color(value)


def _table(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{key}] must be a table")
    return value
