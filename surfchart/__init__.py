from surfchart.axes import AxisRenderer, AxisReport, AxisStyle
from surfchart.chart import ChartCompositor, RenderResult, RenderState, render_chart
from surfchart.config import AxisRanges, ChartConfig, demo_config, load_chart_config
from surfchart.encode import encode_png, write_png
from surfchart.errors import (
    ChartError,
    ConfigError,
    DegenerateBoundsError,
    EncodingError,
    SeriesDrawError,
    SurfaceInitError,
    TextMeasureError,
)
from surfchart.fonts import FontService, FontSpec
from surfchart.legend import LegendEntry, LegendRenderer, LegendStyle, SeriesLabelPosition, Swatch, SwatchKind
from surfchart.projection import Camera, DataBounds, ProjectionMatrix, Projector, Viewport
from surfchart.raster import DrawingBackend, SoftwareBackend, TensorBackend
from surfchart.scales import AxisRange, sample_axis
from surfchart.series import LineSeries, Quad, SeriesMesh, SurfaceSeries, build_line, build_mesh, sort_quads
from surfchart.style import BLACK, BLUE, WHITE, Style, blend, mix

__all__ = [
    "AxisRange",
    "AxisRanges",
    "AxisRenderer",
    "AxisReport",
    "AxisStyle",
    "BLACK",
    "BLUE",
    "Camera",
    "ChartCompositor",
    "ChartConfig",
    "ChartError",
    "ConfigError",
    "DataBounds",
    "DegenerateBoundsError",
    "DrawingBackend",
    "EncodingError",
    "FontService",
    "FontSpec",
    "LegendEntry",
    "LegendRenderer",
    "LegendStyle",
    "LineSeries",
    "ProjectionMatrix",
    "Projector",
    "Quad",
    "RenderResult",
    "RenderState",
    "SeriesDrawError",
    "SeriesLabelPosition",
    "SeriesMesh",
    "SoftwareBackend",
    "Style",
    "SurfaceInitError",
    "SurfaceSeries",
    "Swatch",
    "SwatchKind",
    "TensorBackend",
    "TextMeasureError",
    "Viewport",
    "WHITE",
    "blend",
    "build_line",
    "build_mesh",
    "demo_config",
    "encode_png",
    "load_chart_config",
    "mix",
    "render_chart",
    "sample_axis",
    "sort_quads",
    "write_png",
]
