from __future__ import annotations


class ChartError(RuntimeError):
    """Base class for failures raised by a render pass."""


class SurfaceInitError(ChartError):
    pass


class DegenerateBoundsError(ChartError):
    pass


class SeriesDrawError(ChartError):
    pass


class TextMeasureError(ChartError):
    pass


class EncodingError(ChartError):
    pass


class ConfigError(ChartError):
    pass
