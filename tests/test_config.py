from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from surfchart.config import chart_config_from_dict, demo_config, load_chart_config
from surfchart.errors import ConfigError, DegenerateBoundsError
from surfchart.legend import SeriesLabelPosition
from surfchart.series import LineSeries, SurfaceSeries
from surfchart.style import BLUE


CHART_TOML = """
[chart]
width = 320
height = 240
caption = "Saddle"
max_light_lines = 2

[axes.x]
min = -2.0
max = 2.0
step = 0.5

[axes.z]
min = -1.0
max = 1.0
step = 0.25

[camera]
yaw = 0.8
pitch = 0.3

[legend]
position = "upper_left"
border = "none"

[grid]
titles = ["x", "y", "z"]

[[series]]
kind = "surface"
function = "saddle"
color = "#0000ff"
alpha = 0.3
label = "Saddle"

[[series]]
kind = "line"
curve = "spiral"
samples = 50
width = 2
label = "Spiral"
"""


class ChartConfigTests(unittest.TestCase):
    def _write(self, root: Path, text: str) -> Path:
        path = root / "chart.toml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_full_chart_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = load_chart_config(self._write(Path(tmp), CHART_TOML))
        self.assertEqual((config.width, config.height), (320, 240))
        self.assertEqual(config.caption, "Saddle")
        self.assertEqual(config.max_light_lines, 2)
        self.assertEqual(config.resolved_axis_style().max_light_lines, 2)
        self.assertEqual(config.resolved_axis_style().titles, ("x", "y", "z"))
        self.assertAlmostEqual(config.camera.yaw, 0.8)
        self.assertEqual(config.legend_style.position, SeriesLabelPosition.UPPER_LEFT)
        self.assertIsNone(config.legend_style.border)
        self.assertIsNone(config.axis_ranges.y)

        surface, line = config.series
        self.assertIsInstance(surface, SurfaceSeries)
        self.assertEqual((surface.xs.size, surface.zs.size), (8, 8))
        self.assertEqual(surface.style.fill_color, BLUE)
        self.assertAlmostEqual(surface.style.alpha, 0.3)
        self.assertIsInstance(line, LineSeries)
        self.assertEqual(line.points.shape, (50, 3))
        self.assertEqual(line.style.stroke_width, 2)
        self.assertEqual(line.label, "Spiral")

    def test_empty_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config = load_chart_config(self._write(Path(tmp), ""))
        self.assertEqual((config.width, config.height), (800, 600))
        self.assertEqual(config.series, [])
        self.assertEqual(config.axis_ranges.x.sample_count(), 60)

    def test_missing_and_malformed_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_chart_config(Path(tmp) / "absent.toml")
            with self.assertRaises(ConfigError):
                load_chart_config(self._write(Path(tmp), "[chart\nwidth = 3"))

    def test_invalid_tables_and_series(self) -> None:
        bad_inputs = [
            {"chart": 5},
            {"series": [{"kind": "scatter"}]},
            {"series": [{"kind": "surface", "function": "unknown"}]},
            {"series": [{"kind": "line", "curve": "helix", "samples": 0}]},
            {"series": [{"kind": "surface"}]},
            {"chart": {"background": "#12"}},
            {"legend": {"position": "center"}},
            {"axes": {"x": {"min": 3.0, "max": -3.0}}},
        ]
        for raw in bad_inputs:
            with self.subTest(raw=raw):
                with self.assertRaises(ConfigError):
                    chart_config_from_dict(raw)

    def test_axis_titles_must_name_all_three_axes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write(Path(tmp), '[grid]\ntitles = ["X", "Y"]\n')
            with self.assertRaises(ConfigError):
                load_chart_config(path)
        with self.assertRaises(ConfigError):
            chart_config_from_dict({"grid": {"titles": ["X", "Y", 3]}})

    def test_zero_extent_axis_is_degenerate(self) -> None:
        with self.assertRaises(DegenerateBoundsError):
            chart_config_from_dict({"axes": {"y": {"min": 1.0, "max": 1.0}}})

    def test_demo_scene(self) -> None:
        config = demo_config()
        self.assertEqual((config.width, config.height), (800, 600))
        self.assertEqual(config.caption, "3D Plot Test")
        self.assertEqual([s.label for s in config.series], ["Surface", "Line"])
        surface = config.series[0]
        assert isinstance(surface, SurfaceSeries)
        self.assertEqual((surface.xs.size, surface.zs.size), (60, 60))
        self.assertEqual(config.series[1].points.shape, (200, 3))

    def test_negative_light_lines_rejected(self) -> None:
        with self.assertRaises(ConfigError):
            chart_config_from_dict({"chart": {"max_light_lines": -1}})


if __name__ == "__main__":
    unittest.main()
