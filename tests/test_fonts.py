from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest import mock

import numpy as np

from surfchart.errors import TextMeasureError
from surfchart.fonts import FontService, FontSpec


class FontServiceTests(unittest.TestCase):
    def test_font_spec_rejects_non_positive_size(self) -> None:
        with self.assertRaises(ValueError):
            FontSpec(size_px=0.0)
        self.assertEqual(FontSpec("serif", 10.0).resized(14.0), FontSpec("serif", 14.0))

    def test_measure_grows_with_text(self) -> None:
        fonts = FontService()
        w1, h1 = fonts.measure("H", FontSpec(size_px=16.0))
        w2, h2 = fonts.measure("Hello world", FontSpec(size_px=16.0))
        self.assertGreater(w1, 0)
        self.assertGreater(h1, 0)
        self.assertGreater(w2, w1)

    def test_empty_text_measures_zero_width(self) -> None:
        w, h = FontService().measure("", FontSpec(size_px=12.0))
        self.assertEqual(w, 0)
        self.assertGreater(h, 0)

    def test_measure_failure_raises_text_measure_error(self) -> None:
        broken = mock.Mock()
        broken.getbbox.side_effect = OSError("glyph table unreadable")
        fonts = FontService()
        with mock.patch.object(fonts, "load", return_value=broken):
            with self.assertRaises(TextMeasureError):
                fonts.measure("x", FontSpec())
            with self.assertRaises(TextMeasureError):
                fonts.render_mask("x", FontSpec())

    def test_render_mask_has_ink(self) -> None:
        mask = FontService().render_mask("Surface", FontSpec(size_px=18.0))
        self.assertEqual(mask.ndim, 2)
        self.assertEqual(mask.dtype, np.uint8)
        self.assertGreater(int(mask.max()), 0)

    def test_loaded_fonts_are_cached_per_size(self) -> None:
        fonts = FontService()
        a = fonts.load(FontSpec(size_px=12.0))
        self.assertIs(fonts.load(FontSpec(size_px=12.0)), a)
        self.assertIsNot(fonts.load(FontSpec(size_px=20.0)), a)

    def test_resolve_prefers_regular_face(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "DejaVuSans-Bold.ttf").write_bytes(b"")
            (root / "DejaVuSans.ttf").write_bytes(b"")
            fonts = FontService(font_dirs=(root,))
            self.assertEqual(fonts.resolve_path("sans"), root / "DejaVuSans.ttf")

    def test_resolve_without_candidates_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            fonts = FontService(font_dirs=(Path(tmp),))
            self.assertIsNone(fonts.resolve_path("sans"))
            w, h = fonts.measure("fallback", FontSpec(size_px=12.0))
            self.assertGreater(w, 0)


if __name__ == "__main__":
    unittest.main()
